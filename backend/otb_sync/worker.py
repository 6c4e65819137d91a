"""Standalone sync process: the periodic scheduler without the HTTP server."""
import logging
import signal
import threading

from otb_sync.core.prod_check import validate_production_config
from otb_sync.sync.runtime import get_runtime


logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s %(message)s')
    validate_production_config()
    runtime = get_runtime()
    stop = threading.Event()

    def _shutdown_handler(signum, _frame):  # type: ignore[no-untyped-def]
        logger.info("sync worker received signal %s, stopping...", signum)
        stop.set()

    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)

    if not runtime.sink.configured:
        logger.error("sync worker not started: SINK_DATABASE_URL is empty")
        return
    created = runtime.sink.create_schema()
    if not created.ok:
        logger.warning("sink schema check failed: %s", created.error)

    runtime.scheduler.start()
    logger.info("sync worker started")
    stop.wait()
    runtime.shutdown()
    logger.info("sync worker stopped")


if __name__ == "__main__":
    main()
