from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from otb_sync.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


class SyncScheduler:
    """
    Fixed-cadence trigger for ``SyncOrchestrator.run_all``.

    Fires once on start, then every ``interval_seconds`` for the life of the process. Each
    tick runs on its own worker thread, so a slow run never shifts the cadence; runs may
    overlap and rely on the sink's per-table writer locks. ``stop()`` waits for runs still in
    flight, up to its timeout.
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        interval_seconds: float,
        *,
        run_immediately: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.orchestrator = orchestrator
        self.interval_seconds = max(1.0, float(interval_seconds))
        self.run_immediately = run_immediately
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._workers: set[threading.Thread] = set()
        self._workers_guard = threading.Lock()
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name='sync-scheduler', daemon=True)
        self._thread.start()
        logger.info('periodic sync active: every %.0f s (%s)', self.interval_seconds, self.orchestrator.time_gate.describe())

    def stop(self, timeout: float | None = 5.0) -> bool:
        """Stop ticking and join the loop and any in-flight runs; False if a run outlived ``timeout``."""
        self._stop.set()
        deadline = None if timeout is None else self._clock() + timeout

        def remaining() -> float | None:
            return None if deadline is None else max(0.0, deadline - self._clock())

        if self._thread is not None:
            self._thread.join(remaining())
        self._thread = None
        with self._workers_guard:
            workers = list(self._workers)
        for worker in workers:
            worker.join(remaining())
        pending = [w.name for w in workers if w.is_alive()]
        if pending:
            logger.warning('sync runs still in flight after stop: %s', ', '.join(pending))
        return not pending

    def _dispatch(self) -> threading.Thread:
        self.ticks += 1
        worker = threading.Thread(target=self._run_once, name=f'sync-run-{self.ticks}', daemon=True)
        with self._workers_guard:
            self._workers.add(worker)
        worker.start()
        return worker

    def _run_once(self) -> None:
        try:
            self.orchestrator.run_all()
        except Exception:
            logger.exception('scheduled sync run crashed')
        finally:
            with self._workers_guard:
                self._workers.discard(threading.current_thread())

    def _loop(self) -> None:
        next_at = self._clock()
        if self.run_immediately:
            self._dispatch()
        next_at += self.interval_seconds
        while not self._stop.wait(max(0.0, next_at - self._clock())):
            self._dispatch()
            next_at += self.interval_seconds
