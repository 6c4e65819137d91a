"""Process-wide wiring: one source store, one sink store and one scheduler per process."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from otb_sync.core.config import Settings, settings
from otb_sync.db.session import create_sink_engine, create_source_engine
from otb_sync.db.sink import SinkStore
from otb_sync.db.source import SourceStore
from otb_sync.sync.orchestrator import SyncOrchestrator
from otb_sync.sync.replacer import SinkReplacer
from otb_sync.sync.scheduler import SyncScheduler
from otb_sync.sync.time_gate import TimeGate

logger = logging.getLogger(__name__)


@dataclass
class SyncRuntime:
    source: SourceStore
    sink: SinkStore
    orchestrator: SyncOrchestrator
    scheduler: SyncScheduler

    def shutdown(self) -> None:
        self.scheduler.stop(timeout=30.0)
        for engine in (self.source.engine, self.sink.engine):
            if engine is not None:
                engine.dispose()


def build_runtime(cfg: Settings = settings) -> SyncRuntime:
    if cfg.source_configured:
        source = SourceStore(create_source_engine(cfg))
    else:
        logger.warning('source not configured: set ORACLE_USER and ORACLE_CONNECT_STRING')
        source = SourceStore(None)

    if cfg.sink_configured:
        sink = SinkStore(create_sink_engine(cfg.sink_database_url, cfg.sink_pool_size))
    else:
        logger.warning('sink not configured: set SINK_DATABASE_URL; sync runs will be skipped')
        sink = SinkStore(None)

    orchestrator = SyncOrchestrator(
        source,
        SinkReplacer(sink),
        TimeGate(cfg.sync_start_hour, cfg.sync_end_hour),
    )
    scheduler = SyncScheduler(orchestrator, cfg.sync_interval_minutes * 60)
    return SyncRuntime(source=source, sink=sink, orchestrator=orchestrator, scheduler=scheduler)


@lru_cache(maxsize=1)
def get_runtime() -> SyncRuntime:
    return build_runtime(settings)
