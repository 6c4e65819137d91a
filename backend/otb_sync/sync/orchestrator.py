from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from otb_sync.core.logging_config import log_job_outcome, structured_log
from otb_sync.db.source import SourceStore
from otb_sync.sync.jobs import SYNC_JOBS, JobOutput, SyncJob, scheduled_jobs
from otb_sync.sync.replacer import ReplaceResult, SinkReplacer
from otb_sync.sync.time_gate import TimeGate

logger = logging.getLogger(__name__)


class UnknownJobError(KeyError):
    pass


class SyncJobError(RuntimeError):
    def __init__(self, job_name: str, message: str) -> None:
        super().__init__(f'{job_name}: {message}')
        self.job_name = job_name
        self.message = message


@dataclass
class JobOutcome:
    name: str
    ok: bool
    rows: int = 0
    error: str | None = None
    duration_ms: float = 0.0
    writes: dict[str, str] = field(default_factory=dict)


@dataclass
class RunSummary:
    started_at: str
    skipped: bool = False
    skip_reason: str | None = None
    outcomes: list[JobOutcome] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.ok]


class SyncOrchestrator:
    def __init__(
        self,
        source: SourceStore,
        replacer: SinkReplacer,
        time_gate: TimeGate | None = None,
        jobs: Iterable[SyncJob] = SYNC_JOBS,
    ) -> None:
        self.source = source
        self.replacer = replacer
        self.time_gate = time_gate or TimeGate()
        self.jobs = tuple(jobs)
        self._by_name = {job.name: job for job in self.jobs}

    def get_job(self, name: str) -> SyncJob:
        job = self._by_name.get(name)
        if job is None:
            raise UnknownJobError(name)
        return job

    def execute(self, job: SyncJob) -> JobOutput:
        """Extract and transform one job; the source connection is released on every exit path."""
        with self.source.connect() as conn:
            extracted: Any = job.extract(conn, job.sql) if job.extract else conn.fetch_all(job.sql)
        return job.transform(extracted)

    def write(self, output: JobOutput, *, quiet: bool = True) -> dict[str, ReplaceResult]:
        return {table: self.replacer.replace(table, records, quiet=quiet) for table, records in output.writes.items()}

    def run_job(self, job: SyncJob, trigger: str = 'scheduled') -> tuple[JobOutput | None, JobOutcome]:
        start = time.time()
        try:
            output = self.execute(job)
            results = self.write(output)
        except Exception as exc:
            logger.exception('sync job failed (%s)', job.name)
            outcome = JobOutcome(
                name=job.name,
                ok=False,
                error=str(exc) or exc.__class__.__name__,
                duration_ms=round((time.time() - start) * 1000, 2),
            )
            log_job_outcome(outcome, trigger)
            return None, outcome

        failed = [table for table, result in results.items() if result is ReplaceResult.FAILED]
        outcome = JobOutcome(
            name=job.name,
            ok=not failed,
            rows=output.row_count,
            error=f'sink write failed: {", ".join(failed)}' if failed else None,
            duration_ms=round((time.time() - start) * 1000, 2),
            writes={table: result.value for table, result in results.items()},
        )
        log_job_outcome(outcome, trigger)
        return output, outcome

    def run_all(self, now: datetime | None = None, *, force: bool = False, trigger: str = 'scheduled') -> RunSummary:
        now = now or datetime.now()
        summary = RunSummary(started_at=now.isoformat())
        if not self.replacer.sink.configured:
            summary.skipped, summary.skip_reason = True, 'sink not configured'
        elif not force and not self.time_gate.is_open(now):
            summary.skipped, summary.skip_reason = True, f'outside sync hours {self.time_gate.describe()}'
        if summary.skipped:
            logger.info('sync run skipped: %s', summary.skip_reason)
            structured_log('info', 'sync_run_skipped', reason=summary.skip_reason, trigger=trigger)
            return summary

        start = time.time()
        logger.info('sync run started (%s)', trigger)
        for job in scheduled_jobs(self.jobs):
            _, outcome = self.run_job(job, trigger=trigger)
            summary.outcomes.append(outcome)
        summary.duration_ms = round((time.time() - start) * 1000, 2)
        structured_log(
            'info' if not summary.failed else 'warning',
            'sync_run_completed',
            duration_ms=summary.duration_ms,
            trigger=trigger,
            jobs=len(summary.outcomes),
            failed=summary.failed or None,
        )
        return summary

    def fetch(self, name: str) -> Any:
        """
        On-demand read: compute the job now (ignoring the time gate), return its payload
        and write it to the sink on the way out. Sink failures are only logged.
        """
        job = self.get_job(name)
        try:
            output = self.execute(job)
        except Exception as exc:
            logger.exception('on-demand fetch failed (%s)', job.name)
            raise SyncJobError(job.name, str(exc) or exc.__class__.__name__) from exc
        try:
            self.write(output, quiet=False)
        except Exception:
            logger.exception('on-demand sink write failed (%s)', job.name)
        return output.payload
