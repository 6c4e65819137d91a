import sys
import unittest
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))

from otb_sync.db.sink import SinkResult  # noqa: E402
from otb_sync.sync.jobs import JobOutput, SyncJob  # noqa: E402
from otb_sync.sync.orchestrator import SyncJobError, SyncOrchestrator, UnknownJobError  # noqa: E402
from otb_sync.sync.replacer import ReplaceResult  # noqa: E402
from otb_sync.sync.time_gate import TimeGate  # noqa: E402

OPEN = datetime(2026, 3, 10, 11, 0)
CLOSED = datetime(2026, 3, 10, 20, 0)


class FakeConnection:
    def __init__(self, rows, error=None):
        self.rows = rows
        self.error = error
        self.queries = []

    def fetch_all(self, sql, params=None):
        self.queries.append((sql, params))
        if self.error is not None:
            raise self.error
        return [dict(r) for r in self.rows]


class FakeSource:
    configured = True

    def __init__(self, rows=None, error=None):
        self.conn = FakeConnection(rows or [{'N': 1}], error)
        self.opened = 0
        self.released = 0

    @contextmanager
    def connect(self):
        self.opened += 1
        try:
            yield self.conn
        finally:
            self.released += 1


def _replacer(configured=True, result=ReplaceResult.REPLACED):
    replacer = MagicMock()
    replacer.sink.configured = configured
    replacer.replace.return_value = result
    return replacer


def _job(index: int, fail: bool = False, scheduled: bool = True) -> SyncJob:
    def _transform(rows):
        if fail:
            raise ValueError(f'transform {index} exploded')
        return JobOutput(payload=rows, writes={f'table_{index}': rows})

    return SyncJob(f'job_{index}', 'today_metrics.sql', _transform, table=f'table_{index}', scheduled=scheduled)


class RunAllTests(unittest.TestCase):
    def setUp(self):
        self.source = FakeSource()
        self.replacer = _replacer()

    def _orchestrator(self, jobs):
        return SyncOrchestrator(self.source, self.replacer, TimeGate(), jobs)

    def test_failing_job_does_not_stop_the_batch(self):
        jobs = [_job(i, fail=(i == 3)) for i in range(1, 13)]
        summary = self._orchestrator(jobs).run_all(OPEN)

        written = [c.args[0] for c in self.replacer.replace.call_args_list]
        self.assertEqual(written, [f'table_{i}' for i in range(1, 13) if i != 3])
        self.assertEqual(summary.failed, ['job_3'])
        self.assertEqual([o.name for o in summary.outcomes], [f'job_{i}' for i in range(1, 13)])
        self.assertIn('exploded', summary.outcomes[2].error)
        self.assertEqual(self.source.opened, 12)
        self.assertEqual(self.source.released, 12)

    def test_source_error_is_contained_and_connection_released(self):
        self.source = FakeSource(error=RuntimeError('ORA-03113: end-of-file on communication channel'))
        summary = self._orchestrator([_job(1), _job(2)]).run_all(OPEN)
        self.assertEqual(summary.failed, ['job_1', 'job_2'])
        self.assertEqual(self.source.released, 2)
        self.replacer.replace.assert_not_called()

    def test_closed_gate_skips_everything(self):
        summary = self._orchestrator([_job(1)]).run_all(CLOSED)
        self.assertTrue(summary.skipped)
        self.assertIn('outside sync hours', summary.skip_reason)
        self.assertEqual(self.source.opened, 0)

    def test_force_ignores_the_gate(self):
        summary = self._orchestrator([_job(1)]).run_all(CLOSED, force=True)
        self.assertFalse(summary.skipped)
        self.assertEqual(len(summary.outcomes), 1)

    def test_unconfigured_sink_skips_even_when_forced(self):
        self.replacer = _replacer(configured=False)
        summary = self._orchestrator([_job(1)]).run_all(OPEN, force=True)
        self.assertTrue(summary.skipped)
        self.assertEqual(summary.skip_reason, 'sink not configured')
        self.assertEqual(self.source.opened, 0)

    def test_unscheduled_jobs_are_not_run(self):
        summary = self._orchestrator([_job(1), _job(2, scheduled=False)]).run_all(OPEN)
        self.assertEqual([o.name for o in summary.outcomes], ['job_1'])

    def test_failed_sink_write_marks_job_failed(self):
        self.replacer = _replacer(result=ReplaceResult.FAILED)
        summary = self._orchestrator([_job(1)]).run_all(OPEN)
        outcome = summary.outcomes[0]
        self.assertFalse(outcome.ok)
        self.assertIn('table_1', outcome.error)
        self.assertEqual(outcome.writes, {'table_1': 'failed'})

    def test_outcome_counts_rows(self):
        self.source = FakeSource(rows=[{'N': 1}, {'N': 2}, {'N': 3}])
        summary = self._orchestrator([_job(1)]).run_all(OPEN)
        self.assertEqual(summary.outcomes[0].rows, 3)
        self.assertTrue(summary.outcomes[0].ok)

    def test_outcomes_are_logged_per_job(self):
        with patch('otb_sync.sync.orchestrator.log_job_outcome') as logged:
            self._orchestrator([_job(1), _job(2, fail=True)]).run_all(OPEN)
        self.assertEqual([c.args[0].ok for c in logged.call_args_list], [True, False])

    def test_identical_runs_write_identical_snapshots(self):
        from otb_sync.db.session import create_sink_engine
        from otb_sync.db.sink import SinkStore
        from otb_sync.sync.replacer import SinkReplacer

        sink = SinkStore(create_sink_engine('sqlite://'))
        sink.create_schema()
        rows = [{'SEGMENT': 'B2B', 'RN_COUNT': 3, 'REVENUE': 10}]

        def _transform(raw):
            records = [{'segment': r['segment'], 'rn_count': r['rn_count'], 'revenue': r['revenue']} for r in raw]
            return JobOutput(payload=records, writes={'today_agent_rn': records})

        job = SyncJob('today_agent_rn', 'today_agent_rn.sql', _transform, table='today_agent_rn')
        orchestrator = SyncOrchestrator(FakeSource(rows=[{k.lower(): v for k, v in rows[0].items()}]), SinkReplacer(sink), TimeGate(), [job])
        orchestrator.run_all(OPEN)
        first = sink.select('today_agent_rn', ['segment', 'rn_count', 'revenue']).data
        orchestrator.run_all(OPEN)
        second = sink.select('today_agent_rn', ['segment', 'rn_count', 'revenue']).data
        self.assertEqual(first, second)
        self.assertEqual(len(second), 1)


class FetchTests(unittest.TestCase):
    def test_fetch_returns_payload_and_writes(self):
        source = FakeSource(rows=[{'N': 7}])
        replacer = _replacer()
        payload = SyncOrchestrator(source, replacer, TimeGate(), [_job(1)]).fetch('job_1')
        self.assertEqual(payload, [{'N': 7}])
        replacer.replace.assert_called_once_with('table_1', [{'N': 7}], quiet=False)

    def test_fetch_ignores_the_gate(self):
        source = FakeSource()
        gate = MagicMock()
        gate.is_open.return_value = False
        SyncOrchestrator(source, _replacer(), gate, [_job(1)]).fetch('job_1')
        self.assertEqual(source.opened, 1)

    def test_fetch_source_error_raises(self):
        source = FakeSource(error=RuntimeError('ORA-12541: no listener'))
        with self.assertRaises(SyncJobError) as ctx:
            SyncOrchestrator(source, _replacer(), TimeGate(), [_job(1)]).fetch('job_1')
        self.assertEqual(ctx.exception.job_name, 'job_1')
        self.assertIn('ORA-12541', ctx.exception.message)
        self.assertEqual(source.released, 1)

    def test_fetch_sink_failure_is_not_raised(self):
        replacer = _replacer(result=ReplaceResult.FAILED)
        payload = SyncOrchestrator(FakeSource(), replacer, TimeGate(), [_job(1)]).fetch('job_1')
        self.assertEqual(payload, [{'N': 1}])

    def test_fetch_sink_exception_is_logged_not_raised(self):
        replacer = _replacer()
        replacer.replace.side_effect = TypeError('cannot convert row')
        with self.assertLogs('otb_sync.sync.orchestrator', level='ERROR') as logs:
            payload = SyncOrchestrator(FakeSource(), replacer, TimeGate(), [_job(1)]).fetch('job_1')
        self.assertEqual(payload, [{'N': 1}])
        self.assertTrue(any('on-demand sink write failed (job_1)' in line for line in logs.output))

    def test_unknown_job(self):
        with self.assertRaises(UnknownJobError):
            SyncOrchestrator(FakeSource(), _replacer(), TimeGate(), [_job(1)]).fetch('nope')

    def test_jobs_resolve_only_from_the_configured_catalogue(self):
        orchestrator = SyncOrchestrator(FakeSource(), _replacer(), TimeGate(), [_job(1)])
        self.assertEqual(orchestrator.get_job('job_1').name, 'job_1')
        with self.assertRaises(UnknownJobError):
            orchestrator.get_job('monthly_overview')
        self.assertEqual(SyncOrchestrator(FakeSource(), _replacer()).get_job('monthly_overview').name, 'monthly_overview')


class DefaultCatalogueRunTests(unittest.TestCase):
    def test_full_catalogue_runs_in_declared_order(self):
        from otb_sync.sync.jobs import scheduled_jobs

        source = FakeSource(rows=[])
        replacer = _replacer()
        summary = SyncOrchestrator(source, replacer, TimeGate()).run_all(OPEN)
        self.assertEqual([o.name for o in summary.outcomes], [j.name for j in scheduled_jobs()])
        self.assertEqual(len(summary.outcomes), 13)
        self.assertEqual(summary.failed, [])


if __name__ == '__main__':
    unittest.main()
