from fastapi import APIRouter, Depends, HTTPException, status

from otb_sync.core.deps import get_current_user, runtime_dep
from otb_sync.schemas.sync import JobOutcomeOut, RunSummaryOut, SinkStatusOut
from otb_sync.sync.orchestrator import UnknownJobError
from otb_sync.sync.runtime import SyncRuntime

router = APIRouter()

SINK_PROBE_TABLE = 'users'


@router.post('/sync/run', response_model=RunSummaryOut)
def run_all(user: dict = Depends(get_current_user), runtime: SyncRuntime = Depends(runtime_dep)):
    """Manual full run; ignores the operating-hours window."""
    summary = runtime.orchestrator.run_all(force=True, trigger=f"manual:{user['username']}")
    return RunSummaryOut.model_validate(summary)


def sync_one(runtime: SyncRuntime, name: str, username: str) -> JobOutcomeOut:
    try:
        job = runtime.orchestrator.get_job(name)
    except UnknownJobError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={'error_code': 'UNKNOWN_JOB', 'message': f'Unknown job: {name}', 'details': None},
        )
    if not runtime.sink.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={'error_code': 'SINK_NOT_CONFIGURED', 'message': 'Sink database not configured', 'details': None},
        )
    _, outcome = runtime.orchestrator.run_job(job, trigger=f'manual:{username}')
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={'error_code': 'SYNC_FAILED', 'message': outcome.error or 'sync failed', 'details': {'job': job.name}},
        )
    return JobOutcomeOut.model_validate(outcome)


@router.api_route('/sync-bob-revenue', methods=['GET', 'POST'], response_model=JobOutcomeOut)
def sync_bob_revenue(user: dict = Depends(get_current_user), runtime: SyncRuntime = Depends(runtime_dep)):
    return sync_one(runtime, 'bob_revenue_analysis', user['username'])


@router.post('/sync/{name}', response_model=JobOutcomeOut)
def sync_job(name: str, user: dict = Depends(get_current_user), runtime: SyncRuntime = Depends(runtime_dep)):
    return sync_one(runtime, name, user['username'])


@router.get('/sink-status', response_model=SinkStatusOut)
@router.get('/supabase-status', response_model=SinkStatusOut, include_in_schema=False)
def sink_status(runtime: SyncRuntime = Depends(runtime_dep)):
    result = runtime.sink.select(SINK_PROBE_TABLE, ['id'], limit=1)
    return SinkStatusOut(
        configured=runtime.sink.configured,
        ok=result.ok,
        table=SINK_PROBE_TABLE,
        error=result.error,
        sample=result.data or [],
    )
