from fastapi import APIRouter, Depends, HTTPException, status

from otb_sync.core.deps import runtime_dep
from otb_sync.sync.jobs import JOBS_BY_PATH
from otb_sync.sync.orchestrator import SyncJobError, UnknownJobError
from otb_sync.sync.runtime import SyncRuntime

router = APIRouter()


def fetch_payload(runtime: SyncRuntime, name: str):
    try:
        job = runtime.orchestrator.get_job(name)
    except UnknownJobError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={'error_code': 'UNKNOWN_JOB', 'message': f'Unknown job: {name}', 'details': None},
        )
    if not runtime.source.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={'error_code': 'SOURCE_NOT_CONFIGURED', 'message': 'Source database not configured', 'details': None},
        )
    try:
        return runtime.orchestrator.fetch(job.name)
    except SyncJobError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={'error_code': 'SOURCE_ERROR', 'message': exc.message, 'details': {'job': exc.job_name}},
        )


@router.get('/jobs/{name}')
def get_job_payload(name: str, runtime: SyncRuntime = Depends(runtime_dep)):
    """Compute one job now, write it to the sink and return its payload."""
    return fetch_payload(runtime, name)


def _path_endpoint(name: str):
    def _endpoint(runtime: SyncRuntime = Depends(runtime_dep)):
        return fetch_payload(runtime, name)

    _endpoint.__name__ = f'get_{name}'
    return _endpoint


for _job in JOBS_BY_PATH.values():
    router.add_api_route(f'/{_job.path}', _path_endpoint(_job.name), methods=['GET'], summary=f'Fetch {_job.name}')
