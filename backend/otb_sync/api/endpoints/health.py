from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from otb_sync.core.deps import get_current_user, runtime_dep
from otb_sync.core.request_metrics import summary as request_metrics_summary
from otb_sync.sync.runtime import SyncRuntime

router = APIRouter()

SERVICE = 'otb-sync'


@router.get('/health')
def health(runtime: SyncRuntime = Depends(runtime_dep)):
    """
    Health check. source_ok / sink_ok: True=reachable, False=failing, None=not configured.
    Returns 503 when a configured store is unreachable.
    """
    source_ok = runtime.source.ping()
    sink_ok = runtime.sink.ping()
    body = {
        'ok': source_ok is not False and sink_ok is not False,
        'service': SERVICE,
        'source_ok': source_ok,
        'sink_ok': sink_ok,
        'sync_hours': runtime.orchestrator.time_gate.describe(),
        'sync_window_open': runtime.orchestrator.time_gate.is_open(),
        'scheduler_running': runtime.scheduler.running,
    }
    if not body['ok']:
        return JSONResponse(status_code=503, content={**body, 'message': 'Dependency unreachable'})
    return body


@router.get('/health/perf')
def health_perf(_user=Depends(get_current_user)):
    return {
        'service': SERVICE,
        'request_latency': request_metrics_summary(),
    }
