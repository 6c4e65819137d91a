from fastapi import APIRouter

from otb_sync.api.endpoints import auth, health, jobs, sync

router = APIRouter(prefix='/api')
router.include_router(health.router, tags=['health'])
router.include_router(auth.router, tags=['auth'])
router.include_router(sync.router, tags=['sync'])
router.include_router(jobs.router, tags=['jobs'])
