from typing import Iterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from otb_sync.core.config import settings
from otb_sync.core.rate_limit import build_rate_limit_dependency
from otb_sync.core.security import decode_session_token, session_user
from otb_sync.sync.runtime import SyncRuntime, get_runtime

login_rate_limiter = build_rate_limit_dependency(
    'auth_login',
    settings.login_rate_limit,
    settings.login_rate_window_seconds,
)


def runtime_dep() -> SyncRuntime:
    return get_runtime()


def get_db(runtime: SyncRuntime = Depends(runtime_dep)) -> Iterator[Session | None]:
    """Session on the sink database, or None when the sink is not configured."""
    if runtime.sink.engine is None:
        yield None
        return
    db = Session(bind=runtime.sink.engine)
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request) -> dict:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={'error_code': 'UNAUTHORIZED', 'message': 'Not logged in', 'details': None},
        )
    return session_user(decode_session_token(token))
