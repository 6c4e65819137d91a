from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from otb_sync.core.config import settings
from otb_sync.core.deps import get_current_user, get_db, login_rate_limiter
from otb_sync.core.logging_config import structured_log
from otb_sync.core.security import authenticate_user_with_db, create_session_token
from otb_sync.schemas.auth import LoginIn, LoginOut, MeOut, UserOut
from otb_sync.schemas.common import MessageOut

router = APIRouter()


@router.post('/login', response_model=LoginOut, dependencies=[Depends(login_rate_limiter)])
def login(payload: LoginIn, response: Response, db: Session | None = Depends(get_db)):
    if db is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={'error_code': 'SINK_NOT_CONFIGURED', 'message': 'User store not configured', 'details': None},
        )
    user = authenticate_user_with_db(db, payload.username, payload.password)
    if not user:
        structured_log('warning', 'login_failed', username=payload.username.strip())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={'error_code': 'UNAUTHORIZED', 'message': 'Invalid username or password', 'details': None},
        )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user),
        max_age=settings.session_max_age_minutes * 60,
        httponly=True,
        samesite='lax',
        secure=settings.app_env == 'prod',
    )
    return LoginOut(user=UserOut(**user))


@router.get('/me', response_model=MeOut)
def me(user: dict = Depends(get_current_user)):
    return MeOut(user=UserOut(**user))


@router.api_route('/logout', methods=['GET', 'POST'], response_model=MessageOut)
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name)
    return MessageOut(message='logged out')
