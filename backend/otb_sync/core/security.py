from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session

from otb_sync.core.config import settings
from otb_sync.models.sink import DashboardUser

# bcrypt verifies hashes written by earlier dashboard versions; new hashes use pbkdf2.
pwd_context = CryptContext(schemes=['pbkdf2_sha256', 'bcrypt'], deprecated='auto')


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def _identity(row: DashboardUser) -> dict:
    return {'id': row.id, 'username': row.username, 'display_name': row.display_name or row.username}


def find_active_user(db: Session, username: str) -> DashboardUser | None:
    name = str(username or '').strip()
    if not name:
        return None
    return (
        db.query(DashboardUser)
        .filter(func.lower(DashboardUser.username) == name.lower(), DashboardUser.is_active == True)  # noqa: E712
        .first()
    )


def authenticate_user_with_db(db: Session | None, username: str, password: str):
    if db is None or not password:
        return None
    row = find_active_user(db, username)
    if row is None or not verify_password(password, row.password_hash):
        return None
    return _identity(row)


def create_session_token(user: dict, expires_minutes: int | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.session_max_age_minutes)
    to_encode = {
        'sub': user['username'],
        'uid': user['id'],
        'name': user.get('display_name') or user['username'],
        'exp': expire,
    }
    return jwt.encode(to_encode, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={'error_code': 'UNAUTHORIZED', 'message': 'Invalid session', 'details': None},
        )


def session_user(payload: dict) -> dict:
    return {
        'id': payload.get('uid'),
        'username': payload.get('sub'),
        'display_name': payload.get('name') or payload.get('sub'),
    }
