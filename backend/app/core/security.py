from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
import bcrypt
import secrets

from app.core.config import settings
from app.core.exceptions import InvalidSessionError
from app.core.types import utcnow


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password (bcrypt.checkpw compares in constant time)"""
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def generate_session_id() -> str:
    """Generate an opaque, unguessable session id"""
    return secrets.token_urlsafe(32)


def sign_session_id(
    session_id: str,
    expires_at: Optional[datetime] = None,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Sign a session id for use as the cookie value"""
    expire = expires_at or (utcnow() + timedelta(days=settings.SESSION_TTL_DAYS))
    to_encode = {"sid": session_id, "type": "session", "exp": expire}
    return jwt.encode(
        to_encode,
        secret or settings.SESSION_SECRET,
        algorithm=algorithm or settings.SESSION_ALGORITHM,
    )


def unsign_session_id(
    cookie_value: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Verify a signed cookie value and return the session id it carries"""
    try:
        payload = jwt.decode(
            cookie_value,
            secret or settings.SESSION_SECRET,
            algorithms=[algorithm or settings.SESSION_ALGORITHM],
        )
    except JWTError:
        raise InvalidSessionError()

    if payload.get("type") != "session":
        raise InvalidSessionError()

    session_id = payload.get("sid")
    if not session_id or not isinstance(session_id, str):
        raise InvalidSessionError()

    return session_id
