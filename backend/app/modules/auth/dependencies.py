from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request

from app.core.config import Settings
from app.core.exceptions import InvalidSessionError, UserNotFoundError
from app.core.logging_config import set_user_id
from app.core.security import unsign_session_id
from app.models.user import User
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore
from app.services.student_store import StudentStore


@dataclass(frozen=True)
class SessionContext:
    """Authenticated caller, produced once per request by require_session"""
    session_id: str
    user_id: str
    expires_at: datetime


# ==================== Store Dependencies ====================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_student_store(request: Request) -> StudentStore:
    return request.app.state.student_store


# ==================== Session Dependencies ====================

def read_session_cookie(request: Request, settings: Settings) -> Optional[str]:
    """Return the verified session id from the cookie, or None if absent"""
    cookie_value = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not cookie_value:
        return None
    return unsign_session_id(
        cookie_value,
        secret=settings.SESSION_SECRET,
        algorithm=settings.SESSION_ALGORITHM,
    )


async def require_session(
    request: Request,
    settings: Settings = Depends(get_settings),
    sessions: SessionStore = Depends(get_session_store),
) -> SessionContext:
    """Get the authenticated session or fail with 401"""
    session_id = read_session_cookie(request, settings)
    if session_id is None:
        raise InvalidSessionError()

    record = await sessions.get(session_id)
    if record is None:
        raise InvalidSessionError()

    # Set user context for downstream logging
    set_user_id(record.user_id)

    return SessionContext(
        session_id=record.session_id,
        user_id=record.user_id,
        expires_at=record.expires_at,
    )


async def get_current_user(
    context: SessionContext = Depends(require_session),
    credentials: CredentialStore = Depends(get_credential_store),
) -> User:
    """Get the user the session belongs to"""
    user = await credentials.get_user(context.user_id)
    if user is None:
        raise UserNotFoundError(context.user_id)
    return user
