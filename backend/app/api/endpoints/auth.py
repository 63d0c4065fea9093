from fastapi import APIRouter, Depends, Request, Response, status

from app.core.config import Settings
from app.core.exceptions import AuthenticationError, StudentRecordsError
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import login_rate_limit
from app.core.security import sign_session_id
from app.models.user import User
from app.modules.auth.dependencies import (
    get_credential_store,
    get_current_user,
    get_session_store,
    get_settings,
    read_session_cookie,
)
from app.schemas.auth import LoginResponse, MessageResponse, UserLogin, UserResponse
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore


router = APIRouter()


def set_session_cookie(response: Response, settings: Settings, session_id: str, expires_at) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_id(
            session_id,
            expires_at=expires_at,
            secret=settings.SESSION_SECRET,
            algorithm=settings.SESSION_ALGORITHM,
        ),
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


async def discard_presented_session(request: Request, settings: Settings, sessions: SessionStore) -> bool:
    """Destroy whatever session the request's cookie points at, if any"""
    try:
        session_id = read_session_cookie(request, settings)
    except AuthenticationError:
        return False
    if session_id is None:
        return False
    return await sessions.destroy(session_id)


@router.post("/login", response_model=LoginResponse)
@login_rate_limit()
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    settings: Settings = Depends(get_settings),
    users: CredentialStore = Depends(get_credential_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """Check username/password and open a session (rate limited)"""
    client_ip = request.client.host if request.client else "unknown"

    user = await users.verify_credentials(credentials.username, credentials.password)
    if user is None:
        logger.log_auth_event(
            event="login",
            success=False,
            username=credentials.username,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid credentials")

    # A login never inherits an earlier session id
    await discard_presented_session(request, settings, sessions)

    record = await sessions.create(user.id)
    set_session_cookie(response, settings, record.session_id, record.expires_at)

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login",
        success=True,
        username=user.username,
        client_ip=client_ip
    )

    return LoginResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    sessions: SessionStore = Depends(get_session_store),
):
    """Destroy the server-side session and clear the cookie"""
    try:
        destroyed = await discard_presented_session(request, settings, sessions)
    except StudentRecordsError as e:
        logger.log_error_with_context(e, context="logout")
        raise

    clear_session_cookie(response, settings)
    logger.log_auth_event(event="logout", success=True, session_destroyed=destroyed)
    return MessageResponse(message="Logout successful")


@router.get("/auth/user", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return current_user
