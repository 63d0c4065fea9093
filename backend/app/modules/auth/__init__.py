# Authentication module

from app.modules.auth.dependencies import (
    SessionContext,
    get_settings,
    get_credential_store,
    get_session_store,
    get_student_store,
    read_session_cookie,
    require_session,
    get_current_user,
)

__all__ = [
    "SessionContext",
    "get_settings",
    "get_credential_store",
    "get_session_store",
    "get_student_store",
    "read_session_cookie",
    "require_session",
    "get_current_user",
]
