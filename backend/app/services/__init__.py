from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore
from app.services.student_store import StudentStore

__all__ = [
    "CredentialStore",
    "SessionStore",
    "StudentStore",
]
