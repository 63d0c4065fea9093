# Re-export all models for convenient imports
from app.models.user import User
from app.models.student import Student, StudentRank
from app.models.session import Session

__all__ = [
    "User",
    "Student",
    "StudentRank",
    "Session",
]
