# Pydantic schemas
from app.schemas.auth import UserLogin, UserResponse, LoginResponse, MessageResponse
from app.schemas.student import (
    StudentCreate,
    StudentResponse,
    StudentStats,
    StudentFilters,
    PHONE_PATTERN,
)

__all__ = [
    "UserLogin",
    "UserResponse",
    "LoginResponse",
    "MessageResponse",
    "StudentCreate",
    "StudentResponse",
    "StudentStats",
    "StudentFilters",
    "PHONE_PATTERN",
]
