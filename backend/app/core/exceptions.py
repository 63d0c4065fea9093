"""
Custom Exceptions for Student Records
=====================================

Every error raised by the stores and the session layer derives from
StudentRecordsError. The API layer maps each family to one HTTP status:

    ValidationError        -> 400
    AuthenticationError    -> 401
    ResourceNotFoundError  -> 404
    StorageError           -> 500 (message never sent to the client)

Usage:
    from app.core.exceptions import StudentNotFoundError

    if student is None:
        raise StudentNotFoundError(student_id)
"""

from typing import Optional, Any, Dict, List


class StudentRecordsError(Exception):
    """Base exception for all Student Records errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400)
# ============================================

class ValidationError(StudentRecordsError):
    """Input validation failed.

    ``errors`` is a list of ``{"field", "message", "type"}`` dicts, one per
    offending field.
    """

    status_code = 400

    def __init__(self, message: str = "Validation error", errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": self.errors})

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Build from a pydantic ValidationError (or FastAPI RequestValidationError)"""
        return cls(errors=format_field_errors(exc.errors()))


def format_field_errors(raw_errors: Any) -> List[Dict[str, Any]]:
    """Flatten pydantic error dicts into field/message/type entries"""
    errors = []
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        })
    return errors


# ============================================
# Authentication Errors (401)
# ============================================

class AuthenticationError(StudentRecordsError):
    """Caller has no valid session"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidSessionError(AuthenticationError):
    """Session cookie is missing, tampered with, or unknown"""

    def __init__(self):
        super().__init__("Unauthorized")
        self.code = "INVALID_SESSION"


# ============================================
# Resource Errors (404)
# ============================================

class ResourceNotFoundError(StudentRecordsError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class StudentNotFoundError(ResourceNotFoundError):
    """Student not found"""

    def __init__(self, student_id: str):
        super().__init__("Student", student_id)


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


# ============================================
# Storage Errors (500)
# ============================================

class StorageError(StudentRecordsError):
    """Underlying database operation failed"""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if operation:
            self.details["operation"] = operation


def error_response(error: StudentRecordsError) -> Dict[str, Any]:
    """Convert exception to the API error body"""
    body: Dict[str, Any] = {"message": error.message}
    if isinstance(error, ValidationError):
        body["errors"] = error.errors
    return body
