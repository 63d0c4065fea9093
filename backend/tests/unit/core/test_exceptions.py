"""
Unit Tests for the exception hierarchy
"""
import pydantic
import pytest

from app.core.exceptions import (
    AuthenticationError,
    InvalidSessionError,
    ResourceNotFoundError,
    StorageError,
    StudentNotFoundError,
    StudentRecordsError,
    UserNotFoundError,
    ValidationError,
    error_response,
    format_field_errors,
)
from app.schemas.student import StudentCreate


class TestStatusCodes:

    @pytest.mark.parametrize("error, status", [
        (ValidationError(), 400),
        (AuthenticationError(), 401),
        (InvalidSessionError(), 401),
        (StudentNotFoundError("x"), 404),
        (UserNotFoundError("x"), 404),
        (StorageError("db down"), 500),
    ])
    def test_status_code(self, error, status):
        assert isinstance(error, StudentRecordsError)
        assert error.status_code == status

    def test_not_found_message(self):
        error = StudentNotFoundError("abc")

        assert isinstance(error, ResourceNotFoundError)
        assert error.message == "Student not found"
        assert error.code == "STUDENT_NOT_FOUND"
        assert error.details["resource_id"] == "abc"

    def test_storage_error_records_operation(self):
        error = StorageError("boom", operation="list_students")

        assert error.to_dict() == {
            "code": "STORAGE_ERROR",
            "message": "boom",
            "details": {"operation": "list_students"},
        }


class TestValidationErrors:

    def test_from_pydantic(self):
        with pytest.raises(pydantic.ValidationError) as exc_info:
            StudentCreate.model_validate({"name": "", "class": "Grade 1", "address": "x",
                                         "phone": "555-1234", "rank": "good"})

        error = ValidationError.from_pydantic(exc_info.value)
        fields = {e["field"] for e in error.errors}

        assert error.message == "Validation error"
        assert fields == {"name", "phone"}
        assert all({"field", "message", "type"} <= set(e) for e in error.errors)

    def test_location_prefix_is_dropped(self):
        errors = format_field_errors([
            {"loc": ("body", "phone"), "msg": "bad", "type": "string_pattern_mismatch"},
            {"loc": ("query", "rank"), "msg": "bad", "type": "value_error"},
            {"loc": ("body",), "msg": "missing body", "type": "missing"},
        ])

        assert [e["field"] for e in errors] == ["phone", "rank", None]

    def test_error_response_includes_errors_only_for_validation(self):
        validation = ValidationError(errors=[{"field": "name", "message": "bad", "type": "x"}])

        assert error_response(validation) == {
            "message": "Validation error",
            "errors": [{"field": "name", "message": "bad", "type": "x"}],
        }
        assert error_response(AuthenticationError()) == {"message": "Unauthorized"}
