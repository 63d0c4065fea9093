"""
Unit Tests for request/response schemas
"""
import pydantic
import pytest
from datetime import datetime

from app.schemas.auth import UserLogin, UserResponse
from app.schemas.student import StudentCreate, StudentFilters, StudentResponse, StudentStats


VALID = {
    "name": "Jane Doe",
    "class": "Grade 3",
    "address": "1 Main St",
    "phone": "(555) 123-4567",
    "rank": "good",
}


class TestStudentCreate:

    def test_valid_payload(self):
        student = StudentCreate.model_validate(VALID)

        assert student.class_name == "Grade 3"
        assert student.rank == "good"

    def test_populate_by_field_name(self):
        data = dict(VALID)
        data["class_name"] = data.pop("class")

        assert StudentCreate.model_validate(data).class_name == "Grade 3"

    @pytest.mark.parametrize("phone", [
        "555-123-4567",
        "(555)123-4567",
        "(555) 1234-567",
        "(55) 123-4567",
        "(555) 123-45678",
        " (555) 123-4567",
        "",
        "(٥٥٥) ١٢٣-٤٥٦٧",
        "(５５５) １２３-４５６７",
    ])
    def test_phone_pattern_rejected(self, phone):
        with pytest.raises(pydantic.ValidationError):
            StudentCreate.model_validate({**VALID, "phone": phone})

    def test_rank_must_be_known(self):
        with pytest.raises(pydantic.ValidationError):
            StudentCreate.model_validate({**VALID, "rank": "outstanding"})

    @pytest.mark.parametrize("field, value", [
        ("name", ""),
        ("name", "x" * 101),
        ("class", ""),
        ("address", ""),
        ("address", "x" * 501),
    ])
    def test_length_limits(self, field, value):
        with pytest.raises(pydantic.ValidationError):
            StudentCreate.model_validate({**VALID, field: value})

    def test_boundary_lengths_accepted(self):
        student = StudentCreate.model_validate({**VALID, "name": "x" * 100, "address": "y" * 500})

        assert len(student.name) == 100
        assert len(student.address) == 500

    def test_class_not_limited_to_ui_options(self):
        assert StudentCreate.model_validate({**VALID, "class": "Kindergarten"}).class_name == "Kindergarten"

    def test_class_has_no_upper_length(self):
        long_class = "Advanced Placement " * 20

        assert StudentCreate.model_validate({**VALID, "class": long_class}).class_name == long_class

    @pytest.mark.parametrize("missing", ["name", "class", "address", "phone", "rank"])
    def test_every_field_required(self, missing):
        data = {k: v for k, v in VALID.items() if k != missing}

        with pytest.raises(pydantic.ValidationError):
            StudentCreate.model_validate(data)


class TestStudentResponse:

    def test_serializes_camel_case(self):
        now = datetime(2024, 1, 2, 3, 4, 5)
        response = StudentResponse(
            id="abc", name="Jane Doe", class_name="Grade 3", address="1 Main St",
            phone="(555) 123-4567", rank="good", created_at=now, updated_at=now,
        )

        data = response.model_dump(by_alias=True)

        assert set(data) == {"id", "name", "class", "address", "phone", "rank", "createdAt", "updatedAt"}

    def test_stats_aliases(self):
        stats = StudentStats(total_students=3, active_classes=2, top_performers=1, new_this_month=3)

        assert stats.model_dump(by_alias=True) == {
            "totalStudents": 3,
            "activeClasses": 2,
            "topPerformers": 1,
            "newThisMonth": 3,
        }


class TestStudentFilters:

    @pytest.mark.parametrize("value", [None, "", "   ", "all", "ALL"])
    def test_blank_and_all_mean_no_filter(self, value):
        filters = StudentFilters(search=value, class_name=value, rank=value)

        assert filters.is_empty

    def test_values_kept_verbatim(self):
        filters = StudentFilters(search="smi ", class_name="Grade 2", rank="good")

        assert filters.search == "smi "
        assert filters.class_name == "Grade 2"
        assert not filters.is_empty


class TestAuthSchemas:

    def test_login_requires_both_fields(self):
        with pytest.raises(pydantic.ValidationError):
            UserLogin(username="admin", password="")
        with pytest.raises(pydantic.ValidationError):
            UserLogin(username="", password="pass123")

    def test_user_response_aliases(self):
        user = UserResponse(id="1", username="admin", first_name="Admin", last_name="User")

        assert user.model_dump(by_alias=True) == {
            "id": "1", "username": "admin", "firstName": "Admin", "lastName": "User",
        }
