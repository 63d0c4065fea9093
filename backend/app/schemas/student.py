from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.student import StudentRank


# ASCII digits only
PHONE_PATTERN = r"^\([0-9]{3}\) [0-9]{3}-[0-9]{4}$"

# Filter value meaning "no constraint"
FILTER_ALL = "all"


class StudentCreate(BaseModel):
    """Full student payload, used for both create and update"""
    name: str = Field(..., min_length=1, max_length=100)
    class_name: str = Field(..., alias="class", min_length=1)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Format: (555) 123-4567")
    rank: StudentRank

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class StudentResponse(BaseModel):
    id: str
    name: str
    class_name: str = Field(..., serialization_alias="class")
    address: str
    phone: str
    rank: str
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)


class StudentStats(BaseModel):
    total_students: int = Field(0, serialization_alias="totalStudents")
    active_classes: int = Field(0, serialization_alias="activeClasses")
    top_performers: int = Field(0, serialization_alias="topPerformers")
    new_this_month: int = Field(0, serialization_alias="newThisMonth")


class StudentFilters(BaseModel):
    """
    Optional list constraints, combined with AND.

    Blank strings and "all" are normalised to None so that a UI select left on
    "All Classes" does not filter anything.
    """
    search: Optional[str] = None
    class_name: Optional[str] = None
    rank: Optional[str] = None

    @field_validator("search", "class_name", "rank", mode="before")
    @classmethod
    def normalise_empty(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            stripped = v.strip()
            if not stripped or stripped.lower() == FILTER_ALL:
                return None
        return v

    @property
    def is_empty(self) -> bool:
        return self.search is None and self.class_name is None and self.rank is None
