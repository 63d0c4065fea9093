from sqlalchemy import Column, String, Text, DateTime, Index
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class StudentRank(str, enum.Enum):
    """Academic performance category"""
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_IMPROVEMENT = "needs-improvement"


class Student(Base):
    """Student record"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    # "class" is a Python keyword, so the attribute is class_name
    class_name = Column("class", String, nullable=False, index=True)
    address = Column(Text, nullable=False)
    phone = Column(String(20), nullable=False)
    # Validated against StudentRank at the schema layer; plain string in the table
    rank = Column(String(32), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("IDX_students_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Student {self.id} {self.name}>"
