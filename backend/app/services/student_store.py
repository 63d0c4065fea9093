"""
Student Store - the students table

All reads and writes of student records go through one StudentStore built at
startup. Every write validates the full payload against StudentCreate before
touching the database, so invalid data is never persisted.

Stats contract (one pass over the full table):
    totalStudents   number of records
    activeClasses   distinct class values
    topPerformers   records ranked "excellent"
    newThisMonth    records created in the trailing 30 days
"""

from datetime import timedelta
from typing import Any, List, Mapping, Optional, Union

import pydantic
from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import Database
from app.core.exceptions import StorageError, ValidationError
from app.core.logging_config import logger
from app.core.types import utcnow
from app.models.student import Student, StudentRank
from app.schemas.student import StudentCreate, StudentFilters, StudentStats


NEW_STUDENT_WINDOW = timedelta(days=30)

StudentPayload = Union[StudentCreate, Mapping[str, Any]]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def coerce_payload(data: StudentPayload) -> StudentCreate:
    """Validate a payload, raising the API-level ValidationError on failure"""
    if isinstance(data, StudentCreate):
        return data
    try:
        return StudentCreate.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def build_filter_conditions(filters: Optional[StudentFilters]) -> list:
    """Translate filters into SQLAlchemy conditions (AND-combined by the caller)"""
    if filters is None:
        return []

    conditions = []
    if filters.search is not None:
        pattern = f"%{_escape_like(filters.search)}%"
        conditions.append(Student.name.ilike(pattern, escape="\\"))
    if filters.class_name is not None:
        conditions.append(Student.class_name == filters.class_name)
    if filters.rank is not None:
        conditions.append(Student.rank == filters.rank)
    return conditions


class StudentStore:
    """CRUD and statistics over student records"""

    def __init__(self, database: Database):
        self.database = database

    async def list_students(self, filters: Optional[StudentFilters] = None) -> List[Student]:
        """Return every matching record, oldest first"""
        query = select(Student)
        conditions = build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(Student.created_at.asc(), Student.id.asc())

        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                students = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="list_students")
            raise StorageError("Failed to fetch students", operation="list_students") from e

        logger.log_store_event("select", "students", rows_affected=len(students))
        return students

    async def get_student(self, student_id: str) -> Optional[Student]:
        try:
            async with self.database.session() as session:
                result = await session.execute(select(Student).where(Student.id == student_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="get_student", student_id=student_id)
            raise StorageError("Failed to fetch student", operation="get_student") from e

    async def create_student(self, data: StudentPayload) -> Student:
        payload = coerce_payload(data)
        now = utcnow()
        student = Student(
            name=payload.name,
            class_name=payload.class_name,
            address=payload.address,
            phone=payload.phone,
            rank=payload.rank,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self.database.session() as session:
                session.add(student)
                await session.commit()
                await session.refresh(student)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="create_student")
            raise StorageError("Failed to create student", operation="create_student") from e

        logger.log_store_event("insert", "students", rows_affected=1, student_id=student.id)
        return student

    async def update_student(self, student_id: str, data: StudentPayload) -> Optional[Student]:
        """Replace all fields of a record. Returns None if the id does not exist."""
        payload = coerce_payload(data)
        try:
            async with self.database.session() as session:
                result = await session.execute(select(Student).where(Student.id == student_id))
                student = result.scalar_one_or_none()
                if student is None:
                    return None

                student.name = payload.name
                student.class_name = payload.class_name
                student.address = payload.address
                student.phone = payload.phone
                student.rank = payload.rank
                # Clock skew must not move updated_at backwards
                student.updated_at = max(utcnow(), student.updated_at)

                await session.commit()
                await session.refresh(student)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="update_student", student_id=student_id)
            raise StorageError("Failed to update student", operation="update_student") from e

        logger.log_store_event("update", "students", rows_affected=1, student_id=student_id)
        return student

    async def delete_student(self, student_id: str) -> bool:
        """Delete a record. False means it was already absent."""
        try:
            async with self.database.session() as session:
                result = await session.execute(delete(Student).where(Student.id == student_id))
                await session.commit()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="delete_student", student_id=student_id)
            raise StorageError("Failed to delete student", operation="delete_student") from e

        rows = result.rowcount or 0
        logger.log_store_event("delete", "students", rows_affected=rows, student_id=student_id)
        return rows > 0

    async def get_student_stats(self) -> StudentStats:
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(Student.class_name, Student.rank, Student.created_at)
                )
                rows = result.all()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="get_student_stats")
            raise StorageError("Failed to fetch student stats", operation="get_student_stats") from e

        cutoff = utcnow() - NEW_STUDENT_WINDOW
        classes = set()
        top_performers = 0
        new_this_month = 0
        for class_name, rank, created_at in rows:
            classes.add(class_name)
            if rank == StudentRank.EXCELLENT.value:
                top_performers += 1
            if created_at is not None and created_at > cutoff:
                new_this_month += 1

        return StudentStats(
            total_students=len(rows),
            active_classes=len(classes),
            top_performers=top_performers,
            new_this_month=new_this_month,
        )
