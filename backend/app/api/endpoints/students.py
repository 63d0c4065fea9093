from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.exceptions import StudentNotFoundError
from app.core.logging_config import logger
from app.modules.auth.dependencies import SessionContext, get_student_store, require_session
from app.schemas.auth import MessageResponse
from app.schemas.student import StudentCreate, StudentFilters, StudentResponse, StudentStats
from app.services.student_store import StudentStore


router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[StudentResponse])
async def list_students(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    class_name: Optional[str] = Query(None, alias="class", description="Exact class label"),
    rank: Optional[str] = Query(None, description="Exact rank"),
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    """List students matching every given filter"""
    filters = StudentFilters(search=search, class_name=class_name, rank=rank)
    return await store.list_students(filters)


@router.get("/stats", response_model=StudentStats)
async def get_student_stats(
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    return await store.get_student_stats()


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    student = await store.get_student(student_id)
    if student is None:
        raise StudentNotFoundError(student_id)
    return student


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    student = await store.create_student(payload)
    logger.info(f"[Students] Created {student.id} ({student.name})")
    return student


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    payload: StudentCreate,
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    student = await store.update_student(student_id, payload)
    if student is None:
        raise StudentNotFoundError(student_id)
    logger.info(f"[Students] Updated {student_id}")
    return student


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    context: SessionContext = Depends(require_session),
    store: StudentStore = Depends(get_student_store),
):
    deleted = await store.delete_student(student_id)
    if not deleted:
        raise StudentNotFoundError(student_id)
    logger.info(f"[Students] Deleted {student_id}")
    return MessageResponse(message="Student deleted successfully")
