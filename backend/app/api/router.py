from fastapi import APIRouter

from app.api.endpoints import auth, students

api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(students.router)
