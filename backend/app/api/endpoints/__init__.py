# API endpoints
from . import auth, students, health

__all__ = ["auth", "students", "health"]
