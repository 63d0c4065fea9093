"""
Database module for Student Records

Contains seed data and database utilities.
"""
from app.db.seed_data import seed_all, clear_all, SAMPLE_STUDENTS

__all__ = ["seed_all", "clear_all", "SAMPLE_STUDENTS"]
