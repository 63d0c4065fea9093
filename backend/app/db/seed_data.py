"""
Database Seed Data Module

Sample students plus the default admin account.
Run with: python -m app.db.seed_data          (seed)
          python -m app.db.seed_data clear    (delete students and sessions)
"""
import asyncio
from typing import List, Optional

from sqlalchemy import delete, func, select

from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.models.session import Session
from app.models.student import Student
from app.services.credential_store import CredentialStore
from app.services.student_store import StudentStore


# ==================== Sample Data Constants ====================

SAMPLE_STUDENTS = [
    {"name": "John Smith", "class": "Grade 1", "address": "12 Oak Avenue, Springfield", "phone": "(555) 201-3344", "rank": "excellent"},
    {"name": "Emily Johnson", "class": "Grade 2", "address": "48 Maple Street, Springfield", "phone": "(555) 219-8721", "rank": "good"},
    {"name": "Michael Brown", "class": "Grade 3", "address": "7 Pine Road, Shelbyville", "phone": "(555) 330-1290", "rank": "average"},
    {"name": "Sarah Davis", "class": "Grade 4", "address": "91 Elm Court, Springfield", "phone": "(555) 402-7713", "rank": "excellent"},
    {"name": "David Wilson", "class": "Grade 5", "address": "3 Cedar Lane, Ogdenville", "phone": "(555) 518-0046", "rank": "needs-improvement"},
    {"name": "Jessica Smithers", "class": "Grade 2", "address": "150 Birch Boulevard, Shelbyville", "phone": "(555) 627-5521", "rank": "good"},
    {"name": "Daniel Martinez", "class": "Grade 3", "address": "22 Willow Way, Springfield", "phone": "(555) 734-9902", "rank": "average"},
    {"name": "Olivia Garcia", "class": "Grade 1", "address": "64 Aspen Drive, Capital City", "phone": "(555) 845-2267", "rank": "good"},
]


# ==================== Seed Functions ====================

async def seed_students(store: StudentStore, database: Database, force: bool = False) -> List[Student]:
    """Insert the sample students unless the table already has rows"""
    async with database.session() as session:
        existing = (await session.execute(select(func.count()).select_from(Student))).scalar_one()

    if existing and not force:
        print(f"Skipping students: {existing} already present")
        return []

    students = []
    for data in SAMPLE_STUDENTS:
        students.append(await store.create_student(data))

    print(f"Created {len(students)} students")
    return students


# ==================== Main Seed Function ====================

async def seed_all(settings: Optional[Settings] = None, force: bool = False):
    """Seed the admin account and sample students"""
    settings = settings or default_settings
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    database = Database(settings)
    try:
        await database.create_all()

        admin = await CredentialStore(database, settings).ensure_default_admin()
        print(f"Admin user ready: {admin.username}")

        await seed_students(StudentStore(database), database, force=force)

        print("=" * 50)
        print("Database seeding completed successfully!")
        print("=" * 50)
    finally:
        await database.dispose()


async def clear_all(settings: Optional[Settings] = None):
    """Delete all students and sessions; users are kept"""
    settings = settings or default_settings
    print("Clearing all data...")
    database = Database(settings)
    try:
        async with database.session() as session:
            await session.execute(delete(Session))
            await session.execute(delete(Student))
            await session.commit()
        print("All data cleared!")
    finally:
        await database.dispose()


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all(force="--force" in sys.argv))
