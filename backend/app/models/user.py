from sqlalchemy import Column, String, DateTime

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class User(Base):
    """Login account. A single admin row is seeded at startup."""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.username}>"
