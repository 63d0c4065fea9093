from sqlalchemy import Column, String, DateTime, JSON, Index
from datetime import datetime

from app.core.database import Base
from app.core.types import utcnow


class Session(Base):
    """Server-side login session, keyed by the id carried in the cookie"""
    __tablename__ = "sessions"

    sid = Column(String(255), primary_key=True)
    sess = Column(JSON, nullable=False)  # {"userId": ..., "cookie": {...}}
    expire = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("IDX_session_expire", "expire"),
    )

    @property
    def user_id(self):
        return (self.sess or {}).get("userId")

    def is_expired(self, now: datetime = None) -> bool:
        """Check if session is expired"""
        return (now or utcnow()) >= self.expire

    def __repr__(self):
        return f"<Session {self.sid[:8]}... user={self.user_id}>"
