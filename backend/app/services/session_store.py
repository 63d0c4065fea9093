"""
Session Store - server-side login sessions

A session row maps an opaque id (carried, signed, in the cookie) to the
logged-in user id. The expiry is fixed at creation and never extended.

Usage:
    sessions = SessionStore(database, settings)

    record = await sessions.create(user.id)
    record = await sessions.get(record.session_id)   # None once expired
    await sessions.destroy(record.session_id)
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings
from app.core.database import Database
from app.core.exceptions import StorageError
from app.core.logging_config import logger
from app.core.security import generate_session_id
from app.core.types import utcnow
from app.models.session import Session


@dataclass(frozen=True)
class SessionRecord:
    """Read-only view of a stored session"""
    session_id: str
    user_id: str
    expires_at: datetime


class SessionStore:
    """Persists sessions in the ``sessions`` table"""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.ttl = timedelta(days=settings.SESSION_TTL_DAYS)
        self.prune_interval_seconds = settings.SESSION_PRUNE_INTERVAL_MINUTES * 60
        self._cookie_meta = {
            "maxAge": settings.SESSION_TTL_SECONDS * 1000,
            "httpOnly": True,
            "secure": settings.SESSION_COOKIE_SECURE,
            "sameSite": "lax",
        }
        self._prune_task: Optional[asyncio.Task] = None

    async def create(self, user_id: str) -> SessionRecord:
        """Open a new session for ``user_id`` with a fresh, never-reused id"""
        now = utcnow()
        row = Session(
            sid=generate_session_id(),
            sess={"userId": str(user_id), "cookie": dict(self._cookie_meta)},
            expire=now + self.ttl,
        )
        try:
            async with self.database.session() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="create_session")
            raise StorageError("Failed to create session", operation="create_session") from e

        logger.log_store_event("insert", "sessions", rows_affected=1)
        return SessionRecord(session_id=row.sid, user_id=str(user_id), expires_at=row.expire)

    async def get(self, session_id: str) -> Optional[SessionRecord]:
        """Return the live session, or None if unknown or expired.

        Expired rows are deleted on sight.
        """
        try:
            async with self.database.session() as session:
                result = await session.execute(select(Session).where(Session.sid == session_id))
                row = result.scalar_one_or_none()
                if row is None:
                    return None

                if row.is_expired():
                    await session.delete(row)
                    await session.commit()
                    logger.log_store_event("delete", "sessions", rows_affected=1, reason="expired")
                    return None

                user_id = row.user_id
                if not user_id:
                    return None
                return SessionRecord(session_id=row.sid, user_id=str(user_id), expires_at=row.expire)
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="get_session")
            raise StorageError("Failed to load session", operation="get_session") from e

    async def destroy(self, session_id: str) -> bool:
        """Delete the session. Returns True if a row was removed."""
        try:
            async with self.database.session() as session:
                result = await session.execute(delete(Session).where(Session.sid == session_id))
                await session.commit()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="destroy_session")
            raise StorageError("Failed to destroy session", operation="destroy_session") from e

        removed = (result.rowcount or 0) > 0
        logger.log_store_event("delete", "sessions", rows_affected=result.rowcount or 0)
        return removed

    async def prune_expired(self) -> int:
        """Delete every expired session; returns how many were removed"""
        try:
            async with self.database.session() as session:
                result = await session.execute(delete(Session).where(Session.expire <= utcnow()))
                await session.commit()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="prune_sessions")
            raise StorageError("Failed to prune sessions", operation="prune_sessions") from e

        removed = result.rowcount or 0
        if removed:
            logger.info(f"[Sessions] Pruned {removed} expired sessions")
        return removed

    async def start_prune_task(self) -> None:
        """Start background pruning (no-op when the interval is 0)"""
        if self.prune_interval_seconds <= 0 or self._prune_task is not None:
            return

        async def prune_loop():
            while True:
                await asyncio.sleep(self.prune_interval_seconds)
                try:
                    await self.prune_expired()
                except StorageError as e:
                    logger.error(f"[Sessions] Prune task error: {e}")

        self._prune_task = asyncio.create_task(prune_loop())
        logger.info("[Sessions] Started expired-session prune task")

    async def stop_prune_task(self) -> None:
        """Stop background pruning"""
        if self._prune_task is None:
            return
        self._prune_task.cancel()
        try:
            await self._prune_task
        except asyncio.CancelledError:
            pass
        self._prune_task = None
