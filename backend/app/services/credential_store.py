"""
Credential Store - the users table

Usage:
    store = CredentialStore(database, settings)
    await store.ensure_default_admin()

    user = await store.verify_credentials("admin", "pass123")
"""

import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings
from app.core.database import Database
from app.core.exceptions import StorageError
from app.core.logging_config import logger
from app.core.security import get_password_hash, verify_password
from app.models.user import User


class CredentialStore:
    """Lookup and creation of login accounts"""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings
        # Hash of a random string, only used to equalise login timing
        self._dummy_hash = get_password_hash(secrets.token_hex(8), rounds=settings.BCRYPT_ROUNDS)

    async def get_user(self, user_id: str) -> Optional[User]:
        try:
            async with self.database.session() as session:
                result = await session.execute(select(User).where(User.id == user_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="get_user", user_id=user_id)
            raise StorageError("Failed to load user", operation="get_user") from e

    async def get_user_by_username(self, username: str) -> Optional[User]:
        try:
            async with self.database.session() as session:
                result = await session.execute(select(User).where(User.username == username))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="get_user_by_username")
            raise StorageError("Failed to load user", operation="get_user_by_username") from e

    async def create_user(
        self,
        username: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Insert a user; the password is stored as a bcrypt hash"""
        if not username:
            raise ValueError("username must not be empty")

        user = User(
            username=username,
            password_hash=get_password_hash(password, rounds=self.settings.BCRYPT_ROUNDS),
            first_name=first_name,
            last_name=last_name,
        )
        try:
            async with self.database.session() as session:
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except SQLAlchemyError as e:
            # Includes unique violations on username
            logger.log_error_with_context(e, context="create_user", username=username)
            raise StorageError("Failed to create user", operation="create_user") from e

        logger.log_store_event("insert", "users", rows_affected=1)
        return user

    async def verify_credentials(self, username: str, password: str) -> Optional[User]:
        """
        Return the user when username and password match, else None.

        Unknown user and wrong password are deliberately indistinguishable.
        """
        user = await self.get_user_by_username(username)
        if user is None:
            # Burn a comparable amount of time so timing does not reveal the miss
            verify_password(password, self._dummy_hash)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def ensure_default_admin(self) -> User:
        """Create the configured admin account if it does not exist. Idempotent."""
        username = self.settings.DEFAULT_ADMIN_USERNAME
        existing = await self.get_user_by_username(username)
        if existing is not None:
            logger.info(f"[Bootstrap] Admin user '{username}' already exists")
            return existing

        user = await self.create_user(
            username=username,
            password=self.settings.DEFAULT_ADMIN_PASSWORD,
            first_name=self.settings.DEFAULT_ADMIN_FIRST_NAME,
            last_name=self.settings.DEFAULT_ADMIN_LAST_NAME,
        )
        logger.info(f"[Bootstrap] Default admin user '{username}' created")
        return user
