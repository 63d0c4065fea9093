from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, QueuePool
from sqlalchemy import text

from app.core.config import Settings

# Create base class for models (can be defined before engine)
Base = declarative_base()


def get_database_url(raw_url: str) -> str:
    """Get properly formatted async database URL"""
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("sqlite:///"):
        return raw_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return raw_url


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async engine.

    Connection pooling strategy:
    - SQLite: NullPool (required for thread safety)
    - PostgreSQL Development: NullPool (simpler debugging)
    - PostgreSQL Production: QueuePool with connection limits
    """
    db_url = get_database_url(settings.DATABASE_URL)

    if "sqlite" in db_url:
        return create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

    if settings.DEBUG or settings.ENVIRONMENT == "development":
        return create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            poolclass=NullPool,
        )

    return create_async_engine(
        db_url,
        echo=settings.DB_ECHO,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before use
    )


class Database:
    """Owns the engine and session factory for one process.

    Built once at startup and handed to the stores; nothing here is
    module-global.
    """

    def __init__(self, settings: Settings):
        self.engine: AsyncEngine = create_engine_from_settings(settings)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False
        )

    def session(self) -> AsyncSession:
        """Create a new async session"""
        return self.session_factory()

    async def create_all(self) -> None:
        """Create any missing tables"""
        import app.models  # noqa: F401  (register models on Base.metadata)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Check connectivity"""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Close database connections"""
        await self.engine.dispose()
