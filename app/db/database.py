from contextlib import contextmanager
from typing import AsyncGenerator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from app.config import settings

db_port = settings.db_port
if db_port == "None" or not db_port:
    db_port = "5432"

if settings.database_url:
    # Explicit override (SQLite for tests and local experiments)
    ASYNC_DATABASE_URL = settings.database_url
    DATABASE_URL = settings.database_url.replace("+aiosqlite", "").replace("+asyncpg", "")
else:
    # Sync database URL (for Alembic migrations)
    DATABASE_URL = (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{db_port}/{settings.db_name}"
    )

    # Async database URL (for FastAPI)
    ASYNC_DATABASE_URL = (
        f"postgresql+asyncpg://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{db_port}/{settings.db_name}"
    )

_is_sqlite = ASYNC_DATABASE_URL.startswith("sqlite")

# Sync engine (for migrations)
engine = create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Async engine (for FastAPI). SQLite connections must not outlive the event loop
# that opened them, so they are not pooled.
async_engine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=False,
    **({"poolclass": NullPool} if _is_sqlite else {}),
)
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Async dependency for FastAPI routes."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@contextmanager
def get_sync_db_session():
    """Sync context manager for database sessions (scripts)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as error:
        db.rollback()
        raise error
    finally:
        db.close()
