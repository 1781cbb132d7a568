from app.db.database import (
    get_db,
    get_sync_db_session,
    engine,
    async_engine,
    SessionLocal,
    AsyncSessionLocal,
    Base,
)

__all__ = [
    "get_db",
    "get_sync_db_session",
    "engine",
    "async_engine",
    "SessionLocal",
    "AsyncSessionLocal",
    "Base",
]
