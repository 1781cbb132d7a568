"""
Database URL resolution for Alembic migrations.
"""

import os

from dotenv import load_dotenv

env = os.getenv("ENV", "local")
load_dotenv(f".env.{env}")


def get_database_url() -> str:
    """
    Sync database URL for migrations.

    DATABASE_URL wins when set (its async driver suffix is dropped); otherwise
    the URL is built from the DB_* variables.
    """
    override = os.getenv("DATABASE_URL")
    if override:
        return override.replace("+aiosqlite", "").replace("+asyncpg", "")

    db_user = os.getenv("DB_USER", "postgres")
    db_password = os.getenv("DB_PASSWORD", "")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT") or "5432"
    db_name = os.getenv("DB_NAME", "race_results_db")

    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
