"""Database connection and session management for BasicTodo.

SQLite is the default for local development; any SQLAlchemy URL (PostgreSQL in
production) can be supplied through `DATABASE_URL`.
"""

import os
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.ext.declarative import declarative_base
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./basictodo.db")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "False").lower() == "true"


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def get_engine_kwargs(database_url: str) -> dict:
    """create_engine() keyword arguments for a URL, read from the environment.

    Kept separate from engine creation so it can be tested without connecting.
    """
    kwargs: dict = {"echo": _env_flag("DEBUG"), "pool_pre_ping": True}

    if _is_sqlite_url(database_url):
        # FastAPI runs sync endpoints on a threadpool.
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT_SEC", "30")),
        )
    return kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


engine = build_engine(DATABASE_URL)


@event.listens_for(engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """SQLite leaves foreign keys off unless asked; cascades on users depend on them."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Request-scoped database session (FastAPI dependency)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations(database_url: str = DATABASE_URL) -> None:
    """Upgrade the schema to the latest Alembic revision."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(alembic_cfg, "head")


def init_db() -> None:
    """Create or migrate the schema at startup.

    Non-SQLite databases are migrated with Alembic when RUN_MIGRATIONS=true;
    otherwise tables are created directly from the ORM metadata.
    """
    # Registers the ORM tables on Base.metadata.
    from basictodo.database import models  # noqa: F401

    if _env_flag("RUN_MIGRATIONS") and not _is_sqlite_url(DATABASE_URL):
        logger.info("Running database migrations")
        run_migrations(DATABASE_URL)
        return

    Base.metadata.create_all(bind=engine)
