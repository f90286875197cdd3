"""Database connection and session management."""
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from lacrosselens.config.settings import get_settings


def get_database_url() -> str:
    """Get database URL, ensuring the SQLite data directory exists."""
    settings = get_settings()
    db_url = settings.database_url

    if db_url.startswith("sqlite:///"):
        db_path = db_url.replace("sqlite:///", "")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return db_url


def _connect_args(db_url: str) -> dict:
    # Background processing touches the session from worker threads
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


DATABASE_URL = get_database_url()

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    echo=False,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    Yields:
        SQLAlchemy Session that auto-closes after use
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
