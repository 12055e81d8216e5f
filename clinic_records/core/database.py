import os
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import DATABASE_URL

# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str = DATABASE_URL):
    """Create an engine, making sure the sqlite file's folder exists."""
    if database_url.startswith("sqlite:///"):
        db_path = database_url[len("sqlite:///"):]
        folder = os.path.dirname(db_path)
        if db_path and db_path != ":memory:" and folder:
            os.makedirs(folder, exist_ok=True)

    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
    )


def create_session_factory(engine):
    """Session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    # Import models so they register on Base.metadata
    from clinic_records.models import kv_entry  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db_context(session_factory):
    """
    Context manager for database sessions.
    Commits on success, rolls back on error, always closes.

    Usage:
        with get_db_context(SessionLocal) as db:
            db.add(entry)
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
