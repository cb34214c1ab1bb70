"""
Database session and engine.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from courtbook.config import settings
from courtbook.db.base import Base


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Local dev / tests: allow FastAPI's threadpool to share the file database
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {
        "pool_size": 8,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_timeout": 30,
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """For work that outlives the request handler (streamed responses) and opens its own session."""
    return SessionLocal
