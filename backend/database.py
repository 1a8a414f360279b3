"""
SQLAlchemy engine, session factory, declarative base, and the FastAPI
dependency that provides a DB session per request.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings

# pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
_engine_kwargs = {"pool_pre_ping": True}

if settings.database_url.startswith("sqlite"):
    # Sync handlers run on a threadpool; SQLite refuses cross-thread use by default
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    # Bounded pool: once exhausted, requests wait for a connection to free up
    _engine_kwargs["pool_size"] = settings.db_pool_size
    _engine_kwargs["max_overflow"] = 0

engine = create_engine(settings.database_url, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
