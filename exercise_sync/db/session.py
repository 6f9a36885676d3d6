from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from exercise_sync.config.settings import settings
from exercise_sync.db.models import Base

# Lazy initialization to avoid import-time database connections
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def create_db_engine(database_url: str) -> Engine:
    """Create an engine and make sure the schema exists."""
    connect_args = {}
    if "sqlite" in database_url.lower():
        connect_args = {"check_same_thread": False}
    else:
        connect_args = {"connect_timeout": 10}

    engine = create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
        pool_pre_ping=True,
    )
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database engine initialized: {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine(settings.database_url)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory bound to the configured database."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Transactional session: commit on success, roll back on any error."""
    session = factory()
    try:
        yield session
        if session.dirty or session.new or session.deleted:
            session.commit()
            logger.debug("Database session committed successfully")
    except Exception as e:
        logger.error(f"Database session error, rolling back: {e}. Error type: {type(e).__name__}")
        session.rollback()
        raise
    finally:
        session.close()
