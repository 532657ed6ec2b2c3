"""
Database configuration and session management.

The engine never commits on its own initiative outside unit_of_work():
every mutating service operation runs inside exactly one unit of work so
that its existence/permission checks and the physical write are committed
(or rolled back) together.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from crud_shared.config.logging import get_logger
from crud_shared.config.settings import DATABASE_URL, settings

logger = get_logger(__name__)

_UNIT_DEPTH_KEY = "crud_engine.unit_of_work_depth"


def _engine_options(url: str) -> dict:
    """Connection options that depend on the backend."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
    }


engine = create_engine(
    DATABASE_URL,
    echo=settings.database_echo,
    **_engine_options(DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a block as a single transaction on the given session.

    Re-entrant: nested units join the outermost one, which alone commits.
    Any exception rolls the whole unit back and is re-raised unchanged.

    Usage:
        with unit_of_work(db):
            entity = repo.find_by_id(1, for_update=True)
            repo.delete(entity)
    """
    depth = db.info.get(_UNIT_DEPTH_KEY, 0)
    db.info[_UNIT_DEPTH_KEY] = depth + 1
    try:
        yield db
        if depth == 0:
            safe_commit(db)
    except Exception:
        if depth == 0:
            logger.debug("Rolling back unit of work")
            db.rollback()
        raise
    finally:
        db.info[_UNIT_DEPTH_KEY] = depth
