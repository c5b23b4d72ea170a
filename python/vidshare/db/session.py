"""Database session management and transaction helpers.

Provides:
- Request-scoped database sessions via get_db() dependency
- transaction(): commit/rollback around a unit of work
- insert_or_conflict(): INSERT inside a SAVEPOINT that reports unique-key conflicts
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from vidshare.db.engine import get_engine


def create_session_factory(engine: Any = None) -> sessionmaker[Session]:
    """Session factory for engine (the DATABASE_URL engine by default).

    Objects stay loaded after commit so services can build responses from them.
    """
    return sessionmaker(
        bind=engine if engine is not None else get_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


_SessionLocal: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the default session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory()
    return _SessionLocal


def set_session_factory(factory: sessionmaker[Session] | None) -> None:
    """Replace the default session factory (tests bind it to their own engine)."""
    global _SessionLocal
    _SessionLocal = factory


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; services commit through transaction()."""
    with get_session_factory()() as db:
        yield db


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit the block's work, or roll it back and re-raise."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def insert_or_conflict(db: Session, row: Any) -> bool:
    """Insert a row inside a SAVEPOINT.

    Returns:
        True if the row was inserted, False if a constraint rejected it
        (usually a unique conflict, or a foreign key whose row is gone).
        The surrounding transaction stays usable.
    """
    try:
        with db.begin_nested():
            db.add(row)
            db.flush()
    except IntegrityError:
        # Savepoint rollback already returned `row` to the transient state.
        return False
    return True
