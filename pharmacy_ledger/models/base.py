"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db(). Every balance change runs inside a UnitOfWork.
"""

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.orm.exc import StaleDataError

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.exceptions import ConcurrencyError, PersistenceError
from pharmacy_ledger.logging_config import get_logger

settings = get_settings()
logger = get_logger("db")

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
# autocommit=False: changes are saved only on an explicit commit,
# so a balance update and its ledger entry go in together or not at all.
# autoflush=False: no SQL is sent until we flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed when the
    request finishes, even if an error occurs, so connections
    are never leaked from the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class UnitOfWork:
    """
    One all-or-nothing database transaction.

    The caller creates it around a session and hands it to a
    mutating service operation. The service enters it, does its
    reads and writes, and calls commit(). Leaving the block
    without a successful commit rolls everything back.

        uow = UnitOfWork(db)
        entry = service.apply_transaction(uow, account_id, ...)

    Storage failures leave the block as PersistenceError (or
    ConcurrencyError when a version check fails), chained to
    the underlying SQLAlchemy exception.
    """

    def __init__(self, session: Session):
        self.session = session
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._committed:
            self.session.rollback()

        if isinstance(exc, StaleDataError):
            logger.warning(
                "unit_of_work_conflict", extra={"error": str(exc)}
            )
            raise ConcurrencyError(
                "Concurrent modification detected, nothing was written"
            ) from exc
        if isinstance(exc, SQLAlchemyError):
            logger.error(
                "unit_of_work_failed",
                extra={"error_type": type(exc).__name__, "error": str(exc)},
            )
            raise PersistenceError(
                f"Could not commit ledger changes: {exc}"
            ) from exc
        return False

    def commit(self) -> None:
        self.session.commit()
        self._committed = True
