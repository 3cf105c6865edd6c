"""
Engine and session plumbing for the review store.

One get_session() block is one atomic transaction: reviews, comments
and cascading deletes either commit together or not at all.

SQLite is supported for development and tests; foreign keys are switched
on for every SQLite connection so ON DELETE CASCADE constraints are
enforced the same way they are on PostgreSQL.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from winereview.core.config import get_settings
from winereview.core.logging_config import get_logger

logger = get_logger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: str) -> Engine:
    """
    Create an engine with settings appropriate for the backend.

    In-memory SQLite uses a single shared connection (StaticPool) so every
    session sees the same database; server databases get a real pool.
    """
    if _is_sqlite(db_url):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_in_memory_sqlite(db_url):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=False, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # pool_pre_ping: Test connections before using (handles stale connections)
    return create_engine(
        db_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=False,
    )


class DatabaseConnection:
    """
    Owns the engine for one database URL and hands out transactional scopes.

    Example:
        >>> db = DatabaseConnection("sqlite://")
        >>> with db.get_session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(self, connection_url: Optional[str] = None):
        """
        Build the engine for connection_url, falling back to DATABASE_URL.
        """
        db_url = connection_url or get_settings().database_url

        self.engine = build_engine(db_url)

        # expire_on_commit=False: response models are built from ORM objects
        # after the transaction has committed
        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(f"Database connection initialized: {db_url.split('@')[-1] if '@' in db_url else db_url}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Open a transactional scope.

        Everything done with the yielded session commits together when the
        block exits normally. Any exception (database or domain) rolls the
        whole transaction back and is re-raised.

        Yields:
            SQLAlchemy Session object
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error, rolling back: {e}")
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection is healthy, False otherwise.
        """
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            logger.debug("Database connection check: OK")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def close(self) -> None:
        """Close all connections in the pool."""
        self.engine.dispose()
        logger.info("Database connections closed")


_db_connection: Optional[DatabaseConnection] = None


def get_database() -> DatabaseConnection:
    """
    Process-wide DatabaseConnection, created on first use so importing
    the app never opens a connection.
    """
    global _db_connection
    if _db_connection is None:
        _db_connection = DatabaseConnection()
    return _db_connection
