"""Database connection and session management.

The Database object owns one SQLAlchemy engine and session factory. It is
created once at startup and injected into the repositories, so tests can give
each case its own isolated database.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from recruit_match.logging import get_logger

from .exceptions import DatabaseConnectionError

logger = get_logger(__name__, component="database")


class Database:
    """Engine and session lifecycle for one database URL.

    Example:
        >>> db = Database("sqlite:///./data/recruit_match.db")
        >>> db.init()
        >>> with db.session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(self, database_url: str):
        """Initialize Database.

        Args:
            database_url: SQLAlchemy URL, e.g. "sqlite:///./data/recruit_match.db"
        """
        self.database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return isinstance(self.database_url, str) and self.database_url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (
            self.database_url.endswith(":memory:") or self.database_url.rstrip("/") == "sqlite:"
        )

    def init(self) -> "Database":
        """Create the engine, validate the connection and create the schema.

        Safe to call more than once; later calls are no-ops.

        Returns:
            self, so construction and init can be chained

        Raises:
            DatabaseConnectionError: If initialization fails
        """
        if self._engine is not None:
            return self

        try:
            logger.info(
                "Initializing database",
                extra={
                    "event": "database.initializing",
                    "database_url": redact_url(self.database_url),
                },
            )

            if not self.database_url or not isinstance(self.database_url, str):
                raise DatabaseConnectionError("Database URL must be a non-empty string")

            if self.is_sqlite and not self.is_memory:
                db_file = Path(self.database_url.replace("sqlite:///", "", 1))
                if not db_file.parent.exists():
                    logger.info(f"Creating database directory: {db_file.parent}")
                    db_file.parent.mkdir(parents=True, exist_ok=True)

            engine_kwargs = {"echo": False, "pool_pre_ping": True}
            if self.is_sqlite:
                engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if self.is_memory:
                # Every session must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool

            engine = create_engine(self.database_url, **engine_kwargs)

            if self.is_sqlite:
                _configure_sqlite(engine)

            _validate_connection(engine)

            self._session_factory = sessionmaker(
                bind=engine,
                autoflush=True,
                expire_on_commit=False,
            )
            self._engine = engine

            from .schema import create_schema

            create_schema(engine)

            logger.info(
                "Database initialized successfully",
                extra={
                    "event": "database.initialised",
                    "database_url": redact_url(self.database_url),
                    "dialect": engine.dialect.name,
                },
            )
            return self

        except DatabaseConnectionError:
            raise
        except Exception as e:
            error_msg = f"Failed to initialize database: {e}"
            logger.error(error_msg, exc_info=True)
            raise DatabaseConnectionError(error_msg) from e

    @property
    def engine(self) -> Engine:
        """The SQLAlchemy engine.

        Raises:
            DatabaseConnectionError: If init() has not been called
        """
        if self._engine is None:
            raise DatabaseConnectionError(
                "Database not initialized. Call init() before using the engine"
            )
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a session that commits on success and rolls back on error.

        Yields:
            Session: SQLAlchemy session for database operations

        Raises:
            DatabaseConnectionError: If init() has not been called
        """
        if self._session_factory is None:
            raise DatabaseConnectionError(
                "Database not initialized. Call init() before opening a session"
            )

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.warning(
                f"Database session rolled back due to exception: {e}",
                extra={
                    "event": "database.session.rolled_back",
                    "error_type": type(e).__name__,
                },
            )
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose of the engine's connections."""
        if self._engine is not None:
            logger.info("Closing database connections", extra={"event": "database.closing"})
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and WAL journaling on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    """Run a trivial query to prove the database is reachable.

    Raises:
        DatabaseConnectionError: If the test query fails
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def redact_url(url: str) -> str:
    """Hide the password in a database URL before logging it.

    Example:
        >>> redact_url("postgresql://app:secret@db:5432/recruit")
        'postgresql://app:***@db:5432/recruit'
    """
    if not isinstance(url, str) or url.startswith("sqlite"):
        return url

    if "@" in url and "://" in url:
        scheme, rest = url.split("://", 1)
        credentials, host = rest.rsplit("@", 1)
        username = credentials.split(":", 1)[0]
        return f"{scheme}://{username}:***@{host}"

    return url
