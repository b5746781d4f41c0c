"""
Database engine and session management.

Supports PostgreSQL (production) and SQLite (development) via DATABASE_URL.
The engine owns the connection pool; request handlers check a Session
out of it and return it when the request ends.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, DeclarativeBase
from sqlalchemy.pool import QueuePool, StaticPool

from city_explorer.config import settings
from city_explorer.logging_config import get_logger
from city_explorer.exceptions import DatabaseConnectionError

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def _is_sqlite(url: str) -> bool:
    """Check if the database URL is SQLite."""
    return url.startswith("sqlite")


def _is_sqlite_memory(url: str) -> bool:
    """An in-memory SQLite database lives and dies with its one connection."""
    return url in ("sqlite://", "sqlite:///") or ":memory:" in url or "mode=memory" in url


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Create a SQLAlchemy engine based on the database URL.

    Args:
        database_url: Override the URL from settings. Useful for testing.

    Returns:
        SQLAlchemy Engine instance
    """
    url = database_url or settings.database.url
    logger.info("Creating database engine: %s", "SQLite" if _is_sqlite(url) else "PostgreSQL")

    try:
        if _is_sqlite(url):
            # A file database hands each session its own pooled connection;
            # only an in-memory database shares its single connection.
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool if _is_sqlite_memory(url) else QueuePool,
                echo=False,
            )

            @event.listens_for(engine, "connect")
            def _set_sqlite_pragma(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        else:
            engine = create_engine(
                url,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,
                echo=False,
            )

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified successfully")

        return engine

    except Exception as e:
        raise DatabaseConnectionError(
            message=f"Failed to connect to database: {e}",
            details={"url": url.split("@")[-1] if "@" in url else url},  # Hide credentials
        ) from e


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """
    Create a session factory bound to the given engine.

    Records returned to the API outlive their session, so commits do
    not expire loaded attributes.

    Args:
        engine: SQLAlchemy engine. If None, creates one from settings.

    Returns:
        Configured sessionmaker
    """
    if engine is None:
        engine = create_db_engine()
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize the database: create all tables.

    Args:
        engine: SQLAlchemy engine. If None, creates one from settings.
    """
    if engine is None:
        engine = create_db_engine()

    # Import all models so they register with Base.metadata
    import city_explorer.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
