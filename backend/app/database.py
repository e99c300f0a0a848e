"""
Database engine construction and connectivity checks.

The durable student store runs on SQLAlchemy. Any URL SQLAlchemy
understands works; PostgreSQL and SQLite are the configurations the
service is exercised with. Engines are built on demand from the URL chosen
at startup rather than at import time, because the database may be absent
altogether.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.logging_config import get_logger, log_with_context

logger = get_logger("db")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def create_db_engine(database_url: str, connect_timeout: float = 5.0) -> Engine:
    """
    Build an engine for the given URL with a bounded connection wait.

    Args:
        database_url: SQLAlchemy database URL
        connect_timeout: Seconds to wait when opening a connection

    Returns:
        A configured (not yet connected) Engine
    """
    engine_kwargs = {"echo": False}

    if database_url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
            "pool_timeout": connect_timeout,
            # libpq only accepts whole seconds
            "connect_args": {"connect_timeout": max(1, int(connect_timeout))},
        })
    elif database_url.startswith("mysql"):
        engine_kwargs.update({
            "pool_pre_ping": True,
            "connect_args": {"connect_timeout": max(1, int(connect_timeout))},
        })
    elif database_url.startswith("sqlite"):
        # Handlers run in FastAPI's thread pool
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": connect_timeout,
        }

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def check_connection(engine: Engine):
    """
    Open a connection and run a trivial query.

    Raises whatever the driver raises when the database is unreachable.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    log_with_context(logger, "INFO", "Database connection established",
                     extra_data={"dialect": engine.dialect.name})


def create_tables(engine: Engine):
    """
    Create the tables that do not exist yet.

    Existing tables are left untouched; there is no migration step.
    """
    # Registers the models on Base.metadata
    from app.models import student  # noqa: F401

    Base.metadata.create_all(bind=engine)
