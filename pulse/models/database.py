"""Database setup and session management using SQLAlchemy 2.0.

This module configures the database engine, session factory, and base class
for all ORM models. The default URL is an in-memory SQLite database, so the
SQL result store keeps data only for the life of the process unless a real
database URL is configured.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from pulse.config import get_settings


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def build_engine(database_url: str, echo: bool = False):
    """Create an engine suited to the given URL.

    In-memory SQLite gets a single shared connection (StaticPool) so every
    session sees the same database.

    Args:
        database_url: SQLAlchemy connection string
        echo: Log emitted SQL

    Returns:
        Engine: configured SQLAlchemy engine
    """
    engine_kwargs = {"echo": echo}

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True  # Verify connections before using

    return create_engine(database_url, **engine_kwargs)


settings = get_settings()

engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Prevent lazy loading after commit
)


def init_db() -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(engine)

