"""
Database connection and session management.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from inventory_tracker.utils.logger import get_logger

logger = get_logger(__name__)


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite gets a StaticPool so that every session shares the
    one connection that holds the data.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_engine() -> Engine:
    """Get the process-wide engine built from configuration."""
    global _engine

    if _engine is None:
        from inventory_tracker.utils.config import get_config

        storage = get_config().storage
        _engine = build_engine(storage.database_url, echo=storage.echo_sql)
        logger.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")

    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory

    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())

    return _session_factory


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for a database session.

    Usage:
        with session_scope(factory) as db:
            row = db.get(LedgerCollection, "stock-units")
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Initialize database - create all tables."""
    from inventory_tracker.database.models import Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables created successfully")


def drop_db(engine: Optional[Engine] = None) -> None:
    """Drop all database tables (use with caution!)."""
    from inventory_tracker.database.models import Base

    logger.warning("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine or get_engine())
    logger.warning("All database tables dropped")
