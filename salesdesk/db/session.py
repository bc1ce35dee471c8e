"""
Database session management for SalesDesk.

Usage:
    from salesdesk.db.session import get_db

    # In FastAPI dependency
    def some_endpoint(db: Session = Depends(get_db)):
        ...
"""

import logging
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from salesdesk.core.config import settings
from salesdesk.db.models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across the worker threads FastAPI runs sync
    endpoints in, so thread checks are disabled for that dialect.
    """
    connect_args: Dict[str, Any] = {}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args["check_same_thread"] = False
    else:
        kwargs.setdefault("pool_pre_ping", True)

    new_engine = create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)

    if is_sqlite:
        # SQLite leaves foreign keys (and ON DELETE CASCADE) off unless asked per connection
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session with proper resource management.

    Returns:
        SQLAlchemy Session for database operations
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Error in get_db: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create every table known to the models package."""
    target = bind or engine
    logger.info(f"Creating database tables on {target.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=target)
