# File: salesdesk/db/unit_of_work.py
"""
Unit of work over a SQLAlchemy session.

Repositories only flush; nothing they do is durable until the unit of work
commits.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from salesdesk.core.exceptions import ConcurrentModificationException

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """Transactional boundary for one request."""

    def __init__(self, session: Session):
        self.session = session

    def commit(self) -> bool:
        """
        Commit pending changes.

        Returns:
            True on success, False if the database rejected the commit. On
            False the session has been rolled back.

        Raises:
            ConcurrentModificationException: If a versioned row was changed by
                another transaction since it was loaded
        """
        try:
            self.session.commit()
            return True
        except StaleDataError as e:
            self.session.rollback()
            logger.warning(f"Commit rejected, row modified concurrently: {e}")
            raise ConcurrentModificationException(
                "The record was modified by another transaction"
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Commit failed: {e}", exc_info=True)
            return False

    def rollback(self) -> None:
        self.session.rollback()

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
