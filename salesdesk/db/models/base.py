# File: salesdesk/db/models/base.py
"""
Base models and mixins for SalesDesk.

This module provides the foundation for all database models:
- Base SQLAlchemy model class
- Timestamp mixin
- Abstract base with a client-assigned UUID primary key
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict
import uuid

from sqlalchemy import Column, DateTime, MetaData, Uuid
from sqlalchemy.orm import declarative_base

from salesdesk.core.utils import utcnow

Base = declarative_base(metadata=MetaData())


class TimestampMixin:
    """
    Mixin providing creation and modification timestamps.

    ``created_at`` is set when the object is built. ``updated_at`` stays empty
    until a domain operation modifies the record.
    """

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    def touch(self) -> None:
        """Record a modification."""
        self.updated_at = utcnow()


class AbstractBase(Base):
    """
    Abstract base class for all model entities.

    Identifiers are generated when the object is constructed rather than by
    the database, so a new aggregate can hand its id to children before flush.

    Attributes:
        id: Primary key UUID
    """

    __abstract__ = True

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("id", uuid.uuid4())
        if isinstance(self, TimestampMixin):
            kwargs.setdefault("created_at", utcnow())
        super().__init__(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the model instance to a dictionary.

        Returns:
            Dictionary representation of the model instance
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, uuid.UUID):
                value = str(value)
            elif isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, Enum):
                value = value.value
            result[column.name] = value
        return result
