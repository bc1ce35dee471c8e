# File: salesdesk/db/models/branch.py

from sqlalchemy import Boolean, Column, String

from salesdesk.core.validation import ValidationResult
from salesdesk.db.models.base import AbstractBase, TimestampMixin

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


class Branch(AbstractBase, TimestampMixin):
    """Store or office where sales are made."""

    __tablename__ = "branches"

    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __init__(self, name: str, **kwargs):
        kwargs.setdefault("is_active", True)
        super().__init__(name=name, **kwargs)

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        if not self.name or not self.name.strip():
            result.add_error("name", "Branch name is required")
        elif not NAME_MIN_LENGTH <= len(self.name) <= NAME_MAX_LENGTH:
            result.add_error("name", "Branch name must be between 2 and 100 characters")
        return result

    def update(self, name: str, is_active: bool) -> None:
        self.name = name
        self.is_active = is_active
        self.touch()

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}')>"
