# File: salesdesk/db/models/customer.py
"""
Customer model for SalesDesk.

Customers are the buyers a sale is recorded against.
"""

from typing import Optional

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import validates

from salesdesk.core.validation import ValidationResult, validate_email, validate_phone
from salesdesk.db.models.base import AbstractBase, TimestampMixin

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


class Customer(AbstractBase, TimestampMixin):
    """
    Customer record with contact details.

    Attributes:
        name: Display name, 2 to 100 characters
        email: Optional email address
        phone: Optional phone number in international format, e.g. +5511999998888
        is_active: Whether new sales may be recorded for the customer
    """

    __tablename__ = "customers"

    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    def __init__(self, name: str, email: Optional[str] = None, phone: Optional[str] = None, **kwargs):
        kwargs.setdefault("is_active", True)
        super().__init__(name=name, email=email, phone=phone, **kwargs)

    @validates("email")
    def normalize_email(self, key: str, email: Optional[str]) -> Optional[str]:
        """Store emails trimmed and lower-cased; blank becomes None."""
        if email is None:
            return None
        email = email.strip().lower()
        return email or None

    def validate(self) -> ValidationResult:
        result = ValidationResult()

        if not self.name or not self.name.strip():
            result.add_error("name", "Customer name is required")
        elif len(self.name) < NAME_MIN_LENGTH:
            result.add_error("name", "Customer name must be at least 2 characters long")
        elif len(self.name) > NAME_MAX_LENGTH:
            result.add_error("name", "Customer name cannot be longer than 100 characters")

        if self.email and not validate_email(self.email):
            result.add_error("email", "Email must be a valid email address")

        if self.phone and not validate_phone(self.phone):
            result.add_error("phone", "Phone number must start with '+' followed by 11-15 digits")

        return result

    def activate(self) -> None:
        self.is_active = True
        self.touch()

    def deactivate(self) -> None:
        self.is_active = False
        self.touch()

    def update_contact_info(self, name: str, email: Optional[str] = None, phone: Optional[str] = None) -> None:
        self.name = name
        self.email = email
        self.phone = phone
        self.touch()

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}', email='{self.email}')>"
