# File: salesdesk/db/models/product.py
"""
Product model for SalesDesk.

Products carry the catalogue price sale items are priced from.
"""

from decimal import Decimal
from typing import Union

from sqlalchemy import Boolean, Column, Numeric, String

from salesdesk.core.utils import to_decimal
from salesdesk.core.validation import ValidationResult
from salesdesk.db.models.base import AbstractBase, TimestampMixin

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
MAX_PRICE = Decimal("999999.99")


class Product(AbstractBase, TimestampMixin):
    """
    Sellable product.

    Attributes:
        name: Product name, 2 to 100 characters
        price: Catalogue unit price
        is_active: Inactive products cannot be added to sales
    """

    __tablename__ = "products"

    name = Column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    price = Column(Numeric(18, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __init__(self, name: str, price: Union[Decimal, int, str], **kwargs):
        kwargs.setdefault("is_active", True)
        super().__init__(name=name, price=to_decimal(price), **kwargs)

    def validate(self) -> ValidationResult:
        result = ValidationResult()

        if not self.name or not self.name.strip():
            result.add_error("name", "Product name is required")
        elif not NAME_MIN_LENGTH <= len(self.name) <= NAME_MAX_LENGTH:
            result.add_error("name", "Product name must be between 2 and 100 characters")

        if self.price is None or self.price <= 0:
            result.add_error("price", "Price must be greater than zero")
        elif self.price > MAX_PRICE:
            result.add_error("price", "Price cannot exceed 999,999.99")

        return result

    def update(self, name: str, price: Union[Decimal, int, str]) -> None:
        self.name = name
        self.price = to_decimal(price)
        self.touch()

    def activate(self) -> None:
        self.is_active = True
        self.touch()

    def deactivate(self) -> None:
        self.is_active = False
        self.touch()

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
