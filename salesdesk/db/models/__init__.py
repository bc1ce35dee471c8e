# File: salesdesk/db/models/__init__.py
"""
Database models for SalesDesk.

Importing this package registers every table on ``Base.metadata``.
"""

from salesdesk.db.models.base import Base, AbstractBase, TimestampMixin
from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.customer import Customer
from salesdesk.db.models.branch import Branch
from salesdesk.db.models.product import Product
from salesdesk.db.models.sales import Sale, SaleItem

__all__ = [
    "Base",
    "AbstractBase",
    "TimestampMixin",
    "SaleStatus",
    "Customer",
    "Branch",
    "Product",
    "Sale",
    "SaleItem",
]
