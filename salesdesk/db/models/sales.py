# File: salesdesk/db/models/sales.py
"""
Sales models for SalesDesk.

This module defines the Sale aggregate and its SaleItem lines. A Sale owns its
items: every change to an item goes through the sale so that the sale total
and the status rules stay consistent.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import relationship

from salesdesk.core.discounts import apply_volume_discounts
from salesdesk.core.exceptions import (
    EntityNotFoundException,
    InvalidArgumentException,
    InvalidStateException,
)
from salesdesk.core.utils import normalize_datetime, to_decimal, utcnow
from salesdesk.core.validation import ValidationResult, is_empty_id
from salesdesk.db.models.base import AbstractBase, TimestampMixin
from salesdesk.db.models.enums import SaleStatus

ZERO = Decimal("0")
HUNDRED = Decimal("100")

MAX_ITEM_QUANTITY = 20
MAX_UNIT_PRICE = Decimal("10000")
MAX_SALE_NUMBER_LENGTH = 50

Number = Union[Decimal, int, float, str]


class SaleItem(AbstractBase, TimestampMixin):
    """
    One priced product line within a sale.

    ``total_amount`` always equals ``quantity * unit_price * (1 - discount / 100)``
    and is recomputed by every mutating method.

    Attributes:
        sale_id: ID of the owning sale
        product_id: ID of the sold product
        quantity: Units sold, 1 to 20
        unit_price: Price per unit, above 0 and at most 10,000
        discount: Discount percentage, 0 to 100
        total_amount: Derived line total
        is_cancelled: Whether the line has been cancelled
    """

    __tablename__ = "sale_items"

    sale_id = Column(Uuid, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(18, 2), nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=ZERO)
    total_amount = Column(Numeric(18, 6), nullable=False, default=ZERO)
    is_cancelled = Column(Boolean, nullable=False, default=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    def __init__(
        self,
        sale_id: Optional[uuid.UUID],
        product_id: uuid.UUID,
        quantity: int,
        unit_price: Number,
        discount: Number = 0,
        **kwargs,
    ):
        super().__init__(
            sale_id=sale_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=to_decimal(unit_price),
            discount=to_decimal(discount),
            is_cancelled=False,
            **kwargs,
        )
        self._calculate_total_amount()

    def _calculate_total_amount(self) -> None:
        self.total_amount = (
            self.quantity * to_decimal(self.unit_price) * (1 - to_decimal(self.discount) / HUNDRED)
        )

    def validate(self) -> ValidationResult:
        """
        Check the item's structural rules without raising.

        Returns:
            ValidationResult keyed by field name
        """
        result = ValidationResult()

        if is_empty_id(self.sale_id):
            result.add_error("sale_id", "Sale ID is required")
        if is_empty_id(self.product_id):
            result.add_error("product_id", "Product ID is required")

        if self.quantity is None or self.quantity <= 0:
            result.add_error("quantity", "Quantity must be greater than 0")
        elif self.quantity > MAX_ITEM_QUANTITY:
            result.add_error("quantity", "Quantity cannot exceed 20 items per sale item")

        if self.unit_price is None or self.unit_price <= ZERO:
            result.add_error("unit_price", "Unit price must be greater than 0")
        elif self.unit_price > MAX_UNIT_PRICE:
            result.add_error("unit_price", "Unit price cannot exceed $10,000")

        if self.discount is None or self.discount < ZERO:
            result.add_error("discount", "Discount cannot be negative")
        elif self.discount > HUNDRED:
            result.add_error("discount", "Discount cannot exceed 100%")

        if self.total_amount is not None and self.total_amount < ZERO:
            result.add_error("total_amount", "Total amount cannot be negative")

        return result

    def update_item_info(
        self,
        sale_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
        unit_price: Number,
        discount: Number = 0,
    ) -> None:
        """
        Replace every mutable field of the line.

        Raises:
            InvalidStateException: If the item is cancelled
        """
        if self.is_cancelled:
            raise InvalidStateException("Cannot update a cancelled sale item")

        self.sale_id = sale_id
        self.product_id = product_id
        self.quantity = quantity
        self.unit_price = to_decimal(unit_price)
        self.discount = to_decimal(discount)

        self._calculate_total_amount()
        self.touch()

    def apply_discount(self, percentage: Number) -> None:
        """
        Set the discount percentage and re-price the line.

        Args:
            percentage: Discount between 0 and 100 inclusive

        Raises:
            InvalidStateException: If the item is cancelled
            InvalidArgumentException: If the percentage is out of range
        """
        if self.is_cancelled:
            raise InvalidStateException("Cannot apply discount to a cancelled sale item")

        percentage = to_decimal(percentage)
        if percentage < ZERO or percentage > HUNDRED:
            raise InvalidArgumentException(
                "Discount percentage must be between 0 and 100", "percentage"
            )

        self.discount = percentage
        self._calculate_total_amount()
        self.touch()

    def cancel(self) -> None:
        if self.is_cancelled:
            raise InvalidStateException("Sale item is already cancelled")
        self.is_cancelled = True
        self.touch()

    def reactivate(self) -> None:
        if not self.is_cancelled:
            raise InvalidStateException("Sale item is not cancelled")
        self.is_cancelled = False
        self.touch()

    def __repr__(self) -> str:
        return (
            f"<SaleItem(id={self.id}, sale_id={self.sale_id}, product_id={self.product_id}, "
            f"quantity={self.quantity}, unit_price={self.unit_price}, discount={self.discount})>"
        )


class Sale(AbstractBase, TimestampMixin):
    """
    Sale aggregate: one commercial transaction with a customer at a branch.

    Status moves are restricted to:

        Pending   -> Closed     close()
        any       -> Cancelled  cancel(), unless already Cancelled
        any       -> Paid       pay(), unless already Paid
        Cancelled -> Pending    reactivate()

    Items may only be added, removed or re-priced while the sale is Pending.
    ``total_amount`` is the sum of the totals of the non-cancelled items.

    Attributes:
        sale_number: Business identifier, unique across all sales
        sale_date: When the sale happened, never in the future
        customer_id: ID of the purchasing customer
        branch_id: ID of the branch the sale was made at
        status: Current SaleStatus
        total_amount: Derived sale total
        version: Row version used for optimistic locking
        items: Owned sale lines in insertion order
    """

    __tablename__ = "sales"

    sale_number = Column(String(MAX_SALE_NUMBER_LENGTH), nullable=False, unique=True, index=True)
    sale_date = Column(DateTime, nullable=False)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    branch_id = Column(Uuid, ForeignKey("branches.id"), nullable=False, index=True)
    status = Column(Enum(SaleStatus, name="sale_status"), nullable=False, default=SaleStatus.PENDING)
    total_amount = Column(Numeric(18, 6), nullable=False, default=ZERO)
    version = Column(Integer, nullable=False)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="[SaleItem.created_at, SaleItem.id]",
        passive_deletes=True,
    )
    customer = relationship("Customer")
    branch = relationship("Branch")

    __mapper_args__ = {"version_id_col": version}

    def __init__(
        self,
        sale_number: str,
        sale_date: datetime,
        customer_id: uuid.UUID,
        branch_id: uuid.UUID,
        **kwargs,
    ):
        super().__init__(
            sale_number=sale_number,
            sale_date=normalize_datetime(sale_date),
            customer_id=customer_id,
            branch_id=branch_id,
            status=SaleStatus.PENDING,
            total_amount=ZERO,
            **kwargs,
        )

    # --- Derived queries ---

    def get_active_items(self) -> List[SaleItem]:
        return [item for item in self.items if not item.is_cancelled]

    def get_total_quantity(self) -> int:
        return sum(item.quantity for item in self.get_active_items())

    def get_item(self, item_id: uuid.UUID) -> SaleItem:
        """
        Find an owned item by id.

        Raises:
            EntityNotFoundException: If the item does not belong to this sale
        """
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundException("SaleItem", item_id)

    def _calculate_total_amount(self) -> None:
        self.total_amount = sum(
            (to_decimal(item.total_amount) for item in self.get_active_items()), ZERO
        )

    def ensure_pending(self, action: str) -> None:
        if self.status != SaleStatus.PENDING:
            raise InvalidStateException(
                f"Cannot {action} a sale with status {self.status.value}",
                current_state=self.status.value,
            )

    # --- Validation ---

    def validate(self) -> ValidationResult:
        """
        Check the sale's structural rules without raising.

        Returns:
            ValidationResult keyed by field name
        """
        result = ValidationResult()

        if not self.sale_number or not self.sale_number.strip():
            result.add_error("sale_number", "Sale number is required")
        elif len(self.sale_number) > MAX_SALE_NUMBER_LENGTH:
            result.add_error("sale_number", "Sale number cannot be longer than 50 characters")

        if self.sale_date is None:
            result.add_error("sale_date", "Sale date is required")
        elif normalize_datetime(self.sale_date) > utcnow():
            result.add_error("sale_date", "Sale date cannot be in the future")

        if is_empty_id(self.customer_id):
            result.add_error("customer_id", "Customer ID is required")
        if is_empty_id(self.branch_id):
            result.add_error("branch_id", "Branch ID is required")

        if self.total_amount is not None and self.total_amount < ZERO:
            result.add_error("total_amount", "Total amount cannot be negative")

        return result

    def update_sale_info(
        self,
        sale_number: str,
        sale_date: datetime,
        customer_id: uuid.UUID,
        branch_id: uuid.UUID,
    ) -> None:
        """
        Update the sale header.

        Raises:
            InvalidStateException: If the sale is cancelled
        """
        if self.status == SaleStatus.CANCELLED:
            raise InvalidStateException(
                "Cannot update a cancelled sale", current_state=self.status.value
            )

        self.sale_number = sale_number
        self.sale_date = normalize_datetime(sale_date)
        self.customer_id = customer_id
        self.branch_id = branch_id
        self.touch()

    # --- Item management (Pending only) ---

    def add_item(self, item: Optional[SaleItem]) -> SaleItem:
        """
        Append an item to the sale.

        Raises:
            InvalidArgumentException: If no item is given
            InvalidStateException: If the sale is not pending
        """
        if item is None:
            raise InvalidArgumentException("Sale item cannot be null", "item")
        self.ensure_pending("add items to")

        item.sale_id = self.id
        self.items.append(item)
        self._calculate_total_amount()
        self.touch()
        return item

    def remove_item(self, item_id: uuid.UUID) -> SaleItem:
        """
        Detach an item from the sale; it is deleted on flush.

        Raises:
            InvalidStateException: If the sale is not pending
            EntityNotFoundException: If the item does not belong to this sale
        """
        self.ensure_pending("remove items from")
        item = self.get_item(item_id)

        self.items.remove(item)
        self._calculate_total_amount()
        self.touch()
        return item

    def update_item(
        self, item_id: uuid.UUID, product_id: uuid.UUID, quantity: int, unit_price: Number
    ) -> SaleItem:
        """Re-price one line, keeping its current discount."""
        self.ensure_pending("update items in")
        item = self.get_item(item_id)

        item.update_item_info(self.id, product_id, quantity, unit_price, item.discount)
        self._calculate_total_amount()
        self.touch()
        return item

    def cancel_item(self, item_id: uuid.UUID) -> SaleItem:
        self.ensure_pending("cancel items in")
        item = self.get_item(item_id)

        item.cancel()
        self._calculate_total_amount()
        self.touch()
        return item

    def apply_discount_to_all_items(self, percentage: Number) -> None:
        """
        Apply one discount to every active item.

        The percentage is checked before any item changes.

        Raises:
            InvalidStateException: If the sale is not pending
            InvalidArgumentException: If the percentage is out of range
        """
        self.ensure_pending("apply discounts to")
        value = to_decimal(percentage)
        if value < ZERO or value > HUNDRED:
            raise InvalidArgumentException(
                "Discount percentage must be between 0 and 100", "percentage"
            )

        for item in self.get_active_items():
            item.apply_discount(value)
        self._calculate_total_amount()
        self.touch()

    # --- Status transitions ---

    def close(self) -> None:
        """
        Close a pending sale, applying the volume discount tiers first.

        Raises:
            InvalidStateException: If the sale is not pending, has no items, or
                any product exceeds the per-product quantity limit
        """
        if self.status != SaleStatus.PENDING:
            raise InvalidStateException(
                f"Only pending sales can be closed. Current status: {self.status.value}",
                current_state=self.status.value,
            )
        if not self.items:
            raise InvalidStateException("Cannot close a sale with no items")

        apply_volume_discounts(self)

        self.status = SaleStatus.CLOSED
        self._calculate_total_amount()
        self.touch()

    def cancel(self) -> None:
        """Cancel the sale and every item that is still active."""
        if self.status == SaleStatus.CANCELLED:
            raise InvalidStateException("Sale is already cancelled", current_state=self.status.value)

        for item in self.items:
            if not item.is_cancelled:
                item.cancel()

        self.status = SaleStatus.CANCELLED
        self._calculate_total_amount()
        self.touch()

    def pay(self) -> None:
        if self.status == SaleStatus.PAID:
            raise InvalidStateException("Sale is already paid", current_state=self.status.value)

        self.status = SaleStatus.PAID
        self._calculate_total_amount()
        self.touch()

    def reactivate(self) -> None:
        """Return a cancelled sale to Pending, reactivating its cancelled items."""
        if self.status != SaleStatus.CANCELLED:
            raise InvalidStateException("Sale is not cancelled", current_state=self.status.value)

        for item in self.items:
            if item.is_cancelled:
                item.reactivate()

        self.status = SaleStatus.PENDING
        self._calculate_total_amount()
        self.touch()

    def __repr__(self) -> str:
        return (
            f"<Sale(id={self.id}, sale_number='{self.sale_number}', "
            f"total={self.total_amount}, status={self.status})>"
        )
