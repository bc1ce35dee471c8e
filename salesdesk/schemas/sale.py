# File: salesdesk/schemas/sale.py
"""
Sale schemas for the SalesDesk API.

This module contains Pydantic models for sales and sale items. Structural
business rules (quantity limits, price ceilings, sale date) are enforced by
the domain models so that every entry point reports them the same way; the
schemas only guard types and obvious bounds.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salesdesk.db.models.enums import SaleStatus


class SaleItemCreate(BaseModel):
    """
    Schema for adding an item to a sale.

    When ``unit_price`` is omitted the product's catalogue price is used.
    """

    product_id: UUID = Field(..., description="Product being sold")
    quantity: int = Field(..., description="Units sold", gt=0)
    unit_price: Optional[Decimal] = Field(
        None, description="Price per unit; defaults to the product price", gt=0, decimal_places=2
    )
    discount: Decimal = Field(
        Decimal("0"), description="Discount percentage", ge=0, le=100, decimal_places=2
    )


class SaleItemUpdate(BaseModel):
    """
    Schema for updating a sale item.

    The item is re-priced from the product and keeps its current discount.
    """

    product_id: UUID = Field(..., description="Product being sold")
    quantity: int = Field(..., description="Units sold", gt=0)


class SaleItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sale_id: UUID
    product_id: UUID
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total_amount: Decimal
    is_cancelled: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class SaleCreate(BaseModel):
    """
    Schema for creating a new sale. The sale starts Pending.
    """

    sale_number: str = Field(..., description="Unique business identifier", max_length=50)
    sale_date: datetime = Field(..., description="When the sale took place")
    customer_id: UUID = Field(..., description="Purchasing customer")
    branch_id: UUID = Field(..., description="Branch the sale was made at")
    items: List[SaleItemCreate] = Field(default_factory=list, description="Initial items")

    @field_validator("sale_number")
    @classmethod
    def strip_sale_number(cls, v: str) -> str:
        return v.strip()


class SaleUpdate(BaseModel):
    """
    Schema for updating the sale header.

    All fields are optional to allow partial updates.
    """

    sale_number: Optional[str] = Field(None, description="Unique business identifier", max_length=50)
    sale_date: Optional[datetime] = Field(None, description="When the sale took place")
    customer_id: Optional[UUID] = Field(None, description="Purchasing customer")
    branch_id: Optional[UUID] = Field(None, description="Branch the sale was made at")

    @field_validator("sale_number")
    @classmethod
    def strip_sale_number(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class SaleStatusUpdate(BaseModel):
    """Requested target status; checked by the status service."""

    status: Optional[str] = Field(None, description="One of Pending, Closed, Paid, Cancelled")


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sale_number: str
    sale_date: datetime
    customer_id: UUID
    branch_id: UUID
    status: SaleStatus
    total_amount: Decimal
    version: int
    items: List[SaleItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None
