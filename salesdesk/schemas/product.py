# File: salesdesk/schemas/product.py

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str = Field(..., description="Product name", max_length=100)
    price: Decimal = Field(..., description="Catalogue unit price", gt=0, decimal_places=2)
    is_active: bool = Field(True, description="Inactive products cannot be sold")


class ProductUpdate(BaseModel):
    """All fields are optional to allow partial updates."""

    name: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    price: Decimal
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
