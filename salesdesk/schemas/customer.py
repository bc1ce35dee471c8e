# File: salesdesk/schemas/customer.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CustomerBase(BaseModel):
    name: str = Field(..., description="Customer name", max_length=100)
    email: Optional[EmailStr] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Phone in international format, e.g. +5511999998888")


class CustomerCreate(CustomerBase):
    is_active: bool = Field(True, description="Whether the customer can buy")


class CustomerUpdate(BaseModel):
    """All fields are optional to allow partial updates."""

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerResponse(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
