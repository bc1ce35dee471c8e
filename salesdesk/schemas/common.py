# File: salesdesk/schemas/common.py

from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing."""

    items: List[T] = Field(default_factory=list, description="Entries on this page")
    total: int = Field(..., description="Total number of matching entries", ge=0)
    page: int = Field(..., description="1-based page number", ge=1)
    size: int = Field(..., description="Requested page size", ge=1)
