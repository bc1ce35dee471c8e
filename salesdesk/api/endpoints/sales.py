# File: salesdesk/api/endpoints/sales.py
"""
Sales API endpoints for SalesDesk.

This module provides endpoints for managing sales: CRUD on the sale header,
status transitions, and management of the items of a pending sale.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import Response

from salesdesk.api.deps import get_sale_service, get_sale_status_service
from salesdesk.core.config import settings
from salesdesk.db.models.enums import SaleStatus
from salesdesk.schemas.common import Page
from salesdesk.schemas.sale import (
    SaleCreate,
    SaleItemCreate,
    SaleItemResponse,
    SaleItemUpdate,
    SaleResponse,
    SaleStatusUpdate,
    SaleUpdate,
)
from salesdesk.services.sale_service import SaleService
from salesdesk.services.sale_status_service import SaleStatusService, UpdateSaleStatusCommand

router = APIRouter()


@router.get("/", response_model=Page[SaleResponse])
def list_sales(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"
    ),
    sale_number: Optional[str] = Query(None, description="Substring of the sale number"),
    customer_id: Optional[UUID] = Query(None, description="Filter by customer"),
    branch_id: Optional[UUID] = Query(None, description="Filter by branch"),
    status: Optional[SaleStatus] = Query(None, description="Filter by sale status"),
) -> Page[SaleResponse]:
    """
    Retrieve sales with optional filtering and pagination, newest first.
    """
    sales, total = sale_service.list_sales(
        page=page,
        size=size,
        sale_number=sale_number,
        customer_id=customer_id,
        branch_id=branch_id,
        status=status,
    )
    return Page[SaleResponse](
        items=[SaleResponse.model_validate(s) for s in sales], total=total, page=page, size=size
    )


@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_in: SaleCreate,
) -> SaleResponse:
    """
    Create a new pending sale, optionally with its first items.

    Args:
        sale_service: Injected sale service
        sale_in: Sale header and items

    Returns:
        Created sale
    """
    return sale_service.create_sale(sale_in)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale to retrieve"),
) -> SaleResponse:
    return sale_service.get_sale(sale_id)


@router.put("/{sale_id}", response_model=SaleResponse)
def update_sale(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale to update"),
    sale_in: SaleUpdate,
) -> SaleResponse:
    """
    Update the sale header. Cancelled sales cannot be updated.
    """
    return sale_service.update_sale(sale_id, sale_in)


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale to delete"),
) -> Response:
    sale_service.delete_sale(sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{sale_id}/status", response_model=SaleResponse)
async def update_sale_status(
    *,
    status_service: SaleStatusService = Depends(get_sale_status_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    status_in: SaleStatusUpdate,
) -> SaleResponse:
    """
    Move a sale to a new status.

    ``Closed`` applies the volume discounts; ``Pending`` reactivates a
    cancelled sale.

    Args:
        status_service: Injected status service
        sale_id: ID of the sale
        status_in: Requested target status

    Returns:
        The sale after the transition
    """
    sale = await status_service.update_status(UpdateSaleStatusCommand(sale_id, status_in.status))
    return SaleResponse.model_validate(sale)


# --- Items ---


@router.get("/{sale_id}/items", response_model=Page[SaleItemResponse])
def list_sale_items(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"
    ),
) -> Page[SaleItemResponse]:
    items, total = sale_service.list_items(sale_id, page=page, size=size)
    return Page[SaleItemResponse](
        items=[SaleItemResponse.model_validate(i) for i in items],
        total=total,
        page=page,
        size=size,
    )


@router.post(
    "/{sale_id}/items", response_model=SaleItemResponse, status_code=status.HTTP_201_CREATED
)
def add_sale_item(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    item_in: SaleItemCreate,
) -> SaleItemResponse:
    """
    Add an item to a pending sale. The unit price defaults to the product price.
    """
    return sale_service.add_item(sale_id, item_in)


@router.get("/{sale_id}/items/{item_id}", response_model=SaleItemResponse)
def get_sale_item(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    item_id: UUID = Path(..., description="The ID of the item"),
) -> SaleItemResponse:
    return sale_service.get_item(sale_id, item_id)


@router.put("/{sale_id}/items/{item_id}", response_model=SaleItemResponse)
def update_sale_item(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    item_id: UUID = Path(..., description="The ID of the item"),
    item_in: SaleItemUpdate,
) -> SaleItemResponse:
    """
    Change the product and quantity of an item, re-pricing it from the product.
    """
    return sale_service.update_item(sale_id, item_id, item_in)


@router.patch("/{sale_id}/items/{item_id}/cancel", response_model=SaleItemResponse)
def cancel_sale_item(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    item_id: UUID = Path(..., description="The ID of the item"),
) -> SaleItemResponse:
    return sale_service.cancel_item(sale_id, item_id)


@router.delete("/{sale_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_sale_item(
    *,
    sale_service: SaleService = Depends(get_sale_service),
    sale_id: UUID = Path(..., description="The ID of the sale"),
    item_id: UUID = Path(..., description="The ID of the item"),
) -> Response:
    sale_service.remove_item(sale_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
