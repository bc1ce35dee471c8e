# File: salesdesk/api/endpoints/products.py
"""
Product API endpoints for SalesDesk.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import Response

from salesdesk.api.deps import get_product_service
from salesdesk.core.config import settings
from salesdesk.schemas.common import Page
from salesdesk.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from salesdesk.services.product_service import ProductService

router = APIRouter()


@router.get("/", response_model=Page[ProductResponse])
def list_products(
    *,
    product_service: ProductService = Depends(get_product_service),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"
    ),
) -> Page[ProductResponse]:
    entities, total = product_service.list_page(page, size)
    return Page[ProductResponse](
        items=[ProductResponse.model_validate(e) for e in entities], total=total, page=page, size=size
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    *,
    product_service: ProductService = Depends(get_product_service),
    product_in: ProductCreate,
) -> ProductResponse:
    return product_service.create(product_in.model_dump())


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    *,
    product_service: ProductService = Depends(get_product_service),
    product_id: UUID = Path(..., description="The ID of the product to retrieve"),
) -> ProductResponse:
    return product_service.get_entity_or_404(product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    *,
    product_service: ProductService = Depends(get_product_service),
    product_id: UUID = Path(..., description="The ID of the product to update"),
    product_in: ProductUpdate,
) -> ProductResponse:
    """
    Update a product. Only the fields sent are changed.
    """
    return product_service.update(product_id, product_in.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    *,
    product_service: ProductService = Depends(get_product_service),
    product_id: UUID = Path(..., description="The ID of the product to delete"),
) -> Response:
    product_service.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
