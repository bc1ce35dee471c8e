# File: salesdesk/api/endpoints/customers.py
"""
Customer API endpoints for SalesDesk.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import Response

from salesdesk.api.deps import get_customer_service
from salesdesk.core.config import settings
from salesdesk.schemas.common import Page
from salesdesk.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from salesdesk.services.customer_service import CustomerService

router = APIRouter()


@router.get("/", response_model=Page[CustomerResponse])
def list_customers(
    *,
    customer_service: CustomerService = Depends(get_customer_service),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"
    ),
) -> Page[CustomerResponse]:
    entities, total = customer_service.list_page(page, size)
    return Page[CustomerResponse](
        items=[CustomerResponse.model_validate(e) for e in entities], total=total, page=page, size=size
    )


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    *,
    customer_service: CustomerService = Depends(get_customer_service),
    customer_in: CustomerCreate,
) -> CustomerResponse:
    return customer_service.create(customer_in.model_dump())


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    *,
    customer_service: CustomerService = Depends(get_customer_service),
    customer_id: UUID = Path(..., description="The ID of the customer to retrieve"),
) -> CustomerResponse:
    return customer_service.get_entity_or_404(customer_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    *,
    customer_service: CustomerService = Depends(get_customer_service),
    customer_id: UUID = Path(..., description="The ID of the customer to update"),
    customer_in: CustomerUpdate,
) -> CustomerResponse:
    """
    Update a customer. Only the fields sent are changed.
    """
    return customer_service.update(customer_id, customer_in.model_dump(exclude_unset=True))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    *,
    customer_service: CustomerService = Depends(get_customer_service),
    customer_id: UUID = Path(..., description="The ID of the customer to delete"),
) -> Response:
    customer_service.delete(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
