# File: salesdesk/api/endpoints/branches.py
"""
Branch API endpoints for SalesDesk.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import Response

from salesdesk.api.deps import get_branch_service
from salesdesk.core.config import settings
from salesdesk.schemas.common import Page
from salesdesk.schemas.branch import BranchCreate, BranchResponse, BranchUpdate
from salesdesk.services.branch_service import BranchService

router = APIRouter()


@router.get("/", response_model=Page[BranchResponse])
def list_branches(
    *,
    branch_service: BranchService = Depends(get_branch_service),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"
    ),
) -> Page[BranchResponse]:
    entities, total = branch_service.list_page(page, size)
    return Page[BranchResponse](
        items=[BranchResponse.model_validate(e) for e in entities], total=total, page=page, size=size
    )


@router.post("/", response_model=BranchResponse, status_code=status.HTTP_201_CREATED)
def create_branch(
    *,
    branch_service: BranchService = Depends(get_branch_service),
    branch_in: BranchCreate,
) -> BranchResponse:
    return branch_service.create(branch_in.model_dump())


@router.get("/{branch_id}", response_model=BranchResponse)
def get_branch(
    *,
    branch_service: BranchService = Depends(get_branch_service),
    branch_id: UUID = Path(..., description="The ID of the branch to retrieve"),
) -> BranchResponse:
    return branch_service.get_entity_or_404(branch_id)


@router.put("/{branch_id}", response_model=BranchResponse)
def update_branch(
    *,
    branch_service: BranchService = Depends(get_branch_service),
    branch_id: UUID = Path(..., description="The ID of the branch to update"),
    branch_in: BranchUpdate,
) -> BranchResponse:
    """
    Update a branch. Only the fields sent are changed.
    """
    return branch_service.update(branch_id, branch_in.model_dump(exclude_unset=True))


@router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(
    *,
    branch_service: BranchService = Depends(get_branch_service),
    branch_id: UUID = Path(..., description="The ID of the branch to delete"),
) -> Response:
    branch_service.delete(branch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
