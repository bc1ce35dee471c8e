# File: salesdesk/repositories/branch_repository.py

from sqlalchemy.orm import Session

from salesdesk.db.models.branch import Branch
from salesdesk.repositories.base_repository import BaseRepository


class BranchRepository(BaseRepository[Branch]):
    """Repository for Branch entity operations."""

    model = Branch

    def __init__(self, session: Session):
        super().__init__(session)
