# File: salesdesk/services/branch_service.py

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from salesdesk.core.events import EventBus
from salesdesk.db.models.branch import Branch
from salesdesk.repositories.branch_repository import BranchRepository
from salesdesk.services.base_service import BaseService


class BranchService(BaseService[Branch]):
    """Branch CRUD."""

    entity_name = "Branch"

    def __init__(self, session: Session, event_bus: Optional[EventBus] = None):
        super().__init__(session, repository_class=BranchRepository, event_bus=event_bus)

    def _apply_update(self, entity: Branch, data: Dict[str, Any]) -> None:
        is_active = data.get("is_active")
        entity.update(
            data.get("name", entity.name),
            entity.is_active if is_active is None else is_active,
        )
