# File: salesdesk/services/customer_service.py

from typing import Any, Dict, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from salesdesk.core.events import EventBus
from salesdesk.core.exceptions import DuplicateEntityException
from salesdesk.db.models.customer import Customer
from salesdesk.repositories.customer_repository import CustomerRepository
from salesdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)


class CustomerService(BaseService[Customer]):
    """Customer CRUD. Email addresses are unique when present."""

    entity_name = "Customer"

    def __init__(self, session: Session, event_bus: Optional[EventBus] = None):
        super().__init__(session, repository_class=CustomerRepository, event_bus=event_bus)

    def _ensure_unique_email(self, email: Optional[str], customer_id: Optional[uuid.UUID] = None) -> None:
        if not email:
            return
        existing = self.repository.get_by_email(email)
        if existing is not None and existing.id != customer_id:
            logger.warning(f"Rejected duplicate customer email {email}")
            raise DuplicateEntityException(
                f"Customer with email {email} already exists",
                details={"entity_type": "Customer", "email": email},
            )

    def create(self, data: Dict[str, Any]) -> Customer:
        self._ensure_unique_email(data.get("email"))
        return super().create(data)

    def update(self, id: uuid.UUID, data: Dict[str, Any]) -> Customer:
        self._ensure_unique_email(data.get("email"), id)
        return super().update(id, data)

    def _apply_update(self, entity: Customer, data: Dict[str, Any]) -> None:
        if {"name", "email", "phone"} & data.keys():
            entity.update_contact_info(
                data.get("name", entity.name),
                data.get("email", entity.email),
                data.get("phone", entity.phone),
            )
        if data.get("is_active") is True and not entity.is_active:
            entity.activate()
        elif data.get("is_active") is False and entity.is_active:
            entity.deactivate()
