# File: salesdesk/services/product_service.py

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from salesdesk.core.events import EventBus
from salesdesk.db.models.product import Product
from salesdesk.repositories.product_repository import ProductRepository
from salesdesk.services.base_service import BaseService


class ProductService(BaseService[Product]):
    """
    Product CRUD.

    Price changes only affect items added or re-priced afterwards; existing
    sale items keep the price they were sold at.
    """

    entity_name = "Product"

    def __init__(self, session: Session, event_bus: Optional[EventBus] = None):
        super().__init__(session, repository_class=ProductRepository, event_bus=event_bus)

    def _apply_update(self, entity: Product, data: Dict[str, Any]) -> None:
        if "name" in data or "price" in data:
            entity.update(data.get("name", entity.name), data.get("price", entity.price))
        if data.get("is_active") is True and not entity.is_active:
            entity.activate()
        elif data.get("is_active") is False and entity.is_active:
            entity.deactivate()
