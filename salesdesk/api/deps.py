# salesdesk/api/deps.py
"""
FastAPI dependencies for SalesDesk.

Provides the database session and service injection for API routes.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from salesdesk.core.events import EventBus, global_event_bus

# Database session provider
from salesdesk.db.session import get_db

# --- Services ---
from salesdesk.services.branch_service import BranchService
from salesdesk.services.customer_service import CustomerService
from salesdesk.services.product_service import ProductService
from salesdesk.services.sale_service import SaleService
from salesdesk.services.sale_status_service import SaleStatusService

logger = logging.getLogger(__name__)

__all__ = [
    "get_db",
    "get_event_bus",
    "get_branch_service",
    "get_customer_service",
    "get_product_service",
    "get_sale_service",
    "get_sale_status_service",
]


def get_event_bus() -> EventBus:
    """Event bus services publish to; overridden in tests."""
    return global_event_bus


def get_customer_service(
    db: Session = Depends(get_db), event_bus: EventBus = Depends(get_event_bus)
) -> CustomerService:
    return CustomerService(db, event_bus=event_bus)


def get_branch_service(
    db: Session = Depends(get_db), event_bus: EventBus = Depends(get_event_bus)
) -> BranchService:
    return BranchService(db, event_bus=event_bus)


def get_product_service(
    db: Session = Depends(get_db), event_bus: EventBus = Depends(get_event_bus)
) -> ProductService:
    return ProductService(db, event_bus=event_bus)


def get_sale_service(
    db: Session = Depends(get_db), event_bus: EventBus = Depends(get_event_bus)
) -> SaleService:
    """Injector providing SaleService with the request's session."""
    logger.debug("Providing SaleService instance (deps).")
    return SaleService(db, event_bus=event_bus)


def get_sale_status_service(
    db: Session = Depends(get_db), event_bus: EventBus = Depends(get_event_bus)
) -> SaleStatusService:
    logger.debug("Providing SaleStatusService instance (deps).")
    return SaleStatusService(db, event_bus=event_bus)
