# File: salesdesk/services/sale_status_service.py
"""
Sale status transitions.

Changing a sale's status always follows the same sequence:

1. field-level check of the request (before anything is loaded)
2. load the sale with its full item collection, locked for the transaction
3. run the matching transition on the aggregate (Close also re-prices items)
4. persist and commit
5. publish ``sale.status.changed`` (plus ``sale.cancelled`` on cancellation);
   failures here are logged, never raised

Steps 2-4 run in a worker thread so the row lock never blocks the event loop.
Steps 2-5 run as one shielded task: a caller cancelled mid-way gets
``CancelledError`` while the update and its announcement finish in the
background.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
import asyncio
import logging
import uuid

from sqlalchemy.orm import Session

from salesdesk.core.events import (
    EventBus,
    EventTopics,
    SaleCancelledEvent,
    SaleStatusChangedEvent,
)
from salesdesk.core.exceptions import EntityNotFoundException
from salesdesk.core.validation import ValidationResult, is_empty_id, validate_input
from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.sales import Sale
from salesdesk.db.unit_of_work import SqlAlchemyUnitOfWork
from salesdesk.repositories.sale_repository import SaleRepository
from salesdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)


@dataclass
class UpdateSaleStatusCommand:
    """Request to move a sale to a new status. ``Pending`` means reactivate."""

    sale_id: Union[uuid.UUID, str, None]
    status: Union[SaleStatus, str, None]


def _parse_status(value: Any) -> Optional[SaleStatus]:
    if isinstance(value, SaleStatus):
        return value
    if isinstance(value, str):
        for status in SaleStatus:
            if value.strip().lower() in (status.value.lower(), status.name.lower()):
                return status
    return None


def validate_status_command(command: Optional[UpdateSaleStatusCommand]) -> ValidationResult:
    """
    Field-level validation of a status change request.

    Args:
        command: The request to check

    Returns:
        ValidationResult with any validation errors
    """
    result = ValidationResult()
    if command is None:
        result.add_error("command", "Command is required")
        return result

    if is_empty_id(command.sale_id):
        result.add_error("sale_id", "Sale ID is required")
    elif not isinstance(command.sale_id, uuid.UUID):
        try:
            uuid.UUID(str(command.sale_id))
        except ValueError:
            result.add_error("sale_id", "Sale ID must be a valid UUID")

    if command.status is None or (isinstance(command.status, str) and not command.status.strip()):
        result.add_error("status", "Status is required")
    elif _parse_status(command.status) is None:
        allowed = ", ".join(s.value for s in SaleStatus)
        result.add_error("status", f"Status must be one of: {allowed}")

    return result


# Target status -> aggregate operation
TRANSITIONS: Dict[SaleStatus, Callable[[Sale], None]] = {
    SaleStatus.CLOSED: Sale.close,
    SaleStatus.CANCELLED: Sale.cancel,
    SaleStatus.PAID: Sale.pay,
    SaleStatus.PENDING: Sale.reactivate,
}


class SaleStatusService(BaseService[Sale]):
    """
    Executes one status transition per call, transactionally, then notifies
    listeners.
    """

    entity_name = "Sale"

    def __init__(
        self,
        session: Session,
        repository: Optional[SaleRepository] = None,
        event_bus: Optional[EventBus] = None,
        unit_of_work: Optional[SqlAlchemyUnitOfWork] = None,
    ):
        super().__init__(
            session,
            repository_class=SaleRepository,
            repository=repository,
            event_bus=event_bus,
            unit_of_work=unit_of_work,
        )

    @validate_input(validate_status_command)
    async def update_status(self, command: UpdateSaleStatusCommand) -> Sale:
        """
        Move a sale to the requested status.

        Args:
            command: Sale id and target status

        Returns:
            The updated sale

        Raises:
            ValidationException: If the command is malformed; nothing is loaded
            EntityNotFoundException: If the sale does not exist
            InvalidStateException: If the transition is not allowed, including a
                product above the quantity limit on Close; nothing is persisted
            CommitFailedException: If the unit of work could not commit
            ConcurrentModificationException: If another transaction changed the sale
        """
        sale_id = command.sale_id if isinstance(command.sale_id, uuid.UUID) else uuid.UUID(str(command.sale_id))
        target = _parse_status(command.status)

        operation = asyncio.ensure_future(self._transition_and_publish(sale_id, target))
        try:
            return await asyncio.shield(operation)
        except asyncio.CancelledError:
            logger.warning(
                f"Cancelled while moving sale {sale_id} to {target.value}; "
                f"the update carries on in the background"
            )
            raise

    async def _transition_and_publish(self, sale_id: uuid.UUID, target: SaleStatus) -> Sale:
        sale = await asyncio.to_thread(self._apply_transition, sale_id, target)

        await self._publish_async(EventTopics.SALE_STATUS_CHANGED, SaleStatusChangedEvent.from_sale(sale))
        if target == SaleStatus.CANCELLED:
            await self._publish_async(EventTopics.SALE_CANCELLED, SaleCancelledEvent.from_sale(sale))
        return sale

    def _apply_transition(self, sale_id: uuid.UUID, target: SaleStatus) -> Sale:
        with self.transaction("sale status update transaction"):
            sale = self.repository.get_by_id_with_items(sale_id)
            if sale is None:
                raise EntityNotFoundException("Sale", sale_id)

            previous = sale.status
            TRANSITIONS[target](sale)
            self.repository.update(sale)

        logger.info(
            f"Sale {sale.sale_number} ({sale.id}) moved from {previous.value} to "
            f"{sale.status.value}, total {sale.total_amount}"
        )
        return sale
