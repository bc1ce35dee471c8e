# File: salesdesk/core/events.py

from typing import Dict, Any, Callable, List, Optional
from collections import defaultdict
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
import uuid
import asyncio
import inspect
import json
import logging

from fastapi import FastAPI

from salesdesk.core.utils import utcnow, serialize_value

logger = logging.getLogger(__name__)


class EventTopics:
    """Topic names sales events are published under."""

    SALE_CREATED = "sale.created"
    SALE_MODIFIED = "sale.modified"
    SALE_CANCELLED = "sale.cancelled"
    SALE_STATUS_CHANGED = "sale.status.changed"
    SALE_ITEM_CANCELLED = "sale.item.cancelled"


# --- Base DomainEvent ---
@dataclass(eq=False)
class DomainEvent:
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    # Stamped when the event is built, immediately before publication
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: serialize_value(getattr(self, f.name)) for f in fields(self)}
        result["event_type"] = self.__class__.__name__
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


# --- Sale Event Definitions ---
@dataclass(eq=False)
class SaleCreatedEvent(DomainEvent):
    sale_id: Optional[uuid.UUID] = None
    sale_number: str = ""
    sale_date: Optional[datetime] = None
    customer_id: Optional[uuid.UUID] = None
    branch_id: Optional[uuid.UUID] = None
    status: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_sale(cls, sale) -> "SaleCreatedEvent":
        return cls(
            sale_id=sale.id,
            sale_number=sale.sale_number,
            sale_date=sale.sale_date,
            customer_id=sale.customer_id,
            branch_id=sale.branch_id,
            status=sale.status.value,
            created_at=sale.created_at,
        )


@dataclass(eq=False)
class SaleModifiedEvent(DomainEvent):
    sale_id: Optional[uuid.UUID] = None
    sale_number: str = ""
    sale_date: Optional[datetime] = None
    customer_id: Optional[uuid.UUID] = None
    branch_id: Optional[uuid.UUID] = None
    status: str = ""
    total_amount: Decimal = Decimal("0")
    updated_at: Optional[datetime] = None

    @classmethod
    def from_sale(cls, sale) -> "SaleModifiedEvent":
        return cls(
            sale_id=sale.id,
            sale_number=sale.sale_number,
            sale_date=sale.sale_date,
            customer_id=sale.customer_id,
            branch_id=sale.branch_id,
            status=sale.status.value,
            total_amount=sale.total_amount,
            updated_at=sale.updated_at,
        )


@dataclass(eq=False)
class SaleCancelledEvent(DomainEvent):
    sale_id: Optional[uuid.UUID] = None
    sale_number: str = ""
    sale_date: Optional[datetime] = None
    customer_id: Optional[uuid.UUID] = None
    branch_id: Optional[uuid.UUID] = None
    total_amount: Decimal = Decimal("0")
    updated_at: Optional[datetime] = None

    @classmethod
    def from_sale(cls, sale) -> "SaleCancelledEvent":
        return cls(
            sale_id=sale.id,
            sale_number=sale.sale_number,
            sale_date=sale.sale_date,
            customer_id=sale.customer_id,
            branch_id=sale.branch_id,
            total_amount=sale.total_amount,
            updated_at=sale.updated_at,
        )


@dataclass(eq=False)
class SaleStatusChangedEvent(DomainEvent):
    """Fired after a status transition has been committed."""

    sale_id: Optional[uuid.UUID] = None
    sale_number: str = ""
    status: str = ""
    total_amount: Decimal = Decimal("0")
    customer_id: Optional[uuid.UUID] = None
    branch_id: Optional[uuid.UUID] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_sale(cls, sale) -> "SaleStatusChangedEvent":
        return cls(
            sale_id=sale.id,
            sale_number=sale.sale_number,
            status=sale.status.value,
            total_amount=sale.total_amount,
            customer_id=sale.customer_id,
            branch_id=sale.branch_id,
            updated_at=sale.updated_at,
        )


@dataclass(eq=False)
class SaleItemCancelledEvent(DomainEvent):
    sale_item_id: Optional[uuid.UUID] = None
    sale_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None
    quantity: int = 0
    unit_price: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    updated_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item) -> "SaleItemCancelledEvent":
        return cls(
            sale_item_id=item.id,
            sale_id=item.sale_id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_amount=item.total_amount,
            updated_at=item.updated_at,
        )


class EventBus:
    """
    Topic-based event bus with both synchronous and asynchronous delivery.

    Every published message is logged with its JSON payload; subscribers are
    optional. Handler failures are caught and logged per handler and never
    reach the publisher.

    Usage:
        global_event_bus.subscribe(EventTopics.SALE_CREATED, handle_sale_created)
        global_event_bus.publish(EventTopics.SALE_CREATED, SaleCreatedEvent.from_sale(sale))

        await global_event_bus.publish_async(
            EventTopics.SALE_STATUS_CHANGED, SaleStatusChangedEvent.from_sale(sale)
        )
    """

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = defaultdict(list)

    def _log_message(self, topic: str, event: DomainEvent) -> None:
        logger.info(
            f"Message published to topic '{topic}' | Type: {type(event).__name__} | "
            f"Message: {event.to_json()}"
        )

    def publish(self, topic: str, event: DomainEvent) -> None:
        """
        Publish an event synchronously to all handlers registered for a topic.

        Args:
            topic: Topic name, see EventTopics
            event: The domain event to publish

        Note:
            - Async handlers are skipped with a warning when called synchronously
            - All handler exceptions are caught and logged
        """
        self._log_message(topic, event)
        for handler in list(self.subscribers.get(topic, [])):
            self._call_handler_sync(handler, topic, event)

    def _call_handler_sync(self, handler: Callable, topic: str, event: DomainEvent):
        try:
            if inspect.iscoroutinefunction(handler):
                logger.warning(
                    f"Sync call to async handler {handler.__name__} for {topic}. Use publish_async."
                )
            else:
                handler(event)
        except Exception as e:
            logger.error(
                f"Error in sync handler {handler.__name__} for {topic} ID {event.event_id}: {e}",
                exc_info=True,
            )

    async def publish_async(self, topic: str, event: DomainEvent) -> None:
        """
        Publish an event asynchronously to all handlers registered for a topic.

        Args:
            topic: Topic name, see EventTopics
            event: The domain event to publish

        Note:
            - Sync handlers are run through asyncio.to_thread()
            - Handlers run concurrently and are gathered with exception handling
        """
        self._log_message(topic, event)
        handlers = list(self.subscribers.get(topic, []))
        if not handlers:
            return
        coros = [
            handler(event)
            if inspect.iscoroutinefunction(handler)
            else asyncio.to_thread(handler, event)
            for handler in handlers
        ]
        results = await asyncio.gather(*coros, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Error in handler '{getattr(handler, '__name__', repr(handler))}' "
                    f"for {topic} ID {event.event_id}: {result}",
                    exc_info=result,
                )

    def subscribe(self, topic: str, handler: Callable) -> None:
        """
        Subscribe a handler to a topic.

        Args:
            topic: Topic name
            handler: Callable to handle the event (sync or async)
        """
        self.subscribers[topic].append(handler)
        logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {topic}")

    def unsubscribe(self, topic: str, handler: Callable) -> bool:
        """
        Unsubscribe a handler from a topic.

        Returns:
            True if handler was found and removed, False otherwise
        """
        try:
            self.subscribers[topic].remove(handler)
        except ValueError:
            return False
        logger.debug(f"Unsubscribed handler {getattr(handler, '__name__', repr(handler))} from {topic}")
        return True

    def clear_subscriptions(self) -> None:
        """Clear all event subscriptions."""
        self.subscribers.clear()
        logger.debug("Cleared all event subscriptions")


# Global event bus instance - use this throughout the application
global_event_bus = EventBus()


def setup_event_handlers(app: FastAPI) -> None:
    """
    Set up FastAPI lifecycle logging for the event bus.

    Args:
        app: FastAPI application instance
    """

    @app.on_event("startup")
    async def startup_event():
        topics = sorted(global_event_bus.subscribers)
        logger.info(f"Event bus ready, topics with subscribers: {topics}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutting down")
        global_event_bus.clear_subscriptions()
