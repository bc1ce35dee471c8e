# File: salesdesk/services/base_service.py

from typing import TypeVar, Generic, List, Optional, Type, Dict, Any, Tuple
from contextlib import contextmanager
import asyncio
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salesdesk.core.config import settings
from salesdesk.core.events import DomainEvent, EventBus, global_event_bus
from salesdesk.core.exceptions import (
    BusinessRuleException,
    CommitFailedException,
    ConcurrentModificationException,
    EntityNotFoundException,
    SalesDeskException,
    ValidationException,
)
from salesdesk.db.unit_of_work import SqlAlchemyUnitOfWork
from salesdesk.repositories.base_repository import BaseRepository

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseService(Generic[T]):
    """
    Base service for all SalesDesk services.

    Provides common functionality including:
    - Transaction management through a unit of work
    - Basic CRUD operations
    - Best-effort event publication
    """

    entity_name = "Entity"

    def __init__(
        self,
        session: Session,
        repository_class: Optional[Type[BaseRepository]] = None,
        repository: Optional[BaseRepository] = None,
        event_bus: Optional[EventBus] = None,
        unit_of_work: Optional[SqlAlchemyUnitOfWork] = None,
    ):
        """
        Initialize service with dependencies.

        Args:
            session: Database session for persistence operations
            repository_class: Repository class to instantiate (optional if repository is provided)
            repository: Repository instance (optional if repository_class is provided)
            event_bus: Event bus for domain events, defaults to the global bus
            unit_of_work: Unit of work, defaults to one over ``session``
        """
        self.session = session

        if repository is not None:
            self.repository = repository
        elif repository_class is not None:
            self.repository = repository_class(session)
        else:
            self.repository = None

        self.event_bus = event_bus if event_bus is not None else global_event_bus
        self.unit_of_work = unit_of_work or SqlAlchemyUnitOfWork(session)

    @contextmanager
    def transaction(self, operation: str = "transaction"):
        """
        Provide a transactional scope around operations.

        Changes are committed through the unit of work when the block exits
        normally and rolled back when it raises.

        Raises:
            CommitFailedException: If the unit of work could not commit
        """
        try:
            yield
        except Exception as e:
            self.unit_of_work.rollback()
            logger.error(f"{operation} failed, rolled back: {e}")
            transformed = self._transform_error(e)
            if transformed:
                raise transformed from e
            raise

        try:
            committed = self.unit_of_work.commit()
        except ConcurrentModificationException:
            raise
        except Exception as e:
            self.unit_of_work.rollback()
            raise CommitFailedException(
                f"Failed to commit {operation}", entity_type=self.entity_name
            ) from e
        if not committed:
            raise CommitFailedException(
                f"Failed to commit {operation}", entity_type=self.entity_name
            )

    def _transform_error(self, error: Exception) -> Optional[SalesDeskException]:
        """
        Transform database errors into domain exceptions.

        Returns:
            Transformed exception, or None to re-raise the original
        """
        if isinstance(error, IntegrityError):
            return BusinessRuleException(
                f"{self.entity_name} change violates a data integrity constraint",
                rule_name="INTEGRITY_CONSTRAINT",
                details={"error": str(error.orig)},
            )
        return None

    # --- Events ---

    def _events_enabled(self) -> bool:
        return self.event_bus is not None and settings.PUBLISH_EVENTS

    def _publish(self, topic: str, event: DomainEvent) -> None:
        """Publish after a commit; failures are logged and never raised."""
        if not self._events_enabled():
            return
        try:
            self.event_bus.publish(topic, event)
        except Exception as e:
            logger.error(
                f"Failed to publish {type(event).__name__} to '{topic}': {e}", exc_info=True
            )

    async def _publish_async(self, topic: str, event: DomainEvent) -> bool:
        """
        Publish after a commit without letting failures reach the caller.

        The publication is shielded: if the calling task is cancelled while
        publishing, delivery carries on in the background and the
        cancellation is propagated.

        Returns:
            True if the bus accepted the event
        """
        if not self._events_enabled():
            return False
        publication = asyncio.ensure_future(self.event_bus.publish_async(topic, event))
        try:
            await asyncio.shield(publication)
            return True
        except asyncio.CancelledError:
            logger.warning(
                f"Cancelled while publishing {type(event).__name__} to '{topic}'; "
                f"delivery left to run in the background"
            )
            raise
        except Exception as e:
            logger.error(
                f"Failed to publish {type(event).__name__} to '{topic}': {e}", exc_info=True
            )
            return False

    # --- Validation ---

    def _validate_entity(self, entity: Any, message: Optional[str] = None) -> None:
        result = entity.validate()
        if not result.is_valid:
            raise ValidationException(
                message or f"{self.entity_name} validation failed", result.to_dict()
            )

    # --- CRUD ---

    def get_by_id(self, id: uuid.UUID) -> Optional[T]:
        return self.repository.get_by_id(id)

    def get_entity_or_404(self, id: uuid.UUID) -> T:
        """
        Get an entity by ID or raise EntityNotFoundException.

        Args:
            id: Entity ID to retrieve

        Returns:
            Entity if found

        Raises:
            EntityNotFoundException: If entity is not found
        """
        entity = self.repository.get_by_id(id)
        if not entity:
            raise EntityNotFoundException(self.entity_name, id)
        return entity

    def list_page(self, page: int = 1, size: int = 10, **filters) -> Tuple[List[T], int]:
        """
        List entities one page at a time.

        Args:
            page: 1-based page number
            size: Page size
            **filters: Equality filters

        Returns:
            Tuple of (entities on the page, total count)
        """
        return self.repository.list_page(page, size, **filters)

    def create(self, data: Dict[str, Any]) -> T:
        """
        Create a new entity.

        Args:
            data: Dictionary of entity data

        Returns:
            Created entity

        Raises:
            ValidationException: If the entity breaks its own rules
        """
        with self.transaction(f"create {self.entity_name}"):
            entity = self.repository.model(**data)
            self._validate_entity(entity)
            self.repository.add(entity)

        logger.info(f"CREATE {self.entity_name} {entity.id}")
        return entity

    def update(self, id: uuid.UUID, data: Dict[str, Any]) -> T:
        """
        Update an existing entity.

        Args:
            id: Entity ID to update
            data: Dictionary of entity data to update

        Returns:
            Updated entity
        """
        with self.transaction(f"update {self.entity_name}"):
            entity = self.get_entity_or_404(id)
            self._apply_update(entity, data)
            self._validate_entity(entity)
            self.repository.update(entity)

        logger.info(f"UPDATE {self.entity_name} {id}")
        return entity

    def _apply_update(self, entity: T, data: Dict[str, Any]) -> None:
        """Copy column values onto the entity. Override to go through domain methods."""
        columns = entity.__table__.columns.keys()
        for key, value in data.items():
            if key in columns:
                setattr(entity, key, value)
        entity.touch()

    def delete(self, id: uuid.UUID) -> None:
        """
        Delete an entity by ID.

        Raises:
            EntityNotFoundException: If entity is not found
        """
        with self.transaction(f"delete {self.entity_name}"):
            if not self.repository.delete(id):
                raise EntityNotFoundException(self.entity_name, id)

        logger.info(f"DELETE {self.entity_name} {id}")
