# File: salesdesk/repositories/base_repository.py

from typing import Generic, TypeVar, Dict, Any, Optional, List, Type, Tuple
import logging
import uuid

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from salesdesk.core.exceptions import ConcurrentModificationException

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Base repository class providing common CRUD operations for all entities using
    modern SQLAlchemy select() syntax.

    Repositories flush so that database defaults and constraints apply early,
    but never commit; committing belongs to the unit of work.

    Attributes:
        session (Session): The SQLAlchemy session for database operations
        model (Type[T]): The SQLAlchemy model class this repository manages
    """

    model: Optional[Type[T]] = None

    def __init__(self, session: Session, model: Optional[Type[T]] = None):
        """
        Initialize the repository with a database session and the specific model.

        Args:
            session (Session): SQLAlchemy database session
            model (Type[T]): The model class; subclasses usually set it as a class attribute
        """
        self.session = session
        if model is not None:
            self.model = model

    def _get_model(self) -> Type[T]:
        """Ensures the model is set before use."""
        if self.model is None:
            raise TypeError(f"Repository model is not set for {self.__class__.__name__}")
        return self.model

    def _apply_filters(self, stmt, filters: Dict[str, Any]):
        model_class = self._get_model()
        for key, value in filters.items():
            if value is not None and hasattr(model_class, key):
                stmt = stmt.where(getattr(model_class, key) == value)
        return stmt

    def get_by_id(self, id: uuid.UUID) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Args:
            id (uuid.UUID): The primary key of the entity

        Returns:
            Optional[T]: The entity if found, None otherwise
        """
        return self.session.get(self._get_model(), id)

    def list(self, skip: int = 0, limit: int = 100, **filters) -> List[T]:
        """
        Retrieve a list of entities with offset pagination.

        Args:
            skip (int): Number of records to skip (for pagination)
            limit (int): Maximum number of records to return
            **filters: Equality filters (field=value pairs); None values are ignored

        Returns:
            List[T]: List of entities matching the criteria, newest first
        """
        model_class = self._get_model()
        stmt = self._apply_filters(select(model_class), filters)
        if hasattr(model_class, "created_at"):
            stmt = stmt.order_by(model_class.created_at.desc(), model_class.id)
        stmt = stmt.offset(skip).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def count(self, **filters) -> int:
        """
        Count entities matching the given filters.

        Args:
            **filters: Filters to apply (field=value pairs)

        Returns:
            int: Count of matching entities
        """
        model_class = self._get_model()
        stmt = select(func.count(getattr(model_class, "id"))).select_from(model_class)
        stmt = self._apply_filters(stmt, filters)
        return self.session.execute(stmt).scalar_one()

    def list_page(self, page: int, size: int, **filters) -> Tuple[List[T], int]:
        """
        Return one page of entities and the total count.

        Args:
            page: 1-based page number
            size: Page size
        """
        items = self.list(skip=(page - 1) * size, limit=size, **filters)
        return items, self.count(**filters)

    def create(self, data: Dict[str, Any]) -> T:
        """
        Build and add a new entity from a dictionary of column values.

        Args:
            data (Dict[str, Any]): Dictionary containing entity field values

        Returns:
            T: The created entity
        """
        model_class = self._get_model()
        model_columns = {c.name for c in model_class.__table__.columns}
        filtered_data = {k: v for k, v in data.items() if k in model_columns}
        return self.add(model_class(**filtered_data))

    def add(self, entity: T) -> T:
        """Add an already constructed entity and flush it."""
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, entity: T) -> T:
        """
        Flush changes made to a loaded entity.

        Raises:
            ConcurrentModificationException: If the row's version changed underneath us
        """
        # A failed flush leaves the session unreadable until rollback
        entity_name = type(entity).__name__
        entity_id = getattr(entity, "id", None)
        try:
            self.session.flush()
        except StaleDataError as e:
            logger.warning(f"Stale update for {entity_name} {entity_id}: {e}")
            raise ConcurrentModificationException(
                f"{entity_name} was modified by another transaction"
            ) from e
        return entity

    def delete(self, id: uuid.UUID) -> bool:
        """
        Delete an entity by ID.

        Returns:
            bool: True if entity was deleted, False if not found
        """
        entity = self.get_by_id(id)
        if not entity:
            return False

        self.session.delete(entity)
        self.session.flush()
        return True
