# File: salesdesk/repositories/product_repository.py

from typing import Dict, Iterable
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from salesdesk.db.models.product import Product
from salesdesk.repositories.base_repository import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Repository for Product entity operations."""

    model = Product

    def __init__(self, session: Session):
        super().__init__(session)

    def get_many(self, ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        """
        Fetch several products in one query.

        Returns:
            Mapping of product ID to product; missing IDs are absent
        """
        wanted = set(ids)
        if not wanted:
            return {}
        stmt = select(Product).where(Product.id.in_(wanted))
        return {p.id: p for p in self.session.execute(stmt).scalars().all()}
