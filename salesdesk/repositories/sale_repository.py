# File: salesdesk/repositories/sale_repository.py

from typing import List, Optional, Tuple
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.sales import Sale, SaleItem
from salesdesk.repositories.base_repository import BaseRepository


class SaleRepository(BaseRepository[Sale]):
    """
    Repository for the Sale aggregate.

    Loads used for state changes go through get_by_id_with_items, which brings
    the complete item collection and locks the sale row where supported.
    """

    model = Sale

    def __init__(self, session: Session):
        super().__init__(session)

    def get_by_id_with_items(self, id: uuid.UUID, lock: bool = True) -> Optional[Sale]:
        """
        Load a sale together with every one of its items.

        Args:
            id: Sale ID
            lock: Take a row lock on the sale (SELECT ... FOR UPDATE) for the
                rest of the transaction; ignored by dialects without support

        Returns:
            The sale, or None if it does not exist
        """
        stmt = (
            select(Sale)
            .where(Sale.id == id)
            .options(selectinload(Sale.items))
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update(of=Sale)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_sale_number(self, sale_number: str) -> Optional[Sale]:
        stmt = select(Sale).where(Sale.sale_number == sale_number)
        return self.session.execute(stmt).scalar_one_or_none()

    def search(
        self,
        page: int,
        size: int,
        sale_number: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        branch_id: Optional[uuid.UUID] = None,
        status: Optional[SaleStatus] = None,
    ) -> Tuple[List[Sale], int]:
        """
        Page through sales, newest first.

        Args:
            page: 1-based page number
            size: Page size
            sale_number: Substring match on the sale number
            customer_id: Only sales of this customer
            branch_id: Only sales made at this branch
            status: Only sales in this status

        Returns:
            Tuple of (sales on the page, total matching sales)
        """
        filters = {"customer_id": customer_id, "branch_id": branch_id, "status": status}
        stmt = self._apply_filters(select(Sale), filters)
        if sale_number:
            stmt = stmt.where(Sale.sale_number.ilike(f"%{sale_number}%"))

        total = self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        stmt = (
            stmt.options(selectinload(Sale.items))
            .order_by(Sale.sale_date.desc(), Sale.created_at.desc())
            .offset((page - 1) * size)
            .limit(size)
        )
        return list(self.session.execute(stmt).scalars().all()), total


class SaleItemRepository(BaseRepository[SaleItem]):
    """Read access to sale items; writes go through the Sale aggregate."""

    model = SaleItem

    def __init__(self, session: Session):
        super().__init__(session)

    def list_for_sale(self, sale_id: uuid.UUID, page: int, size: int) -> Tuple[List[SaleItem], int]:
        stmt = (
            select(SaleItem)
            .where(SaleItem.sale_id == sale_id)
            .order_by(SaleItem.created_at, SaleItem.id)
            .offset((page - 1) * size)
            .limit(size)
        )
        items = list(self.session.execute(stmt).scalars().all())
        return items, self.count(sale_id=sale_id)
