# File: salesdesk/services/sale_service.py
"""
Sale management service.

Creates, edits and deletes sales and manages their items. Every item change is
made through the Sale aggregate, so the Pending-only rule and the sale total
are enforced in one place. Status transitions live in SaleStatusService.
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging
import uuid

from sqlalchemy.orm import Session

from salesdesk.core.events import (
    EventBus,
    EventTopics,
    SaleCreatedEvent,
    SaleItemCancelledEvent,
    SaleModifiedEvent,
)
from salesdesk.core.exceptions import (
    BusinessRuleException,
    DuplicateEntityException,
    EntityNotFoundException,
)
from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.product import Product
from salesdesk.db.models.sales import Sale, SaleItem
from salesdesk.db.unit_of_work import SqlAlchemyUnitOfWork
from salesdesk.repositories.branch_repository import BranchRepository
from salesdesk.repositories.customer_repository import CustomerRepository
from salesdesk.repositories.product_repository import ProductRepository
from salesdesk.repositories.sale_repository import SaleItemRepository, SaleRepository
from salesdesk.schemas.sale import SaleCreate, SaleItemCreate, SaleItemUpdate, SaleUpdate
from salesdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)


class SaleService(BaseService[Sale]):
    """
    Service for managing sales and their items.

    Provides functionality for:
    - Creating sales with their initial items
    - Reading and searching sales
    - Editing the sale header
    - Adding, re-pricing, cancelling and removing items
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
        self.item_repository = SaleItemRepository(session)
        self.customer_repository = CustomerRepository(session)
        self.branch_repository = BranchRepository(session)
        self.product_repository = ProductRepository(session)

    # --- Lookups ---

    def _load_sale(self, sale_id: uuid.UUID) -> Sale:
        sale = self.repository.get_by_id_with_items(sale_id)
        if sale is None:
            raise EntityNotFoundException("Sale", sale_id)
        return sale

    def _ensure_unique_number(self, sale_number: str, sale_id: Optional[uuid.UUID] = None) -> None:
        existing = self.repository.get_by_sale_number(sale_number)
        if existing is not None and existing.id != sale_id:
            raise DuplicateEntityException(
                f"Sale with number {sale_number} already exists",
                details={"entity_type": "Sale", "sale_number": sale_number},
            )

    def _ensure_parties_exist(self, customer_id: uuid.UUID, branch_id: uuid.UUID) -> None:
        if self.customer_repository.get_by_id(customer_id) is None:
            raise EntityNotFoundException("Customer", customer_id)
        if self.branch_repository.get_by_id(branch_id) is None:
            raise EntityNotFoundException("Branch", branch_id)

    def _sellable_products(self, product_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        """
        Fetch the products being sold.

        Raises:
            EntityNotFoundException: If a product does not exist
            BusinessRuleException: If a product is inactive
        """
        product_ids = list(product_ids)
        products = self.product_repository.get_many(product_ids)
        for product_id in product_ids:
            product = products.get(product_id)
            if product is None:
                raise EntityNotFoundException("Product", product_id)
            if not product.is_active:
                raise BusinessRuleException(
                    f"Product {product.name} is not active and cannot be sold",
                    rule_name="PRODUCT_INACTIVE",
                    details={"product_id": str(product_id)},
                )
        return products

    def _build_item(self, sale: Sale, data: SaleItemCreate, product: Product) -> SaleItem:
        unit_price = data.unit_price if data.unit_price is not None else product.price
        item = SaleItem(sale.id, data.product_id, data.quantity, unit_price, data.discount)
        self._validate_entity(item, "Sale item validation failed")
        return item

    # --- Sales ---

    def create_sale(self, data: SaleCreate) -> Sale:
        """
        Create a Pending sale with its initial items.

        Args:
            data: Sale header and items

        Returns:
            The created sale

        Raises:
            ValidationException: If the sale or one of its items is invalid
            DuplicateEntityException: If the sale number is already used
            EntityNotFoundException: If the customer, branch or a product is missing
            BusinessRuleException: If a product is inactive
        """
        with self.transaction("sale creation transaction"):
            sale = Sale(data.sale_number, data.sale_date, data.customer_id, data.branch_id)
            self._validate_entity(sale)
            self._ensure_unique_number(sale.sale_number)
            self._ensure_parties_exist(sale.customer_id, sale.branch_id)

            products = self._sellable_products(item.product_id for item in data.items)
            for item_data in data.items:
                sale.add_item(self._build_item(sale, item_data, products[item_data.product_id]))

            self.repository.add(sale)

        logger.info(
            f"Created sale {sale.sale_number} ({sale.id}) with {len(sale.items)} items, "
            f"total {sale.total_amount}"
        )
        self._publish(EventTopics.SALE_CREATED, SaleCreatedEvent.from_sale(sale))
        return sale

    def get_sale(self, sale_id: uuid.UUID) -> Sale:
        sale = self.repository.get_by_id_with_items(sale_id, lock=False)
        if sale is None:
            raise EntityNotFoundException("Sale", sale_id)
        return sale

    def list_sales(
        self,
        page: int = 1,
        size: int = 10,
        sale_number: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        branch_id: Optional[uuid.UUID] = None,
        status: Optional[SaleStatus] = None,
    ) -> Tuple[List[Sale], int]:
        return self.repository.search(
            page,
            size,
            sale_number=sale_number,
            customer_id=customer_id,
            branch_id=branch_id,
            status=status,
        )

    def update_sale(self, sale_id: uuid.UUID, data: SaleUpdate) -> Sale:
        """
        Update the sale header. Omitted fields keep their current value.

        Raises:
            EntityNotFoundException: If the sale, customer or branch is missing
            InvalidStateException: If the sale is cancelled
            DuplicateEntityException: If the new sale number is already used
            ValidationException: If the updated sale is invalid
        """
        with self.transaction("sale update transaction"):
            sale = self._load_sale(sale_id)

            sale_number = data.sale_number if data.sale_number is not None else sale.sale_number
            sale_date = data.sale_date if data.sale_date is not None else sale.sale_date
            customer_id = data.customer_id if data.customer_id is not None else sale.customer_id
            branch_id = data.branch_id if data.branch_id is not None else sale.branch_id

            sale.update_sale_info(sale_number, sale_date, customer_id, branch_id)
            self._validate_entity(sale)
            self._ensure_unique_number(sale.sale_number, sale.id)
            self._ensure_parties_exist(sale.customer_id, sale.branch_id)
            self.repository.update(sale)

        logger.info(f"Updated sale {sale.sale_number} ({sale.id})")
        self._publish(EventTopics.SALE_MODIFIED, SaleModifiedEvent.from_sale(sale))
        return sale

    def delete_sale(self, sale_id: uuid.UUID) -> None:
        """
        Delete a sale and its items.

        Raises:
            EntityNotFoundException: If the sale does not exist
        """
        with self.transaction("sale deletion transaction"):
            if not self.repository.delete(sale_id):
                raise EntityNotFoundException("Sale", sale_id)

        logger.info(f"Deleted sale {sale_id}")

    # --- Items ---

    def add_item(self, sale_id: uuid.UUID, data: SaleItemCreate) -> SaleItem:
        """
        Add an item to a Pending sale.

        Raises:
            EntityNotFoundException: If the sale or product is missing
            InvalidStateException: If the sale is not pending
            BusinessRuleException: If the product is inactive
            ValidationException: If the item is invalid
        """
        with self.transaction("sale item creation transaction"):
            sale = self._load_sale(sale_id)
            sale.ensure_pending("add items to")

            product = self._sellable_products([data.product_id])[data.product_id]
            item = sale.add_item(self._build_item(sale, data, product))
            self.repository.update(sale)

        logger.info(f"Added item {item.id} to sale {sale.sale_number}, total now {sale.total_amount}")
        return item

    def get_item(self, sale_id: uuid.UUID, item_id: uuid.UUID) -> SaleItem:
        return self.get_sale(sale_id).get_item(item_id)

    def list_items(self, sale_id: uuid.UUID, page: int = 1, size: int = 10) -> Tuple[List[SaleItem], int]:
        if self.repository.get_by_id(sale_id) is None:
            raise EntityNotFoundException("Sale", sale_id)
        return self.item_repository.list_for_sale(sale_id, page, size)

    def update_item(self, sale_id: uuid.UUID, item_id: uuid.UUID, data: SaleItemUpdate) -> SaleItem:
        """
        Change an item's product and quantity.

        The item is re-priced from the product's current price and keeps the
        discount it already had.

        Raises:
            EntityNotFoundException: If the sale, item or product is missing
            InvalidStateException: If the sale is not pending or the item is cancelled
            ValidationException: If the changed item is invalid
        """
        with self.transaction("sale item update transaction"):
            sale = self._load_sale(sale_id)
            sale.ensure_pending("update items in")

            product = self._sellable_products([data.product_id])[data.product_id]
            item = sale.update_item(item_id, data.product_id, data.quantity, product.price)
            self._validate_entity(item, "Sale item validation failed")
            self.repository.update(sale)

        logger.info(f"Updated item {item.id} of sale {sale.sale_number}, total now {sale.total_amount}")
        return item

    def cancel_item(self, sale_id: uuid.UUID, item_id: uuid.UUID) -> SaleItem:
        """
        Cancel one item of a Pending sale. The item stays on the sale.

        Raises:
            EntityNotFoundException: If the sale or item is missing
            InvalidStateException: If the sale is not pending or the item is already cancelled
        """
        with self.transaction("sale item cancellation transaction"):
            sale = self._load_sale(sale_id)
            item = sale.cancel_item(item_id)
            self.repository.update(sale)
            event = SaleItemCancelledEvent.from_item(item)

        logger.info(f"Cancelled item {item_id} of sale {sale.sale_number}")
        self._publish(EventTopics.SALE_ITEM_CANCELLED, event)
        return item

    def remove_item(self, sale_id: uuid.UUID, item_id: uuid.UUID) -> None:
        """
        Delete one item from a Pending sale.

        Raises:
            EntityNotFoundException: If the sale or item is missing
            InvalidStateException: If the sale is not pending
        """
        with self.transaction("sale item deletion transaction"):
            sale = self._load_sale(sale_id)
            item = sale.remove_item(item_id)
            # Captured before the flush deletes the row
            event = SaleItemCancelledEvent.from_item(item)
            self.repository.update(sale)

        logger.info(f"Removed item {item_id} from sale {sale.sale_number}")
        self._publish(EventTopics.SALE_ITEM_CANCELLED, event)
