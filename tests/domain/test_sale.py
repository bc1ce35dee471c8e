# tests/domain/test_sale.py
import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from salesdesk.core.exceptions import (
    EntityNotFoundException,
    InvalidArgumentException,
    InvalidStateException,
)
from salesdesk.core.utils import utcnow
from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.sales import Sale, SaleItem

PRODUCT_A = uuid.uuid4()
PRODUCT_B = uuid.uuid4()


def make_sale(number="S-001"):
    return Sale(number, utcnow() - timedelta(hours=1), uuid.uuid4(), uuid.uuid4())


def add(sale, product_id, quantity, unit_price="10.00", discount=0):
    return sale.add_item(SaleItem(sale.id, product_id, quantity, Decimal(unit_price), discount))


def active_total(sale):
    return sum((i.total_amount for i in sale.items if not i.is_cancelled), Decimal("0"))


class TestSaleBasics:
    def test_new_sale_is_pending_and_empty(self):
        sale = make_sale()
        assert sale.status == SaleStatus.PENDING
        assert sale.total_amount == Decimal("0")
        assert sale.items == []
        assert sale.validate().is_valid

    def test_validate_header(self):
        sale = Sale(" ", utcnow() + timedelta(days=1), uuid.UUID(int=0), None)
        errors = sale.validate().to_dict()

        assert errors["sale_number"] == ["Sale number is required"]
        assert errors["sale_date"] == ["Sale date cannot be in the future"]
        assert errors["customer_id"] == ["Customer ID is required"]
        assert errors["branch_id"] == ["Branch ID is required"]

    def test_sale_number_length(self):
        errors = make_sale("X" * 51).validate().to_dict()
        assert "sale_number" in errors

    def test_update_sale_info(self):
        sale = make_sale()
        customer_id = uuid.uuid4()
        sale.update_sale_info("S-002", sale.sale_date, customer_id, sale.branch_id)

        assert sale.sale_number == "S-002"
        assert sale.customer_id == customer_id
        assert sale.updated_at is not None

    def test_update_cancelled_sale_fails(self):
        sale = make_sale()
        sale.cancel()
        with pytest.raises(InvalidStateException, match="Cannot update a cancelled sale"):
            sale.update_sale_info("S-002", sale.sale_date, sale.customer_id, sale.branch_id)


class TestItemManagement:
    def test_add_item_updates_total(self):
        sale = make_sale()
        item = add(sale, PRODUCT_A, 2)
        add(sale, PRODUCT_B, 1, "5.50")

        assert item.sale_id == sale.id
        assert sale.total_amount == Decimal("25.50")
        assert sale.get_total_quantity() == 3
        assert sale.updated_at is not None

    def test_add_null_item_fails(self):
        with pytest.raises(InvalidArgumentException, match="Sale item cannot be null"):
            make_sale().add_item(None)

    def test_remove_item(self):
        sale = make_sale()
        keep = add(sale, PRODUCT_A, 2)
        drop = add(sale, PRODUCT_B, 1)

        sale.remove_item(drop.id)

        assert sale.items == [keep]
        assert sale.total_amount == Decimal("20")

    def test_remove_unknown_item(self):
        with pytest.raises(EntityNotFoundException):
            make_sale().remove_item(uuid.uuid4())

    def test_cancel_item_excludes_it_from_total(self):
        sale = make_sale()
        add(sale, PRODUCT_A, 2)
        item = add(sale, PRODUCT_B, 3)

        sale.cancel_item(item.id)

        assert item.is_cancelled
        assert sale.get_active_items() == [sale.items[0]]
        assert sale.total_amount == Decimal("20")
        assert sale.get_total_quantity() == 2

    def test_update_item_keeps_discount(self):
        sale = make_sale()
        item = add(sale, PRODUCT_A, 2, discount=50)

        sale.update_item(item.id, PRODUCT_B, 4, Decimal("20.00"))

        assert item.product_id == PRODUCT_B
        assert item.discount == Decimal("50")
        assert item.total_amount == Decimal("40")
        assert sale.total_amount == Decimal("40")

    def test_apply_discount_to_all_items(self):
        sale = make_sale()
        add(sale, PRODUCT_A, 2)
        cancelled = add(sale, PRODUCT_B, 1)
        sale.cancel_item(cancelled.id)

        sale.apply_discount_to_all_items(25)

        assert sale.items[0].discount == Decimal("25")
        assert cancelled.discount == Decimal("0")
        assert sale.total_amount == Decimal("15")

    def test_apply_discount_to_all_items_checks_range_first(self):
        sale = make_sale()
        add(sale, PRODUCT_A, 2, discount=5)
        with pytest.raises(InvalidArgumentException):
            sale.apply_discount_to_all_items(101)
        assert sale.items[0].discount == Decimal("5")

    @pytest.mark.parametrize("transition", [Sale.close, Sale.cancel, Sale.pay])
    def test_item_changes_require_pending(self, transition):
        sale = make_sale()
        item = add(sale, PRODUCT_A, 1)
        transition(sale)

        with pytest.raises(InvalidStateException):
            add(sale, PRODUCT_A, 1)
        with pytest.raises(InvalidStateException):
            sale.remove_item(item.id)
        with pytest.raises(InvalidStateException):
            sale.apply_discount_to_all_items(10)


class TestTransitions:
    def test_close_without_items_fails(self):
        sale = make_sale()
        with pytest.raises(InvalidStateException, match="Cannot close a sale with no items"):
            sale.close()
        assert sale.status == SaleStatus.PENDING

    def test_close_counts_cancelled_items(self):
        sale = make_sale()
        item = add(sale, PRODUCT_A, 2)
        sale.cancel_item(item.id)

        sale.close()

        assert sale.status == SaleStatus.CLOSED
        assert sale.total_amount == Decimal("0")

    def test_close_applies_volume_discount(self):
        sale = make_sale()
        item = add(sale, PRODUCT_A, 5)

        sale.close()

        assert sale.status == SaleStatus.CLOSED
        assert item.discount == Decimal("10")
        assert item.total_amount == Decimal("45")
        assert sale.total_amount == Decimal("45")

    def test_close_only_from_pending(self):
        sale = make_sale()
        add(sale, PRODUCT_A, 1)
        sale.close()
        with pytest.raises(InvalidStateException, match="Only pending sales can be closed"):
            sale.close()

    def test_close_over_limit_keeps_everything(self):
        sale = make_sale()
        first = add(sale, PRODUCT_A, 20, discount=5)
        second = add(sale, PRODUCT_A, 5, discount=5)
        total_before = sale.total_amount

        with pytest.raises(InvalidStateException, match="Cannot sell more than 20 identical items"):
            sale.close()

        assert sale.status == SaleStatus.PENDING
        assert first.discount == Decimal("5")
        assert second.discount == Decimal("5")
        assert sale.total_amount == total_before

    def test_cancel_cascades_to_items(self):
        sale = make_sale()
        first = add(sale, PRODUCT_A, 1)
        second = add(sale, PRODUCT_B, 2)
        sale.cancel_item(first.id)

        sale.cancel()

        assert sale.status == SaleStatus.CANCELLED
        assert first.is_cancelled and second.is_cancelled
        assert sale.total_amount == Decimal("0")

    def test_cancel_twice_fails_without_mutation(self):
        sale = make_sale()
        sale.cancel()
        touched = sale.updated_at
        with pytest.raises(InvalidStateException, match="Sale is already cancelled"):
            sale.cancel()
        assert sale.updated_at == touched

    def test_reactivate_cascades_to_items(self):
        sale = make_sale()
        first = add(sale, PRODUCT_A, 1)
        second = add(sale, PRODUCT_B, 2)
        sale.cancel()

        sale.reactivate()

        assert sale.status == SaleStatus.PENDING
        assert not first.is_cancelled and not second.is_cancelled
        assert sale.total_amount == active_total(sale) == Decimal("30")

    def test_reactivate_requires_cancelled(self):
        sale = make_sale()
        with pytest.raises(InvalidStateException, match="Sale is not cancelled"):
            sale.reactivate()
        assert sale.updated_at is None

    def test_pay_from_any_status_but_paid(self):
        sale = make_sale()
        sale.cancel()
        sale.pay()
        assert sale.status == SaleStatus.PAID

        with pytest.raises(InvalidStateException, match="Sale is already paid"):
            sale.pay()

    def test_get_item_not_found(self):
        with pytest.raises(EntityNotFoundException):
            make_sale().get_item(uuid.uuid4())
