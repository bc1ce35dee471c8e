# tests/domain/test_sale_item.py
import uuid
from decimal import Decimal

import pytest

from salesdesk.core.exceptions import InvalidArgumentException, InvalidStateException
from salesdesk.db.models.sales import SaleItem


def make_item(quantity=5, unit_price="10.00", discount=0):
    return SaleItem(uuid.uuid4(), uuid.uuid4(), quantity, Decimal(unit_price), discount)


@pytest.mark.parametrize(
    "quantity, unit_price, discount, expected",
    [
        (1, "10.00", 0, "10"),
        (20, "10.00", 0, "200"),
        (5, "10.00", 10, "45"),
        (15, "20.00", 20, "240"),
        (3, "9.99", 100, "0"),
        (7, "0.01", "12.5", "0.06125"),
    ],
)
def test_total_amount_is_exact(quantity, unit_price, discount, expected):
    item = make_item(quantity, unit_price, discount)
    assert item.total_amount == Decimal(expected)
    assert item.validate().is_valid


def test_new_item_is_active_and_untouched():
    item = make_item()
    assert item.is_cancelled is False
    assert item.updated_at is None
    assert item.created_at is not None


def test_validate_reports_every_broken_field():
    item = SaleItem(None, None, 21, Decimal("10000.01"), Decimal("101"))
    errors = item.validate().to_dict()

    assert errors["sale_id"] == ["Sale ID is required"]
    assert errors["product_id"] == ["Product ID is required"]
    assert errors["quantity"] == ["Quantity cannot exceed 20 items per sale item"]
    assert errors["unit_price"] == ["Unit price cannot exceed $10,000"]
    assert errors["discount"] == ["Discount cannot exceed 100%"]
    assert "total_amount" in errors


def test_validate_rejects_zero_quantity_and_price():
    errors = make_item(quantity=0, unit_price="0").validate().to_dict()
    assert errors["quantity"] == ["Quantity must be greater than 0"]
    assert errors["unit_price"] == ["Unit price must be greater than 0"]


def test_validate_rejects_negative_discount():
    errors = make_item(discount=-1).validate().to_dict()
    assert errors["discount"] == ["Discount cannot be negative"]


def test_empty_uuid_counts_as_missing():
    item = SaleItem(uuid.UUID(int=0), uuid.uuid4(), 1, Decimal("1.00"))
    assert "sale_id" in item.validate().to_dict()


def test_apply_discount_recomputes_total_and_touches():
    item = make_item(quantity=4, unit_price="25.00")
    item.apply_discount(10)

    assert item.discount == Decimal("10")
    assert item.total_amount == Decimal("90")
    assert item.updated_at is not None


@pytest.mark.parametrize("percentage", [-1, Decimal("100.01")])
def test_apply_discount_out_of_range(percentage):
    item = make_item()
    with pytest.raises(InvalidArgumentException):
        item.apply_discount(percentage)
    assert item.discount == Decimal("0")


def test_apply_discount_to_cancelled_item_fails():
    item = make_item()
    item.cancel()
    with pytest.raises(InvalidStateException):
        item.apply_discount(10)


def test_cancel_and_reactivate():
    item = make_item()
    item.cancel()
    assert item.is_cancelled

    with pytest.raises(InvalidStateException, match="already cancelled"):
        item.cancel()

    item.reactivate()
    assert not item.is_cancelled

    with pytest.raises(InvalidStateException, match="not cancelled"):
        item.reactivate()


def test_update_item_info_replaces_fields():
    item = make_item()
    product_id = uuid.uuid4()
    item.update_item_info(item.sale_id, product_id, 2, Decimal("30.00"), 50)

    assert item.product_id == product_id
    assert item.total_amount == Decimal("30")
    assert item.updated_at is not None


def test_update_item_info_on_cancelled_item_fails():
    item = make_item()
    item.cancel()
    with pytest.raises(InvalidStateException):
        item.update_item_info(item.sale_id, item.product_id, 1, Decimal("1.00"))
