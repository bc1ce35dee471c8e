# File: salesdesk/core/discounts.py
"""
Volume discount rules applied when a sale is closed.

The discount for a product depends only on the total active quantity of that
product within one sale:

    1 - 3 units   ->  0%
    4 - 9 units   -> 10%
    10 - 20 units -> 20%
    more than 20  -> not allowed

Tiers are inclusive at both ends. Computing the plan never mutates the sale,
so a rejected sale keeps every item exactly as it was.
"""

import logging
import uuid
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple

from salesdesk.core.exceptions import InvalidStateException

logger = logging.getLogger(__name__)

MAX_IDENTICAL_ITEMS = 20


class DiscountTier(NamedTuple):
    min_quantity: int
    max_quantity: int
    percentage: Decimal


DISCOUNT_TIERS = (
    DiscountTier(4, 9, Decimal("10")),
    DiscountTier(10, MAX_IDENTICAL_ITEMS, Decimal("20")),
)

NO_DISCOUNT = Decimal("0")


def discount_for_quantity(total_quantity: int) -> Decimal:
    """
    Look up the discount percentage for a per-product quantity.

    Args:
        total_quantity: Summed quantity of one product's active items

    Returns:
        Discount percentage between 0 and 100

    Raises:
        InvalidStateException: If the quantity exceeds the per-product limit
    """
    if total_quantity > MAX_IDENTICAL_ITEMS:
        raise InvalidStateException(
            f"Cannot sell more than {MAX_IDENTICAL_ITEMS} identical items.",
            details={"quantity": total_quantity, "limit": MAX_IDENTICAL_ITEMS},
        )
    for tier in DISCOUNT_TIERS:
        if tier.min_quantity <= total_quantity <= tier.max_quantity:
            return tier.percentage
    return NO_DISCOUNT


def group_active_items(items: Iterable) -> "OrderedDict[uuid.UUID, List]":
    """Group non-cancelled items by product, preserving first-seen order."""
    groups: "OrderedDict[uuid.UUID, List]" = OrderedDict()
    for item in items:
        if item.is_cancelled:
            continue
        groups.setdefault(item.product_id, []).append(item)
    return groups


def plan_volume_discounts(items: Iterable) -> Dict[uuid.UUID, Decimal]:
    """
    Compute the discount each product group should receive.

    Every group is checked before any result is returned, so callers can rely
    on a successful plan covering the whole sale.

    Args:
        items: Sale items, cancelled ones included

    Returns:
        Mapping of product id to discount percentage

    Raises:
        InvalidStateException: If any product has more than the allowed quantity
    """
    plan: Dict[uuid.UUID, Decimal] = {}
    for product_id, group in group_active_items(items).items():
        total_quantity = sum(item.quantity for item in group)
        if total_quantity > MAX_IDENTICAL_ITEMS:
            raise InvalidStateException(
                f"Cannot sell more than {MAX_IDENTICAL_ITEMS} identical items. "
                f"Product {product_id} has {total_quantity} items.",
                details={"product_id": str(product_id), "quantity": total_quantity},
            )
        plan[product_id] = discount_for_quantity(total_quantity)
    return plan


def apply_volume_discounts(sale) -> Dict[uuid.UUID, Decimal]:
    """
    Apply the volume discount tiers to every active item of a sale.

    Any discount previously set on an item is replaced, including being
    cleared to 0% for small quantities. Running it twice on unchanged items
    yields the same result.

    Args:
        sale: Sale whose items should be re-priced

    Returns:
        The applied plan, product id to percentage

    Raises:
        InvalidStateException: If any product exceeds the per-product limit;
            no item is modified in that case
    """
    plan = plan_volume_discounts(sale.items)
    for product_id, group in group_active_items(sale.items).items():
        percentage = plan[product_id]
        for item in group:
            item.apply_discount(percentage)
        logger.debug(
            f"Sale {sale.id}: product {product_id} x{sum(i.quantity for i in group)} -> {percentage}%"
        )
    return plan
