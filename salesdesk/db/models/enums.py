from enum import Enum as PyEnum


class SaleStatus(str, PyEnum):
    """Enumeration of sale lifecycle states."""

    PENDING = "Pending"
    CLOSED = "Closed"
    PAID = "Paid"
    CANCELLED = "Cancelled"
