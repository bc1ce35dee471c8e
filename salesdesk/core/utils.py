from datetime import datetime, date, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union
import uuid


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    All timestamps are stored without tzinfo and interpreted as UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert an aware datetime to naive UTC. Naive values are assumed to be UTC already.

    Args:
        value: Datetime to normalize

    Returns:
        Naive UTC datetime, or None
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Optional[Decimal]:
    """
    Coerce a numeric value to Decimal without going through binary float.

    Floats are converted via their shortest repr, so 0.1 becomes Decimal("0.1").

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric value: {value!r}")
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a numeric value: {value!r}") from e


def serialize_value(value: Any) -> Any:
    """
    Convert values to JSON-friendly primitives.
    Handles Decimal, UUID, enum values, timestamps, and nested structures.
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
