# File: salesdesk/core/validation.py
import functools
import inspect
import re
import uuid
from typing import Dict, List, Any, Callable

from salesdesk.core.exceptions import ValidationException

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
# E.164 with a 10 to 14 digit subscriber number after the country digit
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{10,14}$")


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        """Initialize an empty validation result."""
        self.errors: Dict[str, List[str]] = {}

    def add_error(self, field: str, message: str) -> None:
        """
        Add an error for a specific field.

        Args:
            field: Field name with the error
            message: Error message
        """
        if field not in self.errors:
            self.errors[field] = []
        self.errors[field].append(message)

    @property
    def is_valid(self) -> bool:
        """
        Check if validation passed (no errors).

        Returns:
            True if validation passed, False otherwise
        """
        return len(self.errors) == 0

    def to_dict(self) -> Dict[str, List[str]]:
        """
        Convert validation result to dictionary.

        Returns:
            Dictionary of field names to error messages
        """
        return self.errors

    def raise_if_invalid(self, message: str = "Validation failed") -> None:
        """
        Raise a ValidationException carrying the collected errors.

        Raises:
            ValidationException: If any error was recorded
        """
        if not self.is_valid:
            raise ValidationException(message, self.to_dict())


def validate_input(validator: Callable) -> Callable:
    """
    Decorator to validate the first argument after ``self`` of a service method.

    The argument may be passed positionally or by keyword. Works for both plain
    and coroutine methods; for coroutines validation runs before the first
    await, so an invalid input never reaches the body.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)
        parameters = list(signature.parameters)
        input_name = parameters[1] if len(parameters) > 1 else None

        def _check(self, args, kwargs) -> None:
            bound = signature.bind_partial(self, *args, **kwargs)
            if input_name in bound.arguments:
                result = validator(bound.arguments[input_name])
            else:
                result = ValidationResult()
                result.add_error("input", "No data provided for validation")
            result.raise_if_invalid("Input validation failed")

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                _check(self, args, kwargs)
                return await func(self, *args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            _check(self, args, kwargs)
            return func(self, *args, **kwargs)

        return wrapper

    return decorator


# Common validators
def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if email is valid, False otherwise
    """
    return bool(EMAIL_PATTERN.match(email))


def validate_phone(phone: str) -> bool:
    """
    Validate an international phone number such as +5511999998888.

    Args:
        phone: Phone number to validate

    Returns:
        True if phone is valid, False otherwise
    """
    return bool(PHONE_PATTERN.match(phone))


def is_empty_id(value: Any) -> bool:
    """True for None, blank strings, and the all-zero UUID."""
    if value is None:
        return True
    if isinstance(value, uuid.UUID):
        return value.int == 0
    if isinstance(value, str):
        if not value.strip():
            return True
        try:
            return uuid.UUID(value).int == 0
        except ValueError:
            return False
    return False
