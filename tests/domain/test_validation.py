# tests/domain/test_validation.py
import asyncio
import uuid

import pytest

from salesdesk.core.exceptions import ValidationException
from salesdesk.core.validation import (
    ValidationResult,
    is_empty_id,
    validate_email,
    validate_input,
    validate_phone,
)
from salesdesk.db.models.enums import SaleStatus
from salesdesk.services.sale_status_service import (
    UpdateSaleStatusCommand,
    validate_status_command,
)


@pytest.mark.parametrize(
    "status",
    ["Closed", "closed", "CANCELLED", " Paid ", "Pending", SaleStatus.CLOSED],
)
def test_status_command_accepts_known_statuses(status):
    result = validate_status_command(UpdateSaleStatusCommand(uuid.uuid4(), status))
    assert result.is_valid


def test_status_command_requires_both_fields():
    errors = validate_status_command(UpdateSaleStatusCommand(None, None)).to_dict()
    assert errors == {"sale_id": ["Sale ID is required"], "status": ["Status is required"]}


def test_status_command_rejects_unknown_values():
    errors = validate_status_command(UpdateSaleStatusCommand("not-a-uuid", "Shipped")).to_dict()
    assert errors["sale_id"] == ["Sale ID must be a valid UUID"]
    assert errors["status"] == ["Status must be one of: Pending, Closed, Paid, Cancelled"]


def test_status_command_rejects_empty_uuid():
    errors = validate_status_command(UpdateSaleStatusCommand(str(uuid.UUID(int=0)), "Closed")).to_dict()
    assert "sale_id" in errors


def check_name(name):
    result = ValidationResult()
    if not name:
        result.add_error("name", "Name is required")
    return result


class Greeter:
    def __init__(self):
        self.calls = 0

    @validate_input(check_name)
    def greet(self, name):
        self.calls += 1
        return f"hello {name}"

    @validate_input(check_name)
    async def greet_later(self, name):
        self.calls += 1
        return f"hello {name}"


def test_validate_input_blocks_invalid_sync_calls():
    greeter = Greeter()
    with pytest.raises(ValidationException) as exc_info:
        greeter.greet("")
    assert exc_info.value.details["validation_errors"] == {"name": ["Name is required"]}
    assert greeter.calls == 0
    assert greeter.greet("ana") == "hello ana"


def test_validate_input_blocks_invalid_async_calls():
    greeter = Greeter()
    with pytest.raises(ValidationException):
        asyncio.run(greeter.greet_later(""))
    assert greeter.calls == 0
    assert asyncio.run(greeter.greet_later("ana")) == "hello ana"


def test_validate_input_reads_keyword_arguments():
    greeter = Greeter()
    with pytest.raises(ValidationException):
        greeter.greet(name="")
    assert greeter.calls == 0
    assert greeter.greet(name="ana") == "hello ana"
    assert asyncio.run(greeter.greet_later(name="bia")) == "hello bia"


def test_validate_input_requires_an_argument():
    greeter = Greeter()
    with pytest.raises(ValidationException) as exc_info:
        greeter.greet()
    assert exc_info.value.details["validation_errors"] == {
        "input": ["No data provided for validation"]
    }
    assert greeter.calls == 0


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        ("", True),
        ("   ", True),
        (uuid.UUID(int=0), True),
        (str(uuid.UUID(int=0)), True),
        (uuid.uuid4(), False),
        ("abc", False),
    ],
)
def test_is_empty_id(value, expected):
    assert is_empty_id(value) is expected


def test_contact_validators():
    assert validate_email("ana@example.com")
    assert not validate_email("ana@")
    assert validate_phone("+5511999998888")
    assert not validate_phone("5511999998888")
    assert not validate_phone("+0511999998888")
