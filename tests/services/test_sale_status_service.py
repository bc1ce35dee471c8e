# tests/services/test_sale_status_service.py
"""
Tests for status transitions: ordering of validation, loading, commit and
publication, and what survives each kind of failure.
"""

import asyncio
import threading
import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from salesdesk.core.exceptions import (
    CommitFailedException,
    ConcurrentModificationException,
    EntityNotFoundException,
    InvalidStateException,
    ValidationException,
)
from salesdesk.db.models.enums import SaleStatus
from salesdesk.db.models.sales import Sale
from salesdesk.db.unit_of_work import SqlAlchemyUnitOfWork
from salesdesk.repositories.sale_repository import SaleRepository
from salesdesk.schemas.sale import SaleCreate, SaleItemCreate
from salesdesk.services.sale_service import SaleService
from salesdesk.services.sale_status_service import SaleStatusService, UpdateSaleStatusCommand

from conftest import ConcurrentWriterSaleRepository, RecordingEventBus


class RefusingUnitOfWork(SqlAlchemyUnitOfWork):
    """Unit of work whose commit is always rejected by the database."""

    def commit(self) -> bool:
        self.session.rollback()
        return False


class SlowEventBus(RecordingEventBus):
    """Holds publication until released, so the caller can be cancelled meanwhile."""

    def __init__(self):
        super().__init__()
        self.started = None
        self.release = None

    async def publish_async(self, topic, event):
        self.started.set()
        await self.release.wait()
        await super().publish_async(topic, event)


@pytest.fixture
def make_sale(db, seed, yesterday):
    def _make(*lines, number="S-100"):
        data = SaleCreate(
            sale_number=number,
            sale_date=yesterday,
            customer_id=seed["customer_id"],
            branch_id=seed["branch_id"],
            items=[
                SaleItemCreate(product_id=seed["products"][key], quantity=quantity, **extra)
                for key, quantity, extra in lines
            ],
        )
        return SaleService(db, event_bus=RecordingEventBus()).create_sale(data).id

    return _make


def reload(session_factory, sale_id) -> Sale:
    session = session_factory()
    sale = SaleRepository(session).get_by_id_with_items(sale_id, lock=False)
    session.close()
    return sale


def change_status(db, bus, sale_id, status):
    service = SaleStatusService(db, event_bus=bus)
    return asyncio.run(service.update_status(UpdateSaleStatusCommand(sale_id, status)))


class TestCloseScenarios:
    def test_five_units_get_ten_percent(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("A", 5, {}))

        sale = change_status(db, event_bus, sale_id, "Closed")

        assert sale.status == SaleStatus.CLOSED
        stored = reload(session_factory, sale_id)
        assert stored.status == SaleStatus.CLOSED
        assert stored.items[0].discount == Decimal("10")
        assert stored.items[0].total_amount == Decimal("45")
        assert stored.total_amount == Decimal("45")

    def test_fifteen_units_get_twenty_percent(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("B", 15, {}))

        change_status(db, event_bus, sale_id, "Closed")

        stored = reload(session_factory, sale_id)
        assert stored.items[0].discount == Decimal("20")
        assert stored.items[0].total_amount == Decimal("240")

    def test_twenty_five_units_fail_and_nothing_changes(
        self, db, event_bus, make_sale, session_factory
    ):
        sale_id = make_sale(("C", 20, {"discount": Decimal("5")}), ("C", 5, {"discount": Decimal("5")}))

        with pytest.raises(InvalidStateException, match="Cannot sell more than 20 identical items"):
            change_status(db, event_bus, sale_id, "Closed")

        stored = reload(session_factory, sale_id)
        assert stored.status == SaleStatus.PENDING
        assert [item.discount for item in stored.items] == [Decimal("5"), Decimal("5")]
        assert event_bus.published == []

    def test_close_without_items(self, db, event_bus, make_sale):
        sale_id = make_sale()
        with pytest.raises(InvalidStateException, match="no items"):
            change_status(db, event_bus, sale_id, "Closed")


class TestOrchestration:
    def test_invalid_command_is_rejected_before_loading(self, db, event_bus):
        repository = MagicMock(spec=SaleRepository)
        service = SaleStatusService(db, repository=repository, event_bus=event_bus)

        with pytest.raises(ValidationException) as exc_info:
            asyncio.run(service.update_status(UpdateSaleStatusCommand("", "Shipped")))

        errors = exc_info.value.details["validation_errors"]
        assert set(errors) == {"sale_id", "status"}
        repository.get_by_id_with_items.assert_not_called()

    def test_unknown_sale(self, db, event_bus, seed):
        with pytest.raises(EntityNotFoundException):
            change_status(db, event_bus, uuid.uuid4(), "Paid")
        assert event_bus.published == []

    def test_publishes_status_changed_after_commit(self, db, event_bus, make_sale):
        sale_id = make_sale(("A", 2, {}))

        change_status(db, event_bus, sale_id, "Paid")

        assert event_bus.topics == ["sale.status.changed"]
        event = event_bus.published[0][1]
        assert event.sale_id == sale_id
        assert event.status == "Paid"
        assert event.sale_number == "S-100"
        assert event.total_amount == Decimal("20")
        assert event.updated_at is not None
        assert event.timestamp is not None

    def test_cancel_also_publishes_cancelled(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("A", 2, {}), ("B", 1, {}))

        change_status(db, event_bus, sale_id, "cancelled")

        assert event_bus.topics == ["sale.status.changed", "sale.cancelled"]
        stored = reload(session_factory, sale_id)
        assert stored.status == SaleStatus.CANCELLED
        assert all(item.is_cancelled for item in stored.items)
        assert stored.total_amount == Decimal("0")

    def test_pending_target_reactivates(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("A", 2, {}))
        change_status(db, event_bus, sale_id, "Cancelled")

        change_status(db, event_bus, sale_id, "Pending")

        stored = reload(session_factory, sale_id)
        assert stored.status == SaleStatus.PENDING
        assert not stored.items[0].is_cancelled
        assert stored.total_amount == Decimal("20")

    def test_reactivating_a_pending_sale_fails(self, db, event_bus, make_sale):
        sale_id = make_sale(("A", 2, {}))
        with pytest.raises(InvalidStateException, match="Sale is not cancelled"):
            change_status(db, event_bus, sale_id, "Pending")

    def test_publication_failure_is_swallowed(self, db, make_sale, session_factory):
        sale_id = make_sale(("A", 4, {}))
        failing_bus = RecordingEventBus(fail=True)

        sale = change_status(db, failing_bus, sale_id, "Closed")

        assert sale.status == SaleStatus.CLOSED
        assert reload(session_factory, sale_id).status == SaleStatus.CLOSED

    def test_rejected_commit_raises_commit_failed(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("A", 4, {}))
        service = SaleStatusService(db, event_bus=event_bus, unit_of_work=RefusingUnitOfWork(db))

        with pytest.raises(CommitFailedException, match="Failed to commit sale status update transaction"):
            asyncio.run(service.update_status(UpdateSaleStatusCommand(sale_id, "Closed")))

        assert reload(session_factory, sale_id).status == SaleStatus.PENDING
        assert event_bus.published == []

    def test_version_increases_on_each_transition(self, db, event_bus, make_sale, session_factory):
        sale_id = make_sale(("A", 1, {}))
        before = reload(session_factory, sale_id).version

        change_status(db, event_bus, sale_id, "Paid")

        assert reload(session_factory, sale_id).version == before + 1

    def test_concurrent_write_raises_concurrent_modification(
        self, db, event_bus, make_sale, session_factory
    ):
        sale_id = make_sale(("A", 1, {}))
        before = reload(session_factory, sale_id).version
        service = SaleStatusService(
            db, repository=ConcurrentWriterSaleRepository(db), event_bus=event_bus
        )

        with pytest.raises(ConcurrentModificationException):
            asyncio.run(service.update_status(UpdateSaleStatusCommand(sale_id, "Paid")))

        stored = reload(session_factory, sale_id)
        assert stored.status == SaleStatus.PENDING
        assert stored.version == before
        assert event_bus.published == []

    def test_database_work_runs_off_the_event_loop_thread(self, db, event_bus, make_sale):
        sale_id = make_sale(("A", 1, {}))
        loading_threads = []

        class ThreadRecordingRepository(SaleRepository):
            def get_by_id_with_items(self, id, lock=True):
                loading_threads.append(threading.get_ident())
                return super().get_by_id_with_items(id, lock=lock)

        service = SaleStatusService(db, repository=ThreadRecordingRepository(db), event_bus=event_bus)

        async def scenario():
            sale = await service.update_status(UpdateSaleStatusCommand(sale_id, "Paid"))
            return sale, threading.get_ident()

        sale, loop_thread = asyncio.run(scenario())

        assert sale.status == SaleStatus.PAID
        assert len(loading_threads) == 1
        assert loading_threads[0] != loop_thread

    def test_command_may_be_passed_by_keyword(self, db, event_bus, make_sale):
        sale_id = make_sale(("A", 1, {}))
        service = SaleStatusService(db, event_bus=event_bus)

        sale = asyncio.run(service.update_status(command=UpdateSaleStatusCommand(sale_id, "Closed")))

        assert sale.status == SaleStatus.CLOSED

    def test_invalid_keyword_command_is_rejected(self, db, event_bus):
        service = SaleStatusService(db, event_bus=event_bus)

        with pytest.raises(ValidationException) as exc_info:
            asyncio.run(service.update_status(command=UpdateSaleStatusCommand(uuid.uuid4(), "")))

        assert "status" in exc_info.value.details["validation_errors"]

    def test_cancellation_during_publication_keeps_new_status(self, db, make_sale, session_factory):
        sale_id = make_sale(("A", 1, {}))
        bus = SlowEventBus()
        service = SaleStatusService(db, event_bus=bus)

        async def scenario():
            bus.started = asyncio.Event()
            bus.release = asyncio.Event()
            task = asyncio.create_task(
                service.update_status(UpdateSaleStatusCommand(sale_id, "Paid"))
            )
            await bus.started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

            # The shielded publication still completes in the background
            bus.release.set()
            for _ in range(5):
                await asyncio.sleep(0)

        asyncio.run(scenario())

        assert reload(session_factory, sale_id).status == SaleStatus.PAID
        assert bus.topics == ["sale.status.changed"]
