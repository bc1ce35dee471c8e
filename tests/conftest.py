# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite database per test, seed reference data,
an event bus that records what was published, and an API client wired to both.
"""

from datetime import timedelta
from decimal import Decimal
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salesdesk.api.deps import get_db, get_event_bus
from salesdesk.core.events import DomainEvent, EventBus
from salesdesk.core.utils import utcnow
from salesdesk.db.models import Base, Branch, Customer, Product
from salesdesk.db.session import build_engine
from salesdesk.repositories.sale_repository import SaleRepository
from salesdesk.main import app


class RecordingEventBus(EventBus):
    """EventBus that keeps every publication; optionally fails on publish."""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.published: List[Tuple[str, DomainEvent]] = []

    def publish(self, topic: str, event: DomainEvent) -> None:
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.published.append((topic, event))
        super().publish(topic, event)

    async def publish_async(self, topic: str, event: DomainEvent) -> None:
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.published.append((topic, event))
        await super().publish_async(topic, event)

    @property
    def topics(self) -> List[str]:
        return [topic for topic, _ in self.published]


class ConcurrentWriterSaleRepository(SaleRepository):
    """SaleRepository that lets another writer bump the sale version right after each load."""

    def get_by_id_with_items(self, id, lock: bool = True):
        sale = super().get_by_id_with_items(id, lock=lock)
        if sale is not None:
            self.session.execute(
                text("UPDATE sales SET version = version + 1 WHERE id = :id"), {"id": sale.id.hex}
            )
        return sale


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def seed(db):
    """Commit one customer, one branch and a few products."""
    customer = Customer("Ana Souza", email="ana@example.com", phone="+5511999998888")
    branch = Branch("Downtown")
    products = {
        "A": Product("Product A", Decimal("10.00")),
        "B": Product("Product B", Decimal("20.00")),
        "C": Product("Product C", Decimal("5.00")),
        "retired": Product("Retired product", Decimal("7.50"), is_active=False),
    }
    db.add_all([customer, branch, *products.values()])
    db.commit()
    return {
        "customer_id": customer.id,
        "branch_id": branch.id,
        "products": {key: product.id for key, product in products.items()},
    }


@pytest.fixture
def yesterday():
    return utcnow() - timedelta(days=1)


@pytest.fixture
def client(session_factory, event_bus):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: event_bus
    yield TestClient(app)
    app.dependency_overrides.clear()
