# File: salesdesk/repositories/customer_repository.py

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from salesdesk.db.models.customer import Customer
from salesdesk.repositories.base_repository import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """Repository for Customer entity operations."""

    model = Customer

    def __init__(self, session: Session):
        super().__init__(session)

    def get_by_email(self, email: str) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.email == email.strip().lower())
        return self.session.execute(stmt).scalars().first()
