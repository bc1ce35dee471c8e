# tests/services/test_crud_services.py
import uuid
from decimal import Decimal

import pytest

from salesdesk.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from salesdesk.services.branch_service import BranchService
from salesdesk.services.customer_service import CustomerService
from salesdesk.services.product_service import ProductService


class TestCustomerService:
    def test_create_normalizes_email(self, db):
        customer = CustomerService(db).create({"name": "Bruno", "email": " Bruno@Example.COM "})
        assert customer.email == "bruno@example.com"
        assert customer.is_active

    def test_create_rejects_bad_contact_info(self, db):
        with pytest.raises(ValidationException) as exc_info:
            CustomerService(db).create({"name": "B", "phone": "12345"})

        errors = exc_info.value.details["validation_errors"]
        assert errors["name"] == ["Customer name must be at least 2 characters long"]
        assert "phone" in errors

    def test_duplicate_email(self, db, seed):
        with pytest.raises(DuplicateEntityException):
            CustomerService(db).create({"name": "Other Ana", "email": "ANA@example.com"})

    def test_update_goes_through_domain_methods(self, db, seed):
        service = CustomerService(db)
        customer = service.update(seed["customer_id"], {"phone": "+5521988887777", "is_active": False})

        assert customer.phone == "+5521988887777"
        assert customer.name == "Ana Souza"
        assert customer.is_active is False
        assert customer.updated_at is not None

    def test_update_may_keep_own_email(self, db, seed):
        customer = CustomerService(db).update(seed["customer_id"], {"email": "ana@example.com"})
        assert customer.email == "ana@example.com"


class TestBranchService:
    def test_crud_cycle(self, db):
        service = BranchService(db)
        branch = service.create({"name": "Harbour"})

        renamed = service.update(branch.id, {"name": "Harbour Front"})
        assert renamed.name == "Harbour Front"
        assert renamed.is_active

        items, total = service.list_page(1, 10)
        assert total == 1
        assert items[0].id == branch.id

        service.delete(branch.id)
        assert service.get_by_id(branch.id) is None

    def test_name_too_short(self, db):
        with pytest.raises(ValidationException):
            BranchService(db).create({"name": "X"})

    def test_missing_branch(self, db):
        with pytest.raises(EntityNotFoundException):
            BranchService(db).get_entity_or_404(uuid.uuid4())
        with pytest.raises(EntityNotFoundException):
            BranchService(db).delete(uuid.uuid4())


class TestProductService:
    def test_price_update_and_deactivation(self, db, seed):
        service = ProductService(db)
        product = service.update(seed["products"]["A"], {"price": Decimal("12.50"), "is_active": False})

        assert product.price == Decimal("12.50")
        assert product.is_active is False

    def test_price_ceiling(self, db):
        with pytest.raises(ValidationException):
            ProductService(db).create({"name": "Gold bar", "price": Decimal("1000000.00")})

    def test_invalid_update_is_rolled_back(self, db, seed):
        service = ProductService(db)
        with pytest.raises(ValidationException):
            service.update(seed["products"]["B"], {"price": Decimal("0")})

        assert service.get_entity_or_404(seed["products"]["B"]).price == Decimal("20")
