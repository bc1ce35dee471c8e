# tests/api/test_reference_data_api.py
import uuid
from decimal import Decimal

from salesdesk.core.config import settings

API = settings.API_V1_STR


def test_customer_crud(client):
    created = client.post(
        f"{API}/customers/",
        json={"name": "Carla Dias", "email": "carla@example.com", "phone": "+5531977776666"},
    )
    assert created.status_code == 201, created.text
    customer_id = created.json()["id"]

    updated = client.put(f"{API}/customers/{customer_id}", json={"is_active": False})
    assert updated.status_code == 200
    assert updated.json()["is_active"] is False
    assert updated.json()["email"] == "carla@example.com"

    listing = client.get(f"{API}/customers/").json()
    assert listing["total"] == 1

    assert client.delete(f"{API}/customers/{customer_id}").status_code == 204
    assert client.get(f"{API}/customers/{customer_id}").status_code == 404


def test_customer_duplicate_email(client, seed):
    response = client.post(f"{API}/customers/", json={"name": "Ana Again", "email": "ana@example.com"})
    assert response.status_code == 409


def test_customer_invalid_email_rejected_by_schema(client):
    response = client.post(f"{API}/customers/", json={"name": "Dan", "email": "not-an-email"})
    assert response.status_code == 422


def test_branch_validation_error(client):
    response = client.post(f"{API}/branches/", json={"name": "X"})
    assert response.status_code == 422
    assert response.json()["detail"]["details"]["validation_errors"]["name"] == [
        "Branch name must be between 2 and 100 characters"
    ]


def test_product_crud(client):
    created = client.post(f"{API}/products/", json={"name": "Desk lamp", "price": "49.90"})
    assert created.status_code == 201, created.text
    product = created.json()
    assert Decimal(product["price"]) == Decimal("49.90")
    assert product["is_active"] is True

    updated = client.put(f"{API}/products/{product['id']}", json={"price": "39.90"})
    assert Decimal(updated.json()["price"]) == Decimal("39.90")

    assert client.get(f"{API}/products/{uuid.uuid4()}").status_code == 404


def test_root_and_health(client):
    assert client.get("/").json()["project_name"] == settings.PROJECT_NAME
    assert client.get("/health").json()["status"] == "ok"
