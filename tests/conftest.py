import pytest
from fastapi.testclient import TestClient

from backoffice.core.config import Settings
from backoffice.core.database import Database
from backoffice.main import create_app


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", LOG_LEVEL="WARNING")


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.open()
    yield database
    database.close()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def make_item(client):
    def _make_item(name="Cement Bag", sale_rate=100, purchase_rate=80, current_stock=10, **extra):
        payload = {
            "name": name,
            "unit": "bag",
            "sale_rate": sale_rate,
            "purchase_rate": purchase_rate,
            "current_stock": current_stock,
            **extra,
        }
        response = client.post("/api/v1/items", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _make_item


@pytest.fixture
def make_party(client):
    def _make_party(name="Acme Traders", type="customer", opening_balance=0):
        response = client.post("/api/v1/parties", json={
            "name": name,
            "type": type,
            "opening_balance": opening_balance,
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _make_party


@pytest.fixture
def make_invoice(client):
    def _make_invoice(party_id, items, type="sale", **extra):
        response = client.post("/api/v1/invoices", json={
            "type": type,
            "party_id": party_id,
            "items": items,
            **extra,
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _make_invoice


@pytest.fixture
def file_database(tmp_path):
    """On-disk database, so separate sessions use separate connections"""
    database = Database(f"sqlite:///{tmp_path / 'backoffice.db'}")
    database.open()
    yield database
    database.close()
