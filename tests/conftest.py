"""Pytest fixtures: a fresh in-memory database and API client per test."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from florist.database import Base, get_db, import_models
from florist.main import app
from florist.schemas.product import ProductCreate
from florist.services import product_service, store

ORDER_DATE = "2026-10-19T09:00:00"


@pytest.fixture(scope="function")
def db():
    """Provide a clean in-memory SQLite session, dropped after the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    def _make(name="Roses", stock=0, suppliers=None):
        return product_service.create_product(
            db, ProductCreate(name=name, current_stock=stock, suppliers=suppliers or [])
        )
    return _make


@pytest.fixture
def session_factory(tmp_path):
    """Sessions on a file-backed database, each on its own connection, for two-writer tests."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'florist.db'}",
        connect_args={"check_same_thread": False},
    )
    import_models()
    Base.metadata.create_all(engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    engine.dispose()


@pytest.fixture
def lookup_misses_once(monkeypatch):
    """Arm store.find_one to miss once, as if the matching row were still uncommitted."""
    def _arm():
        real_find_one = store.find_one
        missed = []

        def find_one(db, model, **filters):
            if not missed:
                missed.append(model)
                return None
            return real_find_one(db, model, **filters)

        monkeypatch.setattr(store, "find_one", find_one)
    return _arm


def purchase_payload(product_id, quantity=10, unit_price=5.0, invoice="INV-1", delivery_cost=5.0, total=None):
    if total is None:
        total = quantity * unit_price + delivery_cost
    return {
        "purchase": {
            "invoiceNumber": invoice,
            "orderDate": ORDER_DATE,
            "supplier": "Acme",
            "deliveryCost": delivery_cost,
            "totalAmount": total,
        },
        "items": [{"productId": product_id, "quantity": quantity, "unitPrice": unit_price}],
    }


def sale_payload(product_id, quantity=4, customer="Jane", amount=30.0):
    return {
        "sale": {
            "customerName": customer,
            "customerContact": "555-1234",
            "saleDate": ORDER_DATE,
            "saleAmount": amount,
        },
        "items": [{"productId": product_id, "quantity": quantity}],
    }
