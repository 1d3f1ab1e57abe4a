"""
Pytest fixtures for the back office test suite.

Every test gets its own in-memory SQLite database; the API client shares
that database through a ``get_db`` override, so service level and HTTP
level assertions see the same rows.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import backoffice.models  # noqa: F401  registers every table on Base.metadata
from backoffice.database import Base, get_db
from backoffice.main import app
from backoffice.models.currency import Currency
from backoffice.models.product import Product
from backoffice.models.supplier import Supplier
from backoffice.models.unit import Unit
from backoffice.models.warehouse import Warehouse


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
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
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan hook would create tables on the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- master data factories ----
@pytest.fixture
def warehouse(db):
    row = Warehouse(name="Main", city="Harare", country="Zimbabwe")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def supplier(db):
    row = Supplier(name="Acme Wholesale", email="orders@acme.test")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def unit(db):
    row = Unit(name="Piece", short_name="pc")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def currency(db):
    row = Currency(code="USD", name="US Dollar", symbol="$")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def make_product(db, warehouse, unit):
    counter = {"n": 0}

    def _make(stock="0", code=None, alert_quantity="0", cost="2.50", price="4.00"):
        counter["n"] += 1
        product = Product(
            name=f"Product {counter['n']}",
            code=code or f"P{counter['n']:03d}",
            cost=Decimal(cost),
            price=Decimal(price),
            stock=Decimal(stock),
            alert_quantity=Decimal(alert_quantity),
            unit_id=unit.id,
            warehouse_id=warehouse.id,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def product(make_product):
    return make_product(stock="5")


@pytest.fixture
def stock_of(db):
    """Fresh read of a product's stock, bypassing the identity map."""
    def _read(product_id) -> Decimal:
        db.expire_all()
        return Decimal(db.get(Product, product_id).stock)

    return _read
