import datetime as dt
from decimal import Decimal

import pytest

from backoffice.database import UnitOfWork
from backoffice.errors import ConflictError, NotFoundError, TransactionFailure
from backoffice.models.adjustment import Adjustment, AdjustmentItem
from backoffice.models.log import Log
from backoffice.models.warehouse import Warehouse
from backoffice.schemas.adjustment import AdjustmentCreate
from backoffice.services import adjustments as adjustment_service
from backoffice.services import documents
from backoffice.services.ledger import StockLedger

TODAY = dt.date(2026, 10, 18)


@pytest.fixture
def failing_ledger(monkeypatch):
    """Ledger that posts its deltas and then blows up, as a lost connection would."""
    original_post = StockLedger.post

    def post_then_fail(self, deltas):
        original_post(self, deltas)
        raise RuntimeError("connection reset by peer")

    monkeypatch.setattr(StockLedger, "post", post_then_fail)


def _payload(warehouse, product, reference=None):
    return AdjustmentCreate(
        reference=reference, warehouse_id=warehouse.id, date=TODAY,
        items=[{"product_id": product.id, "quantity": "10", "type": "addition"}],
    )


def test_clean_exit_commits(db, session_factory):
    with UnitOfWork(db, "create warehouse"):
        db.add(Warehouse(name="Depot"))

    other = session_factory()
    try:
        assert other.query(Warehouse).filter(Warehouse.name == "Depot").count() == 1
    finally:
        other.close()


def test_unexpected_error_becomes_transaction_failure(db):
    with pytest.raises(TransactionFailure, match="Failed to create warehouse") as excinfo:
        with UnitOfWork(db, "create warehouse"):
            db.add(Warehouse(name="Depot"))
            db.flush()
            raise RuntimeError("boom")

    assert excinfo.value.status_code == 500
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert db.query(Warehouse).count() == 0


def test_service_errors_pass_through_unchanged(db):
    error = NotFoundError("Supplier not found")

    with pytest.raises(NotFoundError) as excinfo:
        with UnitOfWork(db):
            db.add(Warehouse(name="Depot"))
            raise error

    assert excinfo.value is error
    assert db.query(Warehouse).count() == 0


def test_integrity_error_on_flush_becomes_conflict(db):
    db.add(Warehouse(name="Depot"))
    db.commit()

    with pytest.raises(ConflictError, match="uniqueness"):
        with UnitOfWork(db, "create warehouse"):
            db.add(Warehouse(name="Depot"))
            db.flush()

    assert db.query(Warehouse).count() == 1


def test_integrity_error_on_commit_becomes_conflict(db):
    db.add(Warehouse(name="Depot"))
    db.commit()

    with pytest.raises(ConflictError):
        with UnitOfWork(db, "create warehouse"):
            db.add(Warehouse(name="Depot"))

    assert db.query(Warehouse).count() == 1


def test_failure_mid_document_leaves_stock_and_rows_alone(db, warehouse, product, stock_of, failing_ledger):
    with pytest.raises(TransactionFailure, match="Failed to create adjustment"):
        adjustment_service.create_adjustment(db, _payload(warehouse, product))

    assert stock_of(product.id) == Decimal("5")
    assert db.query(Adjustment).count() == 0
    assert db.query(AdjustmentItem).count() == 0


def test_duplicate_reference_past_the_check_is_a_conflict(db, warehouse, product, stock_of, monkeypatch):
    adjustment_service.create_adjustment(db, _payload(warehouse, product, reference="ADJ-RACE"))
    # a concurrent writer inserted the same reference after our check ran
    monkeypatch.setattr(documents, "ensure_unique_reference", lambda *args, **kwargs: None)

    with pytest.raises(ConflictError):
        adjustment_service.create_adjustment(db, _payload(warehouse, product, reference="ADJ-RACE"))

    assert stock_of(product.id) == Decimal("15")
    assert db.query(Adjustment).count() == 1


def test_transaction_failure_over_http(client, db, warehouse, product, failing_ledger):
    res = client.post("/adjustments", json={
        "warehouse_id": warehouse.id,
        "date": "2026-10-18",
        "items": [{"product_id": product.id, "quantity": 10, "type": "addition"}],
    })

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to create adjustment"}

    db.expire_all()
    failure = db.query(Log).filter(Log.status == "FAIL").one()
    assert failure.action == "ADJUSTMENT_CREATE"
    assert client.get("/products", params={"id": product.id}).json()["stock"] == 5
