from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.errors import NotFoundError, ValidationError
from backoffice.models.adjustment import AdjustmentType
from backoffice.models.purchase import PurchaseStatus
from backoffice.services.ledger import (
    LedgerDelta,
    StockLedger,
    adjustment_item_delta,
    net_deltas,
    purchase_item_delta,
    reversed_delta,
    to_quantity,
)


def test_adjustment_item_delta_sign_follows_type():
    add = SimpleNamespace(product_id=1, quantity=Decimal("4"), type=AdjustmentType.ADDITION)
    sub = SimpleNamespace(product_id=1, quantity=Decimal("4"), type="subtraction")

    assert adjustment_item_delta(add) == LedgerDelta(1, Decimal("4"))
    assert adjustment_item_delta(sub) == LedgerDelta(1, Decimal("-4"))


@pytest.mark.parametrize("status", [PurchaseStatus.PENDING, PurchaseStatus.ORDERED, PurchaseStatus.CANCELLED, None])
def test_purchase_item_delta_is_zero_unless_received(status):
    item = SimpleNamespace(product_id=7, quantity=Decimal("3"))
    assert purchase_item_delta(item, status).quantity == 0
    assert purchase_item_delta(item, PurchaseStatus.RECEIVED).quantity == Decimal("3")


def test_net_deltas_sums_per_product_in_id_order():
    deltas = [
        LedgerDelta(9, Decimal("2")),
        LedgerDelta(3, Decimal("5")),
        LedgerDelta(9, Decimal("-2")),
        LedgerDelta(3, Decimal("1.5")),
    ]

    netted = net_deltas(deltas)

    assert list(netted) == [3, 9]
    assert netted[3] == Decimal("6.5")
    # cancelled out but still reported
    assert netted[9] == 0


def test_reversed_delta_negates_quantity():
    assert reversed_delta(LedgerDelta(2, Decimal("1.25"))) == LedgerDelta(2, Decimal("-1.25"))


def test_post_returns_stock_before_and_applies_net_change(db, make_product, stock_of):
    a = make_product(stock="10")
    b = make_product(stock="1")

    before = StockLedger(db).post([
        LedgerDelta(a.id, Decimal("3")),
        LedgerDelta(b.id, Decimal("-4")),
        LedgerDelta(a.id, Decimal("-1")),
    ])
    db.commit()

    assert before == {a.id: Decimal("10"), b.id: Decimal("1")}
    assert stock_of(a.id) == Decimal("12")
    # negative stock is allowed by default
    assert stock_of(b.id) == Decimal("-3")


def test_negative_stock_refused_when_disabled(db, product, stock_of):
    ledger = StockLedger(db, allow_negative=False)

    with pytest.raises(ValidationError, match="Insufficient stock"):
        ledger.apply_delta(product.id, Decimal("-6"))
    db.rollback()

    assert stock_of(product.id) == Decimal("5")
    # draining to exactly zero is fine
    ledger.apply_delta(product.id, Decimal("-5"))
    db.commit()
    assert stock_of(product.id) == 0


def test_allow_negative_defaults_to_setting(db, monkeypatch):
    from backoffice.config import settings

    monkeypatch.setattr(settings, "ALLOW_NEGATIVE_STOCK", False)
    assert StockLedger(db).allow_negative is False


def test_unknown_product_is_not_found(db):
    with pytest.raises(NotFoundError):
        StockLedger(db).apply_delta(999, Decimal("1"))


def test_zero_delta_leaves_row_untouched(db, product, stock_of):
    assert StockLedger(db).apply_delta(product.id, 0) == Decimal("5")
    db.commit()
    assert stock_of(product.id) == Decimal("5")


def test_item_deltas_use_the_stored_quantity_scale():
    line = SimpleNamespace(product_id=1, quantity=Decimal("0.00005"), type=AdjustmentType.SUBTRACTION)

    assert to_quantity("2.00004") == Decimal("2.0000")
    assert adjustment_item_delta(line) == LedgerDelta(1, Decimal("-0.0001"))
    assert purchase_item_delta(SimpleNamespace(product_id=1, quantity=Decimal("0.00004")),
                               PurchaseStatus.RECEIVED).quantity == 0
