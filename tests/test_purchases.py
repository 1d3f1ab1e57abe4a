import datetime as dt
from decimal import Decimal

import pytest

from backoffice.errors import NotFoundError, ReferentialIntegrityError, ValidationError
from backoffice.models.purchase import PaymentStatus, Purchase, PurchaseReturn, PurchaseStatus
from backoffice.schemas.adjustment import AdjustmentCreate
from backoffice.schemas.purchase import PurchaseCreate, PurchasePatch, PurchaseUpdate
from backoffice.services import adjustments as adjustment_service
from backoffice.services import purchases as purchase_service
from backoffice.services.filters import PurchaseFilter

TODAY = dt.date(2026, 10, 18)


def _purchase(supplier, warehouse, *items, **header):
    fields = dict(
        supplier_id=supplier.id,
        warehouse_id=warehouse.id,
        date=TODAY,
        items=[{"product_id": pid, "quantity": qty, "unit_cost": cost} for pid, qty, cost in items],
    )
    fields.update(header)
    return fields


def test_stock_follows_documents_end_to_end(db, warehouse, supplier, product, stock_of):
    adjustment = adjustment_service.create_adjustment(db, AdjustmentCreate(
        reference="ADJ-1", warehouse_id=warehouse.id, date=TODAY,
        items=[{"product_id": product.id, "quantity": "10", "type": "addition"}],
    ))
    assert stock_of(product.id) == Decimal("15")

    adjustment_service.delete_adjustment(db, adjustment.id)
    assert stock_of(product.id) == Decimal("5")

    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "3", "2.00"), reference="PUR-1", status="pending",
    )))
    assert stock_of(product.id) == Decimal("5")

    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="received"))
    assert stock_of(product.id) == Decimal("8")

    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="cancelled"))
    assert stock_of(product.id) == Decimal("5")


def test_create_received_moves_stock_immediately(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "4", "1.00"), status="received",
    )))

    assert purchase.reference.startswith("PUR-")
    assert stock_of(product.id) == Decimal("9")


def test_repeated_status_patch_is_idempotent(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "3", "1.00"),
    )))

    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="received"))
    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="received"))
    assert stock_of(product.id) == Decimal("8")

    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="ordered"))
    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="pending"))
    assert stock_of(product.id) == Decimal("5")


def test_totals_are_derived_when_omitted(db, warehouse, supplier, make_product):
    a = make_product()
    b = make_product()

    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (a.id, "2", "10.00"), (b.id, "4", "5.00"),
        tax_rate="10", discount="3", shipping="5", paid="20",
    )))

    assert purchase.subtotal == Decimal("40.00")
    assert purchase.tax_amount == Decimal("4.00")
    assert purchase.total == Decimal("46.00")
    assert purchase.due == Decimal("26.00")
    assert purchase.payment_status == PaymentStatus.PARTIAL
    assert [item.subtotal for item in purchase.items] == [Decimal("20.00"), Decimal("20.00")]


def test_explicit_total_wins_and_due_is_derived(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "1", "10.00"), total="99.99", paid="99.99",
    )))

    assert purchase.total == Decimal("99.99")
    assert purchase.due == Decimal("0.00")
    assert purchase.payment_status == PaymentStatus.PAID


def test_patch_paid_recomputes_due_and_payment_status(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "10", "10.00"),
    )))
    assert purchase.due == Decimal("100.00")
    assert purchase.payment_status == PaymentStatus.UNPAID

    purchase = purchase_service.patch_purchase(db, purchase.id, PurchasePatch(paid="30"))
    assert purchase.due == Decimal("70.00")
    assert purchase.payment_status == PaymentStatus.PARTIAL

    purchase = purchase_service.patch_purchase(db, purchase.id, PurchasePatch(total="120"))
    assert purchase.due == Decimal("90.00")


def test_patch_shipping_rederives_total(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "10", "10.00"), paid="100",
    )))
    assert purchase.payment_status == PaymentStatus.PAID

    purchase = purchase_service.patch_purchase(db, purchase.id, PurchasePatch(shipping="15"))

    assert purchase.total == Decimal("115.00")
    assert purchase.due == Decimal("15.00")
    assert purchase.payment_status == PaymentStatus.PARTIAL


def test_explicit_payment_status_is_kept(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "1", "10.00"),
    )))

    purchase = purchase_service.patch_purchase(
        db, purchase.id, PurchasePatch(paid="10", payment_status="partial"),
    )

    assert purchase.payment_status == PaymentStatus.PARTIAL
    assert purchase.due == Decimal("0.00")


def test_patch_cannot_blank_required_fields(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "1", "10.00"),
    )))

    with pytest.raises(ValidationError, match="status"):
        purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status=None))


def test_put_received_replaces_lines_and_nets_stock(db, warehouse, supplier, make_product, stock_of):
    a = make_product(stock="5")
    b = make_product(stock="5")
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (a.id, "3", "1.00"), status="received",
    )))
    assert stock_of(a.id) == Decimal("8")

    updated = purchase_service.update_purchase(db, purchase.id, PurchaseUpdate(**_purchase(
        supplier, warehouse, (a.id, "1", "1.00"), (b.id, "2", "1.00"), status="received",
    )))

    assert stock_of(a.id) == Decimal("6")
    assert stock_of(b.id) == Decimal("7")
    assert len(updated.items) == 2
    assert updated.total == Decimal("3.00")


def test_put_out_of_received_reverses_old_lines(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "3", "1.00"), status="received",
    )))

    purchase_service.update_purchase(db, purchase.id, PurchaseUpdate(**_purchase(
        supplier, warehouse, (product.id, "30", "1.00"), status="ordered",
    )))

    assert stock_of(product.id) == Decimal("5")


def test_delete_received_purchase_reverses_stock(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "3", "1.00"), status="received", reference="PUR-9",
    )))

    assert purchase_service.delete_purchase(db, purchase.id) == "PUR-9"
    assert stock_of(product.id) == Decimal("5")
    assert db.query(Purchase).count() == 0


def test_delete_with_returns_is_refused(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "3", "1.00"), status="received",
    )))
    db.add(PurchaseReturn(purchase_id=purchase.id, reference="RET-1", date=TODAY, total=Decimal("1")))
    db.commit()

    with pytest.raises(ReferentialIntegrityError) as excinfo:
        purchase_service.delete_purchase(db, purchase.id)

    assert excinfo.value.blocking == ["purchase returns"]
    assert stock_of(product.id) == Decimal("8")


def test_unknown_supplier_is_not_found(db, warehouse, supplier, product):
    payload = PurchaseCreate(**_purchase(supplier, warehouse, (product.id, "1", "1.00"), supplier_id=999))

    with pytest.raises(NotFoundError, match="Supplier not found"):
        purchase_service.create_purchase(db, payload)
    assert db.query(Purchase).count() == 0


def test_list_filters_by_status_and_supplier_name(db, warehouse, supplier, product):
    purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "1", "1.00"), status="received",
    )))
    purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "1", "1.00"),
    )))

    items, total = purchase_service.list_purchases(
        db, PurchaseFilter(status=PurchaseStatus.RECEIVED), page=1, limit=10,
    )
    assert total == 1
    assert items[0].status == PurchaseStatus.RECEIVED

    _, total = purchase_service.list_purchases(db, PurchaseFilter(search="acme"), page=1, limit=10)
    assert total == 2


def test_sub_scale_received_quantity_round_trips(db, warehouse, supplier, product, stock_of):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "2.00005", "1.00"), (product.id, "0.00004", "1.00"), status="received",
    )))
    assert stock_of(product.id) == Decimal("7.0001")
    assert [item.quantity for item in purchase.items] == [Decimal("2.0001"), Decimal("0")]

    purchase_service.patch_purchase(db, purchase.id, PurchasePatch(status="cancelled"))
    assert stock_of(product.id) == Decimal("5")


def test_patch_shipping_keeps_explicit_tax_amount(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "10", "10.00"), tax_rate="15", tax_amount="7",
    )))
    assert purchase.total == Decimal("107.00")

    purchase = purchase_service.patch_purchase(db, purchase.id, PurchasePatch(shipping="10", discount="2"))

    assert purchase.tax_amount == Decimal("7.00")
    assert purchase.total == Decimal("115.00")


def test_patch_tax_rate_recomputes_tax_amount(db, warehouse, supplier, product):
    purchase = purchase_service.create_purchase(db, PurchaseCreate(**_purchase(
        supplier, warehouse, (product.id, "10", "10.00"), tax_rate="15", tax_amount="7",
    )))

    purchase = purchase_service.patch_purchase(db, purchase.id, PurchasePatch(tax_rate="10"))

    assert purchase.tax_amount == Decimal("10.00")
    assert purchase.total == Decimal("110.00")
    assert purchase.due == Decimal("110.00")
