# backoffice/services/purchases.py
"""Purchases: lines are recorded at once, stock only moves while received.

Which deltas fire is decided by ``status.transition_deltas`` for every
path (create, PUT, PATCH, delete), evaluated in the same unit of work as the
header write.
"""
import logging
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session, joinedload

from backoffice.database import UnitOfWork
from backoffice.errors import NotFoundError, ValidationError
from backoffice.models.currency import Currency
from backoffice.models.purchase import Purchase, PurchaseItem
from backoffice.models.supplier import Supplier
from backoffice.models.warehouse import Warehouse
from backoffice.schemas.purchase import PurchaseCreate, PurchaseItemIn, PurchasePatch, PurchaseUpdate
from backoffice.services.documents import (
    claim_reference, ensure_unique_reference, paginate, require_entity, require_products,
)
from backoffice.services.filters import PurchaseFilter
from backoffice.services.finance import (
    compute_due, compute_totals, derive_payment_status, item_subtotal, to_money,
)
from backoffice.services.guard import PURCHASE_DEPENDENTS, ensure_deletable
from backoffice.services.ledger import StockLedger, to_quantity
from backoffice.services.status import transition_deltas

logger = logging.getLogger(__name__)

# Header columns a PATCH may not blank out
REQUIRED_HEADER_FIELDS = {
    "supplier_id", "warehouse_id", "date", "status", "payment_status",
    "tax_rate", "discount", "shipping", "total", "paid",
}
# Changing any of these re-derives the totals unless `total` is sent too
TOTAL_INPUTS = {"tax_rate", "tax_amount", "discount", "shipping"}


def get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = (
        db.query(Purchase)
        .options(joinedload(Purchase.supplier), joinedload(Purchase.warehouse))
        .filter(Purchase.id == purchase_id)
        .first()
    )
    if purchase is None:
        raise NotFoundError("Purchase not found")
    return purchase


def list_purchases(
    db: Session, filters: PurchaseFilter, page: int, limit: int
) -> Tuple[List[Purchase], int]:
    query = filters.apply(
        db.query(Purchase).options(joinedload(Purchase.supplier), joinedload(Purchase.warehouse))
    )
    query = query.order_by(Purchase.date.desc(), Purchase.id.desc())
    return paginate(query, page, limit)


def _require_masters(db: Session, supplier_id=None, warehouse_id=None, currency_id=None) -> None:
    if supplier_id is not None:
        require_entity(db, Supplier, supplier_id, "Supplier")
    if warehouse_id is not None:
        require_entity(db, Warehouse, warehouse_id, "Warehouse")
    if currency_id is not None:
        require_entity(db, Currency, currency_id, "Currency")


def _build_items(items: Sequence[PurchaseItemIn]) -> List[PurchaseItem]:
    rows = []
    for item in items:
        quantity = to_quantity(item.quantity)
        subtotal = item.subtotal
        if subtotal is None:
            subtotal = item_subtotal(quantity, item.unit_cost, item.discount, item.tax)
        rows.append(PurchaseItem(
            product_id=item.product_id,
            quantity=quantity,
            unit_cost=to_money(item.unit_cost),
            discount=to_money(item.discount),
            tax=to_money(item.tax),
            subtotal=to_money(subtotal),
        ))
    return rows


def _write_document(purchase: Purchase, payload: PurchaseCreate) -> None:
    """Header, lines and derived money fields for create and PUT."""
    purchase.supplier_id = payload.supplier_id
    purchase.warehouse_id = payload.warehouse_id
    purchase.currency_id = payload.currency_id
    purchase.date = payload.date
    purchase.status = payload.status
    purchase.notes = payload.notes

    rows = _build_items(payload.items)
    purchase.items.extend(rows)

    totals = compute_totals(
        (row.subtotal for row in rows),
        tax_rate=payload.tax_rate,
        discount=payload.discount,
        shipping=payload.shipping,
        tax_amount=payload.tax_amount,
    )
    purchase.subtotal = totals.subtotal
    purchase.tax_rate = to_money(payload.tax_rate)
    purchase.tax_amount = totals.tax_amount
    purchase.discount = to_money(payload.discount)
    purchase.shipping = to_money(payload.shipping)
    purchase.total = to_money(payload.total) if payload.total is not None else totals.total
    purchase.paid = to_money(payload.paid)
    purchase.due = compute_due(purchase.total, purchase.paid)
    purchase.payment_status = payload.payment_status or derive_payment_status(purchase.total, purchase.paid)


def create_purchase(db: Session, payload: PurchaseCreate) -> Purchase:
    with UnitOfWork(db, "create purchase"):
        _require_masters(db, payload.supplier_id, payload.warehouse_id, payload.currency_id)
        require_products(db, (item.product_id for item in payload.items))
        reference = claim_reference(db, Purchase, payload.reference, "PUR")

        purchase = Purchase(reference=reference)
        _write_document(purchase, payload)
        db.add(purchase)
        StockLedger(db).post(transition_deltas(None, payload.status, [], payload.items))
        db.flush()

    logger.info("Purchase %s created (%s)", reference, payload.status.value)
    return purchase


def update_purchase(db: Session, purchase_id: int, payload: PurchaseUpdate) -> Purchase:
    with UnitOfWork(db, "update purchase"):
        purchase = get_purchase(db, purchase_id)
        _require_masters(db, payload.supplier_id, payload.warehouse_id, payload.currency_id)
        require_products(db, (item.product_id for item in payload.items))

        reference = (payload.reference or "").strip()
        if reference and reference != purchase.reference:
            ensure_unique_reference(db, Purchase, reference, exclude_id=purchase.id)
            purchase.reference = reference

        # Old lines reversed under the old status, new lines applied under the new one
        deltas = transition_deltas(purchase.status, payload.status, list(purchase.items), payload.items)
        purchase.items.clear()
        db.flush()

        _write_document(purchase, payload)
        StockLedger(db).post(deltas)
        db.flush()

    logger.info("Purchase %s replaced", purchase.reference)
    return purchase


def patch_purchase(db: Session, purchase_id: int, payload: PurchasePatch) -> Purchase:
    changes = payload.model_dump(exclude_unset=True)
    blank = sorted(field for field in REQUIRED_HEADER_FIELDS if field in changes and changes[field] is None)
    if blank:
        raise ValidationError(f"Field cannot be empty: {', '.join(blank)}")

    with UnitOfWork(db, "update purchase"):
        purchase = get_purchase(db, purchase_id)
        _require_masters(
            db, changes.get("supplier_id"), changes.get("warehouse_id"), changes.get("currency_id")
        )

        old_status = purchase.status
        new_status = changes.get("status", old_status)
        deltas = transition_deltas(old_status, new_status, list(purchase.items))

        for field in ("supplier_id", "warehouse_id", "currency_id", "date", "status", "notes"):
            if field in changes:
                setattr(purchase, field, changes[field])

        money_changed = False
        if TOTAL_INPUTS & changes.keys():
            for field in ("tax_rate", "discount", "shipping"):
                if field in changes:
                    setattr(purchase, field, to_money(changes[field]))
            # Stored tax_amount stands unless the client resends it or changes the rate
            if "tax_amount" in changes:
                tax_amount = changes["tax_amount"]
            elif "tax_rate" in changes:
                tax_amount = None
            else:
                tax_amount = purchase.tax_amount
            totals = compute_totals(
                (item.subtotal for item in purchase.items),
                tax_rate=purchase.tax_rate,
                discount=purchase.discount,
                shipping=purchase.shipping,
                tax_amount=tax_amount,
            )
            purchase.subtotal = totals.subtotal
            purchase.tax_amount = totals.tax_amount
            if "total" not in changes:
                purchase.total = totals.total
                money_changed = True
        if "total" in changes:
            purchase.total = to_money(changes["total"])
            money_changed = True
        if "paid" in changes:
            purchase.paid = to_money(changes["paid"])
            money_changed = True

        if money_changed:
            purchase.due = compute_due(purchase.total, purchase.paid)
        if "payment_status" in changes:
            purchase.payment_status = changes["payment_status"]
        elif money_changed:
            purchase.payment_status = derive_payment_status(purchase.total, purchase.paid)

        StockLedger(db).post(deltas)
        db.flush()

    logger.info("Purchase %s patched: %s", purchase.reference, ", ".join(sorted(changes)) or "no changes")
    return purchase


def delete_purchase(db: Session, purchase_id: int) -> str:
    with UnitOfWork(db, "delete purchase"):
        purchase = get_purchase(db, purchase_id)
        ensure_deletable(db, "purchase", PURCHASE_DEPENDENTS, purchase.id)
        reference = purchase.reference
        StockLedger(db).post(transition_deltas(purchase.status, None, list(purchase.items)))
        db.delete(purchase)

    logger.info("Purchase %s deleted", reference)
    return reference
