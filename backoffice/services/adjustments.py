# backoffice/services/adjustments.py
"""Stock adjustments: every line adds or removes its quantity.

Create applies each line, update reverses the stored lines before applying
the new ones, delete reverses everything. All three run inside a single
``UnitOfWork`` so stock and document rows always change together.
"""
import logging
from decimal import Decimal
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session, joinedload

from backoffice.database import UnitOfWork
from backoffice.errors import NotFoundError
from backoffice.models.adjustment import Adjustment, AdjustmentItem
from backoffice.models.warehouse import Warehouse
from backoffice.schemas.adjustment import AdjustmentCreate, AdjustmentItemIn, AdjustmentUpdate
from backoffice.services.documents import (
    claim_reference, ensure_unique_reference, paginate, require_entity, require_products,
)
from backoffice.services.filters import AdjustmentFilter
from backoffice.services.ledger import (
    LedgerDelta, StockLedger, adjustment_item_delta, net_deltas, reversed_delta, to_quantity,
)

logger = logging.getLogger(__name__)


def get_adjustment(db: Session, adjustment_id: int) -> Adjustment:
    adjustment = (
        db.query(Adjustment)
        .options(joinedload(Adjustment.warehouse))
        .filter(Adjustment.id == adjustment_id)
        .first()
    )
    if adjustment is None:
        raise NotFoundError("Adjustment not found")
    return adjustment


def list_adjustments(
    db: Session, filters: AdjustmentFilter, page: int, limit: int
) -> Tuple[List[Adjustment], int]:
    query = filters.apply(db.query(Adjustment).options(joinedload(Adjustment.warehouse)))
    query = query.order_by(Adjustment.date.desc(), Adjustment.id.desc())
    return paginate(query, page, limit)


def _write_items(
    db: Session,
    adjustment: Adjustment,
    items: Sequence[AdjustmentItemIn],
    reversals: Sequence[LedgerDelta] = (),
) -> None:
    """Post reversals of the old lines together with the new lines, then store the new lines.

    ``pre_stock`` is the stock a product had once the old lines were undone
    and before the new lines were applied.
    """
    deltas = list(reversals) + [adjustment_item_delta(item) for item in items]
    before = StockLedger(db).post(deltas)
    undone = net_deltas(reversals)

    for item in items:
        pre_stock = before[item.product_id] + undone.get(item.product_id, Decimal("0"))
        adjustment.items.append(AdjustmentItem(
            product_id=item.product_id,
            quantity=to_quantity(item.quantity),
            type=item.type,
            pre_stock=pre_stock,
        ))


def create_adjustment(db: Session, payload: AdjustmentCreate) -> Adjustment:
    with UnitOfWork(db, "create adjustment"):
        require_entity(db, Warehouse, payload.warehouse_id, "Warehouse")
        require_products(db, (item.product_id for item in payload.items))
        reference = claim_reference(db, Adjustment, payload.reference, "ADJ")

        adjustment = Adjustment(
            reference=reference,
            warehouse_id=payload.warehouse_id,
            date=payload.date,
            type=payload.type,
            notes=payload.notes,
        )
        db.add(adjustment)
        _write_items(db, adjustment, payload.items)
        db.flush()

    logger.info("Adjustment %s created with %d items", reference, len(payload.items))
    return adjustment


def update_adjustment(db: Session, adjustment_id: int, payload: AdjustmentUpdate) -> Adjustment:
    with UnitOfWork(db, "update adjustment"):
        adjustment = get_adjustment(db, adjustment_id)
        require_entity(db, Warehouse, payload.warehouse_id, "Warehouse")
        require_products(db, (item.product_id for item in payload.items))

        reference = (payload.reference or "").strip()
        if reference and reference != adjustment.reference:
            ensure_unique_reference(db, Adjustment, reference, exclude_id=adjustment.id)
            adjustment.reference = reference

        reversals = [reversed_delta(adjustment_item_delta(item)) for item in adjustment.items]
        adjustment.items.clear()
        db.flush()

        adjustment.warehouse_id = payload.warehouse_id
        adjustment.date = payload.date
        adjustment.type = payload.type
        adjustment.notes = payload.notes
        _write_items(db, adjustment, payload.items, reversals)
        db.flush()

    logger.info("Adjustment %s updated, %d items replaced", adjustment.reference, len(reversals))
    return adjustment


def delete_adjustment(db: Session, adjustment_id: int) -> str:
    with UnitOfWork(db, "delete adjustment"):
        adjustment = get_adjustment(db, adjustment_id)
        reference = adjustment.reference
        StockLedger(db).post(reversed_delta(adjustment_item_delta(item)) for item in adjustment.items)
        # Items go with the header (delete-orphan cascade)
        db.delete(adjustment)

    logger.info("Adjustment %s deleted and its stock effect reversed", reference)
    return reference
