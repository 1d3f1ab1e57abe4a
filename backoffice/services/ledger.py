# backoffice/services/ledger.py
"""Stock ledger: the only code allowed to move ``Product.stock``.

Every change is a signed delta applied with a column level increment
(``UPDATE products SET stock = stock + :delta``) on a locked row, so two
documents touching the same product never lose each other's update.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, NamedTuple, Optional

from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.errors import NotFoundError, ValidationError
from backoffice.models.adjustment import AdjustmentType
from backoffice.models.product import Product
from backoffice.models.purchase import PurchaseStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# Scale of the Quantity column; deltas and stored lines must agree on it
QUANTITY_STEP = Decimal("0.0001")


class LedgerDelta(NamedTuple):
    product_id: int
    quantity: Decimal


def to_quantity(value) -> Decimal:
    return Decimal(value).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def adjustment_item_delta(item) -> LedgerDelta:
    """+quantity for an addition line, -quantity for a subtraction line."""
    quantity = to_quantity(item.quantity)
    if AdjustmentType(item.type) == AdjustmentType.ADDITION:
        return LedgerDelta(item.product_id, quantity)
    return LedgerDelta(item.product_id, -quantity)


def purchase_item_delta(item, status) -> LedgerDelta:
    """Purchase lines only count while the purchase is received."""
    if status is not None and PurchaseStatus(status) == PurchaseStatus.RECEIVED:
        return LedgerDelta(item.product_id, to_quantity(item.quantity))
    return LedgerDelta(item.product_id, ZERO)


def reversed_delta(delta: LedgerDelta) -> LedgerDelta:
    return LedgerDelta(delta.product_id, -delta.quantity)


def net_deltas(deltas: Iterable[LedgerDelta]) -> Dict[int, Decimal]:
    """Sum deltas per product, ordered by product id.

    Products whose contributions cancel out stay in the result with a zero
    total so callers still get their stock snapshot.
    """
    totals: Dict[int, Decimal] = {}
    for delta in deltas:
        totals[delta.product_id] = totals.get(delta.product_id, ZERO) + Decimal(delta.quantity)
    return dict(sorted(totals.items()))


class StockLedger:
    def __init__(self, db: Session, allow_negative: Optional[bool] = None):
        self.db = db
        if allow_negative is None:
            allow_negative = settings.ALLOW_NEGATIVE_STOCK
        self.allow_negative = allow_negative

    def current_stock(self, product_id: int) -> Decimal:
        # Row lock; a no-op on SQLite, SELECT ... FOR UPDATE elsewhere
        row = (
            self.db.query(Product.stock)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )
        if row is None:
            raise NotFoundError(f"Product {product_id} not found")
        return Decimal(row.stock)

    def apply_delta(self, product_id: int, quantity) -> Decimal:
        """Increment stock by a signed quantity and return the stock before it."""
        quantity = Decimal(quantity)
        before = self.current_stock(product_id)
        if quantity == 0:
            return before

        if not self.allow_negative and before + quantity < 0:
            raise ValidationError(
                f"Insufficient stock for product {product_id}: "
                f"{before} available, {-quantity} required"
            )

        self.db.query(Product).filter(Product.id == product_id).update(
            {Product.stock: Product.stock + quantity},
            synchronize_session="fetch",
        )
        return before

    def reverse_delta(self, product_id: int, quantity) -> Decimal:
        return self.apply_delta(product_id, -Decimal(quantity))

    def post(self, deltas: Iterable[LedgerDelta]) -> Dict[int, Decimal]:
        """Apply a document's deltas, one product row at a time.

        Deltas are netted per product and applied in ascending product id,
        which serialises repeated lines for the same product and keeps a
        fixed lock order between concurrent documents. Returns the stock each
        product had before the posting.
        """
        before: Dict[int, Decimal] = {}
        for product_id, quantity in net_deltas(deltas).items():
            before[product_id] = self.apply_delta(product_id, quantity)
            if quantity:
                logger.debug("Stock of product %s moved by %s", product_id, quantity)
        return before
