# backoffice/services/guard.py
"""Pre-delete checks for master data still referenced by other rows."""
from typing import List, Sequence, Tuple, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.errors import ReferentialIntegrityError
from backoffice.models.adjustment import Adjustment, AdjustmentItem
from backoffice.models.product import Product
from backoffice.models.purchase import Purchase, PurchaseItem, PurchaseReturn
from backoffice.models.quotation import Quotation, QuotationItem
from backoffice.models.sale import Sale, SaleItem
from backoffice.models.transfer import Transfer, TransferItem

# (label, referencing column or columns)
Dependent = Tuple[str, Union[object, Tuple[object, ...]]]

PRODUCT_DEPENDENTS: Sequence[Dependent] = (
    ("adjustment items", AdjustmentItem.product_id),
    ("purchase items", PurchaseItem.product_id),
    ("sale items", SaleItem.product_id),
    ("transfer items", TransferItem.product_id),
    ("quotation items", QuotationItem.product_id),
)

WAREHOUSE_DEPENDENTS: Sequence[Dependent] = (
    ("products", Product.warehouse_id),
    ("sales", Sale.warehouse_id),
    ("purchases", Purchase.warehouse_id),
    ("quotations", Quotation.warehouse_id),
    ("adjustments", Adjustment.warehouse_id),
    ("transfers", (Transfer.from_warehouse_id, Transfer.to_warehouse_id)),
)

SUPPLIER_DEPENDENTS: Sequence[Dependent] = (
    ("purchases", Purchase.supplier_id),
)

UNIT_DEPENDENTS: Sequence[Dependent] = (
    ("products", Product.unit_id),
)

CURRENCY_DEPENDENTS: Sequence[Dependent] = (
    ("sales", Sale.currency_id),
    ("purchases", Purchase.currency_id),
)

PURCHASE_DEPENDENTS: Sequence[Dependent] = (
    ("purchase returns", PurchaseReturn.purchase_id),
)


def _count(db: Session, columns, entity_id: int) -> int:
    if not isinstance(columns, tuple):
        columns = (columns,)
    table = columns[0].class_
    return (
        db.query(func.count())
        .select_from(table)
        .filter(or_(*(column == entity_id for column in columns)))
        .scalar()
    )


def blocking_associations(db: Session, dependents: Sequence[Dependent], entity_id: int) -> List[str]:
    return [label for label, columns in dependents if _count(db, columns, entity_id) > 0]


def ensure_deletable(db: Session, entity: str, dependents: Sequence[Dependent], entity_id: int) -> None:
    blocking = blocking_associations(db, dependents, entity_id)
    if blocking:
        raise ReferentialIntegrityError(entity, blocking)
