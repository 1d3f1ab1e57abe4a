# backoffice/services/status.py
from typing import List, Optional, Sequence

from backoffice.models.purchase import PurchaseStatus
from backoffice.services.ledger import LedgerDelta, purchase_item_delta, reversed_delta


def is_received(status: Optional[PurchaseStatus]) -> bool:
    return status is not None and PurchaseStatus(status) == PurchaseStatus.RECEIVED


def transition_deltas(
    old_status: Optional[PurchaseStatus],
    new_status: Optional[PurchaseStatus],
    old_items: Sequence,
    new_items: Optional[Sequence] = None,
) -> List[LedgerDelta]:
    """Ledger deltas for moving a purchase from one status to another.

    ``old_status=None`` is a create, ``new_status=None`` a delete. When
    ``new_items`` is omitted the item set is unchanged (header patch) and
    only crossing the ``received`` boundary moves stock. With a replaced
    item set the old lines are reversed under the old status and the new
    lines applied under the new one.
    """
    if new_items is None:
        if is_received(old_status) == is_received(new_status):
            return []
        new_items = old_items

    deltas: List[LedgerDelta] = []
    if is_received(old_status):
        deltas.extend(reversed_delta(purchase_item_delta(item, old_status)) for item in old_items)
    if is_received(new_status):
        deltas.extend(purchase_item_delta(item, new_status) for item in new_items)
    return deltas
