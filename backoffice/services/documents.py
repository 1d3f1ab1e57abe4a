# backoffice/services/documents.py
"""Helpers shared by the stock moving documents (adjustments, purchases)."""
import time
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Query, Session

from backoffice.errors import ConflictError, NotFoundError
from backoffice.models.product import Product


def require_entity(db: Session, model, entity_id: Optional[int], label: str):
    entity = db.get(model, entity_id) if entity_id is not None else None
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


def require_products(db: Session, product_ids: Iterable[int]) -> None:
    wanted = set(product_ids)
    if not wanted:
        return
    found = {pid for (pid,) in db.query(Product.id).filter(Product.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise NotFoundError(f"Product not found: {', '.join(str(pid) for pid in missing)}")


def ensure_unique_reference(db: Session, model, reference: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(model.id).filter(model.reference == reference)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"Reference {reference} already exists")


def generate_reference(db: Session, model, prefix: str) -> str:
    """``<prefix>-<last six digits of the millisecond clock>``, bumped until free."""
    stamp = int(time.time() * 1000) % 1_000_000
    for offset in range(1000):
        candidate = f"{prefix}-{(stamp + offset) % 1_000_000:06d}"
        if db.query(model.id).filter(model.reference == candidate).first() is None:
            return candidate
    raise ConflictError(f"Could not allocate a free {prefix} reference")


def claim_reference(db: Session, model, reference: Optional[str], prefix: str) -> str:
    reference = (reference or "").strip()
    if not reference:
        return generate_reference(db, model, prefix)
    ensure_unique_reference(db, model, reference)
    return reference


def paginate(query: Query, page: int, limit: int) -> Tuple[List, int]:
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
