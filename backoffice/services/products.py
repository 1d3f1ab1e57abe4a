# backoffice/services/products.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from backoffice.database import UnitOfWork
from backoffice.errors import ConflictError, NotFoundError, ValidationError
from backoffice.models.product import Product
from backoffice.models.unit import Unit
from backoffice.models.warehouse import Warehouse
from backoffice.schemas.product import ProductCreate, ProductEditRequest
from backoffice.services.documents import paginate, require_entity
from backoffice.services.guard import PRODUCT_DEPENDENTS, ensure_deletable

logger = logging.getLogger(__name__)


def _norm_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    c = code.strip().upper()
    return c if c else None


def _ensure_unique(db: Session, column, value, label: str, exclude_id: Optional[int] = None) -> None:
    if value is None:
        return
    q = db.query(Product.id).filter(column == value)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"Product {label} already exists")


def get_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.unit), joinedload(Product.warehouse))
        .filter(Product.id == product_id)
        .first()
    )
    if product is None:
        raise NotFoundError("Product not found")
    return product


def list_products(
    db: Session, search: Optional[str], warehouse_id: Optional[int], page: int, limit: int
) -> Tuple[List[Product], int]:
    query = db.query(Product).options(joinedload(Product.unit), joinedload(Product.warehouse))
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.code.ilike(like), Product.barcode.ilike(like)))
    if warehouse_id is not None:
        query = query.filter(Product.warehouse_id == warehouse_id)
    return paginate(query.order_by(Product.id.asc()), page, limit)


# Products at or below their alert quantity, lowest stock first
def list_low_stock(db: Session, limit: int) -> List[Product]:
    return (
        db.query(Product)
        .options(joinedload(Product.unit), joinedload(Product.warehouse))
        .filter(Product.stock <= Product.alert_quantity)
        .order_by(Product.stock.asc(), Product.id.asc())
        .limit(limit)
        .all()
    )


def create_product(db: Session, payload: ProductCreate) -> Product:
    code = _norm_code(payload.code)
    if code is None:
        raise ValidationError("Product code is required")
    barcode = (payload.barcode or "").strip() or None

    with UnitOfWork(db, "create product"):
        _ensure_unique(db, Product.code, code, "code")
        _ensure_unique(db, Product.barcode, barcode, "barcode")
        if payload.unit_id is not None:
            require_entity(db, Unit, payload.unit_id, "Unit")
        if payload.warehouse_id is not None:
            require_entity(db, Warehouse, payload.warehouse_id, "Warehouse")

        product = Product(
            name=payload.name.strip(),
            code=code,
            barcode=barcode,
            cost=payload.cost,
            price=payload.price,
            stock=payload.stock,
            alert_quantity=payload.alert_quantity,
            unit_id=payload.unit_id,
            warehouse_id=payload.warehouse_id,
        )
        db.add(product)
        db.flush()

    logger.info("Product %s created with opening stock %s", code, payload.stock)
    return product


def update_product(db: Session, product_id: int, payload: ProductEditRequest) -> Product:
    changes = payload.model_dump(exclude_unset=True)

    with UnitOfWork(db, "update product"):
        product = get_product(db, product_id)

        if "code" in changes:
            code = _norm_code(changes.pop("code"))
            if code is None:
                raise ValidationError("Product code cannot be empty")
            if code != product.code:
                _ensure_unique(db, Product.code, code, "code", exclude_id=product.id)
            product.code = code
        if "barcode" in changes:
            barcode = (changes.pop("barcode") or "").strip() or None
            if barcode != product.barcode:
                _ensure_unique(db, Product.barcode, barcode, "barcode", exclude_id=product.id)
            product.barcode = barcode
        if changes.get("unit_id") is not None:
            require_entity(db, Unit, changes["unit_id"], "Unit")
        if changes.get("warehouse_id") is not None:
            require_entity(db, Warehouse, changes["warehouse_id"], "Warehouse")

        for key, value in changes.items():
            if value is None and key in ("name", "cost", "price", "alert_quantity"):
                raise ValidationError(f"Product {key} cannot be empty")
            setattr(product, key, value)

    return product


def delete_product(db: Session, product_id: int) -> str:
    with UnitOfWork(db, "delete product"):
        product = get_product(db, product_id)
        ensure_deletable(db, "product", PRODUCT_DEPENDENTS, product.id)
        code = product.code
        db.delete(product)

    logger.info("Product %s deleted", code)
    return code
