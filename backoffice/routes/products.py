# backoffice/routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.errors import ServiceError, ValidationError
from backoffice.models.product import Product
import backoffice.schemas.product as product_schemas
from backoffice.schemas.common import DeleteResponse, Pagination
from backoffice.services import products as product_service
from backoffice.utils.audit import client_ip, write_failure, write_log

router = APIRouter(prefix="/products", tags=["Products"])

PRODUCT_FIELDS = (
    "id", "name", "code", "barcode", "cost", "price", "stock", "alert_quantity", "unit_id", "warehouse_id",
)


# ---- HELPERS ----
def _require_id(id: Optional[int]) -> int:
    if id is None:
        raise ValidationError("Missing product id")
    return id


def _product_to_out(product: Product) -> product_schemas.ProductOut:
    data = {f: getattr(product, f) for f in PRODUCT_FIELDS}
    data["unit_name"] = product.unit.name if product.unit else None
    data["warehouse_name"] = product.warehouse.name if product.warehouse else None
    return product_schemas.ProductOut.model_validate(data)


# =========================
# LIST / SINGLE PRODUCT
# =========================
@router.get("")
def get_products(
    id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    if id is not None:
        return _product_to_out(product_service.get_product(db, id))

    items, total = product_service.list_products(db, search, warehouse_id, page, limit)
    return product_schemas.ProductListPage(
        data=[_product_to_out(p) for p in items],
        pagination=Pagination.build(total, page, limit),
    )


# Products at or below their alert quantity
@router.get("/low-stock", response_model=List[product_schemas.ProductOut])
def get_low_stock(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return [_product_to_out(p) for p in product_service.list_low_stock(db, limit)]


# =========================
# CREATE / EDIT / DELETE
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=201)
def add_product(payload: product_schemas.ProductCreate, request: Request, db: Session = Depends(get_db)):
    try:
        product = product_service.create_product(db, payload)
    except ServiceError as exc:
        write_failure(db, action="PRODUCT_CREATE", resource="products", request=request, error=exc)
        raise

    write_log(
        db, action="PRODUCT_CREATE", resource="products", ip=client_ip(request),
        meta={"id": product.id, "code": product.code},
    )
    return _product_to_out(product)


@router.patch("", response_model=product_schemas.ProductOut)
def edit_product(
    payload: product_schemas.ProductEditRequest,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    product_id = _require_id(id)
    try:
        product = product_service.update_product(db, product_id, payload)
    except ServiceError as exc:
        write_failure(db, action="PRODUCT_EDIT", resource="products", request=request, error=exc)
        raise

    write_log(
        db, action="PRODUCT_EDIT", resource="products", ip=client_ip(request),
        meta={"id": product.id, "fields": sorted(payload.model_fields_set)},
    )
    return _product_to_out(product)


@router.delete("", response_model=DeleteResponse)
def delete_product(request: Request, id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    product_id = _require_id(id)
    try:
        code = product_service.delete_product(db, product_id)
    except ServiceError as exc:
        write_failure(db, action="PRODUCT_DELETE", resource="products", request=request, error=exc)
        raise

    write_log(
        db, action="PRODUCT_DELETE", resource="products", ip=client_ip(request),
        meta={"id": product_id, "code": code},
    )
    return DeleteResponse(message=f"Product {code} deleted successfully")
