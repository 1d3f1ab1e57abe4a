# backoffice/routes/purchases.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.errors import ServiceError, ValidationError
from backoffice.models.purchase import Purchase, PurchaseItem, PurchaseStatus, PaymentStatus
from backoffice.schemas.common import DeleteResponse, Pagination
from backoffice.schemas.purchase import (
    PurchaseCreate, PurchaseItemOut, PurchaseListItem, PurchaseOut, PurchasePage, PurchasePatch, PurchaseUpdate,
)
from backoffice.services import purchases as purchase_service
from backoffice.services.filters import PurchaseFilter
from backoffice.utils.audit import client_ip, write_failure, write_log

router = APIRouter(prefix="/purchases", tags=["Purchases"])

HEADER_FIELDS = (
    "id", "reference", "supplier_id", "warehouse_id", "currency_id", "date", "status", "payment_status",
    "subtotal", "tax_rate", "tax_amount", "discount", "shipping", "total", "paid", "due", "notes", "created_at",
)


def _require_id(id: Optional[int]) -> int:
    if id is None:
        raise ValidationError("Missing purchase id")
    return id


def _summary_fields(purchase: Purchase) -> dict:
    data = {f: getattr(purchase, f) for f in HEADER_FIELDS}
    data["supplier_name"] = purchase.supplier.name if purchase.supplier else None
    data["warehouse_name"] = purchase.warehouse.name if purchase.warehouse else None
    return data


def _item_to_out(item: PurchaseItem) -> PurchaseItemOut:
    product = item.product
    return PurchaseItemOut(
        id=item.id,
        product_id=item.product_id,
        product_code=product.code if product else None,
        product_name=product.name if product else None,
        quantity=item.quantity,
        unit_cost=item.unit_cost,
        discount=item.discount,
        tax=item.tax,
        subtotal=item.subtotal,
    )


def _purchase_to_out(purchase: Purchase) -> PurchaseOut:
    return PurchaseOut(
        **_summary_fields(purchase),
        item_count=len(purchase.items),
        items=[_item_to_out(it) for it in purchase.items],
    )


def _audit(db: Session, request: Request, action: str, purchase_id: int, reference: str, **extra):
    write_log(
        db, action=action, resource="purchases", ip=client_ip(request),
        meta={"id": purchase_id, "reference": reference, **extra},
    )


# Single purchase (?id=) or a filtered, paginated list
@router.get("")
def get_purchases(
    id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    status: Optional[PurchaseStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    if id is not None:
        return _purchase_to_out(purchase_service.get_purchase(db, id))

    filters = PurchaseFilter(
        search=search, warehouse_id=warehouse_id, supplier_id=supplier_id, status=status,
        payment_status=payment_status, date_from=date_from, date_to=date_to,
    )
    items, total = purchase_service.list_purchases(db, filters, page, limit)
    return PurchasePage(
        data=[PurchaseListItem(**_summary_fields(p)) for p in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=PurchaseOut, status_code=201)
def create_purchase(payload: PurchaseCreate, request: Request, db: Session = Depends(get_db)):
    try:
        purchase = purchase_service.create_purchase(db, payload)
    except ServiceError as exc:
        write_failure(db, action="PURCHASE_CREATE", resource="purchases", request=request, error=exc)
        raise

    _audit(db, request, "PURCHASE_CREATE", purchase.id, purchase.reference, status=purchase.status.value)
    return _purchase_to_out(purchase)


@router.put("", response_model=PurchaseOut)
def update_purchase(
    payload: PurchaseUpdate,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    purchase_id = _require_id(id)
    try:
        purchase = purchase_service.update_purchase(db, purchase_id, payload)
    except ServiceError as exc:
        write_failure(db, action="PURCHASE_UPDATE", resource="purchases", request=request, error=exc)
        raise

    _audit(db, request, "PURCHASE_UPDATE", purchase.id, purchase.reference)
    return _purchase_to_out(purchase)


# Partial header update; a status change may move stock
@router.patch("", response_model=PurchaseOut)
def patch_purchase(
    payload: PurchasePatch,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    purchase_id = _require_id(id)
    action = "PURCHASE_STATUS" if "status" in payload.model_fields_set else "PURCHASE_PATCH"
    try:
        purchase = purchase_service.patch_purchase(db, purchase_id, payload)
    except ServiceError as exc:
        write_failure(db, action=action, resource="purchases", request=request, error=exc)
        raise

    _audit(db, request, action, purchase.id, purchase.reference, status=purchase.status.value)
    return _purchase_to_out(purchase)


@router.delete("", response_model=DeleteResponse)
def delete_purchase(request: Request, id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    purchase_id = _require_id(id)
    try:
        reference = purchase_service.delete_purchase(db, purchase_id)
    except ServiceError as exc:
        write_failure(db, action="PURCHASE_DELETE", resource="purchases", request=request, error=exc)
        raise

    _audit(db, request, "PURCHASE_DELETE", purchase_id, reference)
    return DeleteResponse(message=f"Purchase {reference} deleted successfully")
