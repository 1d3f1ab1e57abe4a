# backoffice/routes/adjustments.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.errors import ServiceError, ValidationError
from backoffice.models.adjustment import Adjustment, AdjustmentItem, AdjustmentType
from backoffice.schemas.adjustment import (
    AdjustmentCreate, AdjustmentItemOut, AdjustmentListItem, AdjustmentOut, AdjustmentPage, AdjustmentUpdate,
)
from backoffice.schemas.common import DeleteResponse, Pagination
from backoffice.services import adjustments as adjustment_service
from backoffice.services.filters import AdjustmentFilter
from backoffice.utils.audit import client_ip, write_failure, write_log

router = APIRouter(prefix="/adjustments", tags=["Adjustments"])


def _require_id(id: Optional[int]) -> int:
    if id is None:
        raise ValidationError("Missing adjustment id")
    return id


# Map Adjustment models to response schemas with denormalised names
def _item_to_out(item: AdjustmentItem) -> AdjustmentItemOut:
    product = item.product
    return AdjustmentItemOut(
        id=item.id,
        product_id=item.product_id,
        product_code=product.code if product else None,
        product_name=product.name if product else None,
        unit_name=product.unit.name if product and product.unit else None,
        quantity=item.quantity,
        type=item.type,
        pre_stock=item.pre_stock,
    )


def _summary_fields(adjustment: Adjustment) -> dict:
    return {
        "id": adjustment.id,
        "reference": adjustment.reference,
        "warehouse_id": adjustment.warehouse_id,
        "warehouse_name": adjustment.warehouse.name if adjustment.warehouse else None,
        "date": adjustment.date,
        "type": adjustment.type,
        "notes": adjustment.notes,
        "item_count": len(adjustment.items),
        "created_at": adjustment.created_at,
    }


def _adjustment_to_out(adjustment: Adjustment) -> AdjustmentOut:
    return AdjustmentOut(
        **_summary_fields(adjustment),
        items=[_item_to_out(it) for it in adjustment.items],
    )


# Single adjustment (?id=) or a filtered, paginated list
@router.get("")
def get_adjustments(
    id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    type: Optional[AdjustmentType] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    if id is not None:
        return _adjustment_to_out(adjustment_service.get_adjustment(db, id))

    filters = AdjustmentFilter(
        search=search, warehouse_id=warehouse_id, type=type, date_from=date_from, date_to=date_to,
    )
    items, total = adjustment_service.list_adjustments(db, filters, page, limit)
    return AdjustmentPage(
        data=[AdjustmentListItem(**_summary_fields(a)) for a in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=AdjustmentOut, status_code=201)
def create_adjustment(payload: AdjustmentCreate, request: Request, db: Session = Depends(get_db)):
    try:
        adjustment = adjustment_service.create_adjustment(db, payload)
    except ServiceError as exc:
        write_failure(db, action="ADJUSTMENT_CREATE", resource="adjustments", request=request, error=exc)
        raise

    write_log(
        db, action="ADJUSTMENT_CREATE", resource="adjustments", ip=client_ip(request),
        meta={"id": adjustment.id, "reference": adjustment.reference},
    )
    return _adjustment_to_out(adjustment)


# Full replacement: old lines are reversed before the new ones are applied
@router.put("", response_model=AdjustmentOut)
def update_adjustment(
    payload: AdjustmentUpdate,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    adjustment_id = _require_id(id)
    try:
        adjustment = adjustment_service.update_adjustment(db, adjustment_id, payload)
    except ServiceError as exc:
        write_failure(db, action="ADJUSTMENT_UPDATE", resource="adjustments", request=request, error=exc)
        raise

    write_log(
        db, action="ADJUSTMENT_UPDATE", resource="adjustments", ip=client_ip(request),
        meta={"id": adjustment.id, "reference": adjustment.reference},
    )
    return _adjustment_to_out(adjustment)


@router.delete("", response_model=DeleteResponse)
def delete_adjustment(request: Request, id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    adjustment_id = _require_id(id)
    try:
        reference = adjustment_service.delete_adjustment(db, adjustment_id)
    except ServiceError as exc:
        write_failure(db, action="ADJUSTMENT_DELETE", resource="adjustments", request=request, error=exc)
        raise

    write_log(
        db, action="ADJUSTMENT_DELETE", resource="adjustments", ip=client_ip(request),
        meta={"id": adjustment_id, "reference": reference},
    )
    return DeleteResponse(message=f"Adjustment {reference} deleted successfully")
