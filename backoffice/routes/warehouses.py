# backoffice/routes/warehouses.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.errors import ServiceError, ValidationError
from backoffice.schemas.common import DeleteResponse, Pagination
from backoffice.schemas.warehouse import WarehouseCreate, WarehouseEditRequest, WarehouseOut, WarehousePage
from backoffice.services import masterdata
from backoffice.utils.audit import client_ip, write_failure, write_log

router = APIRouter(prefix="/settings/warehouses", tags=["Warehouses"])


def _require_id(id: Optional[int]) -> int:
    if id is None:
        raise ValidationError("Warehouse ID is required")
    return id


@router.get("")
def get_warehouses(
    id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    if id is not None:
        return WarehouseOut.model_validate(masterdata.get_warehouse(db, id))

    items, total = masterdata.list_warehouses(db, search, page, limit)
    return WarehousePage(
        data=[WarehouseOut.model_validate(w) for w in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=WarehouseOut, status_code=201)
def create_warehouse(payload: WarehouseCreate, request: Request, db: Session = Depends(get_db)):
    warehouse = masterdata.create_warehouse(db, payload)
    write_log(db, action="WAREHOUSE_CREATE", resource="warehouses", ip=client_ip(request), meta={"id": warehouse.id})
    return WarehouseOut.model_validate(warehouse)


@router.patch("", response_model=WarehouseOut)
def edit_warehouse(
    payload: WarehouseEditRequest,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    warehouse = masterdata.update_warehouse(db, _require_id(id), payload)
    write_log(db, action="WAREHOUSE_EDIT", resource="warehouses", ip=client_ip(request), meta={"id": warehouse.id})
    return WarehouseOut.model_validate(warehouse)


# Refused while products or documents still reference the warehouse
@router.delete("", response_model=DeleteResponse)
def delete_warehouse(request: Request, id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    warehouse_id = _require_id(id)
    try:
        name = masterdata.delete_warehouse(db, warehouse_id)
    except ServiceError as exc:
        write_failure(db, action="WAREHOUSE_DELETE", resource="warehouses", request=request, error=exc)
        raise

    write_log(db, action="WAREHOUSE_DELETE", resource="warehouses", ip=client_ip(request), meta={"id": warehouse_id})
    return DeleteResponse(message=f"Warehouse {name} deleted successfully")
