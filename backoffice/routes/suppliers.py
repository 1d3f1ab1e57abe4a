# backoffice/routes/suppliers.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.errors import ValidationError
from backoffice.schemas.common import DeleteResponse, Pagination
from backoffice.schemas.supplier import SupplierCreate, SupplierEditRequest, SupplierOut, SupplierPage
from backoffice.services import masterdata
from backoffice.utils.audit import client_ip, write_log

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def _require_id(id: Optional[int]) -> int:
    if id is None:
        raise ValidationError("Supplier ID is required")
    return id


@router.get("")
def get_suppliers(
    id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    if id is not None:
        return SupplierOut.model_validate(masterdata.get_supplier(db, id))

    items, total = masterdata.list_suppliers(db, search, page, limit)
    return SupplierPage(
        data=[SupplierOut.model_validate(s) for s in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=SupplierOut, status_code=201)
def create_supplier(payload: SupplierCreate, request: Request, db: Session = Depends(get_db)):
    supplier = masterdata.create_supplier(db, payload)
    write_log(db, action="SUPPLIER_CREATE", resource="suppliers", ip=client_ip(request), meta={"id": supplier.id})
    return SupplierOut.model_validate(supplier)


@router.patch("", response_model=SupplierOut)
def edit_supplier(
    payload: SupplierEditRequest,
    request: Request,
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    supplier = masterdata.update_supplier(db, _require_id(id), payload)
    write_log(db, action="SUPPLIER_EDIT", resource="suppliers", ip=client_ip(request), meta={"id": supplier.id})
    return SupplierOut.model_validate(supplier)


@router.delete("", response_model=DeleteResponse)
def delete_supplier(request: Request, id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    supplier_id = _require_id(id)
    name = masterdata.delete_supplier(db, supplier_id)
    write_log(db, action="SUPPLIER_DELETE", resource="suppliers", ip=client_ip(request), meta={"id": supplier_id})
    return DeleteResponse(message=f"Supplier {name} deleted successfully")
