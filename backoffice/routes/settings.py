# backoffice/routes/settings.py
# Units of measure and currencies
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from backoffice.database import get_db
from backoffice.schemas.common import DeleteResponse
from backoffice.schemas.settings import CurrencyCreate, CurrencyOut, UnitCreate, UnitOut
from backoffice.services import masterdata
from backoffice.utils.audit import client_ip, write_log

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/units", response_model=List[UnitOut])
def list_units(db: Session = Depends(get_db)):
    return [UnitOut.model_validate(u) for u in masterdata.list_units(db)]


@router.post("/units", response_model=UnitOut, status_code=201)
def create_unit(payload: UnitCreate, request: Request, db: Session = Depends(get_db)):
    unit = masterdata.create_unit(db, payload)
    write_log(db, action="UNIT_CREATE", resource="units", ip=client_ip(request), meta={"id": unit.id})
    return UnitOut.model_validate(unit)


@router.delete("/units/{unit_id}", response_model=DeleteResponse)
def delete_unit(unit_id: int, request: Request, db: Session = Depends(get_db)):
    name = masterdata.delete_unit(db, unit_id)
    write_log(db, action="UNIT_DELETE", resource="units", ip=client_ip(request), meta={"id": unit_id})
    return DeleteResponse(message=f"Unit {name} deleted successfully")


@router.get("/currencies", response_model=List[CurrencyOut])
def list_currencies(db: Session = Depends(get_db)):
    return [CurrencyOut.model_validate(c) for c in masterdata.list_currencies(db)]


@router.post("/currencies", response_model=CurrencyOut, status_code=201)
def create_currency(payload: CurrencyCreate, request: Request, db: Session = Depends(get_db)):
    currency = masterdata.create_currency(db, payload)
    write_log(db, action="CURRENCY_CREATE", resource="currencies", ip=client_ip(request), meta={"id": currency.id})
    return CurrencyOut.model_validate(currency)


@router.delete("/currencies/{currency_id}", response_model=DeleteResponse)
def delete_currency(currency_id: int, request: Request, db: Session = Depends(get_db)):
    code = masterdata.delete_currency(db, currency_id)
    write_log(db, action="CURRENCY_DELETE", resource="currencies", ip=client_ip(request), meta={"id": currency_id})
    return DeleteResponse(message=f"Currency {code} deleted successfully")
