# backoffice/services/masterdata.py
"""Warehouses, suppliers, units and currencies.

Read mostly reference data; the only rule with teeth is that nothing is
deleted while documents or products still point at it.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.database import UnitOfWork
from backoffice.errors import ConflictError, ValidationError
from backoffice.models.currency import Currency
from backoffice.models.supplier import Supplier
from backoffice.models.unit import Unit
from backoffice.models.warehouse import Warehouse
from backoffice.schemas.settings import CurrencyCreate, UnitCreate
from backoffice.schemas.supplier import SupplierCreate, SupplierEditRequest
from backoffice.schemas.warehouse import WarehouseCreate, WarehouseEditRequest
from backoffice.services.documents import paginate, require_entity
from backoffice.services.guard import (
    CURRENCY_DEPENDENTS, SUPPLIER_DEPENDENTS, UNIT_DEPENDENTS, WAREHOUSE_DEPENDENTS, ensure_deletable,
)

logger = logging.getLogger(__name__)


def _taken(db: Session, column, value, exclude_id: Optional[int] = None) -> bool:
    q = db.query(column.class_.id).filter(func.lower(column) == value.lower())
    if exclude_id is not None:
        q = q.filter(column.class_.id != exclude_id)
    return q.first() is not None


# ---- WAREHOUSES ----
def list_warehouses(db: Session, search: Optional[str], page: int, limit: int) -> Tuple[List[Warehouse], int]:
    query = db.query(Warehouse)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(
            Warehouse.name.ilike(like), Warehouse.city.ilike(like), Warehouse.country.ilike(like),
        ))
    return paginate(query.order_by(Warehouse.name.asc()), page, limit)


def get_warehouse(db: Session, warehouse_id: int) -> Warehouse:
    return require_entity(db, Warehouse, warehouse_id, "Warehouse")


def create_warehouse(db: Session, payload: WarehouseCreate) -> Warehouse:
    name = payload.name.strip()
    if not name:
        raise ValidationError("Warehouse name is required")

    with UnitOfWork(db, "create warehouse"):
        if _taken(db, Warehouse.name, name):
            raise ConflictError("Warehouse with this name already exists")
        if payload.email and _taken(db, Warehouse.email, payload.email):
            raise ConflictError("Warehouse with this email already exists")
        warehouse = Warehouse(
            name=name, phone=payload.phone, email=payload.email,
            city=payload.city, country=payload.country,
        )
        db.add(warehouse)
        db.flush()
    return warehouse


def update_warehouse(db: Session, warehouse_id: int, payload: WarehouseEditRequest) -> Warehouse:
    changes = payload.model_dump(exclude_unset=True)

    with UnitOfWork(db, "update warehouse"):
        warehouse = get_warehouse(db, warehouse_id)
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError("Warehouse name cannot be empty")
            if _taken(db, Warehouse.name, name, exclude_id=warehouse.id):
                raise ConflictError("Warehouse with this name already exists")
            changes["name"] = name
        if changes.get("email") and _taken(db, Warehouse.email, changes["email"], exclude_id=warehouse.id):
            raise ConflictError("Warehouse with this email already exists")
        for key, value in changes.items():
            setattr(warehouse, key, value)
    return warehouse


def delete_warehouse(db: Session, warehouse_id: int) -> str:
    with UnitOfWork(db, "delete warehouse"):
        warehouse = get_warehouse(db, warehouse_id)
        ensure_deletable(db, "warehouse", WAREHOUSE_DEPENDENTS, warehouse.id)
        name = warehouse.name
        db.delete(warehouse)
    logger.info("Warehouse %s deleted", name)
    return name


# ---- SUPPLIERS ----
def list_suppliers(db: Session, search: Optional[str], page: int, limit: int) -> Tuple[List[Supplier], int]:
    query = db.query(Supplier)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Supplier.name.ilike(like), Supplier.email.ilike(like), Supplier.phone.ilike(like)))
    return paginate(query.order_by(Supplier.name.asc()), page, limit)


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    return require_entity(db, Supplier, supplier_id, "Supplier")


def create_supplier(db: Session, payload: SupplierCreate) -> Supplier:
    with UnitOfWork(db, "create supplier"):
        supplier = Supplier(
            name=payload.name.strip(), email=payload.email,
            phone=payload.phone, address=payload.address,
        )
        db.add(supplier)
        db.flush()
    return supplier


def update_supplier(db: Session, supplier_id: int, payload: SupplierEditRequest) -> Supplier:
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationError("Supplier name cannot be empty")

    with UnitOfWork(db, "update supplier"):
        supplier = get_supplier(db, supplier_id)
        for key, value in changes.items():
            setattr(supplier, key, value)
    return supplier


def delete_supplier(db: Session, supplier_id: int) -> str:
    with UnitOfWork(db, "delete supplier"):
        supplier = get_supplier(db, supplier_id)
        ensure_deletable(db, "supplier", SUPPLIER_DEPENDENTS, supplier.id)
        name = supplier.name
        db.delete(supplier)
    logger.info("Supplier %s deleted", name)
    return name


# ---- UNITS ----
def list_units(db: Session) -> List[Unit]:
    return db.query(Unit).order_by(Unit.name.asc()).all()


def create_unit(db: Session, payload: UnitCreate) -> Unit:
    name = payload.name.strip()
    with UnitOfWork(db, "create unit"):
        if _taken(db, Unit.name, name):
            raise ConflictError("Unit with this name already exists")
        unit = Unit(name=name, short_name=payload.short_name)
        db.add(unit)
        db.flush()
    return unit


def delete_unit(db: Session, unit_id: int) -> str:
    with UnitOfWork(db, "delete unit"):
        unit = require_entity(db, Unit, unit_id, "Unit")
        ensure_deletable(db, "unit", UNIT_DEPENDENTS, unit.id)
        name = unit.name
        db.delete(unit)
    return name


# ---- CURRENCIES ----
def list_currencies(db: Session) -> List[Currency]:
    return db.query(Currency).order_by(Currency.code.asc()).all()


def create_currency(db: Session, payload: CurrencyCreate) -> Currency:
    code = payload.code.strip().upper()
    with UnitOfWork(db, "create currency"):
        if _taken(db, Currency.code, code):
            raise ConflictError("Currency with this code already exists")
        currency = Currency(code=code, name=payload.name.strip(), symbol=payload.symbol)
        db.add(currency)
        db.flush()
    return currency


def delete_currency(db: Session, currency_id: int) -> str:
    with UnitOfWork(db, "delete currency"):
        currency = require_entity(db, Currency, currency_id, "Currency")
        ensure_deletable(db, "currency", CURRENCY_DEPENDENTS, currency.id)
        code = currency.code
        db.delete(currency)
    return code
