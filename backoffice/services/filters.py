# backoffice/services/filters.py
"""Typed list filters; each resource accepts only the fields declared here."""
import datetime as dt
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Query

from backoffice.models.adjustment import Adjustment, AdjustmentType
from backoffice.models.purchase import Purchase, PurchaseStatus, PaymentStatus
from backoffice.models.supplier import Supplier


class AdjustmentFilter(BaseModel):
    search: Optional[str] = None
    warehouse_id: Optional[int] = None
    type: Optional[AdjustmentType] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    def apply(self, query: Query) -> Query:
        if self.search:
            like = f"%{self.search}%"
            query = query.filter(or_(Adjustment.reference.ilike(like), Adjustment.notes.ilike(like)))
        if self.warehouse_id is not None:
            query = query.filter(Adjustment.warehouse_id == self.warehouse_id)
        if self.type is not None:
            query = query.filter(Adjustment.type == self.type)
        if self.date_from is not None:
            query = query.filter(Adjustment.date >= self.date_from)
        if self.date_to is not None:
            query = query.filter(Adjustment.date <= self.date_to)
        return query


class PurchaseFilter(BaseModel):
    search: Optional[str] = None
    warehouse_id: Optional[int] = None
    supplier_id: Optional[int] = None
    status: Optional[PurchaseStatus] = None
    payment_status: Optional[PaymentStatus] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    def apply(self, query: Query) -> Query:
        if self.search:
            like = f"%{self.search}%"
            query = query.outerjoin(Purchase.supplier).filter(
                or_(Purchase.reference.ilike(like), Supplier.name.ilike(like))
            )
        if self.warehouse_id is not None:
            query = query.filter(Purchase.warehouse_id == self.warehouse_id)
        if self.supplier_id is not None:
            query = query.filter(Purchase.supplier_id == self.supplier_id)
        if self.status is not None:
            query = query.filter(Purchase.status == self.status)
        if self.payment_status is not None:
            query = query.filter(Purchase.payment_status == self.payment_status)
        if self.date_from is not None:
            query = query.filter(Purchase.date >= self.date_from)
        if self.date_to is not None:
            query = query.filter(Purchase.date <= self.date_to)
        return query
