# backoffice/schemas/adjustment.py
import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.models.adjustment import AdjustmentType
from backoffice.schemas.common import ORMBase, Pagination


# A single adjustment line as sent by the client
class AdjustmentItemIn(BaseModel):
    product_id: int
    quantity: Decimal = Field(..., ge=0)
    type: AdjustmentType


class AdjustmentCreate(BaseModel):
    reference: Optional[str] = None  # generated as ADJ-xxxxxx when absent
    warehouse_id: int
    date: dt.date
    type: AdjustmentType = AdjustmentType.ADDITION
    notes: Optional[str] = None
    items: List[AdjustmentItemIn] = Field(..., min_length=1)


# PUT replaces header and every line; an empty line set is allowed
class AdjustmentUpdate(AdjustmentCreate):
    items: List[AdjustmentItemIn]


class AdjustmentItemOut(ORMBase):
    id: int
    product_id: int
    product_code: Optional[str] = None
    product_name: Optional[str] = None
    unit_name: Optional[str] = None
    quantity: float
    type: AdjustmentType
    pre_stock: Optional[float] = None


# Summary row for list views
class AdjustmentListItem(ORMBase):
    id: int
    reference: str
    warehouse_id: int
    warehouse_name: Optional[str] = None
    date: dt.date
    type: AdjustmentType
    notes: Optional[str] = None
    item_count: int
    created_at: Optional[dt.datetime] = None


class AdjustmentOut(AdjustmentListItem):
    items: List[AdjustmentItemOut]


class AdjustmentPage(BaseModel):
    data: List[AdjustmentListItem]
    pagination: Pagination
