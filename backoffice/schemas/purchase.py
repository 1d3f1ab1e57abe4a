# backoffice/schemas/purchase.py
import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.models.purchase import PurchaseStatus, PaymentStatus
from backoffice.schemas.common import ORMBase, Pagination


class PurchaseItemIn(BaseModel):
    product_id: int
    quantity: Decimal = Field(..., ge=0)
    unit_cost: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0)
    # quantity * unit_cost - discount + tax when omitted
    subtotal: Optional[Decimal] = Field(None, ge=0)


# Header + lines for POST; `due` is derived and ignored if sent
class PurchaseCreate(BaseModel):
    reference: Optional[str] = None  # generated as PUR-xxxxxx when absent
    supplier_id: int
    warehouse_id: int
    currency_id: Optional[int] = None
    date: dt.date
    status: PurchaseStatus = PurchaseStatus.PENDING
    payment_status: Optional[PaymentStatus] = None
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    shipping: Decimal = Field(Decimal("0"), ge=0)
    total: Optional[Decimal] = Field(None, ge=0)
    paid: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    items: List[PurchaseItemIn] = Field(..., min_length=1)


# PUT: full replacement of header and lines
class PurchaseUpdate(PurchaseCreate):
    items: List[PurchaseItemIn]


class PurchasePatch(BaseModel):
    """PATCH: header fields only, every field optional."""
    supplier_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    currency_id: Optional[int] = None
    date: Optional[dt.date] = None
    status: Optional[PurchaseStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0)
    shipping: Optional[Decimal] = Field(None, ge=0)
    total: Optional[Decimal] = Field(None, ge=0)
    paid: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class PurchaseItemOut(ORMBase):
    id: int
    product_id: int
    product_code: Optional[str] = None
    product_name: Optional[str] = None
    quantity: float
    unit_cost: float
    discount: float
    tax: float
    subtotal: float


class PurchaseListItem(ORMBase):
    id: int
    reference: str
    supplier_id: int
    supplier_name: Optional[str] = None
    warehouse_id: int
    warehouse_name: Optional[str] = None
    currency_id: Optional[int] = None
    date: dt.date
    status: PurchaseStatus
    payment_status: PaymentStatus
    subtotal: float
    tax_rate: float
    tax_amount: float
    discount: float
    shipping: float
    total: float
    paid: float
    due: float
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class PurchaseOut(PurchaseListItem):
    item_count: int
    items: List[PurchaseItemOut]


class PurchasePage(BaseModel):
    data: List[PurchaseListItem]
    pagination: Pagination
