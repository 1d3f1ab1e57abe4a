from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import ORMBase, Pagination


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str
    code: str
    barcode: Optional[str] = None
    cost: Decimal = Field(Decimal("0"), ge=0)
    price: Decimal = Field(Decimal("0"), ge=0)
    alert_quantity: Decimal = Field(Decimal("0"), ge=0)
    unit_id: Optional[int] = None
    warehouse_id: Optional[int] = None


# Schema for creating a new product; `stock` is the opening balance only
class ProductCreate(ProductBase):
    stock: Decimal = Decimal("0")


# Schema for partial product updates
class ProductEditRequest(ORMBase):
    """Schema for PATCH requests - all fields optional. Stock is ledger owned."""
    name: Optional[str] = Field(None, description="Product name")
    code: Optional[str] = Field(None, description="Product code")
    barcode: Optional[str] = None
    cost: Optional[Decimal] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0)
    alert_quantity: Optional[Decimal] = Field(None, ge=0)
    unit_id: Optional[int] = None
    warehouse_id: Optional[int] = None


class ProductOut(ORMBase):
    id: int
    name: str
    code: str
    barcode: Optional[str] = None
    cost: float
    price: float
    stock: float
    alert_quantity: float
    unit_id: Optional[int] = None
    unit_name: Optional[str] = None
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None


# Paginated response for product listings
class ProductListPage(BaseModel):
    data: List[ProductOut]
    pagination: Pagination
