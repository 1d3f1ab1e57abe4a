from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import ORMBase, Pagination


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SupplierEditRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SupplierOut(ORMBase):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SupplierPage(BaseModel):
    data: List[SupplierOut]
    pagination: Pagination
