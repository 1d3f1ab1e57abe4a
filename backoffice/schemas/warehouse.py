from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import ORMBase, Pagination


class WarehouseCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    city: Optional[str] = None
    country: Optional[str] = None


# Schema for updating warehouse details (PATCH)
class WarehouseEditRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    city: Optional[str] = None
    country: Optional[str] = None


class WarehouseOut(ORMBase):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class WarehousePage(BaseModel):
    data: List[WarehouseOut]
    pagination: Pagination
