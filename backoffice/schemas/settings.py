# Units of measure and currencies
from typing import Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import ORMBase


class UnitCreate(BaseModel):
    name: str = Field(..., min_length=1)
    short_name: Optional[str] = None


class UnitOut(ORMBase):
    id: int
    name: str
    short_name: Optional[str] = None


class CurrencyCreate(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    name: str = Field(..., min_length=1)
    symbol: Optional[str] = None


class CurrencyOut(ORMBase):
    id: int
    code: str
    name: str
    symbol: Optional[str] = None
