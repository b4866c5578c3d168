# billing/domain/catalog/schemas.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

class CustomerIn(BaseModel):
    name: str = Field(min_length=1)
    mobile: str = Field(min_length=1)
    address: str = ""

    class Config:
        str_strip_whitespace = True

class CustomerOut(BaseModel):
    id: str
    name: str
    mobile: str
    address: str = ""
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ProductIn(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    price: float = Field(ge=0)
    tax_rate_percent: float = Field(ge=0, le=100)
    stock: int
    min_stock: Optional[int] = None
    description: str = ""

    class Config:
        str_strip_whitespace = True

class ProductOut(BaseModel):
    id: str
    name: str
    category: str
    price: float
    tax_rate_percent: float
    stock: float
    min_stock: int
    description: str = ""
    stock_status: str
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
