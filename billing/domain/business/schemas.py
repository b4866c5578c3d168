# billing/domain/business/schemas.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

DEFAULT_BUSINESS_NAME = "BILLA TRADERS"
DEFAULT_ADDRESS = "DICHPALLY RS, HYD-NZB ROAD, NIZAMABAD TELANGANA 503175"
DEFAULT_TERMS = (
    "1. Goods once sold cannot be taken back. 2. Payment due within 30 days. "
    "3. Disputes subject to Nizamabad jurisdiction."
)

class BusinessProfileIn(BaseModel):
    business_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    terms: str = Field(min_length=1)
    gstin: str = ""
    pan: str = ""
    bank_details: str = ""

    class Config:
        str_strip_whitespace = True

class BusinessProfileOut(BaseModel):
    business_name: str = DEFAULT_BUSINESS_NAME
    address: str = DEFAULT_ADDRESS
    terms: str = DEFAULT_TERMS
    gstin: str = ""
    pan: str = ""
    bank_details: str = ""
    is_default: bool = True
    updated_at: Optional[datetime] = None
