# billing/domain/invoicing/schemas.py
from datetime import datetime
from pydantic import AfterValidator, BaseModel, Field
from typing import Annotated, List, Optional, Union

from billing.domain.invoicing.calculator import round_money

Money = Annotated[float, AfterValidator(round_money)]

# form input arrives half-typed; the calculator turns anything unusable into 0
LooseNumber = Optional[Union[float, str]]


class LineItemDraft(BaseModel):
    name: str = ""
    quantity: LooseNumber = None
    unit_price: LooseNumber = None
    tax_rate_percent: LooseNumber = None
    product_id: Optional[str] = None

class CalculateRequest(BaseModel):
    products: List[LineItemDraft] = []

class InvoiceDraft(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_mobile: str = ""
    customer_address: str = ""
    products: List[LineItemDraft]
    status: str = "active"

    class Config:
        str_strip_whitespace = True

class LineItemOut(BaseModel):
    name: str
    quantity: float
    unit_price: float
    tax_rate_percent: float
    taxable_value: Money
    tax_amount: Money
    line_total: Money
    product_id: Optional[str] = None

class TotalsOut(BaseModel):
    subtotal: Money
    tax_amount: Money
    grand_total: Money

    class Config:
        from_attributes = True

class CalculationOut(BaseModel):
    products: List[LineItemOut]
    totals: TotalsOut

class InvoiceOut(BaseModel):
    id: str
    invoice_number: str
    customer_name: str
    customer_mobile: str = ""
    customer_address: str = ""
    products: List[LineItemOut]
    subtotal: Money
    tax_amount: Money
    grand_total: Money
    status: str
    created_by: str
    price_convention: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class InvoicePageOut(BaseModel):
    items: List[InvoiceOut]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool

class NextNumberOut(BaseModel):
    invoice_number: str
    # True when no owner was given: the number is a placeholder and must not be stored
    provisional: bool

class PreviewRowOut(BaseModel):
    index: int
    name: str
    quantity: float
    unit_price_excl_tax: Money
    tax_rate_percent: float
    tax_amount: Money
    line_total: Money

class SellerOut(BaseModel):
    business_name: str
    address: str
    gstin: str = ""
    pan: str = ""
    bank_details: str = ""
    terms: str = ""

class InvoicePreviewOut(BaseModel):
    title: str = "TAX INVOICE"
    invoice_number: str
    invoice_date: str
    status: str
    customer_name: str
    customer_mobile: str
    customer_address: str
    seller: SellerOut
    rows: List[PreviewRowOut]
    subtotal: Money
    tax_amount: Money
    grand_total: Money
    amount_in_words: str
