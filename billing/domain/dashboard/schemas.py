# billing/domain/dashboard/schemas.py
from pydantic import BaseModel
from typing import List

from billing.domain.invoicing.schemas import InvoiceOut, Money

class DashboardOut(BaseModel):
    today_invoices: int
    month_invoices: int
    total_revenue: Money
    recent: List[InvoiceOut]
