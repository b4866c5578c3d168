# billing/domain/dashboard/service.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from billing.core import logs
from billing.db.store import Document, DocumentStore
from billing.domain.invoicing.calculator import to_number
from billing.domain.invoicing.numbering import INVOICES
from billing.domain.invoicing.service import newest_first

LOG = logs.logger(__file__)

RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    today_invoices: int = 0
    month_invoices: int = 0
    total_revenue: float = 0.0
    recent: List[Document] = field(default_factory=list)


async def dashboard_stats(
    store: DocumentStore,
    owner_id: str,
    now: Optional[datetime] = None,
) -> DashboardStats:
    """
    Count today's and this month's invoices and total the revenue.

    Day and month boundaries are taken in the timezone of ``now`` (local time
    by default). An invoice the store has not stamped yet counts as created now.
    A store failure yields empty statistics rather than an error.
    """
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_month = start_of_day.replace(day=1)

    try:
        invoices = await store.query(INVOICES, {"created_by": owner_id})
    except Exception:
        LOG.warning("dashboard_stats - owner:%s could not load invoices", owner_id, exc_info=True)
        return DashboardStats()

    stats = DashboardStats()
    for invoice in invoices:
        created = invoice.created_at.astimezone(now.tzinfo) if invoice.created_at else now
        stats.total_revenue += to_number(invoice.get("grand_total"))
        if created >= start_of_day:
            stats.today_invoices += 1
        if created >= start_of_month:
            stats.month_invoices += 1

    stats.recent = newest_first(invoices)[:RECENT_LIMIT]
    LOG.debug(
        "dashboard_stats - owner:%s today:%d month:%d revenue:%.2f",
        owner_id,
        stats.today_invoices,
        stats.month_invoices,
        stats.total_revenue,
    )
    return stats
