# billing/api/v1/routes_dashboard.py
from fastapi import APIRouter, Depends

from billing.api.v1.deps import get_owner_id
from billing.db.base import get_store
from billing.db.store import DocumentStore
from billing.domain.dashboard.schemas import DashboardOut
from billing.domain.dashboard.service import dashboard_stats


router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut)
async def dashboard_endpoint(
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    stats = await dashboard_stats(store, owner_id)
    return DashboardOut(
        today_invoices=stats.today_invoices,
        month_invoices=stats.month_invoices,
        total_revenue=stats.total_revenue,
        recent=[doc.to_dict() for doc in stats.recent],
    )
