# billing/api/v1/routes_settings.py
from fastapi import APIRouter, Depends

from billing.api.v1.deps import get_owner_id
from billing.db.base import get_store
from billing.db.store import DocumentStore
from billing.domain.business.schemas import BusinessProfileIn, BusinessProfileOut
from billing.domain.business.service import load_profile, save_profile


router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("/business", response_model=BusinessProfileOut)
async def get_business_profile_endpoint(
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    return await load_profile(store, owner_id)

@router.put("/business", response_model=BusinessProfileOut)
async def save_business_profile_endpoint(
    payload: BusinessProfileIn,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    return await save_profile(store, owner_id, payload)
