# billing/domain/business/service.py
from billing.core import logs
from billing.core.errors import PersistenceError
from billing.db.store import DocumentStore
from .schemas import BusinessProfileIn, BusinessProfileOut

LOG = logs.logger(__file__)

SETTINGS = "settings"


def profile_doc_id(owner_id: str) -> str:
    return f"business_info:{owner_id}"


async def load_profile(store: DocumentStore, owner_id: str) -> BusinessProfileOut:
    try:
        doc = await store.get(SETTINGS, profile_doc_id(owner_id))
    except Exception as exc:
        LOG.exception("load_profile - owner:%s read failed", owner_id)
        raise PersistenceError("Could not load business settings") from exc
    if doc is None:
        LOG.debug("load_profile - owner:%s no stored profile, using defaults", owner_id)
        return BusinessProfileOut()

    # blank stored values fall back to the defaults, as on the invoice header
    stored = {key: value for key, value in doc.data.items() if value}
    return BusinessProfileOut(**stored, is_default=False, updated_at=doc.updated_at or doc.created_at)


async def save_profile(
    store: DocumentStore,
    owner_id: str,
    data: BusinessProfileIn,
) -> BusinessProfileOut:
    fields = data.model_dump()
    fields["created_by"] = owner_id

    doc_id = profile_doc_id(owner_id)
    try:
        if not await store.update(SETTINGS, doc_id, fields):
            await store.create(SETTINGS, fields, doc_id=doc_id)
    except Exception as exc:
        LOG.exception("save_profile - owner:%s failed", owner_id)
        raise PersistenceError("Could not save business settings") from exc

    return await load_profile(store, owner_id)
