# billing/domain/catalog/service.py
from typing import Any, Dict, List, Optional

from billing.core import logs
from billing.core.config import settings
from billing.core.errors import NotFoundError, PersistenceError
from billing.db.store import Document, DocumentStore
from .schemas import CustomerIn, ProductIn

LOG = logs.logger(__file__)

CUSTOMERS = "customers"
PRODUCTS = "products"

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"


def stock_status(current_stock, min_stock: Optional[int] = None) -> str:
    if min_stock is None:
        min_stock = settings.LOW_STOCK_THRESHOLD
    if current_stock <= 0:
        return OUT_OF_STOCK
    if current_stock <= min_stock:
        return LOW_STOCK
    return IN_STOCK


def product_view(doc: Document) -> Dict[str, Any]:
    data = doc.to_dict()
    if data.get("min_stock") is None:
        data["min_stock"] = settings.LOW_STOCK_THRESHOLD
    data["stock_status"] = stock_status(data.get("stock", 0), data["min_stock"])
    return data


async def _load(store: DocumentStore, collection: str, owner_id: str) -> List[Document]:
    try:
        return await store.query(collection, {"created_by": owner_id})
    except Exception as exc:
        LOG.exception("_load - collection:%s owner:%s query failed", collection, owner_id)
        raise PersistenceError(f"Error loading {collection}") from exc


async def _get_owned(store: DocumentStore, collection: str, owner_id: str, doc_id: str) -> Document:
    try:
        doc = await store.get(collection, doc_id)
    except Exception as exc:
        raise PersistenceError(f"Error loading {collection}") from exc
    if doc is None or doc.get("created_by") != owner_id:
        raise NotFoundError(f"{collection[:-1].capitalize()} {doc_id} not found")
    return doc


async def _save(
    store: DocumentStore,
    collection: str,
    owner_id: str,
    fields: Dict[str, Any],
    doc_id: Optional[str] = None,
) -> Document:
    fields = {**fields, "created_by": owner_id}
    try:
        if doc_id is None:
            doc_id = await store.create(collection, fields)
        else:
            await _get_owned(store, collection, owner_id, doc_id)
            if not await store.update(collection, doc_id, fields):
                raise NotFoundError(f"{collection[:-1].capitalize()} {doc_id} not found")
        saved = await store.get(collection, doc_id)
    except (NotFoundError, PersistenceError):
        raise
    except Exception as exc:
        LOG.exception("_save - collection:%s owner:%s write failed", collection, owner_id)
        raise PersistenceError(f"Error saving {collection[:-1]}") from exc

    LOG.info("_save - collection:%s owner:%s id:%s", collection, owner_id, doc_id)
    return saved


async def _delete(store: DocumentStore, collection: str, owner_id: str, doc_id: str) -> None:
    await _get_owned(store, collection, owner_id, doc_id)
    try:
        await store.delete(collection, doc_id)
    except Exception as exc:
        raise PersistenceError(f"Error deleting {collection[:-1]}") from exc


def _contains(value: Any, term: str) -> bool:
    return bool(value) and term in str(value).lower()


async def list_customers(store: DocumentStore, owner_id: str, search: Optional[str] = None) -> List[Document]:
    customers = sorted(await _load(store, CUSTOMERS, owner_id), key=lambda c: str(c.get("name", "")).lower())
    if search and search.strip():
        term = search.strip().lower()
        customers = [c for c in customers if _contains(c.get("name"), term) or _contains(c.get("mobile"), term)]
    return customers


async def save_customer(
    store: DocumentStore,
    owner_id: str,
    data: CustomerIn,
    customer_id: Optional[str] = None,
) -> Document:
    return await _save(store, CUSTOMERS, owner_id, data.model_dump(), customer_id)


async def delete_customer(store: DocumentStore, owner_id: str, customer_id: str) -> None:
    await _delete(store, CUSTOMERS, owner_id, customer_id)


async def list_products(store: DocumentStore, owner_id: str, search: Optional[str] = None) -> List[Document]:
    products = sorted(await _load(store, PRODUCTS, owner_id), key=lambda p: str(p.get("name", "")).lower())
    if search and search.strip():
        term = search.strip().lower()
        products = [
            p
            for p in products
            if _contains(p.get("name"), term)
            or _contains(p.get("category"), term)
            or _contains(p.get("description"), term)
        ]
    return products


async def save_product(
    store: DocumentStore,
    owner_id: str,
    data: ProductIn,
    product_id: Optional[str] = None,
) -> Document:
    fields = data.model_dump()
    if fields["min_stock"] is None:
        fields["min_stock"] = settings.LOW_STOCK_THRESHOLD
    return await _save(store, PRODUCTS, owner_id, fields, product_id)


async def delete_product(store: DocumentStore, owner_id: str, product_id: str) -> None:
    await _delete(store, PRODUCTS, owner_id, product_id)
