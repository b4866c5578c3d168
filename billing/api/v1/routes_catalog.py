# billing/api/v1/routes_catalog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from billing.api.v1.deps import get_owner_id
from billing.db.base import get_store
from billing.db.store import DocumentStore
from billing.domain.catalog.schemas import CustomerIn, CustomerOut, ProductIn, ProductOut
from billing.domain.catalog.service import (
    delete_customer,
    delete_product,
    list_customers,
    list_products,
    product_view,
    save_customer,
    save_product,
)


customers_router = APIRouter(prefix="/api/v1/customers", tags=["customers"])
products_router = APIRouter(prefix="/api/v1/products", tags=["products"])


@customers_router.get("", response_model=List[CustomerOut])
async def list_customers_endpoint(
    search: Optional[str] = None,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    return [doc.to_dict() for doc in await list_customers(store, owner_id, search)]

@customers_router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
async def create_customer_endpoint(
    payload: CustomerIn,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    customer = await save_customer(store, owner_id, payload)
    return customer.to_dict()

@customers_router.put("/{customer_id}", response_model=CustomerOut)
async def update_customer_endpoint(
    customer_id: str,
    payload: CustomerIn,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    customer = await save_customer(store, owner_id, payload, customer_id)
    return customer.to_dict()

@customers_router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer_endpoint(
    customer_id: str,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    await delete_customer(store, owner_id, customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@products_router.get("", response_model=List[ProductOut])
async def list_products_endpoint(
    search: Optional[str] = None,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    return [product_view(doc) for doc in await list_products(store, owner_id, search)]

@products_router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product_endpoint(
    payload: ProductIn,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    product = await save_product(store, owner_id, payload)
    return product_view(product)

@products_router.put("/{product_id}", response_model=ProductOut)
async def update_product_endpoint(
    product_id: str,
    payload: ProductIn,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    product = await save_product(store, owner_id, payload, product_id)
    return product_view(product)

@products_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_endpoint(
    product_id: str,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    await delete_product(store, owner_id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
