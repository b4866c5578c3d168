# billing/api/v1/routes_invoices.py
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status

from billing.api.v1.deps import get_optional_owner_id, get_owner_id
from billing.db.base import get_store
from billing.db.store import DocumentStore
from billing.domain.business.service import load_profile
from billing.domain.invoicing.numbering import peek_invoice_number
from billing.domain.invoicing.schemas import (
    CalculateRequest,
    CalculationOut,
    InvoiceDraft,
    InvoiceOut,
    InvoicePageOut,
    InvoicePreviewOut,
    NextNumberOut,
)
from billing.domain.invoicing.service import (
    build_preview,
    calculate,
    create_invoice,
    delete_invoice,
    get_invoice,
    list_invoices,
    update_invoice,
)
from billing.domain.invoicing.stock import decrement_stock


router = APIRouter(prefix="/api/v1/invoices", tags=["invoices"])


@router.get("/next-number", response_model=NextNumberOut)
async def next_number_endpoint(
    owner_id: Optional[str] = Depends(get_optional_owner_id),
    store: DocumentStore = Depends(get_store),
):
    number = await peek_invoice_number(store, owner_id)
    return NextNumberOut(invoice_number=number, provisional=owner_id is None)

@router.post("/calculate", response_model=CalculationOut)
async def calculate_endpoint(payload: CalculateRequest):
    lines, totals = calculate(payload.products)
    return CalculationOut(products=lines, totals=asdict(totals))

@router.post("", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
async def create_invoice_endpoint(
    payload: InvoiceDraft,
    background_tasks: BackgroundTasks,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    invoice = await create_invoice(store, owner_id, payload)
    # stock is adjusted after the response; its outcome never affects the save
    background_tasks.add_task(decrement_stock, store, owner_id, invoice.get("products"))
    return invoice.to_dict()

@router.get("", response_model=InvoicePageOut)
async def list_invoices_endpoint(
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    result = await list_invoices(store, owner_id, search=search, page=page, page_size=page_size)
    return InvoicePageOut(
        items=[doc.to_dict() for doc in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_more=result.has_more,
    )

@router.get("/{invoice_id}", response_model=InvoiceOut)
async def get_invoice_endpoint(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    invoice = await get_invoice(store, owner_id, invoice_id)
    return invoice.to_dict()

@router.put("/{invoice_id}", response_model=InvoiceOut)
async def update_invoice_endpoint(
    invoice_id: str,
    payload: InvoiceDraft,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    invoice = await update_invoice(store, owner_id, invoice_id, payload)
    return invoice.to_dict()

@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice_endpoint(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    await delete_invoice(store, owner_id, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{invoice_id}/preview", response_model=InvoicePreviewOut)
async def preview_invoice_endpoint(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    store: DocumentStore = Depends(get_store),
):
    invoice = await get_invoice(store, owner_id, invoice_id)
    profile = await load_profile(store, owner_id)
    return build_preview(invoice, profile)
