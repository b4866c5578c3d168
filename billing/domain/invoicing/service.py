# billing/domain/invoicing/service.py
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from billing.core import logs
from billing.core.config import settings
from billing.core.errors import BusinessError, NotFoundError, PersistenceError
from billing.db.store import Document, DocumentStore
from billing.domain.business.schemas import BusinessProfileOut
from billing.domain.invoicing.calculator import (
    InvoiceTotals,
    LineAmounts,
    clamp_non_negative,
    clamp_rate,
    compute_invoice_totals,
    compute_line,
    decompose_unit_price,
)
from billing.domain.invoicing.numbering import INVOICES, next_invoice_number
from billing.domain.invoicing.words import amount_in_words
from .schemas import InvoiceDraft, LineItemDraft

LOG = logs.logger(__file__)

DEFAULT_PAGE_SIZE = 10


@dataclass
class InvoicePage:
    items: Sequence[Document]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max((self.total + self.page_size - 1) // self.page_size, 1)

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


def build_line_items(
    drafts: Sequence[LineItemDraft],
    convention: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Clamp the numbers of each draft line and attach its computed amounts."""
    convention = convention or settings.PRICE_CONVENTION
    lines = []
    for draft in drafts:
        amounts = compute_line(draft.quantity, draft.unit_price, draft.tax_rate_percent, convention)
        lines.append(
            {
                "name": draft.name.strip(),
                "quantity": clamp_non_negative(draft.quantity),
                "unit_price": clamp_non_negative(draft.unit_price),
                "tax_rate_percent": clamp_rate(draft.tax_rate_percent),
                "taxable_value": amounts.taxable_value,
                "tax_amount": amounts.tax_amount,
                "line_total": amounts.line_total,
                "product_id": draft.product_id,
            }
        )
    return lines


def calculate(drafts: Sequence[LineItemDraft], convention: Optional[str] = None):
    """Live totals for a form in progress. Accepts partial rows."""
    lines = build_line_items(drafts, convention)
    return lines, _totals(lines)


def _totals(lines: Sequence[Dict[str, Any]]) -> InvoiceTotals:
    return compute_invoice_totals(
        LineAmounts(line["taxable_value"], line["tax_amount"], line["line_total"]) for line in lines
    )


def _billable_lines(draft: InvoiceDraft, convention: Optional[str]) -> List[Dict[str, Any]]:
    lines = [
        line
        for line in build_line_items(draft.products, convention)
        if line["name"] and line["quantity"] > 0
    ]
    if not lines:
        raise BusinessError("Invoice must have at least one product")
    return lines


def _owned(doc: Optional[Document], owner_id: str, invoice_id: str) -> Document:
    if doc is None or doc.get("created_by") != owner_id:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return doc


async def create_invoice(
    store: DocumentStore,
    owner_id: str,
    draft: InvoiceDraft,
    convention: Optional[str] = None,
    strategy: Optional[str] = None,
    today: Optional[date] = None,
) -> Document:
    convention = convention or settings.PRICE_CONVENTION
    lines = _billable_lines(draft, convention)
    totals = _totals(lines)

    invoice_number = await next_invoice_number(store, owner_id, today=today, strategy=strategy)

    invoice = {
        "invoice_number": invoice_number,
        "customer_name": draft.customer_name.strip(),
        "customer_mobile": draft.customer_mobile.strip(),
        "customer_address": draft.customer_address.strip(),
        "products": lines,
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "grand_total": totals.grand_total,
        "status": draft.status,
        "created_by": owner_id,
        "price_convention": convention,
    }

    try:
        invoice_id = await store.create(INVOICES, invoice)
        saved = await store.get(INVOICES, invoice_id)
    except Exception as exc:
        LOG.exception("create_invoice - owner:%s number:%s write failed", owner_id, invoice_number)
        raise PersistenceError("Error saving invoice") from exc

    LOG.info(
        "create_invoice - owner:%s id:%s number:%s grand_total:%.2f",
        owner_id,
        invoice_id,
        invoice_number,
        totals.grand_total,
    )
    return saved


async def get_invoice(store: DocumentStore, owner_id: str, invoice_id: str) -> Document:
    try:
        doc = await store.get(INVOICES, invoice_id)
    except Exception as exc:
        raise PersistenceError("Error loading invoice") from exc
    return _owned(doc, owner_id, invoice_id)


async def update_invoice(
    store: DocumentStore,
    owner_id: str,
    invoice_id: str,
    draft: InvoiceDraft,
    convention: Optional[str] = None,
) -> Document:
    """Replace customer fields, line items and totals. The number and created_at stay."""
    await get_invoice(store, owner_id, invoice_id)

    convention = convention or settings.PRICE_CONVENTION
    lines = _billable_lines(draft, convention)
    totals = _totals(lines)
    changes = {
        "customer_name": draft.customer_name.strip(),
        "customer_mobile": draft.customer_mobile.strip(),
        "customer_address": draft.customer_address.strip(),
        "products": lines,
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "grand_total": totals.grand_total,
        "status": draft.status,
        "price_convention": convention,
    }

    try:
        updated = await store.update(INVOICES, invoice_id, changes)
    except Exception as exc:
        LOG.exception("update_invoice - id:%s write failed", invoice_id)
        raise PersistenceError("Error updating invoice") from exc
    if not updated:
        raise NotFoundError(f"Invoice {invoice_id} not found")

    return await get_invoice(store, owner_id, invoice_id)


async def delete_invoice(store: DocumentStore, owner_id: str, invoice_id: str) -> None:
    await get_invoice(store, owner_id, invoice_id)
    try:
        deleted = await store.delete(INVOICES, invoice_id)
    except Exception as exc:
        raise PersistenceError("Error deleting invoice") from exc
    if not deleted:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    LOG.info("delete_invoice - owner:%s id:%s", owner_id, invoice_id)


def newest_first(invoices: Sequence[Document]) -> List[Document]:
    # invoices without a timestamp sort last
    return sorted(
        invoices,
        key=lambda doc: doc.created_at.timestamp() if doc.created_at else 0.0,
        reverse=True,
    )


def matches_search(invoice: Document, search: str) -> bool:
    term = search.strip().lower()
    return (
        term in str(invoice.get("customer_name", "")).lower()
        or term in str(invoice.get("customer_mobile", ""))
        or term in str(invoice.get("invoice_number", "")).lower()
        or term in invoice.id.lower()
    )


async def list_invoices(
    store: DocumentStore,
    owner_id: str,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> InvoicePage:
    try:
        invoices = await store.query(INVOICES, {"created_by": owner_id})
    except Exception as exc:
        LOG.exception("list_invoices - owner:%s query failed", owner_id)
        raise PersistenceError("Error loading invoices") from exc

    invoices = newest_first(invoices)
    if search and search.strip():
        invoices = [doc for doc in invoices if matches_search(doc, search)]

    page = max(page, 1)
    start = (page - 1) * page_size
    return InvoicePage(
        items=invoices[start:start + page_size],
        total=len(invoices),
        page=page,
        page_size=page_size,
    )


def build_preview(
    invoice: Document,
    profile: BusinessProfileOut,
    convention: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Assemble the data printed on a tax invoice.

    Rows are decomposed with the price convention the invoice was saved under,
    so the printed unit price excluding GST and the stored subtotal agree even
    after PRICE_CONVENTION changes. ``convention`` only applies to invoices
    saved without one.
    """
    convention = invoice.get("price_convention") or convention or settings.PRICE_CONVENTION

    rows = []
    for index, line in enumerate(invoice.get("products") or [], start=1):
        unit = decompose_unit_price(line.get("unit_price"), line.get("tax_rate_percent"), convention)
        amounts = compute_line(line.get("quantity"), line.get("unit_price"), line.get("tax_rate_percent"), convention)
        rows.append(
            {
                "index": index,
                "name": line.get("name", ""),
                "quantity": clamp_non_negative(line.get("quantity")),
                "unit_price_excl_tax": unit.pre_tax,
                "tax_rate_percent": clamp_rate(line.get("tax_rate_percent")),
                "tax_amount": amounts.tax_amount,
                "line_total": amounts.line_total,
            }
        )

    totals = compute_invoice_totals(invoice.get("products") or [], convention)
    created = invoice.created_at.date() if invoice.created_at else date.today()

    return {
        "invoice_number": invoice.get("invoice_number") or invoice.id,
        "invoice_date": created.strftime("%d/%m/%Y"),
        "status": invoice.get("status", ""),
        "customer_name": invoice.get("customer_name", ""),
        "customer_mobile": invoice.get("customer_mobile", ""),
        "customer_address": invoice.get("customer_address") or "N/A",
        "seller": profile.model_dump(),
        "rows": rows,
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "grand_total": totals.grand_total,
        "amount_in_words": amount_in_words(totals.grand_total),
    }
