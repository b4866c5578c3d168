"""
Per-owner invoice number allocation.

Numbers look like ``INV-26-0042``: prefix, two-digit current year and a
zero-padded sequence that keeps counting across years. Two strategies are
available (NUMBERING_STRATEGY):

counter
    An atomic per-owner counter kept by the document store. Concurrent saves
    get distinct, consecutive numbers. A missing counter is seeded from the
    owner's existing invoices so numbering continues from older data.

scan
    Re-read the owner's invoices, take the most recently created one and add
    one to its sequence. Two saves that read before either writes get the same
    number; this race is accepted in exchange for not keeping extra state.

Allocation never raises. When the store cannot be read, or the latest number
cannot be parsed, a random four digit sequence is returned instead, so
uniqueness is best-effort on that path.
"""

import asyncio
import random
import re
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from billing.core import logs
from billing.core.config import settings
from billing.db.store import Document, DocumentStore

LOG = logs.logger(__file__)

INVOICES = "invoices"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def counter_name(owner_id: str) -> str:
    return f"invoice-number:{owner_id}"


def format_invoice_number(
    sequence: int,
    today: Optional[date] = None,
    prefix: Optional[str] = None,
) -> str:
    today = today or date.today()
    return f"{prefix or settings.INVOICE_PREFIX}-{today:%y}-{sequence:04d}"


def parse_sequence(invoice_number, prefix: Optional[str] = None) -> Optional[int]:
    """Return the numeric suffix of a well-formed invoice number, else None."""
    if not isinstance(invoice_number, str):
        return None
    pattern = rf"{re.escape(prefix or settings.INVOICE_PREFIX)}-\d{{2}}-(\d+)"
    match = re.fullmatch(pattern, invoice_number.strip())
    return int(match.group(1)) if match else None


def random_invoice_number(today: Optional[date] = None, prefix: Optional[str] = None) -> str:
    return format_invoice_number(random.randint(1, 9999), today, prefix)


def preview_invoice_number(today: Optional[date] = None, prefix: Optional[str] = None) -> str:
    """Placeholder shown to callers without a session. Never persist it."""
    return random_invoice_number(today, prefix)


def latest_invoice(invoices: Iterable[Document], prefix: Optional[str] = None) -> Optional[Document]:
    """Most recently created invoice; on equal or missing timestamps the higher sequence wins."""

    def sort_key(doc: Document):
        sequence = parse_sequence(doc.get("invoice_number"), prefix)
        return (doc.created_at or _EPOCH, sequence if sequence is not None else -1)

    return max(invoices, key=sort_key, default=None)


def highest_sequence(invoices: Iterable[Document], prefix: Optional[str] = None) -> int:
    sequences = (parse_sequence(doc.get("invoice_number"), prefix) for doc in invoices)
    return max((s for s in sequences if s is not None), default=0)


async def _scan_next(store: DocumentStore, owner_id: str, today: date, prefix: str) -> str:
    invoices = await store.query(INVOICES, {"created_by": owner_id})
    latest = latest_invoice(invoices, prefix)
    if latest is None:
        return format_invoice_number(1, today, prefix)

    sequence = parse_sequence(latest.get("invoice_number"), prefix)
    if sequence is None:
        LOG.warning(
            "next_invoice_number - owner:%s unparseable latest number %r, using random suffix",
            owner_id,
            latest.get("invoice_number"),
        )
        return random_invoice_number(today, prefix)
    return format_invoice_number(sequence + 1, today, prefix)


async def _counter_next(store: DocumentStore, owner_id: str, today: date, prefix: str) -> str:
    name = counter_name(owner_id)
    seed = 0
    if await store.get_counter(name) is None:
        invoices = await store.query(INVOICES, {"created_by": owner_id})
        seed = highest_sequence(invoices, prefix)
        LOG.info("next_invoice_number - owner:%s seeding counter at %d", owner_id, seed)
    sequence = await store.increment_counter(name, amount=1, initial=seed)
    return format_invoice_number(sequence, today, prefix)


async def _counter_peek(store: DocumentStore, owner_id: str, today: date, prefix: str) -> str:
    current = await store.get_counter(counter_name(owner_id))
    if current is None:
        current = highest_sequence(await store.query(INVOICES, {"created_by": owner_id}), prefix)
    return format_invoice_number(current + 1, today, prefix)


async def peek_invoice_number(
    store: DocumentStore,
    owner_id: Optional[str],
    today: Optional[date] = None,
    strategy: Optional[str] = None,
    prefix: Optional[str] = None,
) -> str:
    """The number the next save would most likely get, without consuming it."""
    today = today or date.today()
    prefix = prefix or settings.INVOICE_PREFIX
    strategy = strategy or settings.NUMBERING_STRATEGY

    if not owner_id:
        return preview_invoice_number(today, prefix)

    peek = _counter_peek if strategy == "counter" else _scan_next
    try:
        return await asyncio.wait_for(peek(store, owner_id, today, prefix), settings.ALLOCATOR_TIMEOUT_SECONDS)
    except Exception:
        LOG.warning("peek_invoice_number - owner:%s lookup failed", owner_id, exc_info=True)
        return random_invoice_number(today, prefix)


async def next_invoice_number(
    store: DocumentStore,
    owner_id: Optional[str],
    today: Optional[date] = None,
    strategy: Optional[str] = None,
    prefix: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    today = today or date.today()
    prefix = prefix or settings.INVOICE_PREFIX
    strategy = strategy or settings.NUMBERING_STRATEGY
    timeout = settings.ALLOCATOR_TIMEOUT_SECONDS if timeout is None else timeout

    if not owner_id:
        return preview_invoice_number(today, prefix)

    allocate = _counter_next if strategy == "counter" else _scan_next
    try:
        return await asyncio.wait_for(allocate(store, owner_id, today, prefix), timeout)
    except Exception:
        LOG.warning(
            "next_invoice_number - owner:%s strategy:%s allocation failed, using random suffix",
            owner_id,
            strategy,
            exc_info=True,
        )
        return random_invoice_number(today, prefix)
