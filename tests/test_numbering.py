import asyncio
import re
from datetime import date, datetime, timezone

import pytest

from billing.db.store import Document, InMemoryDocumentStore
from billing.domain.invoicing.numbering import (
    INVOICES,
    counter_name,
    format_invoice_number,
    latest_invoice,
    next_invoice_number,
    parse_sequence,
    peek_invoice_number,
    preview_invoice_number,
)

from conftest import OTHER_OWNER, OWNER

TODAY = date(2024, 6, 15)
FALLBACK = re.compile(r"INV-24-\d{4}")


class UnreachableStore(InMemoryDocumentStore):
    async def query(self, collection, where=None):
        raise ConnectionError("store offline")

    async def get_counter(self, name):
        raise ConnectionError("store offline")


class SlowStore(InMemoryDocumentStore):
    async def query(self, collection, where=None):
        await asyncio.sleep(5)
        return []


async def add_invoice(store, number, owner=OWNER):
    return await store.create(INVOICES, {"invoice_number": number, "created_by": owner})


def test_format_and_parse():
    assert format_invoice_number(1, TODAY) == "INV-24-0001"
    assert format_invoice_number(12345, TODAY) == "INV-24-12345"
    assert parse_sequence("INV-24-0007") == 7
    assert parse_sequence("INV-23-0100") == 100
    for bad in ["garbage", "INV-2024-0001", "INV-24-", "XYZ-24-0001", None, 42]:
        assert parse_sequence(bad) is None


@pytest.mark.parametrize("strategy", ["scan", "counter"])
async def test_first_invoice_is_0001_for_the_current_year(store, strategy):
    number = await next_invoice_number(store, OWNER, strategy=strategy)
    assert number == f"INV-{date.today():%y}-0001"


@pytest.mark.parametrize("strategy", ["scan", "counter"])
async def test_next_number_follows_previous(store, strategy):
    await add_invoice(store, "INV-24-0007")

    assert await next_invoice_number(store, OWNER, today=TODAY, strategy=strategy) == "INV-24-0008"


async def test_sequence_continues_into_the_new_year(store):
    await add_invoice(store, "INV-24-0041")

    number = await next_invoice_number(store, OWNER, today=date(2025, 1, 2), strategy="scan")
    assert number == "INV-25-0042"


async def test_numbers_are_scoped_per_owner(store):
    await add_invoice(store, "INV-24-0099", owner=OTHER_OWNER)

    assert await next_invoice_number(store, OWNER, today=TODAY, strategy="scan") == "INV-24-0001"


def test_latest_invoice_is_the_most_recently_created():
    docs = [
        Document(id="old", collection=INVOICES, data={"invoice_number": "INV-24-0003"}, created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)),
        Document(id="new", collection=INVOICES, data={"invoice_number": "INV-24-0002"}, created_at=datetime(2024, 6, 2, tzinfo=timezone.utc)),
        Document(id="unstamped", collection=INVOICES, data={"invoice_number": "INV-24-0050"}),
    ]
    assert latest_invoice(docs).id == "new"


def test_latest_invoice_tie_break_prefers_higher_sequence():
    docs = [
        Document(id="a", collection=INVOICES, data={"invoice_number": "INV-24-0004"}),
        Document(id="b", collection=INVOICES, data={"invoice_number": "INV-24-0009"}),
        Document(id="c", collection=INVOICES, data={"invoice_number": "garbage"}),
    ]
    assert latest_invoice(docs).id == "b"
    assert latest_invoice([]) is None


async def test_malformed_previous_number_falls_back_to_random(store):
    await add_invoice(store, "garbage")

    number = await next_invoice_number(store, OWNER, today=TODAY, strategy="scan")
    assert FALLBACK.fullmatch(number)


@pytest.mark.parametrize("strategy", ["scan", "counter"])
async def test_unreachable_store_falls_back_without_raising(strategy, caplog):
    number = await next_invoice_number(UnreachableStore(), OWNER, today=TODAY, strategy=strategy)

    assert FALLBACK.fullmatch(number)
    assert "allocation failed" in caplog.text


async def test_slow_store_times_out_to_fallback():
    number = await next_invoice_number(SlowStore(), OWNER, today=TODAY, strategy="scan", timeout=0.01)
    assert FALLBACK.fullmatch(number)


async def test_missing_owner_gets_a_placeholder_that_is_not_stored(store):
    number = await next_invoice_number(store, None, today=TODAY)

    assert FALLBACK.fullmatch(number)
    assert FALLBACK.fullmatch(preview_invoice_number(TODAY))
    assert await store.query(INVOICES) == []


async def test_concurrent_scan_allocations_collide(store):
    await add_invoice(store, "INV-24-0005")

    first, second = await asyncio.gather(
        next_invoice_number(store, OWNER, today=TODAY, strategy="scan"),
        next_invoice_number(store, OWNER, today=TODAY, strategy="scan"),
    )

    assert first == second == "INV-24-0006"


async def test_concurrent_counter_allocations_serialize(store):
    await add_invoice(store, "INV-24-0005")

    numbers = await asyncio.gather(
        next_invoice_number(store, OWNER, today=TODAY, strategy="counter"),
        next_invoice_number(store, OWNER, today=TODAY, strategy="counter"),
    )

    assert sorted(numbers) == ["INV-24-0006", "INV-24-0007"]


async def test_counter_seeds_from_highest_existing_number(store):
    await add_invoice(store, "INV-23-0120")
    await add_invoice(store, "garbage")
    await add_invoice(store, "INV-24-0004")

    assert await next_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0121"
    assert await store.get_counter(counter_name(OWNER)) == 121


async def test_counter_ignores_invoices_once_seeded(store):
    await store.increment_counter(counter_name(OWNER), initial=41)
    await add_invoice(store, "INV-24-0500")

    assert await next_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0043"


async def test_peek_does_not_consume_the_counter(store):
    await add_invoice(store, "INV-24-0010")

    assert await peek_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0011"
    assert await peek_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0011"
    assert await store.get_counter(counter_name(OWNER)) is None

    assert await next_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0011"
    assert await peek_invoice_number(store, OWNER, today=TODAY, strategy="counter") == "INV-24-0012"
