"""
GST arithmetic for invoice lines.

Everything here is pure and fail-soft: blank or malformed numbers count as
zero so totals can be shown while a form is still being typed. Values are
kept at full float precision and only rounded by ``round_money`` when they
are presented.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Literal

PriceConvention = Literal["exclusive", "inclusive"]

EPSILON = 1e-6


@dataclass(frozen=True)
class LineAmounts:
    taxable_value: float
    tax_amount: float
    line_total: float


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0


@dataclass(frozen=True)
class UnitBreakdown:
    """Per-unit split of a price into its pre-tax part and its GST."""

    pre_tax: float
    tax_per_unit: float
    gross: float


def to_number(value: Any) -> float:
    """Coerce user input to a finite float, treating anything unusable as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def clamp_non_negative(value: Any) -> float:
    return max(to_number(value), 0.0)


def clamp_rate(value: Any) -> float:
    return min(max(to_number(value), 0.0), 100.0)


def round_money(value: Any) -> float:
    """Round half-up to 2 places for display and storage of presented values."""
    return float(Decimal(str(to_number(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_line(
    quantity: Any,
    unit_price: Any,
    tax_rate_percent: Any,
    convention: PriceConvention = "exclusive",
) -> LineAmounts:
    qty = clamp_non_negative(quantity)
    price = clamp_non_negative(unit_price)
    rate = clamp_rate(tax_rate_percent)

    if convention == "inclusive":
        gross = qty * price
        taxable_value = gross / (1 + rate / 100)
        return LineAmounts(
            taxable_value=taxable_value,
            tax_amount=gross - taxable_value,
            line_total=gross,
        )

    taxable_value = qty * price
    tax_amount = taxable_value * rate / 100
    return LineAmounts(
        taxable_value=taxable_value,
        tax_amount=tax_amount,
        line_total=taxable_value + tax_amount,
    )


def compute_invoice_totals(
    lines: Iterable[Any],
    convention: PriceConvention = "exclusive",
) -> InvoiceTotals:
    """
    Aggregate line items into invoice totals.

    ``lines`` may hold LineAmounts (already computed) or anything exposing
    ``quantity``, ``unit_price`` and ``tax_rate_percent`` as attributes or keys.
    """
    subtotal = tax_amount = grand_total = 0.0
    for line in lines:
        amounts = line if isinstance(line, LineAmounts) else compute_line(
            _field(line, "quantity"),
            _field(line, "unit_price"),
            _field(line, "tax_rate_percent"),
            convention,
        )
        subtotal += amounts.taxable_value
        tax_amount += amounts.tax_amount
        grand_total += amounts.line_total
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, grand_total=grand_total)


def decompose_unit_price(
    unit_price: Any,
    tax_rate_percent: Any,
    convention: PriceConvention = "exclusive",
) -> UnitBreakdown:
    price = clamp_non_negative(unit_price)
    rate = clamp_rate(tax_rate_percent)
    if convention == "inclusive":
        pre_tax = price / (1 + rate / 100)
        return UnitBreakdown(pre_tax=pre_tax, tax_per_unit=price - pre_tax, gross=price)
    tax_per_unit = price * rate / 100
    return UnitBreakdown(pre_tax=price, tax_per_unit=tax_per_unit, gross=price + tax_per_unit)


def _field(line: Any, name: str) -> Any:
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)
