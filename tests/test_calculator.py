import pytest

from billing.domain.invoicing.calculator import (
    EPSILON,
    InvoiceTotals,
    LineAmounts,
    clamp_non_negative,
    clamp_rate,
    compute_invoice_totals,
    compute_line,
    decompose_unit_price,
    round_money,
    to_number,
)

from conftest import line


def test_three_line_gas_invoice(gas_lines):
    amounts = [compute_line(l["quantity"], l["unit_price"], l["tax_rate_percent"]) for l in gas_lines]

    assert [round_money(a.taxable_value) for a in amounts] == [1800.00, 300.00, 200.00]
    assert [round_money(a.tax_amount) for a in amounts] == [90.00, 54.00, 24.00]
    assert [round_money(a.line_total) for a in amounts] == [1890.00, 354.00, 224.00]

    totals = compute_invoice_totals(gas_lines)
    assert totals.subtotal == pytest.approx(2300.00)
    assert totals.tax_amount == pytest.approx(168.00)
    assert totals.grand_total == pytest.approx(2468.00)


@pytest.mark.parametrize(
    "quantity, unit_price, rate",
    [
        (0, 0, 0),
        (1, 0.1, 18),
        (3, 33.33, 12),
        (7.5, 19.99, 5),
        (1000, 0.07, 28),
        (13, 1234.567, 100),
    ],
)
@pytest.mark.parametrize("convention", ["exclusive", "inclusive"])
def test_line_total_is_taxable_plus_tax(quantity, unit_price, rate, convention):
    amounts = compute_line(quantity, unit_price, rate, convention)
    assert abs(amounts.line_total - (amounts.taxable_value + amounts.tax_amount)) < EPSILON


def test_grand_total_equals_sum_of_line_totals():
    lines = [line(f"item-{i}", i % 5 + 1, 10.01 * i + 0.33, (i * 7) % 29) for i in range(60)]

    totals = compute_invoice_totals(lines)
    line_totals = sum(
        compute_line(l["quantity"], l["unit_price"], l["tax_rate_percent"]).line_total for l in lines
    )

    assert abs(totals.grand_total - line_totals) < EPSILON
    assert abs(totals.grand_total - (totals.subtotal + totals.tax_amount)) < EPSILON


def test_empty_invoice_has_zero_totals():
    assert compute_invoice_totals([]) == InvoiceTotals(0.0, 0.0, 0.0)


def test_totals_accept_precomputed_amounts():
    totals = compute_invoice_totals([LineAmounts(100, 18, 118), LineAmounts(50, 6, 56)])
    assert totals == InvoiceTotals(150, 24, 174)


def test_negative_quantity_and_price_are_clamped_to_zero():
    assert compute_line(-2, 100, 18) == LineAmounts(0.0, 0.0, 0.0)
    assert compute_line(2, -100, 18) == LineAmounts(0.0, 0.0, 0.0)


@pytest.mark.parametrize("value", [-5, -0.01, 0, 3, 12.5, "7", None, "abc"])
def test_clamping_is_idempotent(value):
    assert clamp_non_negative(clamp_non_negative(value)) == clamp_non_negative(value)
    assert clamp_rate(clamp_rate(value)) == clamp_rate(value)


def test_tax_rate_is_clamped_to_percentage_range():
    assert clamp_rate(150) == 100
    assert clamp_rate(-3) == 0
    assert compute_line(1, 100, 250).tax_amount == pytest.approx(100)
    assert compute_line(1, 100, -10).tax_amount == 0


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "12abc", float("nan"), float("inf"), [], {}])
def test_unusable_input_counts_as_zero(raw):
    assert to_number(raw) == 0.0
    assert compute_line(raw, 100, 18).line_total == 0.0


def test_numeric_strings_are_accepted():
    assert to_number(" 1,250.50 ") == 1250.5
    assert compute_line("2", "900", "5").line_total == pytest.approx(1890)


def test_inclusive_price_is_split_into_taxable_and_tax():
    amounts = compute_line(2, 118, 18, convention="inclusive")

    assert amounts.line_total == pytest.approx(236)
    assert amounts.taxable_value == pytest.approx(200)
    assert amounts.tax_amount == pytest.approx(36)


def test_unit_breakdown_follows_the_convention():
    inclusive = decompose_unit_price(118, 18, "inclusive")
    assert inclusive.pre_tax == pytest.approx(100)
    assert inclusive.tax_per_unit == pytest.approx(18)
    assert inclusive.gross == 118

    exclusive = decompose_unit_price(100, 18, "exclusive")
    assert exclusive.pre_tax == 100
    assert exclusive.tax_per_unit == pytest.approx(18)
    assert exclusive.gross == pytest.approx(118)


def test_round_money_rounds_half_up():
    assert round_money(2.675) == 2.68
    assert round_money(0.1 + 0.2) == 0.3
    assert round_money(None) == 0.0
