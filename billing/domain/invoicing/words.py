"""Spell an amount in Indian rupees using the lakh/crore grouping."""

from decimal import Decimal

from billing.domain.invoicing.calculator import round_money

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _below_hundred(n: int) -> str:
    if n < 20:
        return _ONES[n]
    tens, ones = divmod(n, 10)
    return f"{_TENS[tens]} {_ONES[ones]}".strip()


def _below_thousand(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    parts = []
    if hundreds:
        parts.append(f"{_ONES[hundreds]} Hundred")
    if rest:
        parts.append(_below_hundred(rest))
    return " ".join(parts)


def number_to_words(n: int) -> str:
    if n == 0:
        return "Zero"

    crore, n = divmod(n, 10_000_000)
    lakh, n = divmod(n, 100_000)
    thousand, n = divmod(n, 1000)

    parts = []
    if crore:
        parts.append(f"{number_to_words(crore)} Crore")
    if lakh:
        parts.append(f"{_below_hundred(lakh)} Lakh")
    if thousand:
        parts.append(f"{_below_hundred(thousand)} Thousand")
    if n:
        parts.append(_below_thousand(n))
    return " ".join(parts)


def amount_in_words(amount) -> str:
    """
    >>> amount_in_words(2468)
    'Rupees Two Thousand Four Hundred Sixty Eight only'
    >>> amount_in_words(10.5)
    'Rupees Ten and Fifty Paise only'
    """
    value = Decimal(str(round_money(amount)))
    rupees = int(value)
    paise = int((value - rupees) * 100)

    words = f"Rupees {number_to_words(rupees)}"
    if paise:
        words += f" and {_below_hundred(paise)} Paise"
    return words + " only"
