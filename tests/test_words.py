import pytest

from billing.domain.invoicing.words import amount_in_words, number_to_words


@pytest.mark.parametrize(
    "number, words",
    [
        (0, "Zero"),
        (7, "Seven"),
        (19, "Nineteen"),
        (40, "Forty"),
        (101, "One Hundred One"),
        (2468, "Two Thousand Four Hundred Sixty Eight"),
        (150000, "One Lakh Fifty Thousand"),
        (12345678, "One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight"),
    ],
)
def test_number_to_words(number, words):
    assert number_to_words(number) == words


def test_amount_in_words_includes_paise():
    assert amount_in_words(2468) == "Rupees Two Thousand Four Hundred Sixty Eight only"
    assert amount_in_words(10.5) == "Rupees Ten and Fifty Paise only"
    assert amount_in_words(0.999) == "Rupees One only"
