import pytest

from agreements.numerals import format_indian, number_to_words, ordinal_suffix


@pytest.mark.parametrize(
    "value, words",
    [
        (0, "Zero"),
        (7, "Seven"),
        (10, "Ten"),
        (13, "Thirteen"),
        (20, "Twenty"),
        (45, "Forty Five"),
        (100, "One Hundred"),
        (101, "One Hundred One"),
        (999, "Nine Hundred Ninety Nine"),
        (1000, "One Thousand"),
        (25000, "Twenty Five Thousand"),
        (99999, "Ninety Nine Thousand Nine Hundred Ninety Nine"),
        (100000, "One Lakh"),
        (123456, "One Lakh Twenty Three Thousand Four Hundred Fifty Six"),
        (1500000, "Fifteen Lakh"),
        (9999999, "Ninety Nine Lakh Ninety Nine Thousand Nine Hundred Ninety Nine"),
    ],
)
def test_number_to_words_uses_indian_place_values(value, words):
    assert number_to_words(value) == words


def test_number_to_words_degrades_to_grouped_digits_from_one_crore():
    assert number_to_words(10_000_000) == "1,00,00,000"
    assert number_to_words(123_456_789) == "12,34,56,789"


def test_number_to_words_never_emits_stray_spaces():
    for value in range(0, 10_000_000, 7919):
        words = number_to_words(value)
        assert words == words.strip()
        assert "  " not in words


@pytest.mark.parametrize(
    "value, grouped",
    [(0, "0"), (999, "999"), (1000, "1,000"), (25000, "25,000"), (123456, "1,23,456"), (12345678, "1,23,45,678")],
)
def test_format_indian_grouping(value, grouped):
    assert format_indian(value) == grouped


@pytest.mark.parametrize(
    "day, suffix",
    [
        (1, "st"),
        (2, "nd"),
        (3, "rd"),
        (4, "th"),
        (11, "th"),
        (12, "th"),
        (13, "th"),
        (21, "st"),
        (22, "nd"),
        (23, "rd"),
        (30, "th"),
        (31, "st"),
        (111, "th"),
    ],
)
def test_ordinal_suffix(day, suffix):
    assert ordinal_suffix(day) == suffix
