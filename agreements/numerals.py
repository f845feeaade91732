"""Number formatting helpers for Indian rupee amounts and day ordinals."""

from __future__ import annotations

UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = [
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

THOUSAND = 1_000
LAKH = 100_000
CRORE = 10_000_000


def format_indian(value: int) -> str:
    """Group digits the Indian way: last three, then pairs (12,34,567)."""
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if len(digits) <= 3:
        return sign + digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return sign + ",".join(pairs + [tail])


def _with_remainder(prefix: str, remainder: int) -> str:
    if not remainder:
        return prefix
    return f"{prefix} {number_to_words(remainder)}"


def number_to_words(value: int) -> str:
    """
    Spell out a non-negative integer using Indian place values.

    Amounts of one crore and above are not spelled out; they come back as an
    Indian-grouped digit string instead.
    """
    if value == 0:
        return "Zero"
    if value < 10:
        return UNITS[value]
    if value < 20:
        return TEENS[value - 10]
    if value < 100:
        unit = value % 10
        return TENS[value // 10] + (f" {UNITS[unit]}" if unit else "")
    if value < THOUSAND:
        return _with_remainder(f"{UNITS[value // 100]} Hundred", value % 100)
    if value < LAKH:
        return _with_remainder(f"{number_to_words(value // THOUSAND)} Thousand", value % THOUSAND)
    if value < CRORE:
        return _with_remainder(f"{number_to_words(value // LAKH)} Lakh", value % LAKH)
    return format_indian(value)


def ordinal_suffix(day: int) -> str:
    """Return the English ordinal suffix for ``day`` (1 -> "st", 12 -> "th")."""
    if 11 <= day % 100 <= 13:
        return "th"
    last_digit = day % 10
    if last_digit == 1:
        return "st"
    if last_digit == 2:
        return "nd"
    if last_digit == 3:
        return "rd"
    return "th"
