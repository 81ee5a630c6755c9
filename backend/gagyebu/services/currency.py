"""Korean Won helpers.

Amounts are whole won stored as integers; there is no minor unit.
"""

import re
from numbers import Real

_STRIP_PATTERN = re.compile(r"[₩,\s]")
_LEADING_INT_PATTERN = re.compile(r"^[+-]?\d+")


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return value == value  # NaN check


def _group(amount: Real) -> str:
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return f"{amount:,}"


def format_krw(amount: object) -> str:
    """Format ``1234567`` as ``"₩1,234,567"``."""
    if not _is_number(amount):
        return "₩0"
    return f"₩{_group(amount)}"


def parse_krw(text: str | None) -> int:
    """Parse ``"₩1,234,567"`` (or ``"1,234,567"``) back to ``1234567``.

    Reads the leading integer after removing the symbol, separators and
    whitespace; anything unreadable is ``0``.
    """
    if not text:
        return 0
    cleaned = _STRIP_PATTERN.sub("", text)
    match = _LEADING_INT_PATTERN.match(cleaned)
    if not match:
        return 0
    return int(match.group(0))


def is_valid_krw_amount(amount: object) -> bool:
    if not _is_number(amount):
        return False
    if isinstance(amount, float) and not amount.is_integer():
        return False
    return amount >= 0


def format_krw_input(amount: object) -> str:
    if not _is_number(amount):
        return ""
    return _group(amount)


def format_krw_short(amount: object) -> str:
    """Abbreviate large amounts with 만 (10^4) and 억 (10^8)."""
    if not _is_number(amount):
        return "₩0"
    if amount >= 100_000_000:
        return f"₩{amount / 100_000_000:.1f}억"
    if amount >= 10_000:
        return f"₩{amount / 10_000:.1f}만"
    return format_krw(amount)
