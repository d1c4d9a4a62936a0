"""Parsing helpers for text read from the profile page."""
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from balance_tracker.models.balance import ZERO_BALANCE

# Currency symbol followed by digit groups, e.g. "$1,234" or "$1,234.56"
BALANCE_PATTERN = re.compile(r"\$[\d,]+(?:\.\d+)?")
_NON_NUMERIC = re.compile(r"[^0-9.\-]+")

EMPTY_PERCENTAGE = "0%"


def parse_balance_text(text: Optional[str]) -> str:
    """
    Pull the currency amount out of the balance element's text.

    The element also carries the percentage change, so only the first
    currency match is kept. Text without a match reads as the zero balance.
    """
    if not text:
        return ZERO_BALANCE
    match = BALANCE_PATTERN.search(text)
    return match.group(0) if match else ZERO_BALANCE


def parse_percentage_text(text: Optional[str]) -> str:
    """Trimmed percentage text; an empty element reads as "0%"."""
    return (text or "").strip() or EMPTY_PERCENTAGE


def balance_value(balance: Optional[str]) -> Decimal:
    """
    Numeric value of a balance string.

    Placeholders ("Loading..."), failures (None) and anything else that does
    not parse count as zero.
    """
    if not balance:
        return Decimal("0")
    cleaned = _NON_NUMERIC.sub("", balance)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def calculate_total(balances: Iterable[Optional[str]]) -> Decimal:
    """Sum of every parseable balance."""
    return sum((balance_value(b) for b in balances), Decimal("0"))
