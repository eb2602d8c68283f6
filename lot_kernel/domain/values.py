"""
Value helpers -- weights, percentages and calendar dates.

Responsibility:
    Normalises raw field values arriving at the store boundary (ORM rows,
    JSON payloads, spreadsheet-shaped fixtures) into the types the pure
    domain works with: ``Decimal | None`` for weight readings and
    ``date | None`` for header dates.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Weights are ``Decimal``, never ``float``.  Floats are converted via
      ``str()`` so 52.4 stays 52.4 and not 52.39999999999999857891452847979962825775146484375.
    - Parsing never raises.  Unparseable input becomes ``None`` ("not
      recorded"), which downstream accounting treats as zero weight.

Failure modes:
    None.  Malformed historical data degrades to ``None``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Display sentinel for a value that does not exist (e.g. last update of an
# empty lot).  Domain objects carry ``None``; renderers print this.
NOT_AVAILABLE = "-"

_WEIGHT_QUANTUM = Decimal("0.001")
_PERCENT_QUANTUM = Decimal("0.1")


def parse_weight(value: Any) -> Decimal | None:
    """
    Parse a weight reading in carats.

    Postconditions:
        Returns a finite ``Decimal`` or ``None``.  ``None``, empty strings,
        booleans, NaN/Infinity and non-numeric text all return ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = value.strip().replace(",", "")
    if not text:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def parse_count(value: Any) -> int | None:
    """Parse a piece count; anything non-integral becomes ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    weight = parse_weight(value)
    if weight is None or weight != weight.to_integral_value():
        return None
    return int(weight)


def parse_calendar_date(value: Any) -> date | None:
    """
    Parse an ISO calendar date (``YYYY-MM-DD``).

    Datetimes and ISO timestamps are truncated to their date.  Anything
    else returns ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def quantize_weight(value: Decimal) -> Decimal:
    """Round a weight to 3 decimal places for display."""
    return value.quantize(_WEIGHT_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_percent(value: Decimal | None) -> Decimal | None:
    """Round a percentage to 1 decimal place for display."""
    if value is None:
        return None
    return value.quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
