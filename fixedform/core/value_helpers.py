"""Value helpers for tree nodes.

Tree values are plain Python: dict (object), list (array), and scalars
(str, Decimal, int, bool, None). These helpers give every module the same
answer to "is this blank?", "what is its text?" and "what number is it?".
"""

import json
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from fixedform.core.config import NumberLimits, RegexPatterns

_PLAIN_DECIMAL_RX = re.compile(RegexPatterns.PLAIN_DECIMAL, re.ASCII)
_GROUPED_NUMBER_RX = re.compile(RegexPatterns.GROUPED_NUMBER, re.ASCII)
_SIGNED_DECIMAL_RX = re.compile(RegexPatterns.SIGNED_DECIMAL, re.ASCII)


def is_blank(value: Any) -> bool:
    """Check if a value counts as missing for coalesce/default.

    Handles three cases:
    1. None - missing
    2. "" or whitespace-only string - blank
    3. anything else (0, False, [], {}) - present
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def to_text(value: Any) -> str:
    """Render a tree value as text.

    - None -> ""
    - Decimal -> fixed-point ("246", "1.50"), never exponent notation
    - bool -> "true" / "false"
    - dict/list -> compact JSON
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=json_default, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def parse_decimal(text: str) -> Decimal | None:
    """Parse a whole string as a signed decimal, or None.

    Accepts surrounding whitespace, a leading sign and comma thousands
    groups, with ASCII digits only. Exponents, underscores, NaN and
    infinity are rejected even though ``Decimal()`` would take them.
    """
    text = text.strip()
    if _GROUPED_NUMBER_RX.fullmatch(text):
        text = text.replace(",", "")
    elif not _PLAIN_DECIMAL_RX.fullmatch(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def to_decimal(value: Any) -> Decimal | None:
    """Numeric value of a scalar, or None for non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        return parse_decimal(value)
    return None


def first_decimal(text: str) -> Decimal | None:
    """First decimal-looking substring of text, or None."""
    m = _SIGNED_DECIMAL_RX.search(text)
    return Decimal(m.group(0)) if m else None


def json_default(value: Any) -> Any:
    """``json.dumps`` hook: Decimals become JSON numbers."""
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            as_int = truncate_to_int(value)
            if as_int is not None:
                return as_int
        number = float(value)
        # Out-of-range values would print as Infinity, which is not JSON
        return number if math.isfinite(number) else to_text(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def truncate_to_int(value: Decimal) -> int | None:
    """Integer part of a Decimal, rounding toward zero.

    None for non-finite values and for integers longer than
    NumberLimits.MAX_INTEGER_DIGITS.
    """
    if not value.is_finite() or value.adjusted() >= NumberLimits.MAX_INTEGER_DIGITS:
        return None
    try:
        return int(value)
    except (ValueError, OverflowError):
        return None
