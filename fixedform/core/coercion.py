"""Type coercion for captured placeholder text.

Converts raw captured strings into typed tree values:
- "number"/"decimal" -> Decimal
- "integer"/"int"    -> int
- "datetime"         -> ISO-8601 string
- "date"             -> "yyyy-MM-dd" string
- "time"             -> "HH:mm:ss" string

Coercion never fails. An unparsable value comes back as the raw text, and
an unknown or missing type keyword passes the raw text through.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Any

from dateutil import parser as date_parser

from fixedform.core import date_formats
from fixedform.core.config import OutputFormats, RegexPatterns, TypeNames
from fixedform.core.value_helpers import first_decimal, parse_decimal, truncate_to_int

logger = logging.getLogger(__name__)

_SIGNED_INTEGER_RX = re.compile(RegexPatterns.SIGNED_INTEGER, re.ASCII)


def coerce(raw: str | None, data_type: str | None = None, fmt: str | None = None) -> Any:
    """Convert raw text to a typed value.

    Args:
        raw: Captured text. None is treated as "".
        data_type: Declared type keyword (case-insensitive), or None.
        fmt: Optional format string for date/time types.

    Returns:
        The typed value, or raw when there is no type or parsing fails.
    """
    value, _ = try_coerce(raw, data_type, fmt)
    return value


def try_coerce(raw: str | None, data_type: str | None = None, fmt: str | None = None) -> tuple[Any, bool]:
    """Like coerce(), but also report whether a declared type was applied.

    Returns:
        (value, ok). ok is False only when a known type keyword could not
        parse the text and the raw text was returned instead.
    """
    raw = raw if raw is not None else ""
    if not data_type or not data_type.strip():
        return raw, True

    kind = data_type.strip().lower()
    if kind in TypeNames.NUMBER:
        result = _coerce_number(raw)
    elif kind in TypeNames.INTEGER:
        result = _coerce_integer(raw)
    elif kind in TypeNames.DATETIME:
        result = _coerce_datetime(raw, fmt, None)
    elif kind in TypeNames.DATE:
        result = _coerce_datetime(raw, fmt, OutputFormats.DATE)
    elif kind in TypeNames.TIME:
        result = _coerce_datetime(raw, None, OutputFormats.TIME)
    else:
        return raw, True

    if result is None:
        logger.debug(f"Coercion to {kind} failed, keeping raw text: {raw!r}")
        return raw, False
    return result, True


def parse_datetime(text: str, fmt: str | None = None) -> datetime | None:
    """Parse a date/time: exactly against fmt if given, else a general parse.

    The general parse rejects pure digit strings, which would otherwise be
    read as a day of the current month.
    """
    text = text.strip()
    if not text:
        return None
    if fmt:
        return date_formats.parse_exact(text, fmt)
    if text.lstrip("+-").isdigit():
        return None
    try:
        return date_parser.parse(text)
    except (ValueError, OverflowError):
        return None


# Internal converters

def _coerce_number(raw: str) -> Decimal | None:
    value = parse_decimal(raw)
    if value is not None:
        return value
    return first_decimal(raw)


def _coerce_integer(raw: str) -> int | None:
    value = parse_decimal(raw)
    if value is not None and value == value.to_integral_value():
        return truncate_to_int(value)
    m = _SIGNED_INTEGER_RX.search(raw)
    # Decimal first: int() on a long digit string hits the str conversion limit
    return truncate_to_int(Decimal(m.group(0))) if m else None


def _coerce_datetime(raw: str, fmt: str | None, output: str | None) -> str | None:
    # An exact-format miss still gets a general parse.
    dt = parse_datetime(raw, fmt) if fmt else None
    if dt is None:
        dt = parse_datetime(raw)
    if dt is None:
        return None
    return date_formats.render(dt, output)
