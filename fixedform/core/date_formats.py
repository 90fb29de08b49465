"""Custom date/time format patterns with a fixed, locale-independent convention.

Templates write formats with .NET-style custom tokens, for example
``{InvoiceDateTime:datetime:dd-MM-yyyy H:mm}``. This module parses text
exactly against such a format and renders datetimes back with one.

Supported tokens:
    yyyy yy        year (4 digits / 2 digits, 2-digit years map to 2000-2099)
    MMMM MMM MM M  month (name / abbreviation / padded / unpadded)
    dddd ddd       weekday name / abbreviation (checked for presence only)
    dd d           day of month (padded / unpadded)
    HH H           hour 0-23 (padded / unpadded)
    hh h           hour 1-12 (padded / unpadded), used with tt
    mm m           minute
    ss s           second
    f..fffffff     fraction of a second (1-7 digits)
    tt t           AM/PM designator
    'text' "text"  quoted literal
    \\c            escaped literal character

English month and day names are built in; the process locale is never
consulted, so the same input renders the same output everywhere.

Usage:
    dt = parse_exact("15-09-2025 3:45", "dd-MM-yyyy H:mm")
    render(dt, "yyyy-MM-dd")   # "2025-09-15"
"""

import re
from datetime import datetime
from functools import lru_cache

from fixedform.core.config import OutputFormats

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
DAY_NAMES: tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)

# Longest token first, so "MMMM" wins over "MM".
_TOKEN_RX = re.compile(
    r"yyyy|yy|MMMM|MMM|MM|M|dddd|ddd|dd|d|HH|H|hh|h|mm|m|ss|s|f{1,7}|tt|t"
)

# Token -> (capture group name, regex for the value)
_TOKEN_PATTERNS: dict[str, tuple[str, str]] = {
    "yyyy": ("year", r"\d{4}"),
    "yy": ("year2", r"\d{2}"),
    "MMMM": ("month_name", "|".join(MONTH_NAMES)),
    "MMM": ("month_abbr", "|".join(m[:3] for m in MONTH_NAMES)),
    "MM": ("month", r"\d{2}"),
    "M": ("month", r"\d{1,2}"),
    "dddd": ("weekday", "|".join(DAY_NAMES)),
    "ddd": ("weekday", "|".join(d[:3] for d in DAY_NAMES)),
    "dd": ("day", r"\d{2}"),
    "d": ("day", r"\d{1,2}"),
    "HH": ("hour", r"\d{2}"),
    "H": ("hour", r"\d{1,2}"),
    "hh": ("hour12", r"\d{2}"),
    "h": ("hour12", r"\d{1,2}"),
    "mm": ("minute", r"\d{2}"),
    "m": ("minute", r"\d{1,2}"),
    "ss": ("second", r"\d{2}"),
    "s": ("second", r"\d{1,2}"),
    "tt": ("ampm", r"AM|PM"),
    "t": ("ampm1", r"A|P"),
}


def tokenize(fmt: str) -> list[tuple[bool, str]]:
    """Split a format into (is_token, text) pieces.

    Literal pieces keep their text; quoted sections and backslash escapes
    become literals with the delimiters removed.
    """
    pieces: list[tuple[bool, str]] = []
    i = 0
    literal = ""
    while i < len(fmt):
        c = fmt[i]
        if c in ("'", '"'):
            end = fmt.find(c, i + 1)
            if end < 0:
                end = len(fmt)
            literal += fmt[i + 1:end]
            i = end + 1
            continue
        if c == "\\" and i + 1 < len(fmt):
            literal += fmt[i + 1]
            i += 2
            continue
        m = _TOKEN_RX.match(fmt, i)
        if m:
            if literal:
                pieces.append((False, literal))
                literal = ""
            pieces.append((True, m.group(0)))
            i = m.end()
            continue
        literal += c
        i += 1
    if literal:
        pieces.append((False, literal))
    return pieces


@lru_cache(maxsize=128)
def _compile_format(fmt: str) -> re.Pattern:
    parts = ["^"]
    seen: set[str] = set()
    for is_token, text in tokenize(fmt):
        if not is_token:
            parts.append(re.escape(text))
            continue
        if text.startswith("f"):
            name, pattern = "fraction", r"\d{%d}" % len(text)
        else:
            name, pattern = _TOKEN_PATTERNS[text]
        if name in seen:
            # A repeated field must still match, but only the first binds.
            parts.append(f"(?:{pattern})")
        else:
            seen.add(name)
            parts.append(f"(?P<{name}>{pattern})")
    parts.append("$")
    return re.compile("".join(parts), re.IGNORECASE)


def parse_exact(text: str, fmt: str) -> datetime | None:
    """Parse text that must match the whole format. None on any mismatch."""
    m = _compile_format(fmt).match(text.strip())
    if not m:
        return None
    g = m.groupdict()

    year = 1
    if g.get("year"):
        year = int(g["year"])
    elif g.get("year2"):
        year = 2000 + int(g["year2"])

    month = 1
    if g.get("month"):
        month = int(g["month"])
    elif g.get("month_name"):
        month = _index_of(MONTH_NAMES, g["month_name"]) + 1
    elif g.get("month_abbr"):
        month = _index_of([n[:3] for n in MONTH_NAMES], g["month_abbr"]) + 1

    hour = int(g["hour"]) if g.get("hour") else 0
    if g.get("hour12"):
        hour = int(g["hour12"]) % 12
        designator = (g.get("ampm") or g.get("ampm1") or "A").upper()
        if designator.startswith("P"):
            hour += 12

    microsecond = 0
    if g.get("fraction"):
        microsecond = int(g["fraction"][:6].ljust(6, "0"))

    try:
        return datetime(
            year,
            month,
            int(g["day"]) if g.get("day") else 1,
            hour,
            int(g["minute"]) if g.get("minute") else 0,
            int(g["second"]) if g.get("second") else 0,
            microsecond,
        )
    except ValueError:
        return None


def render(dt: datetime, fmt: str | None) -> str:
    """Render a datetime with a custom format. No format (or "o") gives ISO-8601."""
    if not fmt or fmt == OutputFormats.ROUND_TRIP:
        return dt.isoformat()
    out: list[str] = []
    for is_token, text in tokenize(fmt):
        out.append(_render_token(dt, text) if is_token else text)
    return "".join(out)


def _render_token(dt: datetime, token: str) -> str:
    hour12 = dt.hour % 12 or 12
    if token.startswith("f"):
        return f"{dt.microsecond:06d}0"[: len(token)]
    renderers = {
        "yyyy": lambda: f"{dt.year:04d}",
        "yy": lambda: f"{dt.year % 100:02d}",
        "MMMM": lambda: MONTH_NAMES[dt.month - 1],
        "MMM": lambda: MONTH_NAMES[dt.month - 1][:3],
        "MM": lambda: f"{dt.month:02d}",
        "M": lambda: str(dt.month),
        "dddd": lambda: DAY_NAMES[dt.weekday()],
        "ddd": lambda: DAY_NAMES[dt.weekday()][:3],
        "dd": lambda: f"{dt.day:02d}",
        "d": lambda: str(dt.day),
        "HH": lambda: f"{dt.hour:02d}",
        "H": lambda: str(dt.hour),
        "hh": lambda: f"{hour12:02d}",
        "h": lambda: str(hour12),
        "mm": lambda: f"{dt.minute:02d}",
        "m": lambda: str(dt.minute),
        "ss": lambda: f"{dt.second:02d}",
        "s": lambda: str(dt.second),
        "tt": lambda: "AM" if dt.hour < 12 else "PM",
        "t": lambda: "A" if dt.hour < 12 else "P",
    }
    return renderers[token]()


def _index_of(names, value: str) -> int:
    lowered = value.lower()
    for i, name in enumerate(names):
        if name.lower() == lowered:
            return i
    return 0
