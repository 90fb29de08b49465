"""Tests for fixedform.core.coercion module.

Tests type coercion of captured text:
- number/decimal and integer/int parsing with substring fallback
- datetime/date/time with and without an explicit format
- pass-through for missing and unknown type keywords
- idempotency on canonical values
"""

from decimal import Decimal

import pytest

from fixedform.core.coercion import coerce, parse_datetime, try_coerce
from fixedform.core.value_helpers import to_text


# =============================================================================
# Pass-through
# =============================================================================


class TestPassThrough:
    """Tests for values that are never converted."""

    def test_no_type_returns_raw(self):
        """Without a declared type the raw text is returned unchanged."""
        assert coerce("  abc  ") == "  abc  "

    def test_blank_type_returns_raw(self):
        """A whitespace-only type counts as no type."""
        assert coerce("abc", "  ") == "abc"

    def test_unknown_type_returns_raw(self):
        """Keywords such as 'word' are labels only."""
        assert coerce("Item1", "word") == "Item1"
        assert coerce("ABC Retailer", "wordwithspace") == "ABC Retailer"

    def test_none_raw_becomes_empty_string(self):
        """A missing value is treated as empty text."""
        assert coerce(None) == ""

    def test_unknown_type_reports_ok(self):
        """Unknown keywords are not failures."""
        assert try_coerce("x", "color") == ("x", True)


# =============================================================================
# Numbers
# =============================================================================


class TestNumber:
    """Tests for number/decimal coercion."""

    def test_plain_decimal(self):
        """A whole-string decimal parses to Decimal."""
        assert coerce("34.50", "number") == Decimal("34.50")

    def test_decimal_alias(self):
        """'decimal' is the same as 'number'."""
        assert coerce("7", "decimal") == Decimal("7")

    def test_type_is_case_insensitive(self):
        """Type keywords match regardless of case."""
        assert coerce("12", "NUMBER") == Decimal("12")

    def test_negative(self):
        """A leading minus sign is kept."""
        assert coerce("-3.25", "number") == Decimal("-3.25")

    def test_grouped_thousands(self):
        """Comma thousands separators are accepted."""
        assert coerce("1,234.50", "number") == Decimal("1234.50")

    def test_substring_fallback(self):
        """The first decimal-looking substring is used when the whole fails."""
        assert coerce("USD 12.75 total", "number") == Decimal("12.75")

    def test_failure_returns_raw(self):
        """Text without digits stays text."""
        assert coerce("n/a", "number") == "n/a"

    def test_failure_reports_not_ok(self):
        """try_coerce flags the failed conversion."""
        assert try_coerce("n/a", "number") == ("n/a", False)

    def test_nan_is_not_a_number(self):
        """NaN is rejected rather than stored."""
        assert coerce("NaN", "number") == "NaN"

    @pytest.mark.parametrize("raw", ["1e3", "1_000", "1e999999"])
    def test_only_plain_digits_parse_whole(self, raw):
        """Exponents and underscores fall back to the first digit run."""
        assert coerce(raw, "number") == Decimal("1")

    def test_non_ascii_digits_stay_text(self):
        """Digits from other scripts are not numbers."""
        assert try_coerce("\u0663", "number") == ("\u0663", False)


class TestInteger:
    """Tests for integer/int coercion."""

    def test_plain_integer(self):
        """A whole-string integer parses to int."""
        value = coerce("42", "integer")
        assert value == 42
        assert isinstance(value, int)

    def test_int_alias(self):
        """'int' is the same as 'integer'."""
        assert coerce("-5", "int") == -5

    def test_zero_fraction_is_integer(self):
        """'4.0' is an integer value."""
        assert coerce("4.0", "integer") == 4

    def test_substring_fallback(self):
        """The first integer-looking substring is used when the whole fails."""
        assert coerce("Qty: 3 pcs", "integer") == 3

    def test_fraction_uses_leading_digits(self):
        """'4.5' is not integral; the first integer substring wins."""
        assert coerce("4.5", "integer") == 4

    def test_failure_returns_raw(self):
        """Text without digits stays text."""
        assert coerce("many", "integer") == "many"

    def test_exponent_uses_leading_digits(self):
        """'1e30' is not a plain integer; its leading digits are used."""
        assert coerce("1e30", "integer") == 1

    def test_oversized_digit_run_stays_text(self):
        """A digit run too long for an int keeps the raw text."""
        raw = "x" + "1" * 5000
        assert try_coerce(raw, "integer") == (raw, False)


# =============================================================================
# Dates and times
# =============================================================================


class TestDateTime:
    """Tests for datetime/date/time coercion."""

    def test_datetime_with_format(self):
        """An exact format parses and renders ISO-8601."""
        assert coerce("15-09-2025 3:45", "datetime", "dd-MM-yyyy H:mm") == "2025-09-15T03:45:00"

    def test_datetime_without_format(self):
        """A general parse handles ISO-like input."""
        assert coerce("2025-09-15 03:45", "datetime") == "2025-09-15T03:45:00"

    def test_format_miss_falls_back_to_general_parse(self):
        """Text that misses the format still parses when it is unambiguous."""
        assert coerce("2025-09-15 03:45", "datetime", "dd-MM-yyyy H:mm") == "2025-09-15T03:45:00"

    def test_date_renders_day_only(self):
        """'date' renders yyyy-MM-dd."""
        assert coerce("15/09/2025", "date", "dd/MM/yyyy") == "2025-09-15"

    def test_date_with_month_name(self):
        """Month names are English and case-insensitive."""
        assert coerce("15 sep 2025", "date", "dd MMM yyyy") == "2025-09-15"

    def test_time_renders_clock(self):
        """'time' renders HH:mm:ss."""
        assert coerce("3:45 PM", "time") == "15:45:00"

    def test_unparsable_returns_raw(self):
        """Text that is not a date stays text."""
        assert coerce("soon", "datetime") == "soon"

    def test_bare_number_is_not_a_date(self):
        """A digit string is never read as a date."""
        assert coerce("20084", "date") == "20084"

    def test_invalid_calendar_date_returns_raw(self):
        """Day 31 of February is rejected, not rolled over."""
        assert coerce("31-02-2025", "date", "dd-MM-yyyy") == "31-02-2025"


class TestParseDatetime:
    """Tests for parse_datetime helper."""

    def test_exact(self):
        """An explicit format is applied exactly."""
        dt = parse_datetime("2025/09/15", "yyyy/MM/dd")
        assert (dt.year, dt.month, dt.day) == (2025, 9, 15)

    def test_exact_mismatch(self):
        """A format mismatch yields None (no fallback at this level)."""
        assert parse_datetime("2025-09-15", "yyyy/MM/dd") is None

    def test_blank(self):
        """Blank text yields None."""
        assert parse_datetime("   ") is None


# =============================================================================
# Idempotency
# =============================================================================


class TestIdempotency:
    """Coercing a canonical value again gives the same value."""

    @pytest.mark.parametrize("raw,data_type,fmt", [
        ("136", "number", None),
        ("-0.75", "decimal", None),
        ("4", "integer", None),
        ("15-09-2025 3:45", "datetime", "dd-MM-yyyy H:mm"),
        ("15/09/2025", "date", "dd/MM/yyyy"),
        ("3:45 PM", "time", None),
    ])
    def test_coerce_twice(self, raw, data_type, fmt):
        """coerce(text(coerce(x))) == coerce(x)."""
        once = coerce(raw, data_type, fmt)
        twice = coerce(to_text(once), data_type, fmt)
        assert twice == once
