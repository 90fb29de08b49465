"""Centralized configuration for template compilation and extraction.

Every marker, keyword and regex source string used by the compiler, the
expression engine and the converter lives here. Each constant notes:
- What it controls
- Which modules read it

There are no runtime settings in the core; the CLI is the only place that
reads the environment (see LoggingConfig).
"""

from typing import Final


# Template Markers

class Markers:
    """Single-character and short markers of the template language."""

    ARRAY: Final[str] = "[]"
    """Suffix marking a path segment as an array.

    ``Items[].Total`` selects the ``Items`` array and addresses ``Total`` on
    its elements. Brackets with content (``Items[abc]``) are not markers.
    Used by: syntax.py, tree_writer.py, expression_engine.py, converter.py
    """

    PIPE: Final[str] = "|"
    """Separates pipeline steps: ``Name | upper() | prefix('X-')``.
    Used by: template_compiler.py, expression_parser.py
    """

    QUALIFIER: Final[str] = ":"
    """Separates expression, type and format: ``{When:datetime:dd-MM-yyyy}``.

    Only a colon at parenthesis depth zero counts; colons inside call
    arguments belong to the argument.
    Used by: template_compiler.py
    """

    PATH_SEPARATOR: Final[str] = "."
    """Separates path segments: ``Customer.Address.City``.
    Used by: tree_writer.py, expression_engine.py
    """

    ARG_SEPARATOR: Final[str] = ","
    """Separates function and pipe-step arguments.
    Used by: syntax.py, expression_parser.py
    """

    QUOTES: Final[tuple[str, ...]] = ('"', "'")
    """Characters that open and close a quoted literal.

    Separators inside a quoted literal never split it.
    Used by: syntax.py, expression_parser.py
    """


# Regex Patterns

class RegexPatterns:
    """Regex source strings. Modules compile the ones they own at import."""

    PLACEHOLDER: Final[str] = r"\{([^}]+)\}"
    """A ``{...}`` placeholder span. Unbalanced braces never match, so a
    malformed span stays literal text.
    Used by: template_compiler.py, syntax.py
    """

    ONLY_PLACEHOLDER: Final[str] = r"^\{\s*[^}]+\s*\}$"
    """A template line that is exactly one placeholder with no literal text.
    Used by: syntax.py (converter fallback (b))
    """

    SIMPLE_PATH: Final[str] = r"^[A-Za-z0-9_.\[\]]+$"
    """Letters, digits, underscore, dot and brackets only.

    Bracket contents are not validated: ``Items[abc]`` is simple, but only
    an empty ``[]`` acts as an array marker.
    Used by: syntax.py
    """

    FUNCTION_CALL: Final[str] = r"^(?P<fn>[A-Za-z_][A-Za-z0-9_]*)\((?P<args>.*)\)$"
    """``name(args)`` spanning the whole term. Matched with DOTALL.
    Used by: syntax.py
    """

    ARRAY_BASE: Final[str] = r"^(?P<base>[A-Za-z0-9_]+)\[\]"
    """Leading array segment of a target path (``Items`` in ``Items[].Total``).
    Used by: syntax.py
    """

    PLAIN_DECIMAL: Final[str] = r"^[+-]?\d+(?:\.\d+)?$"
    """A whole string that is a plain signed decimal: ASCII digits, an optional
    sign and fraction. No exponent, underscores or other digit scripts.
    Compiled with re.ASCII. Used by: value_helpers.py
    """

    SIGNED_DECIMAL: Final[str] = r"-?\d+(?:\.\d+)?"
    """First decimal-looking substring, used when a whole-string parse fails.
    Used by: value_helpers.py, coercion.py
    """

    SIGNED_INTEGER: Final[str] = r"-?\d+"
    """First integer-looking substring, used when a whole-string parse fails.
    Used by: coercion.py
    """

    NUMERIC_LITERAL: Final[str] = r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$"
    """A bare numeric literal inside an expression (``sum(a, 2.5)``).
    Used by: expression_parser.py
    """

    GROUPED_NUMBER: Final[str] = r"^[+-]?\d{1,3}(?:,\d{3})+(?:\.\d+)?$"
    """Number with comma thousands separators (``1,234.50``).
    Used by: value_helpers.py
    """

    WHITESPACE_RUN: Final[str] = r"\s+"
    """Token separator for positional binding and capture-pattern literals.
    Used by: syntax.py, template_compiler.py
    """


# Type Keywords

class TypeNames:
    """Declared-type keywords, matched case-insensitively.

    Any other keyword (``word``, ``wordwithspace``...) passes the raw text
    through unchanged.
    Used by: coercion.py
    """

    NUMBER: Final[frozenset[str]] = frozenset({"number", "decimal"})
    INTEGER: Final[frozenset[str]] = frozenset({"integer", "int"})
    DATETIME: Final[frozenset[str]] = frozenset({"datetime"})
    DATE: Final[frozenset[str]] = frozenset({"date"})
    TIME: Final[frozenset[str]] = frozenset({"time"})


class NumberLimits:
    """Bounds on numeric values stored in the tree."""

    MAX_INTEGER_DIGITS: Final[int] = 4300
    """Largest integer, in digits, produced by ``integer``/``toint`` or
    rendered as a JSON integer. Matches Python's default int/str conversion
    limit; longer values stay as text.
    Used by: value_helpers.py, coercion.py
    """


class OutputFormats:
    """Render formats for coerced dates and times.

    Formats use the same custom tokens accepted in templates
    (see date_formats.py).
    """

    DATE: Final[str] = "yyyy-MM-dd"
    """Rendering of ``date`` values. Used by: coercion.py"""

    TIME: Final[str] = "HH:mm:ss"
    """Rendering of ``time`` values. Used by: coercion.py"""

    ROUND_TRIP: Final[str] = "o"
    """Format name meaning ISO-8601 output.
    Used by: date_formats.py, expression_engine.py (format pipe without argument)
    """


# Expression Defaults

class ExpressionDefaults:
    """Defaults applied by the expression engine."""

    JOIN_SEPARATOR: Final[str] = ", "
    """Separator used by ``join(path)`` when no second argument is given.
    Used by: expression_engine.py
    """

    PARSE_CACHE_SIZE: Final[int] = 512
    """Parsed pipelines kept per process. Parsed pipelines are immutable,
    so sharing them between conversions is safe.
    Used by: expression_parser.py
    """


# Logging

class LoggingConfig:
    """Logger naming and the single environment hook used by the CLI."""

    LOGGER_NAME: Final[str] = "fixedform"
    """Root logger for the package. Module loggers are its children.
    Used by: conversion_logger.py
    """

    LOG_DIR_ENV_VAR: Final[str] = "FIXEDFORM_LOG_DIR"
    """Environment variable (or ``.env`` entry) giving the CLI a default log
    directory. The core never reads it.
    Used by: cli.py
    """
