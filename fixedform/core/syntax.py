"""Lexical helpers shared by the compiler, the expression engine and the converter.

Splitting here is depth- and quote-aware: separators inside parentheses or
inside a quoted literal never split a string.
"""

import re

from fixedform.core.config import Markers, RegexPatterns

_SIMPLE_PATH_RX = re.compile(RegexPatterns.SIMPLE_PATH)
_FUNCTION_CALL_RX = re.compile(RegexPatterns.FUNCTION_CALL, re.DOTALL)
_ARRAY_BASE_RX = re.compile(RegexPatterns.ARRAY_BASE)
_PLACEHOLDER_RX = re.compile(RegexPatterns.PLACEHOLDER)
_ONLY_PLACEHOLDER_RX = re.compile(RegexPatterns.ONLY_PLACEHOLDER)
_WHITESPACE_RX = re.compile(RegexPatterns.WHITESPACE_RUN)


def is_simple_path(text: str) -> bool:
    """True if text is a bare path (letters, digits, underscore, dot, brackets)."""
    return bool(_SIMPLE_PATH_RX.match(text))


def match_function_call(text: str) -> tuple[str, str] | None:
    """Split ``name(args)`` into (name, raw args). None if text is not a call."""
    m = _FUNCTION_CALL_RX.match(text.strip())
    if not m:
        return None
    return m.group("fn"), m.group("args")


def split_top_level(text: str, separator: str, keep_empty_tail: bool = True) -> list[str]:
    """Split on a separator that sits outside parentheses and quotes.

    Args:
        text: Text to split.
        separator: Single separator character (``,`` or ``|``).
        keep_empty_tail: Keep a trailing empty piece. Argument lists drop it
            (``f(a,)`` has one argument); pipelines keep every piece.

    Returns:
        Pieces in order, untrimmed.
    """
    pieces: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    for i, c in enumerate(text):
        if quote:
            if c == quote and text[i - 1] != "\\":
                quote = None
            continue
        if c in Markers.QUOTES:
            quote = c
        elif c == "(":
            depth += 1
        elif c == ")":
            depth = max(0, depth - 1)
        elif c == separator and depth == 0:
            pieces.append(text[start:i])
            start = i + 1
    tail = text[start:]
    if keep_empty_tail or tail.strip():
        pieces.append(tail)
    return pieces


def split_args(text: str) -> list[str]:
    """Split a raw argument list on top-level commas, trimming each argument."""
    if not text or not text.strip():
        return []
    return [a.strip() for a in split_top_level(text, Markers.ARG_SEPARATOR, keep_empty_tail=False)]


def find_qualifier(text: str) -> int:
    """Index of the first ``:`` at parenthesis depth zero outside quotes, or -1."""
    depth = 0
    quote: str | None = None
    for i, c in enumerate(text):
        if quote:
            if c == quote:
                quote = None
            continue
        if c in Markers.QUOTES:
            quote = c
        elif c == "(":
            depth += 1
        elif c == ")":
            depth = max(0, depth - 1)
        elif c == Markers.QUALIFIER and depth == 0:
            return i
    return -1


def unquote(text: str) -> str | None:
    """Body of a quoted literal with escapes resolved, or None if not quoted."""
    if len(text) >= 2 and text[0] in Markers.QUOTES and text[-1] == text[0]:
        body = text[1:-1]
        quote = text[0]
        return (
            body.replace("\\" + quote, quote)
            .replace("\\n", "\n")
            .replace("\\t", "\t")
        )
    return None


def extract_array_base(path: str) -> str | None:
    """Name of the leading array segment (``Items`` in ``Items[].Total``)."""
    if not path:
        return None
    m = _ARRAY_BASE_RX.match(path)
    return m.group("base") if m else None


def path_after_array(path: str) -> str:
    """Remainder of a path after its first array marker, without the leading dot."""
    idx = path.find(Markers.ARRAY)
    if idx < 0:
        return path
    return path[idx + len(Markers.ARRAY):].lstrip(Markers.PATH_SEPARATOR)


def find_placeholders(line: str) -> list[re.Match]:
    """All well-formed ``{...}`` spans in a line, in order."""
    return list(_PLACEHOLDER_RX.finditer(line))


def strip_placeholders(line: str) -> str:
    """Literal text of a template line: placeholders removed, then trimmed."""
    return _PLACEHOLDER_RX.sub("", line).strip()


def is_only_placeholder(line: str) -> bool:
    """True if the line is exactly one placeholder with no literal text."""
    return bool(_ONLY_PLACEHOLDER_RX.match(line.strip()))


def split_lines(text: str) -> list[str]:
    """Trimmed, non-blank lines of a text block."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return [line.strip() for line in lines if line.strip()]


def split_tokens(line: str) -> list[str]:
    """Whitespace-run tokens of a line."""
    return [t for t in _WHITESPACE_RX.split(line) if t]


def starts_with_ignore_case(text: str, prefix: str) -> bool:
    """Case-insensitive prefix test."""
    return text.casefold().startswith(prefix.casefold())
