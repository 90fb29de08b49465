"""Compile template text into LineTemplate objects.

Converts a template such as

    ADDRESS:- {Address:wordwithspace}
    Item Qty Total
    {Items[].Name} {Items[].Qty:integer} {Items[].Total:number}
    Total: {sum(Items[].Total):number}

into one LineTemplate per non-blank line. Array rows (every placeholder on
one shared array) bind tokens positionally; every other line with
placeholders gets an anchored capture pattern built from its literal text.
"""

import logging
import re

from fixedform.core.config import Markers, RegexPatterns
from fixedform.core.errors import (
    ConversionDiagnostics,
    ConversionFailure,
    template_syntax_warning,
    unrecoverable_error,
)
from fixedform.core.syntax import (
    extract_array_base,
    find_placeholders,
    find_qualifier,
    is_simple_path,
    match_function_call,
    split_args,
    split_lines,
    split_top_level,
    strip_placeholders,
)
from fixedform.pydantic_models.template_models import LineTemplate, Placeholder

logger = logging.getLogger(__name__)

_WHITESPACE_RX = re.compile(RegexPatterns.WHITESPACE_RUN)


def compile_template(
    template_text: str,
    diagnostics: ConversionDiagnostics | None = None,
) -> list[LineTemplate]:
    """Compile template text into ordered LineTemplates.

    Malformed placeholder text never fails compilation; it degrades to a
    best-effort target and is reported through ``diagnostics``.

    Args:
        template_text: Template source.
        diagnostics: Optional collector for template syntax warnings.

    Returns:
        One LineTemplate per trimmed, non-blank template line.

    Raises:
        ConversionFailure: On an unexpected internal error.
    """
    try:
        return [_compile_line(line, diagnostics) for line in split_lines(template_text or "")]
    except Exception as e:
        record = unrecoverable_error(f"Template compilation failed: {e}", phase="compile", original=e)
        if diagnostics is not None:
            diagnostics.add(record)
        raise ConversionFailure(record) from e


def parse_placeholder(
    inside: str,
    template_line: str = "",
    diagnostics: ConversionDiagnostics | None = None,
) -> Placeholder:
    """Split ``expr[:type[:format]][ | steps]`` into a Placeholder.

    The first colon at parenthesis depth zero starts the type qualifier.
    Pipe steps written after the qualifier are reattached to the expression:
    ``Name:word | upper()`` has expression ``Name | upper()`` and type ``word``.
    """
    inside = inside.strip()
    expression = inside
    data_type = fmt = None

    q = find_qualifier(inside)
    if q >= 0:
        head = inside[:q].strip()
        tail = inside[q + 1:].strip()
        pieces = split_top_level(tail, Markers.PIPE)
        type_part = pieces[0]
        if len(pieces) > 1:
            steps = tail[len(type_part) + 1:].strip()
            expression = f"{head} {Markers.PIPE}{steps}" if head else f"{Markers.PIPE}{steps}"
        else:
            expression = head
        data_type, fmt = _split_type_format(type_part)

    target = derive_target(expression)
    if not inside or not target:
        _warn(diagnostics, "Empty placeholder, nothing will be written", template_line, inside)

    return Placeholder(
        raw_inside=inside,
        target_path=target,
        data_type=data_type,
        format=fmt,
        expression=expression,
    )


def derive_target(expression: str) -> str:
    """Destination path for an expression.

    1. The expression's leading term, when it is a simple path.
    2. The first simple-path argument of a leading function call.
    3. Otherwise an uppercase key built from the leading term.

    Examples:
        "Items[].Total"              -> "Items[].Total"
        "sum(Items[].Total)"         -> "Items[].Total"
        "Name | upper()"             -> "Name"
        "concat('a', 'b')"           -> "CONCAT__A____B__"
    """
    base = split_top_level(expression, Markers.PIPE)[0].strip()
    if is_simple_path(base):
        return base
    call = match_function_call(base)
    if call:
        args = split_args(call[1])
        if args and is_simple_path(args[0]):
            return args[0]
    return sanitize_key(base)


def sanitize_key(text: str) -> str:
    """Letters and digits upper-cased, everything else replaced by ``_``."""
    return "".join(c.upper() if c.isalnum() else "_" for c in text)


def build_capture_pattern(template_line: str) -> re.Pattern:
    """Anchored, case-insensitive pattern with one lazy group per placeholder.

    Literal text between placeholders must appear in the input; any run of
    whitespace in it matches any run of whitespace.
    """
    matches = find_placeholders(template_line)
    if not matches:
        return re.compile(r"^(.+)$", re.IGNORECASE)

    parts = [r"^\s*"]
    last = 0
    for m in matches:
        parts.append(_literal_pattern(template_line[last:m.start()]))
        parts.append(r"(.+?)")
        last = m.end()
    parts.append(_literal_pattern(template_line[last:]))
    parts.append(r"\s*$")
    return re.compile("".join(parts), re.IGNORECASE)


# Internal helpers

def _compile_line(raw_line: str, diagnostics: ConversionDiagnostics | None) -> LineTemplate:
    placeholders = tuple(
        parse_placeholder(m.group(1), raw_line, diagnostics) for m in find_placeholders(raw_line)
    )
    literal = strip_placeholders(raw_line)
    if "{" in literal or "}" in literal:
        _warn(diagnostics, "Unbalanced brace kept as literal text", raw_line)

    if not placeholders:
        return LineTemplate(raw_line=raw_line, literal=literal)

    array_name = _shared_array_base(placeholders)
    if array_name is not None:
        return LineTemplate(
            raw_line=raw_line,
            placeholders=placeholders,
            is_array_row=True,
            array_name=array_name,
            literal=literal,
        )

    return LineTemplate(
        raw_line=raw_line,
        placeholders=placeholders,
        capture_pattern=build_capture_pattern(raw_line),
        literal=literal,
    )


def _shared_array_base(placeholders: tuple[Placeholder, ...]) -> str | None:
    """The one array base every placeholder targets, or None."""
    if not all(Markers.ARRAY in p.target_path for p in placeholders):
        return None
    bases: dict[str, str] = {}
    for p in placeholders:
        base = extract_array_base(p.target_path)
        if base is not None:
            bases.setdefault(base.casefold(), base)
    if len(bases) != 1:
        return None
    return next(iter(bases.values()))


def _split_type_format(type_part: str) -> tuple[str | None, str | None]:
    type_part = type_part.strip()
    if Markers.QUALIFIER in type_part:
        data_type, fmt = type_part.split(Markers.QUALIFIER, 1)
        return data_type.strip() or None, fmt.strip() or None
    return type_part or None, None


def _literal_pattern(text: str) -> str:
    return r"\s+".join(re.escape(piece) for piece in _WHITESPACE_RX.split(text))


def _warn(
    diagnostics: ConversionDiagnostics | None,
    message: str,
    template_line: str,
    placeholder: str | None = None,
) -> None:
    logger.debug(f"{message}: {template_line!r}")
    if diagnostics is not None:
        diagnostics.add(template_syntax_warning(message, template_line, placeholder))
