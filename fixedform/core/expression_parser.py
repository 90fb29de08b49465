"""Parse pipeline expressions into Term trees.

    Pipeline := Term ('|' PipeStep)*
    Term     := FunctionCall | QuotedLiteral | NumericLiteral | SimplePath
    FunctionCall := Identifier '(' ArgList ')'

Argument lists and pipelines split only on separators at parenthesis depth
zero and outside quotes. Text that fits no production becomes a literal
holding the raw text, so parsing never fails.
"""

import re
from decimal import Decimal
from functools import lru_cache

from fixedform.core.config import ExpressionDefaults, Markers, RegexPatterns
from fixedform.core.syntax import (
    is_simple_path,
    match_function_call,
    split_args,
    split_top_level,
    unquote,
)
from fixedform.pydantic_models.expression_models import (
    FunctionCall,
    LiteralTerm,
    PathTerm,
    Pipeline,
    PipeStep,
    Term,
)

_NUMERIC_LITERAL_RX = re.compile(RegexPatterns.NUMERIC_LITERAL, re.ASCII)


@lru_cache(maxsize=ExpressionDefaults.PARSE_CACHE_SIZE)
def parse_pipeline(expression: str) -> Pipeline:
    """Parse ``seed | step(args) | step`` into a Pipeline.

    Empty steps (``a || b``) are dropped.
    """
    parts = split_top_level(expression, Markers.PIPE)
    seed_text = parts[0].strip()
    steps = tuple(parse_pipe_step(p) for p in parts[1:] if p.strip())
    return Pipeline(
        seed=parse_term(seed_text),
        seed_text=seed_text,
        seed_is_path=is_simple_path(seed_text),
        steps=steps,
    )


def parse_term(text: str) -> Term:
    """Parse one term. Order: call, quoted literal, number, path, raw literal."""
    text = text.strip()
    if not text:
        return LiteralTerm(value=None)

    call = match_function_call(text)
    if call:
        name, raw_args = call
        return FunctionCall(
            name=name.lower(),
            args=tuple(parse_term(a) for a in split_args(raw_args)),
        )

    quoted = unquote(text)
    if quoted is not None:
        return LiteralTerm(value=quoted)

    if _NUMERIC_LITERAL_RX.match(text):
        return LiteralTerm(value=Decimal(text))

    if is_simple_path(text):
        return PathTerm(path=text)

    return LiteralTerm(value=text)


def parse_pipe_step(text: str) -> PipeStep:
    """Parse ``name(args)`` or a bare ``name`` into a PipeStep."""
    text = text.strip()
    call = match_function_call(text)
    if call:
        name, raw_args = call
        return PipeStep(name=name.lower(), raw_args=tuple(split_args(raw_args)))
    return PipeStep(name=text.lower())
