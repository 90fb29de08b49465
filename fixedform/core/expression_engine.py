"""Evaluate pipeline expressions against a (partially built) output tree.

Usage:
    evaluate_pipeline("sum(Items[].Total)", tree)            # Decimal("246")
    evaluate_pipeline("Name | upper() | prefix('X-')", tree, seed="abc")   # "X-ABC"

Functions (case-insensitive) compute a value from the tree:
    coalesce(a, b, ...)   first non-blank argument
    concat(a, b, ...)     text concatenation
    sum(arrayOrPath)      sum of numeric array elements (or of scalar args)
    count(arrayOrPath)    element count
    valueof(path)         raw value at a path
    join(arrayOrPath, sep=", ")

Pipe steps (case-insensitive) transform one running value:
    upper lower trim replace(old,new) suffix|concat(text) prefix(text)
    default|coalesce(value) tonumber toint dateformat|format(fmt)

The engine never raises for an unrecognized name: an unknown function
yields None and an unknown pipe step passes its input through.
"""

import logging
from decimal import Decimal
from typing import Any, Callable

from fixedform.core import date_formats
from fixedform.core.coercion import parse_datetime
from fixedform.core.config import ExpressionDefaults, Markers
from fixedform.core.expression_parser import parse_pipeline, parse_term
from fixedform.core.syntax import unquote
from fixedform.core.value_helpers import is_blank, to_decimal, to_text, truncate_to_int
from fixedform.pydantic_models.expression_models import (
    FunctionCall,
    LiteralTerm,
    PathTerm,
    PipeStep,
    Term,
)

logger = logging.getLogger(__name__)

Tree = dict[str, Any]


def evaluate_pipeline(expression: str, tree: Tree, seed: Any = None) -> Any:
    """Evaluate ``term | step | step`` left to right.

    Args:
        expression: Pipeline text.
        tree: Tree the terms resolve against.
        seed: Captured value. When given and the leading term is a bare
            simple path, the seed replaces that term; any other leading
            term is evaluated from scratch.

    Returns:
        The final value (None when a path is missing).
    """
    pipeline = parse_pipeline(expression)
    if seed is not None and pipeline.seed_is_path:
        value = seed
    else:
        value = evaluate_term(pipeline.seed, tree)
    for step in pipeline.steps:
        value = apply_pipe(step, value, tree)
    return value


def evaluate_term(term: Term, tree: Tree) -> Any:
    """Evaluate a single term."""
    if isinstance(term, LiteralTerm):
        return term.value
    if isinstance(term, PathTerm):
        return value_at(tree, term.path)
    if isinstance(term, FunctionCall):
        fn = _FUNCTIONS.get(term.name)
        if fn is None:
            logger.debug(f"Unknown function {term.name!r}, yielding null")
            return None
        return fn(term.args, tree)
    return None


def value_at(tree: Tree, path: str) -> Any:
    """Resolve a path against the tree.

    Dotted segments navigate objects. An array marker selects that array;
    when the path continues past the marker, the remainder is projected
    over every element (elements where it resolves to nothing are skipped):

        value_at(tree, "Items[]")         -> the Items list
        value_at(tree, "Items[].Total")   -> [136, 110]

    Missing keys yield None, never an error.
    """
    if not path or not path.strip():
        return None
    idx = path.find(Markers.ARRAY)
    if idx < 0:
        return _select(tree, path)

    array = _select(tree, path[:idx])
    if not isinstance(array, list):
        return None
    rest = path[idx + len(Markers.ARRAY):].lstrip(Markers.PATH_SEPARATOR)
    if not rest:
        return array
    projected = []
    for element in array:
        sub = _select(element, rest)
        if sub is not None:
            projected.append(sub)
    return projected


def apply_pipe(step: PipeStep, value: Any, tree: Tree) -> Any:
    """Apply one pipe step to the running value."""
    handler = _PIPES.get(step.name)
    if handler is None:
        logger.debug(f"Unknown pipe step {step.name!r}, passing value through")
        return value
    return handler(value, step.raw_args, tree)


def sum_array(items: list[Any]) -> Decimal:
    """Sum the numeric scalar elements of an array, skipping everything else."""
    total = Decimal(0)
    for item in items:
        number = to_decimal(item)
        if number is not None:
            total += number
    return total


# Path helpers

def _select(node: Any, path: str) -> Any:
    if not path:
        return None
    current = node
    for part in path.split(Markers.PATH_SEPARATOR):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current


def _collection(term: Term, tree: Tree) -> list[Any] | None:
    """Array named by a term: an array-valued term, or a quoted path string."""
    value = evaluate_term(term, tree)
    if isinstance(value, list):
        return value
    if isinstance(term, LiteralTerm) and isinstance(value, str):
        resolved = value_at(tree, value)
        if isinstance(resolved, list):
            return resolved
    return None


def _eval_arg(raw: str, tree: Tree) -> Any:
    return evaluate_term(parse_term(raw), tree)


# Functions

def _fn_coalesce(args: tuple[Term, ...], tree: Tree) -> Any:
    for arg in args:
        value = evaluate_term(arg, tree)
        if not is_blank(value):
            return value
    return None


def _fn_concat(args: tuple[Term, ...], tree: Tree) -> str:
    return "".join(to_text(evaluate_term(a, tree)) for a in args)


def _fn_sum(args: tuple[Term, ...], tree: Tree) -> Decimal:
    if not args:
        return Decimal(0)
    items = _collection(args[0], tree)
    if items is not None:
        return sum_array(items)
    # No array: add up the scalar arguments; non-numeric ones count as 0.
    total = Decimal(0)
    for arg in args:
        number = to_decimal(evaluate_term(arg, tree))
        if number is not None:
            total += number
    return total


def _fn_count(args: tuple[Term, ...], tree: Tree) -> int:
    if not args:
        return 0
    items = _collection(args[0], tree)
    return len(items) if items is not None else 0


def _fn_valueof(args: tuple[Term, ...], tree: Tree) -> Any:
    if not args:
        return None
    term = args[0]
    if isinstance(term, PathTerm):
        return value_at(tree, term.path)
    if isinstance(term, LiteralTerm) and isinstance(term.value, str):
        return value_at(tree, term.value)
    return evaluate_term(term, tree)


def _fn_join(args: tuple[Term, ...], tree: Tree) -> str:
    if not args:
        return ""
    separator = ExpressionDefaults.JOIN_SEPARATOR
    if len(args) >= 2:
        given = evaluate_term(args[1], tree)
        if given is not None:
            separator = to_text(given)
    items = _collection(args[0], tree)
    if items is None:
        return ""
    return separator.join(to_text(item) for item in items)


_FUNCTIONS: dict[str, Callable[[tuple[Term, ...], Tree], Any]] = {
    "coalesce": _fn_coalesce,
    "concat": _fn_concat,
    "sum": _fn_sum,
    "count": _fn_count,
    "valueof": _fn_valueof,
    "join": _fn_join,
}


# Pipe steps

def _pipe_upper(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    return None if value is None else to_text(value).upper()


def _pipe_lower(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    return None if value is None else to_text(value).lower()


def _pipe_trim(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    return None if value is None else to_text(value).strip()


def _pipe_replace(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    if len(args) < 2 or value is None:
        return value
    old = to_text(_eval_arg(args[0], tree))
    new = to_text(_eval_arg(args[1], tree))
    if not old:
        return value
    return to_text(value).replace(old, new)


def _pipe_suffix(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    if not args:
        return value
    return to_text(value) + to_text(_eval_arg(args[0], tree))


def _pipe_prefix(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    if not args:
        return value
    # The argument is literal text, never a path.
    text = args[0].strip()
    quoted = unquote(text)
    return (quoted if quoted is not None else text) + to_text(value)


def _pipe_default(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    if not is_blank(value) or not args:
        return value
    return _eval_arg(args[0], tree)


def _pipe_tonumber(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    number = to_decimal(value)
    return value if number is None else number


def _pipe_toint(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    number = to_decimal(value)
    result = truncate_to_int(number) if number is not None else None
    return value if result is None else result


def _pipe_dateformat(value: Any, args: tuple[str, ...], tree: Tree) -> Any:
    if not args:
        return value
    dt = parse_datetime(to_text(value))
    if dt is None:
        return value
    fmt = _eval_arg(args[0], tree)
    return date_formats.render(dt, to_text(fmt) or None)


_PIPES: dict[str, Callable[[Any, tuple[str, ...], Tree], Any]] = {
    "upper": _pipe_upper,
    "lower": _pipe_lower,
    "trim": _pipe_trim,
    "replace": _pipe_replace,
    "suffix": _pipe_suffix,
    "concat": _pipe_suffix,
    "prefix": _pipe_prefix,
    "default": _pipe_default,
    "coalesce": _pipe_default,
    "tonumber": _pipe_tonumber,
    "toint": _pipe_toint,
    "dateformat": _pipe_dateformat,
    "format": _pipe_dateformat,
}
