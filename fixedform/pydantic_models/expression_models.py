"""Expression AST for the pipeline language.

    Pipeline := Term ('|' PipeStep)*
    Term     := FunctionCall | QuotedLiteral | NumericLiteral | SimplePath

Terms form a tree: a FunctionCall owns its argument Terms. There are no
back references, so the tree is plain nested data.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class LiteralTerm(BaseModel):
    """A quoted string, a number, or unrecognized raw text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: Any = Field(description="str for quoted/raw text, Decimal for numbers")


class PathTerm(BaseModel):
    """A simple path resolved against the tree (``Items[].Total``)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    path: str


class FunctionCall(BaseModel):
    """``name(arg, ...)`` with parsed argument terms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["call"] = "call"
    name: str
    args: tuple["Term", ...] = ()


Term = Annotated[Union[LiteralTerm, PathTerm, FunctionCall], Field(discriminator="kind")]

FunctionCall.model_rebuild()


class PipeStep(BaseModel):
    """One ``| name(args)`` step. Arguments stay raw; each step decides how
    to read them (prefix() takes its argument literally)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Lower-cased step name")
    raw_args: tuple[str, ...] = ()


class Pipeline(BaseModel):
    """A seed term followed by pipe steps applied left to right."""

    model_config = ConfigDict(frozen=True)

    seed: Term
    seed_text: str = Field(description="Trimmed source text of the seed term")
    seed_is_path: bool = Field(
        default=False,
        description="Seed text is a bare simple path, so a captured value replaces it",
    )
    steps: tuple[PipeStep, ...] = ()
