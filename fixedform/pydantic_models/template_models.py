"""Compiled template models.

A template compiles into an ordered list of LineTemplate objects, one per
non-blank template line, each holding the Placeholders found on that line.
Both are created once by the compiler and never modified afterwards.
"""

import re

from pydantic import BaseModel, ConfigDict, Field


class Placeholder(BaseModel):
    """One ``{...}`` span of a template line.

    Example:
        ``{Address:wordwithspace | prefix('ADDRESS:-')}`` compiles to
        {
            "raw_inside": "Address:wordwithspace | prefix('ADDRESS:-')",
            "target_path": "Address",
            "data_type": "wordwithspace",
            "format": null,
            "expression": "Address | prefix('ADDRESS:-')"
        }
    """

    model_config = ConfigDict(frozen=True)

    raw_inside: str = Field(description="Trimmed text between the braces")
    target_path: str = Field(description="Dotted/bracketed destination path in the output tree")
    data_type: str | None = Field(
        default=None,
        description="Declared type keyword after the qualifier colon (number, integer, datetime...)",
    )
    format: str | None = Field(
        default=None,
        description="Format string after the second qualifier colon (dd-MM-yyyy H:mm)",
    )
    expression: str = Field(
        description="Expression with any pipe steps reattached; the type qualifier is removed"
    )

    @property
    def has_pipeline(self) -> bool:
        """True if the expression contains pipe steps."""
        return "|" in self.expression


class LineTemplate(BaseModel):
    """One compiled template line.

    A line is an array row when every placeholder targets the same array
    (``{Items[].Name} {Items[].Total}``); array rows bind whitespace tokens
    positionally. Every other line with placeholders carries a capture
    pattern built from its literal text.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    raw_line: str = Field(description="Trimmed template line as written")
    placeholders: tuple[Placeholder, ...] = Field(default=())
    is_array_row: bool = Field(default=False)
    array_name: str = Field(default="", description="Shared array base name for array rows")
    capture_pattern: re.Pattern | None = Field(
        default=None,
        description="Anchored, case-insensitive pattern with one group per placeholder",
    )
    literal: str = Field(
        default="",
        description="Line text with placeholders removed, trimmed (header / stop text)",
    )

    @property
    def is_pure_literal(self) -> bool:
        """True for lines without placeholders."""
        return not self.placeholders
