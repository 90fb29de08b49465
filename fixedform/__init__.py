"""Template-guided text to tree extraction.

Turns loosely structured, line-oriented text (receipts, invoices, reports)
into a nested tree of objects, arrays and typed scalars, guided by a
template that mirrors the expected input layout with ``{...}`` placeholders.

Architecture:
    core/             - Template compiler, expression engine, coercion,
                        tree writer, logging, errors
    pydantic_models/  - Compiled template and expression models
    converter.py      - Extraction engine (line pass + expression pass)
    cli.py            - Command-line entry point

Usage:
    from fixedform import extract

    tree = extract(
        "Total Amount {TotalAmount:number}",
        "Total Amount 246",
    )
    # {"TotalAmount": Decimal("246")}

CLI:
    fixedform receipt.tpl receipt.txt --indent 2
"""

from fixedform.converter import TextToTreeConverter, convert, extract
from fixedform.core import (
    ConversionDiagnostics,
    ConversionFailure,
    coerce,
    compile_template,
    evaluate_pipeline,
    set_value,
    value_at,
)
from fixedform.pydantic_models import (
    Placeholder,
    LineTemplate,
)

__all__ = [
    # Main entry points
    "TextToTreeConverter",
    "convert",
    "extract",
    "compile_template",
    # Building blocks
    "coerce",
    "evaluate_pipeline",
    "value_at",
    "set_value",
    # Errors
    "ConversionDiagnostics",
    "ConversionFailure",
    # Models
    "Placeholder",
    "LineTemplate",
]
