"""Pydantic models for compiled templates and parsed expressions.

Modules:
- template_models: Placeholder, LineTemplate (compiler output)
- expression_models: LiteralTerm, PathTerm, FunctionCall, PipeStep, Pipeline
"""

from fixedform.pydantic_models.template_models import (
    Placeholder,
    LineTemplate,
)
from fixedform.pydantic_models.expression_models import (
    LiteralTerm,
    PathTerm,
    FunctionCall,
    Term,
    PipeStep,
    Pipeline,
)

__all__ = [
    # Template models
    "Placeholder",
    "LineTemplate",
    # Expression models
    "LiteralTerm",
    "PathTerm",
    "FunctionCall",
    "Term",
    "PipeStep",
    "Pipeline",
]
