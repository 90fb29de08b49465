"""Core utilities for template compilation and conversion."""

from fixedform.core.config import (
    Markers,
    RegexPatterns,
    TypeNames,
    NumberLimits,
    OutputFormats,
    ExpressionDefaults,
    LoggingConfig,
)
from fixedform.core.value_helpers import (
    is_blank,
    to_text,
    to_decimal,
    parse_decimal,
    json_default,
)
from fixedform.core.syntax import (
    is_simple_path,
    is_only_placeholder,
    path_after_array,
    split_lines,
    split_tokens,
    starts_with_ignore_case,
)
from fixedform.core.coercion import coerce, try_coerce, parse_datetime
from fixedform.core.tree_writer import set_value
from fixedform.core.expression_parser import parse_pipeline, parse_term
from fixedform.core.expression_engine import (
    evaluate_pipeline,
    evaluate_term,
    value_at,
)
from fixedform.core.conversion_logger import ConversionLogger, get_logger, reset_logger
from fixedform.core.errors import (
    ErrorSeverity,
    ErrorCategory,
    ExtractionError,
    ConversionDiagnostics,
    ConversionFailure,
    template_syntax_warning,
    unmatched_line_warning,
    missing_input_warning,
    coercion_warning,
    structural_repair_warning,
    empty_expression_warning,
    unrecoverable_error,
)
from fixedform.core.template_compiler import compile_template

__all__ = [
    # Config
    "Markers",
    "RegexPatterns",
    "TypeNames",
    "NumberLimits",
    "OutputFormats",
    "ExpressionDefaults",
    "LoggingConfig",
    # Value helpers
    "is_blank",
    "to_text",
    "to_decimal",
    "parse_decimal",
    "json_default",
    # Syntax
    "is_simple_path",
    "is_only_placeholder",
    "path_after_array",
    "split_lines",
    "split_tokens",
    "starts_with_ignore_case",
    # Coercion
    "coerce",
    "try_coerce",
    "parse_datetime",
    # Tree writer
    "set_value",
    # Expressions
    "parse_pipeline",
    "parse_term",
    "evaluate_pipeline",
    "evaluate_term",
    "value_at",
    # Logging
    "ConversionLogger",
    "get_logger",
    "reset_logger",
    # Errors
    "ErrorSeverity",
    "ErrorCategory",
    "ExtractionError",
    "ConversionDiagnostics",
    "ConversionFailure",
    "template_syntax_warning",
    "unmatched_line_warning",
    "missing_input_warning",
    "coercion_warning",
    "structural_repair_warning",
    "empty_expression_warning",
    "unrecoverable_error",
    # Compiler
    "compile_template",
]
