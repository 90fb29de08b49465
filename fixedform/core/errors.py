"""Structured error types for template compilation and conversion.

Provides typed records for:
- Template syntax degradations (malformed placeholders, empty expressions)
- Unmatched input lines and missing input
- Coercion fallbacks (text kept raw)
- Structural repairs in the output tree
- Expressions that produced no value
- Unrecoverable failures

Records are inspection data. Only ConversionFailure is ever raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for conversion errors."""
    WARNING = "warning"   # Degraded or repaired, conversion continued
    ERROR = "error"       # A value was lost, conversion continued
    CRITICAL = "critical" # Conversion halted


class ErrorCategory(Enum):
    """Categories of conversion errors."""
    TEMPLATE_SYNTAX = "template_syntax"       # Placeholder text the compiler had to guess at
    UNMATCHED_LINE = "unmatched_line"         # Input line did not fit its template line
    MISSING_INPUT = "missing_input"           # Input ran out before the template did
    COERCION = "coercion"                     # Declared type did not parse, raw text kept
    STRUCTURAL_REPAIR = "structural_repair"   # Existing tree value replaced to continue a path
    EXPRESSION = "expression"                 # Pipeline evaluated to nothing
    UNKNOWN = "unknown"                       # Unclassified errors


@dataclass
class ExtractionError:
    """Structured conversion error with context."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    phase: str                          # compile / lines / expressions / write
    line_number: int | None = None      # 1-based input line
    template_line: str | None = None    # Template line being applied
    original_error: Exception | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.severity.value.upper()}] {self.category.value}: {self.message}"]
        if self.line_number is not None:
            parts.append(f"line={self.line_number}")
        if self.phase:
            parts.append(f"phase={self.phase}")
        return " | ".join(parts)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "phase": self.phase,
            "line_number": self.line_number,
            "template_line": self.template_line,
            "error": repr(self.original_error) if self.original_error else None,
            "context": self.context,
        }


@dataclass
class ConversionDiagnostics:
    """Aggregate errors across one conversion run."""

    errors: list[ExtractionError] = field(default_factory=list)
    warnings: list[ExtractionError] = field(default_factory=list)

    def add(self, error: ExtractionError):
        """Add an error or warning."""
        if error.severity == ErrorSeverity.WARNING:
            self.warnings.append(error)
        else:
            self.errors.append(error)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def by_category(self, category: ErrorCategory) -> list[ExtractionError]:
        """Every record (warning or error) of one category, in order added."""
        return [e for e in self.warnings + self.errors if e.category == category]

    def summary(self) -> dict:
        """Get summary statistics."""
        by_category = {}
        for record in self.warnings + self.errors:
            cat = record.category.value
            by_category[cat] = by_category.get(cat, 0) + 1

        return {
            "total_errors": self.error_count,
            "total_warnings": self.warning_count,
            "by_category": by_category,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "summary": self.summary(),
        }


class ConversionFailure(RuntimeError):
    """The one exception raised across the public API.

    Wraps an unexpected internal failure; the cause is chained and the
    structured record is kept on ``.error``.
    """

    def __init__(self, error: ExtractionError):
        super().__init__(str(error))
        self.error = error


# Factory functions for common error types

def template_syntax_warning(
    message: str,
    template_line: str | None = None,
    placeholder: str | None = None,
) -> ExtractionError:
    """Create a template syntax degradation."""
    return ExtractionError(
        category=ErrorCategory.TEMPLATE_SYNTAX,
        severity=ErrorSeverity.WARNING,
        message=message,
        phase="compile",
        template_line=template_line,
        context={"placeholder": placeholder} if placeholder else {},
    )


def unmatched_line_warning(
    line_number: int,
    line: str,
    template_line: str,
) -> ExtractionError:
    """Create an unmatched-line degradation (capture pattern did not match)."""
    return ExtractionError(
        category=ErrorCategory.UNMATCHED_LINE,
        severity=ErrorSeverity.WARNING,
        message="Input line did not match its template line, falling back to tokens",
        phase="lines",
        line_number=line_number,
        template_line=template_line,
        context={"line": line[:200]},
    )


def missing_input_warning(template_lines_left: int) -> ExtractionError:
    """Create a missing-input degradation (template lines left unapplied)."""
    return ExtractionError(
        category=ErrorCategory.MISSING_INPUT,
        severity=ErrorSeverity.WARNING,
        message=f"Input ended with {template_lines_left} template line(s) unapplied",
        phase="lines",
        context={"template_lines_left": template_lines_left},
    )


def coercion_warning(
    target_path: str,
    raw: str,
    data_type: str,
    fmt: str | None = None,
    line_number: int | None = None,
) -> ExtractionError:
    """Create a coercion degradation (raw text stored instead of a typed value)."""
    return ExtractionError(
        category=ErrorCategory.COERCION,
        severity=ErrorSeverity.WARNING,
        message=f"Could not read {raw[:50]!r} as {data_type}, keeping text",
        phase="lines" if line_number is not None else "expressions",
        line_number=line_number,
        context={"target": target_path, "type": data_type, "format": fmt},
    )


def structural_repair_warning(path: str, detail: str) -> ExtractionError:
    """Create a structural repair record (a tree value was replaced)."""
    return ExtractionError(
        category=ErrorCategory.STRUCTURAL_REPAIR,
        severity=ErrorSeverity.WARNING,
        message=detail,
        phase="write",
        context={"path": path},
    )


def empty_expression_warning(target_path: str, expression: str) -> ExtractionError:
    """Create a record for an expression that produced no value."""
    return ExtractionError(
        category=ErrorCategory.EXPRESSION,
        severity=ErrorSeverity.WARNING,
        message=f"Expression {expression[:50]!r} produced no value, nothing written",
        phase="expressions",
        context={"target": target_path},
    )


def unrecoverable_error(
    message: str,
    phase: str,
    original: Exception | None = None,
) -> ExtractionError:
    """Create an unrecoverable failure record."""
    return ExtractionError(
        category=ErrorCategory.UNKNOWN,
        severity=ErrorSeverity.CRITICAL,
        message=message,
        phase=phase,
        original_error=original,
    )
