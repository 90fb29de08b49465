"""Extraction engine: apply compiled templates to input text.

The converter walks template lines and input lines together with one
forward-only cursor, writing every bound value into a fresh tree:

    Line pass         each LineTemplate consumes zero or more input lines
                      (array rows, pure literals, captured lines)
    Expression pass   every function/pipeline placeholder not already
                      resolved against a captured value is evaluated
                      against the finished tree

Nothing in input text raises. Lines that do not fit degrade to token
binding, unparsable values stay as text, and input that runs out early
leaves a partial tree. Every such degradation is recorded on
``converter.diagnostics``.

Usage:
    from fixedform import extract

    tree = extract(template_text, input_text)
"""

from pathlib import Path
from typing import Any

from fixedform.core import (
    ConversionDiagnostics,
    ConversionFailure,
    coercion_warning,
    compile_template,
    empty_expression_warning,
    evaluate_pipeline,
    get_logger,
    is_only_placeholder,
    is_simple_path,
    missing_input_warning,
    path_after_array,
    set_value,
    split_lines,
    split_tokens,
    starts_with_ignore_case,
    structural_repair_warning,
    to_text,
    try_coerce,
    unmatched_line_warning,
    unrecoverable_error,
)
from fixedform.pydantic_models import LineTemplate, Placeholder

Tree = dict[str, Any]


class TextToTreeConverter:
    """Converts input text into a tree using a compiled template."""

    def __init__(
        self,
        templates: list[LineTemplate],
        verbose: bool = False,
        log_dir: str | Path | None = None,
    ):
        """Initialize the converter.

        Args:
            templates: Compiled template lines (see compile_template).
            verbose: If True, show DEBUG level logs.
            log_dir: Directory for per-run log files.
        """
        self.templates = list(templates)
        self.logger = get_logger(verbose=verbose, log_dir=log_dir)
        self.diagnostics = ConversionDiagnostics()
        self._template_diagnostics = ConversionDiagnostics()

    @classmethod
    def from_template(
        cls,
        template_text: str,
        verbose: bool = False,
        log_dir: str | Path | None = None,
    ) -> "TextToTreeConverter":
        """Compile template text and build a converter for it.

        Template syntax warnings are carried into every run's diagnostics.
        """
        template_diagnostics = ConversionDiagnostics()
        converter = cls(
            compile_template(template_text, template_diagnostics),
            verbose=verbose,
            log_dir=log_dir,
        )
        converter._template_diagnostics = template_diagnostics
        return converter

    def convert(self, input_text: str) -> Tree:
        """Convert input text into a new tree.

        Raises:
            ConversionFailure: On an unexpected internal error. Input that
                does not fit the template never raises.
        """
        self.diagnostics = ConversionDiagnostics(
            errors=list(self._template_diagnostics.errors),
            warnings=list(self._template_diagnostics.warnings),
        )
        try:
            self.logger.start_conversion()
            tree = self._run(input_text or "")
        except Exception as e:
            record = unrecoverable_error(f"Conversion failed: {e}", phase="convert", original=e)
            self.diagnostics.add(record)
            self.logger.error("Conversion failed", exc=e)
            self.logger.end_conversion(success=False)
            raise ConversionFailure(record) from e

        self.logger.end_conversion(success=True, stats=self.diagnostics.summary())
        return tree

    def _run(self, input_text: str) -> Tree:
        tree: Tree = {}
        lines = split_lines(input_text)

        self.logger.start_phase("lines", total=len(lines))
        seeded, consumed = self._line_pass(tree, lines)
        self.logger.phase_result(
            "lines", f"{consumed}/{len(lines)} lines consumed", keys=len(tree)
        )

        self.logger.start_phase("expressions")
        written = self._expression_pass(tree, seeded)
        self.logger.phase_result("expressions", f"{written} values written")
        return tree

    # Line pass

    def _line_pass(self, tree: Tree, lines: list[str]) -> tuple[set[tuple[int, int]], int]:
        """Apply template lines in order until input runs out.

        Returns:
            (placeholders whose pipeline already ran on a captured value,
             number of input lines consumed)
        """
        seeded: set[tuple[int, int]] = set()
        idx = 0
        t = 0
        while t < len(self.templates) and idx < len(lines):
            tpl = self.templates[t]
            if tpl.is_array_row:
                idx = self._apply_array_row(tree, t, lines, idx)
            elif tpl.is_pure_literal:
                if tpl.literal and starts_with_ignore_case(lines[idx], tpl.literal):
                    idx += 1
                else:
                    self.logger.debug("Literal line not found, left for later", literal=tpl.literal, line=idx + 1)
            else:
                self._apply_line(tree, t, lines[idx], idx + 1, seeded)
                idx += 1
            t += 1

        if t < len(self.templates):
            self._degraded(missing_input_warning(len(self.templates) - t))
        return seeded, idx

    def _apply_array_row(self, tree: Tree, t: int, lines: list[str], idx: int) -> int:
        """Append one object per input line until the stop literal or end of input."""
        tpl = self.templates[t]
        array = self._ensure_array(tree, tpl.array_name)

        if tpl.literal and idx < len(lines) and starts_with_ignore_case(lines[idx], tpl.literal):
            self.logger.debug("Array header consumed", array=tpl.array_name, line=idx + 1)
            idx += 1

        stop = self._stop_literal(t + 1)
        while idx < len(lines):
            if stop and starts_with_ignore_case(lines[idx], stop):
                break
            tokens = split_tokens(lines[idx])
            item: Tree = {}
            for p, ph in enumerate(tpl.placeholders):
                token = tokens[p] if p < len(tokens) else ""
                value = self._bind(ph, token, tree, idx + 1)
                set_value(item, path_after_array(ph.target_path), value, on_repair=self._repaired)
            array.append(item)
            idx += 1
        return idx

    def _apply_line(
        self,
        tree: Tree,
        t: int,
        line: str,
        line_number: int,
        seeded: set[tuple[int, int]],
    ) -> None:
        """Bind one input line: capture pattern, whole line, then tokens."""
        tpl = self.templates[t]
        match = tpl.capture_pattern.match(line) if tpl.capture_pattern else None
        if match:
            values = [group.strip() for group in match.groups()]
        elif len(tpl.placeholders) == 1 and is_only_placeholder(tpl.raw_line):
            values = [line]
        else:
            self._degraded(unmatched_line_warning(line_number, line, tpl.raw_line))
            tokens = split_tokens(line)
            values = [tokens[p] if p < len(tokens) else "" for p in range(len(tpl.placeholders))]

        for p, (ph, captured) in enumerate(zip(tpl.placeholders, values)):
            set_value(tree, ph.target_path, self._bind(ph, captured, tree, line_number), on_repair=self._repaired)
            if ph.has_pipeline:
                seeded.add((t, p))

    def _bind(self, ph: Placeholder, captured: str, tree: Tree, line_number: int) -> Any:
        """Value for a captured string: pipeline (seeded) then declared type."""
        value: Any = captured
        if ph.has_pipeline:
            value = evaluate_pipeline(ph.expression, tree, seed=captured)
        if ph.data_type:
            return self._coerce(ph, value, line_number)
        return "" if value is None else value

    # Expression pass

    def _expression_pass(self, tree: Tree, seeded: set[tuple[int, int]]) -> int:
        """Evaluate function/pipeline placeholders against the finished tree.

        Array-row placeholders and pipelines that already ran on a captured
        value are skipped. A null result writes nothing.
        """
        written = 0
        for t, tpl in enumerate(self.templates):
            if tpl.is_array_row:
                continue
            for p, ph in enumerate(tpl.placeholders):
                if (t, p) in seeded or not ph.expression or is_simple_path(ph.expression):
                    continue
                value = evaluate_pipeline(ph.expression, tree)
                if value is None:
                    self._degraded(empty_expression_warning(ph.target_path, ph.expression))
                    continue
                if ph.data_type:
                    value = self._coerce(ph, value, None)
                set_value(tree, ph.target_path, value, on_repair=self._repaired)
                written += 1
        return written

    # Helpers

    def _coerce(self, ph: Placeholder, value: Any, line_number: int | None) -> Any:
        raw = to_text(value)
        result, ok = try_coerce(raw, ph.data_type, ph.format)
        if not ok:
            self._degraded(coercion_warning(ph.target_path, raw, ph.data_type, ph.format, line_number))
        return result

    def _ensure_array(self, tree: Tree, name: str) -> list[Any]:
        existing = tree.get(name)
        if isinstance(existing, list):
            return existing
        if existing is not None:
            self._repaired(name, f"replaced {type(existing).__name__} at {name!r} with an array")
        array: list[Any] = []
        tree[name] = array
        return array

    def _stop_literal(self, start: int) -> str | None:
        """Literal text of the next non-array template line that has any."""
        for tpl in self.templates[start:]:
            if not tpl.is_array_row and tpl.literal:
                return tpl.literal
        return None

    def _repaired(self, path: str, description: str) -> None:
        self._degraded(structural_repair_warning(path, description))

    def _degraded(self, record) -> None:
        self.diagnostics.add(record)
        self.logger.debug(str(record))


def convert(input_text: str, templates: list[LineTemplate]) -> Tree:
    """Convert input text with compiled templates (one-shot helper)."""
    return TextToTreeConverter(templates).convert(input_text)


def extract(template_text: str, input_text: str) -> Tree:
    """Compile template text and convert input text in one call."""
    return TextToTreeConverter.from_template(template_text).convert(input_text)
