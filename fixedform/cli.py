"""CLI entrypoint for template-guided extraction."""

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from fixedform.converter import TextToTreeConverter
from fixedform.core.config import LoggingConfig
from fixedform.core.errors import ConversionFailure
from fixedform.core.value_helpers import json_default

# Load environment variables
load_dotenv()


def _read_text(path: str) -> str:
    """Read a UTF-8 file, or stdin for ``-``."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def run(
    template_path: str,
    input_path: str,
    output_path: str | None = None,
    indent: int | None = 2,
    verbose: bool = False,
    log_dir: str | None = None,
) -> dict | None:
    """Compile the template, convert the input and write JSON.

    Args:
        template_path: Template file.
        input_path: Input text file, or ``-`` for stdin.
        output_path: JSON output file. None writes to stdout.
        indent: JSON indentation; None for compact output.
        verbose: Verbose output with DEBUG level logging.
        log_dir: Directory for per-run log files.

    Returns:
        The extracted tree, or None on failure.
    """
    for path in (template_path, input_path):
        if path != "-" and not Path(path).is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return None

    try:
        template_text = _read_text(template_path)
        input_text = _read_text(input_path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read input: {e}", file=sys.stderr)
        return None

    try:
        converter = TextToTreeConverter.from_template(
            template_text, verbose=verbose, log_dir=log_dir
        )
        tree = converter.convert(input_text)
    except ConversionFailure as e:
        print(f"[ERROR] Conversion failed: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return None

    rendered = json.dumps(tree, indent=indent, ensure_ascii=False, default=json_default)
    if output_path:
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(rendered + "\n", encoding="utf-8")
        if verbose:
            print(f"[OUTPUT] {out}", file=sys.stderr)
    else:
        print(rendered)

    if verbose and converter.diagnostics.warning_count:
        print(f"[DIAGNOSTICS] {converter.diagnostics.summary()}", file=sys.stderr)
    return tree


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Extract a JSON tree from line-oriented text using a template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fixedform receipt.tpl receipt.txt
  fixedform receipt.tpl - < receipt.txt            # input from stdin
  fixedform receipt.tpl receipt.txt -o out.json -v
        """,
    )
    parser.add_argument("template", help="Path to template file")
    parser.add_argument("input", help="Path to input text file ('-' for stdin)")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output JSON file (default: stdout)",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        metavar="N",
        help="JSON indentation, 0 for compact output (default: 2)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with DEBUG level logging",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help=f"Directory for per-run log files (default: ${LoggingConfig.LOG_DIR_ENV_VAR})",
    )

    args = parser.parse_args(argv)

    result = run(
        template_path=args.template,
        input_path=args.input,
        output_path=args.output,
        indent=args.indent or None,
        verbose=args.verbose,
        log_dir=args.log_dir or os.environ.get(LoggingConfig.LOG_DIR_ENV_VAR) or None,
    )

    sys.exit(0 if result is not None else 1)


if __name__ == "__main__":
    main()
