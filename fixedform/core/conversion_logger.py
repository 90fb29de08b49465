"""Structured logging for template conversions.

Provides consistent logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR)
- Phase tracking (compile, lines, expressions)
- Structured data logging
- Optional file output for later analysis

Console output goes to stderr so stdout stays free for the JSON result.
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from fixedform.core.config import LoggingConfig


class ConversionLogger:
    """Structured logger for conversion runs."""

    def __init__(
        self,
        name: str = LoggingConfig.LOGGER_NAME,
        verbose: bool = False,
        log_dir: str | Path | None = None,
    ):
        """Initialize the conversion logger.

        Args:
            name: Logger name.
            verbose: If True, show DEBUG level logs on the console.
            log_dir: Directory for log files. If None, no file logging.
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._phase: str = ""
        self._phase_start: float = 0
        self._run_start: float = 0
        self._log_file: Path | None = None
        self._file_handler: logging.FileHandler | None = None
        self._log_dir = Path(log_dir) if log_dir else None

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter())
            console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
            self.logger.addHandler(console_handler)

        self.logger.setLevel(logging.DEBUG)

    def set_verbose(self, verbose: bool):
        """Update verbose setting."""
        self.verbose = verbose
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    @property
    def log_file(self) -> Path | None:
        """Log file of the current (or last) run, if file logging is on."""
        return self._log_file

    def _ts(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _elapsed(self) -> str:
        if self._phase_start:
            return f"{(time.time() - self._phase_start) * 1000:.1f}ms"
        return ""

    def start_conversion(self, label: str = "conversion"):
        """Mark the start of a run and set up file logging."""
        self._run_start = time.time()

        if self._log_dir:
            self._close_file_handler()
            self._log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            self._log_file = self._log_dir / f"{label}_{timestamp}.log"

            # File captures everything including DEBUG
            self._file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            self._file_handler.setFormatter(FileFormatter())
            self._file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(self._file_handler)

        self.logger.info(f"[{self._ts()}] Starting {label}")

    def end_conversion(self, success: bool = True, stats: dict | None = None):
        """Mark the end of a run."""
        elapsed = ""
        if self._run_start:
            elapsed = f"{(time.time() - self._run_start) * 1000:.1f}ms"
        status = "COMPLETE" if success else "FAILED"
        if stats:
            self.summary(stats)
        self.logger.info(f"Conversion {status} [{elapsed}]")
        if self._log_file:
            self.logger.info(f"Log: {self._log_file}")
        self._close_file_handler()

    def start_phase(self, phase: str, total: int = 0):
        """Start a new conversion phase."""
        self._phase = phase
        self._phase_start = time.time()
        header = phase.upper()
        if total > 0:
            header += f" ({total} items)"
        self.logger.info(header)

    def phase_result(self, phase: str, result: str, **metrics):
        """Log phase completion with key metrics.

        Args:
            phase: Phase name (e.g., "lines")
            result: Brief result description
            **metrics: Key-value metrics to display
        """
        elapsed = self._elapsed()
        parts = [result]
        if metrics:
            parts.append(", ".join(f"{k}={v}" for k, v in metrics.items()))
        if elapsed:
            parts.append(f"[{elapsed}]")
        self.logger.info(f"  Done {phase}: {' | '.join(parts)}")
        self._phase = ""

    def debug(self, message: str, **data):
        """Log debug message (only shown on the console in verbose mode)."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.debug(f"[{self._ts()}] {message}")

    def info(self, message: str, **data):
        """Log info message."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.info(f"  {message}")

    def warning(self, message: str, **data):
        """Log warning message."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.warning(f"[{self._ts()}] WARN: {message}")

    def error(self, message: str, exc: Exception | None = None, **data):
        """Log error message."""
        if data:
            message = f"{message} | {_format_data(data)}"
        if exc:
            message = f"{message} | {type(exc).__name__}: {exc}"
        self.logger.error(f"[{self._ts()}] ERROR: {message}")

    def summary(self, stats: dict):
        """Log a summary block for end-of-run stats."""
        lines = ["SUMMARY"]
        for key, value in stats.items():
            if isinstance(value, dict):
                lines.append(f"  {key}:")
                for k, v in value.items():
                    lines.append(f"    {k}: {v}")
            else:
                lines.append(f"  {key}: {value}")
        self.logger.info("\n".join(lines))

    def _close_file_handler(self):
        if self._file_handler:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None


class ConsoleFormatter(logging.Formatter):
    """Console formatter - concise."""

    def format(self, record: logging.LogRecord) -> str:
        # Wrapper methods already add the timestamp; module loggers get the name
        if record.name == LoggingConfig.LOGGER_NAME:
            return record.getMessage()
        return f"{record.name}: {record.getMessage()}"


class FileFormatter(logging.Formatter):
    """File formatter - includes full details for analysis."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname[:4]
        return f"{ts} [{level}] {record.name}: {record.getMessage()}"


def _format_data(data: dict[str, Any]) -> str:
    """Format structured data for logging."""
    parts = []
    for k, v in data.items():
        if isinstance(v, str) and len(v) > 50:
            v = v[:47] + "..."
        elif isinstance(v, list) and len(v) > 5:
            v = f"[{len(v)} items]"
        parts.append(f"{k}={v}")
    return ", ".join(parts)


# Global logger instance
_logger: ConversionLogger | None = None


def get_logger(verbose: bool = False, log_dir: str | Path | None = None) -> ConversionLogger:
    """Get or create the global conversion logger.

    Args:
        verbose: If True, show DEBUG level logs on the console.
        log_dir: Directory for log files. If provided and the logger already
                 exists without one, it is used for future runs.
    """
    global _logger
    if _logger is None:
        _logger = ConversionLogger(verbose=verbose, log_dir=log_dir)
    else:
        if verbose and not _logger.verbose:
            _logger.set_verbose(True)
        if log_dir and not _logger._log_dir:
            _logger._log_dir = Path(log_dir)
    return _logger


def reset_logger():
    """Reset the global logger (for testing)."""
    global _logger
    if _logger:
        _logger._close_file_handler()
    # Directly constructed ConversionLoggers share the same named logger
    named = logging.getLogger(LoggingConfig.LOGGER_NAME)
    for handler in named.handlers[:]:
        handler.close()
        named.removeHandler(handler)
    _logger = None
