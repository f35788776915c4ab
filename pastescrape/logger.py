"""
Structured logging system for pastescrape.

Provides centralized logging with console and monthly file output,
plus counters for monitoring listing ingestion and content backfill.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone
import json


def _current_month() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m")


class MonthlyFileHandler(logging.FileHandler):
    """FileHandler writing to <prefix>_<YYYYMM>.log, moving to a new file when the UTC month changes."""

    def __init__(self, log_dir: Path, prefix: str = "pastescrape"):
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.month = _current_month()
        super().__init__(self._path_for(self.month), encoding="utf-8")

    def _path_for(self, month: str) -> Path:
        return self.log_dir / f"{self.prefix}_{month}.log"

    def emit(self, record):
        month = _current_month()
        if month != self.month:
            # handle() already holds the handler lock here
            if self.stream is not None:
                self.stream.close()
                self.stream = None
            self.month = month
            self.baseFilename = os.path.abspath(self._path_for(month))
        super().emit(record)


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring harvest cycles.
    """

    def __init__(
        self,
        name: str = "pastescrape",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers
        self.file_handler: Optional[MonthlyFileHandler] = None

        self.metrics = self._empty_metrics()

        # Console handler
        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        # File handler, one file per month
        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = MonthlyFileHandler(log_dir)
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)
            self.file_handler = file_handler

    @property
    def log_file(self) -> Optional[Path]:
        """File currently written to, or None when file output is off."""
        if self.file_handler is None:
            return None
        return Path(self.file_handler.baseFilename)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "api_calls": 0,
            "listings_fetched": 0,
            "listings_failed": 0,
            "entries_seen": 0,
            "records_inserted": 0,
            "records_duplicate": 0,
            "records_failed": 0,
            "contents_stored": 0,
            "content_write_failures": 0,
            "batches_aborted": 0,
            "errors_by_type": {},
        }

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self):
        """Increment API call counter."""
        self.metrics["api_calls"] += 1

    def record(self, counter: str, amount: int = 1):
        """Increment a named counter."""
        self.metrics[counter] += amount

    def record_error(self, error_type: str):
        """Count an error by type."""
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        return metrics_copy

    def reset_metrics(self):
        """Zero all counters."""
        self.metrics = self._empty_metrics()

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Harvest Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(
            f"Listings: {metrics['listings_fetched']} fetched, {metrics['listings_failed']} failed, "
            f"{metrics['entries_seen']} entries"
        )
        self.info(
            f"Records: {metrics['records_inserted']} new, {metrics['records_duplicate']} duplicate, "
            f"{metrics['records_failed']} failed"
        )
        self.info(
            f"Contents: {metrics['contents_stored']} stored, {metrics['content_write_failures']} write failures, "
            f"{metrics['batches_aborted']} batches aborted"
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "pastescrape",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def configure_logger(level: str = "INFO", log_dir: Optional[Path] = None, **kwargs) -> StructuredLogger:
    """Replace the global logger with one built from runtime configuration."""
    reset_logger()
    return get_logger(level=level, log_dir=log_dir, **kwargs)


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    if _global_logger is not None:
        for handler in list(_global_logger.logger.handlers):
            handler.close()
            _global_logger.logger.removeHandler(handler)
    _global_logger = None
