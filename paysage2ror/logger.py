"""
Structured logging for paysage2ror.

Provides centralized logging to console and file, plus counters that
describe a reconciliation run (pages fetched, lookups made, matches).
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for a reconciliation run.
    """

    def __init__(
        self,
        name: str = "paysage2ror",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = self._empty_metrics()
        self._metrics_lock = threading.Lock()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"paysage2ror_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # everything goes to file
            file_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "api_calls": 0,
            "pages_fetched": 0,
            "records_seen": 0,
            "records_skipped": 0,
            "lookups": 0,
            "matched": 0,
            "unmatched": 0,
            "errors_by_type": {},
        }

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Metric tracking

    def record_api_call(self):
        with self._metrics_lock:
            self.metrics["api_calls"] += 1

    def record_page(self, items: int, skipped: int):
        """Record one fetched Paysage page."""
        with self._metrics_lock:
            self.metrics["pages_fetched"] += 1
            self.metrics["records_seen"] += items
            self.metrics["records_skipped"] += skipped

    def record_lookup(self):
        with self._metrics_lock:
            self.metrics["lookups"] += 1

    def record_resolution(self, matched: bool):
        key = "matched" if matched else "unmatched"
        with self._metrics_lock:
            self.metrics[key] += 1

    def record_failure(self, error_type: str):
        with self._metrics_lock:
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics with the match rate."""
        with self._metrics_lock:
            metrics_copy = dict(self.metrics)
            metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        resolved = metrics_copy["matched"] + metrics_copy["unmatched"]
        metrics_copy["match_rate"] = round(metrics_copy["matched"] / resolved, 3) if resolved else 0.0
        return metrics_copy

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        self.info("=== Reconciliation Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(
            f"Paysage: {metrics['pages_fetched']} pages, {metrics['records_seen']} records, "
            f"{metrics['records_skipped']} already with RoR"
        )
        self.info(f"RoR lookups: {metrics['lookups']}")
        self.info(
            f"Matched: {metrics['matched']}, unmatched: {metrics['unmatched']} "
            f"({metrics['match_rate'] * 100:.1f}% match rate)"
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "paysage2ror",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Console log level
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
