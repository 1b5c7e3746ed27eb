"""
Structured logging for the person enricher.

Provides centralized logging with console and file outputs, keyword
context rendered as JSON, and counters for monitoring lookup health.
"""

import copy
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
    Tracks metrics for the external lookup services and enrichment outcomes.
    """

    def __init__(
        self,
        name: str = "personenricher",
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
        self.logger.handlers.clear()
        self.logger.propagate = False

        # lookups run on worker threads
        self._metrics_lock = threading.Lock()
        self.metrics = {
            "lookups_attempted": 0,
            "lookups_successful": 0,
            "lookups_failed": 0,
            "enrichments_successful": 0,
            "enrichments_failed": 0,
            "errors_by_type": {},
            "attribute_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"personenricher_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

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
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_lookup_attempt(self, attribute: str):
        """Record a lookup attempt for one attribute service."""
        with self._metrics_lock:
            self.metrics["lookups_attempted"] += 1
            if attribute not in self.metrics["attribute_success_rate"]:
                self.metrics["attribute_success_rate"][attribute] = {
                    "attempts": 0,
                    "successes": 0
                }
            self.metrics["attribute_success_rate"][attribute]["attempts"] += 1

    def record_lookup_success(self, attribute: str):
        """Record successful lookup."""
        with self._metrics_lock:
            self.metrics["lookups_successful"] += 1
            if attribute in self.metrics["attribute_success_rate"]:
                self.metrics["attribute_success_rate"][attribute]["successes"] += 1

    def record_lookup_failure(self, attribute: str, error_type: str):
        """Record lookup failure."""
        with self._metrics_lock:
            self.metrics["lookups_failed"] += 1

            if error_type not in self.metrics["errors_by_type"]:
                self.metrics["errors_by_type"][error_type] = 0
            self.metrics["errors_by_type"][error_type] += 1

    def record_enrichment(self, success: bool):
        """Record the outcome of one three-way enrichment."""
        with self._metrics_lock:
            if success:
                self.metrics["enrichments_successful"] += 1
            else:
                self.metrics["enrichments_failed"] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        with self._metrics_lock:
            metrics_copy = copy.deepcopy(self.metrics)
        for attribute, stats in metrics_copy["attribute_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["lookups_attempted"]
        total_successes = metrics["lookups_successful"]
        overall_rate = 0
        if total_attempts > 0:
            overall_rate = round(total_successes / total_attempts * 100, 1)

        self.info("=== Enrichment Metrics ===")
        self.info(f"Lookups: {total_successes}/{total_attempts} ({overall_rate}% success)")
        self.info(
            f"Enrichments: {metrics['enrichments_successful']} ok, "
            f"{metrics['enrichments_failed']} failed"
        )

        if metrics["attribute_success_rate"]:
            self.info("Attribute Success Rates:")
            for attribute, stats in metrics["attribute_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {attribute}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "personenricher",
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


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
