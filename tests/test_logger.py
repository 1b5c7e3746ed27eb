"""
Tests for logger functionality.
"""

from personenricher.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["lookups_attempted"] == 0

    def test_log_file_written(self, tmp_path):
        logger = StructuredLogger(name="test-file", log_dir=tmp_path, enable_console=False)

        logger.info("Message with context", person_id=5, name="Ada")
        for handler in logger.logger.handlers:
            handler.flush()

        log_files = list(tmp_path.glob("personenricher_*.log"))
        assert len(log_files) == 1
        content = log_files[0].read_text(encoding="utf-8")
        assert "Message with context" in content
        assert '"person_id": 5' in content

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_with_non_json_values(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Path context", path=tmp_path)

    def test_metrics_tracking(self):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", enable_file=False, enable_console=False)

        logger.record_lookup_attempt("age")
        logger.record_lookup_success("age")
        logger.record_lookup_attempt("gender")
        logger.record_lookup_failure("gender", "Timeout")
        logger.record_enrichment(success=False)

        metrics = logger.get_metrics()
        assert metrics["lookups_attempted"] == 2
        assert metrics["lookups_successful"] == 1
        assert metrics["lookups_failed"] == 1
        assert metrics["errors_by_type"] == {"Timeout": 1}
        assert metrics["attribute_success_rate"]["age"]["success_rate"] == 1.0
        assert metrics["attribute_success_rate"]["gender"]["success_rate"] == 0.0
        assert metrics["enrichments_failed"] == 1

    def test_metrics_snapshot_is_detached(self):
        """Mutating a returned snapshot leaves the live counters alone."""
        logger = StructuredLogger(name="test", enable_file=False, enable_console=False)
        logger.record_lookup_attempt("age")
        logger.record_lookup_success("age")

        snapshot = logger.get_metrics()
        snapshot["attribute_success_rate"]["age"]["successes"] = 99
        snapshot["errors_by_type"]["Timeout"] = 5

        assert logger.metrics["attribute_success_rate"]["age"]["successes"] == 1
        assert "success_rate" not in logger.metrics["attribute_success_rate"]["age"]
        assert logger.metrics["errors_by_type"] == {}

    def test_metrics_summary(self):
        logger = StructuredLogger(name="test", enable_file=False, enable_console=False)
        logger.record_lookup_attempt("nationality")
        logger.record_lookup_failure("nationality", "Undetermined")

        logger.log_metrics_summary()


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self):
        reset_logger()
        logger1 = get_logger(enable_file=False, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self):
        logger1 = get_logger(enable_file=False, enable_console=False)
        reset_logger()
        logger2 = get_logger(enable_file=False, enable_console=False)

        assert logger1 is not logger2
