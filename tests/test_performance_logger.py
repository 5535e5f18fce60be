"""
Tests for the slow-operation decorator
"""
import logging

import pytest

from utils.performance_logger import performance_monitor


class TestPerformanceMonitor:

    def test_slow_call_is_logged_as_warning(self, caplog):
        @performance_monitor("Test.slow", log_threshold_ms=0.0)
        def slow():
            return 42

        with caplog.at_level(logging.DEBUG, logger="performance"):
            assert slow() == 42

        assert any(r.levelno == logging.WARNING and "SLOW Test.slow" in r.getMessage() for r in caplog.records)

    def test_permission_threshold_comes_from_app_config(self, app, caplog):
        app.config['PERMISSION_QUERY_THRESHOLD_MS'] = 10_000.0

        @performance_monitor("Test.check", operation_type="permission")
        def check():
            return True

        with caplog.at_level(logging.DEBUG, logger="performance.permissions"):
            check()

        records = [r for r in caplog.records if r.name == "performance.permissions"]
        assert [r.levelno for r in records] == [logging.DEBUG]

    def test_failure_is_logged_and_reraised(self, caplog):
        @performance_monitor("Test.broken")
        def broken():
            raise ValueError("boom")

        with caplog.at_level(logging.DEBUG, logger="performance"):
            with pytest.raises(ValueError):
                broken()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "Test.broken failed" in errors[0].getMessage()
