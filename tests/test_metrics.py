"""
Unit tests for metrics, logging, request ids and configuration helpers.
"""

import pytest

from extract_colors.config import Config
from extract_colors.services.observability import get_performance_collector, performance_monitor
from extract_colors.utils.ids import extract_timestamp_from_request_id, generate_request_id
from extract_colors.utils.logging import configure_logging, get_logger
from extract_colors.utils.metrics import MetricsCollector, get_metrics


class TestMetricsCollector:
    """Test the in-process metrics collector"""

    def test_counters(self):
        collector = MetricsCollector()
        collector.increment_request_count()
        collector.increment_request_count()
        collector.increment_failure_count("imagedecodeerror")

        counters = collector.get_counters()
        assert counters["extract_requests_total"] == 2
        assert counters["extract_failed_total_imagedecodeerror"] == 1

    def test_timing_stats(self):
        collector = MetricsCollector()
        for ms in (10.0, 20.0, 30.0):
            collector.record_timing("extract", ms)

        stats = collector.get_timing_stats()["extract_duration_ms"]
        assert stats["count"] == 3
        assert stats["mean"] == pytest.approx(20.0)
        assert stats["p50"] == pytest.approx(20.0)
        assert (stats["min"], stats["max"]) == (10.0, 30.0)

    def test_palette_sizes_and_reset(self):
        collector = MetricsCollector()
        assert collector.get_palette_size_stats() == {}
        collector.record_palette_size(3)
        collector.record_palette_size(5)
        assert collector.get_palette_size_stats()["mean"] == 4

        collector.reset()
        assert collector.get_summary()["counters"] == {}
        assert collector.get_palette_size_stats() == {}


class TestPerformanceMonitor:
    """Test stage monitoring"""

    def test_records_stage(self):
        with performance_monitor("sampling", sample_count=12):
            pass

        stats = get_performance_collector().get_operation_stats("sampling")
        assert stats["total_calls"] == 1
        assert stats["error_count"] == 0
        assert get_metrics().get_timing_stats()["sampling_duration_ms"]["count"] == 1
        assert get_performance_collector().get_recent_metrics(1)[0]["sample_count"] == 12

    def test_records_errors_and_reraises(self):
        with pytest.raises(RuntimeError):
            with performance_monitor("clustering"):
                raise RuntimeError("boom")

        all_stats = get_performance_collector().get_all_stats()
        assert all_stats["total_errors"] == 1
        assert all_stats["operations"]["clustering"]["error_rate"] == 1.0


class TestRequestIds:
    """Test request id helpers"""

    def test_roundtrip_timestamp(self):
        request_id = generate_request_id("ext")
        assert request_id.startswith("ext-")
        assert len(extract_timestamp_from_request_id(request_id)) == 14

    def test_ids_are_unique(self):
        assert generate_request_id() != generate_request_id()

    def test_malformed_id(self):
        assert extract_timestamp_from_request_id("nonsense") == ""


class TestConfigValidation:
    """Test configuration validators"""

    def test_max_colors_lower_bound(self):
        assert Config.validate_max_colors(1)
        assert Config.validate_max_colors(1000)
        assert not Config.validate_max_colors(0)

    def test_unit_interval(self):
        assert Config.validate_unit_interval(1.0)
        assert not Config.validate_unit_interval(1.0, closed=False)
        assert not Config.validate_unit_interval(-0.01)


class TestStructuredLogger:
    """Test the loguru facade"""

    @pytest.fixture
    def records(self):
        captured = []
        configure_logging(sink=lambda message: captured.append(message.record), level="DEBUG")
        yield captured
        configure_logging()

    def test_extra_fields_are_bound(self, records):
        get_logger().info("extracted", extra={"colors": 3})

        assert records[-1]["message"] == "extracted"
        assert records[-1]["level"].name == "INFO"
        assert records[-1]["extra"]["colors"] == 3

    def test_context_reaches_module_loggers(self, records):
        from loguru import logger

        with get_logger().contextualize(request_id="ext-20260101000000-abcdef12"):
            logger.debug("stage done")
        logger.debug("outside")

        assert records[-2]["extra"]["request_id"] == "ext-20260101000000-abcdef12"
        assert "request_id" not in records[-1]["extra"]

    def test_level_filters_records(self):
        captured = []
        configure_logging(sink=lambda message: captured.append(message), level="WARNING")
        try:
            get_logger().info("hidden")
            get_logger().warning("shown")
        finally:
            configure_logging()

        assert len(captured) == 1
        assert "shown" in captured[0]
