"""
Observability module for the color extraction pipeline.

Stage-level performance monitoring feeding the in-process metrics collector.
"""

from .metrics import (
    PerformanceMetrics,
    PerformanceCollector,
    get_performance_collector,
    performance_monitor,
)

__all__ = [
    'PerformanceMetrics',
    'PerformanceCollector',
    'get_performance_collector',
    'performance_monitor',
]
