"""
Observability metrics for the color extraction pipeline.

Per-stage performance records (duration, resident memory, CPU) collected
around each pipeline stage and forwarded to the request-level metrics.
"""

import time
import psutil
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, asdict
from contextlib import contextmanager
import threading
from collections import defaultdict, deque
import numpy as np
from loguru import logger

from extract_colors.utils.metrics import get_metrics


@dataclass
class PerformanceMetrics:
    """Performance metrics for one pipeline stage."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    cpu_percent: float
    sample_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


class PerformanceCollector:
    """Thread-safe collector of per-stage performance records."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._performance_stats = defaultdict(lambda: deque(maxlen=100))

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1

            if metrics.error:
                self._error_counts[metrics.operation_name] += 1

            self._performance_stats[metrics.operation_name].append({
                'duration_ms': metrics.duration_ms,
                'memory_mb': metrics.memory_usage_mb,
                'cpu_percent': metrics.cpu_percent
            })

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            return self._operation_stats_locked(operation_name)

    def _operation_stats_locked(self, operation_name: str) -> Dict[str, Any]:
        stats = self._performance_stats.get(operation_name)
        if not stats:
            return {}

        durations = [s['duration_ms'] for s in stats]
        memory_usage = [s['memory_mb'] for s in stats]
        cpu_usage = [s['cpu_percent'] for s in stats]
        calls = self._operation_counts[operation_name]
        errors = self._error_counts[operation_name]

        return {
            'operation_name': operation_name,
            'total_calls': calls,
            'error_count': errors,
            'error_rate': errors / max(1, calls),
            'duration_stats': {
                'mean_ms': float(np.mean(durations)),
                'median_ms': float(np.median(durations)),
                'p95_ms': float(np.percentile(durations, 95)),
                'max_ms': float(np.max(durations))
            },
            'memory_stats': {
                'mean_mb': float(np.mean(memory_usage)),
                'peak_mb': float(np.max(memory_usage))
            },
            'cpu_stats': {
                'mean_percent': float(np.mean(cpu_usage)),
                'peak_percent': float(np.max(cpu_usage))
            }
        }

    def get_all_stats(self) -> Dict[str, Any]:
        """Get aggregated statistics for all operations."""
        with self._lock:
            operations = {
                name: self._operation_stats_locked(name)
                for name in list(self._operation_counts.keys())
            }
            total_ops = sum(self._operation_counts.values())
            total_errors = sum(self._error_counts.values())

        return {
            'operations': operations,
            'total_operations': total_ops,
            'total_errors': total_errors,
            'overall_error_rate': total_errors / max(1, total_ops)
        }

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent performance metrics."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
            return [asdict(metric) for metric in recent]

    def reset(self) -> None:
        """Drop all recorded stages (for testing)."""
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._performance_stats.clear()


# Global collector instance
_performance_collector = PerformanceCollector()


def get_performance_collector() -> PerformanceCollector:
    """Get the global performance collector instance."""
    return _performance_collector


@contextmanager
def performance_monitor(operation_name: str, sample_count: int = 0, cluster_count: int = 0):
    """Context manager for monitoring performance of a pipeline stage."""
    process = psutil.Process()
    start_time = time.perf_counter()
    start_memory = process.memory_info().rss / 1024 / 1024  # MB

    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        end_memory = process.memory_info().rss / 1024 / 1024  # MB

        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=duration_ms,
            memory_usage_mb=max(end_memory, start_memory),
            cpu_percent=process.cpu_percent(),
            sample_count=sample_count,
            cluster_count=cluster_count,
            timestamp=time.time(),
            error=error_msg
        )

        _performance_collector.record_performance(metrics)
        get_metrics().record_timing(operation_name, duration_ms)

        if error_msg:
            logger.error(f"Stage {operation_name} failed after {duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Stage {operation_name} completed in {duration_ms:.1f}ms "
                         f"(memory: {metrics.memory_usage_mb:.1f}MB)")
