"""
Performance monitoring for analysis operations.
"""
import inspect
import time
import logging
from typing import Any, Dict, List, Optional
from functools import wraps
from collections import defaultdict
import threading

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000

# Thread-safe metrics storage
_metrics_lock = threading.Lock()
_metrics: Dict[str, List[Dict[str, Any]]] = defaultdict(list)


def _percentile(sorted_values: List[float], fraction: float) -> float:
    return sorted_values[min(int(len(sorted_values) * fraction), len(sorted_values) - 1)]


class PerformanceMonitor:
    """Monitor and track performance metrics."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a performance metric.

        Args:
            name: Metric name (e.g., 'profile_dataset', 'recommend_charts')
            value: Metric value (usually duration in seconds)
            metadata: Optional metadata (status, row counts, etc.)
        """
        with _metrics_lock:
            samples = _metrics[name]
            samples.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(samples) > MAX_SAMPLES_PER_METRIC:
                del samples[:-MAX_SAMPLES_PER_METRIC]

    @staticmethod
    def _stats_locked(metric_name: str) -> Optional[Dict[str, float]]:
        samples = _metrics.get(metric_name)
        if not samples:
            return None
        values = sorted(m['value'] for m in samples)
        return {
            'count': len(values),
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / len(values),
            'p50': _percentile(values, 0.5),
            'p95': _percentile(values, 0.95),
            'p99': _percentile(values, 0.99),
        }

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a metric.

        Returns:
            Dict with count, min, max, mean and percentiles, or None if no data
        """
        with _metrics_lock:
            return PerformanceMonitor._stats_locked(metric_name)

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        """Get statistics for all metrics."""
        with _metrics_lock:
            return {name: PerformanceMonitor._stats_locked(name) for name in list(_metrics)}

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def track_performance(metric_name: str):
    """
    Decorator to record how long a sync or async function takes.

    Usage:
        @track_performance("profile_dataset")
        def profile_dataset(...):
            ...
    """
    def _record(start_time: float, status: str, error: Optional[Exception] = None):
        duration = time.time() - start_time
        metadata = {'status': status}
        if error is not None:
            metadata['error'] = str(error)
            logger.error(
                f"{metric_name} failed after {duration:.3f}s: {error}",
                extra={'metric': metric_name, 'duration': duration}
            )
        else:
            logger.debug(
                f"{metric_name} completed in {duration:.3f}s",
                extra={'metric': metric_name, 'duration': duration}
            )
        PerformanceMonitor.record_metric(metric_name, duration, metadata)

    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _record(start_time, 'error', e)
                raise
            _record(start_time, 'success')
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record(start_time, 'error', e)
                raise
            _record(start_time, 'success')
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
