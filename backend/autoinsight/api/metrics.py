"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter, Request
from autoinsight.core.performance import PerformanceMonitor
from autoinsight.core.cache import get_dataset_cache

router = APIRouter()


@router.get("/metrics")
async def get_metrics(request: Request):
    """
    Get performance metrics and cache statistics.

    Returns timings for profiling, chart recommendation, insight
    generation and requests, plus the dataset cache size.
    """
    settings = request.app.state.settings
    return {
        'performance': PerformanceMonitor.get_all_metrics(),
        'cache': {
            'dataset_cache': get_dataset_cache(settings.dataset_cache_ttl_seconds).get_stats()
        }
    }
