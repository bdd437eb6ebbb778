import logging
from typing import Callable, Dict, Tuple
from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi.errors import RateLimitExceeded
from starlette.concurrency import run_in_threadpool
from autoinsight.core.cache import dataset_cache_key, generate_dataset_id, get_dataset_cache
from autoinsight.core.config import get_settings
from autoinsight.core.errors import (
    DatasetTooLargeError,
    EmptyDatasetError,
    ErrorCodes,
    get_error_response,
)
from autoinsight.core.schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    DataProfile,
    RefreshResponse,
)
from autoinsight.services.engine import AnalysisEngine
from autoinsight.services.narrative import AINarrativeCollaborator, NarrativeCollaborator

logger = logging.getLogger(__name__)

router = APIRouter()


def get_narrative_collaborator() -> NarrativeCollaborator:
    """Narrative collaborator for new engines (overridden in tests)."""
    return AINarrativeCollaborator(get_settings())


def _error(request: Request, status_code: int, code: str, detail: str = None) -> HTTPException:
    error_info = get_error_response(code, detail)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    return HTTPException(status_code=status_code, detail=error_info)


def _cached_engine(request: Request, dataset_id: str) -> AnalysisEngine:
    settings = request.app.state.settings
    engine = get_dataset_cache(settings.dataset_cache_ttl_seconds).get(dataset_cache_key(dataset_id))
    if engine is None:
        raise _error(request, 404, ErrorCodes.DATASET_NOT_FOUND)
    return engine


@router.get("/health")
async def health_check():
    return {"status": "ok"}


async def _run_analysis(request: Request, payload: AnalyzeRequest, narrative: NarrativeCollaborator) -> AnalysisResponse:
    settings = request.app.state.settings
    cache = get_dataset_cache(settings.dataset_cache_ttl_seconds)

    dataset_id = generate_dataset_id(payload.rows)
    key = dataset_cache_key(dataset_id)

    engine = cache.get(key)
    if engine is None:
        engine = AnalysisEngine(payload.rows, narrative=narrative, settings=settings)
    else:
        logger.info(f"Reusing cached profile for dataset {dataset_id[:12]}")

    result = await run_in_threadpool(engine.analyze)
    cache.set(key, engine)

    return AnalysisResponse(
        dataset_id=dataset_id,
        profile=result.profile,
        charts=result.charts,
        insights=result.insights,
        summary=result.summary,
    )


# slowapi appends a route's limits every time it decorates, so each
# (limiter, rate) pair is decorated exactly once
_limited_handlers: Dict[Tuple[int, str], Callable] = {}


def _rate_limited_analysis(request: Request) -> Callable:
    limiter = request.app.state.limiter
    rate = f"{request.app.state.settings.rate_limit_per_minute}/minute"
    key = (id(limiter), rate)
    handler = _limited_handlers.get(key)
    if handler is None:
        handler = limiter.limit(rate)(_run_analysis)
        _limited_handlers[key] = handler
    return handler


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_dataset(
    payload: AnalyzeRequest,
    request: Request,
    narrative: NarrativeCollaborator = Depends(get_narrative_collaborator),
):
    """
    Profile a dataset and return chart recommendations and insights.

    Rate limited per client IP address (configurable).
    """
    try:
        return await _rate_limited_analysis(request)(request, payload, narrative)
    except (HTTPException, RateLimitExceeded):
        raise
    except EmptyDatasetError as e:
        raise _error(request, 400, ErrorCodes.EMPTY_DATASET, str(e))
    except DatasetTooLargeError as e:
        raise _error(request, 413, ErrorCodes.DATASET_TOO_LARGE, str(e))
    except Exception as e:
        logger.error(f"Unexpected error analyzing dataset: {e}", exc_info=True)
        raise _error(request, 500, ErrorCodes.UNKNOWN_ERROR)


@router.get("/datasets/{dataset_id}/profile", response_model=DataProfile)
async def get_profile(dataset_id: str, request: Request):
    """Return the cached profile of a previously analyzed dataset."""
    engine = _cached_engine(request, dataset_id)
    return engine.profile()


@router.post("/datasets/{dataset_id}/refresh", response_model=RefreshResponse)
async def refresh_analysis(dataset_id: str, request: Request):
    """Regenerate charts and insights from the cached profile without re-profiling."""
    engine = _cached_engine(request, dataset_id)
    charts, insights = await run_in_threadpool(engine.refresh)
    return RefreshResponse(dataset_id=dataset_id, charts=charts, insights=insights)
