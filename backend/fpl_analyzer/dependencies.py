"""Shared FastAPI dependencies for API routes.

The FPL client and bootstrap cache are process-wide singletons created on
first use. Tests swap them via ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from fpl_analyzer.config import get_settings
from fpl_analyzer.services.analysis import AnalysisService
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.fpl_client import FplApiClient


@lru_cache
def get_fpl_client() -> FplApiClient:
    """Get the shared FPL API client."""
    settings = get_settings()
    return FplApiClient(
        base_url=settings.fpl_api_base_url,
        image_base_url=settings.fpl_image_base_url,
        timeout=settings.request_timeout,
        max_concurrent=settings.max_concurrent_requests,
    )


@lru_cache
def get_bootstrap_cache() -> BootstrapCache:
    """Get the shared bootstrap cache."""
    return BootstrapCache(ttl=get_settings().cache_ttl_bootstrap)


def get_analysis_service(
    client: FplApiClient = Depends(get_fpl_client),
    bootstrap_cache: BootstrapCache = Depends(get_bootstrap_cache),
) -> AnalysisService:
    """Build a per-request analysis service around the shared client and cache."""
    settings = get_settings()
    return AnalysisService(
        client=client,
        bootstrap_cache=bootstrap_cache,
        league_id=settings.league_id,
        batch_size=settings.analysis_batch_size,
    )
