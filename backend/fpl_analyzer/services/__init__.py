"""Service layer for business logic."""

from fpl_analyzer.services.analysis import AnalysisService
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.fpl_client import FplApiClient

__all__ = ["AnalysisService", "BootstrapCache", "FplApiClient"]
