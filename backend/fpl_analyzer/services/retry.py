"""Retry policy for per-gameweek and per-player upstream lookups.

FplApiClient never retries; resolvers that can tolerate a short delay wrap
their calls with ``upstream_retry``.
"""

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fpl_analyzer.services.fpl_client import UpstreamUnavailable

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 3


def _is_retryable_error(exception: BaseException) -> bool:
    """Check if an error should trigger a retry."""
    return isinstance(exception, UpstreamUnavailable) and exception.is_transient


upstream_retry = retry(
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception(_is_retryable_error),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
