"""
Search pipeline: query enhancement, web search aggregation and the small
stateful helpers around it (location shares, the search guard).

Every service here takes an explicit Settings and degrades to defaults
instead of failing the request when an upstream integration is missing.
"""

from .aggregator import WebSearchAggregator, build_full_query
from .guard import SearchGuard, SearchInProgress
from .location_sharing import LocationShareService, ShareExpiredError, apply_privacy
from .query_enhancement import (
    DEFAULT_RECOMMENDATIONS,
    QueryEnhancementService,
    query_enhancement_service,
)
from .results import Outcome

__all__ = [
    "WebSearchAggregator",
    "build_full_query",
    "SearchGuard",
    "SearchInProgress",
    "LocationShareService",
    "ShareExpiredError",
    "apply_privacy",
    "DEFAULT_RECOMMENDATIONS",
    "QueryEnhancementService",
    "query_enhancement_service",
    "Outcome",
]
