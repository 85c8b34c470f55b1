"""
Web Search Aggregator
Fans a business query out to the configured providers, merges their
normalized hits and reports timing and provenance.
"""
import asyncio
import hashlib
import logging
import time
from typing import List, Optional, Sequence

from pydantic import ValidationError

from towgo.config import Settings, settings as default_settings
from towgo.models.search import ScrapedBusiness, WebSearchResult
from towgo.search.providers import ProviderResult, SearchProvider, SimulatedProvider, build_providers
from towgo.search.results import MALFORMED_RESPONSE, MISSING_CREDENTIAL, TRANSPORT_ERROR, Outcome
from towgo.services.redis_client import RedisClient
from towgo.utils.normalizers import dedup_key

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34


def build_full_query(
    query: str,
    location: Optional[str] = None,
    radius: Optional[int] = None,
    focus_term: str = "tow truck",
) -> str:
    """Focus the query on the app's vertical and spell out location and radius."""
    lowered = query.lower()
    if "tow" in lowered or "truck" in lowered:
        full_query = query
    else:
        full_query = f"{focus_term} {query} services"

    if location:
        full_query += f" in {location}"
    if radius:
        full_query += f" within {round(radius / METERS_PER_MILE)} miles radius"
    return full_query


def merge_results(results: Sequence[ProviderResult]) -> List[ScrapedBusiness]:
    """Concatenate in provider order, keeping the first copy of each business."""
    seen = set()
    merged = []
    for result in results:
        for business in result.businesses:
            key = dedup_key(business.model_dump())
            if key in seen:
                continue
            seen.add(key)
            merged.append(business)
    return merged


def collect_sources(businesses: Sequence[ScrapedBusiness], cited: Sequence[str] = ()) -> List[str]:
    """Distinct sources in first-seen order, followed by cited URLs."""
    sources: List[str] = []
    for name in [business.source for business in businesses] + list(cited):
        if name and name not in sources:
            sources.append(name)
    return sources


class WebSearchAggregator:
    """Runs web searches across providers and unifies the results."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        providers: Optional[List[SearchProvider]] = None,
        cache: Optional[RedisClient] = None,
        fallback: Optional[SearchProvider] = None,
    ):
        self.settings = settings or default_settings
        self.providers = providers if providers is not None else build_providers(self.settings)
        self.cache = cache
        self.fallback = fallback or SimulatedProvider()

    async def _run_provider(
        self,
        provider: SearchProvider,
        full_query: str,
        location: Optional[str],
        radius: Optional[int],
    ) -> Optional[ProviderResult]:
        """None when the provider is not configured or failed."""
        if not provider.enabled:
            logger.warning(f"Web search provider '{provider.name}' is not configured, skipping")
            return None
        try:
            result = await provider.search(full_query, location, radius)
        except Exception as e:
            logger.error(f"Web search provider '{provider.name}' failed: {e}")
            return None
        logger.info(f"Provider '{provider.name}' returned {len(result.businesses)} businesses")
        return result

    async def search(
        self,
        query: str,
        location: Optional[str] = None,
        radius: Optional[int] = None,
    ) -> Outcome[WebSearchResult]:
        """
        Search the web for businesses.

        Args:
            query: What to look for, e.g. "flatbed towing"
            location: Optional place name
            radius: Optional radius in meters

        Returns:
            Outcome wrapping the WebSearchResult. It is degraded when every
            provider came back empty and the simulated fallback was used.

        Raises:
            ValueError: If the query is blank
        """
        started = time.perf_counter()
        query = (query or "").strip()
        if not query:
            raise ValueError("Query cannot be empty")

        full_query = build_full_query(query, location, radius, self.settings.websearch_focus_term)
        cache_key = f"websearch:{hashlib.sha1(full_query.encode('utf-8')).hexdigest()}"

        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached:
                try:
                    result = WebSearchResult.model_validate(cached)
                except ValidationError as e:
                    logger.warning(f"Ignoring unreadable cached web search for '{full_query}': {e}")
                else:
                    logger.info(f"Web search cache hit for '{full_query}'")
                    # Time of this call, not of the search that filled the cache
                    result = result.model_copy(update={"time_taken": f"{time.perf_counter() - started:.2f}s"})
                    return Outcome.ok(result)

        logger.info(f"Performing web search for businesses: '{full_query}'")
        outcomes = await asyncio.gather(
            *(self._run_provider(provider, full_query, location, radius) for provider in self.providers)
        )
        answered = [outcome for outcome in outcomes if outcome is not None]

        businesses = merge_results(answered)
        cited = [url for outcome in answered for url in outcome.citations]
        degraded = None

        if not businesses:
            if not any(provider.enabled for provider in self.providers):
                degraded = MISSING_CREDENTIAL
            elif len(answered) < len(self.providers):
                degraded = TRANSPORT_ERROR
            else:
                degraded = MALFORMED_RESPONSE
            logger.warning(f"No provider results for '{full_query}' ({degraded}), using fallback search")
            fallback = await self.fallback.search(query, location, radius)
            businesses = fallback.businesses
            cited = []

        result = WebSearchResult(
            original_query=query,
            businesses=businesses,
            total_results=len(businesses),
            time_taken=f"{time.perf_counter() - started:.2f}s",
            sources=collect_sources(businesses, cited),
        )
        logger.info(f"Web search completed with {result.total_results} results in {result.time_taken}")

        if degraded is not None:
            return Outcome.fallback(result, degraded)

        if self.cache is not None:
            self.cache.set(cache_key, result.model_dump(mode="json", by_alias=True), ttl=self.settings.cache_ttl_seconds)
        return Outcome.ok(result)
