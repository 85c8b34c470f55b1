"""
Query Enhancement Service
Uses Perplexity to rewrite free-text searches into map-friendly queries and to
suggest business categories. Every call is best-effort: missing credentials,
upstream failures and unparseable answers all fall back to safe defaults.
"""
import logging
from typing import List, Optional, Sequence

import httpx

from towgo.config import Settings, settings as default_settings
from towgo.models.search import PerplexityCitation, PerplexityResult
from towgo.search.results import (
    MALFORMED_RESPONSE,
    MISSING_CREDENTIAL,
    NO_INPUT,
    TRANSPORT_ERROR,
    Outcome,
)
from towgo.services.perplexity_client import PerplexityClient, citations, first_message_content
from towgo.utils.normalizers import citation_title, parse_json_array

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATIONS = [
    "Coffee Shops",
    "Local Restaurants",
    "Shopping Centers",
    "Entertainment Venues",
    "Outdoor Activities",
]
MAX_RECOMMENDATIONS = 5

ENHANCE_SYSTEM_PROMPT = (
    "You are a business search specialist for a location-based business search application. "
    "Your task is to refine user queries to improve search relevance by using real-time web search. "
    "Focus on finding accurate, location-specific information about businesses that will yield "
    "results in Google Maps. For each search query: "
    "1. Identify the specific business category or type in the query "
    "2. Research current business information and terminology used for this type of business "
    "3. Format the query to work optimally with map-based search systems "
    "4. Consider common features that users might be looking for with this business type "
    "5. If the query is too generic, make it more specific with popular features. "
    "Format your response as a precise search query that would work in Google Maps. "
    'For example, transform "coffee" into "coffee shops with wifi" or "pharmacy" into '
    '"24-hour pharmacy with prescription delivery". '
    "DO NOT include explanations or JSON formatting. Your answer should be ONLY the optimized "
    "search query text."
)

RECOMMEND_SYSTEM_PROMPT = (
    "You are a local business expert for a location-based discovery app. "
    "Suggest business categories that are both practical and interesting, using web search to "
    "learn what is popular and available in the user's location. Consider everyday essentials, "
    "quick service options, health services and seasonal businesses. "
    "Return ONLY a JSON array of 5 specific business categories, formatted as search terms that "
    "would work well in Google Maps. Each recommendation should be concise (1-4 words). "
    'For example: ["Urgent Care Centers", "Coffee Shops", "Auto Repair", "Car Wash", "Pharmacies"]'
)


class QueryEnhancementService:
    """Rewrites search queries and suggests categories using Perplexity."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[PerplexityClient] = None):
        self.settings = settings or default_settings
        self.client = client or PerplexityClient(self.settings)

    @property
    def enabled(self) -> bool:
        return bool(self.settings.perplexity_api_key)

    async def enhance(
        self,
        query: str,
        location_context: Optional[str] = None,
    ) -> Outcome[PerplexityResult]:
        """
        Rewrite `query` into a more specific map search phrase.

        Args:
            query: Free-text query typed by the user
            location_context: Optional place name to bias the rewrite

        Returns:
            Outcome wrapping a PerplexityResult; degraded results carry the
            original query unchanged.
        """
        unchanged = PerplexityResult(original_query=query, enhanced_query=query, is_enhanced=False)

        if not self.enabled:
            logger.warning("Skipping search enhancement: PERPLEXITY_API_KEY not configured")
            return Outcome.fallback(unchanged, MISSING_CREDENTIAL)

        user_message = f'Refine this search query: "{query}"'
        if location_context:
            user_message += f" near {location_context}"

        try:
            data = await self.client.chat(
                [
                    {"role": "system", "content": ENHANCE_SYSTEM_PROMPT},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=150,
                temperature=0.1,
                top_p=0.95,
                search_recency_filter="day",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Perplexity enhancement failed for '{query}': {e}")
            return Outcome.fallback(unchanged, TRANSPORT_ERROR)

        enhanced_query = first_message_content(data)
        if not enhanced_query:
            logger.warning(f"Perplexity returned no content for '{query}'")
            return Outcome.fallback(unchanged, MALFORMED_RESPONSE)

        cited = [
            PerplexityCitation(url=url, title=citation_title(url))
            for url in citations(data)
        ]

        logger.info(f"Enhanced query '{query}' -> '{enhanced_query}' ({len(cited)} citations)")
        return Outcome.ok(
            PerplexityResult(
                original_query=query,
                enhanced_query=enhanced_query,
                is_enhanced=enhanced_query != query,
                citations=cited or None,
            )
        )

    async def enhance_search_query(
        self,
        query: str,
        location_context: Optional[str] = None,
    ) -> PerplexityResult:
        """Enhanced query, or the original one when enhancement is unavailable."""
        return (await self.enhance(query, location_context)).value

    async def recommend(
        self,
        preferences: Sequence[str],
        location: Optional[str] = None,
    ) -> Outcome[List[str]]:
        """
        Suggest up to five business categories for the given preferences.

        Args:
            preferences: Free-text preferences, e.g. names of saved favorites
            location: Optional place name for local relevance

        Returns:
            Outcome wrapping the suggestions
        """
        if not self.enabled:
            logger.warning("Skipping recommendations: PERPLEXITY_API_KEY not configured")
            return Outcome.fallback(list(DEFAULT_RECOMMENDATIONS), MISSING_CREDENTIAL)

        if not preferences:
            return Outcome.fallback(list(DEFAULT_RECOMMENDATIONS), NO_INPUT)

        user_message = f"Based on these user preferences: {', '.join(preferences)}, "
        if location:
            user_message += f"near {location}, "
        user_message += (
            "suggest 5 business types they might be interested in. "
            "Respond with only a JSON array of business type strings."
        )

        try:
            data = await self.client.chat(
                [
                    {"role": "system", "content": RECOMMEND_SYSTEM_PROMPT},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=200,
                temperature=0.1,
                top_p=0.95,
                search_recency_filter="day",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Perplexity recommendations failed: {e}")
            return Outcome.fallback(list(DEFAULT_RECOMMENDATIONS), TRANSPORT_ERROR)

        content = first_message_content(data)
        parsed = parse_json_array(content)
        if parsed is None:
            logger.error(f"Error parsing recommendations JSON: {content[:200]!r}")
            return Outcome.fallback([], MALFORMED_RESPONSE)

        recommendations = [str(item).strip() for item in parsed if str(item).strip()]
        return Outcome.ok(recommendations[:MAX_RECOMMENDATIONS])

    async def generate_recommendations(
        self,
        preferences: Sequence[str],
        location: Optional[str] = None,
    ) -> List[str]:
        """Suggested categories, or a default list when suggestions are unavailable."""
        return (await self.recommend(preferences, location)).value


# Global instance
query_enhancement_service = QueryEnhancementService()
