"""
Web search provider adapters.

Each provider fetches raw hits in whatever shape its source returns and
normalizes them into ScrapedBusiness through its own `normalize`. The
aggregator only ever sees the normalized shape.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from towgo.config import Settings, settings as default_settings
from towgo.models.search import ScrapedBusiness, SourceType
from towgo.services.perplexity_client import PerplexityClient, citations, first_message_content
from towgo.utils.normalizers import (
    as_text,
    as_text_list,
    extract_addresses,
    extract_phone_numbers,
    parse_json_array,
    unwrap_fenced_json,
)

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

DEFAULT_CATEGORIES = ["Tow Truck", "Roadside Assistance"]

WEEKDAY_HOURS = [
    "Monday: 9:00 AM - 5:00 PM",
    "Tuesday: 9:00 AM - 5:00 PM",
    "Wednesday: 9:00 AM - 5:00 PM",
    "Thursday: 9:00 AM - 5:00 PM",
    "Friday: 9:00 AM - 5:00 PM",
]
BUSINESS_SUFFIXES = ["LLC", "Inc.", "Services", "Company", "Group", "Associates"]


@dataclass
class RawResults:
    """Hits as the source returned them, plus any cited URLs."""
    hits: List[Dict[str, Any]]
    citations: List[str] = field(default_factory=list)


@dataclass
class ProviderResult:
    """Normalized hits of one provider."""
    provider: str
    businesses: List[ScrapedBusiness]
    citations: List[str] = field(default_factory=list)


class SearchProvider:
    """Base adapter: fetch raw hits, normalize each one."""

    name = "base"
    source = "Unknown"
    source_type = SourceType.SEARCH

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, query: str, location: Optional[str], radius: Optional[int]) -> RawResults:
        raise NotImplementedError

    def normalize(self, raw: Dict[str, Any]) -> Optional[ScrapedBusiness]:
        raise NotImplementedError

    async def search(
        self,
        query: str,
        location: Optional[str] = None,
        radius: Optional[int] = None,
    ) -> ProviderResult:
        """Fetch and normalize, dropping hits that can't be normalized."""
        raw = await self.fetch(query, location, radius)
        businesses = []
        for hit in raw.hits:
            business = self.normalize(hit)
            if business is not None:
                businesses.append(business)
        return ProviderResult(self.name, businesses, raw.citations)


class PerplexityProvider(SearchProvider):
    """Asks the Perplexity online model for a JSON list of businesses."""

    name = "perplexity"
    source = "Perplexity"

    def __init__(self, settings: Optional[Settings] = None, client: Optional[PerplexityClient] = None):
        self.settings = settings or default_settings
        self.client = client or PerplexityClient(self.settings)

    @property
    def enabled(self) -> bool:
        return bool(self.settings.perplexity_api_key)

    async def fetch(self, query: str, location: Optional[str], radius: Optional[int]) -> RawResults:
        data = await self.client.chat(
            [
                {
                    "role": "system",
                    "content": (
                        "You are a specialized business search assistant focusing on "
                        "tow truck and roadside assistance services."
                    ),
                },
                {
                    "role": "user",
                    "content": (
                        f"Find businesses {query}. VERY IMPORTANT: Only return businesses from "
                        "the exact location mentioned in the query. Format results as a JSON "
                        "array of objects with: title, description, address, phone, website, "
                        "rating, categories, hours."
                    ),
                },
            ],
            model=self.settings.perplexity_search_model,
            temperature=0.1,
        )
        cited = citations(data)

        content = unwrap_fenced_json(first_message_content(data))
        parsed = parse_json_array(content)
        if parsed is None:
            raise ValueError("Perplexity did not return a JSON array of businesses")
        return RawResults([item for item in parsed if isinstance(item, dict)], cited)

    def normalize(self, raw: Dict[str, Any]) -> Optional[ScrapedBusiness]:
        website = as_text(raw.get("website"))
        hours = raw.get("hours")
        return ScrapedBusiness(
            title=as_text(raw.get("title")) or as_text(raw.get("name")) or "Unknown Business",
            url=website or "",
            description=as_text(raw.get("description")) or "",
            phone=as_text(raw.get("phone")),
            address=as_text(raw.get("address")),
            rating=as_text(raw.get("rating")),
            categories=as_text_list(raw.get("categories")) or list(DEFAULT_CATEGORIES),
            website=website,
            hours=as_text_list(hours) if isinstance(hours, list) else None,
            source=self.source,
            source_type=SourceType.SEARCH,
        )


class BingProvider(SearchProvider):
    """Scrapes organic results from Bing's HTML search page."""

    name = "bing"
    source = "Bing Search"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    async def fetch(self, query: str, location: Optional[str], radius: Optional[int]) -> RawResults:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "text/html",
            "Accept-Language": "en-US,en;q=0.9",
        }
        async with httpx.AsyncClient(timeout=self.settings.http_timeout, follow_redirects=True) as client:
            response = await client.get(
                "https://www.bing.com/search", params={"q": query}, headers=headers
            )
            response.raise_for_status()
        return RawResults(parse_bing_results(response.text))

    def normalize(self, raw: Dict[str, Any]) -> Optional[ScrapedBusiness]:
        if not raw.get("title") or not raw.get("url"):
            return None
        phones = extract_phone_numbers(raw.get("text", ""))
        addresses = extract_addresses(raw.get("text", ""))
        return ScrapedBusiness(
            title=raw["title"],
            url=raw["url"],
            description=raw.get("description", ""),
            phone=phones[0] if phones else None,
            address=addresses[0] if addresses else None,
            source=self.source,
            source_type=SourceType.SEARCH,
        )


def parse_bing_results(html: str) -> List[Dict[str, Any]]:
    """Pull title, link, snippet and full text out of Bing result blocks."""
    soup = BeautifulSoup(html, "html.parser")
    results = []
    for block in soup.select(".b_algo"):
        heading = block.find("h2")
        link = heading.find("a") if heading else None
        snippet = block.select_one(".b_caption p")
        results.append({
            "title": heading.get_text(strip=True) if heading else "",
            "url": link.get("href", "") if link else "",
            "description": snippet.get_text(strip=True) if snippet else "",
            "text": block.get_text(" ", strip=True),
        })
    return results


class DirectoryProvider(SearchProvider):
    """Deterministic business directory listing for the query."""

    name = "directory"
    source = "Business Directory"
    source_type = SourceType.DIRECTORY

    async def fetch(self, query: str, location: Optional[str], radius: Optional[int]) -> RawResults:
        return RawResults([{
            "title": f"{query} from Directory",
            "url": f"https://example.com/{quote(query)}",
            "description": f"Directory listing for {query}.",
            "phone": "(555) 123-4567",
            "address": "123 Main St, Anytown, CA 90210",
            "rating": "4.5",
            "categories": ["Business", "Service"],
        }])

    def normalize(self, raw: Dict[str, Any]) -> Optional[ScrapedBusiness]:
        return ScrapedBusiness(
            title=raw["title"],
            url=raw["url"],
            description=raw.get("description", ""),
            phone=raw.get("phone"),
            address=raw.get("address"),
            rating=raw.get("rating"),
            categories=raw.get("categories"),
            source=self.source,
            source_type=SourceType.DIRECTORY,
        )


class SimulatedProvider(SearchProvider):
    """
    Deterministic fallback generator.

    Used when no real provider produced anything, so the web search page
    always has something to render. The number of results depends only on the
    query and location lengths.
    """

    name = "simulated"
    source = "Simulated"

    async def fetch(self, query: str, location: Optional[str], radius: Optional[int]) -> RawResults:
        query = (query or "").strip()
        if not query:
            raise ValueError("Query cannot be empty")

        slug = query.lower().replace(" ", "-")
        compact = query.lower().replace(" ", "")
        area = location or "your area"
        count = (len(query) + len(location or "")) % 10 + 5

        hits = []
        for i in range(count):
            suffix = BUSINESS_SUFFIXES[i % len(BUSINESS_SUFFIXES)]
            if i % 3 == 0:
                source, source_type = "Google Search", SourceType.SEARCH
            elif i % 3 == 1:
                source, source_type = "Bing Search", SourceType.SEARCH
            else:
                source, source_type = "Business Directory", SourceType.DIRECTORY
            hits.append({
                "title": f"{query} {suffix} {i + 1}",
                "url": f"https://example.com/{quote(slug)}-{i + 1}",
                "description": (
                    f"{query} {suffix} offers professional services in {area}. "
                    "Contact us for more information about our services and rates."
                ),
                "phone": f"(555) {i * 111 + 100:03d}-{i * 1234 % 10000:04d}",
                "address": f"{i * 100 + 123} Main St, {location or 'Anytown'}, CA {90000 + i * 10}",
                "rating": f"{i % 5 + 1}.{i % 10}",
                "hours": WEEKDAY_HOURS + [
                    "Saturday: " + ("10:00 AM - 3:00 PM" if i % 2 == 0 else "Closed"),
                    "Sunday: Closed",
                ],
                "categories": [query, suffix, "Service Provider"],
                "website": f"https://www.{compact}-{i + 1}.com",
                "source": source,
                "sourceType": source_type.value,
            })

        hits.append({
            "title": f"{query} Community Page",
            "url": f"https://facebook.com/{quote(compact)}",
            "description": f"Community page for {query} professionals in {location or 'the area'}.",
            "source": "Facebook",
            "sourceType": SourceType.SOCIAL.value,
        })

        # Highest rated first, unrated entries keep their place at the end
        hits.sort(key=lambda hit: -float(hit["rating"]) if hit.get("rating") else 0.0)
        return RawResults(hits)

    def normalize(self, raw: Dict[str, Any]) -> Optional[ScrapedBusiness]:
        return ScrapedBusiness.model_validate(raw)


PROVIDER_TYPES = {
    PerplexityProvider.name: PerplexityProvider,
    BingProvider.name: BingProvider,
    DirectoryProvider.name: DirectoryProvider,
}


def build_providers(settings: Settings) -> List[SearchProvider]:
    """Instantiate the providers named in settings, in order."""
    providers: List[SearchProvider] = []
    for name in settings.provider_names:
        provider_type = PROVIDER_TYPES.get(name)
        if provider_type is None:
            logger.warning(f"Unknown web search provider '{name}', skipping")
            continue
        if provider_type is DirectoryProvider:
            providers.append(DirectoryProvider())
        else:
            providers.append(provider_type(settings))
    return providers
