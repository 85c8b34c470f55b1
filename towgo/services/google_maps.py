"""Google Maps geocoding and Places text search."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from towgo.config import Settings, settings as default_settings
from towgo.models.search import LatLng

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"


class GoogleMapsError(Exception):
    """Google Maps request failed or returned an error status."""


class GoogleMapsClient:
    """Thin async wrapper over the Geocoding and Places web services."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.api_key = settings.google_maps_api_key
        self.timeout = settings.http_timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Google Maps API error: {e}")
            raise GoogleMapsError(str(e)) from e

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Google Maps API status: {status} {data.get('error_message', '')}")
            raise GoogleMapsError(f"{status}: {data.get('error_message', '')}".strip())
        return data

    async def geocode(self, address: str) -> Optional[LatLng]:
        """Coordinates of an address, None when Google finds nothing."""
        data = await self._get(GEOCODE_URL, {"address": address})
        results = data.get("results") or []
        if not results:
            return None
        location = results[0]["geometry"]["location"]
        return LatLng(lat=location["lat"], lng=location["lng"])

    async def text_search(self, query: str, origin: LatLng, radius: int) -> List[Dict[str, Any]]:
        """Raw Places text search results around `origin`."""
        data = await self._get(
            TEXT_SEARCH_URL,
            {"query": query, "location": f"{origin.lat},{origin.lng}", "radius": radius},
        )
        return data.get("results") or []


# Global instance
google_maps_client = GoogleMapsClient()
