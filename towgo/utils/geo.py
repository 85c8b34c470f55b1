"""Distance and ordering helpers for map search results."""

from math import atan2, cos, radians, sin, sqrt
from typing import Any, Dict, List, Optional, Sequence

from towgo.models.search import Business, LatLng, SortBy

EARTH_RADIUS_M = 6371000


def haversine_distance(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two points in metres."""
    lat1, lon1, lat2, lon2 = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))


def with_distances(businesses: Sequence[Business], origin: LatLng) -> List[Business]:
    """Copies of `businesses` with `distance` set relative to `origin`."""
    return [
        business.model_copy(update={"distance": haversine_distance(origin, business.location)})
        for business in businesses
    ]


def sort_businesses(
    businesses: Sequence[Business],
    sort_by: SortBy,
    origin: Optional[LatLng] = None,
) -> List[Business]:
    """
    Order businesses for display.

    distance: ascending, unknown distances last.
    relevance: provider order, untouched.
    category: grouped by category name, stable within a group.
    """
    items = with_distances(businesses, origin) if origin is not None else list(businesses)

    if sort_by == SortBy.DISTANCE:
        return sorted(
            items,
            key=lambda b: (b.distance is None, b.distance if b.distance is not None else 0.0),
        )
    if sort_by == SortBy.CATEGORY:
        return sorted(items, key=lambda b: b.category or "")
    return items


def normalize_place(raw: Dict[str, Any]) -> Optional[Business]:
    """
    Map a Google Places result into a Business.

    Returns None for results without an id, a name or coordinates.
    """
    place_id = raw.get("place_id")
    name = raw.get("name")
    location = ((raw.get("geometry") or {}).get("location")) or {}
    lat, lng = location.get("lat"), location.get("lng")
    if not place_id or not name or lat is None or lng is None:
        return None

    types = raw.get("types") or []
    category = types[0].replace("_", " ") if types else None

    return Business(
        place_id=place_id,
        name=name,
        category=category,
        address=raw.get("formatted_address") or raw.get("vicinity") or "",
        phone_number=raw.get("formatted_phone_number") or raw.get("international_phone_number"),
        website=raw.get("website"),
        location=LatLng(lat=lat, lng=lng),
    )
