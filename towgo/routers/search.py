"""Search router: nearby search, query enhancement, web search and recommendations."""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from towgo.database import Favorite, get_db
from towgo.dependencies import (
    get_aggregator,
    get_current_user,
    get_enhancement_service,
    get_maps_client,
)
from towgo.models.search import (
    PerplexityResult,
    RecommendationsResponse,
    SearchParams,
    SearchResponse,
    WebSearchResult,
)
from towgo.search.aggregator import WebSearchAggregator
from towgo.search.guard import SearchGuard
from towgo.search.query_enhancement import QueryEnhancementService
from towgo.services.google_maps import GoogleMapsClient, GoogleMapsError
from towgo.utils.geo import normalize_place, sort_businesses

router = APIRouter(tags=["search"])
logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_TYPE = "popular businesses"

# Advisory guards of searches in flight, keyed by the client's search session
_guards: Dict[str, SearchGuard] = {}


def _validation_detail(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'params'}: {error['msg']}"
        for error in exc.errors()
    )


@router.get("/search", response_model=SearchResponse)
async def search_businesses(
    location: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: int = 5000,
    business_type: Optional[str] = Query(None, alias="businessType"),
    sort_by: str = Query("distance", alias="sortBy"),
    search_session: Optional[str] = Header(None, alias="X-Search-Session"),
    enhancer: QueryEnhancementService = Depends(get_enhancement_service),
    maps: GoogleMapsClient = Depends(get_maps_client),
):
    """
    Search for nearby businesses.

    The business type is rewritten by the enhancement service first. When
    Google Maps is configured the enhanced query is run as a Places text
    search around the user's coordinate (or geocoded location) and the
    results are sorted as requested; otherwise only the enhancement is
    returned and the client runs the map search itself.
    """
    try:
        params = SearchParams(
            location=location,
            latitude=latitude,
            longitude=longitude,
            radius=radius,
            business_type=business_type,
            sort_by=sort_by,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=_validation_detail(exc))

    if search_session:
        guard = _guards.setdefault(search_session, SearchGuard())
        if not guard.try_begin():
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="A search is already in progress",
            )

    try:
        original_query = params.business_type or DEFAULT_BUSINESS_TYPE
        logger.info(f"Search for '{original_query}' (radius={params.radius}m, sortBy={params.sort_by.value})")

        enhancement = await enhancer.enhance_search_query(original_query, params.location)

        results = []
        search_status = "SUCCESS"
        if not maps.is_configured:
            search_status = "NO_MAPS_KEY"
        else:
            try:
                origin = params.origin
                if origin is None:
                    origin = await maps.geocode(params.location)
                if origin is None:
                    search_status = "LOCATION_NOT_FOUND"
                else:
                    raw_places = await maps.text_search(enhancement.enhanced_query, origin, params.radius)
                    places = [place for place in map(normalize_place, raw_places) if place is not None]
                    results = sort_businesses(places, params.sort_by, origin)
            except GoogleMapsError as e:
                logger.error(f"Maps search failed: {e}")
                search_status = "MAPS_ERROR"

        return SearchResponse(
            results=results,
            status=search_status,
            original_query=enhancement.original_query,
            enhanced_query=enhancement.enhanced_query,
            is_enhanced=enhancement.is_enhanced,
            citations=enhancement.citations,
        )
    finally:
        if search_session:
            _guards.pop(search_session, None)


@router.get("/perplexity", response_model=PerplexityResult)
async def enhance_query(
    query: Optional[str] = None,
    location: Optional[str] = None,
    enhancer: QueryEnhancementService = Depends(get_enhancement_service),
):
    """Rewrite a free-text query. Falls back to the original query when unavailable."""
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")

    outcome = await enhancer.enhance(query.strip(), location)
    if outcome.is_degraded:
        logger.warning(f"Query enhancement degraded: {outcome.degraded}")
    return outcome.value


@router.get("/websearch", response_model=WebSearchResult)
async def web_search(
    query: Optional[str] = None,
    location: Optional[str] = None,
    radius: Optional[int] = None,
    aggregator: WebSearchAggregator = Depends(get_aggregator),
):
    """Search the web for businesses across the configured providers."""
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")
    if radius is not None and not 1 <= radius <= 50000:
        raise HTTPException(status_code=400, detail="radius must be between 1 and 50000 meters")

    outcome = await aggregator.search(query, location, radius)
    if outcome.is_degraded:
        logger.warning(f"Web search served from fallback: {outcome.degraded}")
    return outcome.value


@router.get("/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    location: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    enhancer: QueryEnhancementService = Depends(get_enhancement_service),
):
    """Suggest business categories based on the user's saved favorites."""
    preferences = [
        name
        for (name,) in db.query(Favorite.name).filter(Favorite.user_id == current_user["id"]).all()
        if name
    ]
    recommendations = await enhancer.generate_recommendations(preferences, location)
    return RecommendationsResponse(recommendations=recommendations)
