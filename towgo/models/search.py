"""Pydantic models for search, enhancement and web search."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SortBy(str, Enum):
    """Result orderings."""
    DISTANCE = "distance"
    RELEVANCE = "relevance"
    CATEGORY = "category"


class SourceType(str, Enum):
    """Kind of source a scraped business came from."""
    SEARCH = "search"
    DIRECTORY = "directory"
    SOCIAL = "social"


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either form."""
    model_config = ConfigDict(populate_by_name=True)


class LatLng(ApiModel):
    """A coordinate pair."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class SearchParams(ApiModel):
    """Request model for a nearby business search."""
    location: Optional[str] = Field(None, description="Typed address or place name")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Device latitude")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Device longitude")
    radius: int = Field(5000, ge=1, le=50000, description="Search radius in meters")
    business_type: Optional[str] = Field(None, alias="businessType")
    sort_by: SortBy = Field(SortBy.DISTANCE, alias="sortBy")

    @model_validator(mode="after")
    def _require_origin(self) -> "SearchParams":
        has_coords = self.latitude is not None and self.longitude is not None
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        if not has_coords and not (self.location and self.location.strip()):
            raise ValueError("either location or latitude/longitude is required")
        return self

    @property
    def origin(self) -> Optional[LatLng]:
        if self.latitude is None or self.longitude is None:
            return None
        return LatLng(lat=self.latitude, lng=self.longitude)


class Business(ApiModel):
    """A business found through the maps provider."""
    place_id: str = Field(..., alias="placeId")
    name: str
    category: Optional[str] = None
    address: str
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    website: Optional[str] = None
    location: LatLng
    # Metres from the querying coordinate, never stored
    distance: Optional[float] = None


class ScrapedBusiness(ApiModel):
    """A business found through web search."""
    title: str
    url: str
    description: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    rating: Optional[str] = None
    hours: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    website: Optional[str] = None
    source: str
    source_type: SourceType = Field(..., alias="sourceType")


class WebSearchResult(ApiModel):
    """Aggregated web search response."""
    original_query: str = Field(..., alias="originalQuery")
    businesses: List[ScrapedBusiness] = Field(default_factory=list)
    total_results: int = Field(0, alias="totalResults")
    time_taken: str = Field("0.00s", alias="timeTaken")
    sources: List[str] = Field(default_factory=list)


class PerplexityCitation(ApiModel):
    """A citation returned with an enhanced query."""
    url: str
    title: Optional[str] = None
    text: Optional[str] = None


class PerplexityResult(ApiModel):
    """Outcome of rewriting a free-text query."""
    original_query: str = Field(..., alias="originalQuery")
    enhanced_query: str = Field(..., alias="enhancedQuery")
    is_enhanced: bool = Field(False, alias="isEnhanced")
    citations: Optional[List[PerplexityCitation]] = None


class SearchResponse(ApiModel):
    """Response of the nearby search endpoint."""
    results: List[Business] = Field(default_factory=list)
    status: str = "SUCCESS"
    original_query: str = Field(..., alias="originalQuery")
    enhanced_query: str = Field(..., alias="enhancedQuery")
    is_enhanced: bool = Field(False, alias="isEnhanced")
    citations: Optional[List[PerplexityCitation]] = None


class RecommendationsResponse(BaseModel):
    """Suggested business categories."""
    recommendations: List[str]
