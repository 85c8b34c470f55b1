"""Pydantic models for saved favorites."""
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from towgo.models.search import ApiModel, LatLng


class FavoriteCreateRequest(ApiModel):
    """Payload for saving a business as a favorite."""
    place_id: str = Field(..., min_length=1, alias="placeId")
    name: str = Field(..., min_length=1)
    address: str
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    location: LatLng


class FavoriteResponse(ApiModel):
    """A stored favorite."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    user_id: str = Field(..., alias="userId")
    place_id: str = Field(..., alias="placeId")
    name: str
    address: str
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    location: LatLng
    created_at: Optional[datetime] = Field(None, alias="createdAt")
