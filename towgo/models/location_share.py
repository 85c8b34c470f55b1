"""Pydantic models for location sharing."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from towgo.models.search import ApiModel, LatLng


class ShareAccuracy(str, Enum):
    """How precisely a shared location is revealed."""
    EXACT = "exact"
    APPROXIMATE = "approximate"
    CITY = "city"


class VehicleInfo(ApiModel):
    """Optional vehicle details for the tow operator."""
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    color: Optional[str] = None
    type: Optional[str] = None
    license_plate: Optional[str] = Field(None, alias="licensePlate")


class LocationShareRequest(ApiModel):
    """A location shared with a tow operator."""
    address: str
    location: Optional[LatLng] = None
    accuracy: ShareAccuracy
    expires: datetime
    include_vehicle_info: bool = Field(False, alias="includeVehicleInfo")
    vehicle_info: Optional[VehicleInfo] = Field(None, alias="vehicleInfo")


class LocationShareCreated(ApiModel):
    share_id: str = Field(..., alias="shareId")
    expires_at: datetime = Field(..., alias="expiresAt")
