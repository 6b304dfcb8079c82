from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from seatfinder.core.config import settings


class VenueKind(str, Enum):
    CAFE = "cafe"
    LIBRARY = "library"


class Busyness(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# "all" is only a filter value, never a venue kind
KindFilter = Literal["cafe", "library", "all"]


# --- Collaborator Records (place search) ---

class PlaceRecord(BaseModel):
    """Raw place as returned by the place-search collaborator."""
    id: str = Field(..., description="Provider place identifier.")
    name: str = Field("Unknown", description="Display name.")
    types: List[str] = Field(default_factory=list, description="Raw venue-type tags.")
    address: str = Field("", description="Formatted address.")
    lat: float = Field(..., description="Latitude.")
    lng: float = Field(..., description="Longitude.")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Average rating (0-5).")
    user_ratings_total: Optional[int] = Field(None, ge=0)
    weekday_descriptions: Optional[List[str]] = Field(
        None, description="Seven lines like 'Monday: 9:00 AM – 5:00 PM' or 'Monday: Closed'."
    )
    open_now: Optional[bool] = None
    next_open_time: Optional[str] = None
    next_close_time: Optional[str] = None
    popularity: Optional[int] = Field(None, description="Declared live popularity (0-100).")
    dine_in: Optional[bool] = None
    takeout: Optional[bool] = None
    business_status: Optional[str] = None


class PlaceSearchResult(BaseModel):
    """Outcome of one nearby search. A failed search has no records and an error."""
    records: List[PlaceRecord] = Field(default_factory=list)
    error: Optional[str] = None


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    formatted_address: str = ""


# --- Core Output ---

class OpeningHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    open_now: Optional[bool] = None
    weekday_descriptions: List[str] = Field(default_factory=list)
    next_close_time: Optional[str] = None
    next_open_time: Optional[str] = None


class NormalizedLocation(BaseModel):
    """A workspace-friendly venue, built fresh for every query."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: VenueKind
    address: str
    lat: float
    lng: float
    busyness: Busyness
    likelihood: int = Field(..., ge=0, le=100)
    has_wifi: bool
    is_live_data: bool = False
    distance: Optional[int] = Field(None, ge=0, description="Meters from the query origin.")
    walking_time: Optional[int] = Field(None, ge=0, description="Whole minutes at 5 km/h.")
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    opening_hours: Optional[OpeningHours] = None
    open_until: Optional[str] = None

    @model_validator(mode="after")
    def _distance_and_walking_time_pair(self):
        if (self.distance is None) != (self.walking_time is None):
            raise ValueError("distance and walking_time must both be set or both be absent")
        return self


class AvailabilitySlot(BaseModel):
    """One point of the predicted availability curve."""
    model_config = ConfigDict(frozen=True)

    time: str
    hour: int
    label: str
    likelihood: int
    status: str
    icon: str


# --- API Request Models ---

class NearbyPlacesRequest(BaseModel):
    # Search centre; a request without one searches around the configured default
    lat: float = Field(settings.DEFAULT_LAT, ge=-90, le=90)
    lng: float = Field(settings.DEFAULT_LNG, ge=-180, le=180)
    type: KindFilter = "all"
    day_offset: Optional[int] = Field(None, ge=0, le=6, description="Days from today for the open filter.")
    hour: Optional[int] = Field(None, ge=0, le=23, description="Hour (24h) for the open filter.")
    origin_is_device: bool = Field(True, description="False when the origin is a searched or clicked point.")
    now: Optional[datetime] = Field(None, description="Client clock; server time is used when absent.")


class FilterLocationsRequest(BaseModel):
    locations: List[NormalizedLocation]
    type: KindFilter = "all"
    day_offset: Optional[int] = Field(None, ge=0, le=6)
    hour: Optional[int] = Field(None, ge=0, le=23)
    now: Optional[datetime] = None


class GeocodeRequest(BaseModel):
    address: str = Field(..., description="Free-text address or 'lat, lng'.")


# --- API Response Models ---

class NearbyPlacesResponse(BaseModel):
    locations: List[NormalizedLocation] = Field(default_factory=list)
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    error: Optional[str] = None


class FilterLocationsResponse(BaseModel):
    locations: List[NormalizedLocation]


class AvailabilityResponse(BaseModel):
    day_offset: int
    slots: List[AvailabilitySlot]


# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
    retry_after_seconds: Optional[int] = Field(None, description="Time until retry is allowed.")
