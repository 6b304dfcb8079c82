# seatfinder/api/routes.py
# HTTP surface: nearby workspaces, re-filtering, geocoding, predicted availability.

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
import logging

from seatfinder.core.config import settings
from seatfinder.models.dto import (
    AvailabilityResponse,
    ErrorResponse,
    FilterLocationsRequest,
    FilterLocationsResponse,
    GeocodeRequest,
    GeocodeResult,
    NearbyPlacesRequest,
    NearbyPlacesResponse,
)
from seatfinder.services.assembler import assemble_locations, filter_locations, hide_distance
from seatfinder.services.availability import (
    DeclaredPopularitySignalProvider,
    SignalProvider,
    predicted_availability_curve,
)
from seatfinder.services.geocoding import geocode_address
from seatfinder.services.places import GooglePlacesClient

router = APIRouter()
logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------------
def get_places_client(request: Request) -> GooglePlacesClient:
    return request.app.state.places_client


def get_signal_provider(request: Request) -> SignalProvider:
    return getattr(request.app.state, "signal_provider", None) or DeclaredPopularitySignalProvider()


def resolve_now(client_now: Optional[datetime]) -> datetime:
    """The client's clock when it sent one, else the server clock in the configured zone."""
    return client_now or datetime.now(settings.tz)


# ----------------------------------------------------------------------
# Nearby Workspaces
# ----------------------------------------------------------------------
@router.post(
    "/places",
    response_model=NearbyPlacesResponse,
    responses={502: {"model": NearbyPlacesResponse}},
)
async def nearby_places(
    data: NearbyPlacesRequest,
    places_client: GooglePlacesClient = Depends(get_places_client),
    signal_provider: SignalProvider = Depends(get_signal_provider),
):
    """Cafes and public libraries around (lat, lng) with their seat-availability estimate."""
    now = resolve_now(data.now)

    search = await places_client.search_nearby(data.lat, data.lng, data.type)
    if search.error:
        logger.error(f"Error fetching places: {search.error}")
        body = NearbyPlacesResponse(origin_lat=data.lat, origin_lng=data.lng, error=search.error)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body.model_dump(mode="json"))

    locations = assemble_locations(
        search.records,
        origin=(data.lat, data.lng),
        now=now,
        kind=data.type,
        signal_provider=signal_provider,
    )
    locations = filter_locations(locations, now=now, day_offset=data.day_offset, hour=data.hour)

    if not data.origin_is_device:
        locations = [hide_distance(location) for location in locations]

    return NearbyPlacesResponse(locations=locations, origin_lat=data.lat, origin_lng=data.lng)


@router.post("/places/filter", response_model=FilterLocationsResponse)
async def refilter_places(data: FilterLocationsRequest):
    """Narrow an already fetched list by kind and open-at time, without searching again."""
    now = resolve_now(data.now)
    locations = filter_locations(
        data.locations,
        now=now,
        kind=data.type,
        day_offset=data.day_offset,
        hour=data.hour,
    )
    return FilterLocationsResponse(locations=locations)


# ----------------------------------------------------------------------
# Geocoding
# ----------------------------------------------------------------------
@router.post(
    "/geocode",
    response_model=GeocodeResult,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def geocode(data: GeocodeRequest):
    return await geocode_address(data.address)


# ----------------------------------------------------------------------
# Predicted Availability
# ----------------------------------------------------------------------
@router.get("/availability", response_model=AvailabilityResponse)
async def availability(
    day_offset: int = Query(0, ge=0, le=6),
    now: Optional[datetime] = Query(None),
):
    curve = predicted_availability_curve(day_offset, resolve_now(now))
    return AvailabilityResponse(day_offset=day_offset, slots=list(curve))
