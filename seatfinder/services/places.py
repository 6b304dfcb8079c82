# seatfinder/services/places.py
# Nearby search against the Google Places API (New).
# Failures never raise: they come back as an empty PlaceSearchResult with an error.

import asyncio
import random
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from seatfinder.core.config import settings
from seatfinder.models.dto import KindFilter, PlaceRecord, PlaceSearchResult

logger = structlog.get_logger(__name__)

PLACES_NEARBY_URL = "https://places.googleapis.com/v1/places:searchNearby"

FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.location",
    "places.types",
    "places.rating",
    "places.userRatingCount",
    "places.currentOpeningHours",
    "places.businessStatus",
    "places.dineIn",
    "places.takeout",
    "places.priceLevel",
])

ACCESS_DENIED_MESSAGE = (
    "Google Places API (New) access denied. Please ensure:\n"
    "1. Places API (New) is enabled in Google Cloud Console\n"
    "2. Billing is set up for your project\n"
    "3. Your API key has no restrictions preventing server-side calls\n"
    "4. The API key has Places API (New) enabled"
)


def included_types_for(kind: KindFilter) -> List[str]:
    # "all" searches cafes; libraries need their own request
    if kind == "library":
        return ["library"]
    return ["cafe", "coffee_shop"]


def parse_place(place: Dict[str, Any]) -> Optional[PlaceRecord]:
    """Map one Places API (New) entry onto a PlaceRecord. Entries without coordinates are skipped."""
    location = place.get("location")
    if not isinstance(location, dict):
        return None
    lat = location.get("latitude")
    lng = location.get("longitude")
    if lat is None or lng is None or not place.get("id"):
        return None

    hours = place.get("currentOpeningHours")
    if not isinstance(hours, dict):
        hours = {}
    display_name = place.get("displayName")
    if not isinstance(display_name, dict):
        display_name = {}
    return PlaceRecord(
        id=place["id"],
        name=display_name.get("text") or "Unknown",
        types=place.get("types") or [],
        address=place.get("formattedAddress") or "",
        lat=lat,
        lng=lng,
        rating=place.get("rating"),
        user_ratings_total=place.get("userRatingCount"),
        weekday_descriptions=hours.get("weekdayDescriptions"),
        open_now=hours.get("openNow"),
        next_open_time=hours.get("nextOpenTime"),
        next_close_time=hours.get("nextCloseTime"),
        dine_in=place.get("dineIn"),
        takeout=place.get("takeout"),
        business_status=place.get("businessStatus"),
    )


class GooglePlacesClient:
    """Nearby search within ``radius_m`` of a point, most popular places first."""

    def __init__(
        self,
        api_key: Optional[str] = settings.GOOGLE_PLACES_API_KEY,
        radius_m: float = settings.SEARCH_RADIUS_M,
        max_results: int = settings.MAX_RESULT_COUNT,
        timeout: float = settings.PLACES_TIMEOUT,
        max_retries: int = settings.PLACES_MAX_RETRIES,
        initial_backoff: float = settings.PLACES_INITIAL_BACKOFF,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.radius_m = radius_m
        self.max_results = max_results
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.transport = transport

    def _request_body(self, lat: float, lng: float, kind: KindFilter) -> Dict[str, Any]:
        return {
            "includedTypes": included_types_for(kind),
            "maxResultCount": self.max_results,
            "rankPreference": "POPULARITY",
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": self.radius_m,
                }
            },
        }

    async def search_nearby(self, lat: float, lng: float, kind: KindFilter = "all") -> PlaceSearchResult:
        if not self.api_key:
            logger.error("places_search_not_configured")
            return PlaceSearchResult(error="Google Places API key not configured")

        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }
        body = self._request_body(lat, lng, kind)
        log = logger.bind(lat=lat, lng=lng, kind=kind)

        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.post(PLACES_NEARBY_URL, json=body, headers=headers)
                    response.raise_for_status()
                    data = response.json()
            except httpx.TimeoutException:
                log.warning("places_search_timeout", attempt=attempt + 1)
                if attempt < self.max_retries:
                    wait_time = self.initial_backoff * (2 ** attempt) + random.uniform(0, 0.2)
                    await asyncio.sleep(wait_time)
                    continue
                return PlaceSearchResult(error="Google Places API timed out")
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                log.error("places_search_status_error", status_code=status_code, body=e.response.text[:500])
                if status_code == 403:
                    return PlaceSearchResult(error=ACCESS_DENIED_MESSAGE)
                return PlaceSearchResult(error=f"Google Places API error: {status_code}")
            except httpx.HTTPError as e:
                log.error("places_search_transport_error", error=str(e))
                return PlaceSearchResult(error=f"Google Places API unreachable: {e}")
            except ValueError as e:
                log.error("places_search_bad_payload", error=str(e))
                return PlaceSearchResult(error="Google Places API returned an unreadable response")

            places = (data.get("places") or []) if isinstance(data, dict) else None
            if not isinstance(places, list):
                log.error("places_search_bad_payload", payload_type=type(data).__name__)
                return PlaceSearchResult(error="Google Places API returned an unreadable response")

            records = []
            for place in places:
                if not isinstance(place, dict):
                    log.warning("places_search_skipped_place", place_id=None, entry_type=type(place).__name__)
                    continue
                try:
                    record = parse_place(place)
                except ValidationError as e:
                    log.warning("places_search_invalid_place", place_id=place.get("id"), error=str(e))
                    continue
                if record is None:
                    log.warning("places_search_skipped_place", place_id=place.get("id"))
                    continue
                records.append(record)

            log.info("places_search_ok", found=len(records))
            return PlaceSearchResult(records=records)

        return PlaceSearchResult(error="Google Places API search failed")
