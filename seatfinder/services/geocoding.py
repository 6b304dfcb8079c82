# seatfinder/services/geocoding.py
# Free-text search box -> coordinates, via the Google Geocoding API.

import httpx
import logging
import re
from typing import Optional
from fastapi import HTTPException, status
from seatfinder.core.config import settings, is_valid_coordinate
from seatfinder.models.dto import ErrorResponse, GeocodeResult

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# "lat,lng" or "lat, lng"; comma decimals (European style) are accepted too
COORD_PATTERN = re.compile(r'^([-+]?\d{1,3}(?:[.,]\d+)?)[,\s]+([-+]?\d{1,3}(?:[.,]\d+)?)$')


def parse_coordinates(query: str) -> Optional[GeocodeResult]:
    """Read a "lat, lng" query directly, without a network round-trip."""
    match = COORD_PATTERN.match(query)
    if not match:
        return None
    try:
        lat = float(match.group(1).replace(',', '.'))
        lng = float(match.group(2).replace(',', '.'))
    except ValueError as e:
        logger.error(f"Float conversion error: {e}")
        return None

    # Swapped order is only recognisable when the first value can't be a latitude
    if abs(lat) > 90 and abs(lng) <= 90:
        lat, lng = lng, lat

    if not is_valid_coordinate(lat, lng):
        return None
    return GeocodeResult(lat=lat, lng=lng, formatted_address=f"{lat}, {lng}")


def _error(status_code: int, error: str, detail: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, detail=detail).model_dump(),
    )


async def geocode_address(
    address: str,
    api_key: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GeocodeResult:
    """
    Geocodes a free-text address and returns the first match.

    Raises:
        HTTPException: With an ErrorResponse detail when the address is empty,
            the API is not configured, nothing matches, or Google fails.
    """
    if not address or not address.strip():
        raise _error(status.HTTP_400_BAD_REQUEST, "INVALID_ADDRESS", "Address is required")

    query = address.strip()

    direct = parse_coordinates(query)
    if direct is not None:
        logger.info(f"Direct coordinate input detected: {direct.lat}, {direct.lng}")
        return direct

    api_key = api_key or settings.GOOGLE_PLACES_API_KEY
    if not api_key:
        logger.error("GOOGLE_PLACES_API_KEY not configured")
        raise _error(status.HTTP_503_SERVICE_UNAVAILABLE, "GEOCODING_NOT_CONFIGURED", "API key not configured")

    params = {"address": query, "key": api_key}

    try:
        async with httpx.AsyncClient(timeout=settings.GEOCODING_TIMEOUT, transport=transport) as client:
            response = await client.get(GOOGLE_GEOCODE_URL, params=params)
            response.raise_for_status()
            data = response.json()
    except httpx.TimeoutException:
        logger.warning("Google geocoding timed out.")
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "GEOCODING_TIMEOUT",
            "Geocoding service is temporarily unavailable due to timeout.",
        )
    except httpx.HTTPStatusError as e:
        logger.error(f"Google geocoding returned status error: {e.response.status_code}")
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "GEOCODING_API_ERROR",
            "Geocoding service is temporarily unavailable or misconfigured.",
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Google geocoding failed: {e}")
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "GEOCODING_API_ERROR",
            "Failed to geocode address",
        )

    api_status = data.get("status")
    if api_status == "ZERO_RESULTS" or (api_status == "OK" and not data.get("results")):
        raise _error(status.HTTP_404_NOT_FOUND, "NO_RESULTS", "No results found for this address")
    if api_status != "OK":
        logger.warning(f"Geocoding failed: {api_status} ({data.get('error_message', 'Unknown error')})")
        raise _error(
            status.HTTP_400_BAD_REQUEST,
            "GEOCODING_FAILED",
            f"Geocoding failed: {api_status}",
        )

    result = data["results"][0]
    location = result["geometry"]["location"]
    return GeocodeResult(
        lat=location["lat"],
        lng=location["lng"],
        formatted_address=result.get("formatted_address", ""),
    )
