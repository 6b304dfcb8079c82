# seatfinder/services/assembler.py
# Turns raw place-search records into NormalizedLocation values:
# workspace-friendliness filtering, venue classification, distance and
# busyness scoring. Also hosts the kind / open-at post-filter.

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import structlog

from seatfinder.core.config import settings
from seatfinder.models.dto import (
    KindFilter,
    NormalizedLocation,
    OpeningHours,
    PlaceRecord,
    VenueKind,
)
from seatfinder.services.availability import (
    DeclaredPopularitySignalProvider,
    SignalProvider,
    busyness_from_popularity,
    likelihood_from_busyness,
)
from seatfinder.services.opening_hours import closing_time_label, is_open_at

# Google businessStatus values for venues that cannot be visited
CLOSED_BUSINESS_STATUSES = frozenset({"CLOSED_PERMANENTLY", "CLOSED_TEMPORARILY"})
from seatfinder.utils.geo import distance_meters, walking_minutes

logger = structlog.get_logger(__name__)

INSTITUTIONAL_TYPES = {"university", "school", "secondary_school", "primary_school", "college"}
INSTITUTIONAL_KEYWORDS = ("college", "university", "school", "academy", "institute", "campus")
PUBLIC_LIBRARY_KEYWORDS = ("public", "city", "county", "town", "municipal", "branch")

CAFE_TYPES = {"cafe", "coffee_shop"}


def is_public_library(record: PlaceRecord) -> bool:
    """A library counts as public when nothing marks it as institutional and its name says so."""
    name = record.name.lower()
    if INSTITUTIONAL_TYPES.intersection(record.types):
        return False
    if any(keyword in name for keyword in INSTITUTIONAL_KEYWORDS):
        return False
    return any(keyword in name for keyword in PUBLIC_LIBRARY_KEYWORDS)


def _passes_cafe_rules(record: PlaceRecord) -> Optional[bool]:
    """Verdict from the cafe / bakery rules, or None when neither applies."""
    types = set(record.types)

    if types & CAFE_TYPES:
        if record.dine_in is False and record.takeout is True:
            return False
        if "fast_food_restaurant" in types and "cafe" not in types:
            return False
        return True

    if "bakery" in types:
        return record.dine_in is not False

    return None


def is_workspace_friendly(record: PlaceRecord, min_rating: float = settings.MIN_RATING) -> bool:
    """
    Decide whether a raw record is worth showing as a place to sit and work.

    Records need opening hours and a rating of at least ``min_rating``, and
    must not be reported as closed (permanently or temporarily).
    Libraries must be public libraries; a library-tagged place that is not
    one survives only if it also qualifies as a cafe or bakery (and is then
    shown as a cafe).
    """
    if record.business_status in CLOSED_BUSINESS_STATUSES:
        return False
    if not record.weekday_descriptions:
        return False
    if record.rating is None or record.rating < min_rating:
        return False

    cafe_verdict = _passes_cafe_rules(record)

    if "library" in record.types and not is_public_library(record):
        return bool(cafe_verdict)

    if cafe_verdict is not None:
        return cafe_verdict
    return True


def resolve_venue_kind(record: PlaceRecord) -> VenueKind:
    if "library" in record.types and is_public_library(record):
        return VenueKind.LIBRARY
    return VenueKind.CAFE


def build_location(
    record: PlaceRecord,
    origin: Optional[Tuple[float, float]],
    signal_provider: SignalProvider,
    now: datetime,
) -> NormalizedLocation:
    """Score a single record that already passed is_workspace_friendly."""
    kind = resolve_venue_kind(record)

    distance = None
    walking_time = None
    if origin is not None:
        meters = distance_meters(origin[0], origin[1], record.lat, record.lng)
        distance = int(round(meters))
        walking_time = walking_minutes(meters)

    popularity = signal_provider.current_signal(record, now)
    busyness = busyness_from_popularity(popularity)

    opening_hours = None
    if record.weekday_descriptions:
        opening_hours = OpeningHours(
            open_now=record.open_now,
            weekday_descriptions=record.weekday_descriptions,
            next_close_time=record.next_close_time,
            next_open_time=record.next_open_time,
        )

    return NormalizedLocation(
        id=record.id,
        name=record.name,
        type=kind,
        address=record.address,
        lat=record.lat,
        lng=record.lng,
        busyness=busyness,
        likelihood=likelihood_from_busyness(busyness),
        has_wifi=kind == VenueKind.CAFE,
        is_live_data=record.popularity is not None,
        distance=distance,
        walking_time=walking_time,
        rating=record.rating,
        user_ratings_total=record.user_ratings_total,
        opening_hours=opening_hours,
        open_until=closing_time_label(record.weekday_descriptions, record.open_now, now),
    )


def assemble_locations(
    records: Iterable[PlaceRecord],
    origin: Optional[Tuple[float, float]],
    now: datetime,
    kind: KindFilter = "all",
    signal_provider: Optional[SignalProvider] = None,
) -> List[NormalizedLocation]:
    """Filter and normalize a batch of place-search records around ``origin``."""
    signal_provider = signal_provider or DeclaredPopularitySignalProvider()

    locations: List[NormalizedLocation] = []
    dropped = 0
    for record in records:
        if not is_workspace_friendly(record):
            dropped += 1
            continue
        locations.append(build_location(record, origin, signal_provider, now))

    logger.info("locations_assembled", kept=len(locations), dropped=dropped)
    return filter_locations(locations, kind=kind, now=now)


def filter_locations(
    locations: Iterable[NormalizedLocation],
    now: datetime,
    kind: KindFilter = "all",
    day_offset: Optional[int] = None,
    hour: Optional[int] = None,
) -> List[NormalizedLocation]:
    """
    Keep locations of ``kind`` that are open at (day_offset, hour).

    The open check only runs when both day_offset and hour are given.
    """
    result = []
    for location in locations:
        if kind != "all" and location.type != VenueKind(kind):
            continue
        if day_offset is not None and hour is not None:
            hours_table = location.opening_hours.weekday_descriptions if location.opening_hours else None
            if not is_open_at(hours_table, day_offset, hour, now):
                continue
        result.append(location)
    return result


def hide_distance(location: NormalizedLocation) -> NormalizedLocation:
    """Copy of ``location`` without distance or walking time."""
    return location.model_copy(update={"distance": None, "walking_time": None})
