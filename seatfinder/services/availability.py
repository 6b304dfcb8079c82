# seatfinder/services/availability.py
# Seat-availability heuristics: busyness tiers, likelihood percentages and the
# predicted curve shown on the detail view.
#
# There is no live occupancy feed yet. The "current" popularity is simulated
# from time of day and rating, and the simulation sits behind SignalProvider
# so a real feed can replace it without touching the tiering below.

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator, Optional, Protocol

from seatfinder.models.dto import AvailabilitySlot, Busyness, PlaceRecord

LIKELIHOOD_BY_BUSYNESS = {
    Busyness.LOW: 85,
    Busyness.MODERATE: 50,
    Busyness.HIGH: 20,
}

BUSYNESS_LABELS = {
    Busyness.LOW: "Quiet",
    Busyness.MODERATE: "Moderate",
    Busyness.HIGH: "Busy",
}

# Inclusive hour ranges where cafes fill up
PEAK_WINDOWS = ((8, 10), (12, 14), (17, 19))
PEAK_BOOST = 30
HIGH_RATING_THRESHOLD = 4.3
HIGH_RATING_BOOST = 20


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def busyness_from_popularity(popularity: Optional[float]) -> Busyness:
    """<30 is low, 30-69 moderate, 70+ high. No signal reads as low."""
    if popularity is None:
        return Busyness.LOW
    popularity = _clamp(popularity, 0, 100)
    if popularity < 30:
        return Busyness.LOW
    if popularity < 70:
        return Busyness.MODERATE
    return Busyness.HIGH


def likelihood_from_busyness(busyness: Busyness) -> int:
    return LIKELIHOOD_BY_BUSYNESS[Busyness(busyness)]


def busyness_label(busyness: Busyness) -> str:
    return BUSYNESS_LABELS[Busyness(busyness)]


def is_peak_hour(hour: int) -> bool:
    return any(start <= hour <= end for start, end in PEAK_WINDOWS)


def current_popularity_estimate(rating: Optional[float], hour: int, rng: Optional[random.Random] = None) -> int:
    """
    Simulated popularity (0-100) for right now.

    A random baseline in [20, 80) gains 30 during peak hours and a further 20
    for venues rated above 4.3, capped at 100. Repeated calls with the same
    arguments give different answers unless ``rng`` is seeded.
    """
    rng = rng or random
    hour = int(_clamp(hour, 0, 23))

    popularity = rng.randrange(20, 80)
    if is_peak_hour(hour):
        popularity = min(100, popularity + PEAK_BOOST)
    if (rating or 0) > HIGH_RATING_THRESHOLD:
        popularity = min(100, popularity + HIGH_RATING_BOOST)
    return popularity


class LikelihoodCategory(Enum):
    """Display bands over the 0-100 likelihood scale. Finer than the busyness tiers."""

    LIKELY_AVAILABLE = ("Likely Available", "✓", "Good chance of finding workspace seating")
    MAY_BE_AVAILABLE = ("May Be Available", "○", "Seating may be available, arrive early")
    LIMITED_SEATING = ("Limited Seating", "△", "Very limited seating expected")
    LIKELY_FULL = ("Likely Full", "✕", "Likely full, consider alternative location")

    def __init__(self, label: str, icon: str, description: str):
        self.label = label
        self.icon = icon
        self.description = description


def likelihood_category(likelihood: float) -> LikelihoodCategory:
    likelihood = _clamp(likelihood, 0, 100)
    if likelihood >= 75:
        return LikelihoodCategory.LIKELY_AVAILABLE
    if likelihood >= 50:
        return LikelihoodCategory.MAY_BE_AVAILABLE
    if likelihood >= 25:
        return LikelihoodCategory.LIMITED_SEATING
    return LikelihoodCategory.LIKELY_FULL


# --- Predicted availability curve ---

@dataclass(frozen=True)
class _Anchor:
    hour: int
    time: str
    label: str
    likelihood: int


CURVE_ANCHORS = (
    _Anchor(8, "8 AM", "Early Morning", 90),
    _Anchor(10, "10 AM", "Mid Morning", 70),
    _Anchor(12, "12 PM", "Lunch", 30),
    _Anchor(14, "2 PM", "Afternoon", 60),
    _Anchor(16, "4 PM", "Late Afternoon", 50),
    _Anchor(18, "6 PM", "Evening", 40),
)

WEEKEND_BOOST = 15
WEEKEND_BOOST_HOURS = (9, 17)
FUTURE_JITTER = 5
FUTURE_BOUNDS = (20, 95)


class PredictedAvailability:
    """
    Likelihood for each anchor hour of ``now + day_offset`` days.

    Iterating yields six AvailabilitySlot values, computed on demand; iterating
    again starts over with fresh jitter for future days.
    """

    def __init__(self, day_offset: int, now: datetime, rng: Optional[random.Random] = None):
        self.day_offset = max(0, day_offset)
        self.target_day = now + timedelta(days=self.day_offset)
        self.rng = rng or random

    @property
    def is_weekend(self) -> bool:
        return self.target_day.weekday() >= 5

    def __len__(self) -> int:
        return len(CURVE_ANCHORS)

    def __iter__(self) -> Iterator[AvailabilitySlot]:
        low_hour, high_hour = WEEKEND_BOOST_HOURS
        for anchor in CURVE_ANCHORS:
            likelihood = anchor.likelihood
            if self.is_weekend and low_hour <= anchor.hour <= high_hour:
                likelihood = min(100, likelihood + WEEKEND_BOOST)
            if self.day_offset > 0:
                likelihood += self.rng.randint(-FUTURE_JITTER, FUTURE_JITTER)
                likelihood = int(_clamp(likelihood, *FUTURE_BOUNDS))

            category = likelihood_category(likelihood)
            yield AvailabilitySlot(
                time=anchor.time,
                hour=anchor.hour,
                label=anchor.label,
                likelihood=likelihood,
                status=category.label,
                icon=category.icon,
            )


def predicted_availability_curve(day_offset: int, now: datetime, rng: Optional[random.Random] = None) -> PredictedAvailability:
    return PredictedAvailability(day_offset, now, rng)


# --- Signal providers ---

class SignalProvider(Protocol):
    """Source of the 0-100 popularity signal for a venue at a given time."""

    def current_signal(self, record: PlaceRecord, at: datetime) -> int: ...


class SimulatedSignalProvider:
    """Stand-in for live occupancy data; see current_popularity_estimate."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def current_signal(self, record: PlaceRecord, at: datetime) -> int:
        return current_popularity_estimate(record.rating, at.hour, self.rng)


class DeclaredPopularitySignalProvider:
    """Trusts the popularity the place search declared, falling back when it has none."""

    def __init__(self, fallback: Optional[SignalProvider] = None):
        self.fallback = fallback or SimulatedSignalProvider()

    def current_signal(self, record: PlaceRecord, at: datetime) -> int:
        if record.popularity is not None:
            return int(_clamp(record.popularity, 0, 100))
        return self.fallback.current_signal(record, at)
