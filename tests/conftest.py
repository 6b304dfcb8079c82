from datetime import datetime

import pytest

from seatfinder.models.dto import PlaceRecord

# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19, 11, 0)
TUESDAY = datetime(2026, 10, 20, 10, 0)
SATURDAY = datetime(2026, 10, 24, 10, 0)

SF_ORIGIN = (37.7749, -122.4194)

# Shaped like Google's weekdayDescriptions: thin spaces around the dash and a
# narrow no-break space before AM/PM.
WEEK_HOURS = [
    "Monday: Closed",
    "Tuesday: 9:00 AM – 5:00 PM",
    "Wednesday: 7:00 AM – 9:00 PM",
    "Thursday: 7:00 AM – 9:00 PM",
    "Friday: 7:00 AM – 10:00 PM",
    "Saturday: 8:00 AM – 6:00 PM",
    "Sunday: 8:00 AM – 6:00 PM",
]


class StubRandom:
    """Stands in for random.Random, always drawing the same number."""

    def __init__(self, value: int):
        self.value = value

    def randrange(self, start, stop):
        return self.value

    def randint(self, a, b):
        return self.value


class FixedSignalProvider:
    def __init__(self, value: int):
        self.value = value

    def current_signal(self, record, at):
        return self.value


@pytest.fixture
def make_record():
    def _make(**overrides) -> PlaceRecord:
        fields = {
            "id": "place-1",
            "name": "Blue Door Coffee",
            "types": ["cafe", "food", "point_of_interest"],
            "address": "1 Market St, San Francisco, CA",
            "lat": 37.7750,
            "lng": -122.4195,
            "rating": 4.5,
            "user_ratings_total": 812,
            "weekday_descriptions": list(WEEK_HOURS),
            "open_now": True,
        }
        fields.update(overrides)
        return PlaceRecord(**fields)

    return _make
