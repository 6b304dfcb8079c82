# seatfinder/services/opening_hours.py
# Reads the per-weekday opening-hours lines returned by the place search,
# e.g. "Tuesday: 9:00 AM – 5:00 PM" or "Sunday: Closed".

import re
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Google separates the two times with an en dash and thin spaces, and puts a
# narrow no-break space before AM/PM. \s covers both.
_CLOCK = r"(\d{1,2}):(\d{2})\s*([AP]M)"
# The first meridiem is dropped when both times share it: "8:00 – 11:30 AM"
INTERVAL_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*([AP]M)?\s*[–—-]\s*" + _CLOCK, re.IGNORECASE)
CLOSING_TIME_PATTERN = re.compile(r"[–—]\s*(\d{1,2}:\d{2}\s*(?:AM|PM))", re.IGNORECASE)


def weekday_name(now: datetime, day_offset: int = 0) -> str:
    """English weekday name of ``now`` shifted by ``day_offset`` days."""
    return WEEKDAY_NAMES[(now + timedelta(days=day_offset)).weekday()]


def find_day_entry(hours_table: Optional[Sequence[str]], day: str) -> Optional[str]:
    """Return the line of ``hours_table`` that starts with ``"<day>:"``, if any."""
    if not hours_table:
        return None
    prefix = f"{day}:"
    for entry in hours_table:
        if entry.startswith(prefix):
            return entry
    return None


def is_closed_entry(entry: str) -> bool:
    return entry.split(":", 1)[-1].strip().lower() == "closed"


def to_24_hour(hour: int, meridiem: str) -> int:
    """12 AM -> 0, 12 PM -> 12, other PM hours gain 12."""
    meridiem = meridiem.upper()
    if meridiem == "AM":
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def parse_intervals(entry: str) -> Optional[List[Tuple[int, int]]]:
    """
    Extract every (open_hour, close_hour) pair, in 24h form, from a weekday line.

    Split days such as "7:00 AM – 12:00 PM, 1:00 – 5:00 PM" give one pair per
    interval. Each comma-separated piece must be a whole "H:MM AM – H:MM PM"
    interval; if any piece is something else the line returns None and the
    caller treats it as open. Minutes are ignored.
    """
    hours_text = entry.split(": ", 1)[-1]
    intervals = []
    for piece in hours_text.split(","):
        match = INTERVAL_PATTERN.fullmatch(piece.strip())
        if not match:
            return None
        open_h, _, open_m, close_h, _, close_m = match.groups()
        intervals.append((to_24_hour(int(open_h), open_m or close_m), to_24_hour(int(close_h), close_m)))
    return intervals


def is_open_at(hours_table: Optional[Sequence[str]], day_offset: int, hour: int, now: datetime) -> bool:
    """
    Is the venue open on ``today + day_offset`` at ``hour`` (0-23)?

    Missing tables, missing weekdays and unparseable lines all count as open
    so a venue is never hidden for lack of data. The close hour is exclusive
    and intervals running past midnight are not modelled.
    """
    entry = find_day_entry(hours_table, weekday_name(now, day_offset))
    if entry is None:
        return True
    if is_closed_entry(entry):
        return False

    intervals = parse_intervals(entry)
    if intervals is None:
        return True

    return any(open_hour <= hour < close_hour for open_hour, close_hour in intervals)


def closing_time_label(hours_table: Optional[Sequence[str]], is_open_now: Optional[bool], now: datetime) -> Optional[str]:
    """Today's closing time as printed (e.g. "9:00 PM"), only while the venue is open."""
    if not hours_table or not is_open_now:
        return None

    entry = find_day_entry(hours_table, weekday_name(now))
    if entry is None or is_closed_entry(entry):
        return None

    # Split days list one close per interval; report the last
    closes = CLOSING_TIME_PATTERN.findall(entry)
    if not closes:
        return None
    # Normalise thin / no-break spaces to a plain space
    return re.sub(r"\s+", " ", closes[-1])
