import pytest

from conftest import MONDAY, TUESDAY, WEEK_HOURS
from seatfinder.services.opening_hours import (
    closing_time_label,
    find_day_entry,
    is_open_at,
    parse_intervals,
    to_24_hour,
    weekday_name,
)


def test_weekday_name_with_offset():
    assert weekday_name(MONDAY) == "Monday"
    assert weekday_name(MONDAY, 1) == "Tuesday"
    assert weekday_name(MONDAY, 6) == "Sunday"
    assert weekday_name(MONDAY, 7) == "Monday"


@pytest.mark.parametrize(
    "hour, meridiem, expected",
    [(12, "AM", 0), (1, "AM", 1), (11, "AM", 11), (12, "PM", 12), (1, "PM", 13), (11, "pm", 23)],
)
def test_to_24_hour(hour, meridiem, expected):
    assert to_24_hour(hour, meridiem) == expected


def test_parse_intervals_google_spacing():
    assert parse_intervals("Tuesday: 9:00 AM – 5:00 PM") == [(9, 17)]


def test_parse_intervals_shared_meridiem():
    assert parse_intervals("Friday: 8:00 – 11:30 AM") == [(8, 11)]


def test_parse_intervals_rejects_other_text():
    assert parse_intervals("Sunday: Open 24 hours") is None
    assert parse_intervals("Sunday: 9:00 AM – 5:00 PM (holiday hours)") is None


def test_parse_intervals_split_day():
    line = "Tuesday: 7:00 AM – 12:00 PM, 1:00 – 5:00 PM"
    assert parse_intervals(line) == [(7, 12), (13, 17)]


@pytest.mark.parametrize("hour, expected", [(6, False), (10, True), (12, False), (15, True), (17, False)])
def test_split_day_is_open_in_either_interval(hour, expected):
    hours = ["Tuesday: 7:00 AM – 12:00 PM, 1:00 – 5:00 PM"]
    assert is_open_at(hours, 0, hour, TUESDAY) is expected


def test_split_day_with_unreadable_piece_fails_open():
    hours = ["Tuesday: 7:00 AM – 12:00 PM, by appointment"]
    assert is_open_at(hours, 0, 15, TUESDAY) is True


@pytest.mark.parametrize("hour, expected", [(8, False), (9, True), (16, True), (17, False)])
def test_open_interval_close_hour_exclusive(hour, expected):
    hours = ["Tuesday: 9:00 AM – 5:00 PM"]
    assert is_open_at(hours, 0, hour, TUESDAY) is expected


@pytest.mark.parametrize("hour", range(24))
def test_closed_day_is_never_open(hour):
    assert is_open_at(WEEK_HOURS, 0, hour, MONDAY) is False


def test_day_offset_selects_future_weekday():
    # Monday + 1 = Tuesday, 9-5
    assert is_open_at(WEEK_HOURS, 1, 8, MONDAY) is False
    assert is_open_at(WEEK_HOURS, 1, 12, MONDAY) is True
    # Monday + 4 = Friday, 7-22
    assert is_open_at(WEEK_HOURS, 4, 21, MONDAY) is True


def test_table_order_does_not_matter():
    shuffled = list(reversed(WEEK_HOURS))
    assert is_open_at(shuffled, 0, 12, TUESDAY) is True
    assert is_open_at(shuffled, 0, 12, MONDAY) is False


@pytest.mark.parametrize("table", [None, [], ["Wednesday: 7:00 AM – 9:00 PM"]])
def test_missing_data_fails_open(table):
    assert is_open_at(table, 0, 3, TUESDAY) is True


def test_unparseable_entry_fails_open():
    assert is_open_at(["Tuesday: Open 24 hours"], 0, 3, TUESDAY) is True
    assert is_open_at(["Tuesday: ask the barista"], 0, 23, TUESDAY) is True


def test_find_day_entry_requires_prefix():
    assert find_day_entry(["Tuesday: Closed"], "Tuesday") == "Tuesday: Closed"
    assert find_day_entry(["Tuesday: Closed"], "Monday") is None


def test_closing_time_label_when_open():
    assert closing_time_label(WEEK_HOURS, True, TUESDAY) == "5:00 PM"


def test_closing_time_label_normalises_spaces():
    hours = ["Tuesday: 9:00 AM – 5:00 PM"]
    assert closing_time_label(hours, True, TUESDAY) == "5:00 PM"


def test_closing_time_label_absent_when_closed_or_unknown():
    assert closing_time_label(WEEK_HOURS, False, TUESDAY) is None
    assert closing_time_label(WEEK_HOURS, None, TUESDAY) is None
    assert closing_time_label(WEEK_HOURS, True, MONDAY) is None
    assert closing_time_label(None, True, TUESDAY) is None


def test_closing_time_label_split_day_uses_last_close():
    hours = ["Tuesday: 7:00 AM – 12:00 PM, 1:00 – 5:00 PM"]
    assert closing_time_label(hours, True, TUESDAY) == "5:00 PM"
