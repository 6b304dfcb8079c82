import asyncio
import json

import httpx

from seatfinder.services.places import (
    ACCESS_DENIED_MESSAGE,
    FIELD_MASK,
    GooglePlacesClient,
    included_types_for,
    parse_place,
)

RAW_PLACE = {
    "id": "ChIJ-cafe",
    "displayName": {"text": "Blue Door Coffee", "languageCode": "en"},
    "formattedAddress": "1 Market St, San Francisco, CA 94105, USA",
    "location": {"latitude": 37.7750, "longitude": -122.4195},
    "types": ["cafe", "food", "point_of_interest", "establishment"],
    "rating": 4.5,
    "userRatingCount": 812,
    "currentOpeningHours": {
        "openNow": True,
        "weekdayDescriptions": ["Monday: 7:00 AM – 6:00 PM"],
        "nextCloseTime": "2026-10-20T01:00:00Z",
    },
    "businessStatus": "OPERATIONAL",
    "dineIn": True,
    "takeout": True,
}


def make_client(handler, **kwargs):
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("initial_backoff", 0)
    return GooglePlacesClient(transport=httpx.MockTransport(handler), **kwargs)


def search(client, kind="all"):
    return asyncio.run(client.search_nearby(37.7749, -122.4194, kind))


def test_included_types():
    assert included_types_for("library") == ["library"]
    assert included_types_for("cafe") == ["cafe", "coffee_shop"]
    assert included_types_for("all") == ["cafe", "coffee_shop"]


def test_parse_place_maps_fields():
    record = parse_place(RAW_PLACE)
    assert record.id == "ChIJ-cafe"
    assert record.name == "Blue Door Coffee"
    assert record.lat == 37.7750 and record.lng == -122.4195
    assert record.rating == 4.5
    assert record.user_ratings_total == 812
    assert record.weekday_descriptions == ["Monday: 7:00 AM – 6:00 PM"]
    assert record.open_now is True
    assert record.next_close_time == "2026-10-20T01:00:00Z"
    assert record.dine_in is True and record.takeout is True
    assert record.popularity is None


def test_parse_place_skips_missing_location():
    place = dict(RAW_PLACE, location={})
    assert parse_place(place) is None


def test_parse_place_defaults_name():
    place = dict(RAW_PLACE, displayName=None)
    assert parse_place(place).name == "Unknown"


def test_search_sends_expected_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"places": [RAW_PLACE]})

    result = search(make_client(handler), kind="library")

    assert result.error is None
    assert [record.id for record in result.records] == ["ChIJ-cafe"]
    assert seen["headers"]["X-Goog-Api-Key"] == "test-key"
    assert seen["headers"]["X-Goog-FieldMask"] == FIELD_MASK
    body = seen["body"]
    assert body["includedTypes"] == ["library"]
    assert body["maxResultCount"] == 20
    assert body["rankPreference"] == "POPULARITY"
    assert body["locationRestriction"]["circle"]["radius"] == 2000.0
    assert body["locationRestriction"]["circle"]["center"] == {"latitude": 37.7749, "longitude": -122.4194}


def test_search_skips_unusable_places():
    broken = dict(RAW_PLACE, id="no-location", location=None)
    invalid = dict(RAW_PLACE, id="bad-rating", rating=11)

    def handler(request):
        return httpx.Response(200, json={"places": [broken, invalid, RAW_PLACE]})

    result = search(make_client(handler))
    assert [record.id for record in result.records] == ["ChIJ-cafe"]


def test_empty_response_is_no_results():
    result = search(make_client(lambda request: httpx.Response(200, json={})))
    assert result.records == []
    assert result.error is None


def test_missing_api_key_is_an_error_value():
    def handler(request):
        raise AssertionError("no request expected")

    result = search(make_client(handler, api_key=None))
    assert result.records == []
    assert "not configured" in result.error


def test_access_denied_message():
    result = search(make_client(lambda request: httpx.Response(403, json={"error": {}})))
    assert result.records == []
    assert result.error == ACCESS_DENIED_MESSAGE


def test_server_error_status():
    result = search(make_client(lambda request: httpx.Response(500, text="boom")))
    assert result.records == []
    assert result.error == "Google Places API error: 500"


def test_timeouts_are_retried_then_reported():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    result = search(make_client(handler, max_retries=2))
    assert len(calls) == 3
    assert result.records == []
    assert "timed out" in result.error


def test_timeout_then_success():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectTimeout("slow", request=request)
        return httpx.Response(200, json={"places": [RAW_PLACE]})

    result = search(make_client(handler, max_retries=2))
    assert len(calls) == 2
    assert len(result.records) == 1


def test_unreadable_body():
    result = search(make_client(lambda request: httpx.Response(200, text="<html>")))
    assert result.records == []
    assert result.error is not None


def test_non_object_body_is_unreadable():
    client = make_client(lambda request: httpx.Response(200, json=["unexpected"]))
    result = search(client)
    assert result.records == []
    assert result.error == "Google Places API returned an unreadable response"


def test_non_list_places_is_unreadable():
    client = make_client(lambda request: httpx.Response(200, json={"places": {"id": "x"}}))
    result = search(client)
    assert result.records == []
    assert result.error == "Google Places API returned an unreadable response"


def test_non_object_places_are_skipped():
    client = make_client(lambda request: httpx.Response(200, json={"places": [1, "x", None, RAW_PLACE]}))
    result = search(client)
    assert result.error is None
    assert [record.id for record in result.records] == ["ChIJ-cafe"]


def test_parse_place_tolerates_odd_nested_fields():
    place = dict(RAW_PLACE, location="37.7,-122.4")
    assert parse_place(place) is None

    place = dict(RAW_PLACE, displayName="Blue Door", currentOpeningHours=["Monday: Closed"])
    record = parse_place(place)
    assert record.name == "Unknown"
    assert record.weekday_descriptions is None
