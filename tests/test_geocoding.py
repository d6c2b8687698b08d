import pytest
import requests

from airtracker.services.geocoding import ReverseGeocoder, fallback_result

NOMINATIM_RESPONSE = {
    "display_name": "Manhattan, New York County, New York, United States",
    "address": {
        "town": "Manhattan",
        "state": "New York",
        "country": "United States",
        "country_code": "us",
    },
}


def test_reverse_maps_address(fake_session):
    session = fake_session(payload=NOMINATIM_RESPONSE)
    geocoder = ReverseGeocoder(base_url="https://nominatim.test/", timeout=2.0, session=session)

    result = geocoder.reverse(40.7128, -74.006)

    assert result.address == NOMINATIM_RESPONSE["display_name"]
    assert result.city == "Manhattan"
    assert result.country_code == "US"
    request = session.requests[0]
    assert request["url"] == "https://nominatim.test/reverse"
    assert request["params"]["format"] == "json"
    assert request["params"]["zoom"] == 10
    assert session.headers["User-Agent"] == "AirplaneTracker/1.0"


def test_fallback_address_format():
    assert fallback_result(40.7128, -74.006).address == "Lat: 40.712800, Lon: -74.006000"


@pytest.mark.parametrize(
    "response_kwargs",
    [
        {"error": requests.exceptions.ConnectTimeout("timed out")},
        {"status_code": 503, "payload": {}},
        {"text": "not json"},
        {"payload": {"error": "Unable to geocode"}},
    ],
)
def test_reverse_falls_back(fake_session, response_kwargs):
    geocoder = ReverseGeocoder(session=fake_session(**response_kwargs))

    result = geocoder.reverse(12.5, -3.25)

    assert result.address == "Lat: 12.500000, Lon: -3.250000"
    assert result.city is None
    assert result.to_dict()["coordinates"] == {"latitude": 12.5, "longitude": -3.25}
