"""Pytest configuration and fixtures."""

import pytest

from abilities.location import LocationDenied, LocationProvider
from abilities.weather import CityNotFound, DetectionFailure, WeatherFetchFailed
from controller import LocationWeatherController
from models import Coordinates, CurrentWeatherReading, DetectedPlace, GeocodedPlace


class FakeClient:
    """Stands in for GeoWeatherClient; records every call."""

    def __init__(self, place=None, reading=None, detected=None, fail=None):
        self.place = place
        self.reading = reading
        self.detected = detected
        self.fail = fail or {}
        self.calls = []
        self.loading_seen = []
        self.controller = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.controller is not None:
            self.loading_seen.append(self.controller.loading)
        if name in self.fail:
            raise self.fail[name]

    def reverse_geocode(self, lat, lon):
        self._record("reverse_geocode", lat, lon)
        return self.detected

    def forward_geocode(self, name):
        self._record("forward_geocode", name)
        return self.place

    def fetch_current_weather(self, lat, lon):
        self._record("fetch_current_weather", lat, lon)
        return self.reading


class FakeLocationProvider(LocationProvider):
    def __init__(self, coords=None, denied=False):
        super().__init__()
        self.coords = coords
        self.denied = denied

    async def _wait_for_fix(self):
        if self.denied:
            raise LocationDenied("permission denied")
        return self.coords


@pytest.fixture
def paris():
    return GeocodedPlace(name="Paris", lat=48.85, lon=2.35, country="France")


@pytest.fixture
def light_rain():
    return CurrentWeatherReading(
        weather_code=61, temperature=15.4, apparent_temperature=14.6, wind_speed=11.9,
    )


@pytest.fixture
def client(paris, light_rain):
    return FakeClient(
        place=paris,
        reading=light_rain,
        detected=DetectedPlace(name="Colombo", country="Sri Lanka"),
    )


@pytest.fixture
def make_controller(client):
    """Build a controller around the fake client, optionally pre-detected."""

    def _make(detected=None, provider=None):
        ctl = LocationWeatherController(client, provider or FakeLocationProvider(Coordinates(6.9, 79.86)))
        if detected is not None:
            ctl.detected.set(detected)
            ctl.detection_status = "detected"
        client.controller = ctl
        return ctl

    return _make


@pytest.fixture
def failures():
    return {
        "city_not_found": CityNotFound(),
        "weather_failed": WeatherFetchFailed(),
        "detection": DetectionFailure("reverse lookup returned 500"),
    }
