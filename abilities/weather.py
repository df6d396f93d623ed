"""
Weather ability — client for the lookup API the widget talks to.

Three endpoints live under WEATHER_API_BASE:
  /reverse?lat=&lon=   → {name, country}
  /geocode?name=       → {name, lat, lon, country}
  /weather?lat=&lon=   → {current: {weather_code, temperature_2m, ...}}

No retries. Network errors and non-success responses are translated
into the exceptions below so callers never see requests' own errors.
"""

import logging
from typing import Optional

import requests

from config import WEATHER_API_BASE, API_TIMEOUT
from models import CurrentWeatherReading, DetectedPlace, GeocodedPlace

log = logging.getLogger(__name__)


class WeatherLookupError(Exception):
    """A failed foreground lookup. The message is shown to the user as-is."""

    default_message = "Something went wrong"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)


class ValidationError(WeatherLookupError):
    default_message = "Please type a city"


class CityNotFound(WeatherLookupError):
    default_message = "City not found"


class WeatherFetchFailed(WeatherLookupError):
    default_message = "Weather fetch failed"


class ServiceUnreachable(WeatherLookupError):
    pass


class DetectionFailure(Exception):
    """Reverse geocoding failed. Never shown to the user."""


class GeoWeatherClient:
    def __init__(self, base_url: str = WEATHER_API_BASE, timeout: Optional[float] = API_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict) -> requests.Response:
        return self.session.get(f"{self.base_url}/{path}", params=params, timeout=self.timeout)

    def reverse_geocode(self, lat: float, lon: float) -> DetectedPlace:
        try:
            resp = self._get("reverse", {"lat": lat, "lon": lon})
        except requests.RequestException as e:
            raise DetectionFailure(f"reverse lookup unreachable: {e}") from e
        if not resp.ok:
            raise DetectionFailure(f"reverse lookup returned {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise DetectionFailure("reverse lookup returned invalid JSON") from e
        if not isinstance(data, dict) or not data.get("name"):
            raise DetectionFailure("reverse lookup returned no place name")
        return DetectedPlace(name=data["name"], country=data.get("country") or None)

    def forward_geocode(self, name: str) -> GeocodedPlace:
        # requests URL-encodes the name
        try:
            resp = self._get("geocode", {"name": name})
        except requests.RequestException as e:
            log.warning(f"Geocode request for {name!r} failed: {e}")
            raise ServiceUnreachable() from e
        if not resp.ok:
            raise CityNotFound()
        try:
            return GeocodedPlace.from_payload(resp.json())
        except (ValueError, KeyError, TypeError) as e:
            log.warning(f"Unusable geocode payload for {name!r}: {e}")
            raise CityNotFound() from e

    def fetch_current_weather(self, lat: float, lon: float) -> CurrentWeatherReading:
        try:
            resp = self._get("weather", {"lat": lat, "lon": lon})
        except requests.RequestException as e:
            log.warning(f"Weather request for {lat},{lon} failed: {e}")
            raise ServiceUnreachable() from e
        if not resp.ok:
            raise WeatherFetchFailed()
        try:
            return CurrentWeatherReading.from_payload(resp.json())
        except (ValueError, KeyError, TypeError) as e:
            log.warning(f"Unusable weather payload for {lat},{lon}: {e}")
            raise WeatherFetchFailed() from e
