"""
Controller — owns the widget state and orchestrates the lookups.

Two independent flows share state:
  - Background detection (runs once): ask the LocationProvider for a
    position, reverse-geocode it, remember the place. Failures are
    silent; the place simply stays absent.
  - Foreground check (re-enterable): validate the typed city, answer
    with a joke if it is the detected city, otherwise geocode it and
    fetch its current weather. Failures land in `error`.

The detected place is write-once and only read by checks. Overlapping
checks are neither cancelled nor sequenced: whichever finishes last
owns card/error/loading.
"""

from __future__ import annotations
import asyncio
import logging
import math
from typing import Optional

from abilities.location import LocationProvider, LocationDenied
from abilities.weather import (
    GeoWeatherClient,
    WeatherLookupError,
    ValidationError,
    DetectionFailure,
)
from abilities.weather_codes import describe
from models import (
    Coordinates,
    CurrentWeatherReading,
    DetectedPlace,
    GeocodedPlace,
    JokeCard,
    PlaceCell,
    ReportCard,
    WeatherCard,
    with_country,
)

log = logging.getLogger(__name__)

JOKE = "You are literally in {city}. Just go look outside!"


def round_half_away(value: float) -> int:
    """Round to nearest, halves away from zero (2.5 → 3, -2.5 → -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def build_report(place: GeocodedPlace, reading: CurrentWeatherReading) -> ReportCard:
    return ReportCard(
        title=with_country(place.name, place.country),
        desc=describe(reading.weather_code),
        temp=round_half_away(reading.temperature),
        feels=round_half_away(reading.apparent_temperature),
        wind=round_half_away(reading.wind_speed),
    )


def same_city(place: Optional[DetectedPlace], text: str) -> bool:
    # Name only: country and coordinates are ignored.
    if place is None or not place.name or not text:
        return False
    return place.name.strip().lower() == text.strip().lower()


class LocationWeatherController:
    def __init__(self, client: GeoWeatherClient, location_provider: LocationProvider):
        self.client = client
        self.location_provider = location_provider

        self.typed = ""
        self.detected = PlaceCell()
        self.coords: Optional[Coordinates] = None
        self.card: WeatherCard = None
        self.error: Optional[str] = None
        self.loading = False

        self.detection_status = "idle"  # idle, detecting, detected, detection_failed
        self.check_status = "ready"     # ready, checking, reported, joked, failed

    @property
    def detected_place(self) -> Optional[DetectedPlace]:
        return self.detected.get()

    # ── Background detection ────────────────────────────────────

    async def detect_location(self) -> Optional[DetectedPlace]:
        """Run the one-time location detection. Later calls are no-ops."""
        if self.detection_status != "idle":
            return self.detected_place
        self.detection_status = "detecting"

        if not self.location_provider.available:
            log.info("Location detection unavailable on this host")
            self.detection_status = "detection_failed"
            return None

        try:
            coords = await self.location_provider.request_current_position()
        except LocationDenied as e:
            log.info(f"Location not detected: {e}")
            self.detection_status = "detection_failed"
            return None
        self.coords = coords

        try:
            place = await asyncio.to_thread(self.client.reverse_geocode, coords.lat, coords.lon)
        except DetectionFailure as e:
            log.warning(f"Reverse geocoding failed: {e}")
            self.detection_status = "detection_failed"
            return None

        self.detected.set(place)
        self.detection_status = "detected"
        log.info(f"Detected city: {place.label}")
        return place

    # ── Foreground check ────────────────────────────────────────

    def is_same_city(self, text: str) -> bool:
        return same_city(self.detected_place, text)

    async def check(self, text: str) -> str:
        """
        Look up the weather for `text`. Returns the resulting check
        status: "reported", "joked" or "failed".
        """
        self.typed = text or ""
        self.error = None
        self.card = None
        self.check_status = "checking"
        try:
            city = (text or "").strip()
            if not city:
                raise ValidationError()

            if self.is_same_city(city):
                self.card = JokeCard(joke=JOKE.format(city=city))
                self.check_status = "joked"
                log.info(f"Check for {city!r} answered with a joke")
                return self.check_status

            self.loading = True
            place = await asyncio.to_thread(self.client.forward_geocode, city)
            reading = await asyncio.to_thread(self.client.fetch_current_weather, place.lat, place.lon)
            self.card = build_report(place, reading)
            self.check_status = "reported"
            log.info(f"Weather for {self.card.title}: {self.card.desc}, {self.card.temp}°C")
        except WeatherLookupError as e:
            self.error = str(e)
            self.check_status = "failed"
            log.warning(f"Check for {text!r} failed: {e}")
        finally:
            self.loading = False
        return self.check_status
