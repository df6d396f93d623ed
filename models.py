"""
Data models for places, readings, and weather cards.

All values are immutable snapshots held in controller state.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
import threading
from typing import Optional, Union


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class DetectedPlace:
    name: str
    country: Optional[str] = None

    @property
    def label(self) -> str:
        return with_country(self.name, self.country)


@dataclass(frozen=True)
class GeocodedPlace:
    name: str
    lat: float
    lon: float
    country: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> GeocodedPlace:
        return cls(
            name=data["name"],
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            country=data.get("country") or None,
        )


@dataclass(frozen=True)
class CurrentWeatherReading:
    weather_code: int
    temperature: float           # °C
    apparent_temperature: float  # °C
    wind_speed: float            # km/h

    @classmethod
    def from_payload(cls, data: dict) -> CurrentWeatherReading:
        cur = data["current"]
        return cls(
            weather_code=int(cur["weather_code"]),
            temperature=float(cur["temperature_2m"]),
            apparent_temperature=float(cur["apparent_temperature"]),
            wind_speed=float(cur["wind_speed_10m"]),
        )


@dataclass(frozen=True)
class PositionOptions:
    high_accuracy: bool = True
    timeout: float = 10.0  # seconds
    maximum_age: int = 0   # never accept a cached fix

    def to_js(self) -> dict:
        return {
            "enableHighAccuracy": self.high_accuracy,
            "timeout": int(self.timeout * 1000),
            "maximumAge": self.maximum_age,
        }


# ── Weather card (tagged union: JokeCard | ReportCard | None) ──


@dataclass(frozen=True)
class JokeCard:
    joke: str
    kind: str = "joke"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReportCard:
    title: str
    desc: str
    temp: int
    feels: int
    wind: int
    kind: str = "report"

    def to_dict(self) -> dict:
        return asdict(self)


WeatherCard = Union[JokeCard, ReportCard, None]


def with_country(name: str, country: Optional[str]) -> str:
    return f"{name} ({country})" if country else name


class PlaceCell:
    """
    Holds the detected place. Set at most once, read any number of times.
    """

    def __init__(self):
        self._value: Optional[DetectedPlace] = None
        self._lock = threading.Lock()

    def set(self, place: DetectedPlace):
        with self._lock:
            if self._value is not None:
                raise RuntimeError("detected place is already set")
            self._value = place

    def get(self) -> Optional[DetectedPlace]:
        return self._value

    def __bool__(self) -> bool:
        return self._value is not None
