"""
Lookup backend — free, no API key required.

Uses Open-Meteo geocoding + forecast APIs, and OpenStreetMap
Nominatim for reverse geocoding. Results are shaped the way the
widget's GeoWeatherClient expects them.
"""

import requests

from config import GEO_URL, FORECAST_URL, REVERSE_URL, HTTP_TIMEOUT, USER_AGENT

CURRENT_FIELDS = "weather_code,temperature_2m,apparent_temperature,wind_speed_10m"


class PlaceNotFound(Exception):
    pass


def search_city(name: str) -> dict:
    resp = requests.get(GEO_URL, params={"name": name, "count": 1}, timeout=HTTP_TIMEOUT)
    resp.raise_for_status()
    results = resp.json().get("results")
    if not results:
        raise PlaceNotFound(f"City not found: {name}")
    geo = results[0]
    return {
        "name": geo.get("name", name),
        "lat": geo["latitude"],
        "lon": geo["longitude"],
        "country": geo.get("country"),
    }


def reverse_lookup(lat: float, lon: float) -> dict:
    resp = requests.get(
        REVERSE_URL,
        params={"lat": lat, "lon": lon, "format": "json", "addressdetails": 1},
        headers={"User-Agent": USER_AGENT},
        timeout=HTTP_TIMEOUT,
    )
    resp.raise_for_status()
    address = resp.json().get("address", {})
    name = address.get("city") or address.get("town") or address.get("village") or address.get("county")
    if not name:
        raise PlaceNotFound(f"No named place at {lat},{lon}")
    return {"name": name, "country": address.get("country")}


def current_conditions(lat: float, lon: float) -> dict:
    resp = requests.get(
        FORECAST_URL,
        params={
            "latitude": lat,
            "longitude": lon,
            "current": CURRENT_FIELDS,
            "temperature_unit": "celsius",
            "wind_speed_unit": "kmh",
        },
        timeout=HTTP_TIMEOUT,
    )
    resp.raise_for_status()
    cur = resp.json()["current"]
    return {"current": {k: cur[k] for k in CURRENT_FIELDS.split(",")}}
