"""
WMO weather interpretation codes, as reported by Open-Meteo.
"""

UNKNOWN = "—"

WEATHER_CODES = {
    0: "Clear sky", 1: "Mainly clear", 2: "Partly cloudy", 3: "Overcast",
    45: "Fog", 48: "Depositing rime fog", 51: "Light drizzle", 53: "Drizzle",
    55: "Heavy drizzle", 61: "Light rain", 63: "Rain", 65: "Heavy rain",
    71: "Light snow", 73: "Snow", 75: "Heavy snow", 80: "Rain showers",
    81: "Rain showers", 82: "Heavy showers", 95: "Thunderstorm",
}


def describe(code) -> str:
    """Human description for a weather code. Never raises."""
    try:
        return WEATHER_CODES.get(code, UNKNOWN)
    except TypeError:  # unhashable
        return UNKNOWN
