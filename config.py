"""
Configuration — loads from .env, provides defaults.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Lookup API used by the widget (reverse / geocode / weather live under it)
WEATHER_API_BASE = os.getenv("WEATHER_API_BASE", "http://127.0.0.1:8080/api").rstrip("/")
# Unset = no timeout on the foreground lookups
API_TIMEOUT = float(os.environ["API_TIMEOUT"]) if os.getenv("API_TIMEOUT") else None

# Location detection
DETECT_LOCATION = os.getenv("DETECT_LOCATION", "true").lower() == "true"
LOCATION_TIMEOUT = float(os.getenv("LOCATION_TIMEOUT", "10"))  # seconds

# Widget web app
DASHBOARD_HOST = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT = int(os.getenv("DASHBOARD_PORT", "8080"))
DASHBOARD_SECRET = os.getenv("DASHBOARD_SECRET", "change-me-in-production")

# Telegram (optional — leave the token empty to run the web widget only)
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
OWNER_CHAT_ID = int(os.getenv("OWNER_CHAT_ID", "0"))

# Lookup backend upstreams
GEO_URL = os.getenv("GEO_URL", "https://geocoding-api.open-meteo.com/v1/search")
FORECAST_URL = os.getenv("FORECAST_URL", "https://api.open-meteo.com/v1/forecast")
REVERSE_URL = os.getenv("REVERSE_URL", "https://nominatim.openstreetmap.org/reverse")
HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "10"))  # seconds
USER_AGENT = os.getenv("USER_AGENT", "WeatherChecker/1.0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
