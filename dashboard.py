"""
Widget — Flask web UI for the weather checker.

Provides:
  - The widget page (type a city, hit Check, see the card)
  - Browser geolocation bridge feeding the background detection
  - REST API for the widget state and checks
  - The lookup backend (/api/reverse, /api/geocode, /api/weather)
    that GeoWeatherClient talks to by default
"""

import asyncio
import logging
import threading

import requests
from flask import Flask, render_template, request, jsonify, redirect, url_for

from abilities import upstream
from abilities.location import BrowserLocationProvider
from config import DASHBOARD_SECRET
from models import Coordinates
from views import build_view

log = logging.getLogger(__name__)

_controller = None  # set via create_app()
_detection_thread = None
_detection_lock = threading.Lock()


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def start_detection() -> bool:
    """Kick off the one-time background detection. True if it started now."""
    global _detection_thread
    with _detection_lock:
        if _detection_thread is not None:
            return False
        _detection_thread = threading.Thread(
            target=_run, args=(_controller.detect_location(),), daemon=True,
        )
        _detection_thread.start()
    return True


def _float_arg(name: str):
    try:
        return float(request.args[name])
    except (KeyError, ValueError):
        return None


def create_app(controller):
    global _controller, _detection_thread
    _controller = controller
    _detection_thread = None

    app = Flask(__name__)
    app.secret_key = DASHBOARD_SECRET

    # ── Pages ───────────────────────────────────────────────

    @app.route("/")
    def index():
        start_detection()
        provider = _controller.location_provider
        geolocate = isinstance(provider, BrowserLocationProvider) and provider.pending
        return render_template(
            "widget.html",
            view=build_view(_controller),
            geolocate=geolocate,
            position_options=provider.options.to_js(),
        )

    # ── Form actions (from the widget) ──────────────────────

    @app.route("/action/check", methods=["POST"])
    def action_check():
        _run(_controller.check(request.form.get("city", "")))
        return redirect(url_for("index"))

    # ── Widget API ──────────────────────────────────────────

    @app.route("/api/state", methods=["GET"])
    def api_state():
        return jsonify(build_view(_controller))

    @app.route("/api/check", methods=["POST"])
    def api_check():
        data = request.get_json(silent=True) or {}
        _run(_controller.check(data.get("city", "")))
        return jsonify(build_view(_controller))

    @app.route("/api/location", methods=["POST"])
    def api_location():
        provider = _controller.location_provider
        if not isinstance(provider, BrowserLocationProvider):
            return jsonify({"error": "browser location is not in use"}), 409
        data = request.get_json(silent=True) or {}
        if data.get("error"):
            accepted = provider.deny(str(data["error"]))
        else:
            try:
                coords = Coordinates(lat=float(data["lat"]), lon=float(data["lon"]))
            except (KeyError, TypeError, ValueError):
                return jsonify({"error": "lat and lon are required"}), 400
            accepted = provider.resolve(coords)
        return jsonify({"status": "ok" if accepted else "ignored"})

    # ── Lookup backend ──────────────────────────────────────

    @app.route("/api/reverse", methods=["GET"])
    def api_reverse():
        lat, lon = _float_arg("lat"), _float_arg("lon")
        if lat is None or lon is None:
            return jsonify({"error": "lat and lon are required"}), 400
        return _lookup("reverse", upstream.reverse_lookup, lat, lon)

    @app.route("/api/geocode", methods=["GET"])
    def api_geocode():
        name = request.args.get("name", "").strip()
        if not name:
            return jsonify({"error": "name is required"}), 400
        return _lookup("geocode", upstream.search_city, name)

    @app.route("/api/weather", methods=["GET"])
    def api_weather():
        lat, lon = _float_arg("lat"), _float_arg("lon")
        if lat is None or lon is None:
            return jsonify({"error": "lat and lon are required"}), 400
        return _lookup("weather", upstream.current_conditions, lat, lon)

    return app


def _lookup(what: str, fn, *args):
    try:
        return jsonify(fn(*args))
    except upstream.PlaceNotFound as e:
        return jsonify({"error": str(e)}), 404
    except (requests.RequestException, KeyError, ValueError) as e:
        log.error(f"Upstream {what} lookup {args} failed: {e}")
        return jsonify({"error": "upstream lookup failed"}), 502
