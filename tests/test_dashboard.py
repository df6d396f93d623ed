"""Integration tests for the Flask widget and lookup backend."""

from unittest.mock import patch

import pytest
import requests

import dashboard
from abilities import upstream
from abilities.location import BrowserLocationProvider
from models import Coordinates, DetectedPlace


@pytest.fixture
def provider():
    return BrowserLocationProvider()


@pytest.fixture
def web(make_controller, provider):
    ctl = make_controller(provider=provider)
    app = dashboard.create_app(ctl)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c, ctl


class TestWidget:

    def test_index_renders_and_starts_detection(self, web):
        c, ctl = web
        with patch.object(dashboard, "start_detection") as start:
            resp = c.get("/")
        assert resp.status_code == 200
        body = resp.get_data(as_text=True)
        assert "Weather Checker" in body
        assert "Could not detect city from location." in body
        assert "navigator.geolocation" in body
        start.assert_called_once()

    def test_index_shows_detected_city(self, web):
        c, ctl = web
        ctl.detected.set(DetectedPlace("Colombo", "Sri Lanka"))
        with patch.object(dashboard, "start_detection"):
            body = c.get("/").get_data(as_text=True)
        assert "<strong>Colombo</strong> (Sri Lanka)" in body

    def test_form_check_renders_report(self, web):
        c, ctl = web
        with patch.object(dashboard, "start_detection"):
            resp = c.post("/action/check", data={"city": "Paris"}, follow_redirects=True)
        body = resp.get_data(as_text=True)
        assert "Paris (France)" in body
        assert "Light rain" in body
        assert "Wind: 12 km/h" in body

    def test_api_check_empty_city(self, web, client):
        c, ctl = web
        data = c.post("/api/check", json={"city": "  "}).get_json()
        assert data["error"] == "Please type a city"
        assert data["card"] is None
        assert data["loading"] is False
        assert client.calls == []

    def test_api_check_joke(self, web, client):
        c, ctl = web
        ctl.detected.set(DetectedPlace("Colombo", "Sri Lanka"))
        data = c.post("/api/check", json={"city": "colombo"}).get_json()
        assert data["card_kind"] == "joke"
        assert data["card"]["joke"] == "You are literally in colombo. Just go look outside!"
        assert client.calls == []

    def test_api_state(self, web):
        c, ctl = web
        data = c.get("/api/state").get_json()
        assert data["detection_status"] == "idle"
        assert data["check_status"] == "ready"


class TestLocationBridge:

    def test_posted_fix_resolves_provider(self, web, provider):
        c, ctl = web
        resp = c.post("/api/location", json={"lat": 6.9, "lon": 79.86})
        assert resp.get_json() == {"status": "ok"}
        assert provider.pending is False
        assert provider._fix.result() == Coordinates(6.9, 79.86)

    def test_second_post_is_ignored(self, web):
        c, ctl = web
        c.post("/api/location", json={"error": "User denied Geolocation"})
        resp = c.post("/api/location", json={"lat": 6.9, "lon": 79.86})
        assert resp.get_json() == {"status": "ignored"}

    def test_bad_coordinates(self, web):
        c, ctl = web
        resp = c.post("/api/location", json={"lat": "north"})
        assert resp.status_code == 400

    def test_detection_runs_once_in_background(self, web, provider, client):
        c, ctl = web
        provider.resolve(Coordinates(6.9, 79.86))
        assert dashboard.start_detection() is True
        assert dashboard.start_detection() is False
        dashboard._detection_thread.join(timeout=5)
        assert ctl.detected_place == DetectedPlace("Colombo", "Sri Lanka")


class TestLookupBackend:

    def test_geocode(self, web):
        c, _ = web
        place = {"name": "Paris", "lat": 48.85, "lon": 2.35, "country": "France"}
        with patch.object(upstream, "search_city", return_value=place) as search:
            resp = c.get("/api/geocode?name=Paris")
        assert resp.get_json() == place
        search.assert_called_once_with("Paris")

    def test_geocode_not_found(self, web):
        c, _ = web
        with patch.object(upstream, "search_city", side_effect=upstream.PlaceNotFound("City not found: X")):
            resp = c.get("/api/geocode?name=X")
        assert resp.status_code == 404

    def test_geocode_requires_name(self, web):
        c, _ = web
        assert c.get("/api/geocode").status_code == 400

    def test_weather_upstream_failure(self, web):
        c, _ = web
        with patch.object(upstream, "current_conditions", side_effect=requests.ConnectionError("down")):
            resp = c.get("/api/weather?lat=1&lon=2")
        assert resp.status_code == 502

    def test_reverse(self, web):
        c, _ = web
        with patch.object(upstream, "reverse_lookup", return_value={"name": "Colombo", "country": "Sri Lanka"}) as rev:
            resp = c.get("/api/reverse?lat=6.9&lon=79.86")
        assert resp.get_json()["name"] == "Colombo"
        rev.assert_called_once_with(6.9, 79.86)

    def test_reverse_requires_coordinates(self, web):
        c, _ = web
        assert c.get("/api/reverse?lat=abc").status_code == 400
