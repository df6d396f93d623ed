"""
View derivation — turns controller state into what the widget and the
chat surface display.
"""

from controller import LocationWeatherController
from models import JokeCard, ReportCard, WeatherCard

NOT_DETECTED = "Could not detect city from location."


def detected_text(controller: LocationWeatherController) -> str:
    place = controller.detected_place
    if place is None or not place.name:
        return NOT_DETECTED
    return f"Detected city: {place.label}"


def card_text(card: WeatherCard) -> str:
    """Plain-text rendering of a weather card (empty for no card)."""
    if isinstance(card, JokeCard):
        return f"😂 {card.joke}"
    if isinstance(card, ReportCard):
        return (
            f"{card.title}\n"
            f"{card.desc}\n"
            f"{card.temp}°C (feels {card.feels}°C)\n"
            f"Wind: {card.wind} km/h"
        )
    return ""


def build_view(controller: LocationWeatherController) -> dict:
    card = controller.card
    place = controller.detected_place
    return {
        "typed": controller.typed,
        "detected": place.name if place else None,
        "detected_country": place.country if place else None,
        "detected_text": detected_text(controller),
        "detection_status": controller.detection_status,
        "check_status": controller.check_status,
        "loading": controller.loading,
        "button_label": "…" if controller.loading else "Check",
        "error": controller.error,
        "card_kind": card.kind if card is not None else None,
        "card": card.to_dict() if card is not None else None,
    }
