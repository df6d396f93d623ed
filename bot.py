"""
Weather Checker — process entry point.

Serves the web widget, and when TELEGRAM_BOT_TOKEN is set also runs a
Telegram bot on top of the same lookup flow (one controller per chat).

Usage:
  python bot.py
"""

import logging
import threading

from telegram import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    ApplicationBuilder,
    CommandHandler,
    MessageHandler,
    filters,
    ContextTypes,
)

from abilities.location import (
    BrowserLocationProvider,
    ChatLocationProvider,
    UnavailableLocationProvider,
)
from abilities.weather import GeoWeatherClient
from config import (
    TELEGRAM_BOT_TOKEN,
    OWNER_CHAT_ID,
    DASHBOARD_HOST,
    DASHBOARD_PORT,
    DETECT_LOCATION,
    LOG_LEVEL,
)
from controller import LocationWeatherController
from models import Coordinates
from views import card_text, detected_text

logging.basicConfig(
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    level=LOG_LEVEL,
)
log = logging.getLogger("bot")

client = GeoWeatherClient()
chats: dict[int, LocationWeatherController] = {}


def _controller_for(chat_id: int) -> LocationWeatherController:
    controller = chats.get(chat_id)
    if controller is None:
        provider = ChatLocationProvider() if DETECT_LOCATION else UnavailableLocationProvider()
        controller = LocationWeatherController(client, provider)
        chats[chat_id] = controller
    return controller


# ── Auth ────────────────────────────────────────────────────────

def owner_only(func):
    """Restrict to OWNER_CHAT_ID. Set to 0 in .env to allow everyone."""
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if OWNER_CHAT_ID and update.effective_chat.id != OWNER_CHAT_ID:
            await update.message.reply_text("Not authorized.")
            return
        return await func(update, context)
    return wrapper


# ── Command handlers ────────────────────────────────────────────

async def _detect_and_report(chat_id: int, context: ContextTypes.DEFAULT_TYPE):
    controller = _controller_for(chat_id)
    await controller.detect_location()
    await context.bot.send_message(
        chat_id=chat_id,
        text=detected_text(controller),
        reply_markup=ReplyKeyboardRemove(),
    )


@owner_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    chat_id = update.effective_chat.id
    controller = _controller_for(chat_id)
    await update.message.reply_text(
        "Weather Checker. Commands:\n\n"
        "/check <city>  — current weather for a city\n"
        "/where  — the city you were detected in\n"
        "/help  — show this message\n\n"
        "Or just send a city name. Search your own city for a cheeky reminder 😉"
    )
    if controller.detection_status != "idle" or not controller.location_provider.available:
        return
    button = KeyboardButton("Share my location", request_location=True)
    await update.message.reply_text(
        "Share your location so I know where you are.",
        reply_markup=ReplyKeyboardMarkup([[button]], one_time_keyboard=True, resize_keyboard=True),
    )
    context.application.create_task(_detect_and_report(chat_id, context))


@owner_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await cmd_start(update, context)


@owner_only
async def cmd_where(update: Update, context: ContextTypes.DEFAULT_TYPE):
    controller = _controller_for(update.effective_chat.id)
    await update.message.reply_text(detected_text(controller))


async def _check_and_reply(update: Update, text: str):
    controller = _controller_for(update.effective_chat.id)
    await controller.check(text)
    if controller.error:
        await update.message.reply_text(f"⚠️ {controller.error}")
    else:
        await update.message.reply_text(card_text(controller.card))


@owner_only
async def cmd_check(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _check_and_reply(update, " ".join(context.args or []))


@owner_only
async def handle_location(update: Update, context: ContextTypes.DEFAULT_TYPE):
    loc = update.message.location
    controller = _controller_for(update.effective_chat.id)
    provider = controller.location_provider
    if isinstance(provider, ChatLocationProvider):
        if not provider.resolve(Coordinates(lat=loc.latitude, lon=loc.longitude)):
            await update.message.reply_text(detected_text(controller))


@owner_only
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Treat plain text as a city to check."""
    text = update.message.text
    if not text:
        return
    await _check_and_reply(update, text)


# ── Main ────────────────────────────────────────────────────────

def run_widget():
    """Run the Flask widget (blocking)."""
    from dashboard import create_app
    provider = BrowserLocationProvider() if DETECT_LOCATION else UnavailableLocationProvider()
    app = create_app(LocationWeatherController(client, provider))
    # Suppress Flask request logs in the main console
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    log.info(f"Widget: http://{DASHBOARD_HOST}:{DASHBOARD_PORT}")
    app.run(host=DASHBOARD_HOST, port=DASHBOARD_PORT, use_reloader=False, threaded=True)


def start_widget_in_thread():
    try:
        run_widget()
    except Exception as e:
        log.error(f"Widget failed to start: {e}")


def main():
    if not TELEGRAM_BOT_TOKEN:
        log.info("TELEGRAM_BOT_TOKEN not set — serving the web widget only")
        run_widget()
        return

    widget_thread = threading.Thread(target=start_widget_in_thread, daemon=True)
    widget_thread.start()

    app = ApplicationBuilder().token(TELEGRAM_BOT_TOKEN).build()

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("where", cmd_where))
    app.add_handler(CommandHandler("check", cmd_check))
    app.add_handler(MessageHandler(filters.LOCATION, handle_location))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    log.info("Bot starting (Telegram polling)...")
    app.run_polling()


if __name__ == "__main__":
    main()
