"""Command handlers."""

import logging
from datetime import timedelta

from telegram import ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes

from mawaqit.bot.formatters import (
    format_help_message,
    format_location_required,
    format_next_prayer,
    format_pending,
    format_prayer_table,
    format_qibla,
    format_schedule_result,
    format_settings,
    format_welcome_message,
)
from mawaqit.bot.keyboards import location_request_keyboard, settings_keyboard
from mawaqit.db.models import Location, ScheduledNotificationRequest
from mawaqit.engine.heading import guidance, parse_heading
from mawaqit.engine.next_prayer import select_next
from mawaqit.engine.qibla import distance_to_kaaba_km, qibla_bearing
from mawaqit.services.container import Services
from mawaqit.utils.exceptions import InvalidCoordinatesError, LocationUnavailableError
from mawaqit.utils.time_utils import now_in

logger = logging.getLogger(__name__)

TEST_NOTIFICATION_DELAY = 5  # seconds


async def _require_location(update: Update, services: Services) -> Location | None:
    """Current location, or prompt the user to share one."""
    try:
        return await services.location_provider.require_location()
    except LocationUnavailableError:
        await update.message.reply_text(
            format_location_required(), reply_markup=location_request_keyboard()
        )
        return None


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.message:
        return

    await update.message.reply_html(
        format_welcome_message(), reply_markup=location_request_keyboard()
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.message:
        return

    await update.message.reply_html(format_help_message())


async def location_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a shared location: store it, recompute times, reschedule."""
    if not update.message or not update.message.location:
        return

    services: Services = context.bot_data["services"]
    shared = update.message.location

    try:
        location = await services.location_provider.set_location(shared.latitude, shared.longitude)
    except InvalidCoordinatesError as e:
        await update.message.reply_text(f"❌ موقع غير صالح: {e}")
        return

    # Location changed, cached day is stale
    await services.cache.invalidate()

    now = now_in(services.timezone)
    day = await services.cache.get_day(location, now)
    result = await services.scheduler.reschedule(day, now=now)
    services.note_scheduled(day, result)
    next_prayer = await services.refresh_next_prayer(now)

    message = format_prayer_table(day, next_prayer, now, location, services.arabic)
    status = format_schedule_result(result)
    if status:
        message += f"\n\n{status}"

    await update.message.reply_html(message, reply_markup=ReplyKeyboardRemove())


async def times_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /times command - today's prayer times."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    location = await _require_location(update, services)
    if location is None:
        return

    now = now_in(services.timezone)
    day = await services.cache.get_day(location, now)
    next_prayer = select_next(day, now)

    await update.message.reply_html(
        format_prayer_table(day, next_prayer, now, location, services.arabic)
    )


async def next_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /next command."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    if await _require_location(update, services) is None:
        return

    now = now_in(services.timezone)
    next_prayer = await services.refresh_next_prayer(now)
    await update.message.reply_html(format_next_prayer(next_prayer, now, services.arabic))


async def qibla_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /qibla [heading] - bearing, distance and optional turn guidance."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    location = await _require_location(update, services)
    if location is None:
        return

    heading = None
    if context.args:
        try:
            heading = parse_heading(context.args[0])
        except ValueError:
            await update.message.reply_text("Usage: /qibla [heading in degrees, 0-360]")
            return

    bearing = qibla_bearing(location.latitude, location.longitude)
    distance = distance_to_kaaba_km(location.latitude, location.longitude)
    advice = guidance(heading, bearing) if heading is not None else None

    await update.message.reply_html(format_qibla(location, bearing, distance, advice, services.arabic))


async def settings_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /settings command."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    settings = await services.settings_store.get()

    await update.message.reply_html(
        format_settings(settings, services.arabic),
        reply_markup=settings_keyboard(settings),
    )


async def before_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /before <minutes> - lead time of the early alert."""
    if not update.message:
        return

    if not context.args or len(context.args) != 1:
        await update.message.reply_text("Usage: /before <minutes>")
        return

    try:
        minutes = int(context.args[0])
    except ValueError:
        await update.message.reply_text("Invalid number of minutes.")
        return

    services: Services = context.bot_data["services"]
    try:
        result = await services.controller.update_settings(pre_prayer_minutes=minutes)
    except ValueError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    settings = await services.settings_store.get()
    message = format_settings(settings, services.arabic)
    status = format_schedule_result(result)
    if status:
        message += f"\n\n{status}"

    await update.message.reply_html(message, reply_markup=settings_keyboard(settings))


async def pending_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /pending command - list scheduled alerts."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    pending = await services.sink.list_pending()
    await update.message.reply_html(format_pending(pending, services.arabic))


async def reschedule_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reschedule command - rebuild today's alerts."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    if await _require_location(update, services) is None:
        return

    day = await services.current_day()
    result = await services.scheduler.reschedule(day)
    await update.message.reply_text(format_schedule_result(result))


async def test_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /test command - send a sample alert shortly."""
    if not update.message:
        return

    services: Services = context.bot_data["services"]
    settings = await services.settings_store.get()

    request = ScheduledNotificationRequest(
        trigger_at=now_in(services.timezone) + timedelta(seconds=TEST_NOTIFICATION_DELAY),
        title="🕌 تنبيه تجريبي",
        body="هذا تنبيه تجريبي لمواقيت الصلاة",
        sound=settings.azan_sound_enabled,
        identifier="test_notification",
    )
    await services.sink.schedule(request)
    logger.info("Test notification scheduled")

    await update.message.reply_text(f"🔔 سيصلك تنبيه تجريبي خلال {TEST_NOTIFICATION_DELAY} ثوانٍ.")
