"""Callback query handlers for inline buttons."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from mawaqit.bot.formatters import format_schedule_result, format_settings
from mawaqit.bot.keyboards import settings_keyboard
from mawaqit.services.container import Services

logger = logging.getLogger(__name__)


async def handle_toggle_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, field: str
) -> None:
    """Handle a settings toggle button press."""
    query = update.callback_query
    services: Services = context.bot_data["services"]

    try:
        result = await services.controller.toggle(field)
    except (AttributeError, ValueError) as e:
        logger.warning(f"Rejected toggle {field!r}: {e}")
        await query.answer("Unknown setting.")
        return

    settings = await services.settings_store.get()
    if query.message:
        await query.message.edit_text(
            format_settings(settings, services.arabic),
            parse_mode="HTML",
            reply_markup=settings_keyboard(settings),
        )

    await query.answer(format_schedule_result(result) or "✓")


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to appropriate handlers."""
    if not update.callback_query or not update.callback_query.data:
        return

    chat = update.effective_chat
    if chat is None or chat.id != context.bot_data.get("owner_chat_id"):
        await update.callback_query.answer()
        return

    action, _, argument = update.callback_query.data.partition(":")

    if action == "toggle" and argument:
        await handle_toggle_callback(update, context, argument)
    else:
        logger.warning(f"Unknown callback data: {update.callback_query.data}")
        await update.callback_query.answer()
