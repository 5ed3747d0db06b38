"""Global error handler for the bot."""

import logging
import traceback

from telegram import Update
from telegram.error import BadRequest, Forbidden, NetworkError, TimedOut
from telegram.ext import ContextTypes

from mawaqit.utils.exceptions import (
    InvalidInputError,
    LocationUnavailableError,
    NotificationPermissionError,
    SensorUnavailableError,
)

logger = logging.getLogger(__name__)


def user_message_for(error: BaseException | None) -> str:
    """Reply text for an error raised while handling an update."""
    if isinstance(error, LocationUnavailableError):
        return "📍 الموقع غير متاح. شارك موقعك ثم حاول مرة أخرى."
    if isinstance(error, SensorUnavailableError):
        return "🧭 البوصلة غير متاحة. أرسل اتجاهك يدوياً: /qibla 120"
    if isinstance(error, NotificationPermissionError):
        return "🔕 لا يمكن جدولة التنبيهات حالياً."
    if isinstance(error, InvalidInputError):
        return f"❌ مدخلات غير صالحة: {error}"
    # TimedOut subclasses NetworkError
    if isinstance(error, TimedOut):
        return "⏱️ انتهت مهلة الطلب. حاول مرة أخرى بعد قليل."
    if isinstance(error, BadRequest):
        return "❌ طلب غير صالح. استخدم /help لمعرفة الأوامر."
    if isinstance(error, NetworkError):
        return "🌐 خطأ في الشبكة. حاول مرة أخرى."
    return "😅 حدث خطأ ما. تم تسجيل الخطأ، حاول مرة أخرى أو استخدم /help."


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in the bot."""
    # Log the error
    logger.error("Exception while handling an update:", exc_info=context.error)

    tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
    logger.debug(f"Traceback:\n{''.join(tb_list)}")

    # Blocked by the user, nowhere to reply
    if isinstance(context.error, Forbidden):
        return

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(user_message_for(context.error))
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")
