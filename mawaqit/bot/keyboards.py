"""Keyboard builders."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from mawaqit.db.models import NotificationSettings


def location_request_keyboard() -> ReplyKeyboardMarkup:
    """One-button keyboard asking the user to share their location."""
    return ReplyKeyboardMarkup(
        [[KeyboardButton("📍 مشاركة الموقع", request_location=True)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def settings_keyboard(settings: NotificationSettings) -> InlineKeyboardMarkup:
    """Toggle buttons for notification settings."""

    def label(text: str, value: bool) -> str:
        return f"{'✅' if value else '❌'} {text}"

    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(label("التنبيهات", settings.enabled), callback_data="toggle:enabled")],
            [
                InlineKeyboardButton(
                    label("عند الوقت", settings.notify_at_prayer_time),
                    callback_data="toggle:notify_at_prayer_time",
                ),
                InlineKeyboardButton(
                    label("قبل الوقت", settings.notify_before_prayer),
                    callback_data="toggle:notify_before_prayer",
                ),
            ],
            [
                InlineKeyboardButton(
                    label("صوت الأذان", settings.azan_sound_enabled),
                    callback_data="toggle:azan_sound_enabled",
                )
            ],
        ]
    )
