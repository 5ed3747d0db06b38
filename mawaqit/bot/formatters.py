"""Message text formatters."""

import logging
from datetime import date, datetime

from mawaqit.db.models import (
    Guidance,
    Location,
    NextPrayer,
    NotificationSettings,
    PrayerDay,
    ScheduledNotificationRequest,
    ScheduleResult,
)
from mawaqit.engine.next_prayer import mark_next, remaining, should_show_time_until
from mawaqit.utils.time_utils import format_clock, format_gregorian, to_arabic_numerals, to_hijri

logger = logging.getLogger(__name__)


def format_date_header(day: date) -> str:
    """Gregorian and Hijri dates for the top of the prayer table."""
    lines = [f"📅 {format_gregorian(day)}"]
    try:
        lines.append(f"☪ {to_hijri(day).full} هـ")
    except OverflowError:
        logger.debug(f"No Hijri date for {day.isoformat()}, outside the supported range")
    return "\n".join(lines)


def format_prayer_table(
    day: PrayerDay,
    next_prayer: NextPrayer | None,
    now: datetime,
    location: Location | None = None,
    arabic: bool = True,
) -> str:
    """Format the day's prayer times."""
    lines = ["<b>🕌 مواقيت الصلاة</b>", format_date_header(day.date)]

    if location and location.address:
        lines.append(f"📍 {location.address}")
    lines.append("")

    for event in mark_next(day, now, next_prayer):
        marker = "▶️" if event.is_next else ("✓" if event.passed else "•")
        line = f"{marker} {event.name.icon} <b>{event.display_name}</b>  {event.display_time}"
        if event.is_next and should_show_time_until(event):
            line += f"  ({remaining(NextPrayer(event=event), now, arabic)})"
        lines.append(line)

    if next_prayer and next_prayer.is_tomorrow:
        lines.append("")
        lines.append(format_next_prayer(next_prayer, now, arabic))

    if day.is_fallback:
        lines.append("")
        lines.append("⚠️ تعذر حساب المواقيت لهذا الموقع، يتم عرض مواقيت تقريبية.")

    return "\n".join(lines)


def format_next_prayer(next_prayer: NextPrayer | None, now: datetime, arabic: bool = True) -> str:
    """Format the next-prayer banner."""
    if next_prayer is None:
        return "لا توجد صلاة قادمة."

    event = next_prayer.event
    return (
        f"⏳ <b>الصلاة القادمة:</b> {event.display_name}\n"
        f"🕐 {event.display_time}\n"
        f"⌛ متبقي: {remaining(next_prayer, now, arabic)}"
    )


def format_qibla(
    location: Location,
    bearing: float,
    distance_km: float,
    guidance: Guidance | None = None,
    arabic: bool = True,
) -> str:
    """Format Qibla direction and distance."""
    convert = to_arabic_numerals if arabic else str
    lines = [
        "<b>🧭 اتجاه القبلة</b>",
        f"الاتجاه: {convert(f'{bearing:.1f}')}° من الشمال",
        f"المسافة إلى الكعبة: {convert(f'{distance_km:,.0f}')} كم",
    ]
    if location.address:
        lines.append(f"📍 {location.address}")
    if guidance:
        lines.append("")
        lines.append(f"➡️ {guidance.message}")
    return "\n".join(lines)


def format_settings(settings: NotificationSettings, arabic: bool = True) -> str:
    """Format notification settings."""

    def flag(value: bool) -> str:
        return "✅" if value else "❌"

    minutes = to_arabic_numerals(str(settings.pre_prayer_minutes)) if arabic else settings.pre_prayer_minutes
    return (
        "<b>⚙️ إعدادات التنبيهات</b>\n\n"
        f"{flag(settings.enabled)} التنبيهات\n"
        f"{flag(settings.notify_at_prayer_time)} التنبيه عند وقت الصلاة\n"
        f"{flag(settings.notify_before_prayer)} التنبيه قبل الصلاة ({minutes} دقيقة)\n"
        f"{flag(settings.azan_sound_enabled)} صوت الأذان\n\n"
        "لتغيير مدة التنبيه المسبق: <code>/before 10</code>"
    )


def format_schedule_result(result: ScheduleResult | None) -> str:
    """Short status line after a reschedule."""
    if result is None:
        return ""
    if result.skipped:
        return "🔔 التنبيهات مجدولة بالفعل لهذا اليوم."
    if result.state == "failed":
        return "⚠️ تعذر تحديث التنبيهات، تم الإبقاء على الجدول السابق."
    text = f"🔔 تمت جدولة {result.scheduled} تنبيه."
    if result.incomplete:
        text += "\n⚠️ قد تكون بعض التنبيهات غير مكتملة."
    return text


def format_pending(requests: list[ScheduledNotificationRequest], arabic: bool = True) -> str:
    """List pending notifications."""
    if not requests:
        return "لا توجد تنبيهات مجدولة."

    lines = [f"<b>🔔 التنبيهات المجدولة ({len(requests)})</b>", ""]
    for request in requests:
        sound = " 🔊" if request.sound else ""
        lines.append(f"• {format_clock(request.trigger_at, arabic)} {request.title}{sound}")
    return "\n".join(lines)


def format_notification(request: ScheduledNotificationRequest) -> str:
    """Text of a delivered prayer alert."""
    return f"<b>{request.title}</b>\n{request.body}"


def format_welcome_message() -> str:
    """Format the welcome message for /start."""
    return """
<b>السلام عليكم! 🕌</b>

أنا أحسب مواقيت الصلاة واتجاه القبلة لموقعك وأرسل لك التنبيهات.

<b>للبدء:</b>
• شارك موقعك بالزر أدناه
• /times - مواقيت اليوم
• /help - جميع الأوامر
""".strip()


def format_help_message() -> str:
    """Format the help message."""
    return """
<b>الأوامر 🕌</b>

<b>المواقيت:</b>
/times - مواقيت صلاة اليوم
/next - الصلاة القادمة والوقت المتبقي
/qibla [الاتجاه] - اتجاه القبلة والمسافة، مع توجيه إن أرسلت اتجاهك الحالي بالدرجات

<b>التنبيهات:</b>
/settings - عرض وتعديل الإعدادات
/before &lt;دقائق&gt; - مدة التنبيه قبل الصلاة
/pending - التنبيهات المجدولة
/reschedule - إعادة جدولة تنبيهات اليوم
/test - تنبيه تجريبي

<b>الموقع:</b>
أرسل موقعك في أي وقت لتحديث المواقيت.
""".strip()


def format_location_required() -> str:
    return "📍 أحتاج إلى موقعك لحساب المواقيت. شارك موقعك بالزر أدناه."
