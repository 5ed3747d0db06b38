"""Main entry point for the Mawaqit bot."""

import logging
import sys

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from mawaqit.bot.callbacks import callback_router
from mawaqit.bot.handlers import (
    before_command,
    help_command,
    location_message,
    next_command,
    pending_command,
    qibla_command,
    reschedule_command,
    settings_command,
    start_command,
    test_command,
    times_command,
)
from mawaqit.bot.sink import TelegramAudioSink, TelegramNotificationSink
from mawaqit.config import Config
from mawaqit.db.migrations import run_migrations
from mawaqit.db.repository import Repository
from mawaqit.engine.refresh import BackgroundTask, background_tasks, startup_recovery
from mawaqit.engine.scheduler import NotificationScheduler
from mawaqit.services.container import Services
from mawaqit.services.location import StoredLocationProvider
from mawaqit.services.prayer_cache import PrayerTimesCache
from mawaqit.services.settings import SettingsStore
from mawaqit.utils.error_handler import error_handler

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)
# httpx logs every polling request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_services(application: Application, repo: Repository) -> Services:
    """Wire the collaborators together."""
    settings_store = SettingsStore(repo)
    audio_sink = None
    if Config.AZAN_AUDIO:
        audio_sink = TelegramAudioSink(application.bot, Config.TELEGRAM_CHAT_ID, Config.AZAN_AUDIO)
    sink = TelegramNotificationSink(application.job_queue, Config.TELEGRAM_CHAT_ID, audio_sink)

    return Services(
        repo=repo,
        location_provider=StoredLocationProvider(
            repo, Config.GEOCODER_USER_AGENT, geocode=Config.GEOCODE_LOCATIONS
        ),
        cache=PrayerTimesCache(repo, Config.CALCULATION_METHOD, Config.TIMEZONE, Config.ARABIC_NUMERALS),
        settings_store=settings_store,
        sink=sink,
        scheduler=NotificationScheduler(
            sink, settings_store, Config.REFERENCE_TIMEZONE, Config.ARABIC_NUMERALS
        ),
        timezone=Config.TIMEZONE,
        arabic=Config.ARABIC_NUMERALS,
    )


def make_job(task: BackgroundTask):
    """Adapt a BackgroundTask handler to a job queue callback."""

    async def job(context: "ContextTypes.DEFAULT_TYPE") -> None:
        services: Services = context.bot_data["services"]
        await task.handler(services)

    job.__name__ = f"{task.name}_job"
    return job


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    # Initialize key-value store
    await run_migrations(Config.STORE_PATH)

    repo = Repository(Config.STORE_PATH)
    await repo.connect()

    services = build_services(application, repo)
    application.bot_data["services"] = services
    application.bot_data["owner_chat_id"] = Config.TELEGRAM_CHAT_ID

    job_queue = application.job_queue
    if job_queue:
        for task in background_tasks(Config.TICK_INTERVAL, Config.REFRESH_INTERVAL):
            job_queue.run_repeating(
                make_job(task),
                interval=task.interval,
                first=task.first,
                name=task.name,
            )
            logger.info(f"{task.name} job scheduled (interval: {task.interval}s)")
    else:
        logger.warning("Job queue unavailable; prayer alerts will not be delivered")

    # Scheduled alerts do not survive a restart
    await startup_recovery(services)

    logger.info("Mawaqit initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    services: Services = application.bot_data.get("services")
    if services:
        await services.repo.close()

    logger.info("Mawaqit shut down")


def main() -> None:
    """Start the bot."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    # Create application
    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Single owner: ignore every other chat
    owner = filters.Chat(chat_id=Config.TELEGRAM_CHAT_ID)

    # Commands
    application.add_handler(CommandHandler("start", start_command, filters=owner))
    application.add_handler(CommandHandler("help", help_command, filters=owner))
    application.add_handler(CommandHandler("times", times_command, filters=owner))
    application.add_handler(CommandHandler("next", next_command, filters=owner))
    application.add_handler(CommandHandler("qibla", qibla_command, filters=owner))

    # Notification commands
    application.add_handler(CommandHandler("settings", settings_command, filters=owner))
    application.add_handler(CommandHandler("before", before_command, filters=owner))
    application.add_handler(CommandHandler("pending", pending_command, filters=owner))
    application.add_handler(CommandHandler("reschedule", reschedule_command, filters=owner))
    application.add_handler(CommandHandler("test", test_command, filters=owner))

    # Shared location
    application.add_handler(MessageHandler(filters.LOCATION & owner, location_message))

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    # Error handler
    application.add_error_handler(error_handler)

    # Start the bot
    logger.info("Starting Mawaqit bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
