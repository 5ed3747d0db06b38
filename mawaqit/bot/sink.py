"""Notification sink backed by the Telegram job queue."""

import logging

from telegram import Bot
from telegram.error import Forbidden
from telegram.ext import ContextTypes, JobQueue

from mawaqit.bot.formatters import format_notification
from mawaqit.db.models import ScheduledNotificationRequest
from mawaqit.services.sinks import AudioSink
from mawaqit.utils.constants import NOTIFICATION_PREFIX
from mawaqit.utils.exceptions import NotificationPermissionError

logger = logging.getLogger(__name__)


async def deliver_notification(
    bot: Bot,
    chat_id: int,
    request: ScheduledNotificationRequest,
    audio_sink: AudioSink | None = None,
) -> None:
    """Send a prayer alert, then the azan when the request carries sound."""
    try:
        await bot.send_message(
            chat_id=chat_id,
            text=format_notification(request),
            parse_mode="HTML",
            disable_notification=not request.sound,
        )
        logger.info(f"Delivered {request.identifier}")
    except Forbidden as e:
        logger.warning(f"Chat {chat_id} blocked the bot, {request.identifier} not delivered: {e}")
        return
    except Exception as e:
        logger.error(f"Failed to deliver {request.identifier}: {e}")

    if not request.sound or audio_sink is None:
        return

    try:
        await audio_sink.play_azan(request)
    except Exception as e:
        logger.error(f"Failed to play azan for {request.identifier}: {e}")


class TelegramAudioSink:
    """Sends the configured azan recording as an audio message.

    audio is a Telegram file_id, an HTTP URL or a local file path.
    """

    def __init__(self, bot: Bot, chat_id: int, audio: str):
        self.bot = bot
        self.chat_id = chat_id
        self.audio = audio

    async def play_azan(self, request: ScheduledNotificationRequest) -> None:
        await self.bot.send_audio(chat_id=self.chat_id, audio=self.audio, title=request.title)
        logger.info(f"Azan sent for {request.identifier}")


class TelegramNotificationSink:
    """One run_once job per request, named by the request identifier.

    Jobs live in memory only, so the schedule must be rebuilt on startup.
    """

    def __init__(self, job_queue: JobQueue | None, chat_id: int, audio_sink: AudioSink | None = None):
        self.job_queue = job_queue
        self.chat_id = chat_id
        self.audio_sink = audio_sink

    def _queue(self) -> JobQueue:
        if self.job_queue is None:
            raise NotificationPermissionError(
                "Job queue unavailable; install python-telegram-bot[job-queue]"
            )
        return self.job_queue

    def _prayer_jobs(self) -> list:
        return [
            job
            for job in self._queue().jobs()
            if job.name and job.name.startswith(NOTIFICATION_PREFIX) and not job.removed
        ]

    async def deliver(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Job callback for a scheduled request."""
        job = context.job
        await deliver_notification(context.bot, job.chat_id, job.data, self.audio_sink)

    async def schedule(self, request: ScheduledNotificationRequest) -> str:
        queue = self._queue()

        # Same identifier replaces the pending job
        for job in queue.get_jobs_by_name(request.identifier):
            job.schedule_removal()

        job = queue.run_once(
            self.deliver,
            when=request.trigger_at,
            name=request.identifier,
            chat_id=self.chat_id,
            data=request,
        )
        logger.debug(f"Scheduled {request.identifier} for {request.trigger_at.isoformat()}")
        return job.name

    async def cancel_all(self) -> None:
        jobs = self._prayer_jobs()
        for job in jobs:
            job.schedule_removal()
        logger.info(f"Cancelled {len(jobs)} scheduled notifications")

    async def list_pending(self) -> list[ScheduledNotificationRequest]:
        requests = [job.data for job in self._prayer_jobs()]
        return sorted(requests, key=lambda r: r.trigger_at)
