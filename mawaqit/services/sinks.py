"""Notification sink interface and an in-process implementation."""

import logging
from typing import Protocol

from mawaqit.db.models import ScheduledNotificationRequest
from mawaqit.utils.constants import NOTIFICATION_PREFIX

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Device notification service as seen by the scheduler."""

    async def schedule(self, request: ScheduledNotificationRequest) -> str:
        """Register a request; return its identifier, or "" if dropped."""
        ...

    async def cancel_all(self) -> None:
        """Cancel every pending prayer notification."""
        ...

    async def list_pending(self) -> list[ScheduledNotificationRequest]:
        """Pending prayer notifications ordered by trigger time."""
        ...


class MemoryNotificationSink:
    """Keeps requests in a dict keyed by identifier.

    Scheduling an identifier that is already pending replaces it.
    """

    def __init__(self) -> None:
        self.pending: dict[str, ScheduledNotificationRequest] = {}
        self.cancel_count = 0

    async def schedule(self, request: ScheduledNotificationRequest) -> str:
        self.pending[request.identifier] = request
        logger.debug(f"Scheduled {request.identifier} for {request.trigger_at.isoformat()}")
        return request.identifier

    async def cancel_all(self) -> None:
        removed = [key for key in self.pending if key.startswith(NOTIFICATION_PREFIX)]
        for key in removed:
            del self.pending[key]
        self.cancel_count += 1
        logger.info(f"Cancelled {len(removed)} scheduled notifications")

    async def list_pending(self) -> list[ScheduledNotificationRequest]:
        return sorted(self.pending.values(), key=lambda r: r.trigger_at)


class AudioSink(Protocol):
    """Plays the azan when an exact prayer alert fires."""

    async def play_azan(self, request: ScheduledNotificationRequest) -> None:
        ...


class MemoryAudioSink:
    """Records the requests it was asked to play."""

    def __init__(self) -> None:
        self.played: list[ScheduledNotificationRequest] = []

    async def play_azan(self, request: ScheduledNotificationRequest) -> None:
        self.played.append(request)
        logger.debug(f"Azan played for {request.identifier}")
