"""Tests for the settings store and notification controller."""

import asyncio

import pytest

from mawaqit.db.models import NotificationSettings
from mawaqit.engine.scheduler import NotificationScheduler
from mawaqit.services.settings import NotificationController, SettingsStore
from mawaqit.services.sinks import MemoryNotificationSink


def build_controller(repo, day):
    sink = MemoryNotificationSink()
    store = SettingsStore(repo)
    scheduler = NotificationScheduler(sink, store)

    async def day_source():
        return day

    return NotificationController(store, scheduler, day_source), sink, store


def test_settings_defaults():
    settings = NotificationSettings()

    assert settings.enabled
    assert settings.notify_before_prayer
    assert settings.notify_at_prayer_time
    assert settings.azan_sound_enabled
    assert settings.pre_prayer_minutes == 5
    assert settings.last_scheduled_date is None


def test_negative_pre_prayer_minutes_rejected():
    with pytest.raises(ValueError):
        NotificationSettings(pre_prayer_minutes=-1)


def test_from_dict_ignores_unknown_keys():
    settings = NotificationSettings.from_dict({"enabled": False, "volume": 11})

    assert not settings.enabled


def test_store_update_has_no_side_effects(open_repo):
    """The store only persists; nothing is scheduled."""

    async def scenario():
        repo = await open_repo()
        try:
            store = SettingsStore(repo)
            previous, updated = await store.update(pre_prayer_minutes=15)
            return previous, updated, await store.get()
        finally:
            await repo.close()

    previous, updated, stored = asyncio.run(scenario())

    assert previous.pre_prayer_minutes == 5
    assert updated.pre_prayer_minutes == 15
    assert stored == updated


def test_batched_update_reschedules_once(open_repo, day):
    """Three fields changed in one call, one reschedule pass."""

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, store = build_controller(repo, day)
            result = await controller.update_settings(
                notify_before_prayer=False,
                azan_sound_enabled=False,
                pre_prayer_minutes=10,
            )
            return result, sink.cancel_count, await store.get()
        finally:
            await repo.close()

    result, cancels, settings = asyncio.run(scenario())

    assert result is not None
    assert cancels == 1
    assert not settings.notify_before_prayer
    assert not settings.azan_sound_enabled
    assert settings.pre_prayer_minutes == 10


def test_unchanged_update_does_not_reschedule(open_repo, day):

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, _ = build_controller(repo, day)
            result = await controller.update_settings(enabled=True)
            return result, sink.cancel_count
        finally:
            await repo.close()

    result, cancels = asyncio.run(scenario())

    assert result is None
    assert cancels == 0


def test_guard_date_is_not_a_policy_change(open_repo, day):
    """Recording the daily guard never triggers a reschedule."""

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, _ = build_controller(repo, day)
            result = await controller.update_settings(last_scheduled_date="2026-03-15")
            return result, sink.cancel_count
        finally:
            await repo.close()

    result, cancels = asyncio.run(scenario())

    assert result is None
    assert cancels == 0


def test_invalid_update_leaves_settings_untouched(open_repo, day):

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, store = build_controller(repo, day)
            with pytest.raises(ValueError):
                await controller.update_settings(pre_prayer_minutes=-5)
            with pytest.raises(ValueError):
                await controller.update_settings(volume=3)
            return sink.cancel_count, await store.get()
        finally:
            await repo.close()

    cancels, settings = asyncio.run(scenario())

    assert cancels == 0
    assert settings == NotificationSettings()


def test_toggle(open_repo, day):

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, store = build_controller(repo, day)
            await controller.toggle("azan_sound_enabled")
            with pytest.raises(ValueError):
                await controller.toggle("pre_prayer_minutes")
            return sink.cancel_count, await store.get()
        finally:
            await repo.close()

    cancels, settings = asyncio.run(scenario())

    assert cancels == 1
    assert not settings.azan_sound_enabled


def test_no_day_available_skips_reschedule(open_repo):
    """Without a location the settings are saved but nothing is scheduled."""

    async def scenario():
        repo = await open_repo()
        try:
            controller, sink, store = build_controller(repo, None)
            result = await controller.update_settings(enabled=False)
            return result, sink.cancel_count, await store.get()
        finally:
            await repo.close()

    result, cancels, settings = asyncio.run(scenario())

    assert result is None
    assert cancels == 0
    assert not settings.enabled


def test_concurrent_writers_keep_both_changes(open_repo):
    """A settings change and the daily guard written at once both persist."""

    async def scenario():
        repo = await open_repo()
        try:
            store = SettingsStore(repo)
            await asyncio.gather(
                store.update(notify_before_prayer=False),
                store.mark_scheduled("2026-03-15"),
            )
            return await store.get()
        finally:
            await repo.close()

    settings = asyncio.run(scenario())

    assert not settings.notify_before_prayer
    assert settings.last_scheduled_date == "2026-03-15"


def test_concurrent_toggles_apply_in_turn(open_repo):
    """Two toggles of the same field cancel out instead of collapsing into one."""

    async def scenario():
        repo = await open_repo()
        try:
            store = SettingsStore(repo)
            await asyncio.gather(
                store.toggle("azan_sound_enabled"),
                store.toggle("azan_sound_enabled"),
                store.update(pre_prayer_minutes=20),
            )
            return await store.get()
        finally:
            await repo.close()

    settings = asyncio.run(scenario())

    assert settings.azan_sound_enabled
    assert settings.pre_prayer_minutes == 20
