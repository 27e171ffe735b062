"""Notification scheduling and feedback for FocusNotes."""
from __future__ import annotations

from datetime import datetime, time
import logging
from typing import Any, Awaitable, Callable
import uuid

from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_track_point_in_time, async_track_time_change
from homeassistant.util import dt as dt_util

from .const import (
    CATEGORY_ACHIEVEMENT,
    CATEGORY_MILESTONE,
    CATEGORY_POMODORO,
    CATEGORY_STREAK,
    CATEGORY_TASK,
    DOMAIN,
    EVENT_FEEDBACK,
    MIN_REMINDER_LEAD,
)
from .models import NotificationSettings
from .reminders import NotificationContent

_LOGGER = logging.getLogger(__name__)

_CATEGORY_TOGGLES = {
    CATEGORY_TASK: "task_reminders",
    CATEGORY_POMODORO: "pomodoro_alerts",
    CATEGORY_STREAK: "streak_reminders",
    CATEGORY_MILESTONE: "streak_milestones",
    CATEGORY_ACHIEVEMENT: "achievement_alerts",
}


class FocusNotesNotifier:
    """Schedules, delivers and cancels FocusNotes notifications.

    Delivery goes through the configured ``notify`` service, or a persistent
    notification when none is configured. Reminders are best effort: any
    failure is logged and reported as a missing id, never raised.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        notify_service: str | None = None,
        settings: NotificationSettings | None = None,
    ) -> None:
        self.hass = hass
        self.notify_service = notify_service
        self.settings = settings or NotificationSettings()
        self._scheduled: dict[str, CALLBACK_TYPE] = {}
        self._daily: dict[str, CALLBACK_TYPE] = {}

    def category_enabled(self, category: str) -> bool:
        if not self.settings.enabled:
            return False
        toggle = _CATEGORY_TOGGLES.get(category)
        return toggle is None or bool(getattr(self.settings, toggle))

    def scheduled_ids(self) -> list[str]:
        return [*self._scheduled, *self._daily]

    async def async_schedule(
        self,
        content: NotificationContent,
        trigger: datetime | None = None,
        *,
        identifier: str | None = None,
        on_fire: Callable[[], Awaitable[Any]] | None = None,
        suppress_immediate_feedback: bool = False,
    ) -> str | None:
        """Deliver now (no trigger) or arm a timer for ``trigger``.

        ``on_fire`` runs when the trigger is reached even if delivery of this
        category is switched off. With ``suppress_immediate_feedback`` nothing
        is delivered right away: a missing or too-close trigger is pushed out
        to the minimum lead time instead.
        """
        if on_fire is None and not self.category_enabled(content.category):
            _LOGGER.debug("Skipping %s notification, category %s disabled", content.kind, content.category)
            return None

        notification_id = identifier or f"{DOMAIN}_{uuid.uuid4().hex[:12]}"
        now = dt_util.now()

        if suppress_immediate_feedback:
            earliest = now + MIN_REMINDER_LEAD
            if trigger is None or trigger < earliest:
                trigger = earliest

        if trigger is None or trigger <= now:
            delivered = await self._async_deliver(notification_id, content)
            if on_fire is not None:
                # Callers may hold the coordinator lock, so the hook runs afterwards
                self.hass.async_create_task(on_fire())
            return notification_id if delivered else None

        await self.async_cancel(notification_id)

        async def _fire(_now: datetime) -> None:
            self._scheduled.pop(notification_id, None)
            await self._async_deliver(notification_id, content)
            if on_fire is not None:
                try:
                    await on_fire()
                except Exception:  # noqa: BLE001
                    _LOGGER.exception("Notification hook for %s failed", notification_id)

        try:
            self._scheduled[notification_id] = async_track_point_in_time(self.hass, _fire, trigger)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Failed to schedule %s notification: %s", content.kind, err)
            return None

        _LOGGER.debug("Scheduled %s notification %s for %s", content.kind, notification_id, trigger)
        return notification_id

    async def async_cancel(self, notification_id: str | None) -> None:
        if not notification_id:
            return
        unsub = self._scheduled.pop(notification_id, None)
        if unsub is not None:
            unsub()
            _LOGGER.debug("Cancelled notification %s", notification_id)

    async def async_cancel_named(self, identifier: str) -> None:
        """Cancel a recurring or fixed-identity notification."""
        unsub = self._daily.pop(identifier, None)
        if unsub is not None:
            unsub()
        await self.async_cancel(identifier)

    async def async_schedule_daily(
        self, identifier: str, content: NotificationContent, at: time
    ) -> str | None:
        """Replace the recurring notification ``identifier`` with one firing daily at ``at``."""
        await self.async_cancel_named(identifier)
        if not self.category_enabled(content.category):
            _LOGGER.debug("Daily %s notification disabled", content.kind)
            return None

        async def _fire(_now: datetime) -> None:
            await self._async_deliver(identifier, content)

        try:
            self._daily[identifier] = async_track_time_change(
                self.hass, _fire, hour=at.hour, minute=at.minute, second=0
            )
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Failed to schedule daily notification %s: %s", identifier, err)
            return None

        _LOGGER.info("Daily reminder scheduled for %02d:%02d", at.hour, at.minute)
        return identifier

    async def async_cancel_all(self) -> None:
        for unsub in [*self._scheduled.values(), *self._daily.values()]:
            unsub()
        self._scheduled.clear()
        self._daily.clear()

    def _payload_data(self, content: NotificationContent) -> dict[str, Any]:
        data: dict[str, Any] = {"type": content.kind, "category": content.category, **content.data}
        if content.sound and self.settings.sound_enabled:
            data["push"] = {"sound": content.sound}
        if content.vibration and self.settings.vibration_enabled:
            data["vibrationPattern"] = ", ".join(str(v) for v in content.vibration)
        return data

    async def _async_deliver(self, notification_id: str, content: NotificationContent) -> bool:
        if not self.category_enabled(content.category):
            _LOGGER.debug("Not delivering %s, category %s disabled", notification_id, content.category)
            return False

        try:
            if self.notify_service:
                if "." in self.notify_service:
                    domain, service = self.notify_service.split(".", 1)
                else:
                    domain, service = "notify", self.notify_service
                await self.hass.services.async_call(
                    domain,
                    service,
                    {"title": content.title, "message": content.body, "data": self._payload_data(content)},
                    blocking=True,
                )
            else:
                await self.hass.services.async_call(
                    "persistent_notification",
                    "create",
                    {"title": content.title, "message": content.body, "notification_id": notification_id},
                    blocking=True,
                )
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Failed to deliver %s notification: %s", content.kind, err)
            return False

        _LOGGER.debug("Delivered %s notification %s", content.kind, notification_id)
        return True


class FocusNotesFeedback:
    """Sound and vibration cues, published as bus events for automations."""

    def __init__(self, hass: HomeAssistant, settings: NotificationSettings | None = None) -> None:
        self.hass = hass
        self.settings = settings or NotificationSettings()

    async def async_play_sound(self, name: str) -> None:
        if not self.settings.sound_enabled:
            return
        self._fire({"type": "sound", "name": name})

    async def async_vibrate(self, pattern: tuple[int, ...]) -> None:
        if not self.settings.vibration_enabled:
            return
        self._fire({"type": "vibration", "pattern": list(pattern)})

    def _fire(self, data: dict[str, Any]) -> None:
        try:
            self.hass.bus.async_fire(EVENT_FEEDBACK, data)
        except Exception as err:  # noqa: BLE001
            _LOGGER.debug("Feedback event failed: %s", err)
