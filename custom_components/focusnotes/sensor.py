"""Sensor entities for FocusNotes integration."""
from __future__ import annotations

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util import dt as dt_util

from .const import DOMAIN, POMODORO_DAILY_XP_CAP
from .coordinator import FocusNotesCoordinator
from .progression import get_level_title, level_progress


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities(
        [
            FocusNotesXpSensor(coordinator),
            FocusNotesLevelSensor(coordinator),
            FocusNotesStreakSensor(coordinator),
            FocusNotesFreezeTokenSensor(coordinator),
            FocusNotesBadgesSensor(coordinator),
            FocusNotesTasksTodaySensor(coordinator),
            FocusNotesPomodoroSensor(coordinator),
        ],
        True,
    )

class FocusNotesSensor(SensorEntity):
    """Base for sensors that read the coordinator's stats."""

    def __init__(self, coord: FocusNotesCoordinator, key: str, name: str, icon: str):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_{key}"
        self._attr_name = f"FocusNotes {name}"
        self._attr_icon = icon

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        """Check if coordinator is ready."""
        return self._coord.model is not None

class FocusNotesXpSensor(FocusNotesSensor):
    _attr_state_class = SensorStateClass.TOTAL
    _attr_native_unit_of_measurement = "XP"

    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "xp", "Experience", "mdi:star-four-points")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return stats.xp if stats else 0

    @property
    def extra_state_attributes(self):
        stats = self._coord.get_stats()
        if not stats:
            return {}
        return {
            "pomodoro_xp_today": stats.pomodoro_xp,
            "pomodoro_xp_cap": POMODORO_DAILY_XP_CAP,
        }

class FocusNotesLevelSensor(FocusNotesSensor):
    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "level", "Level", "mdi:trophy-variant")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return stats.level if stats else 1

    @property
    def extra_state_attributes(self):
        stats = self._coord.get_stats()
        if not stats:
            return {}
        return {"title": get_level_title(stats.level), **level_progress(stats.xp)}

class FocusNotesStreakSensor(FocusNotesSensor):
    _attr_native_unit_of_measurement = "days"

    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "streak", "Streak", "mdi:fire")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return stats.streak if stats else 0

    @property
    def extra_state_attributes(self):
        stats = self._coord.get_stats()
        if not stats:
            return {}
        summary = self._coord.last_day_summary
        return {
            "last_end_day": stats.last_end_day,
            "last_closed_date": stats.last_closed_date,
            "last_message": summary.message if summary else None,
        }

class FocusNotesFreezeTokenSensor(FocusNotesSensor):
    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "freeze_tokens", "Freeze Tokens", "mdi:snowflake")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return stats.freeze_tokens if stats else 0

class FocusNotesBadgesSensor(FocusNotesSensor):
    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "badges", "Badges Earned", "mdi:medal")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return len(stats.earned_badges()) if stats else 0

    @property
    def extra_state_attributes(self):
        stats = self._coord.get_stats()
        if not stats:
            return {}
        return {
            "total": len(stats.badges),
            "earned": [
                {"id": b.id, "title": b.title, "emoji": b.emoji, "earned_at": b.earned_at}
                for b in stats.earned_badges()
            ],
            "locked": [{"id": b.id, "title": b.title, "description": b.description} for b in stats.badges if not b.earned],
        }

class FocusNotesTasksTodaySensor(FocusNotesSensor):
    """Tasks completed since the last day boundary."""

    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "tasks_today", "Tasks Completed Today", "mdi:checkbox-multiple-marked")

    @property
    def native_value(self):
        stats = self._coord.get_stats()
        return stats.daily_tasks_completed if stats else 0

    @property
    def extra_state_attributes(self):
        stats = self._coord.get_stats()
        if not stats:
            return {}
        today = self._coord.get_tasks_for_date(dt_util.now().date())
        return {
            "tasks_for_today": len(today),
            "open_tasks_for_today": sum(1 for t in today if not t.completed),
            "tasks_completed_total": stats.tasks_completed,
            "hard_tasks_completed": stats.hard_tasks_completed,
            "pomodoros_today": stats.daily_pomodoros_completed,
            "pomodoros_total": stats.total_pomodoros,
            "notes_created": stats.notes_created,
        }

class FocusNotesPomodoroSensor(FocusNotesSensor):
    """End time of the running pomodoro, unknown when idle."""
    _attr_device_class = SensorDeviceClass.TIMESTAMP

    def __init__(self, coord: FocusNotesCoordinator):
        super().__init__(coord, "pomodoro", "Pomodoro Ends", "mdi:timer-outline")

    @property
    def native_value(self):
        task = self._coord.get_active_pomodoro()
        if task is None or not task.pomodoro_end_time:
            return None
        return dt_util.parse_datetime(task.pomodoro_end_time)

    @property
    def extra_state_attributes(self):
        task = self._coord.get_active_pomodoro()
        if task is None:
            return {"task_id": None, "task_title": None}
        return {"task_id": task.id, "task_title": task.title, "sessions_today": task.pomodoro_count}
