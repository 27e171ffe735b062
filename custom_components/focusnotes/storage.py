"""Storage utilities for FocusNotes integration."""
from __future__ import annotations

from dataclasses import MISSING, asdict, fields
from datetime import timedelta
import logging
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store
from homeassistant.util import dt as dt_util

from .badges import seed_badges
from .const import (
    DEFAULT_REMINDER_TIME,
    EFFORT_EASY,
    EFFORT_HARD,
    EFFORT_MEDIUM,
    SETTINGS_STORAGE_KEY,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from .day_cycle import parse_closed_date
from .models import Badge, Note, NotificationSettings, Stats, StorageModel, Task
from .progression import calculate_level
from .reminders import parse_time_of_day

_LOGGER = logging.getLogger(__name__)

_EFFORTS = (EFFORT_EASY, EFFORT_MEDIUM, EFFORT_HARD)


def _coerce(value: Any, default: Any) -> Any:
    """Match a persisted value to the type of its field default."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
    if default is None or isinstance(default, str):
        return value if isinstance(value, str) else default
    return value


def _merge_defaults(cls, raw: dict[str, Any] | None, **overrides) -> Any:
    """Build ``cls`` from a persisted dict.

    Unknown keys are dropped; missing or null fields, and values whose type
    does not fit the default, take the dataclass default. Fields without a
    default must be supplied by ``raw`` or ``overrides``.
    """
    raw = raw if isinstance(raw, dict) else {}
    values: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in overrides:
            values[f.name] = overrides[f.name]
            continue
        value = raw.get(f.name)
        if value is None:
            if f.default is not MISSING:
                value = f.default
            elif f.default_factory is not MISSING:
                value = f.default_factory()
            else:
                continue
        elif f.default is not MISSING:
            value = _coerce(value, f.default)
        values[f.name] = value
    return cls(**values)


def _heal_task(raw: dict[str, Any], today: str) -> Task | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        _LOGGER.warning("Skipping stored task without id: %s", raw)
        return None
    task = _merge_defaults(Task, raw)
    task.id = str(task.id)
    if task.effort not in _EFFORTS:
        task.effort = EFFORT_MEDIUM
    task.pomodoro_count = max(0, task.pomodoro_count)
    if not task.date:
        task.date = today
    if task.time and parse_time_of_day(task.time) is None:
        _LOGGER.debug("Dropping malformed time %s on task %s", task.time, task.id)
        task.time = None
    if task.pomodoro_active and not task.pomodoro_end_time:
        task.clear_pomodoro()
    if not task.pomodoro_active:
        task.pomodoro_end_time = None
    return task


def _heal_note(raw: dict[str, Any]) -> Note | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    note = _merge_defaults(Note, raw)
    if not note.updated_at or (note.created_at and note.updated_at < note.created_at):
        note.updated_at = note.created_at
    return note


def _heal_stats(raw: dict[str, Any] | None) -> Stats:
    raw = raw if isinstance(raw, dict) else {}
    stored_badges = [
        _merge_defaults(Badge, b, title=b.get("title") or "", description=b.get("description") or "", emoji=b.get("emoji") or "")
        for b in raw.get("badges") or []
        if isinstance(b, dict) and b.get("id")
    ]
    stats = _merge_defaults(Stats, raw, badges=seed_badges(stored_badges))

    for f in fields(Stats):
        value = getattr(stats, f.name)
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            setattr(stats, f.name, 0)
    stats.level = calculate_level(stats.xp)

    if stats.last_end_day and parse_closed_date(stats.last_closed_date) is None:
        # Older data only knows when the last boundary ran; that day was the one closed
        last = dt_util.parse_datetime(stats.last_end_day)
        if last is not None:
            closed = dt_util.as_local(last).date() - timedelta(days=1)
            stats.last_closed_date = closed.isoformat()
    return stats


class FocusNotesStore:
    def __init__(self, hass: HomeAssistant):
        self._store: Store[dict] = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._settings_store: Store[dict] = Store(hass, STORAGE_VERSION, SETTINGS_STORAGE_KEY)

    async def async_load(self) -> StorageModel:
        data = await self._store.async_load() or {}
        today = dt_util.now().date().isoformat()

        tasks = [t for t in (_heal_task(raw, today) for raw in data.get("tasks") or []) if t]
        notes = [n for n in (_heal_note(raw) for raw in data.get("notes") or []) if n]
        stats = _heal_stats(data.get("stats"))
        return StorageModel(tasks=tasks, stats=stats, notes=notes)

    async def async_save(self, model: StorageModel) -> None:
        data = {
            "tasks": [vars(t) for t in model.tasks],
            "stats": asdict(model.stats),
            "notes": [vars(n) for n in model.notes],
        }
        await self._store.async_save(data)

    async def async_load_settings(self) -> NotificationSettings:
        data = await self._settings_store.async_load() or {}
        settings = _merge_defaults(NotificationSettings, data)
        if parse_time_of_day(settings.reminder_time) is None:
            _LOGGER.warning("Invalid stored reminder time %s, using default", settings.reminder_time)
            settings.reminder_time = DEFAULT_REMINDER_TIME
        return settings

    async def async_save_settings(self, settings: NotificationSettings) -> None:
        await self._settings_store.async_save(vars(settings))
