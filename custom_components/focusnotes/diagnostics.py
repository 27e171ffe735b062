"""Diagnostics support for FocusNotes integration."""
from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_NOTIFY_SERVICE, DOMAIN
from .coordinator import FocusNotesCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]

    if not coordinator.model:
        return {"error": "Coordinator model not initialized"}

    stats = coordinator.model.stats
    tasks = coordinator.model.tasks

    tasks_by_effort: dict[str, int] = {}
    for task in tasks:
        tasks_by_effort[task.effort] = tasks_by_effort.get(task.effort, 0) + 1

    summary = coordinator.last_day_summary

    return {
        "config_data": {
            "notify_service": entry.data.get(CONF_NOTIFY_SERVICE) or None,
        },
        "settings": vars(coordinator.settings),
        "stats": {
            "xp": stats.xp,
            "level": stats.level,
            "streak": stats.streak,
            "freeze_tokens": stats.freeze_tokens,
            "pomodoro_xp": stats.pomodoro_xp,
            "total_pomodoros": stats.total_pomodoros,
            "tasks_completed": stats.tasks_completed,
            "hard_tasks_completed": stats.hard_tasks_completed,
            "notes_created": stats.notes_created,
            "calendar_tasks_created": stats.calendar_tasks_created,
            "daily_tasks_completed": stats.daily_tasks_completed,
            "daily_pomodoros_completed": stats.daily_pomodoros_completed,
            "last_end_day": stats.last_end_day,
            "last_closed_date": stats.last_closed_date,
            "badges_earned": [b.id for b in stats.earned_badges()],
        },
        "counts": {
            "tasks": len(tasks),
            "tasks_completed": sum(1 for t in tasks if t.completed),
            "tasks_by_effort": tasks_by_effort,
            "notes": len(coordinator.model.notes),
        },
        "scheduler": {
            "scheduled_notifications": len(coordinator.notifier.scheduled_ids()),
            "active_pomodoro": coordinator.model.active_pomodoro().id if coordinator.model.active_pomodoro() else None,
        },
        "last_day_summary": {
            "closed_date": summary.closed_date.isoformat(),
            "completed_tasks": summary.completed_tasks,
            "total_tasks": summary.total_tasks,
            "streak": summary.streak,
        } if summary else None,
    }
