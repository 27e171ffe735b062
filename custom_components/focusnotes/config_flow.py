"""Config flow for FocusNotes integration."""
from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback
import homeassistant.helpers.config_validation as cv
import voluptuous as vol

from .const import (
    CONF_ACHIEVEMENT_ALERTS,
    CONF_ENABLED,
    CONF_NOTIFY_SERVICE,
    CONF_POMODORO_ALERTS,
    CONF_REMINDER_TIME,
    CONF_SOUND_ENABLED,
    CONF_STREAK_MILESTONES,
    CONF_STREAK_REMINDERS,
    CONF_TASK_REMINDERS,
    CONF_VIBRATION_ENABLED,
    DEFAULT_REMINDER_TIME,
    DOMAIN,
)
from .reminders import parse_time_of_day

_TOGGLES = (
    CONF_ENABLED,
    CONF_SOUND_ENABLED,
    CONF_VIBRATION_ENABLED,
    CONF_TASK_REMINDERS,
    CONF_POMODORO_ALERTS,
    CONF_STREAK_REMINDERS,
    CONF_STREAK_MILESTONES,
    CONF_ACHIEVEMENT_ALERTS,
)


class FocusNotesConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        # Check for existing instance
        if self._async_current_entries():
            return self.async_abort(reason="single_instance_allowed")

        errors = {}
        if user_input is not None:
            service = (user_input.get(CONF_NOTIFY_SERVICE) or "").strip()
            if service and not cv.valid_entity_id(service if "." in service else f"notify.{service}"):
                errors[CONF_NOTIFY_SERVICE] = "invalid_notify_service"
            else:
                return self.async_create_entry(title="FocusNotes", data={CONF_NOTIFY_SERVICE: service})

        data_schema = vol.Schema({
            vol.Optional(CONF_NOTIFY_SERVICE, default=""): str,
        })
        return self.async_show_form(step_id="user", data_schema=data_schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return FocusNotesOptionsFlow(config_entry)

class FocusNotesOptionsFlow(config_entries.OptionsFlow):
    """Edit notification settings. The update listener hands them to the coordinator."""

    def __init__(self, entry):
        self.entry = entry

    def _current(self, key: str, default: Any) -> Any:
        coordinator = self.hass.data.get(DOMAIN, {}).get(self.entry.entry_id)
        if coordinator is not None:
            return getattr(coordinator.settings, key, default)
        return self.entry.options.get(key, default)

    async def async_step_init(self, user_input=None):
        errors = {}
        if user_input is not None:
            if parse_time_of_day(user_input.get(CONF_REMINDER_TIME)) is None:
                errors[CONF_REMINDER_TIME] = "invalid_time"
            else:
                return self.async_create_entry(title="", data=user_input)

        schema: dict[Any, Any] = {
            vol.Optional(toggle, default=self._current(toggle, True)): bool for toggle in _TOGGLES
        }
        schema[vol.Optional(CONF_REMINDER_TIME, default=self._current(CONF_REMINDER_TIME, DEFAULT_REMINDER_TIME))] = str
        return self.async_show_form(step_id="init", data_schema=vol.Schema(schema), errors=errors)
