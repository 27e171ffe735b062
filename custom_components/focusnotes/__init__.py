"""The FocusNotes integration."""
from __future__ import annotations

import asyncio
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.typing import ConfigType
import voluptuous as vol

_LOGGER = logging.getLogger(__name__)

from .const import (
    CONF_NOTIFY_SERVICE,
    DOMAIN,
    EFFORT_EASY,
    EFFORT_HARD,
    EFFORT_MEDIUM,
    PLATFORMS,
    SERVICE_ADD_NOTE,
    SERVICE_ADD_TASK,
    SERVICE_DELETE_NOTE,
    SERVICE_DELETE_TASK,
    SERVICE_END_DAY,
    SERVICE_START_POMODORO,
    SERVICE_STOP_POMODORO,
    SERVICE_TOGGLE_TASK,
    SERVICE_UPDATE_NOTE,
    SERVICE_UPDATE_TASK,
)
from .coordinator import FocusNotesCoordinator

SERVICES = (
    SERVICE_ADD_TASK,
    SERVICE_UPDATE_TASK,
    SERVICE_TOGGLE_TASK,
    SERVICE_DELETE_TASK,
    SERVICE_START_POMODORO,
    SERVICE_STOP_POMODORO,
    SERVICE_END_DAY,
    SERVICE_ADD_NOTE,
    SERVICE_UPDATE_NOTE,
    SERVICE_DELETE_NOTE,
)

EFFORTS = [EFFORT_EASY, EFFORT_MEDIUM, EFFORT_HARD]

ADD_TASK_SCHEMA = vol.Schema({
    vol.Required("title"): cv.string,
    vol.Optional("effort", default=EFFORT_MEDIUM): vol.In(EFFORTS),
    vol.Optional("notes", default=""): cv.string,
    vol.Optional("date"): cv.date,
    vol.Optional("time"): cv.string,
})

UPDATE_TASK_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("effort"): vol.In(EFFORTS),
    vol.Optional("notes"): cv.string,
    vol.Optional("date"): cv.date,
    vol.Optional("time"): vol.Any(cv.string, None),
})

TASK_ID_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
})

STOP_POMODORO_SCHEMA = vol.Schema({
    vol.Optional("task_id"): cv.string,
})

ADD_NOTE_SCHEMA = vol.Schema({
    vol.Required("title"): cv.string,
    vol.Optional("content", default=""): cv.string,
})

UPDATE_NOTE_SCHEMA = vol.Schema({
    vol.Required("note_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("content"): cv.string,
})

NOTE_ID_SCHEMA = vol.Schema({
    vol.Required("note_id"): cv.string,
})


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the FocusNotes component."""
    return True

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up FocusNotes from a config entry."""
    try:
        coordinator = FocusNotesCoordinator(hass, entry.data.get(CONF_NOTIFY_SERVICE) or None)
        await coordinator.async_init()
    except (asyncio.TimeoutError, ConnectionError, OSError) as ex:
        raise ConfigEntryNotReady(f"Failed to initialize FocusNotes coordinator: {ex}") from ex
    except Exception as ex:
        _LOGGER.exception("Unexpected error setting up FocusNotes")
        raise ConfigEntryNotReady(f"Setup failed: {ex}") from ex

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception as ex:
        _LOGGER.exception("Failed to set up platforms")
        raise ConfigEntryNotReady(f"Failed to set up platforms: {ex}") from ex

    await coordinator.async_start()
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    def _wrap(name: str, handler):
        """Translate unexpected errors from a service handler into HomeAssistantError."""
        async def _service(call: ServiceCall) -> None:
            try:
                _LOGGER.debug("FocusNotes: %s service called", name)
                await handler(call)
            except HomeAssistantError:
                raise
            except KeyError as ex:
                _LOGGER.error("Missing required parameter in %s service: %s", name, ex)
                raise HomeAssistantError(f"Missing required parameter: {ex}") from ex
            except (ValueError, TypeError) as ex:
                _LOGGER.error("Invalid parameter value in %s service: %s", name, ex)
                raise HomeAssistantError(f"Invalid parameter: {ex}") from ex
            except Exception as ex:
                _LOGGER.exception("Unexpected error in %s service", name)
                raise HomeAssistantError(f"Service failed: {ex}") from ex
        return _service

    # ---- Services ----
    async def _add_task(call: ServiceCall) -> None:
        data = call.data
        task = await coordinator.async_add_task(
            data["title"],
            effort=data.get("effort", EFFORT_MEDIUM),
            notes=data.get("notes", ""),
            date=data.get("date"),
            time=data.get("time"),
        )
        _LOGGER.info("Added task '%s' for %s", task.title, task.date)

    async def _update_task(call: ServiceCall) -> None:
        data = call.data
        time = data["time"] if "time" in data else None
        await coordinator.async_update_task(
            data["task_id"],
            title=data.get("title"),
            notes=data.get("notes"),
            effort=data.get("effort"),
            date=data.get("date"),
            time="" if "time" in data and time is None else time,
        )

    async def _toggle_task(call: ServiceCall) -> None:
        task = await coordinator.async_toggle_task(call.data["task_id"])
        _LOGGER.info("Task '%s' completed: %s", task.title, task.completed)

    async def _delete_task(call: ServiceCall) -> None:
        await coordinator.async_delete_task(call.data["task_id"])

    async def _start_pomodoro(call: ServiceCall) -> None:
        await coordinator.async_start_pomodoro(call.data["task_id"])

    async def _stop_pomodoro(call: ServiceCall) -> None:
        await coordinator.async_stop_pomodoro(call.data.get("task_id"))

    async def _end_day(call: ServiceCall) -> None:
        summary = await coordinator.async_end_day()
        _LOGGER.info(
            "Day ended: %d/%d tasks, streak %d (%s)",
            summary.completed_tasks, summary.total_tasks, summary.streak, summary.message,
        )

    async def _add_note(call: ServiceCall) -> None:
        await coordinator.async_add_note(call.data["title"], call.data.get("content", ""))

    async def _update_note(call: ServiceCall) -> None:
        data = call.data
        await coordinator.async_update_note(data["note_id"], title=data.get("title"), content=data.get("content"))

    async def _delete_note(call: ServiceCall) -> None:
        await coordinator.async_delete_note(call.data["note_id"])

    hass.services.async_register(DOMAIN, SERVICE_ADD_TASK, _wrap(SERVICE_ADD_TASK, _add_task), schema=ADD_TASK_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_UPDATE_TASK, _wrap(SERVICE_UPDATE_TASK, _update_task), schema=UPDATE_TASK_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_TOGGLE_TASK, _wrap(SERVICE_TOGGLE_TASK, _toggle_task), schema=TASK_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_DELETE_TASK, _wrap(SERVICE_DELETE_TASK, _delete_task), schema=TASK_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_START_POMODORO, _wrap(SERVICE_START_POMODORO, _start_pomodoro), schema=TASK_ID_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_STOP_POMODORO, _wrap(SERVICE_STOP_POMODORO, _stop_pomodoro), schema=STOP_POMODORO_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_END_DAY, _wrap(SERVICE_END_DAY, _end_day), schema=vol.Schema({}))
    hass.services.async_register(DOMAIN, SERVICE_ADD_NOTE, _wrap(SERVICE_ADD_NOTE, _add_note), schema=ADD_NOTE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_UPDATE_NOTE, _wrap(SERVICE_UPDATE_NOTE, _update_note), schema=UPDATE_NOTE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_DELETE_NOTE, _wrap(SERVICE_DELETE_NOTE, _delete_note), schema=NOTE_ID_SCHEMA)

    return True

async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Push edited notification options into the coordinator."""
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]
    if entry.options:
        await coordinator.async_update_settings(**entry.options)

async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator: FocusNotesCoordinator | None = hass.data[DOMAIN].pop(entry.entry_id, None)
        if coordinator is not None:
            await coordinator.async_shutdown()
        # Unregister services if this is the last instance
        if not hass.data[DOMAIN]:
            for service in SERVICES:
                hass.services.async_remove(DOMAIN, service)
    return unload_ok
