"""Button entities for FocusNotes integration."""
from __future__ import annotations

import logging

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import FocusNotesCoordinator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([FocusNotesEndDayButton(coordinator), FocusNotesStopPomodoroButton(coordinator)], True)

class FocusNotesEndDayButton(ButtonEntity):
    _attr_icon = "mdi:weather-night"

    def __init__(self, coord: FocusNotesCoordinator):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_end_day_button"
        self._attr_name = "FocusNotes End Day"

    @property
    def available(self) -> bool:
        """Check if coordinator is ready."""
        return self._coord.model is not None

    async def async_press(self) -> None:
        _LOGGER.info("FocusNotes: End Day button pressed")
        summary = await self._coord.async_end_day()
        _LOGGER.info(
            "FocusNotes: closed %s with %d/%d tasks done, streak %d",
            summary.closed_date, summary.completed_tasks, summary.total_tasks, summary.streak,
        )

class FocusNotesStopPomodoroButton(ButtonEntity):
    _attr_icon = "mdi:timer-off-outline"

    def __init__(self, coord: FocusNotesCoordinator):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_stop_pomodoro_button"
        self._attr_name = "FocusNotes Stop Pomodoro"

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        """Only pressable while a pomodoro runs."""
        return self._coord.model is not None and self._coord.get_active_pomodoro() is not None

    async def async_press(self) -> None:
        credited = await self._coord.async_stop_pomodoro()
        _LOGGER.info("FocusNotes: pomodoro stopped (credited=%s)", credited)
