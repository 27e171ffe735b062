"""Text input entities for FocusNotes integration."""
from __future__ import annotations
from homeassistant.components.text import TextEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from .const import DOMAIN
from .coordinator import FocusNotesCoordinator
from .reminders import TIME_OF_DAY_PATTERN

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([FocusNotesReminderTime(coordinator)], True)

class FocusNotesReminderTime(TextEntity):
    """Time of day (HH:MM) for the daily streak reminder."""
    _attr_icon = "mdi:bell-ring-outline"
    _attr_native_min = 4
    _attr_native_max = 5
    _attr_pattern = TIME_OF_DAY_PATTERN.pattern
    _attr_mode = "text"

    def __init__(self, coord: FocusNotesCoordinator):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_reminder_time"
        self._attr_name = "FocusNotes Daily Reminder Time"

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def native_value(self) -> str:
        return self._coord.settings.reminder_time

    async def async_set_value(self, value: str) -> None:
        await self._coord.async_update_settings(reminder_time=value)
