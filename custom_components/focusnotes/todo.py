"""Todo entity for FocusNotes integration."""
from __future__ import annotations

from datetime import date, datetime
import logging

from homeassistant.components.todo import TodoItem, TodoItemStatus, TodoListEntity, TodoListEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util import dt as dt_util

from .const import DOMAIN, EFFORT_MEDIUM
from .coordinator import FocusNotesCoordinator
from .models import Task
from .reminders import parse_task_date, parse_time_of_day

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: FocusNotesCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([FocusNotesTaskList(coordinator)], True)


def _due_of(task: Task) -> date | datetime | None:
    task_date = parse_task_date(task.date)
    if task_date is None:
        return None
    at = parse_time_of_day(task.time)
    if at is None:
        return task_date
    return datetime.combine(task_date, at).replace(tzinfo=dt_util.now().tzinfo)


def _split_due(due: date | datetime | None) -> tuple[str | None, str | None]:
    """Return (date, time) strings for a todo due value; time is "" for all-day."""
    if due is None:
        return None, None
    if isinstance(due, datetime):
        local = dt_util.as_local(due)
        return local.date().isoformat(), local.strftime("%H:%M")
    return due.isoformat(), ""


class FocusNotesTaskList(TodoListEntity):
    _attr_supported_features = (
        TodoListEntityFeature.CREATE_TODO_ITEM
        | TodoListEntityFeature.UPDATE_TODO_ITEM
        | TodoListEntityFeature.DELETE_TODO_ITEM
        | TodoListEntityFeature.SET_DUE_DATE_ON_ITEM
        | TodoListEntityFeature.SET_DUE_DATETIME_ON_ITEM
        | TodoListEntityFeature.SET_DESCRIPTION_ON_ITEM
    )

    def __init__(self, coord: FocusNotesCoordinator):
        self._coord = coord
        self._attr_name = "FocusNotes Tasks"
        self._attr_unique_id = f"{DOMAIN}_tasks"
        self._attr_icon = "mdi:checkbox-marked-circle-outline"

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        """Check if coordinator is ready."""
        return self._coord.model is not None

    @property
    def todo_items(self) -> list[TodoItem]:
        return [
            TodoItem(
                summary=task.title,
                uid=task.id,
                status=TodoItemStatus.COMPLETED if task.completed else TodoItemStatus.NEEDS_ACTION,
                due=_due_of(task),
                description=task.notes or None,
            )
            for task in self._coord.get_tasks()
        ]

    async def async_create_todo_item(self, item: TodoItem) -> None:
        task_date, task_time = _split_due(item.due)
        task = await self._coord.async_add_task(
            item.summary or "",
            effort=EFFORT_MEDIUM,
            notes=item.description or "",
            date=task_date,
            time=task_time or None,
        )
        if item.status == TodoItemStatus.COMPLETED:
            await self._coord.async_toggle_task(task.id)

    async def async_update_todo_item(self, item: TodoItem) -> None:
        task = self._coord.get_task(item.uid)
        if task is None:
            _LOGGER.warning("Todo item %s has no matching task", item.uid)
            return

        if item.due is None and task.date:
            raise ServiceValidationError("A task always belongs to a date; move it instead of clearing the due date")

        task_date, task_time = _split_due(item.due)
        notes = item.description or ""
        await self._coord.async_update_task(
            task.id,
            title=item.summary if item.summary and item.summary != task.title else None,
            notes=notes if notes != task.notes else None,
            date=task_date if task_date and task_date != task.date else None,
            time=task_time if task_time is not None and (task_time or None) != task.time else None,
        )

        completed = item.status == TodoItemStatus.COMPLETED
        if completed != task.completed:
            await self._coord.async_toggle_task(task.id)

    async def async_delete_todo_items(self, uids: list[str]) -> None:
        for uid in uids:
            await self._coord.async_delete_task(uid)
