"""Data coordinator for FocusNotes integration."""
from __future__ import annotations

import asyncio
import copy
from dataclasses import fields, replace
from datetime import date, datetime, timedelta
import logging
from typing import Any, Callable
import uuid

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers.event import async_track_time_change, async_track_time_interval
from homeassistant.util import dt as dt_util

from .badges import evaluate_badges
from .const import (
    DAILY_REMINDER_ID,
    DAY_CHECK_INTERVAL,
    EARLY_BIRD_HOUR,
    EFFORT_XP,
    EFFORT_MEDIUM,
    EVENT_BADGE_EARNED,
    EVENT_DAY_ENDED,
    POMODORO_GRACE,
    SOUND_POMODORO_END,
    SOUND_TASK_COMPLETE,
    VIBRATE_POMODORO,
)
from .day_cycle import DaySummary, end_day, needs_auto_end_day, parse_closed_date, stamp_baseline
from .models import Badge, Note, NotificationSettings, Stats, StorageModel, Task
from .notifications import FocusNotesFeedback, FocusNotesNotifier
from .progression import apply_pomodoro_completion, apply_task_toggle, get_level_title
from .reminders import (
    achievement_content,
    is_future_task,
    is_streak_milestone,
    parse_task_date,
    parse_time_of_day,
    pomodoro_end_content,
    pomodoro_end_time,
    pomodoro_start_content,
    streak_milestone_content,
    streak_reminder_content,
    task_reminder_content,
    task_reminder_time,
)
from .storage import FocusNotesStore

_LOGGER = logging.getLogger(__name__)


def _clean_title(title: str | None, what: str = "Task") -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ServiceValidationError(f"{what} title cannot be empty")
    return cleaned


def _check_effort(effort: str) -> str:
    if effort not in EFFORT_XP:
        raise ServiceValidationError(f"Unknown effort '{effort}', expected one of {', '.join(EFFORT_XP)}")
    return effort


def _normalize_date(value: date | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    parsed = parse_task_date(str(value))
    if parsed is None:
        raise ServiceValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return parsed.isoformat()


def _normalize_time(value: str | None) -> str | None:
    if not value:
        return None
    parsed = parse_time_of_day(str(value))
    if parsed is None:
        raise ServiceValidationError(f"Invalid time '{value}', expected HH:MM")
    return parsed.strftime("%H:%M")


class FocusNotesCoordinator:
    """Coordinates data operations for FocusNotes integration.

    Every mutation takes a deep copy of the model under one lock, applies the
    change to the copy and persists it. The copy replaces ``self.model`` only
    after the store accepted it, so a failed write leaves the previous state
    in place. Notifications belonging to the change are scheduled before the
    write and cancelled again if it fails; everything announced afterwards
    (badges, milestones, sounds) is best effort.
    """

    def __init__(self, hass: HomeAssistant, notify_service: str | None = None) -> None:
        self.hass = hass
        self.store = FocusNotesStore(hass)
        self.model: StorageModel | None = None
        self.settings = NotificationSettings()
        self.notifier = FocusNotesNotifier(hass, notify_service, self.settings)
        self.feedback = FocusNotesFeedback(hass, self.settings)
        self.last_day_summary: DaySummary | None = None
        self._lock = asyncio.Lock()
        self._listeners: list[CALLBACK_TYPE] = []
        self._unsub_timers: list[CALLBACK_TYPE] = []

    async def async_init(self) -> None:
        """Load data, catch up on missed days and re-arm notifications."""
        self.model = await self.store.async_load()
        self._apply_settings(await self.store.async_load_settings())

        if self.model.stats.last_end_day is None:
            _LOGGER.info("First start, stamping day baseline")
            stamp_baseline(self.model, dt_util.now())
            await self.store.async_save(self.model)

        summary = await self.async_check_day_boundary()
        if summary is None:
            await self._async_restore_schedules()
        await self.async_reschedule_daily_reminder()

    async def async_start(self) -> None:
        """Start the midnight and periodic re-check timers."""
        self._unsub_timers.append(
            async_track_time_change(self.hass, self._async_handle_midnight, hour=0, minute=0, second=5)
        )
        self._unsub_timers.append(
            async_track_time_interval(self.hass, self._async_handle_periodic_check, DAY_CHECK_INTERVAL)
        )

    async def async_shutdown(self) -> None:
        for unsub in self._unsub_timers:
            unsub()
        self._unsub_timers.clear()
        await self.notifier.async_cancel_all()

    # ---- listeners ----
    @callback
    def async_add_listener(self, update_callback: CALLBACK_TYPE) -> Callable[[], None]:
        """Register an entity refresh callback, returning its remover."""
        self._listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            if update_callback in self._listeners:
                self._listeners.remove(update_callback)

        return remove_listener

    @callback
    def _async_update_listeners(self) -> None:
        for update_callback in list(self._listeners):
            update_callback()

    # ---- read access ----
    def get_tasks(self) -> list[Task]:
        if not self.model:
            return []
        return list(self.model.tasks)

    def get_task(self, task_id: str) -> Task | None:
        if not self.model:
            return None
        return self.model.get_task(task_id)

    def get_tasks_for_date(self, day: date) -> list[Task]:
        return [t for t in self.get_tasks() if t.date == day.isoformat()]

    def get_notes(self) -> list[Note]:
        if not self.model:
            return []
        return list(self.model.notes)

    def get_stats(self) -> Stats | None:
        if not self.model:
            return None
        return self.model.stats

    def get_active_pomodoro(self) -> Task | None:
        if not self.model:
            return None
        return self.model.active_pomodoro()

    def get_level_title(self) -> str:
        stats = self.get_stats()
        return get_level_title(stats.level if stats else 1)

    # ---- commit plumbing ----
    def _working_copy(self) -> StorageModel:
        if self.model is None:
            raise RuntimeError("Model not initialized")
        return copy.deepcopy(self.model)

    async def _async_commit(self, model: StorageModel, new_ids: list[str | None] | None = None) -> None:
        """Persist ``model`` and make it current."""
        try:
            await self.store.async_save(model)
        except Exception as err:
            _LOGGER.error("Failed to save FocusNotes data: %s", err)
            for notification_id in new_ids or []:
                await self.notifier.async_cancel(notification_id)
            raise HomeAssistantError(f"Failed to save FocusNotes data: {err}") from err
        self.model = model
        self._async_update_listeners()

    async def _async_cancel_all(self, notification_ids: list[str | None]) -> None:
        for notification_id in notification_ids:
            await self.notifier.async_cancel(notification_id)

    async def _async_schedule_task_reminder(
        self, task: Task, now: datetime, suppress_immediate_feedback: bool = False
    ) -> str | None:
        trigger = task_reminder_time(task, now)
        if trigger is None:
            return None
        return await self.notifier.async_schedule(
            task_reminder_content(task), trigger, suppress_immediate_feedback=suppress_immediate_feedback
        )

    async def _async_schedule_pomodoro_end(self, task: Task, end: datetime) -> str | None:
        task_id = task.id

        async def _on_end() -> None:
            await self.async_finish_pomodoro(task_id)

        return await self.notifier.async_schedule(pomodoro_end_content(task), end, on_fire=_on_end)

    async def _async_announce(self, new_badges: list[Badge], milestone: int | None = None) -> None:
        """Publish badge unlocks and streak milestones after a commit."""
        for badge in new_badges:
            try:
                self.hass.bus.async_fire(
                    EVENT_BADGE_EARNED,
                    {"badge_id": badge.id, "title": badge.title, "emoji": badge.emoji, "earned_at": badge.earned_at},
                )
                await self.notifier.async_schedule(achievement_content(badge.title, badge.id))
            except Exception as err:  # noqa: BLE001
                _LOGGER.warning("Failed to announce badge %s: %s", badge.id, err)

        if milestone is not None and is_streak_milestone(milestone):
            _LOGGER.info("Streak milestone reached: %d days", milestone)
            await self.notifier.async_schedule(streak_milestone_content(milestone))

    # ---- tasks ----
    async def async_add_task(
        self,
        title: str,
        effort: str = EFFORT_MEDIUM,
        notes: str = "",
        date: date | str | None = None,
        time: str | None = None,
    ) -> Task:
        """Add a task; it belongs to today unless a date is given."""
        title = _clean_title(title)
        effort = _check_effort(effort)
        task_date = _normalize_date(date)
        task_time = _normalize_time(time)

        async with self._lock:
            model = self._working_copy()
            now = dt_util.now()
            task = Task(
                id=str(uuid.uuid4()),
                title=title,
                notes=notes or "",
                effort=effort,
                date=task_date or dt_util.as_local(now).date().isoformat(),
                time=task_time,
            )

            future = is_future_task(task, now)
            if future:
                model.stats.calendar_tasks_created += 1
            if dt_util.as_local(now).hour < EARLY_BIRD_HOUR:
                model.stats.early_tasks_created += 1
            new_badges = evaluate_badges(model.stats, now)

            task.notification_id = await self._async_schedule_task_reminder(
                task, now, suppress_immediate_feedback=future
            )
            model.tasks.append(task)
            await self._async_commit(model, [task.notification_id])

        _LOGGER.info("Added task %s (%s, %s)", task.id, effort, task.date)
        await self._async_announce(new_badges)
        return task

    async def async_update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        notes: str | None = None,
        effort: str | None = None,
        date: date | str | None = None,
        time: str | None = None,
    ) -> Task:
        """Edit a task. An empty ``time`` clears it; other None arguments keep their value."""
        async with self._lock:
            model = self._working_copy()
            task = model.get_task(task_id)
            if task is None:
                raise ServiceValidationError(f"Unknown task: {task_id}")

            if title is not None:
                task.title = _clean_title(title)
            if notes is not None:
                task.notes = notes
            if effort is not None and effort != task.effort:
                _check_effort(effort)
                if task.completed:
                    raise ServiceValidationError("Cannot change the effort of a completed task")
                task.effort = effort
            if date is not None:
                task.date = _normalize_date(date)
            if time is not None:
                task.time = _normalize_time(time)

            stale: list[str | None] = []
            new_ids: list[str | None] = []
            if not task.completed and not task.pomodoro_active:
                now = dt_util.now()
                stale.append(task.notification_id)
                task.notification_id = await self._async_schedule_task_reminder(
                    task, now, suppress_immediate_feedback=is_future_task(task, now)
                )
                new_ids.append(task.notification_id)

            await self._async_commit(model, new_ids)

        await self._async_cancel_all(stale)
        return task

    async def async_toggle_task(self, task_id: str) -> Task:
        """Complete or un-complete a task, crediting or reversing its XP."""
        async with self._lock:
            model = self._working_copy()
            task = model.get_task(task_id)
            if task is None:
                raise ServiceValidationError(f"Unknown task: {task_id}")
            now = dt_util.now()
            completing = not task.completed

            stale: list[str | None] = [task.notification_id]
            new_ids: list[str | None] = []
            if completing:
                task.completed = True
                # Completing stops a running pomodoro without credit
                task.clear_pomodoro()
            else:
                task.completed = False
                task.notification_id = await self._async_schedule_task_reminder(task, now)
                new_ids.append(task.notification_id)

            delta = apply_task_toggle(model.stats, task.effort, completing)
            new_badges = evaluate_badges(model.stats, now)
            await self._async_commit(model, new_ids)

        _LOGGER.debug("Task %s completed=%s (%+d XP)", task_id, task.completed, delta)
        await self._async_cancel_all(stale)
        if completing:
            await self.feedback.async_play_sound(SOUND_TASK_COMPLETE)
        await self._async_announce(new_badges)
        return task

    async def async_delete_task(self, task_id: str) -> None:
        async with self._lock:
            model = self._working_copy()
            task = model.get_task(task_id)
            if task is None:
                raise ServiceValidationError(f"Unknown task: {task_id}")
            model.tasks.remove(task)
            await self._async_commit(model)

        _LOGGER.info("Deleted task %s", task_id)
        await self.notifier.async_cancel(task.notification_id)

    # ---- pomodoro ----
    async def async_start_pomodoro(self, task_id: str) -> Task:
        async with self._lock:
            model = self._working_copy()
            task = model.get_task(task_id)
            if task is None:
                raise ServiceValidationError(f"Unknown task: {task_id}")
            running = model.active_pomodoro()
            if running is not None:
                raise ServiceValidationError(f"A pomodoro is already running for '{running.title}'")
            if task.completed:
                raise ServiceValidationError("Cannot start a pomodoro on a completed task")

            now = dt_util.now()
            end = pomodoro_end_time(now)
            stale = [task.notification_id]
            task.pomodoro_active = True
            task.pomodoro_end_time = end.isoformat()
            task.notification_id = await self._async_schedule_pomodoro_end(task, end)
            await self._async_commit(model, [task.notification_id])

        _LOGGER.info("Pomodoro started for task %s, ends %s", task_id, task.pomodoro_end_time)
        await self._async_cancel_all(stale)
        await self.notifier.async_schedule(pomodoro_start_content(task))
        return task

    def _complete_pomodoro(self, model: StorageModel, task: Task, now: datetime) -> list[Badge]:
        task.pomodoro_count += 1
        task.clear_pomodoro()
        credit = apply_pomodoro_completion(model.stats)
        _LOGGER.info("Pomodoro finished for task %s (+%d XP)", task.id, credit)
        return evaluate_badges(model.stats, now)

    async def async_finish_pomodoro(self, task_id: str) -> bool:
        """Credit a pomodoro whose deadline has passed.

        Safe to call more than once: an inactive task or a deadline still in
        the future is a no-op and returns False.
        """
        async with self._lock:
            if self.model is None:
                return False
            current = self.model.get_task(task_id)
            if current is None or not current.pomodoro_active:
                _LOGGER.debug("Ignoring finish for inactive pomodoro on %s", task_id)
                return False
            now = dt_util.now()
            end = dt_util.parse_datetime(current.pomodoro_end_time or "")
            if end is not None and now + POMODORO_GRACE < end:
                _LOGGER.debug("Pomodoro on %s not due until %s", task_id, end)
                return False

            model = self._working_copy()
            task = model.get_task(task_id)
            stale = [task.notification_id]
            new_badges = self._complete_pomodoro(model, task, now)
            await self._async_commit(model)

        await self._async_cancel_all(stale)
        await self.feedback.async_play_sound(SOUND_POMODORO_END)
        await self.feedback.async_vibrate(VIBRATE_POMODORO)
        await self._async_announce(new_badges)
        return True

    async def async_stop_pomodoro(self, task_id: str | None = None) -> bool:
        """Stop the running pomodoro. Returns True if it was past its deadline and got credited."""
        async with self._lock:
            model = self._working_copy()
            task = model.get_task(task_id) if task_id else model.active_pomodoro()
            if task is None or not task.pomodoro_active:
                raise ServiceValidationError("No pomodoro is running")

            now = dt_util.now()
            end = dt_util.parse_datetime(task.pomodoro_end_time or "")
            stale = [task.notification_id]
            credited = end is not None and now + POMODORO_GRACE >= end
            if credited:
                new_badges = self._complete_pomodoro(model, task, now)
            else:
                new_badges = []
                task.clear_pomodoro()
            await self._async_commit(model)

        _LOGGER.info("Pomodoro stopped for task %s (credited=%s)", task.id, credited)
        await self._async_cancel_all(stale)
        await self._async_announce(new_badges)
        return credited

    async def _async_finish_due_pomodoros(self) -> None:
        now = dt_util.now()
        for task in self.get_tasks():
            if not task.pomodoro_active:
                continue
            end = dt_util.parse_datetime(task.pomodoro_end_time or "")
            if end is None or now + POMODORO_GRACE >= end:
                await self.async_finish_pomodoro(task.id)

    # ---- day lifecycle ----
    async def _async_close_day(self, model: StorageModel, now: datetime, closed: date) -> DaySummary:
        """Score ``closed`` on ``model`` and commit. Caller holds the lock."""
        stale = [t.notification_id for t in model.tasks if t.notification_id]
        summary = end_day(model, now, closed)

        new_ids: list[str | None] = []
        for task in model.tasks:
            task.notification_id = await self._async_schedule_task_reminder(task, now)
            new_ids.append(task.notification_id)

        await self._async_commit(model, new_ids)
        await self._async_cancel_all(stale)
        self.last_day_summary = summary
        return summary

    async def _async_after_day_closed(self, summary: DaySummary) -> None:
        try:
            self.hass.bus.async_fire(
                EVENT_DAY_ENDED,
                {
                    "date": summary.closed_date.isoformat(),
                    "completed_tasks": summary.completed_tasks,
                    "total_tasks": summary.total_tasks,
                    "streak": summary.streak,
                    "freeze_token_used": summary.outcome.freeze_token_used,
                    "xp_gained": summary.task_xp,
                    "message": summary.message,
                },
            )
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Failed to fire day ended event: %s", err)
        milestone = summary.streak if summary.outcome.threshold_met else None
        await self._async_announce(summary.new_badges, milestone)

    async def async_end_day(self) -> DaySummary:
        """Close today now, at the user's request.

        When the midnight rollover has not run yet, yesterday is still open:
        the request closes yesterday instead, and today stays open.
        """
        async with self._lock:
            model = self._working_copy()
            now = dt_util.now()
            today = dt_util.as_local(now).date()
            if needs_auto_end_day(model.stats, now):
                _LOGGER.info("End day requested before yesterday was closed, closing yesterday")
                target = today - timedelta(days=1)
            else:
                closed = parse_closed_date(model.stats.last_closed_date)
                if closed is not None and closed >= today:
                    raise ServiceValidationError("Today has already been ended")
                target = today
            summary = await self._async_close_day(model, now, target)

        await self._async_after_day_closed(summary)
        return summary

    async def async_check_day_boundary(self) -> DaySummary | None:
        """Close yesterday if it was never scored. No-op otherwise."""
        async with self._lock:
            if self.model is None:
                return None
            now = dt_util.now()
            if not needs_auto_end_day(self.model.stats, now):
                return None
            model = self._working_copy()
            yesterday = dt_util.as_local(now).date() - timedelta(days=1)
            _LOGGER.info("Day boundary crossed, closing %s", yesterday)
            summary = await self._async_close_day(model, now, yesterday)

        await self._async_after_day_closed(summary)
        return summary

    async def _async_restore_schedules(self) -> None:
        """Re-arm pomodoro deadlines and task reminders after a restart."""
        async with self._lock:
            model = self._working_copy()
            now = dt_util.now()
            new_badges: list[Badge] = []
            new_ids: list[str | None] = []

            for task in model.tasks:
                task.notification_id = None
                if task.pomodoro_active:
                    end = dt_util.parse_datetime(task.pomodoro_end_time or "")
                    if end is None or end <= now:
                        new_badges.extend(self._complete_pomodoro(model, task, now))
                    else:
                        task.notification_id = await self._async_schedule_pomodoro_end(task, end)
                elif not task.completed:
                    task.notification_id = await self._async_schedule_task_reminder(task, now)
                new_ids.append(task.notification_id)

            await self._async_commit(model, new_ids)

        await self._async_announce(new_badges)

    async def _async_handle_midnight(self, now: datetime) -> None:
        try:
            await self.async_check_day_boundary()
        except HomeAssistantError as err:
            _LOGGER.warning("Automatic end of day failed: %s", err)

    async def _async_handle_periodic_check(self, now: datetime) -> None:
        try:
            await self._async_finish_due_pomodoros()
            await self.async_check_day_boundary()
        except HomeAssistantError as err:
            _LOGGER.warning("Periodic check failed: %s", err)

    # ---- notes ----
    async def async_add_note(self, title: str, content: str = "") -> Note:
        title = _clean_title(title, "Note")
        async with self._lock:
            model = self._working_copy()
            now = dt_util.now()
            stamp = now.isoformat()
            note = Note(id=str(uuid.uuid4()), title=title, content=content or "", created_at=stamp, updated_at=stamp)
            model.notes.append(note)
            model.stats.notes_created += 1
            new_badges = evaluate_badges(model.stats, now)
            await self._async_commit(model)

        _LOGGER.info("Added note %s", note.id)
        await self._async_announce(new_badges)
        return note

    async def async_update_note(self, note_id: str, title: str | None = None, content: str | None = None) -> Note:
        async with self._lock:
            model = self._working_copy()
            note = model.get_note(note_id)
            if note is None:
                raise ServiceValidationError(f"Unknown note: {note_id}")
            if title is not None:
                note.title = _clean_title(title, "Note")
            if content is not None:
                note.content = content

            now = dt_util.now()
            created = dt_util.parse_datetime(note.created_at) if note.created_at else None
            if created is not None and created > now:
                note.updated_at = note.created_at
            else:
                note.updated_at = now.isoformat()
            await self._async_commit(model)
        return note

    async def async_delete_note(self, note_id: str) -> None:
        async with self._lock:
            model = self._working_copy()
            note = model.get_note(note_id)
            if note is None:
                raise ServiceValidationError(f"Unknown note: {note_id}")
            model.notes.remove(note)
            await self._async_commit(model)

    # ---- settings ----
    def _apply_settings(self, settings: NotificationSettings) -> None:
        self.settings = settings
        self.notifier.settings = settings
        self.feedback.settings = settings

    async def async_update_settings(self, **changes: Any) -> NotificationSettings:
        """Change notification settings and re-arm the daily reminder."""
        known = {f.name for f in fields(NotificationSettings)}
        unknown = set(changes) - known
        if unknown:
            raise ServiceValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "reminder_time" in changes:
            changes["reminder_time"] = _normalize_time(changes["reminder_time"])
            if changes["reminder_time"] is None:
                raise ServiceValidationError("Reminder time cannot be empty")

        async with self._lock:
            settings = replace(self.settings, **changes)
            try:
                await self.store.async_save_settings(settings)
            except Exception as err:
                raise HomeAssistantError(f"Failed to save FocusNotes settings: {err}") from err
            self._apply_settings(settings)

        await self.async_reschedule_daily_reminder()
        self._async_update_listeners()
        return settings

    async def async_reschedule_daily_reminder(self) -> str | None:
        """Replace the daily streak reminder with one at the configured time."""
        at = parse_time_of_day(self.settings.reminder_time)
        if at is None:
            await self.notifier.async_cancel_named(DAILY_REMINDER_ID)
            return None
        return await self.notifier.async_schedule_daily(DAILY_REMINDER_ID, streak_reminder_content(), at)
