"""Reminder timing policy and notification content for FocusNotes.

Everything here is pure: trigger times are computed from a task and the
current time, content is a plain dataclass. Delivery lives in
``notifications.py``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
import re
from typing import Any

from homeassistant.util import dt as dt_util

from .const import (
    CATEGORY_ACHIEVEMENT,
    CATEGORY_MILESTONE,
    CATEGORY_POMODORO,
    CATEGORY_STREAK,
    CATEGORY_TASK,
    MIN_REMINDER_LEAD,
    NOTIFY_ACHIEVEMENT,
    NOTIFY_POMODORO_END,
    NOTIFY_POMODORO_START,
    NOTIFY_STREAK_MILESTONE,
    NOTIFY_STREAK_REMINDER,
    NOTIFY_TASK_REMINDER,
    POMODORO_DURATION,
    SOUND_NOTIFICATION,
    SOUND_POMODORO_END,
    SOUND_TASK_COMPLETE,
    STREAK_MILESTONES,
    TASK_REMINDER_HOUR,
    TASK_REMINDER_LEAD,
    VIBRATE_CELEBRATION,
    VIBRATE_POMODORO,
    VIBRATE_REMINDER,
)
from .models import Task

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass
class NotificationContent:
    title: str
    body: str
    kind: str
    category: str
    sound: str | None = None  # None means silent
    vibration: tuple[int, ...] | None = None
    data: dict[str, Any] = field(default_factory=dict)


def parse_time_of_day(value: str | None) -> time | None:
    """Parse ``HH:MM``; anything else gives None."""
    if not value:
        return None
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if match is None:
        return None
    return time(int(match.group(1)), int(match.group(2)))


def parse_task_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _at(day: date, at: time, tzinfo) -> datetime:
    return datetime.combine(day, at).replace(tzinfo=tzinfo)


def task_reminder_time(task: Task, now: datetime) -> datetime | None:
    """Work out when to remind about a task, or None when no reminder applies.

    Future tasks get 09:00 on their date and never fire sooner than
    ``now + 2 minutes``. Tasks for today get 30 minutes before their time,
    or 09:00 when they have none. Past triggers, past dates and malformed
    values give None.
    """
    if task.completed:
        return None

    task_date = parse_task_date(task.date)
    if task_date is None:
        return None

    local_now = dt_util.as_local(now)
    today = local_now.date()
    tzinfo = local_now.tzinfo

    if task_date > today:
        trigger = _at(task_date, time(TASK_REMINDER_HOUR, 0), tzinfo)
        earliest = local_now + MIN_REMINDER_LEAD
        return max(trigger, earliest)

    if task_date < today:
        return None

    if task.time:
        at = parse_time_of_day(task.time)
        if at is None:
            return None
        trigger = _at(task_date, at, tzinfo) - TASK_REMINDER_LEAD
    else:
        trigger = _at(task_date, time(TASK_REMINDER_HOUR, 0), tzinfo)

    if trigger <= local_now:
        return None
    return trigger


def is_future_task(task: Task, now: datetime) -> bool:
    task_date = parse_task_date(task.date)
    return task_date is not None and task_date > dt_util.as_local(now).date()


def pomodoro_end_time(now: datetime) -> datetime:
    return now + POMODORO_DURATION


def is_streak_milestone(streak: int) -> bool:
    return streak in STREAK_MILESTONES


def pomodoro_start_content(task: Task) -> NotificationContent:
    return NotificationContent(
        title="Pomodoro Started!",
        body=f'Focus time for "{task.title}" has begun (25 minutes) ⏳.',
        kind=NOTIFY_POMODORO_START,
        category=CATEGORY_POMODORO,
        data={"task_title": task.title},
    )


def pomodoro_end_content(task: Task) -> NotificationContent:
    return NotificationContent(
        title="Pomodoro Done!",
        body=f'Great job on "{task.title}", take a break or keep going! 🎉',
        kind=NOTIFY_POMODORO_END,
        category=CATEGORY_POMODORO,
        sound=SOUND_POMODORO_END,
        vibration=VIBRATE_POMODORO,
        data={"task_id": task.id, "task_title": task.title, "critical": True},
    )


def task_reminder_content(task: Task) -> NotificationContent:
    if task.time:
        body = f'"{task.title}" is due at {task.time}.'
    else:
        body = f'Task due today: "{task.title}".'
    return NotificationContent(
        title="Task Reminder",
        body=body,
        kind=NOTIFY_TASK_REMINDER,
        category=CATEGORY_TASK,
        sound=SOUND_NOTIFICATION,
        vibration=VIBRATE_REMINDER,
        data={"task_id": task.id, "task_title": task.title},
    )


def streak_reminder_content() -> NotificationContent:
    return NotificationContent(
        title="Focus Notes",
        body="Don't break your streak! Complete a task today 🔥.",
        kind=NOTIFY_STREAK_REMINDER,
        category=CATEGORY_STREAK,
        sound=SOUND_NOTIFICATION,
        vibration=VIBRATE_REMINDER,
    )


def streak_milestone_content(streak: int) -> NotificationContent:
    return NotificationContent(
        title="Streak Milestone!",
        body=f"Epic! You've hit a {streak}-day streak! Keep it blazing 🔥.",
        kind=NOTIFY_STREAK_MILESTONE,
        category=CATEGORY_MILESTONE,
        sound=SOUND_TASK_COMPLETE,
        vibration=VIBRATE_CELEBRATION,
        data={"streak": streak},
    )


def achievement_content(badge_title: str, badge_id: str | None = None) -> NotificationContent:
    return NotificationContent(
        title="Achievement Unlocked!",
        body=f"Badge earned: {badge_title}! Nice work! 🏅",
        kind=NOTIFY_ACHIEVEMENT,
        category=CATEGORY_ACHIEVEMENT,
        sound=SOUND_TASK_COMPLETE,
        vibration=VIBRATE_CELEBRATION,
        data={"badge": badge_title, "badge_id": badge_id},
    )
