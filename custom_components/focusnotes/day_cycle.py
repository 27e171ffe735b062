"""Day boundary detection and end-of-day processing."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import logging

from homeassistant.util import dt as dt_util

from .badges import evaluate_badges
from .models import Badge, StorageModel
from .progression import StreakOutcome, calculate_level, evaluate_streak, xp_for_effort

_LOGGER = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6
MONDAY = 0


@dataclass
class DaySummary:
    """What happened when a day was closed."""
    closed_date: date
    completed_tasks: int
    total_tasks: int
    task_xp: int
    previous_streak: int
    outcome: StreakOutcome
    new_badges: list[Badge] = field(default_factory=list)

    @property
    def completion_ratio(self) -> float:
        if self.total_tasks <= 0:
            return 0.0
        return self.completed_tasks / self.total_tasks

    @property
    def streak(self) -> int:
        return self.outcome.streak

    @property
    def message(self) -> str | None:
        return self.outcome.message


def _local_date(value: str | None) -> date | None:
    if not value:
        return None
    parsed = dt_util.parse_datetime(value)
    if parsed is None:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return dt_util.as_local(parsed).date()


def parse_closed_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def is_new_day(last_end_day: str | None, now: datetime) -> bool:
    """Check whether the local calendar date moved since the last boundary.

    Only the date part counts; a missing or unreadable stamp is a new day.
    """
    last = _local_date(last_end_day)
    if last is None:
        return True
    return dt_util.as_local(now).date() != last


def needs_auto_end_day(stats, now: datetime) -> bool:
    """Check whether yesterday still has to be scored."""
    if stats.last_end_day is None:
        return False
    if not is_new_day(stats.last_end_day, now):
        return False
    yesterday = dt_util.as_local(now).date() - timedelta(days=1)
    closed = parse_closed_date(stats.last_closed_date)
    return closed is None or closed < yesterday


def stamp_baseline(model: StorageModel, now: datetime) -> None:
    """Mark a fresh install as up to date without scoring anything."""
    local_now = dt_util.as_local(now)
    model.stats.last_end_day = local_now.isoformat()
    model.stats.last_closed_date = (local_now.date() - timedelta(days=1)).isoformat()


def end_day(model: StorageModel, now: datetime, closed_date: date) -> DaySummary:
    """Score ``closed_date`` and roll the model over to a fresh day.

    Mutates ``model`` in place. Completed tasks earn their effort XP again as
    the day-close bonus; pomodoro XP was already credited per session and is
    only reset here.
    """
    stats = model.stats
    completed = [task for task in model.tasks if task.completed]
    total = len(model.tasks)

    previous_streak = stats.streak
    outcome = evaluate_streak(stats.streak, stats.freeze_tokens, len(completed), total)
    task_xp = sum(xp_for_effort(task.effort) for task in completed)

    weekday = closed_date.weekday()
    if weekday == SATURDAY and completed:
        stats.saturday_completed = True
    elif weekday == SUNDAY and completed:
        stats.sunday_completed = True
    elif weekday == MONDAY:
        stats.saturday_completed = False
        stats.sunday_completed = False

    stats.streak = outcome.streak
    stats.freeze_tokens = outcome.freeze_tokens
    stats.xp += task_xp
    stats.level = calculate_level(stats.xp)
    stats.pomodoro_xp = 0
    stats.last_end_day = dt_util.as_local(now).isoformat()
    stats.last_closed_date = closed_date.isoformat()

    # Daily counters still hold the closed day here so the per-day badges see it
    new_badges = evaluate_badges(stats, now)
    stats.daily_tasks_completed = 0
    stats.daily_pomodoros_completed = 0

    for task in model.tasks:
        task.completed = False
        task.pomodoro_count = 0
        task.clear_pomodoro()

    _LOGGER.info(
        "Closed %s: %d/%d tasks, streak %d -> %d, +%d XP",
        closed_date, len(completed), total, previous_streak, outcome.streak, task_xp,
    )
    if outcome.freeze_token_used:
        _LOGGER.info("Freeze token used, %d left", outcome.freeze_tokens)

    return DaySummary(
        closed_date=closed_date,
        completed_tasks=len(completed),
        total_tasks=total,
        task_xp=task_xp,
        previous_streak=previous_streak,
        outcome=outcome,
        new_badges=new_badges,
    )
