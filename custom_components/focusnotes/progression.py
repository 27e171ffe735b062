"""Experience, level and streak rules for FocusNotes.

Plain functions with no Home Assistant dependencies. Functions that take a
``Stats`` update it in place; callers hand in a working copy and only swap it
into the coordinator once it has been persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
import random

from .const import (
    EFFORT_HARD,
    EFFORT_XP,
    FREEZE_TOKEN_INTERVAL,
    LEVEL_THRESHOLDS,
    LEVEL_TITLES,
    MAX_LEVEL,
    POMODORO_DAILY_XP_CAP,
    POMODORO_SESSION_XP,
    STREAK_COMPLETION_RATIO,
)
from .models import Stats

MOTIVATIONAL_MESSAGES = (
    "Great job! Keep up the momentum! 🚀",
    "You're making progress! Keep going! 💪",
    "Another day conquered! 🌟",
    "You're on fire! 🔥",
    "Success is built one day at a time! ⭐",
)
FREEZE_TOKEN_USED_MESSAGE = "Used a freeze token to protect your streak! ❄️"
STREAK_RESET_MESSAGE = "Your streak has been reset. Complete tasks today to start a new streak!"


def xp_for_effort(effort: str | None) -> int:
    """Return the XP reward of an effort tier, 0 for unknown tiers."""
    return EFFORT_XP.get(effort, 0)


def calculate_level(xp: int) -> int:
    """Return the level (1-10) reached with the given XP."""
    level = 1
    for index, threshold in enumerate(LEVEL_THRESHOLDS):
        if xp >= threshold:
            level = index + 1
    return level


def get_level_title(level: int) -> str:
    return LEVEL_TITLES.get(level, "Unknown")


def level_progress(xp: int) -> dict[str, int | None]:
    """Describe how far the XP total is into its current level."""
    level = calculate_level(xp)
    floor = LEVEL_THRESHOLDS[level - 1]
    if level >= MAX_LEVEL:
        return {"level_floor": floor, "next_level_xp": None, "progress": 100}
    ceiling = LEVEL_THRESHOLDS[level]
    progress = int((xp - floor) / (ceiling - floor) * 100)
    return {"level_floor": floor, "next_level_xp": ceiling, "progress": min(100, max(0, progress))}


def random_motivational_message() -> str:
    return random.choice(MOTIVATIONAL_MESSAGES)


def apply_task_toggle(stats: Stats, effort: str, completing: bool) -> int:
    """Credit or reverse a task completion. Returns the XP delta applied."""
    reward = xp_for_effort(effort)
    if completing:
        stats.tasks_completed += 1
        stats.daily_tasks_completed += 1
        if effort == EFFORT_HARD:
            stats.hard_tasks_completed += 1
        delta = reward
    else:
        stats.tasks_completed = max(0, stats.tasks_completed - 1)
        stats.daily_tasks_completed = max(0, stats.daily_tasks_completed - 1)
        if effort == EFFORT_HARD:
            stats.hard_tasks_completed = max(0, stats.hard_tasks_completed - 1)
        delta = -min(reward, stats.xp)

    stats.xp += delta
    stats.level = calculate_level(stats.xp)
    return delta


def apply_pomodoro_completion(stats: Stats) -> int:
    """Credit one finished pomodoro session. Returns the XP credited.

    Session XP counts towards the daily pomodoro cap, so once the cap is hit
    further sessions still count for the badges but earn no XP.
    """
    credit = max(0, min(POMODORO_SESSION_XP, POMODORO_DAILY_XP_CAP - stats.pomodoro_xp))
    stats.total_pomodoros += 1
    stats.daily_pomodoros_completed += 1
    stats.pomodoro_xp += credit
    stats.xp += credit
    stats.level = calculate_level(stats.xp)
    return credit


@dataclass
class StreakOutcome:
    """Result of scoring one day against the streak rule."""
    streak: int
    freeze_tokens: int
    threshold_met: bool
    freeze_token_used: bool = False
    freeze_token_earned: bool = False
    message: str | None = None


def completion_ratio(completed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return completed / total


def evaluate_streak(streak: int, freeze_tokens: int, completed: int, total: int) -> StreakOutcome:
    """Apply the daily streak rule.

    A day qualifies when 90% of its tasks are done or at least one task is.
    """
    ratio = completion_ratio(completed, total)
    threshold_met = ratio >= STREAK_COMPLETION_RATIO or completed >= 1

    if threshold_met:
        new_streak = streak + 1
        earned = new_streak % FREEZE_TOKEN_INTERVAL == 0
        return StreakOutcome(
            streak=new_streak,
            freeze_tokens=freeze_tokens + (1 if earned else 0),
            threshold_met=True,
            freeze_token_earned=earned,
            message=random_motivational_message(),
        )

    if freeze_tokens > 0:
        return StreakOutcome(
            streak=streak,
            freeze_tokens=freeze_tokens - 1,
            threshold_met=False,
            freeze_token_used=True,
            message=FREEZE_TOKEN_USED_MESSAGE,
        )

    return StreakOutcome(
        streak=0,
        freeze_tokens=0,
        threshold_met=False,
        message=STREAK_RESET_MESSAGE,
    )
