"""Data models for FocusNotes integration."""
from __future__ import annotations

from dataclasses import dataclass, field

from .const import DEFAULT_REMINDER_TIME, EFFORT_HARD, EFFORT_MEDIUM


@dataclass
class Task:
    id: str
    title: str = ""
    notes: str = ""
    completed: bool = False
    effort: str = EFFORT_MEDIUM  # "easy" | "medium" | "hard"
    pomodoro_count: int = 0  # sessions fully completed today
    pomodoro_active: bool = False
    pomodoro_end_time: str | None = None  # ISO timestamp, set iff pomodoro_active
    date: str | None = None  # YYYY-MM-DD
    time: str | None = None  # HH:MM
    notification_id: str | None = None

    def is_hard(self) -> bool:
        """Check if this task counts towards the hard task badges."""
        return self.effort == EFFORT_HARD

    def clear_pomodoro(self) -> None:
        """Drop the running timer together with its scheduled notification."""
        self.pomodoro_active = False
        self.pomodoro_end_time = None
        self.notification_id = None

@dataclass
class Note:
    id: str
    title: str = ""
    content: str = ""  # serialized text with formatting spans, opaque here
    created_at: str = ""
    updated_at: str = ""

@dataclass
class Badge:
    id: str
    title: str
    description: str
    emoji: str
    earned: bool = False
    earned_at: str | None = None

@dataclass
class Stats:
    streak: int = 0
    freeze_tokens: int = 0
    xp: int = 0
    level: int = 1
    pomodoro_xp: int = 0  # daily, capped
    total_pomodoros: int = 0
    last_end_day: str | None = None  # ISO timestamp of the last processed boundary
    last_closed_date: str | None = None  # YYYY-MM-DD of the last scored day
    badges: list[Badge] = field(default_factory=list)

    # Lifetime counters
    tasks_completed: int = 0
    hard_tasks_completed: int = 0
    notes_created: int = 0
    calendar_tasks_created: int = 0
    early_tasks_created: int = 0

    # Reset at each day boundary
    daily_tasks_completed: int = 0
    daily_pomodoros_completed: int = 0

    # Weekend Warrior tracking, reset on Mondays
    saturday_completed: bool = False
    sunday_completed: bool = False

    def badge(self, badge_id: str) -> Badge | None:
        """Get a badge entry by catalog ID."""
        for badge in self.badges:
            if badge.id == badge_id:
                return badge
        return None

    def earned_badges(self) -> list[Badge]:
        return [b for b in self.badges if b.earned]

@dataclass
class StorageModel:
    tasks: list[Task] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    notes: list[Note] = field(default_factory=list)

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_note(self, note_id: str) -> Note | None:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def active_pomodoro(self) -> Task | None:
        """Return the task whose pomodoro is running, if any."""
        for task in self.tasks:
            if task.pomodoro_active:
                return task
        return None

@dataclass
class NotificationSettings:
    """User notification preferences, stored under their own key."""
    enabled: bool = True
    sound_enabled: bool = True
    vibration_enabled: bool = True
    task_reminders: bool = True
    pomodoro_alerts: bool = True
    streak_reminders: bool = True
    streak_milestones: bool = True
    achievement_alerts: bool = True
    reminder_time: str = DEFAULT_REMINDER_TIME  # HH:MM
