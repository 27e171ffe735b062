"""Badge catalog and unlock evaluation for FocusNotes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Callable

from .models import Badge, Stats

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeDefinition:
    """Static catalog entry. The predicate runs against the current stats."""
    id: str
    title: str
    description: str
    emoji: str
    predicate: Callable[[Stats], bool]

    def new_badge(self) -> Badge:
        return Badge(id=self.id, title=self.title, description=self.description, emoji=self.emoji)


META_BADGE_ID = "productivity-guru"

BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    # Beginner
    BadgeDefinition("first-step", "First Step", "Complete your first task", "🌱",
                    lambda s: s.tasks_completed >= 1),
    BadgeDefinition("early-bird", "Early Bird", "Add a task before 8am", "🐦",
                    lambda s: s.early_tasks_created >= 1),
    BadgeDefinition("note-beginner", "Note Taker", "Create your first note", "📄",
                    lambda s: s.notes_created >= 1),
    BadgeDefinition("three-day-streak", "Getting Started", "Maintain a 3-day streak", "🔥",
                    lambda s: s.streak >= 3),
    BadgeDefinition("daily-five", "Daily Five", "Complete 5 tasks in a single day", "✋",
                    lambda s: s.daily_tasks_completed >= 5),
    # Intermediate
    BadgeDefinition("streak-hero", "5-Day Streak Hero", "Maintain a 5+ day streak", "🏃",
                    lambda s: s.streak >= 5),
    BadgeDefinition("xp-earner", "100 XP Earner", "Earn 100+ total XP", "⭐",
                    lambda s: s.xp >= 100),
    BadgeDefinition("pomodoro-pro", "Pomodoro Pro", "Complete 10+ Pomodoro sessions", "⏰",
                    lambda s: s.total_pomodoros >= 10),
    BadgeDefinition("note-taker", "Note Expert", "Create 5+ notes", "📝",
                    lambda s: s.notes_created >= 5),
    BadgeDefinition("task-master", "Task Master", "Complete 20+ tasks", "✅",
                    lambda s: s.tasks_completed >= 20),
    BadgeDefinition("hard-worker", "Hard Worker", "Complete 5+ hard difficulty tasks", "💪",
                    lambda s: s.hard_tasks_completed >= 5),
    BadgeDefinition("planner", "Planner", "Add 5+ future tasks using the calendar", "📅",
                    lambda s: s.calendar_tasks_created >= 5),
    BadgeDefinition("weekend-warrior", "Weekend Warrior", "Complete tasks on both Saturday and Sunday", "🏆",
                    lambda s: s.saturday_completed and s.sunday_completed),
    # Advanced
    BadgeDefinition("consistent-streak", "Consistency King", "Maintain a 10+ day streak", "👑",
                    lambda s: s.streak >= 10),
    BadgeDefinition("xp-master", "XP Master", "Earn 250+ total XP", "🏆",
                    lambda s: s.xp >= 250),
    BadgeDefinition("pomodoro-master", "Pomodoro Master", "Complete 25+ Pomodoro sessions", "⌚",
                    lambda s: s.total_pomodoros >= 25),
    BadgeDefinition("extreme-focus", "Extreme Focus", "Complete 5 Pomodoro sessions in a single day", "🧠",
                    lambda s: s.daily_pomodoros_completed >= 5),
    BadgeDefinition("organization-expert", "Organization Expert", "Create 15+ notes", "📊",
                    lambda s: s.notes_created >= 15),
    BadgeDefinition("heavy-lifter", "Heavy Lifter", "Complete 15+ hard difficulty tasks", "🏋️",
                    lambda s: s.hard_tasks_completed >= 15),
    BadgeDefinition("month-streak", "Monthly Mastery", "Maintain a 30+ day streak", "🌟",
                    lambda s: s.streak >= 30),
    BadgeDefinition("xp-legend", "XP Legend", "Earn 500+ total XP", "🥇",
                    lambda s: s.xp >= 500),
    BadgeDefinition("xp-titan", "XP Titan", "Earn 1000+ total XP", "🔱",
                    lambda s: s.xp >= 1000),
    BadgeDefinition("xp-immortal", "XP Immortal", "Earn 5000+ total XP", "⚡",
                    lambda s: s.xp >= 5000),
    BadgeDefinition("task-legend", "Task Legend", "Complete 100+ tasks", "🌠",
                    lambda s: s.tasks_completed >= 100),
    BadgeDefinition("ultimate-pomodoro", "Ultimate Pomodoro", "Complete 50+ Pomodoro sessions", "🕰️",
                    lambda s: s.total_pomodoros >= 50),
    # Meta, evaluated after everything else
    BadgeDefinition(META_BADGE_ID, "Productivity Guru", "Earn all other badges", "🧘",
                    lambda s: all(b.earned for b in s.badges if b.id != META_BADGE_ID)),
)

BADGE_IDS = tuple(definition.id for definition in BADGE_CATALOG)
_DEFINITIONS = {definition.id: definition for definition in BADGE_CATALOG}


def get_definition(badge_id: str) -> BadgeDefinition | None:
    return _DEFINITIONS.get(badge_id)


def seed_badges(existing: list[Badge] | None = None) -> list[Badge]:
    """Build the full catalog-ordered badge list.

    Earned state of known badges is carried over; titles and descriptions
    always come from the catalog, and ids no longer in the catalog are dropped.
    """
    previous = {badge.id: badge for badge in existing or []}
    seeded = []
    for definition in BADGE_CATALOG:
        badge = definition.new_badge()
        old = previous.get(definition.id)
        if old is not None and old.earned:
            badge.earned = True
            badge.earned_at = old.earned_at
        seeded.append(badge)

    dropped = set(previous) - set(BADGE_IDS)
    if dropped:
        _LOGGER.debug("Dropping unknown badge ids: %s", sorted(dropped))
    return seeded


def evaluate_badges(stats: Stats, now: datetime) -> list[Badge]:
    """Flip every newly satisfied badge to earned and return those badges.

    Badges that are already earned are never touched, so running this twice
    on unchanged stats changes nothing the second time.
    """
    if len(stats.badges) != len(BADGE_CATALOG):
        stats.badges = seed_badges(stats.badges)

    earned_at = now.isoformat()
    newly_earned: list[Badge] = []

    # Catalog order puts the meta badge last, so it sees this pass's unlocks
    for definition in BADGE_CATALOG:
        badge = stats.badge(definition.id)
        if badge is None or badge.earned:
            continue
        if definition.predicate(stats):
            badge.earned = True
            badge.earned_at = earned_at
            newly_earned.append(badge)
            _LOGGER.info("Badge earned: %s", definition.id)

    return newly_earned
