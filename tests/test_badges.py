"""Unit tests for the FocusNotes badge engine."""
from __future__ import annotations

import copy

from common import NOW
from custom_components.focusnotes.badges import (
    BADGE_CATALOG,
    BADGE_IDS,
    META_BADGE_ID,
    evaluate_badges,
    get_definition,
    seed_badges,
)
from custom_components.focusnotes.models import Badge, Stats


def _earned_ids(stats: Stats) -> set[str]:
    return {b.id for b in stats.earned_badges()}


class TestCatalog:
    """Test the static badge catalog."""

    def test_catalog_has_unique_ids(self):
        assert len(BADGE_CATALOG) == 26
        assert len(set(BADGE_IDS)) == len(BADGE_IDS)

    def test_meta_badge_is_last(self):
        assert BADGE_IDS[-1] == META_BADGE_ID

    def test_definition_lookup(self):
        definition = get_definition("first-step")
        assert definition.title == "First Step"
        assert definition.emoji == "🌱"
        assert get_definition("missing") is None


class TestSeedBadges:
    """Test seeding the catalog into stats."""

    def test_fresh_seed(self):
        badges = seed_badges()
        assert [b.id for b in badges] == list(BADGE_IDS)
        assert not any(b.earned for b in badges)

    def test_seed_keeps_earned_state_and_drops_unknown(self):
        existing = [
            Badge(id="first-step", title="Old title", description="", emoji="", earned=True, earned_at="2025-01-01T08:00:00+00:00"),
            Badge(id="retired-badge", title="Gone", description="", emoji="", earned=True, earned_at="2024-01-01T00:00:00+00:00"),
        ]
        badges = seed_badges(existing)

        first = next(b for b in badges if b.id == "first-step")
        assert first.earned
        assert first.earned_at == "2025-01-01T08:00:00+00:00"
        assert first.title == "First Step"
        assert "retired-badge" not in {b.id for b in badges}
        assert len(badges) == len(BADGE_CATALOG)


class TestEvaluateBadges:
    """Test badge unlock evaluation."""

    def test_first_task_earns_first_step(self):
        stats = Stats(badges=seed_badges(), tasks_completed=1, xp=5)
        new = evaluate_badges(stats, NOW)

        assert [b.id for b in new] == ["first-step"]
        badge = stats.badge("first-step")
        assert badge.earned
        assert badge.earned_at == NOW.isoformat()

    def test_idempotent(self):
        stats = Stats(badges=seed_badges(), tasks_completed=25, xp=300, streak=6, notes_created=5)
        evaluate_badges(stats, NOW)
        snapshot = copy.deepcopy(stats)

        again = evaluate_badges(stats, NOW.replace(hour=23))

        assert again == []
        assert stats == snapshot

    def test_earned_badges_are_never_reset(self):
        stats = Stats(badges=seed_badges(), streak=5)
        evaluate_badges(stats, NOW)
        stats.streak = 0

        evaluate_badges(stats, NOW)

        assert stats.badge("streak-hero").earned

    def test_streak_hero_needs_five_days(self):
        stats = Stats(badges=seed_badges(), streak=4)
        evaluate_badges(stats, NOW)
        assert not stats.badge("streak-hero").earned

        stats.streak = 5
        new = evaluate_badges(stats, NOW)
        assert "streak-hero" in {b.id for b in new}

    def test_weekend_warrior_needs_both_days(self):
        stats = Stats(badges=seed_badges(), saturday_completed=True)
        evaluate_badges(stats, NOW)
        assert not stats.badge("weekend-warrior").earned

        stats.sunday_completed = True
        evaluate_badges(stats, NOW)
        assert stats.badge("weekend-warrior").earned

    def test_daily_and_planner_predicates(self):
        stats = Stats(badges=seed_badges(), daily_tasks_completed=5, daily_pomodoros_completed=5,
                      calendar_tasks_created=5, early_tasks_created=1)
        evaluate_badges(stats, NOW)

        assert {"daily-five", "extreme-focus", "planner", "early-bird"} <= _earned_ids(stats)

    def test_meta_badge_unlocks_in_same_pass(self):
        stats = Stats(
            badges=seed_badges(),
            tasks_completed=100,
            hard_tasks_completed=15,
            notes_created=15,
            streak=30,
            xp=5000,
            total_pomodoros=50,
            daily_tasks_completed=5,
            daily_pomodoros_completed=5,
            calendar_tasks_created=5,
            early_tasks_created=1,
            saturday_completed=True,
            sunday_completed=True,
        )
        new = evaluate_badges(stats, NOW)

        assert len(new) == len(BADGE_CATALOG)
        assert new[-1].id == META_BADGE_ID
        assert stats.badge(META_BADGE_ID).earned

    def test_meta_badge_waits_for_everything(self):
        stats = Stats(badges=seed_badges(), tasks_completed=100, xp=5000)
        evaluate_badges(stats, NOW)
        assert not stats.badge(META_BADGE_ID).earned

    def test_reseeds_short_badge_list(self):
        stats = Stats(badges=[], tasks_completed=1)
        new = evaluate_badges(stats, NOW)

        assert len(stats.badges) == len(BADGE_CATALOG)
        assert [b.id for b in new] == ["first-step"]
