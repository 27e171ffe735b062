"""Unit tests for FocusNotes storage."""
from __future__ import annotations

from unittest.mock import AsyncMock, Mock, patch

import pytest

from common import NOW, TODAY, fresh_stats, make_task
from custom_components.focusnotes.badges import BADGE_CATALOG
from custom_components.focusnotes.const import (
    SETTINGS_STORAGE_KEY,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from custom_components.focusnotes.models import Note, NotificationSettings, StorageModel
from custom_components.focusnotes.storage import FocusNotesStore


class TestFocusNotesStore:
    """Test FocusNotesStore."""

    @pytest.fixture
    def mock_hass(self):
        """Return a mock Home Assistant instance."""
        return Mock()

    @pytest.fixture
    def stores(self):
        """Patch Store so each key gets its own mock."""
        data_store = Mock()
        data_store.async_load = AsyncMock(return_value=None)
        data_store.async_save = AsyncMock()
        settings_store = Mock()
        settings_store.async_load = AsyncMock(return_value=None)
        settings_store.async_save = AsyncMock()

        def _factory(hass, version, key):
            return data_store if key == STORAGE_KEY else settings_store

        with patch("custom_components.focusnotes.storage.Store", side_effect=_factory) as store_class:
            yield store_class, data_store, settings_store

    @pytest.fixture
    def store(self, mock_hass, stores, frozen_now):
        return FocusNotesStore(mock_hass)

    def test_init(self, mock_hass, stores):
        store_class, _, _ = stores
        FocusNotesStore(mock_hass)

        store_class.assert_any_call(mock_hass, STORAGE_VERSION, STORAGE_KEY)
        store_class.assert_any_call(mock_hass, STORAGE_VERSION, SETTINGS_STORAGE_KEY)

    @pytest.mark.asyncio
    async def test_load_empty(self, store):
        """Test loading when nothing was stored yet."""
        model = await store.async_load()

        assert model.tasks == []
        assert model.notes == []
        assert model.stats.xp == 0
        assert model.stats.level == 1
        assert model.stats.last_end_day is None
        assert len(model.stats.badges) == len(BADGE_CATALOG)

    @pytest.mark.asyncio
    async def test_load_fills_missing_and_drops_unknown_fields(self, store, stores):
        """Test the versioned-defaults merge."""
        _, data_store, _ = stores
        data_store.async_load.return_value = {
            "tasks": [{"id": "t1", "title": "Old task", "legacy_priority": 3}],
            "stats": {"xp": 120, "streak": None, "obsolete_counter": 9},
            "notes": [{"id": "n1", "title": "Idea", "content": "x", "created_at": NOW.isoformat()}],
        }

        model = await store.async_load()

        task = model.tasks[0]
        assert task.effort == "medium"
        assert task.pomodoro_count == 0
        assert task.date == TODAY.isoformat()
        assert not hasattr(task, "legacy_priority")
        assert model.stats.streak == 0
        assert model.stats.level == 2
        assert not hasattr(model.stats, "obsolete_counter")
        assert model.notes[0].updated_at == NOW.isoformat()

    @pytest.mark.asyncio
    async def test_load_heals_inconsistent_values(self, store, stores):
        _, data_store, _ = stores
        data_store.async_load.return_value = {
            "tasks": [
                {"id": "t1", "effort": "epic", "pomodoro_count": -2, "pomodoro_active": True, "time": "99:99"},
                {"title": "no id"},
            ],
            "stats": {"xp": 300, "level": 9, "freeze_tokens": -1, "tasks_completed": -5},
        }

        model = await store.async_load()

        assert len(model.tasks) == 1
        task = model.tasks[0]
        assert task.effort == "medium"
        assert task.pomodoro_count == 0
        assert not task.pomodoro_active
        assert task.pomodoro_end_time is None
        assert task.time is None
        assert model.stats.level == 3
        assert model.stats.freeze_tokens == 0
        assert model.stats.tasks_completed == 0

    @pytest.mark.asyncio
    async def test_load_replaces_values_of_the_wrong_type(self, store, stores):
        _, data_store, _ = stores
        data_store.async_load.return_value = {
            "tasks": [
                {"id": "t1", "pomodoro_count": "", "completed": "yes", "time": 1400, "date": 20250312},
                {"id": "t2", "pomodoro_count": "3", "title": ["list"]},
            ],
            "stats": {"xp": "abc", "streak": "4", "freeze_tokens": [1], "saturday_completed": 1},
            "notes": [{"id": "n1", "title": 7, "created_at": NOW.isoformat()}],
        }

        model = await store.async_load()

        first, second = model.tasks
        assert first.pomodoro_count == 0
        assert first.completed is False
        assert first.time is None
        assert first.date == TODAY.isoformat()
        assert second.pomodoro_count == 3
        assert second.title == ""
        assert model.stats.xp == 0
        assert model.stats.level == 1
        assert model.stats.streak == 4
        assert model.stats.freeze_tokens == 0
        assert model.stats.saturday_completed is False
        assert model.notes[0].title == ""

    @pytest.mark.asyncio
    async def test_load_keeps_earned_badges(self, store, stores):
        _, data_store, _ = stores
        data_store.async_load.return_value = {
            "stats": {
                "badges": [
                    {"id": "first-step", "title": "First Step", "description": "", "emoji": "", "earned": True,
                     "earned_at": "2025-01-02T09:00:00+00:00"},
                    {"id": "removed-badge", "earned": True},
                ],
            },
        }

        model = await store.async_load()

        assert [b.id for b in model.stats.earned_badges()] == ["first-step"]
        assert model.stats.badge("first-step").earned_at == "2025-01-02T09:00:00+00:00"
        assert model.stats.badge("first-step").emoji == "🌱"

    @pytest.mark.asyncio
    async def test_load_derives_closed_date_from_legacy_boundary(self, store, stores):
        _, data_store, _ = stores
        data_store.async_load.return_value = {"stats": {"last_end_day": "2025-03-10T00:01:00+00:00"}}

        model = await store.async_load()

        assert model.stats.last_closed_date == "2025-03-09"

    @pytest.mark.asyncio
    async def test_save_writes_plain_dicts(self, store, stores):
        _, data_store, _ = stores
        model = StorageModel(
            tasks=[make_task("t1", effort="hard")],
            stats=fresh_stats(xp=15),
            notes=[Note(id="n1", title="Idea", created_at=NOW.isoformat(), updated_at=NOW.isoformat())],
        )

        await store.async_save(model)

        data_store.async_save.assert_called_once()
        saved = data_store.async_save.call_args[0][0]
        assert saved["tasks"][0]["id"] == "t1"
        assert saved["tasks"][0]["effort"] == "hard"
        assert saved["stats"]["xp"] == 15
        assert saved["stats"]["badges"][0]["id"] == "first-step"
        assert saved["notes"][0]["title"] == "Idea"

    @pytest.mark.asyncio
    async def test_settings_defaults(self, store):
        settings = await store.async_load_settings()
        assert settings == NotificationSettings()
        assert settings.reminder_time == "19:00"

    @pytest.mark.asyncio
    async def test_settings_merge_and_validate(self, store, stores):
        _, _, settings_store = stores
        settings_store.async_load.return_value = {"sound_enabled": False, "reminder_time": "7pm", "old_flag": True}

        settings = await store.async_load_settings()

        assert settings.sound_enabled is False
        assert settings.enabled is True
        assert settings.reminder_time == "19:00"

    @pytest.mark.asyncio
    async def test_save_settings(self, store, stores):
        _, _, settings_store = stores
        await store.async_save_settings(NotificationSettings(reminder_time="08:30"))

        saved = settings_store.async_save.call_args[0][0]
        assert saved["reminder_time"] == "08:30"
        assert saved["enabled"] is True
