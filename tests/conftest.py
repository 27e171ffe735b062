"""Pytest configuration for FocusNotes tests."""
from __future__ import annotations

import itertools
from unittest.mock import AsyncMock, Mock, patch

import pytest

from common import NOW, fresh_stats
from custom_components.focusnotes.const import DAILY_REMINDER_ID
from custom_components.focusnotes.coordinator import FocusNotesCoordinator
from custom_components.focusnotes.models import NotificationSettings, StorageModel


@pytest.fixture
def frozen_now():
    """Pin dt_util.now(); tests may move the clock through return_value."""
    with patch("homeassistant.util.dt.now") as mock_now:
        mock_now.return_value = NOW
        yield mock_now


@pytest.fixture
def mock_hass():
    """Return a mock Home Assistant instance."""
    hass = Mock()
    hass.data = {}
    hass.config_entries = Mock()
    hass.config_entries.async_forward_entry_setups = AsyncMock(return_value=True)
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    hass.services = Mock()
    hass.services.async_register = Mock()
    hass.services.async_remove = Mock()
    hass.services.async_call = AsyncMock()
    hass.bus = Mock()
    hass.bus.async_fire = Mock()
    hass.async_create_task = Mock()
    return hass


@pytest.fixture
def mock_store():
    """Return a mock FocusNotesStore."""
    store = Mock()
    store.async_load = AsyncMock(return_value=StorageModel(stats=fresh_stats()))
    store.async_save = AsyncMock()
    store.async_load_settings = AsyncMock(return_value=NotificationSettings())
    store.async_save_settings = AsyncMock()
    return store


@pytest.fixture
def mock_notifier():
    """Return a notifier double that hands out sequential ids."""
    counter = itertools.count(1)
    notifier = Mock()
    notifier.async_schedule = AsyncMock(side_effect=lambda *args, **kwargs: f"notification_{next(counter)}")
    notifier.async_cancel = AsyncMock()
    notifier.async_cancel_named = AsyncMock()
    notifier.async_schedule_daily = AsyncMock(return_value=DAILY_REMINDER_ID)
    notifier.async_cancel_all = AsyncMock()
    notifier.scheduled_ids = Mock(return_value=[])
    return notifier


@pytest.fixture
def mock_feedback():
    feedback = Mock()
    feedback.async_play_sound = AsyncMock()
    feedback.async_vibrate = AsyncMock()
    return feedback


@pytest.fixture
def coordinator(mock_hass, mock_store, mock_notifier, mock_feedback):
    """Return a coordinator with a loaded, empty model."""
    with patch("custom_components.focusnotes.coordinator.FocusNotesStore") as mock_store_class:
        mock_store_class.return_value = mock_store
        coord = FocusNotesCoordinator(mock_hass)
    coord.notifier = mock_notifier
    coord.feedback = mock_feedback
    coord.model = StorageModel(stats=fresh_stats())
    return coord
