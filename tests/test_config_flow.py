"""Tests for FocusNotes config and options flows."""
from __future__ import annotations

from unittest.mock import Mock

from homeassistant.data_entry_flow import FlowResultType
import pytest

from custom_components.focusnotes import config_flow
from custom_components.focusnotes.const import (
    CONF_ENABLED,
    CONF_NOTIFY_SERVICE,
    CONF_REMINDER_TIME,
    CONF_SOUND_ENABLED,
    DOMAIN,
)
from custom_components.focusnotes.models import NotificationSettings


class TestFocusNotesConfigFlow:
    """Test FocusNotes config flow."""

    @pytest.fixture
    def flow(self):
        flow = config_flow.FocusNotesConfigFlow()
        flow.hass = Mock()
        flow._async_current_entries = Mock(return_value=[])
        return flow

    @pytest.mark.asyncio
    async def test_user_form_display(self, flow):
        result = await flow.async_step_user()

        assert result["type"] == FlowResultType.FORM
        assert result["step_id"] == "user"
        assert result["errors"] == {}
        assert CONF_NOTIFY_SERVICE in result["data_schema"].schema

    @pytest.mark.asyncio
    @pytest.mark.parametrize("service", ["notify.mobile_app_phone", "mobile_app_phone"])
    async def test_user_form_submission(self, flow, service):
        result = await flow.async_step_user({CONF_NOTIFY_SERVICE: service})

        assert result["type"] == FlowResultType.CREATE_ENTRY
        assert result["title"] == "FocusNotes"
        assert result["data"] == {CONF_NOTIFY_SERVICE: service}

    @pytest.mark.asyncio
    async def test_blank_service_uses_persistent_notifications(self, flow):
        result = await flow.async_step_user({CONF_NOTIFY_SERVICE: "  "})

        assert result["type"] == FlowResultType.CREATE_ENTRY
        assert result["data"] == {CONF_NOTIFY_SERVICE: ""}

    @pytest.mark.asyncio
    async def test_invalid_service(self, flow):
        result = await flow.async_step_user({CONF_NOTIFY_SERVICE: "not a service!"})

        assert result["type"] == FlowResultType.FORM
        assert result["errors"] == {CONF_NOTIFY_SERVICE: "invalid_notify_service"}

    @pytest.mark.asyncio
    async def test_single_instance_restriction(self, flow):
        flow._async_current_entries = Mock(return_value=[Mock()])

        result = await flow.async_step_user()

        assert result["type"] == FlowResultType.ABORT
        assert result["reason"] == "single_instance_allowed"

    def test_options_flow_creation(self):
        mock_entry = Mock()
        options_flow = config_flow.FocusNotesConfigFlow.async_get_options_flow(mock_entry)

        assert isinstance(options_flow, config_flow.FocusNotesOptionsFlow)
        assert options_flow.entry == mock_entry


class TestFocusNotesOptionsFlow:
    """Test FocusNotes options flow."""

    @pytest.fixture
    def mock_entry(self):
        entry = Mock()
        entry.entry_id = "entry1"
        entry.options = {}
        return entry

    def _flow(self, entry, coordinator=None):
        flow = config_flow.FocusNotesOptionsFlow(entry)
        flow.hass = Mock()
        flow.hass.data = {DOMAIN: {entry.entry_id: coordinator}} if coordinator else {}
        return flow

    @staticmethod
    def _defaults(result) -> dict:
        return {key.schema: key.default() for key in result["data_schema"].schema}

    @pytest.mark.asyncio
    async def test_options_form_defaults(self, mock_entry):
        result = await self._flow(mock_entry).async_step_init()

        assert result["type"] == FlowResultType.FORM
        assert result["step_id"] == "init"
        defaults = self._defaults(result)
        assert defaults[CONF_ENABLED] is True
        assert defaults[CONF_REMINDER_TIME] == "19:00"

    @pytest.mark.asyncio
    async def test_options_form_reads_live_settings(self, mock_entry):
        coordinator = Mock()
        coordinator.settings = NotificationSettings(sound_enabled=False, reminder_time="07:45")

        result = await self._flow(mock_entry, coordinator).async_step_init()

        defaults = self._defaults(result)
        assert defaults[CONF_SOUND_ENABLED] is False
        assert defaults[CONF_REMINDER_TIME] == "07:45"

    @pytest.mark.asyncio
    async def test_options_form_submission(self, mock_entry):
        user_input = {CONF_ENABLED: True, CONF_SOUND_ENABLED: False, CONF_REMINDER_TIME: "20:15"}

        result = await self._flow(mock_entry).async_step_init(user_input)

        assert result["type"] == FlowResultType.CREATE_ENTRY
        assert result["title"] == ""
        assert result["data"] == user_input

    @pytest.mark.asyncio
    async def test_options_invalid_time(self, mock_entry):
        result = await self._flow(mock_entry).async_step_init({CONF_REMINDER_TIME: "half past seven"})

        assert result["type"] == FlowResultType.FORM
        assert result["errors"] == {CONF_REMINDER_TIME: "invalid_time"}
