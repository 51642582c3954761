"""Tests for the single-row shop settings."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.settings.settings import (
    SETTINGS_ID,
    MarkupChanged,
    ShopSettings,
    UpdateMarkup,
    current_markup,
    current_settings,
)


class TestDefaults:
    def test_settings_created_on_first_read(self):
        settings = current_settings()
        assert settings.id == SETTINGS_ID
        assert settings.markup_percentage == 0.30

        stored = current_domain.repository_for(ShopSettings).get(SETTINGS_ID)
        assert stored.markup_percentage == 0.30

    def test_second_read_returns_same_row(self):
        current_settings()
        assert current_settings().id == SETTINGS_ID
        assert current_markup() == 0.30


class TestChangeMarkup:
    def test_change_markup_records_editor(self):
        settings = ShopSettings()
        settings.change_markup(0.45, updated_by="admin-1")

        assert settings.markup_percentage == 0.45
        assert settings.updated_by == "admin-1"
        event = settings._events[-1]
        assert isinstance(event, MarkupChanged)
        assert event.previous_markup == 0.30

    def test_markup_cannot_be_negative(self):
        settings = ShopSettings()
        with pytest.raises(ValidationError):
            settings.change_markup(-0.1)

    def test_update_markup_command(self):
        result = current_domain.process(UpdateMarkup(markup_percentage=0.5, updated_by="admin-1"), asynchronous=False)

        assert result == 0.5
        assert current_markup() == 0.5

    def test_command_rejects_out_of_range_markup(self):
        with pytest.raises(ValidationError):
            UpdateMarkup(markup_percentage=11)
