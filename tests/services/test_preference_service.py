"""Theme preference persistence."""
from __future__ import annotations

import pytest

from services.preference_service import PreferenceService


@pytest.fixture
def preferences(settings_table):
    return PreferenceService(settings_table)


def test_default_theme_until_changed(preferences):
    assert preferences.get_theme("u1") == "light"


def test_toggle_persists(preferences, settings_table):
    assert preferences.toggle_theme("u1") == "dark"
    assert PreferenceService(settings_table).get_theme("u1") == "dark"
    assert preferences.toggle_theme("u1") == "light"
    assert len(settings_table.select(filters={"user_id": "u1"})) == 1


def test_themes_are_per_user(preferences):
    preferences.set_theme("u1", "dark")
    assert preferences.get_theme("u2") == "light"


def test_unknown_theme_is_rejected(preferences):
    with pytest.raises(ValueError):
        preferences.set_theme("u1", "sepia")


def test_store_outage_keeps_last_known_theme(preferences, failing_table):
    preferences.set_theme("u1", "dark")
    preferences.table = failing_table
    assert preferences.get_theme("u1") == "dark"
    assert preferences.set_theme("u1", "light") == "dark"
    assert preferences.get_theme("u2") == "light"


def test_invalid_default_falls_back_to_light(settings_table):
    assert PreferenceService(settings_table, default_theme="neon").default_theme == "light"
