"""Tests for Config validation and the settings defaults derived from it."""

import pytest

from gatherer.config import Config
from gatherer.schemas import GameSettings


def test_settings_default_to_config_values():
    settings = GameSettings()

    assert settings.grid_size == Config.GRID_SIZE
    assert settings.budget == Config.BUDGET
    assert settings.hindered_cost == Config.HINDERED_COST
    assert settings.num_resources == Config.NUM_NORMAL_RESOURCES + Config.NUM_GOLDEN_RESOURCES


def test_validate_accepts_defaults():
    Config.validate()


def test_validate_rejects_overcrowded_grid(monkeypatch):
    monkeypatch.setattr(Config, "GRID_SIZE", 2)
    monkeypatch.setattr(Config, "NUM_HINDERED_TILES", 5)

    with pytest.raises(ValueError, match="cannot be placed"):
        Config.validate()


def test_validate_rejects_cheap_mud(monkeypatch):
    monkeypatch.setattr(Config, "HINDERED_COST", 0)

    with pytest.raises(ValueError, match="HINDERED_COST"):
        Config.validate()


def test_validate_rejects_non_positive_timeouts(monkeypatch):
    monkeypatch.setattr(Config, "POLL_INTERVAL", 0)

    with pytest.raises(ValueError, match="POLL_INTERVAL"):
        Config.validate()


def test_display_lists_key_settings():
    text = Config.display()

    assert text.startswith("Gatherer Configuration:")
    assert f"Budget: {Config.BUDGET}" in text
