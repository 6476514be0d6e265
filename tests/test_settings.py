"""Tests for persisted preferences and node colouring."""

import json

import pytest

from bst_engine import Node
from settings import (SPEED_DEFAULT, SPEED_MAX, SPEED_MIN, THEMES, Settings,
                      clamp_speed, node_colors)


def test_defaults(settings):
    assert settings.theme == "dark"
    assert settings.speed == SPEED_DEFAULT
    assert settings.auto_play is True
    assert settings.custom_colors == {}


@pytest.mark.parametrize("value, expected", [
    (50, SPEED_MIN), (100, 100), (750, 750), (5000, SPEED_MAX), ("300", 300),
])
def test_clamp_speed(value, expected):
    assert clamp_speed(value) == expected


def test_speed_setter_clamps(settings):
    settings.speed = 0
    assert settings.speed == SPEED_MIN
    settings.speed = 99999
    assert settings.speed == SPEED_MAX


def test_save_and_reload(settings):
    settings.theme = "light"
    settings.speed = 800
    settings.auto_play = False
    settings.custom_colors = {"EDGE": "#123456"}
    assert settings.save()

    loaded = Settings(path=settings.path)
    assert loaded.theme == "light"
    assert loaded.speed == 800
    assert loaded.auto_play is False
    assert loaded.get("EDGE") == "#123456"


def test_missing_file_keeps_defaults(tmp_path):
    s = Settings(path=str(tmp_path / "nope.json"))
    assert s.theme == "dark" and s.speed == SPEED_DEFAULT


def test_corrupt_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    s = Settings(path=str(path))
    assert s.theme == "dark"
    assert "Ignoring unreadable settings file" in caplog.text


def test_unknown_theme_and_wild_speed_are_sanitised(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "neon", "speed": 5}))
    s = Settings(path=str(path))
    assert s.theme == "dark"
    assert s.speed == SPEED_MIN


def test_save_failure_is_reported_not_raised(tmp_path):
    s = Settings(path=str(tmp_path / "no_such_dir" / "s.json"), load=False)
    assert s.save() is False


def test_colour_lookup_order(settings):
    assert settings.get("ACCENT") == THEMES["dark"]["ACCENT"]
    settings.theme = "light"
    assert settings.get("ACCENT") == THEMES["light"]["ACCENT"]
    settings.custom_colors["ACCENT"] = "#abcdef"
    assert settings.get("ACCENT") == "#abcdef"
    assert settings.get("NOT_A_KEY") == "#ffffff"


def test_node_colour_priority(settings):
    n = Node(1)
    assert node_colors(settings, n) == (settings.get("NODE_FILL"),
                                        settings.get("NODE_TEXT"))
    n.visited = True
    assert node_colors(settings, n)[0] == settings.get("NODE_VISITED")
    n.is_searching = True
    assert node_colors(settings, n)[0] == settings.get("NODE_SEARCHING")
    n.is_current = True
    assert node_colors(settings, n) == (settings.get("NODE_CURRENT"),
                                        settings.get("NODE_TEXT_HL"))


def test_settings_drive_playback_speed(settings, scheduler):
    from bst_engine import History
    from playback import PlaybackController

    settings.speed = 900
    pb = PlaybackController(History(), scheduler, settings)
    assert pb.delay_ms() == 200
