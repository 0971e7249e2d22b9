"""
Tests for SettingsManager.
"""
import pytest

from keyframekit.settings import OVERLAP_LAST_WRITER_WINS, get_default_settings


def test_defaults_present(settings_manager):
    """Every canonical default is written on construction."""
    for key in get_default_settings():
        assert settings_manager.contains(key)
    assert settings_manager.get_str("playback.overlap_policy") == OVERLAP_LAST_WRITER_WINS


def test_get_missing_key_returns_default(settings_manager):
    assert settings_manager.get("missing.key", "fallback") == "fallback"


def test_set_emits_signal_and_handlers(settings_manager):
    signals = []
    handled = []
    settings_manager.settings_changed.connect(lambda key, value: signals.append((key, value)))
    settings_manager.on_changed("playback.tick_fps", lambda new, old: handled.append(new))

    settings_manager.set("playback.tick_fps", 30)

    assert signals == [("playback.tick_fps", 30)]
    assert handled == [30]
    assert settings_manager.get_int("playback.tick_fps") == 30


def test_handler_error_does_not_propagate(settings_manager):
    def broken(new, old):
        raise RuntimeError("handler failed")

    settings_manager.on_changed("playback.backend", broken)
    settings_manager.set("playback.backend", "recording")

    assert settings_manager.get("playback.backend") == "recording"


@pytest.mark.parametrize("raw, expected", [
    (True, True),
    ("true", True),
    ("ON", True),
    ("0", False),
    ("off", False),
    ("maybe", False),
    (None, False),
    (1, True),
])
def test_to_bool(settings_manager, raw, expected):
    assert settings_manager.to_bool(raw) is expected


def test_get_int_rejects_garbage(settings_manager):
    settings_manager.set("playback.tick_fps", "fast")
    assert settings_manager.get_int("playback.tick_fps", 60) == 60


def test_get_str_strips(settings_manager):
    settings_manager.set("playback.overlap_policy", "  reject ")
    assert settings_manager.get_str("playback.overlap_policy") == "reject"


def test_reset_to_defaults(settings_manager):
    signals = []
    settings_manager.settings_changed.connect(lambda key, value: signals.append(key))
    settings_manager.set("playback.backend", "recording")
    settings_manager.set("custom.key", 1)

    settings_manager.reset_to_defaults()

    assert signals[-1] == "*"
    assert settings_manager.get("playback.backend") == "qt"
    assert not settings_manager.contains("custom.key")


def test_remove(settings_manager):
    settings_manager.set("custom.key", 1)
    settings_manager.remove("custom.key")
    assert not settings_manager.contains("custom.key")
    assert "custom.key" not in settings_manager.get_all_keys()
