"""Tests for animation backend selection and registry."""

from __future__ import annotations

import pytest

from keyframekit.backends import (
    BACKEND_QT,
    BACKEND_RECORDING,
    create_backend_from_settings,
    get_backend_diagnostics,
    get_registry,
    reset_backend_diagnostics,
)
from keyframekit.backends.qt.backend import QtAnimationBackend
from keyframekit.backends.recording.backend import RecordingAnimationBackend
from keyframekit.events import EventType


class StubSettings:
    """Minimal settings provider for backend creation tests."""

    def __init__(self, values: dict[str, object] | None = None) -> None:
        self._values = values or {}

    def get(self, key: str, default=None):  # type: ignore[override]
        return self._values.get(key, default)


@pytest.fixture
def registry():
    return get_registry()


@pytest.fixture(autouse=True)
def clean_diagnostics():
    reset_backend_diagnostics()
    yield
    reset_backend_diagnostics()


def test_builtin_backends_registered(registry):
    available = registry.available()
    assert available[BACKEND_QT] is QtAnimationBackend
    assert available[BACKEND_RECORDING] is RecordingAnimationBackend


def test_create_unknown_key_raises(registry):
    with pytest.raises(KeyError):
        registry.create("metal")


def test_explicit_recording_backend_selection():
    selection = create_backend_from_settings(StubSettings({"playback.backend": "recording"}))

    assert isinstance(selection.backend, RecordingAnimationBackend)
    assert selection.requested_mode == "recording"
    assert selection.fallback_performed is False


def test_qt_backend_selected_with_tick_rate(qt_app):
    selection = create_backend_from_settings(
        StubSettings({"playback.backend": "Qt", "playback.tick_fps": 30})
    )
    try:
        assert isinstance(selection.backend, QtAnimationBackend)
        assert selection.resolved_mode == "qt"
        assert selection.backend.fps == 30
    finally:
        selection.backend.shutdown()


def test_qt_backend_falls_back_to_recording(monkeypatch, event_system):
    def failing_init(self):
        raise RuntimeError("no event loop")

    monkeypatch.setattr(QtAnimationBackend, "initialize", failing_init)

    selection = create_backend_from_settings(
        StubSettings({"playback.backend": "qt"}), event_system=event_system,
    )

    assert isinstance(selection.backend, RecordingAnimationBackend)
    assert selection.fallback_performed is True
    assert selection.resolved_mode == "recording"
    assert selection.fallback_reason == "no event loop"

    fallback = event_system.get_event_history(event_type=EventType.BACKEND_FALLBACK)
    assert len(fallback) == 1
    assert fallback[0].data["requested"] == "qt"
    selected = event_system.get_event_history(event_type=EventType.BACKEND_SELECTED)
    assert selected[-1].data == {"requested": "qt", "resolved": "recording", "fallback": True}


def test_recording_failure_is_not_masked(monkeypatch):
    def failing_init(self):
        raise RuntimeError("broken")

    monkeypatch.setattr(RecordingAnimationBackend, "initialize", failing_init)

    with pytest.raises(RuntimeError):
        create_backend_from_settings(StubSettings({"playback.backend": "recording"}))


def test_backend_diagnostics_counters(monkeypatch):
    monkeypatch.setattr(QtAnimationBackend, "initialize", lambda self: None)
    selection = create_backend_from_settings(StubSettings({"playback.backend": "qt"}))
    assert selection.resolved_mode == "qt"

    monkeypatch.setattr(
        QtAnimationBackend, "initialize",
        lambda self: (_ for _ in ()).throw(RuntimeError("qt fail")),
    )
    selection = create_backend_from_settings(StubSettings({"playback.backend": "qt"}))
    assert selection.resolved_mode == "recording"

    diag = get_backend_diagnostics()
    assert diag.selections["qt"] == 1
    assert diag.selections["recording"] == 1
    assert diag.fallbacks["qt->recording"] == 1
    assert diag.failures["qt"] == 1


def test_unknown_backend_normalizes_to_qt(monkeypatch):
    monkeypatch.setattr(QtAnimationBackend, "initialize", lambda self: None)

    selection = create_backend_from_settings(StubSettings({"playback.backend": "bogus"}))

    assert isinstance(selection.backend, QtAnimationBackend)
    assert selection.requested_mode == "qt"
    assert selection.fallback_performed is False


def test_normalized_mode_persisted(settings_manager, monkeypatch):
    monkeypatch.setattr(QtAnimationBackend, "initialize", lambda self: None)
    settings_manager.set("playback.backend", "bogus")

    create_backend_from_settings(settings_manager)

    assert settings_manager.get("playback.backend") == "qt"
