"""Animation backend factory and utilities."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from keyframekit.logging.logger import get_logger
from keyframekit.settings.settings_manager import SettingsManager
from keyframekit.events import EventSystem, EventType
from keyframekit.constants.timing import PLAYBACK_TICK_FPS

from .base import AnimationBackend, BackendCapabilities, evaluate_animation
from .qt.backend import QtAnimationBackend
from .recording.backend import RecordingAnimationBackend

logger = get_logger(__name__)

BACKEND_QT = "qt"
BACKEND_RECORDING = "recording"


class BackendRegistry:
    """Registry mapping backend keys to backend classes."""

    def __init__(self) -> None:
        self._registry: Dict[str, Type[AnimationBackend]] = {}

    def register(self, key: str, backend_cls: Type[AnimationBackend]) -> None:
        key_lower = key.lower()
        if key_lower in self._registry:
            logger.warning("Overwriting backend registration for %s", key_lower)
        self._registry[key_lower] = backend_cls

    def create(self, key: str, **options: Any) -> AnimationBackend:
        key_lower = key.lower()
        backend_cls = self._registry.get(key_lower)
        if backend_cls is None:
            raise KeyError(f"Backend '{key}' is not registered")
        backend = backend_cls(**options)
        backend.initialize()
        return backend

    def available(self) -> Dict[str, Type[AnimationBackend]]:
        return dict(self._registry)


_registry = BackendRegistry()


@dataclass
class BackendDiagnostics:
    """Accumulates telemetry for backend selections and fallbacks."""

    selections: Counter
    fallbacks: Counter
    failures: Counter


@dataclass
class BackendSelectionResult:
    """Details of a backend selection attempt."""

    backend: AnimationBackend
    requested_mode: str
    resolved_mode: str
    fallback_reason: Optional[str] = None

    @property
    def fallback_performed(self) -> bool:
        return self.fallback_reason is not None


_diagnostics = BackendDiagnostics(Counter(), Counter(), Counter())

# Register built-in backends
_registry.register(BACKEND_QT, QtAnimationBackend)
_registry.register(BACKEND_RECORDING, RecordingAnimationBackend)


def get_registry() -> BackendRegistry:
    return _registry


def get_backend_diagnostics() -> BackendDiagnostics:
    return _diagnostics


def reset_backend_diagnostics() -> None:
    _diagnostics.selections.clear()
    _diagnostics.fallbacks.clear()
    _diagnostics.failures.clear()


def _normalize_backend(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return BACKEND_QT

    lowered = value.lower().strip()
    if lowered in _registry.available():
        return lowered

    if lowered:
        logger.info("Unknown animation backend '%s'; defaulting to Qt", lowered)
    return BACKEND_QT


def _determine_mode(settings: SettingsManager) -> str:
    """Return the normalized backend key from settings."""
    raw = settings.get("playback.backend", BACKEND_QT)
    normalized = _normalize_backend(raw)

    if isinstance(raw, str) and raw.lower().strip() != normalized:
        try:
            settings.set("playback.backend", normalized)
        except Exception:
            logger.debug("Failed to persist normalized backend mode", exc_info=True)

    return normalized


def _publish(event_system: Optional[EventSystem], event_type: str, **data) -> None:
    if event_system is None:
        return
    try:
        event_system.publish(event_type, data=data, source="keyframekit.backends")
    except Exception:  # pragma: no cover - diagnostics should not break init
        logger.exception("Failed to publish event %s", event_type)


def _record_selection(resolved: str) -> None:
    _diagnostics.selections[resolved] += 1


def _record_fallback(requested: str, resolved: str) -> None:
    _diagnostics.fallbacks[f"{requested}->{resolved}"] += 1


def _record_failure(requested: str) -> None:
    _diagnostics.failures[requested] += 1


def _options_for(mode: str, settings: SettingsManager) -> Dict[str, Any]:
    if mode == BACKEND_QT:
        return {"tick_fps": settings.get("playback.tick_fps", PLAYBACK_TICK_FPS)}
    return {}


def create_backend_from_settings(
    settings: SettingsManager,
    *,
    event_system: Optional[EventSystem] = None,
) -> BackendSelectionResult:
    """
    Create the backend named by 'playback.backend'.

    Any backend that fails to initialize falls back to the recording backend,
    which needs neither an event loop nor a display.
    """
    requested = _determine_mode(settings)

    try:
        backend = _registry.create(requested, **_options_for(requested, settings))
    except Exception as exc:
        if requested == BACKEND_RECORDING:
            raise
        _record_failure(requested)
        logger.warning("Falling back to recording backend after '%s' failure: %s", requested, exc)
        backend = _registry.create(BACKEND_RECORDING)
        reason = str(exc)
        _record_selection(BACKEND_RECORDING)
        _record_fallback(requested, BACKEND_RECORDING)
        _publish(
            event_system,
            EventType.BACKEND_FALLBACK,
            requested=requested,
            resolved=BACKEND_RECORDING,
            reason=reason,
        )
        _publish(
            event_system,
            EventType.BACKEND_SELECTED,
            requested=requested,
            resolved=BACKEND_RECORDING,
            fallback=True,
        )
        return BackendSelectionResult(
            backend=backend,
            requested_mode=requested,
            resolved_mode=BACKEND_RECORDING,
            fallback_reason=reason,
        )

    logger.info("Animation backend '%s' initialized", requested)
    _record_selection(requested)
    _publish(
        event_system,
        EventType.BACKEND_SELECTED,
        requested=requested,
        resolved=requested,
        fallback=False,
    )
    return BackendSelectionResult(backend=backend, requested_mode=requested, resolved_mode=requested)


__all__ = [
    'AnimationBackend',
    'BackendCapabilities',
    'BackendDiagnostics',
    'BackendRegistry',
    'BackendSelectionResult',
    'QtAnimationBackend',
    'RecordingAnimationBackend',
    'BACKEND_QT',
    'BACKEND_RECORDING',
    'create_backend_from_settings',
    'evaluate_animation',
    'get_backend_diagnostics',
    'reset_backend_diagnostics',
    'get_registry',
]
