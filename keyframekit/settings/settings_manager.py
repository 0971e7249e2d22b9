"""
Settings manager for keyframekit playback configuration.

Uses QSettings for persistent storage with dotted keys.
"""
from typing import Any, Callable, Dict, List
import threading
from PySide6.QtCore import QSettings, QObject, Signal
from keyframekit.constants.timing import PLAYBACK_TICK_FPS
from keyframekit.logging.logger import get_logger, is_verbose_logging

logger = get_logger(__name__)


OVERLAP_LAST_WRITER_WINS = "last_writer_wins"
OVERLAP_REJECT = "reject"
OVERLAP_POLICIES = (OVERLAP_LAST_WRITER_WINS, OVERLAP_REJECT)


def get_default_settings() -> Dict[str, Any]:
    """Return the canonical default settings map."""
    return {
        # Backend key registered in keyframekit.backends ('qt' | 'recording')
        'playback.backend': 'qt',
        # What happens when a batch targets an object another batch still owns
        'playback.overlap_policy': OVERLAP_LAST_WRITER_WINS,
        # Tick rate of the Qt playback timer
        'playback.tick_fps': PLAYBACK_TICK_FPS,
        # `[PERF]` telemetry lines
        'logging.perf_metrics': True,
    }


class SettingsManager(QObject):
    """
    Centralized settings for the animation engine.

    Uses QSettings for persistent storage with organization/application name.
    Thread-safe with change notifications.
    """

    # Signal emitted when settings change
    settings_changed = Signal(str, object)  # key, new_value

    def __init__(self, organization: str = "keyframekit",
                 application: str = "keyframekit"):
        """
        Initialize the settings manager.

        Args:
            organization: Organization name for QSettings
            application: Application name for QSettings
        """
        super().__init__()

        self._settings = QSettings(organization, application)
        self._organization = organization
        self._application = application
        self._lock = threading.RLock()
        self._change_handlers: Dict[str, List[Callable[[Any, Any], None]]] = {}

        self._set_defaults()

        logger.info("SettingsManager initialized (%s/%s)", organization, application)

    def _set_defaults(self) -> None:
        """Set default values if not already present."""
        with self._lock:
            for key, value in get_default_settings().items():
                if not self._settings.contains(key):
                    self._settings.setValue(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Setting key in dot notation (e.g., 'playback.backend')
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        with self._lock:
            return self._settings.value(key, default)

    @staticmethod
    def to_bool(value: Any, default: bool = False) -> bool:
        """Normalize a stored setting value to bool.

        QSettings returns INI-backed values as strings, so "true"/"1"/"yes"/
        "on" and "false"/"0"/"no"/"off" are accepted alongside real bools.
        """
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            if v in ("true", "1", "yes", "on"):
                return True
            if v in ("false", "0", "no", "off"):
                return False
            return default
        if value is None:
            return default
        return bool(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Convenience wrapper around get() that normalizes to bool."""
        return self.to_bool(self.get(key, default), default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Convenience wrapper around get() that normalizes to int."""
        raw = self.get(key, default)
        if isinstance(raw, bool):
            return int(raw)
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Setting %s=%r is not an integer; using %d", key, raw, default)
            return default

    def get_str(self, key: str, default: str = "") -> str:
        """Convenience wrapper around get() that normalizes to a stripped str."""
        raw = self.get(key, default)
        if raw is None:
            return default
        return str(raw).strip()

    def set(self, key: str, value: Any) -> None:
        """
        Set a setting value.

        Emits settings_changed and calls handlers registered with on_changed().
        """
        with self._lock:
            old_value = self._settings.value(key)
            self._settings.setValue(key, value)

            self.settings_changed.emit(key, value)

            for handler in list(self._change_handlers.get(key, [])):
                try:
                    handler(value, old_value)
                except Exception as e:
                    logger.error("Error in change handler for %s: %s", key, e, exc_info=True)

        if is_verbose_logging():
            logger.debug("Setting changed: %s: %r -> %r", key, old_value, value)
        else:
            logger.debug("Setting changed: %s", key)

    def save(self) -> None:
        """Force save settings to persistent storage."""
        with self._lock:
            self._settings.sync()
        logger.debug("Settings saved")

    def on_changed(self, key: str, handler: Callable[[Any, Any], None]) -> None:
        """
        Register a handler for when a specific setting changes.

        Args:
            key: Setting key to watch
            handler: Callback function(new_value, old_value)
        """
        with self._lock:
            self._change_handlers.setdefault(key, []).append(handler)

        logger.debug("Registered change handler for %s", key)

    def reset_to_defaults(self) -> None:
        """Clear every key and re-apply the canonical defaults."""
        with self._lock:
            self._settings.clear()
            for key, value in get_default_settings().items():
                self._settings.setValue(key, value)
            self._settings.sync()

        logger.info("Settings reset to defaults")
        self.settings_changed.emit('*', None)

    def get_all_keys(self) -> List[str]:
        """Get all setting keys."""
        with self._lock:
            return self._settings.allKeys()

    def contains(self, key: str) -> bool:
        """Check if a setting key exists."""
        with self._lock:
            return self._settings.contains(key)

    def remove(self, key: str) -> None:
        """Remove a setting key."""
        with self._lock:
            self._settings.remove(key)
        logger.debug("Removed setting: %s", key)

    def clear(self) -> None:
        """Clear all settings (use with caution)."""
        with self._lock:
            self._settings.clear()
        logger.warning("All settings cleared")
