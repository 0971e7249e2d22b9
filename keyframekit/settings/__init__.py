"""Persistent configuration for keyframekit."""

from .settings_manager import (
    OVERLAP_LAST_WRITER_WINS,
    OVERLAP_POLICIES,
    OVERLAP_REJECT,
    SettingsManager,
    get_default_settings,
)

__all__ = [
    'SettingsManager',
    'get_default_settings',
    'OVERLAP_LAST_WRITER_WINS',
    'OVERLAP_REJECT',
    'OVERLAP_POLICIES',
]
