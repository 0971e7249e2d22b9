"""
Shared pytest fixtures for keyframekit tests.
"""
import sys

import pytest
from PySide6.QtCore import QCoreApplication, QPointF, QSizeF
from PySide6.QtGui import QColor


@pytest.fixture(scope='session')
def qt_app():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def settings_manager():
    """Create SettingsManager instance for testing."""
    from keyframekit.settings import SettingsManager
    manager = SettingsManager(organization="Test", application="KeyframekitTest")
    yield manager
    # Clear test settings
    manager.clear()


@pytest.fixture
def event_system():
    """Create EventSystem instance for testing."""
    from keyframekit.events import EventSystem
    system = EventSystem()
    yield system
    system.clear()


@pytest.fixture
def recording_backend():
    """Create an initialized RecordingAnimationBackend."""
    from keyframekit.backends.recording import RecordingAnimationBackend
    backend = RecordingAnimationBackend()
    backend.initialize()
    yield backend
    backend.shutdown()


@pytest.fixture
def layer():
    """100x100 layer centred at (50, 50) with every colour set."""
    from keyframekit.animation import Layer
    return Layer(
        position=QPointF(50.0, 50.0),
        size=QSizeF(100.0, 100.0),
        background_color=QColor(255, 0, 0),
        border_color=QColor(0, 255, 0),
        border_width=2.0,
        corner_radius=4.0,
        opacity=1.0,
        shadow_color=QColor(0, 0, 0),
        shadow_opacity=0.5,
        name="layer",
    )
