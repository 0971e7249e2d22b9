"""Qt timer-driven playback backend."""

from .backend import PlaybackSignals, QtAnimationBackend

__all__ = ['QtAnimationBackend', 'PlaybackSignals']
