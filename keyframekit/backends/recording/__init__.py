"""Deterministic recording backend."""

from .backend import RecordingAnimationBackend, Submission

__all__ = ['RecordingAnimationBackend', 'Submission']
