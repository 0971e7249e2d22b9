"""Logging helpers for keyframekit."""
