"""Shared constants for keyframekit."""
