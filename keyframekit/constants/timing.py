"""Timing constants for keyframe sampling and playback.

Durations are in seconds unless the name says otherwise. These constants
replace magic numbers in the sampler, composer and backends.
"""

# =============================================================================
# Keyframe Sampling
# =============================================================================

KEYFRAME_SAMPLE_RATE = 60
"""Samples generated per second of animation duration."""

# =============================================================================
# Playback
# =============================================================================

DEFAULT_REPEAT_COUNT = 1.0
"""Repeat count applied when the caller does not provide one."""

PLAYBACK_TICK_FPS = 60
"""Default tick rate for the Qt playback timer."""

PLAYBACK_MIN_TICK_FPS = 10
"""Lowest tick rate the Qt playback timer accepts."""

PLAYBACK_MAX_TICK_FPS = 240
"""Highest tick rate the Qt playback timer accepts."""

PLAYBACK_MAX_DELTA_S = 0.5
"""Gap between playback ticks above which a stall is logged."""

# =============================================================================
# Performance Thresholds
# =============================================================================

PERF_SLOW_SAMPLING_THRESHOLD_MS = 20.0
"""Threshold for logging slow keyframe generation."""

PERF_SLOW_TICK_THRESHOLD_MS = 50.0
"""Threshold for logging a slow playback tick."""

# =============================================================================
# Export all constants
# =============================================================================

__all__ = [
    # Sampling
    "KEYFRAME_SAMPLE_RATE",
    # Playback
    "DEFAULT_REPEAT_COUNT",
    "PLAYBACK_TICK_FPS",
    "PLAYBACK_MIN_TICK_FPS",
    "PLAYBACK_MAX_TICK_FPS",
    "PLAYBACK_MAX_DELTA_S",
    # Performance thresholds
    "PERF_SLOW_SAMPLING_THRESHOLD_MS",
    "PERF_SLOW_TICK_THRESHOLD_MS",
]
