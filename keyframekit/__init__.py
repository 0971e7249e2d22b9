"""keyframekit: declarative keyframe animations sampled ahead of playback."""

__version__ = "0.3.0"
