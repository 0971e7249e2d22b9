"""
Animation types, enums, and dataclasses.

Defines the descriptors callers build, the timed animation objects handed to
a backend, and the per-object timeline produced by the composer.
"""
from enum import Enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

import numpy as np
from PySide6.QtCore import QRectF

from keyframekit.animation.errors import TypeMismatchError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from keyframekit.animation.snapshot import ObjectStateSnapshot


class TimelineState(Enum):
    """Lifecycle state of a composed timeline."""
    PENDING = "pending"        # Built, not yet submitted
    PLAYING = "playing"        # Submitted to the backend
    COMPLETED = "completed"    # Backend signalled completion
    FINALIZED = "finalized"    # Snapshot handled, backend animations removed


class ValueKind(Enum):
    """Runtime value type expected for an animatable property."""
    SCALAR = "scalar"          # int | float
    POINT = "point"            # QPointF
    SIZE = "size"              # QSizeF
    RECT = "rect"              # QRectF
    COLOR = "color"            # QColor, eased as four RGBA channels
    TRANSFORM = "transform"    # QTransform
    PATH = "path"              # Opaque path, never interpolated


class AnimatableProperty(Enum):
    """Symbolic animatable properties of a layer."""
    # Origin (top-left corner)
    ORIGIN = "origin"
    ORIGIN_X = "origin.x"
    ORIGIN_Y = "origin.y"

    # Size
    SIZE = "size"
    SIZE_WIDTH = "size.width"
    SIZE_HEIGHT = "size.height"

    # Frame (origin + size)
    FRAME = "frame"

    # Center
    CENTER = "center"
    CENTER_X = "center.x"
    CENTER_Y = "center.y"

    # Position (anchor point, same as center)
    POSITION = "position"
    POSITION_X = "position.x"
    POSITION_Y = "position.y"

    # Colors and border
    BACKGROUND_COLOR = "background_color"
    BORDER_COLOR = "border_color"
    BORDER_WIDTH = "border_width"
    CORNER_RADIUS = "corner_radius"

    # Opacity
    OPACITY = "opacity"
    ALPHA = "alpha"

    # Shadow
    SHADOW_COLOR = "shadow_color"
    SHADOW_OFFSET = "shadow_offset"
    SHADOW_OPACITY = "shadow_opacity"
    SHADOW_PATH = "shadow_path"
    SHADOW_RADIUS = "shadow_radius"

    # Transform
    TRANSFORM = "transform"

    # Rotation
    ROTATION_X = "rotation.x"
    ROTATION_Y = "rotation.y"
    ROTATION_Z = "rotation.z"
    ROTATION = "rotation"

    # Scale
    SCALE_X = "scale.x"
    SCALE_Y = "scale.y"
    SCALE_Z = "scale.z"
    SCALE = "scale"

    # Translation
    TRANSLATION_X = "translation.x"
    TRANSLATION_Y = "translation.y"
    TRANSLATION_Z = "translation.z"
    TRANSLATION = "translation"

    # Depth
    Z_POSITION = "z_position"


class EasingCurve(Enum):
    """
    Easing curve types for keyframe sampling.

    Easing functions control the rate of change of the animated value over time.
    """
    # Basic
    LINEAR = "linear"

    # Quadratic
    QUAD_IN = "quad_in"
    QUAD_OUT = "quad_out"
    QUAD_IN_OUT = "quad_in_out"

    # Cubic
    CUBIC_IN = "cubic_in"
    CUBIC_OUT = "cubic_out"
    CUBIC_IN_OUT = "cubic_in_out"

    # Quartic
    QUART_IN = "quart_in"
    QUART_OUT = "quart_out"
    QUART_IN_OUT = "quart_in_out"

    # Quintic
    QUINT_IN = "quint_in"
    QUINT_OUT = "quint_out"
    QUINT_IN_OUT = "quint_in_out"

    # Sine
    SINE_IN = "sine_in"
    SINE_OUT = "sine_out"
    SINE_IN_OUT = "sine_in_out"

    # Exponential
    EXPO_IN = "expo_in"
    EXPO_OUT = "expo_out"
    EXPO_IN_OUT = "expo_in_out"

    # Circular
    CIRC_IN = "circ_in"
    CIRC_OUT = "circ_out"
    CIRC_IN_OUT = "circ_in_out"

    # Elastic (duration-dependent)
    ELASTIC_IN = "elastic_in"
    ELASTIC_OUT = "elastic_out"
    ELASTIC_IN_OUT = "elastic_in_out"

    # Back
    BACK_IN = "back_in"
    BACK_OUT = "back_out"
    BACK_IN_OUT = "back_in_out"

    # Bounce
    BOUNCE_IN = "bounce_in"
    BOUNCE_OUT = "bounce_out"
    BOUNCE_IN_OUT = "bounce_in_out"


@dataclass(frozen=True, eq=False)
class AnimationDescriptor:
    """One requested property animation.

    The target is held by reference only; the engine never copies or owns it.
    Descriptors are consumed once by the composer and never mutated.
    """
    target: Any                                        # Object to animate
    property: AnimatableProperty                       # What to animate
    end_value: Any                                     # Validated per property
    duration: float                                    # Duration in seconds
    delay: float = 0.0                                 # Delay before starting (seconds)
    easing: EasingCurve = EasingCurve.LINEAR           # Easing curve

    def __post_init__(self):
        """Validate descriptor fields."""
        if self.target is None:
            raise ValueError("AnimationDescriptor requires a target")
        if not isinstance(self.property, AnimatableProperty):
            raise ValueError(f"Unknown animatable property: {self.property!r}")
        if not isinstance(self.easing, EasingCurve):
            raise ValueError(f"Unknown easing curve: {self.easing!r}")
        if self.duration < 0:
            raise ValueError(f"duration must be >= 0 (got {self.duration})")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0 (got {self.delay})")

    @property
    def segment_duration(self) -> float:
        """Delay plus duration; shared by every member of a simultaneous group."""
        return self.delay + self.duration

    def frame_components(self) -> Tuple["AnimationDescriptor", "AnimationDescriptor"]:
        """Split a FRAME descriptor into (ORIGIN, SIZE) descriptors."""
        if not isinstance(self.end_value, QRectF):
            raise TypeMismatchError(self.property, QRectF, self.end_value)

        origin = AnimationDescriptor(
            target=self.target,
            property=AnimatableProperty.ORIGIN,
            end_value=self.end_value.topLeft(),
            duration=self.duration,
            delay=self.delay,
            easing=self.easing,
        )
        size = AnimationDescriptor(
            target=self.target,
            property=AnimatableProperty.SIZE,
            end_value=self.end_value.size(),
            duration=self.duration,
            delay=self.delay,
            easing=self.easing,
        )
        return origin, size


@dataclass
class TimedAnimation:
    """Timing shared by every animation handed to a backend."""
    duration: float                                    # Duration in seconds
    begin_time: float = 0.0                            # Offset from the parent's start
    repeat_count: float = 1.0                          # Fractional repeats allowed
    autoreverses: bool = False                         # Play backwards after each pass
    fill_forward: bool = True                          # Hold final value after ending
    removed_on_completion: bool = False                # Backend keeps it until removed

    def active_duration(self) -> float:
        """Total time this animation occupies in its parent's timeline."""
        single = self.duration * (2.0 if self.autoreverses else 1.0)
        return single * self.repeat_count

    def end_time(self) -> float:
        """Parent-relative time at which this animation stops changing."""
        return self.begin_time + self.active_duration()


@dataclass
class KeyframeAnimation(TimedAnimation):
    """Backend animation driven by an explicit value array."""
    key_path: str = ""                                 # Backend-native path, e.g. 'position.x'
    values: List[Any] = field(default_factory=list)    # One value per sample
    property: Optional[AnimatableProperty] = None      # Source property
    samples: Optional[np.ndarray] = None               # (n_samples, n_components) floats

    def __post_init__(self):
        """Validate keyframe animation."""
        if not self.key_path:
            raise ValueError("KeyframeAnimation requires a key_path")
        if not self.values:
            raise ValueError("KeyframeAnimation requires at least one value")


@dataclass
class AnimationGroup(TimedAnimation):
    """Animations that share one begin time and duration."""
    animations: List[TimedAnimation] = field(default_factory=list)


@dataclass
class Timeline:
    """Everything composed for one object in one chain/animate call."""
    target: Any
    snapshot: "ObjectStateSnapshot"
    animation: TimedAnimation
    state: TimelineState = TimelineState.PENDING


# Type aliases for callbacks
CompletionCallback = Callable[[], None]
