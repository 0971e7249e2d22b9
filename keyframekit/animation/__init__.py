"""Declarative keyframe animation engine."""

from .errors import (
    AnimationError,
    AnimationInFlightError,
    FrameSamplingError,
    GroupDurationMismatchError,
    TypeMismatchError,
    UnsupportedPropertyError,
)
from .types import (
    AnimatableProperty,
    AnimationDescriptor,
    AnimationGroup,
    EasingCurve,
    KeyframeAnimation,
    TimedAnimation,
    Timeline,
    TimelineState,
    ValueKind,
)
from .easing import DURATION_DEPENDENT_CURVES, EASING_FUNCTIONS, ease, get_easing_function
from .layer import Layer
from .snapshot import ObjectStateSnapshot
from .properties import PROPERTY_SPECS, UNSUPPORTED_PROPERTIES, PropertySpec, resolve_property
from .sampler import build_animation, build_keyframe_animation, frame_count, sample_values
from .composer import AnimationComposer, Composition
from .dispatcher import (
    PlaybackBatch,
    PlaybackDispatcher,
    animate,
    chain,
    get_dispatcher,
    set_dispatcher,
)

__all__ = [
    # Errors
    'AnimationError',
    'AnimationInFlightError',
    'FrameSamplingError',
    'GroupDurationMismatchError',
    'TypeMismatchError',
    'UnsupportedPropertyError',

    # Types
    'AnimatableProperty',
    'AnimationDescriptor',
    'AnimationGroup',
    'EasingCurve',
    'KeyframeAnimation',
    'TimedAnimation',
    'Timeline',
    'TimelineState',
    'ValueKind',

    # Easing
    'ease',
    'get_easing_function',
    'EASING_FUNCTIONS',
    'DURATION_DEPENDENT_CURVES',

    # State
    'Layer',
    'ObjectStateSnapshot',

    # Resolution and sampling
    'PropertySpec',
    'PROPERTY_SPECS',
    'UNSUPPORTED_PROPERTIES',
    'resolve_property',
    'frame_count',
    'sample_values',
    'build_keyframe_animation',
    'build_animation',

    # Composition and playback
    'AnimationComposer',
    'Composition',
    'PlaybackBatch',
    'PlaybackDispatcher',
    'chain',
    'animate',
    'get_dispatcher',
    'set_dispatcher',
]
