"""
Keyframe generator.

Samples an eased start -> end interpolation at a fixed 60 samples per second
of duration and wraps the result in backend animations. Sampling happens
here rather than in the backend so custom curves (elastic, back, bounce)
play back identically on every backend.
"""
import time
from typing import Any, List, Tuple

import numpy as np

from keyframekit.animation.easing import DURATION_DEPENDENT_CURVES, get_easing_function
from keyframekit.animation.properties import resolve_property
from keyframekit.animation.snapshot import ObjectStateSnapshot
from keyframekit.animation.types import (
    AnimatableProperty, AnimationDescriptor, AnimationGroup, EasingCurve,
    KeyframeAnimation, TimedAnimation, ValueKind,
)
from keyframekit.animation.values import from_components, to_components
from keyframekit.constants.timing import (
    KEYFRAME_SAMPLE_RATE, PERF_SLOW_SAMPLING_THRESHOLD_MS,
)
from keyframekit.logging.logger import get_logger, is_perf_metrics_enabled

logger = get_logger(__name__)


def frame_count(duration: float) -> int:
    """Number of samples for a duration: floor(60 * d) + 1."""
    return int(KEYFRAME_SAMPLE_RATE * duration) + 1


def sample_ratios(duration: float) -> np.ndarray:
    """
    Time ratios t_i = i / (60 * d) for every sample index.

    A zero duration gives a single ratio of 0.0.
    """
    total = KEYFRAME_SAMPLE_RATE * duration
    if total == 0:
        return np.zeros(1, dtype=np.float64)
    return np.arange(int(total) + 1, dtype=np.float64) / total


def eased_progress(ratios: np.ndarray, easing: EasingCurve, duration: float) -> np.ndarray:
    """Apply an easing curve to every ratio (once per sample, not per component)."""
    fn = get_easing_function(easing)
    if easing in DURATION_DEPENDENT_CURVES:
        return np.fromiter((fn(float(t), duration) for t in ratios),
                           dtype=np.float64, count=len(ratios))
    return np.fromiter((fn(float(t)) for t in ratios),
                       dtype=np.float64, count=len(ratios))


def interpolate(start: np.ndarray, end: np.ndarray, progress: np.ndarray) -> np.ndarray:
    """
    Interpolate component vectors.

    Returns:
        (n_samples, n_components) array of start + (end - start) * progress
    """
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    return start + (end - start) * progress[:, np.newaxis]


def sample_values(kind: ValueKind, start: Any, end: Any, duration: float,
                  easing: EasingCurve) -> Tuple[List[Any], np.ndarray]:
    """
    Sample a start -> end interpolation.

    Returns:
        (values, samples): values rebuilt as `kind`, and the raw sample matrix
    """
    ratios = sample_ratios(duration)
    progress = eased_progress(ratios, easing, duration)
    samples = interpolate(to_components(kind, start), to_components(kind, end), progress)
    values = [from_components(kind, row) for row in samples]
    return values, samples


def build_keyframe_animation(desc: AnimationDescriptor, snapshot: ObjectStateSnapshot,
                             set_delay: bool = True) -> KeyframeAnimation:
    """
    Sample one descriptor into a keyframe animation.

    Advances `snapshot` to the descriptor's end state.

    Args:
        desc: Descriptor to sample (must not be FRAME)
        snapshot: Snapshot of desc.target for the current call
        set_delay: Use the descriptor's delay as begin time (else 0.0)

    Raises:
        UnsupportedPropertyError, FrameSamplingError, TypeMismatchError
    """
    spec = resolve_property(desc.property)
    start, end = spec.resolve(snapshot, desc.end_value)

    _t0 = time.perf_counter()
    values, samples = sample_values(spec.kind, start, end, desc.duration, desc.easing)
    _elapsed_ms = (time.perf_counter() - _t0) * 1000.0
    if _elapsed_ms > PERF_SLOW_SAMPLING_THRESHOLD_MS and is_perf_metrics_enabled():
        logger.warning("[PERF] [SAMPLER] Slow sampling: %.2fms (%s, %d samples)",
                       _elapsed_ms, spec.key_path, len(values))

    logger.debug("Sampled %s -> %s: %d keyframes over %.3fs (%s)",
                 desc.property.name, spec.key_path, len(values), desc.duration,
                 desc.easing.value)

    return KeyframeAnimation(
        duration=desc.duration,
        begin_time=desc.delay if set_delay else 0.0,
        key_path=spec.key_path,
        values=values,
        property=desc.property,
        samples=samples,
    )


def build_animation(desc: AnimationDescriptor, snapshot: ObjectStateSnapshot,
                    set_delay: bool = True) -> TimedAnimation:
    """
    Sample a descriptor, decomposing FRAME into an [origin, size] group.

    Size is sampled before origin so the origin's end position is centred
    with the new size.
    """
    if desc.property is not AnimatableProperty.FRAME:
        return build_keyframe_animation(desc, snapshot, set_delay)

    origin_desc, size_desc = desc.frame_components()
    size_anim = build_keyframe_animation(size_desc, snapshot, set_delay=False)
    origin_anim = build_keyframe_animation(origin_desc, snapshot, set_delay=False)
    return AnimationGroup(
        duration=desc.duration,
        begin_time=desc.delay if set_delay else 0.0,
        animations=[origin_anim, size_anim],
    )
