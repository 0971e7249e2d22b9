"""
Easing functions for keyframe sampling.

Every function maps a normalized time ratio t in [0.0, 1.0] to normalized
progress, with f(0) == 0 and f(1) == 1. Back and elastic curves leave [0, 1]
in between (back-in dips below 0, elastic-out rings above 1 before settling).

The elastic family is duration-dependent and takes the animation duration d
in seconds; everything else only needs t.

Based on Robert Penner's easing equations (http://robertpenner.com/easing/).
"""
import math
from typing import Callable, Dict, FrozenSet
from keyframekit.animation.types import EasingCurve


BACK_OVERSHOOT = 1.70158
"""Penner's default overshoot (about 10% past the target)."""

ELASTIC_PERIOD_FACTOR = 0.3
"""Elastic period as a fraction of the duration."""


# Linear
def linear(t: float) -> float:
    """No easing."""
    return t


# Quadratic
def quad_in(t: float) -> float:
    """Accelerate from rest, t^2."""
    return t * t


def quad_out(t: float) -> float:
    """Decelerate to rest, mirror of quad_in."""
    return t * (2 - t)


def quad_in_out(t: float) -> float:
    """Quadratic acceleration to the midpoint, then deceleration."""
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


# Cubic
def cubic_in(t: float) -> float:
    """Accelerate from rest, t^3."""
    return t ** 3


def cubic_out(t: float) -> float:
    """Decelerate to rest, mirror of cubic_in."""
    return 1 - (1 - t) ** 3


def cubic_in_out(t: float) -> float:
    """Cubic acceleration to the midpoint, then deceleration."""
    if t < 0.5:
        return 4 * t ** 3
    return 1 - (-2 * t + 2) ** 3 / 2


# Quartic
def quart_in(t: float) -> float:
    """Accelerate from rest, t^4."""
    return t ** 4


def quart_out(t: float) -> float:
    """Decelerate to rest, mirror of quart_in."""
    return 1 - (1 - t) ** 4


def quart_in_out(t: float) -> float:
    """Quartic acceleration to the midpoint, then deceleration."""
    if t < 0.5:
        return 8 * t ** 4
    return 1 - (-2 * t + 2) ** 4 / 2


# Quintic
def quint_in(t: float) -> float:
    """Accelerate from rest, t^5."""
    return t ** 5


def quint_out(t: float) -> float:
    """Decelerate to rest, mirror of quint_in."""
    return 1 - (1 - t) ** 5


def quint_in_out(t: float) -> float:
    """Quintic acceleration to the midpoint, then deceleration."""
    if t < 0.5:
        return 16 * t ** 5
    return 1 - (-2 * t + 2) ** 5 / 2


# Sinusoidal
def sine_in(t: float) -> float:
    """Quarter cosine wave, slow start."""
    if t >= 1:
        return 1.0
    return 1 - math.cos(t * math.pi / 2)


def sine_out(t: float) -> float:
    """Quarter sine wave, slow finish."""
    return math.sin(t * math.pi / 2)


def sine_in_out(t: float) -> float:
    """Half cosine wave, slow at both ends."""
    return -(math.cos(math.pi * t) - 1) / 2


# Exponential
def expo_in(t: float) -> float:
    """Doubling every tenth of the duration."""
    if t <= 0:
        return 0.0
    return 2 ** (10 * t - 10)


def expo_out(t: float) -> float:
    """Halving distance to the target every tenth of the duration."""
    if t >= 1:
        return 1.0
    return 1 - 2 ** (-10 * t)


def expo_in_out(t: float) -> float:
    """expo_in to the midpoint, then expo_out."""
    if t <= 0 or t >= 1:
        return float(t)
    if t < 0.5:
        return 2 ** (20 * t - 10) / 2
    return (2 - 2 ** (-20 * t + 10)) / 2


# Circular
def circ_in(t: float) -> float:
    """Quarter circle, slow start."""
    return 1 - math.sqrt(1 - t * t)


def circ_out(t: float) -> float:
    """Quarter circle, slow finish."""
    return math.sqrt(1 - (t - 1) ** 2)


def circ_in_out(t: float) -> float:
    """circ_in to the midpoint, then circ_out."""
    if t < 0.5:
        return (1 - math.sqrt(1 - (2 * t) ** 2)) / 2
    return (math.sqrt(1 - (-2 * t + 2) ** 2) + 1) / 2


# Elastic (duration-dependent)
def _elastic_period(d: float, factor: float) -> float:
    # Zero-length animations only ever sample t == 0; keep the period finite.
    return (d if d > 0 else 1.0) * factor


def elastic_in(t: float, d: float = 1.0) -> float:
    """Spring winding up before release.

    Args:
        t: Time ratio in [0, 1]
        d: Animation duration in seconds
    """
    if t <= 0 or t >= 1:
        return float(t)
    d = d if d > 0 else 1.0
    p = _elastic_period(d, ELASTIC_PERIOD_FACTOR)
    s = p / 4
    t -= 1
    return -(2 ** (10 * t)) * math.sin((t * d - s) * (2 * math.pi) / p)


def elastic_out(t: float, d: float = 1.0) -> float:
    """Spring overshooting the target and ringing down (exceeds 1.0)."""
    if t <= 0 or t >= 1:
        return float(t)
    d = d if d > 0 else 1.0
    p = _elastic_period(d, ELASTIC_PERIOD_FACTOR)
    s = p / 4
    return 2 ** (-10 * t) * math.sin((t * d - s) * (2 * math.pi) / p) + 1


def elastic_in_out(t: float, d: float = 1.0) -> float:
    """elastic_in to the midpoint, then elastic_out, with a 1.5x longer period."""
    if t <= 0 or t >= 1:
        return float(t)
    d = d if d > 0 else 1.0
    p = _elastic_period(d, ELASTIC_PERIOD_FACTOR * 1.5)
    s = p / 4
    t = t * 2 - 1
    if t < 0:
        return -0.5 * (2 ** (10 * t)) * math.sin((t * d - s) * (2 * math.pi) / p)
    return 0.5 * (2 ** (-10 * t)) * math.sin((t * d - s) * (2 * math.pi) / p) + 1


# Back
def back_in(t: float) -> float:
    """Pull back below 0 before accelerating."""
    c = BACK_OVERSHOOT
    return t * t * ((c + 1) * t - c)


def back_out(t: float) -> float:
    """Overshoot past 1 before settling."""
    c = BACK_OVERSHOOT
    t -= 1
    return t * t * ((c + 1) * t + c) + 1


def back_in_out(t: float) -> float:
    """Pull back, then overshoot."""
    c = BACK_OVERSHOOT * 1.525
    if t < 0.5:
        return (2 * t) ** 2 * ((c + 1) * 2 * t - c) / 2
    t = t * 2 - 2
    return (t * t * ((c + 1) * t + c) + 2) / 2


# Bounce
def bounce_out(t: float) -> float:
    """Ball dropped onto the target, four diminishing bounces."""
    n1 = 7.5625
    d1 = 2.75

    if t >= 1:
        return 1.0
    if t < 1 / d1:
        return n1 * t * t
    if t < 2 / d1:
        t -= 1.5 / d1
        return n1 * t * t + 0.75
    if t < 2.5 / d1:
        t -= 2.25 / d1
        return n1 * t * t + 0.9375
    t -= 2.625 / d1
    return n1 * t * t + 0.984375


def bounce_in(t: float) -> float:
    """bounce_out played backwards."""
    if t <= 0:
        return 0.0
    return 1 - bounce_out(1 - t)


def bounce_in_out(t: float) -> float:
    """bounce_in to the midpoint, then bounce_out."""
    if t < 0.5:
        return (1 - bounce_out(1 - 2 * t)) / 2
    return (1 + bounce_out(2 * t - 1)) / 2


# Easing function lookup table
EASING_FUNCTIONS: Dict[EasingCurve, Callable[..., float]] = {
    EasingCurve.LINEAR: linear,

    EasingCurve.QUAD_IN: quad_in,
    EasingCurve.QUAD_OUT: quad_out,
    EasingCurve.QUAD_IN_OUT: quad_in_out,

    EasingCurve.CUBIC_IN: cubic_in,
    EasingCurve.CUBIC_OUT: cubic_out,
    EasingCurve.CUBIC_IN_OUT: cubic_in_out,

    EasingCurve.QUART_IN: quart_in,
    EasingCurve.QUART_OUT: quart_out,
    EasingCurve.QUART_IN_OUT: quart_in_out,

    EasingCurve.QUINT_IN: quint_in,
    EasingCurve.QUINT_OUT: quint_out,
    EasingCurve.QUINT_IN_OUT: quint_in_out,

    EasingCurve.SINE_IN: sine_in,
    EasingCurve.SINE_OUT: sine_out,
    EasingCurve.SINE_IN_OUT: sine_in_out,

    EasingCurve.EXPO_IN: expo_in,
    EasingCurve.EXPO_OUT: expo_out,
    EasingCurve.EXPO_IN_OUT: expo_in_out,

    EasingCurve.CIRC_IN: circ_in,
    EasingCurve.CIRC_OUT: circ_out,
    EasingCurve.CIRC_IN_OUT: circ_in_out,

    EasingCurve.ELASTIC_IN: elastic_in,
    EasingCurve.ELASTIC_OUT: elastic_out,
    EasingCurve.ELASTIC_IN_OUT: elastic_in_out,

    EasingCurve.BACK_IN: back_in,
    EasingCurve.BACK_OUT: back_out,
    EasingCurve.BACK_IN_OUT: back_in_out,

    EasingCurve.BOUNCE_IN: bounce_in,
    EasingCurve.BOUNCE_OUT: bounce_out,
    EasingCurve.BOUNCE_IN_OUT: bounce_in_out,
}

DURATION_DEPENDENT_CURVES: FrozenSet[EasingCurve] = frozenset({
    EasingCurve.ELASTIC_IN,
    EasingCurve.ELASTIC_OUT,
    EasingCurve.ELASTIC_IN_OUT,
})


def get_easing_function(curve: EasingCurve) -> Callable[..., float]:
    """
    Get the normalized easing function for a curve.

    Functions in DURATION_DEPENDENT_CURVES take (t, d); all others take (t).

    Raises:
        ValueError: If curve is not found
    """
    if curve not in EASING_FUNCTIONS:
        raise ValueError(f"Unknown easing curve: {curve}")

    return EASING_FUNCTIONS[curve]


def ease(t: float, curve: EasingCurve, b: float = 0.0, c: float = 1.0,
         d: float = 1.0) -> float:
    """
    Evaluate an easing curve.

    Args:
        t: Time ratio, clamped to [0.0, 1.0]
        curve: Easing curve to apply
        b: Start value
        c: Change in value (end - start)
        d: Duration in seconds (elastic curves only)

    Returns:
        b + c * f(t)
    """
    t = max(0.0, min(1.0, t))

    easing_fn = get_easing_function(curve)
    if curve in DURATION_DEPENDENT_CURVES:
        progress = easing_fn(t, d)
    else:
        progress = easing_fn(t)
    return b + c * progress
