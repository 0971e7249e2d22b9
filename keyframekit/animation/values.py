"""
Value kinds: runtime validation and scalar decomposition.

Keyframe sampling works on flat float vectors. Each value kind knows how to
split a Qt value into its scalar components and how to rebuild one from a
row of sampled components.
"""
from typing import Any, Dict, Tuple

import numpy as np
from PySide6.QtCore import QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor, QTransform

from keyframekit.animation.errors import TypeMismatchError
from keyframekit.animation.types import ValueKind


EXPECTED_TYPES: Dict[ValueKind, Any] = {
    ValueKind.SCALAR: (int, float),
    ValueKind.POINT: QPointF,
    ValueKind.SIZE: QSizeF,
    ValueKind.RECT: QRectF,
    ValueKind.COLOR: QColor,
    ValueKind.TRANSFORM: QTransform,
    ValueKind.PATH: object,
}


def validate_value(prop: Any, kind: ValueKind, value: Any) -> Any:
    """
    Check an end value against the property's value kind.

    Scalars accept int and float (bool is rejected even though it subclasses
    int). Everything else must be the exact Qt value type; nothing is coerced.

    Returns:
        The value, with scalars normalized to float

    Raises:
        TypeMismatchError: If the value has the wrong type
    """
    expected = EXPECTED_TYPES[kind]
    if kind is ValueKind.SCALAR:
        if isinstance(value, bool) or not isinstance(value, expected):
            raise TypeMismatchError(prop, expected, value)
        return float(value)
    if value is None or not isinstance(value, expected):
        raise TypeMismatchError(prop, expected, value)
    return value


def copy_value(value: Any) -> Any:
    """Return an independent copy of a Qt value type (other values as-is)."""
    if isinstance(value, QPointF):
        return QPointF(value)
    if isinstance(value, QSizeF):
        return QSizeF(value)
    if isinstance(value, QRectF):
        return QRectF(value)
    if isinstance(value, QColor):
        return QColor(value)
    if isinstance(value, QTransform):
        return QTransform(value)
    return value


def to_components(kind: ValueKind, value: Any) -> np.ndarray:
    """Flatten a value into a float64 vector of its scalar components."""
    if kind is ValueKind.SCALAR:
        comps: Tuple[float, ...] = (float(value),)
    elif kind is ValueKind.POINT:
        comps = (value.x(), value.y())
    elif kind is ValueKind.SIZE:
        comps = (value.width(), value.height())
    elif kind is ValueKind.RECT:
        comps = (value.x(), value.y(), value.width(), value.height())
    elif kind is ValueKind.COLOR:
        comps = tuple(value.getRgbF())
    elif kind is ValueKind.TRANSFORM:
        comps = (
            value.m11(), value.m12(), value.m13(),
            value.m21(), value.m22(), value.m23(),
            value.m31(), value.m32(), value.m33(),
        )
    else:
        raise ValueError(f"Values of kind {kind.name} cannot be interpolated")
    return np.asarray(comps, dtype=np.float64)


def from_components(kind: ValueKind, comps: np.ndarray) -> Any:
    """Rebuild a value from one row of sampled components."""
    c = [float(x) for x in comps]
    if kind is ValueKind.SCALAR:
        return c[0]
    if kind is ValueKind.POINT:
        return QPointF(c[0], c[1])
    if kind is ValueKind.SIZE:
        return QSizeF(c[0], c[1])
    if kind is ValueKind.RECT:
        return QRectF(c[0], c[1], c[2], c[3])
    if kind is ValueKind.COLOR:
        # Overshooting curves can push channels outside the valid range.
        r, g, b, a = (min(1.0, max(0.0, x)) for x in c)
        return QColor.fromRgbF(r, g, b, a)
    if kind is ValueKind.TRANSFORM:
        return QTransform(*c)
    raise ValueError(f"Values of kind {kind.name} cannot be interpolated")
