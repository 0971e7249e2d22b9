"""
Errors raised while building animations.

Every error here is raised during composition, before anything is handed to
a backend, so a caller never observes a half-submitted batch.
"""
from typing import Any, Optional


def _property_name(prop: Any) -> str:
    return getattr(prop, "name", str(prop))


def _type_names(expected: Any) -> str:
    if isinstance(expected, tuple):
        return " | ".join(t.__name__ for t in expected)
    return getattr(expected, "__name__", str(expected))


class AnimationError(Exception):
    """Base class for animation construction errors."""

    def __init__(self, code: str, message: str, details: Optional[dict] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnsupportedPropertyError(AnimationError):
    """Property has no backend key path or interpolation rule."""

    def __init__(self, prop: Any):
        super().__init__(
            code="UNSUPPORTED_PROPERTY",
            message=f"Animating '{_property_name(prop)}' is not supported",
            details={"property": _property_name(prop)},
        )
        self.property = prop


class GroupDurationMismatchError(AnimationError, ValueError):
    """Members of a simultaneous group disagree on delay + duration."""

    def __init__(self, expected: float, actual: float, index: int):
        super().__init__(
            code="GROUP_DURATION_MISMATCH",
            message=(
                "All animations in a group must share delay + duration "
                f"(expected {expected}, member {index} has {actual})"
            ),
            details={"expected": expected, "actual": actual, "index": index},
        )


class TypeMismatchError(AnimationError, TypeError):
    """End value does not match the property's value type."""

    def __init__(self, prop: Any, expected: Any, value: Any):
        super().__init__(
            code="TYPE_MISMATCH",
            message=(
                f"'{_property_name(prop)}' expects {_type_names(expected)}, "
                f"got {type(value).__name__}"
            ),
            details={
                "property": _property_name(prop),
                "expected": _type_names(expected),
                "actual": type(value).__name__,
            },
        )


class FrameSamplingError(AnimationError):
    """FRAME was sampled directly instead of through origin + size."""

    def __init__(self):
        super().__init__(
            code="FRAME_SAMPLING",
            message=(
                "Keyframes for 'FRAME' cannot be sampled directly; "
                "animate ORIGIN and SIZE and group them instead"
            ),
        )


class AnimationInFlightError(AnimationError):
    """A target is still owned by an unfinished batch (overlap policy 'reject')."""

    def __init__(self, target: Any, batch_id: str):
        super().__init__(
            code="ANIMATION_IN_FLIGHT",
            message=f"{type(target).__name__} is still animating in batch {batch_id}",
            details={"batch_id": batch_id},
        )
        self.batch_id = batch_id
