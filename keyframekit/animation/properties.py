"""
Property resolver.

Maps each AnimatableProperty to the backend key path it drives, the value
kind its end value must have, and the rule that turns (snapshot, end value)
into the ordered (start, end) pair to interpolate. Resolving a property also
advances the snapshot to the end state.

Properties with no key path or no interpolation rule are listed in
UNSUPPORTED_PROPERTIES and fail with UnsupportedPropertyError.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Tuple

from PySide6.QtGui import QColor

from keyframekit.animation.errors import FrameSamplingError, UnsupportedPropertyError
from keyframekit.animation.snapshot import ObjectStateSnapshot
from keyframekit.animation.types import AnimatableProperty, ValueKind
from keyframekit.animation.values import copy_value, validate_value

P = AnimatableProperty

Resolver = Callable[[ObjectStateSnapshot, Any], Tuple[Any, Any]]


@dataclass(frozen=True)
class PropertySpec:
    """How one property is sampled and where its keyframes go."""
    property: AnimatableProperty
    key_path: str
    kind: ValueKind
    resolve: Resolver


def _unset_default(kind: ValueKind) -> Any:
    if kind is ValueKind.COLOR:
        return QColor(0, 0, 0, 0)
    return None


def _attribute_rule(prop: AnimatableProperty, kind: ValueKind,
                    read_attr: str, write_attr: str) -> Resolver:
    """
    Build a resolver over snapshot attributes.

    The start value is read from `read_attr`; the end value is written to
    `write_attr` and the interpolation end is read back from `read_attr`.
    When the two differ (origin writes, position is animated) the snapshot's
    own geometry rules convert between them.
    """
    def resolve(snapshot: ObjectStateSnapshot, end_value: Any) -> Tuple[Any, Any]:
        end_value = validate_value(prop, kind, end_value)
        start = getattr(snapshot, read_attr)
        if start is None:
            start = _unset_default(kind)
        start = copy_value(start)
        setattr(snapshot, write_attr, copy_value(end_value))
        end = copy_value(getattr(snapshot, read_attr))
        return start, end

    return resolve


def _spec(prop: AnimatableProperty, key_path: str, kind: ValueKind,
          read_attr: str, write_attr: str = "") -> PropertySpec:
    rule = _attribute_rule(prop, kind, read_attr, write_attr or read_attr)
    return PropertySpec(prop, key_path, kind, rule)


PROPERTY_SPECS: Dict[AnimatableProperty, PropertySpec] = {
    spec.property: spec for spec in (
        # Origin animates the centre position, offset by half the size
        _spec(P.ORIGIN_X, "position.x", ValueKind.SCALAR, "position_x", "origin_x"),
        _spec(P.ORIGIN_Y, "position.y", ValueKind.SCALAR, "position_y", "origin_y"),
        _spec(P.ORIGIN, "position", ValueKind.POINT, "position", "origin"),

        _spec(P.SIZE_WIDTH, "bounds.size.width", ValueKind.SCALAR, "width"),
        _spec(P.SIZE_HEIGHT, "bounds.size.height", ValueKind.SCALAR, "height"),
        _spec(P.SIZE, "bounds.size", ValueKind.SIZE, "size"),

        _spec(P.CENTER_X, "position.x", ValueKind.SCALAR, "position_x"),
        _spec(P.CENTER_Y, "position.y", ValueKind.SCALAR, "position_y"),
        _spec(P.CENTER, "position", ValueKind.POINT, "position"),
        _spec(P.POSITION_X, "position.x", ValueKind.SCALAR, "position_x"),
        _spec(P.POSITION_Y, "position.y", ValueKind.SCALAR, "position_y"),
        _spec(P.POSITION, "position", ValueKind.POINT, "position"),

        _spec(P.BACKGROUND_COLOR, "backgroundColor", ValueKind.COLOR, "background_color"),
        _spec(P.BORDER_COLOR, "borderColor", ValueKind.COLOR, "border_color"),
        _spec(P.BORDER_WIDTH, "borderWidth", ValueKind.SCALAR, "border_width"),
        _spec(P.CORNER_RADIUS, "cornerRadius", ValueKind.SCALAR, "corner_radius"),

        _spec(P.OPACITY, "opacity", ValueKind.SCALAR, "opacity"),
        _spec(P.ALPHA, "opacity", ValueKind.SCALAR, "alpha"),

        _spec(P.SHADOW_COLOR, "shadowColor", ValueKind.COLOR, "shadow_color"),
        _spec(P.SHADOW_OFFSET, "shadowOffset", ValueKind.SIZE, "shadow_offset"),
        _spec(P.SHADOW_OPACITY, "shadowOpacity", ValueKind.SCALAR, "shadow_opacity"),
        _spec(P.SHADOW_RADIUS, "shadowRadius", ValueKind.SCALAR, "shadow_radius"),

        _spec(P.SCALE_X, "transform.scale.x", ValueKind.SCALAR, "scale_x"),
        _spec(P.SCALE_Y, "transform.scale.y", ValueKind.SCALAR, "scale_y"),
    )
}

UNSUPPORTED_PROPERTIES: FrozenSet[AnimatableProperty] = frozenset({
    P.TRANSFORM,
    P.ROTATION_X, P.ROTATION_Y, P.ROTATION_Z, P.ROTATION,
    P.SCALE_Z, P.SCALE,
    P.TRANSLATION_X, P.TRANSLATION_Y, P.TRANSLATION_Z, P.TRANSLATION,
    P.SHADOW_PATH,
    P.Z_POSITION,
})

# Declared value kind of every variant, supported or not.
PROPERTY_KINDS: Dict[AnimatableProperty, ValueKind] = {
    **{prop: spec.kind for prop, spec in PROPERTY_SPECS.items()},
    P.FRAME: ValueKind.RECT,
    P.TRANSFORM: ValueKind.TRANSFORM,
    P.SHADOW_PATH: ValueKind.PATH,
    P.TRANSLATION: ValueKind.POINT,
    **{prop: ValueKind.SCALAR for prop in (
        P.ROTATION_X, P.ROTATION_Y, P.ROTATION_Z, P.ROTATION,
        P.SCALE_Z, P.SCALE,
        P.TRANSLATION_X, P.TRANSLATION_Y, P.TRANSLATION_Z,
        P.Z_POSITION,
    )},
}


def is_supported(prop: AnimatableProperty) -> bool:
    """True if `prop` can be animated (FRAME counts, via decomposition)."""
    return prop is P.FRAME or prop in PROPERTY_SPECS


def resolve_property(prop: AnimatableProperty) -> PropertySpec:
    """
    Look up the sampling rule for a property.

    Raises:
        FrameSamplingError: For FRAME, which is sampled as ORIGIN + SIZE
        UnsupportedPropertyError: For properties with no key path
    """
    if prop is P.FRAME:
        raise FrameSamplingError()
    spec = PROPERTY_SPECS.get(prop)
    if spec is None:
        raise UnsupportedPropertyError(prop)
    return spec
