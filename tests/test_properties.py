"""Tests for the property resolver."""
import pytest
from PySide6.QtCore import QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor, QTransform

from keyframekit.animation import (
    AnimatableProperty, FrameSamplingError, ObjectStateSnapshot, TypeMismatchError,
    UnsupportedPropertyError, ValueKind,
)
from keyframekit.animation.properties import (
    PROPERTY_KINDS, PROPERTY_SPECS, UNSUPPORTED_PROPERTIES, is_supported, resolve_property,
)

P = AnimatableProperty


EXPECTED_KEY_PATHS = {
    P.ORIGIN_X: "position.x",
    P.ORIGIN_Y: "position.y",
    P.ORIGIN: "position",
    P.SIZE_WIDTH: "bounds.size.width",
    P.SIZE_HEIGHT: "bounds.size.height",
    P.SIZE: "bounds.size",
    P.CENTER_X: "position.x",
    P.CENTER_Y: "position.y",
    P.CENTER: "position",
    P.POSITION_X: "position.x",
    P.POSITION_Y: "position.y",
    P.POSITION: "position",
    P.BACKGROUND_COLOR: "backgroundColor",
    P.BORDER_COLOR: "borderColor",
    P.BORDER_WIDTH: "borderWidth",
    P.CORNER_RADIUS: "cornerRadius",
    P.OPACITY: "opacity",
    P.ALPHA: "opacity",
    P.SHADOW_COLOR: "shadowColor",
    P.SHADOW_OFFSET: "shadowOffset",
    P.SHADOW_OPACITY: "shadowOpacity",
    P.SHADOW_RADIUS: "shadowRadius",
    P.SCALE_X: "transform.scale.x",
    P.SCALE_Y: "transform.scale.y",
}


@pytest.fixture
def snapshot():
    return ObjectStateSnapshot(position=QPointF(50.0, 50.0), size=QSizeF(100.0, 100.0))


@pytest.mark.parametrize("prop, key_path", sorted(EXPECTED_KEY_PATHS.items(), key=lambda kv: kv[0].value))
def test_supported_key_paths(prop, key_path):
    assert resolve_property(prop).key_path == key_path


def test_every_property_is_classified():
    """Each variant is supported, FRAME, or explicitly unsupported, never two."""
    for prop in AnimatableProperty:
        buckets = [prop in PROPERTY_SPECS, prop is P.FRAME, prop in UNSUPPORTED_PROPERTIES]
        assert sum(buckets) == 1, prop
        assert prop in PROPERTY_KINDS, prop


def test_translation_declared_as_point():
    assert PROPERTY_KINDS[P.TRANSLATION] is ValueKind.POINT
    assert PROPERTY_KINDS[P.TRANSLATION_X] is ValueKind.SCALAR


@pytest.mark.parametrize("prop", sorted(UNSUPPORTED_PROPERTIES, key=lambda p: p.value))
def test_unsupported_properties_fail_fast(prop):
    with pytest.raises(UnsupportedPropertyError) as exc_info:
        resolve_property(prop)
    assert exc_info.value.code == "UNSUPPORTED_PROPERTY"
    assert exc_info.value.property is prop
    assert not is_supported(prop)


def test_frame_cannot_be_sampled_directly():
    with pytest.raises(FrameSamplingError):
        resolve_property(P.FRAME)
    assert is_supported(P.FRAME)


class TestResolveGeometry:

    def test_origin_animates_centre_position(self, snapshot):
        start, end = resolve_property(P.ORIGIN).resolve(snapshot, QPointF(10.0, 20.0))

        assert start == QPointF(50.0, 50.0)
        assert end == QPointF(60.0, 70.0)
        assert snapshot.origin == QPointF(10.0, 20.0)

    def test_origin_y_uses_height(self):
        snapshot = ObjectStateSnapshot(position=QPointF(0.0, 0.0), size=QSizeF(100.0, 40.0))
        start, end = resolve_property(P.ORIGIN_Y).resolve(snapshot, 0.0)

        assert start == 0.0
        assert end == 20.0

    def test_center_animates_position_directly(self, snapshot):
        start, end = resolve_property(P.CENTER).resolve(snapshot, QPointF(1.0, 2.0))
        assert (start, end) == (QPointF(50.0, 50.0), QPointF(1.0, 2.0))
        assert snapshot.position == QPointF(1.0, 2.0)

    def test_size_width(self, snapshot):
        start, end = resolve_property(P.SIZE_WIDTH).resolve(snapshot, 30)
        assert (start, end) == (100.0, 30.0)
        assert snapshot.size == QSizeF(30.0, 100.0)

    def test_chained_resolves_start_from_previous_end(self, snapshot):
        resolve_property(P.POSITION_X).resolve(snapshot, 10.0)
        start, end = resolve_property(P.POSITION_X).resolve(snapshot, 20.0)
        assert (start, end) == (10.0, 20.0)


class TestResolveAppearance:

    def test_unset_colour_starts_transparent(self):
        snapshot = ObjectStateSnapshot()
        start, end = resolve_property(P.BACKGROUND_COLOR).resolve(snapshot, QColor(255, 0, 0))

        assert start == QColor(0, 0, 0, 0)
        assert end == QColor(255, 0, 0)
        assert snapshot.background_color == QColor(255, 0, 0)

    def test_colour_end_is_copied(self):
        snapshot = ObjectStateSnapshot()
        colour = QColor(10, 20, 30)
        resolve_property(P.BORDER_COLOR).resolve(snapshot, colour)
        colour.setRed(99)
        assert snapshot.border_color == QColor(10, 20, 30)

    def test_alpha_and_opacity_share_state(self):
        snapshot = ObjectStateSnapshot(opacity=1.0)
        resolve_property(P.ALPHA).resolve(snapshot, 0.5)
        start, _ = resolve_property(P.OPACITY).resolve(snapshot, 0.0)
        assert start == 0.5

    def test_scale_reads_transform(self):
        snapshot = ObjectStateSnapshot(transform=QTransform.fromScale(2.0, 3.0))
        start, end = resolve_property(P.SCALE_Y).resolve(snapshot, 1.5)
        assert (start, end) == (3.0, 1.5)
        assert snapshot.transform.m11() == 2.0


class TestTypeValidation:

    @pytest.mark.parametrize("prop, value", [
        (P.OPACITY, "1.0"),
        (P.OPACITY, True),
        (P.OPACITY, None),
        (P.POSITION, (1.0, 2.0)),
        (P.ORIGIN, QSizeF(1.0, 2.0)),
        (P.SIZE, QPointF(1.0, 2.0)),
        (P.BACKGROUND_COLOR, "red"),
        (P.SHADOW_OFFSET, QRectF()),
    ])
    def test_mismatched_end_value(self, snapshot, prop, value):
        before = snapshot.copy()
        with pytest.raises(TypeMismatchError) as exc_info:
            resolve_property(prop).resolve(snapshot, value)

        assert exc_info.value.code == "TYPE_MISMATCH"
        assert isinstance(exc_info.value, TypeError)
        # Snapshot untouched
        assert snapshot.position == before.position
        assert snapshot.opacity == before.opacity

    def test_int_is_accepted_for_scalars(self, snapshot):
        _, end = resolve_property(P.CORNER_RADIUS).resolve(snapshot, 8)
        assert end == 8.0
        assert isinstance(end, float)

    @pytest.mark.parametrize("prop", list(PROPERTY_SPECS))
    def test_spec_kind_matches_declared_kind(self, prop):
        assert PROPERTY_SPECS[prop].kind is PROPERTY_KINDS[prop]
        assert PROPERTY_SPECS[prop].kind is not ValueKind.PATH
