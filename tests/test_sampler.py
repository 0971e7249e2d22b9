"""Tests for keyframe generation."""
import numpy as np
import pytest
from PySide6.QtCore import QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor

from keyframekit.animation import (
    AnimatableProperty, AnimationDescriptor, AnimationGroup, EasingCurve,
    KeyframeAnimation, ObjectStateSnapshot, TypeMismatchError, ValueKind,
)
from keyframekit.animation.properties import PROPERTY_SPECS
from keyframekit.animation.sampler import (
    build_animation, build_keyframe_animation, frame_count, interpolate,
    sample_ratios, sample_values,
)

P = AnimatableProperty

# Snapshot attribute holding each property's current end value
CURRENT_VALUE_ATTR = {
    P.ORIGIN_X: "origin_x",
    P.ORIGIN_Y: "origin_y",
    P.ORIGIN: "origin",
    P.SIZE_WIDTH: "width",
    P.SIZE_HEIGHT: "height",
    P.SIZE: "size",
    P.CENTER_X: "center_x",
    P.CENTER_Y: "center_y",
    P.CENTER: "center",
    P.POSITION_X: "position_x",
    P.POSITION_Y: "position_y",
    P.POSITION: "position",
    P.BACKGROUND_COLOR: "background_color",
    P.BORDER_COLOR: "border_color",
    P.BORDER_WIDTH: "border_width",
    P.CORNER_RADIUS: "corner_radius",
    P.OPACITY: "opacity",
    P.ALPHA: "alpha",
    P.SHADOW_COLOR: "shadow_color",
    P.SHADOW_OFFSET: "shadow_offset",
    P.SHADOW_OPACITY: "shadow_opacity",
    P.SHADOW_RADIUS: "shadow_radius",
    P.SCALE_X: "scale_x",
    P.SCALE_Y: "scale_y",
}


class TestFrameCount:

    @pytest.mark.parametrize("duration, expected", [
        (0.0, 1),
        (1.0, 61),
        (0.5, 31),
        (2.5, 151),
        (0.01, 1),
    ])
    def test_floor_60d_plus_one(self, duration, expected):
        assert frame_count(duration) == expected
        assert len(sample_ratios(duration)) == expected

    def test_zero_duration_single_ratio_at_start(self):
        ratios = sample_ratios(0.0)
        assert ratios.tolist() == [0.0]

    def test_ratios_span_unit_interval(self):
        ratios = sample_ratios(1.0)
        assert ratios[0] == 0.0
        assert ratios[-1] == pytest.approx(1.0)
        assert np.all(np.diff(ratios) > 0)


def test_interpolate_is_vectorized():
    progress = np.array([0.0, 0.5, 1.0])
    out = interpolate(np.array([0.0, 10.0]), np.array([10.0, 30.0]), progress)
    assert out.shape == (3, 2)
    assert out.tolist() == [[0.0, 10.0], [5.0, 20.0], [10.0, 30.0]]


class TestSampleValues:

    def test_linear_scalar(self):
        values, samples = sample_values(ValueKind.SCALAR, 0.0, 1.0, 1.0, EasingCurve.LINEAR)
        assert len(values) == 61
        assert values[0] == 0.0
        assert values[30] == pytest.approx(0.5)
        assert values[-1] == pytest.approx(1.0)
        assert samples.shape == (61, 1)

    def test_point_components_share_one_progress(self):
        values, _ = sample_values(ValueKind.POINT, QPointF(0.0, 0.0), QPointF(10.0, 100.0),
                                  1.0, EasingCurve.QUAD_IN)
        mid = values[30]
        assert mid.x() == pytest.approx(2.5)
        assert mid.y() == pytest.approx(25.0)

    def test_colour_channels_interpolate_independently(self):
        values, samples = sample_values(ValueKind.COLOR, QColor(255, 0, 0), QColor(0, 0, 255),
                                        1.0, EasingCurve.LINEAR)
        r, g, b, a = samples[30]
        assert (r, g, b, a) == pytest.approx((0.5, 0.0, 0.5, 1.0))
        assert isinstance(values[30], QColor)

    def test_overshoot_keeps_colour_valid(self):
        values, _ = sample_values(ValueKind.COLOR, QColor(0, 0, 0), QColor(255, 255, 255),
                                  1.0, EasingCurve.BACK_OUT)
        assert all(v.isValid() for v in values)

    def test_elastic_overshoots_scalar_end(self):
        values, _ = sample_values(ValueKind.SCALAR, 0.0, 100.0, 1.0, EasingCurve.ELASTIC_OUT)
        assert max(values) > 100.0
        assert values[-1] == pytest.approx(100.0)

    def test_zero_duration_yields_start(self):
        values, _ = sample_values(ValueKind.SIZE, QSizeF(1.0, 1.0), QSizeF(5.0, 5.0),
                                  0.0, EasingCurve.CUBIC_OUT)
        assert values == [QSizeF(1.0, 1.0)]


@pytest.mark.parametrize("curve", list(EasingCurve))
@pytest.mark.parametrize("prop", sorted(PROPERTY_SPECS, key=lambda p: p.value))
def test_identical_endpoints_give_constant_sequence(layer, prop, curve):
    """Animating to the current value is a constant sequence for any curve."""
    snapshot = ObjectStateSnapshot.capture(layer)
    current = getattr(snapshot, CURRENT_VALUE_ATTR[prop])
    desc = AnimationDescriptor(layer, prop, current, duration=0.5, easing=curve)

    anim = build_keyframe_animation(desc, snapshot)

    assert len(anim.values) == 31
    assert np.all(anim.samples == anim.samples[0])
    assert all(v == anim.values[0] for v in anim.values)


class TestBuildKeyframeAnimation:

    def test_timing_and_policy(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.OPACITY, 0.0, duration=1.0, delay=0.25)

        anim = build_keyframe_animation(desc, snapshot)

        assert isinstance(anim, KeyframeAnimation)
        assert anim.key_path == "opacity"
        assert anim.property is P.OPACITY
        assert anim.begin_time == 0.25
        assert anim.duration == 1.0
        assert anim.fill_forward is True
        assert anim.removed_on_completion is False
        assert len(anim.values) == 61
        assert snapshot.opacity == 0.0

    def test_without_delay(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.OPACITY, 0.0, duration=1.0, delay=0.25)
        assert build_keyframe_animation(desc, snapshot, set_delay=False).begin_time == 0.0

    def test_zero_duration_single_keyframe(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.CORNER_RADIUS, 12.0, duration=0.0)

        anim = build_keyframe_animation(desc, snapshot)

        assert anim.values == [4.0]
        assert snapshot.corner_radius == 12.0


class TestFrameDecomposition:

    def test_frame_becomes_origin_and_size_group(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.FRAME, QRectF(10.0, 20.0, 30.0, 40.0),
                                   duration=1.0, delay=0.5)

        group = build_animation(desc, snapshot)

        assert isinstance(group, AnimationGroup)
        assert group.begin_time == 0.5
        assert group.duration == 1.0
        origin, size = group.animations
        assert origin.key_path == "position"
        assert size.key_path == "bounds.size"
        assert origin.begin_time == 0.0 and size.begin_time == 0.0
        assert origin.values[-1] == QPointF(25.0, 40.0)
        assert size.values[-1] == QSizeF(30.0, 40.0)
        assert snapshot.frame == QRectF(10.0, 20.0, 30.0, 40.0)

    def test_frame_requires_rect(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.FRAME, QPointF(1.0, 1.0), duration=1.0)
        with pytest.raises(TypeMismatchError):
            build_animation(desc, snapshot)

    def test_non_frame_passes_through(self, layer):
        snapshot = ObjectStateSnapshot.capture(layer)
        desc = AnimationDescriptor(layer, P.SHADOW_RADIUS, 8.0, duration=0.5)
        assert isinstance(build_animation(desc, snapshot), KeyframeAnimation)


class TestDescriptorValidation:

    @pytest.mark.parametrize("kwargs", [
        {"duration": -1.0},
        {"duration": 1.0, "delay": -0.1},
        {"duration": 1.0, "easing": "linear"},
    ])
    def test_invalid_descriptor(self, layer, kwargs):
        with pytest.raises(ValueError):
            AnimationDescriptor(layer, P.OPACITY, 0.5, **kwargs)

    def test_property_must_be_enum(self, layer):
        with pytest.raises(ValueError):
            AnimationDescriptor(layer, "opacity", 0.5, duration=1.0)

    def test_descriptor_is_immutable(self, layer):
        desc = AnimationDescriptor(layer, P.OPACITY, 0.5, duration=1.0)
        with pytest.raises(AttributeError):
            desc.duration = 2.0
