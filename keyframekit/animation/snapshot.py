"""
Per-object visual state used while composing a batch.

The composer keeps one ObjectStateSnapshot per target for the duration of a
chain/animate call. Each sampled step reads its start value from the snapshot
and advances it to the step's end value, so the next step on the same object
starts where the previous one left off. The real object is only written when
the batch finalizes.

Geometry is stored as a centre position plus a size. Origin, frame and centre
are derived from those and write back through the same relationship.
"""
from typing import Any, Optional

from PySide6.QtCore import QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor, QTransform

from keyframekit.animation.values import copy_value
from keyframekit.logging.logger import get_logger, is_verbose_logging

logger = get_logger(__name__)


_COLOR_FIELDS = ("background_color", "border_color", "shadow_color")
_SCALAR_FIELDS = {
    "border_width": 0.0,
    "corner_radius": 0.0,
    "opacity": 1.0,
    "shadow_opacity": 0.0,
    "shadow_radius": 3.0,
}


def _replace_transform(t: QTransform, m11: Optional[float] = None,
                       m22: Optional[float] = None) -> QTransform:
    return QTransform(
        t.m11() if m11 is None else m11, t.m12(), t.m13(),
        t.m21(), t.m22() if m22 is None else m22, t.m23(),
        t.m31(), t.m32(), t.m33(),
    )


class ObjectStateSnapshot:
    """Mutable copy of an object's animatable attributes."""

    def __init__(
        self,
        position: Optional[QPointF] = None,
        size: Optional[QSizeF] = None,
        background_color: Optional[QColor] = None,
        border_color: Optional[QColor] = None,
        border_width: float = 0.0,
        corner_radius: float = 0.0,
        opacity: float = 1.0,
        shadow_color: Optional[QColor] = None,
        shadow_offset: Optional[QSizeF] = None,
        shadow_opacity: float = 0.0,
        shadow_path: Any = None,
        shadow_radius: float = 3.0,
        transform: Optional[QTransform] = None,
    ):
        self.position = QPointF(position) if position is not None else QPointF()
        self.size = QSizeF(size) if size is not None else QSizeF(0.0, 0.0)
        self.background_color = copy_value(background_color)
        self.border_color = copy_value(border_color)
        self.border_width = float(border_width)
        self.corner_radius = float(corner_radius)
        self.opacity = float(opacity)
        self.shadow_color = copy_value(shadow_color)
        self.shadow_offset = (
            QSizeF(shadow_offset) if shadow_offset is not None else QSizeF(0.0, -3.0)
        )
        self.shadow_opacity = float(shadow_opacity)
        self.shadow_path = shadow_path
        self.shadow_radius = float(shadow_radius)
        self.transform = QTransform(transform) if transform is not None else QTransform()

    @classmethod
    def capture(cls, obj: Any) -> "ObjectStateSnapshot":
        """
        Read an object's current attributes.

        Missing colour and path attributes are left as None; missing numeric
        attributes fall back to neutral values (opacity 1, identity transform).
        """
        kwargs = {
            "position": getattr(obj, "position", None),
            "size": getattr(obj, "size", None),
            "shadow_offset": getattr(obj, "shadow_offset", None),
            "shadow_path": getattr(obj, "shadow_path", None),
            "transform": getattr(obj, "transform", None),
        }
        for name in _COLOR_FIELDS:
            kwargs[name] = getattr(obj, name, None)
        for name, default in _SCALAR_FIELDS.items():
            value = getattr(obj, name, None)
            kwargs[name] = default if value is None else value

        snapshot = cls(**kwargs)
        if is_verbose_logging():
            logger.debug("Captured snapshot for %r: %r", obj, snapshot)
        return snapshot

    def apply_to(self, obj: Any) -> None:
        """Write the snapshot state onto the real object."""
        obj.position = QPointF(self.position)
        obj.size = QSizeF(self.size)
        for name in _COLOR_FIELDS:
            value = getattr(self, name)
            if value is not None or hasattr(obj, name):
                setattr(obj, name, copy_value(value))
        for name in _SCALAR_FIELDS:
            setattr(obj, name, getattr(self, name))
        obj.shadow_offset = QSizeF(self.shadow_offset)
        if self.shadow_path is not None or hasattr(obj, "shadow_path"):
            obj.shadow_path = self.shadow_path
        obj.transform = QTransform(self.transform)

    def copy(self) -> "ObjectStateSnapshot":
        """Return an independent snapshot with the same state."""
        return ObjectStateSnapshot(
            position=self.position,
            size=self.size,
            background_color=self.background_color,
            border_color=self.border_color,
            border_width=self.border_width,
            corner_radius=self.corner_radius,
            opacity=self.opacity,
            shadow_color=self.shadow_color,
            shadow_offset=self.shadow_offset,
            shadow_opacity=self.shadow_opacity,
            shadow_path=self.shadow_path,
            shadow_radius=self.shadow_radius,
            transform=self.transform,
        )

    # Position axes

    @property
    def position_x(self) -> float:
        return self.position.x()

    @position_x.setter
    def position_x(self, value: float) -> None:
        self.position = QPointF(value, self.position.y())

    @property
    def position_y(self) -> float:
        return self.position.y()

    @position_y.setter
    def position_y(self, value: float) -> None:
        self.position = QPointF(self.position.x(), value)

    # Center (alias of position)

    @property
    def center(self) -> QPointF:
        return QPointF(self.position)

    @center.setter
    def center(self, value: QPointF) -> None:
        self.position = QPointF(value)

    @property
    def center_x(self) -> float:
        return self.position_x

    @center_x.setter
    def center_x(self, value: float) -> None:
        self.position_x = value

    @property
    def center_y(self) -> float:
        return self.position_y

    @center_y.setter
    def center_y(self, value: float) -> None:
        self.position_y = value

    # Origin: position - size / 2

    @property
    def origin(self) -> QPointF:
        return QPointF(self.origin_x, self.origin_y)

    @origin.setter
    def origin(self, value: QPointF) -> None:
        self.position = QPointF(
            value.x() + self.size.width() / 2,
            value.y() + self.size.height() / 2,
        )

    @property
    def origin_x(self) -> float:
        return self.position.x() - self.size.width() / 2

    @origin_x.setter
    def origin_x(self, value: float) -> None:
        self.position_x = value + self.size.width() / 2

    @property
    def origin_y(self) -> float:
        return self.position.y() - self.size.height() / 2

    @origin_y.setter
    def origin_y(self, value: float) -> None:
        self.position_y = value + self.size.height() / 2

    # Size axes

    @property
    def width(self) -> float:
        return self.size.width()

    @width.setter
    def width(self, value: float) -> None:
        self.size = QSizeF(value, self.size.height())

    @property
    def height(self) -> float:
        return self.size.height()

    @height.setter
    def height(self, value: float) -> None:
        self.size = QSizeF(self.size.width(), value)

    # Frame: origin + size

    @property
    def frame(self) -> QRectF:
        return QRectF(self.origin, self.size)

    @frame.setter
    def frame(self, rect: QRectF) -> None:
        # Size first so the origin is centred with the new extent.
        self.size = QSizeF(rect.size())
        self.origin = rect.topLeft()

    # Alpha (alias of opacity)

    @property
    def alpha(self) -> float:
        return self.opacity

    @alpha.setter
    def alpha(self, value: float) -> None:
        self.opacity = float(value)

    # Scale components of the transform

    @property
    def scale_x(self) -> float:
        return self.transform.m11()

    @scale_x.setter
    def scale_x(self, value: float) -> None:
        self.transform = _replace_transform(self.transform, m11=value)

    @property
    def scale_y(self) -> float:
        return self.transform.m22()

    @scale_y.setter
    def scale_y(self, value: float) -> None:
        self.transform = _replace_transform(self.transform, m22=value)

    def __repr__(self) -> str:
        return (
            f"ObjectStateSnapshot(position=({self.position.x()}, {self.position.y()}), "
            f"size=({self.size.width()}, {self.size.height()}), opacity={self.opacity})"
        )
