"""
Reference animatable object.

Layer carries every attribute the snapshot reads and writes. Any object with
the same attribute names can be animated; Layer is what the engine ships for
tests and for headless use.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from PySide6.QtCore import QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor, QTransform


@dataclass(eq=False)
class Layer:
    """Plain layer model: geometry around a centre position plus appearance."""
    position: QPointF = field(default_factory=QPointF)     # Centre point
    size: QSizeF = field(default_factory=lambda: QSizeF(0.0, 0.0))
    background_color: Optional[QColor] = None
    border_color: Optional[QColor] = None
    border_width: float = 0.0
    corner_radius: float = 0.0
    opacity: float = 1.0
    shadow_color: Optional[QColor] = None
    shadow_offset: QSizeF = field(default_factory=lambda: QSizeF(0.0, -3.0))
    shadow_opacity: float = 0.0
    shadow_path: Optional[Any] = None                      # e.g. QPainterPath
    shadow_radius: float = 3.0
    transform: QTransform = field(default_factory=QTransform)
    name: str = ""

    @property
    def frame(self) -> QRectF:
        """Bounding rectangle (top-left origin plus size)."""
        w, h = self.size.width(), self.size.height()
        return QRectF(self.position.x() - w / 2, self.position.y() - h / 2, w, h)

    @frame.setter
    def frame(self, rect: QRectF) -> None:
        self.size = QSizeF(rect.size())
        self.position = QPointF(rect.center())

    def __repr__(self) -> str:
        label = self.name or hex(id(self))
        return f"Layer({label})"
