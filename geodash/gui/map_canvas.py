"""Map canvas: QGraphicsView with an equirectangular viewport and the measurement overlay."""

from typing import Optional

from PySide6.QtCore import QPoint, QPointF, QRectF, QSize, Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QMouseEvent,
    QPainter,
    QPainterPath,
    QPen,
    QPolygonF,
    QWheelEvent,
)
from PySide6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsPolygonItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
    QGraphicsView,
)

from geodash.core.logger import get_logger
from geodash.measure.geometry import Point
from geodash.measure.input_adapter import InputAdapter
from geodash.measure.projector import BaseRenderer, ShapeStyle

logger = get_logger("gui.map_canvas")

# Pixel distance under which a press/release pair counts as a click rather than a drag
CLICK_SLOP_PX = 4
Z_SHAPE = 10
Z_PREVIEW = 20
Z_MARKER = 30
Z_LABEL = 40


def to_scene(point: Point) -> QPointF:
    """Scene x is longitude, scene y is negated latitude (north up)."""
    return QPointF(point[1], -point[0])


def from_scene(pos: QPointF) -> Point:
    return Point(-pos.y(), pos.x())


def pixels_per_degree(zoom: float) -> float:
    """Web-map style zoom level -> horizontal pixels per degree of longitude."""
    return 256.0 * (2.0 ** zoom) / 360.0


def _pen(style: ShapeStyle) -> QPen:
    pen = QPen(QColor(style.color))
    pen.setWidthF(float(style.weight))
    pen.setCosmetic(True)
    if style.dashed:
        pen.setStyle(Qt.PenStyle.DashLine)
    return pen


def _brush(color: Optional[str], opacity: float) -> QBrush:
    if opacity <= 0:
        return QBrush(Qt.BrushStyle.NoBrush)
    c = QColor(color)
    c.setAlphaF(max(0.0, min(1.0, opacity)))
    return QBrush(c)


class _LabelItem(QGraphicsRectItem):
    """Text box drawn in pixel units at a scene position (does not scale with zoom)."""

    PADDING = 4

    def __init__(self, text: str, floating: bool):
        super().__init__()
        self._floating = floating
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setPen(QPen(QColor("#94a3b8")))
        self.setBrush(QBrush(QColor(255, 255, 255, 230)))
        self.setZValue(Z_LABEL)
        self._text = QGraphicsSimpleTextItem(self)
        self.set_text(text)

    def text(self) -> str:
        return self._text.text()

    def set_text(self, text: str) -> None:
        self._text.setText(text)
        r = self._text.boundingRect()
        w = r.width() + 2 * self.PADDING
        h = r.height() + 2 * self.PADDING
        # floating: to the right of the cursor; anchored: centred on the anchor
        x = 10.0 if self._floating else -w / 2
        y = -h / 2
        self.setRect(QRectF(x, y, w, h))
        self._text.setPos(x + self.PADDING, y + self.PADDING)


class QtOverlayRenderer(BaseRenderer):
    """BaseRenderer backed by QGraphicsScene items. Handles are the items themselves."""

    def __init__(self, scene: QGraphicsScene):
        self.scene = scene

    def draw_polyline(self, points, style):
        item = QGraphicsPathItem(self._path(points))
        item.setPen(_pen(style))
        item.setZValue(Z_PREVIEW if style.dashed else Z_SHAPE)
        self.scene.addItem(item)
        return item

    def draw_polygon(self, points, style):
        item = QGraphicsPolygonItem(QPolygonF([to_scene(p) for p in points]))
        item.setPen(_pen(style))
        item.setBrush(_brush(style.fill_color or style.color, style.fill_opacity))
        item.setZValue(Z_PREVIEW if style.dashed else Z_SHAPE)
        self.scene.addItem(item)
        return item

    def draw_marker(self, point, style):
        r = float(style.radius)
        item = QGraphicsEllipseItem(-r, -r, 2 * r, 2 * r)
        item.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        pen = QPen(QColor(style.color))
        pen.setWidthF(float(style.weight))
        item.setPen(pen)
        item.setBrush(QBrush(QColor(style.fill_color or "#ffffff")))
        item.setPos(to_scene(point))
        item.setZValue(Z_MARKER)
        self.scene.addItem(item)
        return item

    def draw_label(self, point, text, anchored):
        item = _LabelItem(text, floating=not anchored)
        item.setPos(to_scene(point))
        self.scene.addItem(item)
        return item

    def update_shape(self, handle, points):
        if isinstance(handle, QGraphicsPolygonItem):
            handle.setPolygon(QPolygonF([to_scene(p) for p in points]))
        else:
            handle.setPath(self._path(points))

    def update_label(self, handle, text=None, point=None):
        if text is not None:
            handle.set_text(text)
        if point is not None:
            handle.setPos(to_scene(point))

    def remove(self, handle):
        scene = handle.scene()
        if scene is not None:
            scene.removeItem(handle)

    @staticmethod
    def _path(points) -> QPainterPath:
        path = QPainterPath()
        if points:
            path.moveTo(to_scene(points[0]))
            for p in points[1:]:
                path.lineTo(to_scene(p))
        return path


class MapCanvas(QGraphicsView):
    """
    Map surface. Left click, double click, right click and pointer moves are
    forwarded to the attached InputAdapter as geographic points; middle-drag pans and
    the wheel zooms.
    """

    def __init__(self, parent=None, center: Point = Point(0.0, 0.0), zoom: float = 14):
        super().__init__(parent)
        self._scene = QGraphicsScene(self)
        self._scene.setSceneRect(QRectF(-180.0, -90.0, 360.0, 180.0))
        self.setScene(self._scene)
        self.renderer = QtOverlayRenderer(self._scene)
        self._input: Optional[InputAdapter] = None
        self._press_pos: Optional[QPoint] = None
        self._pan_last: Optional[QPoint] = None

        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.viewport().setMouseTracking(True)
        self.setBackgroundBrush(QBrush(QColor("#e2e8f0")))
        self.set_view(center, zoom)

    def set_input_adapter(self, adapter: Optional[InputAdapter]) -> None:
        self._input = adapter

    def set_view(self, center: Point, zoom: float) -> None:
        s = pixels_per_degree(zoom)
        self.resetTransform()
        self.scale(s, s)
        self.centerOn(to_scene(center))

    def set_crosshair(self, on: bool) -> None:
        self.viewport().setCursor(Qt.CursorShape.CrossCursor if on else Qt.CursorShape.ArrowCursor)

    def geo_at(self, pos: QPoint) -> Point:
        return from_scene(self.mapToScene(pos))

    # Qt event handlers ------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        pos = event.position().toPoint()
        button = event.button()
        if button == Qt.MouseButton.LeftButton:
            self._press_pos = pos
        elif button == Qt.MouseButton.MiddleButton:
            self._pan_last = pos
        elif button == Qt.MouseButton.RightButton and self._input is not None:
            self._input.on_right_click(self.geo_at(pos))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        pos = event.position().toPoint()
        button = event.button()
        if button == Qt.MouseButton.LeftButton and self._press_pos is not None:
            moved = (pos - self._press_pos).manhattanLength()
            self._press_pos = None
            if moved <= CLICK_SLOP_PX and self._input is not None:
                self._input.on_click(self.geo_at(pos))
        elif button == Qt.MouseButton.MiddleButton:
            self._pan_last = None
        event.accept()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        # Qt sends press, release, double-click, release; the first release already produced
        # one click. Report the second click too, then the double click, like a web map does.
        if event.button() == Qt.MouseButton.LeftButton and self._input is not None:
            point = self.geo_at(event.position().toPoint())
            self._input.on_click(point)
            self._input.on_double_click(point)
        self._press_pos = None
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        pos = event.position().toPoint()
        if self._pan_last is not None:
            delta = pos - self._pan_last
            self._pan_last = pos
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - delta.x())
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - delta.y())
        if self._input is not None:
            self._input.on_pointer_move(self.geo_at(pos))
        event.accept()

    def wheelEvent(self, event: QWheelEvent) -> None:
        delta = event.angleDelta().y()
        if delta:
            factor = 1.0 + min(abs(delta), 480) * 0.001
            if delta < 0:
                factor = 1.0 / factor
            self.scale(factor, factor)
        event.accept()

    def minimumSizeHint(self) -> QSize:
        return QSize(320, 240)

    def sizeHint(self) -> QSize:
        return QSize(960, 640)
