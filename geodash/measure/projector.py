"""
Render projector: keeps the map overlay in step with a MeasurementSession.

The projector never computes geometry itself; values come from the session and are only
formatted here with the currently selected units. Rendering goes through BaseRenderer,
which the map widget (or a test double) implements.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.logger import get_logger
from .geometry import Point
from .session import Effect, EffectKind, FinalizedMeasurement, MeasurementMode, MeasurementSession
from .units import QuantityKind, Unit

logger = get_logger("projector")

START_TEXT = "Click on the map to start"
MORE_POINTS_TEXT = "Click to add more points..."
FINISH_TEXT = "Double-click to finish\nEscape or right-click to cancel"


@dataclass(frozen=True)
class ShapeStyle:
    color: str = "#0891b2"
    weight: float = 2.0
    dashed: bool = False
    fill_opacity: float = 0.0
    fill_color: Optional[str] = None
    radius: float = 4.0

    @classmethod
    def from_config(cls, data: dict | None) -> "ShapeStyle":
        data = data or {}
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


class BaseRenderer:
    """
    Drawing primitives provided by the map. Each draw_* returns an opaque handle that is
    later passed to update_* or remove().
    """

    def draw_polyline(self, points: list[Point], style: ShapeStyle) -> Any:
        raise NotImplementedError

    def draw_polygon(self, points: list[Point], style: ShapeStyle) -> Any:
        raise NotImplementedError

    def draw_marker(self, point: Point, style: ShapeStyle) -> Any:
        raise NotImplementedError

    def draw_label(self, point: Point, text: str, anchored: bool) -> Any:
        """anchored=False: floating tooltip beside the cursor; True: permanent label on a shape."""
        raise NotImplementedError

    def update_shape(self, handle: Any, points: list[Point]) -> None:
        raise NotImplementedError

    def update_label(self, handle: Any, text: Optional[str] = None, point: Optional[Point] = None) -> None:
        raise NotImplementedError

    def remove(self, handle: Any) -> None:
        raise NotImplementedError


def label_anchor(measurement: FinalizedMeasurement) -> Point:
    """Where the permanent label of a finalized shape sits: vertex mean for areas, last point for lines."""
    pts = measurement.points
    if measurement.mode is MeasurementMode.AREA:
        return Point(sum(p.lat for p in pts) / len(pts), sum(p.lon for p in pts) / len(pts))
    return pts[-1]


class RenderProjector:
    """
    Applies session effects to a renderer.

    unit_lookup(kind) returns the Unit currently selected for a QuantityKind; it is called at
    render time so a unit change only needs refresh_labels().
    """

    def __init__(
        self,
        session: MeasurementSession,
        renderer: BaseRenderer,
        unit_lookup: Callable[[QuantityKind], Unit],
        styles: dict | None = None,
    ):
        styles = styles or {}
        self.session = session
        self.renderer = renderer
        self._unit_lookup = unit_lookup
        self.preview_style = ShapeStyle.from_config(styles.get("preview") or {"dashed": True})
        self.marker_style = ShapeStyle.from_config(styles.get("marker"))
        self.finalized_style = ShapeStyle.from_config(
            styles.get("finalized") or {"color": "#3b82f6", "weight": 3, "fill_opacity": 0.2}
        )
        self._preview = None
        self._preview_mode: Optional[MeasurementMode] = None
        self._tooltip = None
        self._tooltip_at: Optional[Point] = None
        self._markers: list[Any] = []
        # created_order -> (shape handle, label handle, measurement)
        self._shapes: dict[int, tuple[Any, Any, FinalizedMeasurement]] = {}

    # ------------------------------------------------------------------

    def apply(self, effect: Effect) -> None:
        """Reconcile the overlay after a session transition."""
        if not effect.changed:
            return
        kind = effect.kind
        if kind is EffectKind.CURSOR_MOVED:
            self._sync_preview()
            self._sync_tooltip()
            return
        if kind is EffectKind.DEACTIVATED:
            self._sync_finalized()
            self._clear_in_progress()
            self._remove_tooltip()
            return
        self._sync_finalized()
        self._sync_markers()
        self._sync_preview()
        self._sync_tooltip()

    def refresh_labels(self) -> None:
        """Re-format every permanent label and the tooltip with the current units."""
        for shape, label, m in self._shapes.values():
            self.renderer.update_label(label, text=self.format_measurement(m))
        self._sync_tooltip()

    def format_measurement(self, measurement: FinalizedMeasurement) -> str:
        return self._unit_lookup(measurement.mode.kind).render(measurement.raw_value)

    def tooltip_text(self) -> str:
        mode = self.session.active_mode
        if mode is None:
            return ""
        if self.session.point_count == 0:
            return f"Measure {mode.label}\n{START_TEXT}"
        value = self.session.preview_value
        if value is None:
            return MORE_POINTS_TEXT
        return f"{self._unit_lookup(mode.kind).render(value)}\n{FINISH_TEXT}"

    @property
    def drawn_measurements(self) -> list[int]:
        return sorted(self._shapes)

    # ------------------------------------------------------------------

    def _sync_finalized(self) -> None:
        current = {m.created_order: m for m in self.session.finalized}
        for order in [o for o in self._shapes if o not in current]:
            shape, label, _ = self._shapes.pop(order)
            self.renderer.remove(label)
            self.renderer.remove(shape)
        for order, m in current.items():
            if order in self._shapes:
                continue
            points = list(m.points)
            if m.mode is MeasurementMode.AREA:
                shape = self.renderer.draw_polygon(points, self.finalized_style)
            else:
                shape = self.renderer.draw_polyline(points, self.finalized_style)
            label = self.renderer.draw_label(label_anchor(m), self.format_measurement(m), anchored=True)
            self._shapes[order] = (shape, label, m)

    def _sync_markers(self) -> None:
        points = self.session.captured_points
        while len(self._markers) > len(points):
            self.renderer.remove(self._markers.pop())
        for p in points[len(self._markers):]:
            self._markers.append(self.renderer.draw_marker(p, self.marker_style))

    def _sync_preview(self) -> None:
        mode = self.session.active_mode
        points = list(self.session.preview_points)
        if mode is None or len(points) < 2 or self.session.point_count == 0:
            self._remove_preview()
            return
        if self._preview is not None and self._preview_mode is mode:
            self.renderer.update_shape(self._preview, points)
            return
        self._remove_preview()
        if mode is MeasurementMode.AREA:
            self._preview = self.renderer.draw_polygon(points, self.preview_style)
        else:
            self._preview = self.renderer.draw_polyline(points, self.preview_style)
        self._preview_mode = mode

    def _sync_tooltip(self) -> None:
        if self.session.active_mode is None:
            self._remove_tooltip()
            return
        cursor = self.session.cursor_point or self._tooltip_at
        if cursor is None:
            # nothing to anchor to until the pointer has moved over the map
            return
        text = self.tooltip_text()
        if self._tooltip is None:
            self._tooltip = self.renderer.draw_label(cursor, text, anchored=False)
        else:
            self.renderer.update_label(self._tooltip, text=text, point=cursor)
        self._tooltip_at = cursor

    def _clear_in_progress(self) -> None:
        self._remove_preview()
        while self._markers:
            self.renderer.remove(self._markers.pop())

    def _remove_preview(self) -> None:
        if self._preview is not None:
            self.renderer.remove(self._preview)
            self._preview = None
            self._preview_mode = None

    def _remove_tooltip(self) -> None:
        if self._tooltip is not None:
            self.renderer.remove(self._tooltip)
            self._tooltip = None
        self._tooltip_at = None
