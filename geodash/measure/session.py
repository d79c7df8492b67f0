"""
Measurement session: the state machine behind the distance/area tool.

States are INACTIVE (no mode) and COLLECTING (mode selected, zero or more captured points).
Each transition runs synchronously, mutates the session, and returns an Effect that
tells the render projector what changed. Transitions that make no sense in the current
state return an Effect of kind NONE instead of raising, because they are driven directly
by raw input events.
"""
import functools
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.exceptions import SessionReentryError
from ..core.logger import get_logger, get_mode_logger
from .geometry import EARTH_RADIUS_M, Point, area, distance, segment_distance
from .units import QuantityKind

logger = get_logger("session")


class MeasurementMode(Enum):
    DISTANCE = "distance"
    AREA = "area"

    @property
    def min_points(self) -> int:
        return 2 if self is MeasurementMode.DISTANCE else 3

    @property
    def kind(self) -> QuantityKind:
        return QuantityKind(self.value)

    @property
    def label(self) -> str:
        return "Distance" if self is MeasurementMode.DISTANCE else "Area"


class SessionState(Enum):
    INACTIVE = "inactive"
    COLLECTING = "collecting"


class EffectKind(Enum):
    NONE = "none"
    ACTIVATED = "activated"
    POINT_ADDED = "point_added"
    CURSOR_MOVED = "cursor_moved"
    FINALIZED = "finalized"
    CANCELLED = "cancelled"
    CLEARED = "cleared"
    DEACTIVATED = "deactivated"


@dataclass(frozen=True)
class FinalizedMeasurement:
    """A committed shape. Never mutated; unit changes only affect how raw_value is shown."""
    mode: MeasurementMode
    points: tuple[Point, ...]
    raw_value: float
    created_order: int


@dataclass(frozen=True)
class Effect:
    """Description of what a transition changed."""
    kind: EffectKind
    mode: Optional[MeasurementMode] = None
    measurement: Optional[FinalizedMeasurement] = None
    removed: tuple[FinalizedMeasurement, ...] = ()

    @property
    def changed(self) -> bool:
        return self.kind is not EffectKind.NONE


NO_EFFECT = Effect(EffectKind.NONE)


def _transition(method):
    """Guard a transition against re-entry on the same session."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._in_transition is not None:
            raise SessionReentryError(
                f"{method.__name__}() called while {self._in_transition}() is still running"
            )
        self._in_transition = method.__name__
        try:
            return method(self, *args, **kwargs)
        finally:
            self._in_transition = None

    return wrapper


class MeasurementSession:
    """Owns the active mode, the in-progress points, and the finalized measurements."""

    def __init__(self, radius: float = EARTH_RADIUS_M):
        self.radius = radius
        self._mode: Optional[MeasurementMode] = None
        self._points: list[Point] = []
        self._cursor: Optional[Point] = None
        self._finalized: list[FinalizedMeasurement] = []
        self._next_order = 1
        # path length of captured points, kept so a cursor move costs one segment
        self._captured_length = 0.0
        self._preview_value: Optional[float] = None
        self._in_transition: Optional[str] = None
        self._log = get_mode_logger(logger, None)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return SessionState.INACTIVE if self._mode is None else SessionState.COLLECTING

    @property
    def active_mode(self) -> Optional[MeasurementMode]:
        return self._mode

    @property
    def captured_points(self) -> tuple[Point, ...]:
        return tuple(self._points)

    @property
    def cursor_point(self) -> Optional[Point]:
        return self._cursor

    @property
    def finalized(self) -> tuple[FinalizedMeasurement, ...]:
        return tuple(self._finalized)

    @property
    def point_count(self) -> int:
        return len(self._points)

    @property
    def finalized_count(self) -> int:
        return len(self._finalized)

    @property
    def preview_value(self) -> Optional[float]:
        """Live value over captured points plus cursor; None while below the mode minimum."""
        return self._preview_value

    @property
    def preview_points(self) -> tuple[Point, ...]:
        if self._cursor is None:
            return tuple(self._points)
        return tuple(self._points) + (self._cursor,)

    @property
    def can_finalize(self) -> bool:
        if self._mode is None:
            return False
        return len(self._effective_points()) >= self._mode.min_points

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @_transition
    def activate(self, mode: MeasurementMode) -> Effect:
        """Enter COLLECTING(mode) with no points. Unfinished points of any previous mode are dropped."""
        mode = MeasurementMode(mode)
        if self._points:
            self._log.debug("Discarding %d unfinished point(s)", len(self._points))
        self._reset_capture()
        self._mode = mode
        self._log = get_mode_logger(logger, mode)
        self._log.info("Measurement mode activated")
        return Effect(EffectKind.ACTIVATED, mode)

    @_transition
    def add_point(self, point: Point) -> Effect:
        if self._mode is None:
            return NO_EFFECT
        point = Point(float(point[0]), float(point[1]))
        if not (math.isfinite(point.lat) and math.isfinite(point.lon)):
            self._log.warning("Ignoring non-finite point %r", point)
            return NO_EFFECT
        if self._points:
            self._captured_length += segment_distance(self._points[-1], point, self.radius)
        self._points.append(point)
        self._recompute_preview()
        self._log.debug("Point %d captured at (%.6f, %.6f)", len(self._points), point.lat, point.lon)
        return Effect(EffectKind.POINT_ADDED, self._mode)

    @_transition
    def move_cursor(self, point: Point) -> Effect:
        """Track the pointer; recomputes the live preview. Never touches finalized measurements."""
        if self._mode is None:
            return NO_EFFECT
        point = Point(float(point[0]), float(point[1]))
        if not (math.isfinite(point.lat) and math.isfinite(point.lon)):
            return NO_EFFECT
        self._cursor = point
        self._recompute_preview()
        return Effect(EffectKind.CURSOR_MOVED, self._mode)

    @_transition
    def finalize(self) -> Effect:
        """
        Commit the captured points as a FinalizedMeasurement.

        A double-click reaches us as click, click, double-click, so the last point is usually
        captured twice; one trailing duplicate is dropped here and nowhere else. Below the mode
        minimum this is a no-op and the captured points stay as they are.
        """
        if self._mode is None:
            return NO_EFFECT
        points = self._effective_points()
        if len(points) < self._mode.min_points:
            self._log.debug("Finalize ignored: %d of %d points", len(points), self._mode.min_points)
            return NO_EFFECT
        measurement = FinalizedMeasurement(
            mode=self._mode,
            points=tuple(points),
            raw_value=self._compute(self._mode, points),
            created_order=self._next_order,
        )
        self._next_order += 1
        self._finalized.append(measurement)
        self._points = []
        self._captured_length = 0.0
        self._recompute_preview()
        self._log.info(
            "Measurement #%d finalized: %d points, %.3f base units",
            measurement.created_order, len(points), measurement.raw_value,
        )
        return Effect(EffectKind.FINALIZED, self._mode, measurement=measurement)

    @_transition
    def cancel_in_progress(self) -> Effect:
        """Drop captured points and cursor. Idempotent; finalized measurements are kept."""
        if self._mode is None or (not self._points and self._cursor is None):
            return NO_EFFECT
        self._reset_capture()
        self._log.debug("In-progress measurement cancelled")
        return Effect(EffectKind.CANCELLED, self._mode)

    @_transition
    def clear_all(self) -> Effect:
        """Remove every finalized measurement and cancel the in-progress one. Mode is kept."""
        return self._clear_all()

    @_transition
    def deactivate(self) -> Effect:
        """clear_all() followed by INACTIVE."""
        cleared = self._clear_all()
        previous = self._mode
        self._mode = None
        self._log = get_mode_logger(logger, None)
        if previous is None and not cleared.changed:
            return NO_EFFECT
        logger.info("Measurement tool deactivated")
        return Effect(EffectKind.DEACTIVATED, previous, removed=cleared.removed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clear_all(self) -> Effect:
        removed = tuple(self._finalized)
        had_capture = bool(self._points) or self._cursor is not None
        self._finalized = []
        self._reset_capture()
        if not removed and not had_capture:
            return NO_EFFECT
        if removed:
            self._log.info("Cleared %d measurement(s)", len(removed))
        return Effect(EffectKind.CLEARED, self._mode, removed=removed)

    def _reset_capture(self) -> None:
        self._points = []
        self._cursor = None
        self._captured_length = 0.0
        self._preview_value = None

    def _effective_points(self) -> list[Point]:
        points = list(self._points)
        if len(points) >= 2 and points[-1] == points[-2]:
            points.pop()
        return points

    def _compute(self, mode: MeasurementMode, points) -> float:
        if mode is MeasurementMode.DISTANCE:
            return distance(points, self.radius)
        return area(points, self.radius)

    def _recompute_preview(self) -> None:
        mode = self._mode
        count = len(self._points) + (1 if self._cursor is not None else 0)
        if mode is None or count < mode.min_points:
            self._preview_value = None
        elif mode is MeasurementMode.DISTANCE:
            value = self._captured_length
            if self._cursor is not None:
                value += segment_distance(self._points[-1], self._cursor, self.radius)
            self._preview_value = value
        else:
            self._preview_value = area(self.preview_points, self.radius)
