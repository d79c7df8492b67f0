"""
Input adapter: raw map events -> session transitions.

Event mapping:
  pointer move  -> move_cursor
  click         -> add_point
  double click  -> finalize
  right click   -> cancel_in_progress
  Escape key    -> cancel_in_progress

Map widgets report a double click as click, click, double click at the same spot, so the
final point arrives twice before finalize(); the session drops that trailing duplicate.
The adapter does not try to tell the two apart.

Dispatch is serialised: an event that arrives while another one is being handled (for
example from a renderer callback that pumps input synchronously) is queued and handled
after the current one completes, so no transition ever starts inside another.
"""
from collections import deque
from typing import Callable, Optional

from ..core.logger import get_logger
from .geometry import Point
from .session import Effect, MeasurementSession

logger = get_logger("input")

ESCAPE_KEYS = frozenset({"Escape", "Esc"})


class InputAdapter:
    """Translate viewport events into session transitions and hand each effect to on_effect."""

    def __init__(self, session: MeasurementSession, on_effect: Optional[Callable[[Effect], None]] = None):
        self.session = session
        self._on_effect = on_effect
        self._queue: deque = deque()
        self._dispatching = False
        self.enabled = True

    # Viewport-facing handlers ------------------------------------------------

    def on_pointer_move(self, point: Point) -> None:
        self._dispatch(self.session.move_cursor, point)

    def on_click(self, point: Point) -> None:
        self._dispatch(self.session.add_point, point)

    def on_double_click(self, point: Optional[Point] = None) -> None:
        self._dispatch(self.session.finalize)

    def on_right_click(self, point: Optional[Point] = None) -> None:
        self._dispatch(self.session.cancel_in_progress)

    def on_key(self, key: str) -> bool:
        """Handle a key press. Returns True if the key was consumed."""
        if key not in ESCAPE_KEYS:
            return False
        if self.session.active_mode is None:
            return False
        self._dispatch(self.session.cancel_in_progress)
        return True

    # -------------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._dispatching

    def _dispatch(self, transition, *args) -> None:
        if not self.enabled or self.session.active_mode is None:
            return
        self._queue.append((transition, args))
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                fn, fn_args = self._queue.popleft()
                effect = fn(*fn_args)
                if effect.changed and self._on_effect is not None:
                    self._on_effect(effect)
        finally:
            self._dispatching = False
            self._queue.clear()
