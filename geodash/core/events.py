from typing import Callable

from .logger import get_logger

logger = get_logger("events")


class EventEmitter:
    """
    Simple in-process event hook system. Register callbacks with on(), emit with emit().
    No GUI dependency. Used by MeasurementTool to tell UI chrome that tool state changed.
    """

    def __init__(self):
        self._handlers: dict[str, list[Callable[..., None]]] = {}

    def on(self, event_name: str, callback: Callable[..., None]) -> None:
        """Register a callback for event_name. Callback receives keyword arguments from emit()."""
        if event_name not in self._handlers:
            self._handlers[event_name] = []
        self._handlers[event_name].append(callback)

    def off(self, event_name: str, callback: Callable[..., None] | None = None) -> None:
        """Remove one callback, or all callbacks for event_name if callback is None."""
        if event_name not in self._handlers:
            return
        if callback is None:
            self._handlers[event_name] = []
        else:
            self._handlers[event_name] = [h for h in self._handlers[event_name] if h != callback]

    def emit(self, event_name: str, **payload) -> None:
        """Invoke all callbacks registered for event_name with **payload. Errors are logged, not raised."""
        for h in list(self._handlers.get(event_name, ())):
            try:
                h(**payload)
            except Exception as e:
                logger.exception("Event handler error [%s]: %s", event_name, e)
