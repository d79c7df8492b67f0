"""
Pytest configuration and shared fixtures.

Headless Qt on Linux: set QT_QPA_PLATFORM=offscreen so the map canvas and panels can be
created in CI without a display. Where offscreen is not available, run under Xvfb:

  xvfb-run -a pytest tests/test_map_canvas.py -v
"""
import os
import sys

# Must set before any PySide6/Qt import
if sys.platform.startswith("linux"):
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from geodash.core.config import reset_config
from geodash.measure.projector import BaseRenderer


class RecordingRenderer(BaseRenderer):
    """In-memory renderer: keeps every live overlay item as a dict, keyed by handle id."""

    def __init__(self):
        self.items = {}
        self.removed = []
        self._next = 1

    def _add(self, **item):
        handle = self._next
        self._next += 1
        self.items[handle] = item
        return handle

    def draw_polyline(self, points, style):
        return self._add(kind="polyline", points=list(points), style=style)

    def draw_polygon(self, points, style):
        return self._add(kind="polygon", points=list(points), style=style)

    def draw_marker(self, point, style):
        return self._add(kind="marker", points=[point], style=style)

    def draw_label(self, point, text, anchored):
        return self._add(kind="label" if anchored else "tooltip", points=[point], text=text)

    def update_shape(self, handle, points):
        self.items[handle]["points"] = list(points)

    def update_label(self, handle, text=None, point=None):
        if text is not None:
            self.items[handle]["text"] = text
        if point is not None:
            self.items[handle]["points"] = [point]

    def remove(self, handle):
        del self.items[handle]
        self.removed.append(handle)

    def of_kind(self, kind):
        return [item for item in self.items.values() if item["kind"] == kind]


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Every test starts from the packaged defaults, with no GEODASH_CONFIG override."""
    monkeypatch.delenv("GEODASH_CONFIG", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _isolated_logging(monkeypatch):
    """Undo any setup_logging() a test triggers, so no handler outlives pytest's captured streams."""
    import logging

    from geodash.core import logger as geodash_logger

    root = logging.getLogger(geodash_logger.ROOT_NAME)
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(geodash_logger, "_setup_done", geodash_logger._setup_done)
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
