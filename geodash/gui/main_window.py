"""Main application window: map canvas with the measurement toolbar."""

from pathlib import Path

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QStatusBar, QToolBar, QWidget

from geodash.core.config import load_config
from geodash.core.logger import get_logger
from geodash.core.preferences import BasePreferenceStore, JsonPreferenceStore, MemoryPreferenceStore
from geodash.gui.map_canvas import MapCanvas
from geodash.gui.panels import MeasurePanel
from geodash.measure.geometry import Point
from geodash.measure.tool import MeasurementTool

logger = get_logger("gui.main_window")


class _EscapeFilter(QObject):
    """
    Application-wide Escape: cancels the capture whichever widget of the window has focus.
    Left alone while a popup such as an open combo list is showing, so Escape only
    closes the popup.
    """

    def __init__(self, window: QMainWindow, tool: MeasurementTool):
        super().__init__(window)
        self._window = window
        self._tool = tool

    def eventFilter(self, obj, event):
        if (
            event.type() == QEvent.Type.KeyPress
            and event.key() == Qt.Key.Key_Escape
            and not event.isAutoRepeat()
            and isinstance(obj, QWidget)
            and obj.window() is self._window
            and QApplication.activePopupWidget() is None
        ):
            return self._tool.input.on_key("Escape")
        return False


def _preference_store(measure_cfg: dict) -> BasePreferenceStore:
    path = measure_cfg.get("preferences_file")
    if path:
        return JsonPreferenceStore(Path(path).expanduser())
    return MemoryPreferenceStore()


class MainWindow(QMainWindow):
    """Map canvas in the centre, measurement tools in the toolbar, counts in the status bar."""

    def __init__(self, config: dict | None = None, parent=None):
        super().__init__(parent)
        cfg = config if config is not None else load_config()
        measure_cfg = dict(cfg.get("measure") or {})
        map_cfg = dict(cfg.get("map") or {})
        self.setWindowTitle("GeoDash")

        lat, lon = (map_cfg.get("center") or [0.0, 0.0])[:2]
        self.canvas = MapCanvas(self, center=Point(float(lat), float(lon)), zoom=float(map_cfg.get("zoom", 14)))
        self.setCentralWidget(self.canvas)

        self.tool = MeasurementTool(self.canvas.renderer, measure_cfg, _preference_store(measure_cfg))
        self.canvas.set_input_adapter(self.tool.input)
        self._escape_filter = _EscapeFilter(self, self.tool)
        QApplication.instance().installEventFilter(self._escape_filter)

        toolbar = QToolBar("Measure", self)
        toolbar.setObjectName("MeasureToolbar")
        toolbar.setMovable(False)
        self.measure_panel = MeasurePanel(self.tool, toolbar)
        toolbar.addWidget(self.measure_panel)
        self.addToolBar(toolbar)

        status = QStatusBar(self)
        self._status_label = QLabel("")
        status.addWidget(self._status_label)
        self.setStatusBar(status)

        self.tool.events.on("state_changed", self._on_tool_changed)
        self.tool.events.on("panel_toggled", self._on_tool_changed)
        self._on_tool_changed()

    def _on_tool_changed(self, **_payload):
        mode = self.tool.active_mode
        self.canvas.set_crosshair(mode is not None)
        if mode is None:
            self._status_label.setText("Ready")
            return
        self._status_label.setText(
            f"Measuring {mode.value} | points: {self.tool.point_count} | measurements: {self.tool.finalized_count}"
        )

    def closeEvent(self, event):
        QApplication.instance().removeEventFilter(self._escape_filter)
        self.tool.deactivate()
        super().closeEvent(event)
