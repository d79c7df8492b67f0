"""Measurement panel: open/close toggle, distance/area buttons, clear, unit selector."""

from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QPushButton,
    QSizePolicy,
    QWidget,
)

from geodash.measure.session import MeasurementMode
from geodash.measure.tool import MeasurementTool
from geodash.measure.units import units_for


class MeasurePanel(QWidget):
    """
    Tool buttons for a MeasurementTool. Holds no measurement state of its own: every
    button goes through the tool and the widgets are refreshed from tool events.
    """

    def __init__(self, tool: MeasurementTool, parent=None):
        super().__init__(parent)
        self._tool = tool
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 2, 6, 2)
        layout.setSpacing(6)

        self._toggle_btn = QPushButton("Measure")
        self._toggle_btn.setCheckable(True)
        self._toggle_btn.setToolTip("Measurement tools")
        self._toggle_btn.clicked.connect(self._on_toggle_panel)
        layout.addWidget(self._toggle_btn)

        self._mode_buttons: dict[MeasurementMode, QPushButton] = {}
        for mode in MeasurementMode:
            btn = QPushButton(mode.label)
            btn.setCheckable(True)
            btn.setToolTip(f"Measure {mode.label} (click again to finish)")
            btn.clicked.connect(lambda _checked=False, m=mode: self._on_mode_button(m))
            layout.addWidget(btn)
            self._mode_buttons[mode] = btn

        self._clear_btn = QPushButton("Clear")
        self._clear_btn.setToolTip("Clear all measurements")
        self._clear_btn.clicked.connect(self._tool.clear_all)
        layout.addWidget(self._clear_btn)

        self._unit_combo = QComboBox()
        self._unit_combo.setMinimumWidth(90)
        self._unit_combo.activated.connect(self._on_unit_chosen)
        layout.addWidget(self._unit_combo)

        self.setSizePolicy(QSizePolicy.Policy.Maximum, QSizePolicy.Policy.Fixed)

        tool.events.on("state_changed", self._on_tool_event)
        tool.events.on("units_changed", self._on_tool_event)
        tool.events.on("panel_toggled", self._on_tool_event)
        self.refresh()

    def _on_toggle_panel(self):
        self._tool.toggle_panel()

    def _on_mode_button(self, mode: MeasurementMode):
        self._tool.toggle_button_pressed(mode)
        # state_changed is not emitted when the press was a no-op, so resync the check state
        self.refresh()

    def _on_unit_chosen(self, index: int):
        mode = self._tool.active_mode
        symbol = self._unit_combo.itemData(index)
        if mode is not None and symbol:
            self._tool.set_unit(mode.kind, symbol)

    def _on_tool_event(self, **_payload):
        self.refresh()

    def refresh(self):
        """Sync enabled/checked state and the unit list with the tool."""
        tool = self._tool
        is_open = tool.panel_open
        active = tool.active_mode
        self._toggle_btn.setChecked(is_open)
        for mode, btn in self._mode_buttons.items():
            btn.setVisible(is_open)
            btn.setChecked(active is mode)
        self._clear_btn.setVisible(is_open)
        self._clear_btn.setEnabled(tool.can_clear)
        self._unit_combo.setVisible(is_open and active is not None)

        self._unit_combo.blockSignals(True)
        self._unit_combo.clear()
        if active is not None:
            current = tool.unit_for(active.kind).symbol
            for unit in units_for(active.kind):
                self._unit_combo.addItem(f"{unit.symbol} - {unit.label}", unit.symbol)
                if unit.symbol == current:
                    self._unit_combo.setCurrentIndex(self._unit_combo.count() - 1)
        self._unit_combo.blockSignals(False)

    @property
    def mode_buttons(self) -> dict:
        return dict(self._mode_buttons)

    @property
    def clear_button(self) -> QPushButton:
        return self._clear_btn

    @property
    def unit_combo(self) -> QComboBox:
        return self._unit_combo
