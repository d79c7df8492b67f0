# GUI panels

from geodash.gui.panels.measure_panel import MeasurePanel

__all__ = [
    "MeasurePanel",
]
