"""GeoDash: geospatial asset map dashboard (interactive measurement tools)."""

__version__ = "0.1.0"

from geodash.core.events import EventEmitter
from geodash.measure import MeasurementMode, MeasurementSession, MeasurementTool, Point

__all__ = [
    "__version__",
    "EventEmitter",
    "MeasurementMode",
    "MeasurementSession",
    "MeasurementTool",
    "Point",
]
