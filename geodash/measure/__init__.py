"""Interactive distance and area measurement on the map."""

from geodash.measure.geometry import EARTH_RADIUS_M, Point, area, distance, parse_point
from geodash.measure.units import (
    AREA_UNITS,
    DISTANCE_UNITS,
    QuantityKind,
    Unit,
    format_value,
    get_unit,
)
from geodash.measure.session import (
    Effect,
    EffectKind,
    FinalizedMeasurement,
    MeasurementMode,
    MeasurementSession,
    SessionState,
)
from geodash.measure.input_adapter import InputAdapter
from geodash.measure.projector import BaseRenderer, RenderProjector, ShapeStyle
from geodash.measure.tool import MeasurementTool

__all__ = [
    "EARTH_RADIUS_M",
    "Point",
    "area",
    "distance",
    "parse_point",
    "AREA_UNITS",
    "DISTANCE_UNITS",
    "QuantityKind",
    "Unit",
    "format_value",
    "get_unit",
    "Effect",
    "EffectKind",
    "FinalizedMeasurement",
    "MeasurementMode",
    "MeasurementSession",
    "SessionState",
    "InputAdapter",
    "BaseRenderer",
    "RenderProjector",
    "ShapeStyle",
    "MeasurementTool",
]
