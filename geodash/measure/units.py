"""
Unit registry for measurement display.

Raw values are always stored in base units (meters, square meters). A unit only knows
its conversion factor from the base unit and how many decimals to print, so switching
units is a pure re-format of stored values.
"""
from dataclasses import dataclass
from enum import Enum

from ..core.exceptions import UnknownUnitError


class QuantityKind(str, Enum):
    DISTANCE = "distance"
    AREA = "area"


@dataclass(frozen=True)
class Unit:
    symbol: str
    label: str
    factor: float  # display units per base unit
    decimals: int

    def convert(self, raw_value: float) -> float:
        """Base units -> display units."""
        return raw_value * self.factor

    def to_base(self, display_value: float) -> float:
        """Display units -> base units."""
        return display_value / self.factor

    def format(self, display_value: float) -> str:
        """Format an already converted value, e.g. '1.25 km'."""
        return f"{display_value:.{self.decimals}f} {self.symbol}"

    def render(self, raw_value: float) -> str:
        """Convert a base-unit value and format it."""
        return self.format(self.convert(raw_value))


DISTANCE_UNITS: dict[str, Unit] = {
    "m": Unit("m", "Meters", 1.0, 0),
    "km": Unit("km", "Kilometers", 0.001, 2),
    "ft": Unit("ft", "Feet", 3.28084, 0),
    "mi": Unit("mi", "Miles", 0.000621371, 2),
}

AREA_UNITS: dict[str, Unit] = {
    "m²": Unit("m²", "Square Meters", 1.0, 0),
    "km²": Unit("km²", "Square Kilometers", 0.000001, 3),
    "ha": Unit("ha", "Hectares", 0.0001, 3),
    "ft²": Unit("ft²", "Square Feet", 10.7639, 0),
    "acres": Unit("acres", "Acres", 0.000247105, 3),
}

UNITS: dict[QuantityKind, dict[str, Unit]] = {
    QuantityKind.DISTANCE: DISTANCE_UNITS,
    QuantityKind.AREA: AREA_UNITS,
}

BASE_UNITS = {
    QuantityKind.DISTANCE: "m",
    QuantityKind.AREA: "m²",
}

# ASCII spellings accepted from config files and the command line
_ALIASES = {
    QuantityKind.DISTANCE: {
        "meters": "m",
        "kilometers": "km",
        "feet": "ft",
        "miles": "mi",
    },
    QuantityKind.AREA: {
        "m2": "m²",
        "sqm": "m²",
        "km2": "km²",
        "ft2": "ft²",
        "sqft": "ft²",
        "hectares": "ha",
        "acre": "acres",
    },
}


def _as_kind(kind) -> QuantityKind:
    try:
        return QuantityKind(getattr(kind, "value", kind))
    except ValueError:
        raise UnknownUnitError(kind, None) from None


def normalize_symbol(kind, symbol: str) -> str:
    """Return the canonical symbol for symbol (aliases resolved); raise UnknownUnitError if unknown."""
    k = _as_kind(kind)
    if not isinstance(symbol, str):
        raise UnknownUnitError(k.value, symbol)
    s = symbol.strip()
    if s in UNITS[k]:
        return s
    s = _ALIASES[k].get(s.lower(), s)
    if s not in UNITS[k]:
        raise UnknownUnitError(k.value, symbol)
    return s


def get_unit(kind, symbol: str) -> Unit:
    """Look up a unit by kind and symbol (or alias). Raises UnknownUnitError."""
    k = _as_kind(kind)
    return UNITS[k][normalize_symbol(k, symbol)]


def is_known_unit(kind, symbol: str) -> bool:
    try:
        normalize_symbol(kind, symbol)
    except UnknownUnitError:
        return False
    return True


def units_for(kind) -> list[Unit]:
    """Units of one kind in registry order (for menus)."""
    return list(UNITS[_as_kind(kind)].values())


def format_value(raw_value: float, kind, symbol: str) -> str:
    """Format a base-unit value in the given unit."""
    return get_unit(kind, symbol).render(raw_value)
