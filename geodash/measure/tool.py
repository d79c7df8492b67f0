"""
MeasurementTool: the measurement feature as seen by the rest of the dashboard.

Wires one MeasurementSession to an InputAdapter and a RenderProjector, owns the unit
selection, applies the tool-button toggle policy, and notifies UI chrome through an
EventEmitter ("state_changed", "preview_changed", "units_changed", "panel_toggled").
"""
from typing import Optional

from ..core.config import get_earth_radius, get_measure_config
from ..core.events import EventEmitter
from ..core.exceptions import ConfigError, UnknownUnitError
from ..core.logger import get_logger
from ..core.preferences import BasePreferenceStore, MemoryPreferenceStore
from .geometry import EARTH_RADIUS_M
from .input_adapter import InputAdapter
from .projector import BaseRenderer, RenderProjector
from .session import Effect, EffectKind, MeasurementMode, MeasurementSession
from .units import BASE_UNITS, QuantityKind, Unit, get_unit, normalize_symbol

logger = get_logger("tool")

PREF_KEYS = {
    QuantityKind.DISTANCE: "distance_unit",
    QuantityKind.AREA: "area_unit",
}


class MeasurementTool:
    """
    Public surface: activate, toggle_button_pressed, set_unit, clear_all, deactivate,
    toggle_panel, plus read-only active_mode / point_count / finalized_count / can_clear.
    Raw map input goes to tool.input (an InputAdapter).
    """

    def __init__(
        self,
        renderer: BaseRenderer,
        config: dict | None = None,
        preferences: Optional[BasePreferenceStore] = None,
    ):
        cfg = get_measure_config(config) if config is None or "measure" in config else dict(config)
        self._config = cfg
        self._persist_units = bool(cfg.get("persist_units", False))
        self._default_units = self._validate_defaults(cfg.get("default_units") or {})
        radius = get_earth_radius(cfg, EARTH_RADIUS_M)

        self.preferences = preferences if preferences is not None else MemoryPreferenceStore()
        self.events = EventEmitter()
        self.session = MeasurementSession(radius=radius)
        self._units: dict[QuantityKind, str] = {}
        self._load_units()
        self.projector = RenderProjector(self.session, renderer, self.unit_for, cfg.get("styles"))
        self.input = InputAdapter(self.session, self._apply)
        self.panel_open = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def active_mode(self) -> Optional[MeasurementMode]:
        return self.session.active_mode

    @property
    def point_count(self) -> int:
        return self.session.point_count

    @property
    def finalized_count(self) -> int:
        return self.session.finalized_count

    @property
    def can_clear(self) -> bool:
        return self.point_count > 0 or self.finalized_count > 0

    @property
    def distance_unit(self) -> str:
        return self._units[QuantityKind.DISTANCE]

    @property
    def area_unit(self) -> str:
        return self._units[QuantityKind.AREA]

    def unit_for(self, kind) -> Unit:
        kind = QuantityKind(getattr(kind, "value", kind))
        return get_unit(kind, self._units[kind])

    def labels(self) -> list[str]:
        """Formatted values of the finalized measurements, oldest first."""
        return [self.projector.format_measurement(m) for m in self.session.finalized]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def activate(self, mode) -> None:
        self._apply(self.session.activate(MeasurementMode(mode)))

    def toggle_button_pressed(self, mode) -> None:
        """Same mode: finalize when the minimum is met, else nothing. Other mode: switch to it."""
        mode = MeasurementMode(mode)
        if self.session.active_mode is mode:
            if self.session.can_finalize:
                self._apply(self.session.finalize())
            return
        self.activate(mode)

    def set_unit(self, kind, symbol: str) -> bool:
        """Select a display unit. Unknown kind or symbol: logged, nothing changes, returns False."""
        try:
            k = QuantityKind(getattr(kind, "value", kind))
            canonical = normalize_symbol(k, symbol)
        except (ValueError, UnknownUnitError) as e:
            logger.warning("Rejected unit selection %r/%r: %s", kind, symbol, e)
            return False
        if self._units.get(k) == canonical:
            return True
        self._units[k] = canonical
        if self._persist_units:
            self.preferences.set(PREF_KEYS[k], canonical)
        logger.debug("%s unit set to %s", k.value, canonical)
        self.projector.refresh_labels()
        self.events.emit("units_changed", kind=k, symbol=canonical)
        return True

    def clear_all(self) -> None:
        self._apply(self.session.clear_all())

    def deactivate(self) -> None:
        """Clear everything, leave measurement mode, and reset units to their configured/persisted values."""
        self._apply(self.session.deactivate())
        before = dict(self._units)
        self._load_units()
        if before != self._units:
            self.projector.refresh_labels()
            self.events.emit("units_changed", kind=None, symbol=None)

    def toggle_panel(self) -> bool:
        """Open or close the measurement panel. Closing always deactivates. Returns the new open state."""
        if self.panel_open:
            self.deactivate()
        self.panel_open = not self.panel_open
        self.events.emit("panel_toggled", open=self.panel_open)
        return self.panel_open

    # ------------------------------------------------------------------

    def _apply(self, effect: Effect) -> None:
        if not effect.changed:
            return
        self.projector.apply(effect)
        if effect.kind is EffectKind.CURSOR_MOVED:
            self.events.emit("preview_changed", value=self.session.preview_value)
        else:
            self.events.emit("state_changed", effect=effect)

    def _validate_defaults(self, defaults: dict) -> dict[QuantityKind, str]:
        out = {}
        for kind in QuantityKind:
            symbol = defaults.get(kind.value, BASE_UNITS[kind])
            try:
                out[kind] = normalize_symbol(kind, symbol)
            except UnknownUnitError as e:
                raise ConfigError(f"measure.default_units.{kind.value}: {e}") from e
        return out

    def _load_units(self) -> None:
        for kind in QuantityKind:
            symbol = self._default_units[kind]
            if self._persist_units:
                stored = self.preferences.get(PREF_KEYS[kind])
                if stored is not None:
                    try:
                        symbol = normalize_symbol(kind, stored)
                    except UnknownUnitError:
                        logger.warning("Ignoring stored %s unit %r", kind.value, stored)
            self._units[kind] = symbol
