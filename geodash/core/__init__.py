from .config import load_config, get_config, get_earth_radius, get_measure_config, reset_config
from .events import EventEmitter
from .exceptions import GeoDashError, ConfigError, MeasurementError, UnknownUnitError, SessionReentryError
from .logger import get_logger, get_mode_logger, setup_logging
from .preferences import BasePreferenceStore, MemoryPreferenceStore, JsonPreferenceStore

__all__ = [
    "load_config", "get_config", "get_earth_radius", "get_measure_config", "reset_config",
    "EventEmitter",
    "GeoDashError", "ConfigError", "MeasurementError", "UnknownUnitError", "SessionReentryError",
    "get_logger", "get_mode_logger", "setup_logging",
    "BasePreferenceStore", "MemoryPreferenceStore", "JsonPreferenceStore",
]
