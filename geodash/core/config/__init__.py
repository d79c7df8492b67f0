"""
Load configuration from YAML. Defaults live in default.yaml next to this module.
Override: --config <file> or GEODASH_CONFIG.
"""
import math
import os
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import ConfigError

_CACHE: dict[str, Any] | None = None
_CONFIG_DIR = Path(__file__).resolve().parent

ENV_CONFIG = "GEODASH_CONFIG"
ENV_LOG_LEVEL = "GEODASH_LOG_LEVEL"
ENV_LOG_DIR = "GEODASH_LOG_DIR"


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (recursive). base is not mutated."""
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _defaults() -> dict:
    """Built-in defaults (no file)."""
    return {
        "measure": {
            "default_units": {"distance": "m", "area": "m²"},
            "persist_units": False,
            "preferences_file": None,
            "earth_radius_m": 6378137.0,
            "styles": {
                "preview": {"color": "#0891b2", "weight": 2, "dashed": True, "fill_opacity": 0.0},
                "marker": {"color": "#0891b2", "fill_color": "#f8fafc", "radius": 4, "weight": 2},
                "finalized": {"color": "#3b82f6", "weight": 3, "dashed": False, "fill_opacity": 0.2},
            },
        },
        "map": {"center": [13.267, 80.329], "zoom": 14},
    }


def load_config(override_path: str | Path | None = None) -> dict:
    """
    Load config: defaults + default.yaml + env GEODASH_CONFIG + optional override file.
    Returns merged dict. Cached after first call unless override_path is given.
    """
    global _CACHE
    if override_path is not None:
        _CACHE = None

    if _CACHE is not None:
        return _CACHE

    base = _defaults()
    default_file = _CONFIG_DIR / "default.yaml"
    if default_file.exists():
        base = _deep_merge(base, _load_yaml(default_file))

    env_path = os.environ.get(ENV_CONFIG)
    if env_path and Path(env_path).exists():
        base = _deep_merge(base, _load_yaml(Path(env_path)))

    if override_path is not None:
        p = Path(override_path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}")
        base = _deep_merge(base, _load_yaml(p))

    _CACHE = base
    return base


def get_config(override_path: str | Path | None = None) -> dict:
    """Alias for load_config; use for read-only access."""
    return load_config(override_path)


def get_measure_config(config: dict | None = None) -> dict:
    """Return the measure section of config (loading the cached config when none is given)."""
    cfg = config if config is not None else load_config()
    return dict(cfg.get("measure") or {})


def get_earth_radius(measure_cfg: dict, default: float) -> float:
    """measure.earth_radius_m as a positive float; ConfigError for anything else."""
    raw = measure_cfg.get("earth_radius_m")
    if raw is None:
        return float(default)
    try:
        radius = float(raw)
    except (TypeError, ValueError):
        radius = 0.0
    if not (math.isfinite(radius) and radius > 0):
        raise ConfigError(f"measure.earth_radius_m must be a positive number, got {raw!r}")
    return radius


def reset_config() -> None:
    """Clear cache (e.g. for tests)."""
    global _CACHE
    _CACHE = None
