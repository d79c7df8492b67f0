"""YAML configuration loading."""
import pytest

from geodash.core.config import get_earth_radius, get_measure_config, load_config, reset_config
from geodash.core.exceptions import ConfigError


def test_packaged_defaults():
    cfg = load_config()
    measure = cfg["measure"]
    assert measure["default_units"] == {"distance": "m", "area": "m²"}
    assert measure["earth_radius_m"] == pytest.approx(6378137.0)
    assert measure["persist_units"] is False
    assert measure["styles"]["preview"]["dashed"] is True
    assert cfg["map"]["center"] == [13.267, 80.329]


def test_cached_until_reset():
    assert load_config() is load_config()
    first = load_config()
    reset_config()
    assert load_config() is not first


def test_override_file_deep_merges(tmp_path):
    path = tmp_path / "override.yaml"
    path.write_text("measure:\n  default_units:\n    distance: km\n  persist_units: true\n", encoding="utf-8")
    cfg = load_config(override_path=path)
    assert cfg["measure"]["default_units"] == {"distance": "km", "area": "m²"}
    assert cfg["measure"]["persist_units"] is True
    assert cfg["measure"]["styles"]["finalized"]["color"] == "#3b82f6"


def test_env_config(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("map:\n  zoom: 10\n", encoding="utf-8")
    monkeypatch.setenv("GEODASH_CONFIG", str(path))
    reset_config()
    assert load_config()["map"]["zoom"] == 10


def test_missing_override_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(override_path=tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("measure: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(override_path=path)


def test_get_measure_config_returns_copy():
    section = get_measure_config()
    section["persist_units"] = True
    assert load_config()["measure"]["persist_units"] is False


def test_earth_radius_validation():
    assert get_earth_radius({}, 6378137.0) == 6378137.0
    assert get_earth_radius({"earth_radius_m": "6371008.8"}, 1.0) == pytest.approx(6371008.8)
    for bad in (-6378137, 0, "wide", float("nan"), [1]):
        with pytest.raises(ConfigError):
            get_earth_radius({"earth_radius_m": bad}, 6378137.0)
