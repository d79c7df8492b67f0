"""Preference stores."""
from geodash.core.preferences import JsonPreferenceStore, MemoryPreferenceStore


def test_memory_store():
    store = MemoryPreferenceStore({"area_unit": "ha"})
    assert store.get("area_unit") == "ha"
    assert store.get("distance_unit", "m") == "m"
    store.set("distance_unit", "km")
    assert store.get("distance_unit") == "km"


def test_json_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    store = JsonPreferenceStore(path)
    assert store.get("area_unit") is None
    store.set("area_unit", "km²")
    store.set("distance_unit", "mi")
    assert path.exists()
    reopened = JsonPreferenceStore(path)
    assert reopened.get("area_unit") == "km²"
    assert reopened.get("distance_unit") == "mi"
    reopened.reset()
    assert not path.exists()


def test_json_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonPreferenceStore(path)
    assert store.get("area_unit", "m²") == "m²"
    store.set("area_unit", "ha")
    assert store.get("area_unit") == "ha"
