import json

import pytest

from catalog import load_catalog


def _write(tmp_path, payload) -> str:
    path = tmp_path / "rewards.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return str(path)


def test_loads_entries_with_ids(tmp_path):
    path = _write(tmp_path, {"rewards": {"coffee": {"name": "Coffee", "cost": 30}}})
    assert load_catalog(path) == {"coffee": {"id": "coffee", "name": "Coffee", "cost": 30}}


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(RuntimeError, match="unreadable"):
        load_catalog(str(tmp_path / "nope.json"))


def test_invalid_json_is_fatal(tmp_path):
    with pytest.raises(RuntimeError):
        load_catalog(_write(tmp_path, "{not json"))


def test_empty_rewards_is_fatal(tmp_path):
    with pytest.raises(RuntimeError, match="no 'rewards'"):
        load_catalog(_write(tmp_path, {"rewards": {}}))


@pytest.mark.parametrize("entry", [
    {"name": "Coffee"},
    {"name": "Coffee", "cost": -1},
    {"name": "Coffee", "cost": "30"},
    {"name": "Coffee", "cost": True},
    {"cost": 30},
    "coffee",
])
def test_bad_entries_are_fatal(tmp_path, entry):
    with pytest.raises(RuntimeError):
        load_catalog(_write(tmp_path, {"rewards": {"coffee": entry}}))
