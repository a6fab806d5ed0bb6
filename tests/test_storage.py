"""Tests for local key/value storage."""

from agape.storage import LocalStorage


def test_get_missing_key(storage):
    assert storage.get_item("nope") is None


def test_set_and_replace(storage):
    storage.set_item("k", "one")
    storage.set_item("k", "two")

    assert storage.get_item("k") == "two"


def test_remove_item(storage):
    storage.set_item("k", "v")
    storage.remove_item("k")
    storage.remove_item("never-set")

    assert storage.get_item("k") is None


def test_values_survive_reopen(tmp_path):
    """Test that a second instance on the same file sees stored values."""
    db_path = tmp_path / "nested" / "storage.db"
    LocalStorage(db_path).set_item("session", '{"a": 1}')

    assert LocalStorage(db_path).get_item("session") == '{"a": 1}'
