"""Tests for storage module."""
import pytest

from idleminer.storage import FileStore, MemoryStore, default_save_dir


def test_memory_store():
    store = MemoryStore()
    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"
    store.delete("k")
    store.delete("k")
    assert store.get("k") is None


def test_file_store_round_trip(tmp_path):
    store = FileStore(tmp_path / "saves")
    assert store.get("game") is None
    store.set("game", '{"balance": 1}')
    assert (tmp_path / "saves" / "game.json").read_text() == '{"balance": 1}'
    assert store.get("game") == '{"balance": 1}'


def test_file_store_overwrite_leaves_no_temp_file(tmp_path):
    store = FileStore(tmp_path)
    store.set("game", "one")
    store.set("game", "two")
    assert store.get("game") == "two"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["game.json"]


def test_file_store_delete(tmp_path):
    store = FileStore(tmp_path)
    store.set("game", "x")
    store.delete("game")
    store.delete("game")
    assert store.get("game") is None


def test_file_store_rejects_path_keys(tmp_path):
    store = FileStore(tmp_path)
    with pytest.raises(ValueError, match="Invalid storage key"):
        store.set("../escape", "x")


def test_default_save_dir_env(monkeypatch, tmp_path):
    monkeypatch.setenv("IDLEMINER_HOME", str(tmp_path))
    assert default_save_dir() == tmp_path


def test_default_save_dir_home(monkeypatch):
    monkeypatch.delenv("IDLEMINER_HOME", raising=False)
    assert default_save_dir().name == ".idleminer"
