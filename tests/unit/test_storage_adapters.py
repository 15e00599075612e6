import pytest

from foryou_runtime.adapters.storage.file_store import FileKeyValueStore
from foryou_runtime.adapters.storage.in_memory_store import InMemoryKeyValueStore
from foryou_runtime.application.errors import StorageReadError, StorageWriteError


def test_in_memory_store_round_trip_and_isolation():
    """Test that stored documents are copied in and out."""
    store = InMemoryKeyValueStore()
    payload = {"items": [1]}
    store.write("k", payload)
    payload["items"].append(2)

    loaded = store.read("k")
    assert loaded == {"items": [1]}
    loaded["items"].append(3)
    assert store.read("k") == {"items": [1]}

    store.delete("k")
    store.delete("missing")
    assert store.read("k") is None
    assert store.keys() == []


def test_file_store_round_trip(tmp_path):
    """Test write, read and delete against the filesystem."""
    store = FileKeyValueStore(str(tmp_path / "state"))
    store.write("customer:42/foryou_profile_v2", {"value": 1})

    assert store.read("customer:42/foryou_profile_v2") == {"value": 1}
    assert store.path_for("customer:42/foryou_profile_v2").parent == tmp_path / "state"

    store.delete("customer:42/foryou_profile_v2")
    assert store.read("customer:42/foryou_profile_v2") is None
    store.delete("customer:42/foryou_profile_v2")


def test_file_store_missing_key_is_none(tmp_path):
    """Test that an unknown key reads as None."""
    assert FileKeyValueStore(str(tmp_path)).read("nothing") is None


def test_file_store_invalid_json_raises(tmp_path):
    """Test that a corrupt document raises a read error."""
    store = FileKeyValueStore(str(tmp_path))
    store.path_for("broken").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageReadError) as exc_info:
        store.read("broken")
    assert exc_info.value.key == "broken"


def test_file_store_ignores_non_object_documents(tmp_path):
    """Test that a JSON array document is treated as missing."""
    store = FileKeyValueStore(str(tmp_path))
    store.path_for("array").write_text("[1, 2]", encoding="utf-8")
    assert store.read("array") is None


def test_file_store_rejects_unserializable_payload(tmp_path):
    """Test that payloads json cannot encode raise a write error."""
    store = FileKeyValueStore(str(tmp_path))
    with pytest.raises(StorageWriteError):
        store.write("bad", {"value": object()})
