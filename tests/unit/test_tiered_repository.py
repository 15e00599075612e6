import time

from foryou_runtime.adapters.identity.static_identity_provider import StaticIdentityProvider
from foryou_runtime.adapters.storage.in_memory_store import InMemoryKeyValueStore
from foryou_runtime.application.errors import (
    RemoteAccessDeniedError,
    StorageReadError,
    StorageWriteError,
)
from foryou_runtime.application.repository import TieredStateRepository

KEY = "foryou_profile_v2"
REMOTE_KEY = "customer:42/foryou_profile_v2"


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store that can be told to fail reads or writes."""

    def __init__(self, initial=None, read_error=None, write_error=None):
        super().__init__(initial)
        self.read_error = read_error
        self.write_error = write_error
        self.write_attempts = 0

    def read(self, key):
        if self.read_error is not None:
            raise self.read_error
        return super().read(key)

    def write(self, key, payload):
        self.write_attempts += 1
        if self.write_error is not None:
            raise self.write_error
        super().write(key, payload)


def make_repository(local=None, remote=None, customer_id="42"):
    return TieredStateRepository(
        local=local if local is not None else InMemoryKeyValueStore(),
        identity_provider=StaticIdentityProvider(customer_id),
        remote=remote,
    )


def test_anonymous_user_reads_and_writes_locally():
    """Test that without an identity only the local store is used."""
    local = InMemoryKeyValueStore()
    remote = InMemoryKeyValueStore()
    repo = make_repository(local, remote, customer_id=None)

    repo.set(KEY, {"value": 1})
    repo.flush()

    assert repo.get(KEY) == {"value": 1}
    assert remote.keys() == []
    repo.close()


def test_writes_go_to_both_stores_for_authenticated_user():
    """Test write-through to the local and identity-scoped remote keys."""
    local = InMemoryKeyValueStore()
    remote = InMemoryKeyValueStore()
    repo = make_repository(local, remote)

    repo.set(KEY, {"value": 1})
    repo.flush()

    assert local.read(KEY) == {"value": 1}
    assert remote.read(REMOTE_KEY) == {"value": 1}
    repo.close()


def test_remote_value_wins_and_is_copied_locally():
    """Test remote precedence on read with a local write-back."""
    local = InMemoryKeyValueStore({KEY: {"value": "local"}})
    remote = InMemoryKeyValueStore({REMOTE_KEY: {"value": "remote"}})
    repo = make_repository(local, remote)

    assert repo.get(KEY) == {"value": "remote"}
    repo.flush()
    assert local.read(KEY) == {"value": "remote"}
    repo.close()


def test_empty_remote_value_falls_back_to_local():
    """Test that a missing or empty remote document does not shadow local state."""
    local = InMemoryKeyValueStore({KEY: {"value": "local"}})
    remote = InMemoryKeyValueStore({REMOTE_KEY: {}})
    repo = make_repository(local, remote)

    assert repo.get(KEY) == {"value": "local"}
    repo.close()


def test_remote_read_failure_degrades_to_local():
    """Test that a failing remote read returns the local copy."""
    local = InMemoryKeyValueStore({KEY: {"value": "local"}})
    remote = FlakyStore(read_error=StorageReadError("timeout"))
    repo = make_repository(local, remote)

    assert repo.get(KEY) == {"value": "local"}
    repo.close()


def test_local_read_failure_returns_none():
    """Test that read errors never escape the repository."""
    repo = make_repository(FlakyStore(read_error=StorageReadError("corrupt")))
    assert repo.get(KEY) is None
    repo.close()


def test_permission_denied_disables_remote_writes():
    """Test that one denied write stops remote writes while local writes continue."""
    local = InMemoryKeyValueStore()
    remote = FlakyStore(write_error=RemoteAccessDeniedError("forbidden"))
    repo = make_repository(local, remote)

    repo.set(KEY, {"value": 1})
    repo.set(KEY, {"value": 2})
    repo.flush()

    assert repo.remote_writes_disabled
    assert remote.write_attempts == 1
    assert local.read(KEY) == {"value": 2}
    repo.close()


def test_other_remote_write_errors_keep_remote_enabled():
    """Test that transient remote failures are logged and retried on the next write."""
    remote = FlakyStore(write_error=StorageWriteError("unavailable"))
    repo = make_repository(remote=remote)

    repo.set(KEY, {"value": 1})
    repo.set(KEY, {"value": 2})
    repo.flush()

    assert not repo.remote_writes_disabled
    assert remote.write_attempts == 2
    repo.close()


def test_writes_apply_in_submission_order():
    """Test that the last submitted write wins."""
    local = InMemoryKeyValueStore()
    repo = make_repository(local, customer_id=None)
    for i in range(20):
        repo.set(KEY, {"value": i})
    repo.flush()
    assert local.read(KEY) == {"value": 19}
    repo.close()


def test_set_copies_payload():
    """Test that later caller mutation does not leak into stored state."""
    local = InMemoryKeyValueStore()
    repo = make_repository(local, customer_id=None)
    payload = {"items": [1]}
    repo.set(KEY, payload)
    payload["items"].append(2)
    repo.flush()
    assert local.read(KEY) == {"items": [1]}
    repo.close()


def test_reset_removes_both_copies():
    """Test that reset clears the local and remote documents."""
    local = InMemoryKeyValueStore({KEY: {"value": 1}})
    remote = InMemoryKeyValueStore({REMOTE_KEY: {"value": 1}})
    repo = make_repository(local, remote)

    repo.reset(KEY)
    repo.flush()

    assert local.read(KEY) is None
    assert remote.read(REMOTE_KEY) is None
    assert repo.get(KEY) is None
    repo.close()


class SlowStore(InMemoryKeyValueStore):
    """In-memory store whose writes take a while to land."""

    def write(self, key, payload):
        time.sleep(0.05)
        super().write(key, payload)


def test_read_waits_for_pending_writes():
    """Test that a read right after set() sees the value without an explicit flush."""
    repo = make_repository(SlowStore(), customer_id=None)
    repo.set(KEY, {"value": 1})
    repo.set(KEY, {"value": 2})

    assert repo.get(KEY) == {"value": 2}
    repo.close()
