from __future__ import annotations

import copy
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from foryou_runtime.application.errors import RemoteAccessDeniedError, StorageError
from foryou_runtime.ports.identity_provider import Identity, IdentityProvider
from foryou_runtime.ports.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class TieredStateRepository:
    """
    Device-local store with an optional identity-scoped remote store on top.

    Reads wait for earlier writes. The remote copy wins when the user is
    authenticated, the remote is reachable and it holds a non-empty value;
    that value is copied to the local store. Otherwise the local copy is
    returned. Read failures degrade to None.

    Writes and resets run on a single background worker, in submission
    order, and never raise. A permission-denied response from the remote
    disables remote writes for the rest of the session while local writes
    continue.
    """

    def __init__(
        self,
        local: KeyValueStore,
        identity_provider: IdentityProvider,
        remote: Optional[KeyValueStore] = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._identity_provider = identity_provider
        self._remote_writes_disabled = False
        self._flag_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="foryou-state")

    @property
    def remote_writes_disabled(self) -> bool:
        with self._flag_lock:
            return self._remote_writes_disabled

    def get(self, key: str) -> Optional[dict]:
        # Queued behind pending writes so a read sees every earlier set()
        local_value = self._executor.submit(self._read_local, key).result()
        identity = self._identity_provider.resolve()
        if self._remote is None or not identity.is_authenticated:
            return local_value

        try:
            remote_value = self._remote.read(self._remote_key(identity, key))
        except StorageError as e:
            logger.warning(f"Remote read failed for {key}, using local copy: {e}")
            return local_value

        if not remote_value:
            return local_value
        self._executor.submit(self._write_local, key, copy.deepcopy(remote_value))
        return remote_value

    def set(self, key: str, payload: dict) -> None:
        identity = self._identity_provider.resolve()
        self._executor.submit(self._write, key, copy.deepcopy(payload), identity)

    def reset(self, key: str) -> None:
        identity = self._identity_provider.resolve()
        self._executor.submit(self._delete, key, identity)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every write submitted so far has finished."""
        self._executor.submit(lambda: None).result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _remote_key(self, identity: Identity, key: str) -> str:
        return f"{identity.storage_scope}/{key}"

    def _read_local(self, key: str) -> Optional[dict]:
        try:
            return self._local.read(key)
        except StorageError as e:
            logger.warning(f"Local read failed for {key}: {e}")
            return None

    def _write_local(self, key: str, payload: dict) -> None:
        try:
            self._local.write(key, payload)
        except StorageError as e:
            logger.error(f"Local write failed for {key}: {e}")
        except Exception:
            logger.exception(f"Unexpected local write failure for {key}")

    def _write(self, key: str, payload: dict, identity: Identity) -> None:
        self._write_local(key, payload)
        if self._remote is None or not identity.is_authenticated or self.remote_writes_disabled:
            return
        try:
            self._remote.write(self._remote_key(identity, key), payload)
        except RemoteAccessDeniedError as e:
            with self._flag_lock:
                self._remote_writes_disabled = True
            logger.warning(f"Remote store denied write for {key}; remote writes disabled for this session: {e}")
        except StorageError as e:
            logger.error(f"Remote write failed for {key}: {e}")
        except Exception:
            logger.exception(f"Unexpected remote write failure for {key}")

    def _delete(self, key: str, identity: Identity) -> None:
        try:
            self._local.delete(key)
        except StorageError as e:
            logger.error(f"Local reset failed for {key}: {e}")
        if self._remote is None or not identity.is_authenticated:
            return
        try:
            self._remote.delete(self._remote_key(identity, key))
        except StorageError as e:
            logger.warning(f"Remote reset failed for {key}: {e}")
