from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """
    JSON document storage keyed by string.

    Implementations raise StorageReadError / StorageWriteError on transport
    failures and RemoteAccessDeniedError when the store rejects the caller.
    """

    def read(self, key: str) -> Optional[dict]: ...

    def write(self, key: str, payload: dict) -> None: ...

    def delete(self, key: str) -> None: ...
