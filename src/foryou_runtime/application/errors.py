class StorageError(Exception):
    """Base class for persistence failures."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class RemoteAccessDeniedError(StorageWriteError):
    """Raised by remote stores when the caller is not authorized to write."""


class CatalogRecordError(Exception):
    """Raised when a raw catalog record cannot be turned into a product candidate."""

    def __init__(self, message: str, record_id: str | None = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.errors = errors or []
