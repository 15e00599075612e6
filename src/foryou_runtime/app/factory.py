from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from foryou_runtime.ports.catalog_source import CatalogSource
    from foryou_runtime.ports.debug_sink import DebugSink
    from foryou_runtime.ports.identity_provider import IdentityProvider
    from foryou_runtime.ports.key_value_store import KeyValueStore

from foryou_runtime.adapters.debug.logging_debug_sink import LoggingDebugSink
from foryou_runtime.adapters.debug.noop_debug_sink import NoopDebugSink
from foryou_runtime.adapters.identity.cached_identity_provider import CachedIdentityProvider
from foryou_runtime.adapters.identity.static_identity_provider import StaticIdentityProvider
from foryou_runtime.adapters.storage.file_store import FileKeyValueStore
from foryou_runtime.adapters.storage.in_memory_store import InMemoryKeyValueStore
from foryou_runtime.application.feed_service import ForYouFeedService
from foryou_runtime.application.repository import TieredStateRepository
from foryou_runtime.settings import Settings, get_settings

SUPPORTED_ADAPTERS = ("memory", "file")


def create_adapters(
    settings: Optional[Settings] = None,
    remote_store: Optional["KeyValueStore"] = None,
) -> tuple["TieredStateRepository", "IdentityProvider", "DebugSink"]:
    """
    Factory function to create adapters based on the RUNTIME_ADAPTERS setting.

    RUNTIME_ADAPTERS=file keeps device-local state as JSON files under
    FORYOU_STORAGE_DIR; the default keeps it in memory. A remote store is
    only used when one is passed in.
    """
    settings = settings or get_settings()
    if settings.runtime_adapters not in SUPPORTED_ADAPTERS:
        raise ValueError(
            f"Unsupported RUNTIME_ADAPTERS value {settings.runtime_adapters!r}; "
            f"expected one of {', '.join(SUPPORTED_ADAPTERS)}"
        )

    local_store: KeyValueStore
    if settings.runtime_adapters == "file":
        local_store = FileKeyValueStore(settings.storage_dir)
    else:
        local_store = InMemoryKeyValueStore()

    identity_provider: IdentityProvider = CachedIdentityProvider(
        StaticIdentityProvider(settings.customer_id),
        ttl_seconds=settings.identity_ttl_seconds,
    )
    debug_sink: DebugSink = LoggingDebugSink() if settings.debug_enabled else NoopDebugSink()
    repository = TieredStateRepository(local_store, identity_provider, remote=remote_store)
    return (repository, identity_provider, debug_sink)


def create_feed_service(
    catalog: "CatalogSource",
    settings: Optional[Settings] = None,
    remote_store: Optional["KeyValueStore"] = None,
) -> ForYouFeedService:
    settings = settings or get_settings()
    repository, _, debug_sink = create_adapters(settings, remote_store)
    service = ForYouFeedService(catalog=catalog, repository=repository, debug_sink=debug_sink, settings=settings)
    service.load()
    return service
