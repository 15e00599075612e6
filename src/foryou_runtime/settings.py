from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Runtime settings sourced from environment variables."""

    log_level: str = "INFO"
    runtime_adapters: str = "memory"
    storage_dir: str = "/tmp/foryou-runtime-state"
    # Decay and bounds
    half_life_hours: float = 72.0
    max_tracked_products: int = 200
    intelligence_cache_size: int = 800
    # Feed defaults
    default_page_size: int = 14
    # Identity
    identity_ttl_seconds: float = 60.0
    customer_id: Optional[str] = None
    # Debug sink; never enable in production
    debug_enabled: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            runtime_adapters=os.getenv("RUNTIME_ADAPTERS", cls.runtime_adapters).lower(),
            storage_dir=os.getenv("FORYOU_STORAGE_DIR", cls.storage_dir),
            half_life_hours=float(os.getenv("FORYOU_HALF_LIFE_HOURS", cls.half_life_hours)),
            max_tracked_products=int(os.getenv("FORYOU_MAX_TRACKED_PRODUCTS", cls.max_tracked_products)),
            intelligence_cache_size=int(os.getenv("FORYOU_INTELLIGENCE_CACHE_SIZE", cls.intelligence_cache_size)),
            default_page_size=int(os.getenv("FORYOU_DEFAULT_PAGE_SIZE", cls.default_page_size)),
            identity_ttl_seconds=float(os.getenv("FORYOU_IDENTITY_TTL_SECONDS", cls.identity_ttl_seconds)),
            customer_id=os.getenv("FORYOU_CUSTOMER_ID"),
            debug_enabled=os.getenv("FORYOU_DEBUG_ENABLED", "false").lower() in ("true", "1", "yes"),
        )


def get_settings(_cache: dict[str, Settings] = {}) -> Settings:
    """Provide a simple cached settings object."""

    if "settings" not in _cache:
        _cache["settings"] = Settings.from_env()
    return _cache["settings"]
