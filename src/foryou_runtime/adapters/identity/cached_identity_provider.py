from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from foryou_runtime.ports.identity_provider import ANONYMOUS, Identity, IdentityProvider

logger = logging.getLogger(__name__)


class CachedIdentityProvider(IdentityProvider):
    """Caches the wrapped provider's answer for ``ttl_seconds``."""

    def __init__(
        self,
        inner: IdentityProvider,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._cached: Optional[Identity] = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def resolve(self) -> Identity:
        with self._lock:
            now = self._clock()
            if self._cached is not None and now < self._expires_at:
                return self._cached
            try:
                identity = self._inner.resolve()
            except Exception:
                logger.exception("Identity lookup failed; treating user as anonymous")
                identity = ANONYMOUS
            self._cached = identity
            self._expires_at = now + self._ttl_seconds
            return identity

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None
            self._expires_at = 0.0
