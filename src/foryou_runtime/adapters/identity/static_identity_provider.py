from __future__ import annotations

from typing import Optional

from foryou_runtime.ports.identity_provider import Identity, IdentityProvider


class StaticIdentityProvider(IdentityProvider):
    """Fixed identity; authenticated whenever a customer id is supplied."""

    def __init__(self, customer_id: Optional[str] = None) -> None:
        self.customer_id = customer_id or None
        self.resolve_count = 0

    def resolve(self) -> Identity:
        self.resolve_count += 1
        return Identity(customer_id=self.customer_id, is_authenticated=self.customer_id is not None)
