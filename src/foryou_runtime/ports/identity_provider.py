from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class Identity:
    customer_id: Optional[str]
    is_authenticated: bool

    @property
    def storage_scope(self) -> str:
        if self.is_authenticated and self.customer_id:
            return f"customer:{self.customer_id}"
        return "anonymous"


ANONYMOUS = Identity(customer_id=None, is_authenticated=False)


class IdentityProvider(Protocol):
    def resolve(self) -> Identity: ...
