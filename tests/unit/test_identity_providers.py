from foryou_runtime.adapters.identity.cached_identity_provider import CachedIdentityProvider
from foryou_runtime.adapters.identity.static_identity_provider import StaticIdentityProvider
from foryou_runtime.ports.identity_provider import ANONYMOUS, Identity


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class FailingProvider:
    def __init__(self):
        self.calls = 0

    def resolve(self):
        self.calls += 1
        raise RuntimeError("auth service down")


def test_static_provider():
    """Test authenticated and anonymous static identities."""
    identity = StaticIdentityProvider("42").resolve()
    assert identity == Identity(customer_id="42", is_authenticated=True)
    assert identity.storage_scope == "customer:42"

    anonymous = StaticIdentityProvider("").resolve()
    assert not anonymous.is_authenticated
    assert anonymous.storage_scope == "anonymous"


def test_cached_provider_reuses_identity_until_expiry():
    """Test that the wrapped provider is consulted once per TTL window."""
    inner = StaticIdentityProvider("42")
    clock = FakeClock()
    provider = CachedIdentityProvider(inner, ttl_seconds=60, clock=clock)

    provider.resolve()
    clock.now += 59
    provider.resolve()
    assert inner.resolve_count == 1

    clock.now += 1
    assert provider.resolve().customer_id == "42"
    assert inner.resolve_count == 2


def test_cached_provider_invalidate():
    """Test that invalidation forces a fresh lookup."""
    inner = StaticIdentityProvider("42")
    provider = CachedIdentityProvider(inner, clock=FakeClock())
    provider.resolve()
    provider.invalidate()
    provider.resolve()
    assert inner.resolve_count == 2


def test_cached_provider_treats_failures_as_anonymous():
    """Test that lookup errors degrade to an anonymous identity, cached for the TTL."""
    inner = FailingProvider()
    provider = CachedIdentityProvider(inner, ttl_seconds=30, clock=FakeClock())

    assert provider.resolve() == ANONYMOUS
    assert provider.resolve() == ANONYMOUS
    assert inner.calls == 1
