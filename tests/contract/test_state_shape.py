from datetime import datetime, timezone

from foryou_runtime.domain.common.schema import (
    AFFINITY_STATE_SCHEMA,
    INTEREST_PROFILE_SCHEMA,
    is_valid,
    validation_error,
)
from foryou_runtime.domain.common.timeutils import to_iso
from foryou_runtime.domain.primitives.affinity_tracker import ProductAffinity, to_payload
from foryou_runtime.domain.primitives.interest_profile import (
    InterestEvent,
    apply_event,
    apply_served_cooldown,
    create_empty_profile,
)

NOW = int(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)


def test_tracker_payload_matches_schema():
    """Test that the persisted tracker payload validates against its schema."""
    affinity = ProductAffinity(
        handle="blue-denim-jeans",
        raw_score=5.0,
        view_count=1,
        add_to_cart_count=1,
        first_interaction_at=NOW,
        last_interaction_at=NOW,
    )
    payload = to_payload({"blue-denim-jeans": affinity}, NOW)
    assert validation_error(payload, AFFINITY_STATE_SCHEMA) is None


def test_tracker_schema_rejects_legacy_shape():
    """Test that camelCase v1 payloads are not mistaken for the current shape."""
    legacy = {"products": {"Blue-Denim-Jeans": {"score": 3, "lastInteractionAt": NOW}}}
    assert not is_valid(legacy, AFFINITY_STATE_SCHEMA)


def test_profile_payload_matches_schema():
    """Test that a populated profile validates against its schema."""
    profile = create_empty_profile(to_iso(NOW))
    event = InterestEvent.new(
        type="add_to_cart", handle="blue-denim-jeans", vendor="Acme", product_type="Jeans", tags=["Denim", "Slim Fit"]
    )
    profile = apply_event(profile, event, to_iso(NOW))
    profile = apply_served_cooldown(profile, ["black-denim-jeans"], to_iso(NOW))
    assert validation_error(profile.as_dict(), INTEREST_PROFILE_SCHEMA) is None


def test_profile_schema_rejects_unnormalized_keys():
    """Test that upper case bucket keys fail validation."""
    payload = create_empty_profile(to_iso(NOW)).as_dict()
    payload["signals"]["by_vendor"] = {"Acme": {"score": 1.0, "last_at": to_iso(NOW)}}
    assert not is_valid(payload, INTEREST_PROFILE_SCHEMA)
