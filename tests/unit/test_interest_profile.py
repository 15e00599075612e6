from dataclasses import replace
from datetime import datetime, timezone

import pytest

from foryou_runtime.domain.common.schema import INTEREST_PROFILE_SCHEMA, is_valid
from foryou_runtime.domain.common.timeutils import MS_PER_DAY, MS_PER_HOUR, to_iso
from foryou_runtime.domain.primitives.interest_profile import (
    InterestEvent,
    InterestProfile,
    InterestProfileConfig,
    ProfileSignals,
    ScoreEntry,
    apply_event,
    apply_served_cooldown,
    create_empty_profile,
    derive_event_semantics,
    effective_score,
    get_profile_hash,
    is_cold_start,
    measure_profile_bytes,
    normalize_gender,
    normalize_profile,
    profile_signal_summary,
    prune_profile,
    rules,
)

T0 = int(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)
NOW_ISO = to_iso(T0)


def make_event(event_type: str = rules.PRODUCT_OPEN, **kwargs) -> InterestEvent:
    defaults = {
        "handle": "blue-denim-jeans",
        "vendor": "Acme",
        "product_type": "Jeans",
        "tags": ["Denim", "Slim Fit"],
    }
    defaults.update(kwargs)
    return InterestEvent.new(type=event_type, **defaults)


def make_profile(**buckets) -> InterestProfile:
    profile = create_empty_profile(NOW_ISO)
    return replace(profile, signals=ProfileSignals(**buckets))


def test_product_open_bumps_every_bucket():
    """Test that one product open applies the per-bucket weights."""
    profile = apply_event(create_empty_profile(NOW_ISO), make_event(), NOW_ISO)
    signals = profile.signals

    assert signals.by_product_handle["blue-denim-jeans"] == ScoreEntry(score=2.5, last_at=NOW_ISO)
    assert signals.by_vendor["acme"].score == 1.4
    assert signals.by_product_type["jeans"].score == 0.9
    assert signals.by_tag["denim"].score == 0.5
    assert signals.by_tag["slim fit"].score == 0.5
    assert signals.by_category["bottoms_denim"].score == 1.25
    assert signals.by_material["denim"].score == 0.8
    assert signals.by_fit["slim"].score == 0.65
    assert signals.recent_handles == ("blue-denim-jeans",)
    assert profile.updated_at == NOW_ISO


def test_apply_event_does_not_mutate_input():
    """Test that the original profile is left untouched."""
    original = create_empty_profile(NOW_ISO)
    apply_event(original, make_event(), NOW_ISO)
    assert original.signals.by_product_handle == {}
    assert original.signals.recent_handles == ()


def test_add_to_cart_weights_and_score_cap():
    """Test heavier cart weights and the per-entry cap."""
    profile = create_empty_profile(NOW_ISO)
    profile = apply_event(profile, make_event(rules.ADD_TO_CART), NOW_ISO)
    assert profile.signals.by_product_handle["blue-denim-jeans"].score == 4.5

    for _ in range(200):
        profile = apply_event(profile, make_event(rules.ADD_TO_CART), NOW_ISO)
    assert profile.signals.by_product_handle["blue-denim-jeans"].score == 500


def test_recent_handles_move_to_front_and_are_bounded():
    """Test most-recent-first ordering without duplicates."""
    profile = create_empty_profile(NOW_ISO)
    for handle in ("a-item", "b-item", "a-item"):
        profile = apply_event(profile, make_event(handle=handle), NOW_ISO)
    assert profile.signals.recent_handles == ("a-item", "b-item")

    for i in range(60):
        profile = apply_event(profile, make_event(handle=f"item-{i}", tags=[]), NOW_ISO)
    assert len(profile.signals.recent_handles) == 50
    assert profile.signals.recent_handles[0] == "item-59"


def test_unknown_event_type_leaves_profile_unchanged():
    """Test that unsupported event types are ignored."""
    profile = create_empty_profile(NOW_ISO)
    assert apply_event(profile, make_event("page_view"), NOW_ISO) is profile


def test_event_semantics():
    """Test coarse category, material and fit derivation from tags."""
    semantics = derive_event_semantics(["Relaxed Cargo", "wool blend"], product_type="Pants")
    assert semantics.category == "bottoms_pants"
    assert semantics.materials == ("wool",)
    assert semantics.fits == ("relaxed",)
    assert derive_event_semantics([]).category == "unknown"


def test_effective_score_half_life():
    """Test that a 72 hour old entry counts for half."""
    entry = ScoreEntry(score=4.0, last_at=to_iso(T0 - 72 * MS_PER_HOUR))
    assert effective_score(entry, T0) == pytest.approx(2.0)
    assert effective_score(entry, T0, InterestProfileConfig(half_life_hours=24)) == pytest.approx(0.5)
    assert effective_score(None, T0) == 0.0
    assert effective_score(ScoreEntry(score=-1.0, last_at=NOW_ISO), T0) == 0.0


def test_decay_preserves_recency_order():
    """Test that of two equal raw scores the more recent one is stronger."""
    older = ScoreEntry(score=3.0, last_at=to_iso(T0 - 10 * MS_PER_DAY))
    newer = ScoreEntry(score=3.0, last_at=to_iso(T0 - 1 * MS_PER_DAY))
    assert effective_score(newer, T0) > effective_score(older, T0) > 0


def test_prune_drops_stale_and_keeps_top_entries():
    """Test age based removal and the per-bucket entry bound."""
    profile = make_profile(
        by_vendor={
            "old": ScoreEntry(score=5.0, last_at=to_iso(T0 - 121 * MS_PER_DAY)),
            "fresh": ScoreEntry(score=1.0, last_at=NOW_ISO),
            "undated": ScoreEntry(score=9.0, last_at="yesterday-ish"),
        },
        by_tag={f"tag-{i:03d}": ScoreEntry(score=float(i + 1), last_at=NOW_ISO) for i in range(150)},
    )
    pruned = prune_profile(profile, T0)

    assert set(pruned.signals.by_vendor) == {"fresh"}
    assert len(pruned.signals.by_tag) == 100
    assert "tag-149" in pruned.signals.by_tag
    assert "tag-049" not in pruned.signals.by_tag


def test_compaction_fits_byte_budget():
    """Test that an oversized profile is compacted under the configured budget."""
    config = InterestProfileConfig(max_json_bytes=5000)
    profile = make_profile(
        by_tag={f"long-tag-name-{i:03d}": ScoreEntry(score=float(i + 1), last_at=NOW_ISO) for i in range(100)},
        by_product_handle={"keep-me": ScoreEntry(score=50.0, last_at=NOW_ISO)},
    )
    assert measure_profile_bytes(profile) > 5000

    compacted = prune_profile(profile, T0, config)
    assert measure_profile_bytes(compacted) <= 5000
    assert 0 < len(compacted.signals.by_tag) < 100
    assert "long-tag-name-099" in compacted.signals.by_tag
    assert "keep-me" in compacted.signals.by_product_handle


def test_normalize_profile_round_trip():
    """Test that a serialized profile validates and loads back unchanged."""
    profile = apply_event(create_empty_profile(NOW_ISO), make_event(), NOW_ISO)
    profile = apply_served_cooldown(profile, ["served-one"], NOW_ISO)
    payload = profile.as_dict()

    assert is_valid(payload, INTEREST_PROFILE_SCHEMA)
    assert normalize_profile(payload, NOW_ISO) == profile


def test_normalize_profile_from_garbage():
    """Test that unusable input yields an empty profile."""
    for raw in (None, "x", 42, [], {"signals": "nope", "gender": 7}):
        profile = normalize_profile(raw, NOW_ISO)
        assert profile.gender == rules.GENDER_UNKNOWN
        assert all(bucket == {} for bucket in profile.signals.buckets().values())
        assert profile.schema_version == 2


def test_normalize_profile_migrates_legacy_camel_case():
    """Test field-by-field migration of the older camelCase shape."""
    raw = {
        "updatedAt": "2024-01-01T00:00:00Z",
        "gender": "Female",
        "signals": {
            "byProductHandle": {
                "Foo": {"score": 3, "lastAt": "2024-01-01T00:00:00Z"},
                "bar": {"score": -1, "lastAt": "2024-01-01T00:00:00Z"},
                "baz": {"score": 2},
            },
            "byVendor": {"Acme": {"score": "1.5", "lastAt": "2024-01-01T00:00:00Z"}},
            "recentHandles": ["Foo", "foo", "Baz", 7],
        },
        "cooldowns": {"recentlyServedHandles": ["X"]},
    }
    profile = normalize_profile(raw, NOW_ISO)

    assert profile.gender == rules.GENDER_FEMALE
    assert profile.updated_at == "2024-01-01T00:00:00Z"
    assert profile.signals.by_product_handle == {"foo": ScoreEntry(score=3.0, last_at="2024-01-01T00:00:00Z")}
    assert profile.signals.by_vendor["acme"].score == 1.5
    assert profile.signals.recent_handles == ("foo", "baz")
    assert profile.recently_served_handles == ("x",)


def test_normalize_gender():
    """Test the declared preference flag normalization."""
    assert normalize_gender(" MALE ") == rules.GENDER_MALE
    assert normalize_gender("female") == rules.GENDER_FEMALE
    assert normalize_gender("other") == rules.GENDER_UNKNOWN
    assert normalize_gender(None) == rules.GENDER_UNKNOWN


def test_served_cooldown_front_loads_and_bounds():
    """Test that served handles go first, deduplicated, within the limit."""
    profile = replace(create_empty_profile(NOW_ISO), recently_served_handles=("a", "b"))
    cooled = apply_served_cooldown(profile, ["C", "a"], NOW_ISO)
    assert cooled.recently_served_handles == ("c", "a", "b")

    many = apply_served_cooldown(profile, [f"item-{i}" for i in range(100)], NOW_ISO)
    assert len(many.recently_served_handles) == 80
    assert many.recently_served_handles[0] == "item-0"


def test_cold_start():
    """Test cold start detection with and without decayed signal."""
    empty = create_empty_profile(NOW_ISO)
    assert is_cold_start(empty, T0)

    warm = apply_event(empty, make_event(), NOW_ISO)
    assert not is_cold_start(warm, T0)
    assert is_cold_start(warm, T0 + 2000 * MS_PER_DAY)


def test_profile_hash():
    """Test that the fingerprint ignores timestamps but tracks strongest keys."""
    a = create_empty_profile(NOW_ISO)
    b = create_empty_profile(to_iso(T0 + MS_PER_DAY))
    assert get_profile_hash(a) == get_profile_hash(b)
    assert len(get_profile_hash(a)) == 8

    warm = apply_event(a, make_event(), NOW_ISO)
    assert get_profile_hash(warm) != get_profile_hash(a)
    assert get_profile_hash(replace(a, gender=rules.GENDER_MALE)) != get_profile_hash(a)


def test_profile_hash_includes_leading_tracked_handles():
    """Test that tracker handles change the fingerprint, but only up to the configured count."""
    profile = create_empty_profile(NOW_ISO)
    config = InterestProfileConfig(hash_tracked_handles=2)
    plain = get_profile_hash(profile, config)

    assert get_profile_hash(profile, config, ["a", "b"]) != plain
    assert get_profile_hash(profile, config, ["", "  "]) == plain
    assert get_profile_hash(profile, config, ["a", "b", "c"]) == get_profile_hash(profile, config, ["A", "b", "z"])
    assert get_profile_hash(profile, config, ["b", "a"]) != get_profile_hash(profile, config, ["a", "b"])


def test_profile_signal_summary():
    """Test the debug summary shape."""
    profile = apply_event(create_empty_profile(NOW_ISO), make_event(), NOW_ISO)
    summary = profile_signal_summary(profile, T0)

    assert summary["cold_start"] is False
    assert summary["recent_handles"] == ["blue-denim-jeans"]
    assert summary[rules.BY_PRODUCT_HANDLE][0] == {"key": "blue-denim-jeans", "effective_score": 2.5}
    assert len(summary[rules.BY_TAG]) == 5
