from dataclasses import replace

from foryou_runtime.application.candidate_pool import (
    apply_refresh_novelty_window,
    exclude_served,
    filter_gender_pool,
    matches_gender_pool,
)
from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.primitives.interest_profile import create_empty_profile

NOW_ISO = "2024-01-10T12:00:00.000Z"


def make_candidate(handle: str, tags: list[str] | None = None) -> ProductCandidate:
    return ProductCandidate.new(handle=handle, tags=tags)


def test_gender_match_strict_and_loose():
    """Test strict and loose matching for a declared gender."""
    mens = make_candidate("a", ["Men", "denim"])
    unisex = make_candidate("b", ["denim"])
    both = make_candidate("c", ["men", "women"])

    assert matches_gender_pool(mens, "male")
    assert not matches_gender_pool(unisex, "male")
    assert not matches_gender_pool(both, "male")
    assert matches_gender_pool(unisex, "male", strict=False)
    assert not matches_gender_pool(mens, "female", strict=False)
    assert matches_gender_pool(both, "unknown")


def test_filter_gender_pool_prefers_strict_matches():
    """Test that strict matches win and loose matching is the fallback."""
    pool = [make_candidate("a", ["men"]), make_candidate("b", ["denim"]), make_candidate("c", ["women"])]

    assert [c.handle for c in filter_gender_pool(pool, "male")] == ["a"]
    assert [c.handle for c in filter_gender_pool(pool[1:], "male")] == ["b"]
    assert filter_gender_pool(pool, "unknown") == pool


def test_novelty_window_hides_recently_served_on_refresh():
    """Test that a refreshed first page hides the recently served window."""
    pool = [make_candidate(f"item-{i}") for i in range(40)]
    profile = replace(create_empty_profile(NOW_ISO), recently_served_handles=("item-0", "item-1"))

    fresh = apply_refresh_novelty_window(pool, profile, page_depth=0, refresh_round=1, page_size=14)
    assert [c.handle for c in fresh] == [f"item-{i}" for i in range(2, 40)]


def test_novelty_window_inactive_without_refresh_or_on_later_pages():
    """Test that the window only applies to refreshed first pages."""
    pool = [make_candidate(f"item-{i}") for i in range(40)]
    profile = replace(create_empty_profile(NOW_ISO), recently_served_handles=("item-0",))

    assert apply_refresh_novelty_window(pool, profile, page_depth=0, refresh_round=0, page_size=14) == pool
    assert apply_refresh_novelty_window(pool, profile, page_depth=1, refresh_round=2, page_size=14) == pool


def test_novelty_window_keeps_pool_when_too_few_fresh():
    """Test the minimum fresh pool guard."""
    pool = [make_candidate(f"item-{i}") for i in range(15)]
    profile = replace(
        create_empty_profile(NOW_ISO), recently_served_handles=tuple(f"item-{i}" for i in range(5))
    )
    assert apply_refresh_novelty_window(pool, profile, page_depth=0, refresh_round=1, page_size=14) == pool


def test_exclude_served_drops_cursor_handles():
    """Test that handles an earlier page served are removed, case-insensitively."""
    pool = [make_candidate("a"), make_candidate("B"), make_candidate("c")]

    assert [c.handle for c in exclude_served(pool, ["b", "x"])] == ["a", "c"]
    assert exclude_served(pool, []) == pool
    assert exclude_served(pool, [""]) == pool
