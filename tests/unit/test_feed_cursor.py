import base64
import json

from foryou_runtime.application.feed_cursor import MAX_CURSOR_HANDLES, FeedCursor


def test_cursor_round_trip():
    """Test that an encoded cursor decodes back for the same seed."""
    cursor = FeedCursor(seed_handle="blue-denim-jeans", page=2, refresh_key="3", served_handles=("a", "b"))
    token = cursor.encode()

    assert "=" not in token
    assert FeedCursor.decode(token, "Blue-Denim-Jeans") == cursor


def test_missing_or_garbage_token_starts_at_first_page():
    """Test that unreadable tokens fall back to page 0."""
    for token in (None, "", "not-base64!!", "aGVsbG8"):
        cursor = FeedCursor.decode(token, "seed")
        assert cursor == FeedCursor(seed_handle="seed")


def test_token_for_other_seed_is_ignored():
    """Test that a cursor issued for another seed product starts over."""
    token = FeedCursor(seed_handle="other", page=4, served_handles=("x",)).encode()
    assert FeedCursor.decode(token, "seed") == FeedCursor(seed_handle="seed")


def test_advance_moves_page_and_merges_served():
    """Test advancing keeps served handles unique and bounded."""
    cursor = FeedCursor(seed_handle="seed", served_handles=("a",))
    advanced = cursor.advance(["b", "A"])
    assert advanced.page == 1
    assert advanced.served_handles == ("a", "b")

    crowded = cursor.advance([f"item-{i}" for i in range(300)])
    assert len(crowded.served_handles) == MAX_CURSOR_HANDLES
    assert crowded.served_handles[0] == "a"


def test_decode_sanitizes_fields():
    """Test that malformed fields inside a readable token are replaced."""

    raw = json.dumps({"seed": "seed", "page": -2, "refresh": 5, "served": ["A", "a", 3]}).encode("utf-8")
    token = base64.urlsafe_b64encode(raw).decode("ascii")
    cursor = FeedCursor.decode(token, "seed")

    assert cursor.page == 0
    assert cursor.refresh_key == "0"
    assert cursor.served_handles == ("a",)
