from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InterestProfileConfig:
    half_life_hours: float = 72.0
    max_entry_score: float = 500.0
    max_age_days: int = 120
    max_bucket_entries: int = 100
    recent_handles_limit: int = 50
    recently_served_limit: int = 80
    max_json_bytes: int = 48 * 1024
    # Progressively smaller per-bucket caps tried when over the byte budget
    compaction_caps: tuple[int, ...] = (80, 60, 40, 30, 20, 12, 8, 5, 3, 2, 1)
    cold_start_threshold: float = 0.1
    hash_top_keys: int = 12
    hash_tracked_handles: int = 20
    summary_top_keys: int = 5
