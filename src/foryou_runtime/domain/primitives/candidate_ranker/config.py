from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CandidateRankerConfig:
    # Seed similarity
    same_category_bonus: float = 10.0
    same_sub_category_bonus: float = 6.0
    material_weight: float = 2.0
    material_cap: float = 4.0
    fit_weight: float = 1.5
    fit_cap: float = 3.0
    style_weight: float = 1.5
    style_cap: float = 3.0
    color_weight: float = 1.1
    color_cap: float = 2.0
    term_weight: float = 0.7
    term_cap: float = 5.0
    term_position_scale: float = 16.0
    same_vendor_bonus: float = 3.0
    same_product_type_bonus: float = 3.0
    # User affinity
    handle_affinity_weight: float = 2.0
    vendor_affinity_weight: float = 1.4
    product_type_affinity_weight: float = 1.1
    tag_affinity_weight: float = 0.8
    category_affinity_weight: float = 1.2
    material_affinity_weight: float = 0.7
    fit_affinity_weight: float = 0.65
    cold_start_max_handles: int = 2
    cold_affinity_multiplier: float = 0.35
    warm_affinity_multiplier: float = 0.5
    # Exploration
    freshness_days: float = 28.0
    missing_age_days: float = 365.0
    same_category_adjacency: float = 1.1
    related_category_adjacency: float = 0.72
    distant_category_adjacency: float = 0.22
    cold_exploration_multiplier: float = 0.16
    warm_exploration_multiplier: float = 0.1
    # Category penalty
    unrelated_category_penalty: float = 6.0
    near_category_penalty: float = 2.5
    jitter_spread: float = 0.1
    # Early category guard
    early_guard_window: int = 10
    early_guard_penalty: float = 8.0
    early_guard_drop_below: float = -4.0
    # Seed terms
    max_seed_terms: int = 40
    max_seed_signal_terms: int = 36
    max_seed_derived_tags: int = 24
    # Affinity tracker
    tracked_affinity_weight: float = 0.3
    # Cooldown and vendor diversity
    recently_served_penalty: float = 3.0
    vendor_window: int = 12
    vendor_window_cap: int = 3
    vendor_repeat_penalty: float = 1.8
    # Seedless grid
    grid_handle_weight: float = 2.8
    grid_vendor_weight: float = 1.7
    grid_product_type_weight: float = 1.3
    grid_tag_weight: float = 0.9
    grid_recent_boost: float = 1.25
    familiarity_handle_weight: float = 2.2
    familiarity_vendor_weight: float = 1.4
    familiarity_product_type_weight: float = 1.0
    familiarity_tag_weight: float = 0.7
    novelty_weight: float = 3.0
    grid_freshness_days: float = 20.0
    grid_freshness_weight: float = 1.6
    depth_amplifier_step: float = 0.04
    depth_amplifier_cap: float = 0.4
    grid_jitter_spread: float = 0.08
    # Cold start grid: stock first, then newest
    cold_start_stock_score: float = 1000.0
    cold_start_jitter_spread: float = 0.2
