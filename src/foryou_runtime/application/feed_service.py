from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional

from foryou_runtime.application.candidate_pool import (
    apply_refresh_novelty_window,
    exclude_served,
    filter_gender_pool,
)
from foryou_runtime.application.feed_context import FeedContext
from foryou_runtime.application.feed_cursor import FeedCursor
from foryou_runtime.domain.catalog.model import ProductCandidate
from foryou_runtime.domain.common.timeutils import Clock, now_ms, to_iso
from foryou_runtime.domain.primitives.affinity_tracker import (
    AffinityTracker,
    AffinityTrackerConfig,
    ProductAffinity,
)
from foryou_runtime.domain.primitives.affinity_tracker import rules as tracker_rules
from foryou_runtime.domain.primitives.candidate_ranker import (
    CandidateRankerConfig,
    GuardResult,
    RankedItem,
    RankOptions,
    apply_early_category_guard,
    build_seed_terms,
    diversify_ranked,
    rank_candidates,
    rank_cold_start,
    rank_grid_candidates,
)
from foryou_runtime.domain.primitives.candidate_ranker import rules as ranker_rules
from foryou_runtime.domain.primitives.interest_profile import (
    InterestEvent,
    InterestProfile,
    InterestProfileConfig,
    apply_event,
    apply_served_cooldown,
    create_empty_profile,
    get_profile_hash,
    is_cold_start,
    normalize_gender,
    normalize_profile,
    profile_signal_summary,
    prune_profile,
)
from foryou_runtime.domain.primitives.interest_profile import rules as profile_rules
from foryou_runtime.domain.primitives.page_selector import (
    PageSelectorConfig,
    dedupe_candidates,
    exploration_ratio_for_depth,
    select_page,
)
from foryou_runtime.domain.primitives.product_intelligence import (
    ProductIntelligenceCache,
    ProductIntelligenceConfig,
)
from foryou_runtime.observability.logging import session_extra
from foryou_runtime.ports.catalog_source import CatalogRequest, CatalogSource
from foryou_runtime.ports.debug_sink import DebugSink
from foryou_runtime.ports.state_repository import StateRepository
from foryou_runtime.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedServiceConfig:
    catalog_limit: int = 220
    catalog_query_terms: int = 12
    profile_seed_handles: int = 16
    debug_top_n: int = 10


@dataclass(frozen=True)
class FeedPage:
    seed_handle: str
    page_depth: int
    items: list[RankedItem]
    exploit_count: int
    explore_count: int
    has_more: bool
    profile_hash: str
    gender: str
    next_cursor: Optional[str] = None
    debug: Optional[dict] = None

    @property
    def handles(self) -> list[str]:
        return [item.handle for item in self.items]

    @staticmethod
    def empty(ctx: FeedContext, profile: InterestProfile, profile_hash: str) -> "FeedPage":
        return FeedPage(
            seed_handle=ctx.seed_handle,
            page_depth=ctx.page_depth,
            items=[],
            exploit_count=0,
            explore_count=0,
            has_more=False,
            profile_hash=profile_hash,
            gender=profile.gender,
        )

    def as_dict(self) -> dict:
        out = {
            "seed_handle": self.seed_handle,
            "page_depth": self.page_depth,
            "items": [item.as_dict() for item in self.items],
            "exploit_count": self.exploit_count,
            "explore_count": self.explore_count,
            "has_more": self.has_more,
            "next_cursor": self.next_cursor,
            "profile_hash": self.profile_hash,
            "gender": self.gender,
        }
        if self.debug is not None:
            out["debug"] = self.debug
        return out


@dataclass
class _Configs:
    tracker: AffinityTrackerConfig
    profile: InterestProfileConfig
    intelligence: ProductIntelligenceConfig
    ranker: CandidateRankerConfig = field(default_factory=CandidateRankerConfig)
    selector: PageSelectorConfig = field(default_factory=PageSelectorConfig)

    @staticmethod
    def from_settings(settings: Settings) -> "_Configs":
        return _Configs(
            tracker=AffinityTrackerConfig(
                max_tracked_products=settings.max_tracked_products,
                half_life_hours=settings.half_life_hours,
            ),
            profile=InterestProfileConfig(half_life_hours=settings.half_life_hours),
            intelligence=ProductIntelligenceConfig(cache_size=settings.intelligence_cache_size),
            selector=PageSelectorConfig(default_page_size=settings.default_page_size),
        )


class ForYouFeedService:
    """
    One user's "For You" session: interest state plus feed page composition.

    Owns the affinity tracker, the interest profile and the classification
    cache. Profile and tracker state are read through the repository on
    ``load()`` and written back after every change.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        repository: StateRepository,
        debug_sink: Optional[DebugSink] = None,
        settings: Optional[Settings] = None,
        clock: Clock = now_ms,
        profile_key: str = profile_rules.DEFAULT_STORE_KEY,
        tracker_key: str = tracker_rules.DEFAULT_STORE_KEY,
        config: FeedServiceConfig = FeedServiceConfig(),
    ) -> None:
        settings = settings or get_settings()
        self.catalog = catalog
        self.repository = repository
        self.debug_sink = debug_sink
        self.profile_key = profile_key
        self.config = config
        self._clock = clock
        self._configs = _Configs.from_settings(settings)
        self.cache = ProductIntelligenceCache(self._configs.intelligence, debug_sink)
        self.tracker = AffinityTracker(tracker_key, repository, clock, self._configs.tracker)
        self._profile: Optional[InterestProfile] = None
        self._lock = threading.Lock()

    @property
    def profile(self) -> InterestProfile:
        with self._lock:
            if self._profile is None:
                self._profile = self._read_profile()
            return self._profile

    def load(self) -> InterestProfile:
        """(Re)read tracker and profile state from storage."""
        self.tracker.load()
        profile = self._read_profile()
        with self._lock:
            self._profile = profile
        return profile

    def reset(self) -> None:
        self.tracker.reset()
        with self._lock:
            self._profile = create_empty_profile(to_iso(self._clock()))
        try:
            self.repository.reset(self.profile_key)
        except Exception:
            logger.exception(f"Failed to reset profile state {self.profile_key}")

    def set_gender(self, gender: str) -> InterestProfile:
        return self._update_profile(
            lambda profile, now: replace(profile, gender=normalize_gender(gender), updated_at=to_iso(now))
        )

    def track_event(self, event: InterestEvent) -> InterestProfile:
        """Fold a UI event into the profile; opens and cart adds also feed the affinity tracker."""
        if event.type == profile_rules.PRODUCT_OPEN and event.handle:
            self.tracker.record_view(event.handle)
        elif event.type == profile_rules.ADD_TO_CART and event.handle:
            self.tracker.record_add_to_cart(event.handle)
        return self._update_profile(
            lambda profile, now: prune_profile(
                apply_event(profile, event, to_iso(now), self._configs.profile), now, self._configs.profile
            )
        )

    def record_view(self, handle: str) -> Optional[ProductAffinity]:
        return self.tracker.record_view(handle)

    def record_add_to_cart(self, handle: str) -> Optional[ProductAffinity]:
        return self.tracker.record_add_to_cart(handle)

    def build_page(self, ctx: FeedContext, cursor: Optional[FeedCursor] = None) -> FeedPage:
        """
        Compose one feed page.

        With a seed handle the pool is ranked against that product; without
        one the pool is ranked on the profile alone (newest in-stock items on
        a cold start). Handles the cursor already served are removed before
        ranking, so a scroll eventually shows every candidate exactly once.
        """
        extra = session_extra(ctx.session_id.value)
        profile = self.profile
        tracked = self._tracked_affinity(ctx.now)
        cursor = cursor or FeedCursor(seed_handle=ctx.seed_handle, page=ctx.page_depth, refresh_key=ctx.refresh_key)

        seed = None
        if ctx.seed_handle:
            seed = self.catalog.get_by_handle(ctx.seed_handle)
            if seed is None:
                logger.warning(f"Seed product {ctx.seed_handle!r} not found; returning empty page", extra=extra)
                return FeedPage.empty(ctx, profile, self._profile_hash(profile, tracked))

        ranker_config = self._configs.ranker
        seed_terms = build_seed_terms(seed, self.cache, ranker_config) if seed is not None else None
        fetched = list(
            self.catalog.fetch_candidates(
                CatalogRequest(
                    seed_handle=ctx.seed_handle or None,
                    terms=seed_terms.seed_terms[: self.config.catalog_query_terms] if seed_terms else (),
                    limit=self.config.catalog_limit,
                    locale=ctx.locale,
                )
            )
        )
        pool = dedupe_candidates([*self._profile_handle_candidates(profile, tracked), *fetched])
        available = [candidate for candidate in pool.items if candidate.available_for_sale]
        candidates = filter_gender_pool(available, profile.gender)
        candidates = apply_refresh_novelty_window(
            candidates,
            profile,
            page_depth=ctx.page_depth,
            refresh_round=_refresh_round(ctx.refresh_key),
            page_size=ctx.page_size,
        )
        candidates = exclude_served(candidates, cursor.served_handles)

        exploration_ratio = exploration_ratio_for_depth(ctx.page_depth)
        options = RankOptions(
            page=ctx.page_depth,
            include_debug=ctx.include_debug,
            now=ctx.now,
            seed_terms=seed_terms,
            tracked_affinity=tracked,
            profile_config=self._configs.profile,
            exploration_ratio=exploration_ratio,
            jitter_salt=f"{to_iso(ctx.now)[:10]}|{ctx.refresh_key}|{profile.updated_at}",
        )
        if seed is not None:
            ranked = diversify_ranked(
                rank_candidates(seed, candidates, profile, options, self.cache, ranker_config),
                profile.recently_served_handles,
                ranker_config,
            )
            guard = apply_early_category_guard(
                ranked, seed_terms.seed_primary_category, ctx.page_depth, len(ranked), ranker_config
            )
        elif not tracked and is_cold_start(profile, ctx.now, self._configs.profile):
            ranked = rank_cold_start(candidates, options, self.cache, ranker_config)
            guard = GuardResult(items=ranked, prevented=0)
        else:
            ranked = diversify_ranked(
                rank_grid_candidates(profile, candidates, options, self.cache, ranker_config),
                profile.recently_served_handles,
                ranker_config,
            )
            guard = GuardResult(items=ranked, prevented=0)

        selection = select_page(
            guard.items,
            ctx.page_size,
            page_depth=ctx.page_depth,
            exploration_ratio=exploration_ratio,
            seed=ctx.page_seed,
            config=self._configs.selector,
            offset=0 if cursor.served_handles else None,
        )
        items = selection.items
        # Page 0 guard drops are not served yet, so they still count as more
        has_more = selection.has_more or len(ranked) > selection.offset + len(items)

        profile = self._update_profile(
            lambda current, now: apply_served_cooldown(
                current, [item.handle for item in items], to_iso(now), self._configs.profile
            )
        )
        next_cursor = cursor.advance([item.handle for item in items]).encode() if has_more else None

        logger.info(
            f"Built page {ctx.page_depth} for seed {ctx.seed_handle or '-'}: {len(items)} items "
            f"({selection.exploit_count} exploit, {selection.explore_count} explore) "
            f"from {len(fetched)} fetched, {pool.deduped} deduped, {guard.prevented} guarded",
            extra=extra,
        )

        debug = None
        if ctx.include_debug:
            debug = {
                "fetched_count": len(fetched),
                "deduped_count": pool.deduped,
                "candidate_count": len(candidates),
                "ranked_count": len(ranked),
                "guard_prevented": guard.prevented,
                "seed_category": seed_terms.seed_primary_category if seed_terms else None,
                "exploration_ratio": exploration_ratio,
                "tracked_count": len(tracked),
            }
        self._publish_debug(ctx, guard.items, profile)

        return FeedPage(
            seed_handle=ctx.seed_handle,
            page_depth=ctx.page_depth,
            items=items,
            exploit_count=selection.exploit_count,
            explore_count=selection.explore_count,
            has_more=has_more,
            profile_hash=self._profile_hash(profile, tracked),
            gender=profile.gender,
            next_cursor=next_cursor,
            debug=debug,
        )

    def next_page(
        self,
        cursor_token: str,
        seed_handle: str,
        session_id: str,
        page_size: Optional[int] = None,
        locale: Optional[str] = None,
        include_debug: bool = False,
    ) -> FeedPage:
        cursor = FeedCursor.decode(cursor_token, seed_handle)
        ctx = FeedContext.from_args(
            seed_handle=seed_handle,
            session_id=session_id,
            page_size=page_size or self._configs.selector.default_page_size,
            page_depth=cursor.page,
            refresh_key=cursor.refresh_key,
            locale=locale,
            include_debug=include_debug,
            now=self._clock(),
        )
        return self.build_page(ctx, cursor)

    def flush(self, timeout: Optional[float] = None) -> None:
        flush = getattr(self.repository, "flush", None)
        if callable(flush):
            flush(timeout)

    def _tracked_affinity(self, now: int) -> dict[str, float]:
        """Affinity tracker weighted scores by handle, strongest first."""
        return {
            weighted.handle: weighted.weighted_score
            for weighted in self.tracker.get_weighted_products(now)
            if weighted.weighted_score > 0
        }

    def _profile_hash(self, profile: InterestProfile, tracked: dict[str, float]) -> str:
        return get_profile_hash(profile, self._configs.profile, list(tracked))

    def _profile_handle_candidates(self, profile: InterestProfile, tracked: dict[str, float]) -> list[ProductCandidate]:
        """Products the user already engaged with: recent opens, tracked products, then by stored score."""
        by_score = sorted(profile.signals.by_product_handle.items(), key=lambda item: -item[1].score)
        handles = list(dict.fromkeys([*profile.signals.recent_handles, *tracked, *(key for key, _ in by_score)]))
        out: list[ProductCandidate] = []
        for handle in handles[: self.config.profile_seed_handles]:
            try:
                candidate = self.catalog.get_by_handle(handle)
            except Exception:
                logger.exception(f"Catalog lookup failed for profile handle {handle}")
                continue
            if candidate is not None:
                out.append(candidate)
        return out

    def _read_profile(self) -> InterestProfile:
        now = self._clock()
        try:
            raw = self.repository.get(self.profile_key)
        except Exception:
            logger.exception(f"Failed to read profile state {self.profile_key}; starting cold")
            raw = None
        return prune_profile(normalize_profile(raw, to_iso(now), self._configs.profile), now, self._configs.profile)

    def _update_profile(self, change) -> InterestProfile:
        with self._lock:
            if self._profile is None:
                self._profile = self._read_profile()
            updated = change(self._profile, self._clock())
            self._profile = updated
        try:
            self.repository.set(self.profile_key, updated.as_dict())
        except Exception:
            logger.exception(f"Failed to persist profile state {self.profile_key}")
        return updated

    def _publish_debug(self, ctx: FeedContext, ranked: list[RankedItem], profile: InterestProfile) -> None:
        sink = self.debug_sink
        if sink is None or not sink.enabled:
            return
        sink.publish(
            ranker_rules.TOP_RANKED_KIND,
            {
                "session_id": ctx.session_id.value,
                "seed_handle": ctx.seed_handle,
                "page_depth": ctx.page_depth,
                "items": [item.as_dict() for item in ranked[: self.config.debug_top_n]],
            },
        )
        sink.publish(profile_rules.SUMMARY_KIND, profile_signal_summary(profile, ctx.now, self._configs.profile))


def _refresh_round(refresh_key: str) -> int:
    try:
        return max(0, int(refresh_key))
    except (TypeError, ValueError):
        return 0
