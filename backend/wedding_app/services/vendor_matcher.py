# backend/wedding_app/services/vendor_matcher.py

from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from wedding_app.core.genie_config import DEFAULT_GENIE_CONFIG, GenieConfig
from wedding_app.core.logger import logger
from wedding_app.db.sqlite_store import SQLiteStore
from wedding_app.models.genie_models import CandidateMap, VendorCandidate
from wedding_app.models.listing_models import Category, PriceWindow, VendorProfile
from wedding_app.utils import areas
from wedding_app.utils.pricing import actual_price, price_distance


class SearchTier(str, Enum):
    STRICT = "strict"
    RELAXED_PRICE = "relaxed_price"
    AREA_IGNORED = "area_ignored"


def _price_min_order(profile: VendorProfile):
    # nulls last, matches the store's ORDER BY
    return (profile.price_min is None, profile.price_min or 0)


class VendorMatcher:
    """
    Finds vendor candidates for a category near an allocated budget.

    Tiers, first non-empty wins:
      1. strict        area match + price window around the target
      2. relaxed_price area match + price window widened to x1.5 / x0.5
      3. area_ignored  category only, cheapest first, flagged is_fallback
    """

    def __init__(self, store: SQLiteStore, config: GenieConfig = DEFAULT_GENIE_CONFIG):
        self.store = store
        self.config = config

    def _windows(self, target: float) -> Tuple[PriceWindow, PriceWindow]:
        strict = PriceWindow.around(target)
        relaxed = PriceWindow.around(
            target,
            upper_factor=self.config.relaxed_price_upper_factor,
            lower_factor=self.config.relaxed_price_lower_factor,
        )
        return strict, relaxed

    @staticmethod
    def _pick_tier(
        tiers: Sequence[Tuple[SearchTier, Callable[[], List[VendorProfile]]]]
    ) -> Tuple[SearchTier, List[VendorProfile]]:
        tier, profiles = tiers[-1][0], []
        for tier, fetch in tiers:
            profiles = fetch()
            if profiles:
                break
        return tier, profiles

    # ----------------------------------------------------------------------
    # Single category
    # ----------------------------------------------------------------------
    def find_candidates(
        self,
        category: Category,
        area: str,
        target_budget: float,
        guest_count: int = 1,
    ) -> List[VendorCandidate]:
        tokens = areas.search_tokens(area)
        strict, relaxed = self._windows(target_budget)
        internal = self.config.vendor_candidate_internal_count

        tier, profiles = self._pick_tier([
            (SearchTier.STRICT,
             lambda: self.store.find_approved_profiles_by_category(category.id, tokens, strict)),
            (SearchTier.RELAXED_PRICE,
             lambda: self.store.find_approved_profiles_by_category(category.id, tokens, relaxed)),
            (SearchTier.AREA_IGNORED,
             lambda: self.store.find_approved_profiles_by_category(
                 category.id, order_by_price=True, limit=internal)),
        ])
        return self._finish(category, area, tier, profiles, target_budget, guest_count)

    # ----------------------------------------------------------------------
    # Batch: one store read, then the same tiers per category in memory
    # ----------------------------------------------------------------------
    def find_candidates_batch(
        self,
        categories: Iterable[Category],
        area: str,
        targets: Dict[str, float],
        guest_count: int = 1,
    ) -> CandidateMap:
        wanted = [c for c in categories if c.id in targets]
        pool = self.store.find_approved_profiles_for_categories(c.id for c in wanted)
        tokens = areas.search_tokens(area)
        internal = self.config.vendor_candidate_internal_count
        logger.info(f"Batch candidate pool: {len(pool)} profiles for {len(wanted)} categories")

        result: CandidateMap = {}
        for category in wanted:
            target = targets[category.id]
            strict, relaxed = self._windows(target)
            in_category = [p for p in pool if category.id in p.category_ids]
            local = [p for p in in_category if areas.profile_matches(p.areas, tokens)]

            tier, profiles = self._pick_tier([
                (SearchTier.STRICT,
                 lambda: [p for p in local if strict.accepts(p.price_min, p.price_max)]),
                (SearchTier.RELAXED_PRICE,
                 lambda: [p for p in local if relaxed.accepts(p.price_min, p.price_max)]),
                (SearchTier.AREA_IGNORED,
                 lambda: sorted(in_category, key=_price_min_order)[:internal]),
            ])
            result[category.id] = self._finish(category, area, tier, profiles, target, guest_count)
        return result

    # ----------------------------------------------------------------------
    # Ranking
    # ----------------------------------------------------------------------
    def _finish(
        self,
        category: Category,
        area: str,
        tier: SearchTier,
        profiles: List[VendorProfile],
        target: float,
        guest_count: int,
    ) -> List[VendorCandidate]:
        is_fallback = tier == SearchTier.AREA_IGNORED
        if is_fallback and profiles:
            logger.warning(
                f"{category.name}: nothing listed for area={area}, "
                f"returning {len(profiles)} area-ignored fallback candidates"
            )
        else:
            logger.info(f"{category.name}: {len(profiles)} candidates via {tier.value} (target={target:.0f})")
        return self.rank(profiles, target, guest_count, category.is_per_guest, is_fallback)

    def rank(
        self,
        profiles: Iterable[VendorProfile],
        target: float,
        guest_count: int = 1,
        per_guest: bool = False,
        is_fallback: bool = False,
        limit: Optional[int] = None,
    ) -> List[VendorCandidate]:
        """Closest actual price to `target` first; first occurrence of a profile wins."""
        candidates = [
            VendorCandidate(
                vendor_id=p.vendor_id,
                profile_id=p.id,
                name=p.display_name,
                price_min=p.price_min,
                price_max=p.price_max,
                actual_price=actual_price(p, guest_count, per_guest),
                plans=list(p.plans) or None,
                is_fallback=is_fallback,
            )
            for p in profiles
        ]
        candidates.sort(key=lambda c: price_distance(c.actual_price, target))

        seen = set()
        unique: List[VendorCandidate] = []
        for c in candidates:
            if c.profile_id in seen:
                continue
            seen.add(c.profile_id)
            unique.append(c)

        if limit is None:
            limit = self.config.vendor_candidate_internal_count
        return unique[:limit]
