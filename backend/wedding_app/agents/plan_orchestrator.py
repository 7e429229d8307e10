# backend/wedding_app/agents/plan_orchestrator.py

from typing import Dict, List

from wedding_app.core.errors import NoVenueFoundError
from wedding_app.core.genie_config import DEFAULT_GENIE_CONFIG, GenieConfig
from wedding_app.core.logger import logger
from wedding_app.db.sqlite_store import SQLiteStore
from wedding_app.models.genie_models import (
    BudgetRange,
    CandidateMap,
    CandidateSource,
    GenieInput,
    PlanResult,
    PlanTotals,
    PlanType,
    VendorCandidate,
    VenueCandidate,
    VenueSelection,
)
from wedding_app.models.listing_models import CategoryRole
from wedding_app.services.category_allocator import CategoryAllocator
from wedding_app.services.vendor_matcher import VendorMatcher
from wedding_app.services.venue_extractor import VenueExtractor


class PlanOrchestrator:
    """
    Wedding Genie pipeline:

      venues -> allocation (budget only) -> batch candidate search
             -> allocation (tightened to market prices) -> totals

    Nothing is cached between calls; each plan reflects the listings at call time.
    """

    def __init__(self, store: SQLiteStore, config: GenieConfig = DEFAULT_GENIE_CONFIG):
        self.store = store
        self.config = config
        self.venue_extractor = VenueExtractor(store, config)
        self.matcher = VendorMatcher(store, config)
        self.allocator = CategoryAllocator(self.matcher, config)

    def generate_plans(self, genie_input: GenieInput) -> List[PlanResult]:
        """Single balanced plan, wrapped in a list for callers that expect variants."""
        return [self.generate_plan(genie_input)]

    def generate_plan(self, genie_input: GenieInput) -> PlanResult:
        logger.info(
            f"Genie request: area={genie_input.area} guests={genie_input.guest_count} "
            f"budget={genie_input.total_budget:.0f} planner={genie_input.planner_type.value}"
        )

        # -----------------------------------------------------------
        # 1. Venue shortlist
        # -----------------------------------------------------------
        venues = self.venue_extractor.extract(
            genie_input.area, genie_input.guest_count, genie_input.total_budget
        )
        if not venues:
            raise NoVenueFoundError(genie_input.area, genie_input.guest_count)

        # -----------------------------------------------------------
        # 2. Main venue + alternates
        # -----------------------------------------------------------
        main_venue = venues[0]
        alternates = venues[1:3]
        venue_price = main_venue.estimated_price

        venue_category = self.store.get_category_by_role(CategoryRole.VENUE)
        other_categories = [c for c in self.store.list_categories() if c.role != CategoryRole.VENUE]

        # -----------------------------------------------------------
        # 3-4. Budget-only pass gives each category its search target
        # -----------------------------------------------------------
        draft = self.allocator.allocate(
            genie_input, venue_price, other_categories,
            plan_type=PlanType.BALANCED, source=CandidateSource.omit(),
        )
        targets: Dict[str, float] = {a.category_id: a.allocated_mid for a in draft.allocations}

        # -----------------------------------------------------------
        # 5. One batch search for every category
        # -----------------------------------------------------------
        fetched = self.matcher.find_candidates_batch(
            other_categories, genie_input.area, targets, genie_input.guest_count
        )

        # -----------------------------------------------------------
        # 6. Tighten ranges to market prices
        # -----------------------------------------------------------
        final = self.allocator.allocate(
            genie_input, venue_price, other_categories,
            plan_type=PlanType.BALANCED, source=CandidateSource.provided(fetched),
        )

        # -----------------------------------------------------------
        # 7. Totals
        # -----------------------------------------------------------
        venue_range = self._price_band(venue_price)
        totals = PlanTotals(
            total_min=venue_range.min + sum(a.allocated_min for a in final.allocations),
            total_mid=venue_range.mid + sum(a.allocated_mid for a in final.allocations),
            total_max=venue_range.max + sum(a.allocated_max for a in final.allocations),
        )

        # -----------------------------------------------------------
        # 8. Display candidates, venue folded into the same map
        # -----------------------------------------------------------
        display_count = self.config.vendor_candidate_display_count
        shown: CandidateMap = {
            a.category_id: list(final.candidates.get(a.category_id, []))[:display_count]
            for a in final.allocations
        }
        if venue_category is not None:
            shown[venue_category.id] = [self._venue_as_candidate(v) for v in venues[:display_count]]

        logger.info(
            f"Plan ready: venue={main_venue.name} total_mid={totals.total_mid:.0f} "
            f"(budget {genie_input.total_budget:.0f})"
        )

        return PlanResult(
            plan_type=PlanType.BALANCED,
            venue=VenueSelection(
                selected_venue_id=main_venue.vendor_id,
                selected_profile_id=main_venue.profile_id,
                selected_name=main_venue.name,
                alternative_venue_ids=[v.vendor_id for v in alternates],
                alternative_profile_ids=[v.profile_id for v in alternates],
                estimated_price=venue_range,
            ),
            planner_type=genie_input.planner_type,
            planner_cost=self.config.planner_cost(genie_input.planner_type),
            category_allocations=final.allocations,
            category_vendor_candidates=shown,
            totals=totals,
        )

    @staticmethod
    def _price_band(price: float) -> BudgetRange:
        return BudgetRange(min=price * 0.9, mid=price, max=price * 1.1)

    @classmethod
    def _venue_as_candidate(cls, venue: VenueCandidate) -> VendorCandidate:
        band = cls._price_band(venue.estimated_price)
        return VendorCandidate(
            vendor_id=venue.vendor_id,
            profile_id=venue.profile_id,
            name=venue.name,
            price_min=band.min,
            price_max=band.max,
            actual_price=venue.estimated_price,
        )
