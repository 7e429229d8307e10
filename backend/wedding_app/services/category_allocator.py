# backend/wedding_app/services/category_allocator.py

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from wedding_app.core.genie_config import DEFAULT_GENIE_CONFIG, GenieConfig
from wedding_app.core.logger import logger
from wedding_app.models.genie_models import (
    BudgetRange,
    CandidateMap,
    CandidateSource,
    CandidateSourceKind,
    CategoryAllocation,
    GenieInput,
    PlanType,
)
from wedding_app.models.listing_models import Category
from wedding_app.services.vendor_matcher import VendorMatcher


@dataclass
class AllocationResult:
    allocations: List[CategoryAllocation]
    candidates: CandidateMap = field(default_factory=dict)
    remaining_budget: float = 0.0
    collapsed: List[str] = field(default_factory=list)

    @property
    def total_mid(self) -> float:
        return sum(a.allocated_mid for a in self.allocations)


class CategoryAllocator:
    def __init__(self, matcher: VendorMatcher, config: GenieConfig = DEFAULT_GENIE_CONFIG):
        self.matcher = matcher
        self.config = config

    # ----------------------------------------------------------------------
    # Emphasis modes
    # ----------------------------------------------------------------------
    @staticmethod
    def _apply_plan_type(base: BudgetRange, plan_type: PlanType, is_priority: bool):
        if plan_type == PlanType.PRIORITY:
            if is_priority:
                return base.max * 0.8, base.max * 0.9, base.max
            return base.min, base.mid * 0.8, base.mid
        if plan_type == PlanType.BUDGET:
            if is_priority:
                return base.mid * 0.7, base.mid, base.mid * 1.2
            return base.min, base.min, base.min * 1.2
        return base.min, base.mid, base.max

    @staticmethod
    def _top_price(candidates: CandidateMap, category_id: str) -> Optional[float]:
        found = candidates.get(category_id) or []
        return found[0].actual_price if found else None

    # ----------------------------------------------------------------------
    # Allocate
    # ----------------------------------------------------------------------
    def allocate(
        self,
        genie_input: GenieInput,
        venue_price: float,
        categories: Iterable[Category],
        plan_type: PlanType = PlanType.BALANCED,
        source: Optional[CandidateSource] = None,
    ) -> AllocationResult:
        """
        Split the budget left after the venue across the non-venue categories.

        source decides where candidates come from:
          omit      budget shares only, no lookups (first pass)
          fetch     look candidates up per category at the allocated mid
          provided  use a map fetched earlier (second pass)
        When a category has a top candidate with a price, its range becomes
        {0.9, 1.0, 1.1} x that price.
        """
        source = source or CandidateSource.fetch()
        remaining = genie_input.total_budget - venue_price

        targets = [c for c in categories if not genie_input.is_excluded(c.name)]

        allocations: List[CategoryAllocation] = []
        candidates: CandidateMap = dict(source.candidates) if source.kind == CandidateSourceKind.PROVIDED else {}

        for category in targets:
            base = self.config.range_for(category)
            if base is None:
                logger.debug(f"No budget range for {category.name}, skipped")
                continue

            if category.is_per_guest:
                scaled = base.scaled(genie_input.guest_count)
                low, mid, high = scaled.min, scaled.mid, scaled.max
            else:
                low, mid, high = self._apply_plan_type(base, plan_type, genie_input.is_priority(category.name))

            if source.kind == CandidateSourceKind.FETCH:
                candidates[category.id] = self.matcher.find_candidates(
                    category, genie_input.area, mid, genie_input.guest_count
                )

            top_price = self._top_price(candidates, category.id)
            if top_price is not None:
                low, mid, high = top_price * 0.9, top_price, top_price * 1.1

            allocations.append(CategoryAllocation(
                category_id=category.id,
                category_name=category.name,
                allocated_min=low,
                allocated_mid=mid,
                allocated_max=high,
            ))

        result = AllocationResult(allocations=allocations, candidates=candidates, remaining_budget=remaining)
        self._collapse_overflow(genie_input, {c.id: c for c in targets}, result)

        logger.info(
            f"Allocated {len(allocations)} categories ({plan_type.value}, {source.kind.value}): "
            f"mid total {result.total_mid:.0f} / remaining {remaining:.0f}"
        )
        return result

    def _collapse_overflow(self, genie_input: GenieInput, by_id: dict, result: AllocationResult):
        """
        Over budget: walk non-priority categories in order, dropping each to its
        minimum, until the mid total fits. Priority categories are left alone.
        """
        if result.total_mid <= result.remaining_budget:
            return

        logger.info(
            f"Mid total {result.total_mid:.0f} exceeds remaining {result.remaining_budget:.0f}, collapsing"
        )
        for alloc in result.allocations:
            if genie_input.is_priority(alloc.category_name):
                continue
            category = by_id[alloc.category_id]
            base = self.config.range_for(category)

            factor = genie_input.guest_count if category.is_per_guest else 1
            alloc.set_range(base.min * factor, base.min * factor, base.min * 1.2 * factor)
            result.collapsed.append(alloc.category_name)

            if result.total_mid <= result.remaining_budget:
                break

        if result.total_mid > result.remaining_budget:
            logger.warning(
                f"Still over budget after collapsing {len(result.collapsed)} categories: "
                f"{result.total_mid:.0f} > {result.remaining_budget:.0f}"
            )
