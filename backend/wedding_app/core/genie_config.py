# backend/wedding_app/core/genie_config.py
#
# Budget tables for Wedding Genie (JPY).
# Category keys follow the category master names.

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from wedding_app.models.genie_models import BudgetRange, PlannerType
from wedding_app.models.listing_models import Category, CategoryRole


class VenueRatio(BaseModel):
    model_config = ConfigDict(frozen=True)

    ideal_min: float = 0.35
    ideal_max: float = 0.50
    ideal_center: float = 0.42

    @model_validator(mode="after")
    def _center_inside_window(self):
        if not (self.ideal_min <= self.ideal_center <= self.ideal_max):
            raise ValueError("ideal_center must lie inside [ideal_min, ideal_max]")
        return self


class GenieConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_ranges: Dict[str, BudgetRange]
    planner_ranges: Dict[PlannerType, BudgetRange]
    venue_ratio: VenueRatio = VenueRatio()

    venue_candidate_limit: int = 7
    vendor_candidate_display_count: int = 3
    vendor_candidate_internal_count: int = 5

    default_venue_price_per_guest: float = 10_000
    relaxed_price_upper_factor: float = 1.5
    relaxed_price_lower_factor: float = 0.5

    def range_for(self, category: Category) -> Optional[BudgetRange]:
        """Planner roles read the planner table by role, everything else the category table."""
        if category.role == CategoryRole.PLANNER:
            return self.planner_ranges.get(PlannerType.PLANNER)
        if category.role == CategoryRole.DAY_OF_PLANNER:
            return self.planner_ranges.get(PlannerType.DAY_OF)
        return self.category_ranges.get(category.name)

    def planner_cost(self, planner_type: PlannerType) -> BudgetRange:
        return self.planner_ranges.get(planner_type) or self.planner_ranges[PlannerType.UNDECIDED]


CATEGORY_BUDGET_RANGES = {
    "写真": BudgetRange(min=50_000, mid=80_000, max=120_000),
    "ケータリング": BudgetRange(min=150_000, mid=300_000, max=450_000),
    "ドレス": BudgetRange(min=50_000, mid=80_000, max=120_000),
    "映像": BudgetRange(min=30_000, mid=80_000, max=150_000),
    "MC": BudgetRange(min=30_000, mid=50_000, max=80_000),
    "引き出物": BudgetRange(min=1_500, mid=2_500, max=3_500),   # per guest
    "ヘアメイク": BudgetRange(min=25_000, mid=60_000, max=90_000),
    "装飾": BudgetRange(min=25_000, mid=70_000, max=100_000),
    "ケーキ": BudgetRange(min=15_000, mid=30_000, max=50_000),
}

PLANNER_BUDGET_RANGES = {
    PlannerType.PLANNER: BudgetRange(min=50_000, mid=70_000, max=200_000),
    PlannerType.DAY_OF: BudgetRange(min=30_000, mid=50_000, max=70_000),
    PlannerType.SELF: BudgetRange(min=0, mid=0, max=0),
    PlannerType.UNDECIDED: BudgetRange(min=50_000, mid=70_000, max=200_000),
}

DEFAULT_GENIE_CONFIG = GenieConfig(
    category_ranges=CATEGORY_BUDGET_RANGES,
    planner_ranges=PLANNER_BUDGET_RANGES,
)
