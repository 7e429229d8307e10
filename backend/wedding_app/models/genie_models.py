# backend/wedding_app/models/genie_models.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from wedding_app.models.listing_models import PricePlan


class CamelModel(BaseModel):
    """Serialized as camelCase for the UI, accepts snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlannerType(str, Enum):
    PLANNER = "planner"
    DAY_OF = "day_of"
    SELF = "self"
    UNDECIDED = "undecided"


class PlanType(str, Enum):
    BALANCED = "balanced"
    PRIORITY = "priority"
    BUDGET = "budget"


# --------------------------
# Request
# --------------------------
class GenieInput(CamelModel):
    model_config = ConfigDict(frozen=True)

    area: str = Field(..., min_length=1)
    guest_count: int = Field(..., gt=0)
    total_budget: float = Field(..., gt=0)
    excluded_categories: List[str] = Field(default_factory=list)
    priority_categories: List[str] = Field(default_factory=list, max_length=2)
    planner_type: PlannerType

    def is_priority(self, category_name: str) -> bool:
        return category_name in self.priority_categories

    def is_excluded(self, category_name: str) -> bool:
        return category_name in self.excluded_categories


# --------------------------
# Budget tables
# --------------------------
class BudgetRange(CamelModel):
    model_config = ConfigDict(frozen=True)

    min: float
    mid: float
    max: float

    @model_validator(mode="after")
    def _check_order(self):
        if not (self.min <= self.mid <= self.max):
            raise ValueError(f"range must satisfy min <= mid <= max, got {self.min}/{self.mid}/{self.max}")
        return self

    def scaled(self, factor: float) -> "BudgetRange":
        return BudgetRange(min=self.min * factor, mid=self.mid * factor, max=self.max * factor)


# --------------------------
# Pipeline values
# --------------------------
class VenueCandidate(CamelModel):
    vendor_id: str
    profile_id: str
    name: str
    estimated_price: float
    ratio: float
    score: float


class CategoryAllocation(CamelModel):
    category_id: str
    category_name: str
    allocated_min: float
    allocated_mid: float
    allocated_max: float

    def set_range(self, low: float, mid: float, high: float):
        self.allocated_min = low
        self.allocated_mid = mid
        self.allocated_max = high


class VendorCandidate(CamelModel):
    vendor_id: str
    profile_id: str
    name: str
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    actual_price: Optional[float] = None
    plans: Optional[List[PricePlan]] = None
    is_fallback: bool = False


CandidateMap = Dict[str, List[VendorCandidate]]


class CandidateSourceKind(str, Enum):
    OMIT = "omit"           # budget shares only, no candidate lookups
    FETCH = "fetch"         # look candidates up per category
    PROVIDED = "provided"   # use a map fetched earlier


@dataclass(frozen=True)
class CandidateSource:
    """Tells the allocator where vendor candidates come from."""

    kind: CandidateSourceKind
    candidates: CandidateMap = field(default_factory=dict)

    @classmethod
    def omit(cls) -> "CandidateSource":
        return cls(CandidateSourceKind.OMIT)

    @classmethod
    def fetch(cls) -> "CandidateSource":
        return cls(CandidateSourceKind.FETCH)

    @classmethod
    def provided(cls, candidates: CandidateMap) -> "CandidateSource":
        return cls(CandidateSourceKind.PROVIDED, candidates)


# --------------------------
# Response
# --------------------------
class VenueSelection(CamelModel):
    selected_venue_id: str
    selected_profile_id: str
    selected_name: str
    alternative_venue_ids: List[str] = Field(default_factory=list)
    alternative_profile_ids: List[str] = Field(default_factory=list)
    estimated_price: BudgetRange


class PlanTotals(CamelModel):
    total_min: float
    total_mid: float
    total_max: float


class PlanResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    plan_type: PlanType = PlanType.BALANCED
    venue: VenueSelection
    planner_type: PlannerType
    planner_cost: BudgetRange
    category_allocations: List[CategoryAllocation] = Field(default_factory=list)
    category_vendor_candidates: CandidateMap = Field(default_factory=dict)
    totals: PlanTotals
