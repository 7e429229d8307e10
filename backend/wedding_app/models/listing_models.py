# backend/wedding_app/models/listing_models.py

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CategoryRole(str, Enum):
    NORMAL = "normal"
    VENUE = "venue"
    PLANNER = "planner"
    DAY_OF_PLANNER = "day_of_planner"


class UnitKind(str, Enum):
    PER_ITEM = "per_item"
    PER_GUEST = "per_guest"     # listed price is a unit price per guest


class Category(BaseModel):
    id: str
    name: str
    display_order: int = 0
    role: CategoryRole = CategoryRole.NORMAL
    unit_kind: UnitKind = UnitKind.PER_ITEM

    @property
    def is_per_guest(self) -> bool:
        return self.unit_kind == UnitKind.PER_GUEST


class PricePlan(BaseModel):
    name: str
    price: float
    description: Optional[str] = None


class VendorProfile(BaseModel):
    id: str
    vendor_id: str
    vendor_name: str
    name: Optional[str] = None
    category_type: Optional[str] = None
    category_ids: List[str] = Field(default_factory=list)
    areas: List[str] = Field(default_factory=list)
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    max_guests: Optional[int] = None
    plans: List[PricePlan] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.vendor_name


@dataclass(frozen=True)
class PriceWindow:
    """
    A profile is compatible when price_min <= upper or price_max >= lower.
    Profiles with no price at all are always compatible.
    """
    upper: float
    lower: float

    @classmethod
    def around(cls, target: float, upper_factor: float = 1.0, lower_factor: float = 1.0) -> "PriceWindow":
        return cls(upper=target * upper_factor, lower=target * lower_factor)

    def accepts(self, price_min: Optional[float], price_max: Optional[float]) -> bool:
        if price_min is None and price_max is None:
            return True
        if price_min is not None and price_min <= self.upper:
            return True
        return price_max is not None and price_max >= self.lower
