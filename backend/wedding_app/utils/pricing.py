# backend/wedding_app/utils/pricing.py

import math
from typing import Optional, Sequence, Tuple

from wedding_app.models.listing_models import PricePlan, VendorProfile


def _cheapest_plan_price(plans: Sequence[PricePlan]) -> Optional[float]:
    if not plans:
        return None
    return min(plans, key=lambda plan: plan.price).price


def _bound_price(price_min: Optional[float], price_max: Optional[float]) -> Optional[float]:
    """Midpoint when both bounds are set, else whichever one is. Zero counts as unset."""
    if price_min and price_max:
        return (price_min + price_max) / 2
    if price_min:
        return price_min
    if price_max:
        return price_max
    return None


def actual_price(profile: VendorProfile, guest_count: int = 1, per_guest: bool = False) -> Optional[float]:
    """
    Market price of a profile: cheapest plan, else price bounds.
    Per-guest categories list unit prices, so the result is scaled by guest_count.
    """
    price = _cheapest_plan_price(profile.plans)
    if price is None:
        price = _bound_price(profile.price_min, profile.price_max)
    if price is None:
        return None
    return price * guest_count if per_guest else price


def estimate_venue_price(profile: VendorProfile, guest_count: int, default_per_guest: float) -> float:
    # venue plans are already total prices, never multiplied by guests
    price = _cheapest_plan_price(profile.plans)
    if not price:
        price = _bound_price(profile.price_min, profile.price_max)
    if not price:
        price = default_per_guest * guest_count
    return price


def venue_score(estimated_price: float, total_budget: float, ideal_center: float) -> Tuple[float, float]:
    """Returns (ratio, score); lower score means closer to the ideal share of the budget."""
    ratio = estimated_price / total_budget
    return ratio, abs(ratio - ideal_center)


def price_distance(price: Optional[float], target: float) -> float:
    if price is None:
        return math.inf
    return abs(price - target)
