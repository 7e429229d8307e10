# backend/wedding_app/services/venue_extractor.py

from typing import List

from wedding_app.core.genie_config import DEFAULT_GENIE_CONFIG, GenieConfig
from wedding_app.core.logger import logger
from wedding_app.db.sqlite_store import SQLiteStore
from wedding_app.models.genie_models import VenueCandidate
from wedding_app.utils import areas
from wedding_app.utils.pricing import estimate_venue_price, venue_score


class VenueExtractor:
    def __init__(self, store: SQLiteStore, config: GenieConfig = DEFAULT_GENIE_CONFIG):
        self.store = store
        self.config = config

    def extract(self, area: str, guest_count: int, total_budget: float) -> List[VenueCandidate]:
        """
        Approved venues in `area` that seat `guest_count`, ranked by how close
        their estimated price sits to the ideal share of `total_budget`.
        Returns at most `venue_candidate_limit` candidates, best first.
        """
        if guest_count <= 0:
            raise ValueError("guest_count must be a positive integer")
        if total_budget <= 0:
            raise ValueError("total_budget must be greater than 0")

        area_ids = areas.search_tokens(area, include_display_name=False)
        profiles = self.store.find_approved_venue_profiles(area_ids, guest_count)
        logger.info(f"Venue search area={area} guests={guest_count}: {len(profiles)} profiles")

        candidates: List[VenueCandidate] = []
        for profile in profiles:
            price = estimate_venue_price(profile, guest_count, self.config.default_venue_price_per_guest)
            ratio, score = venue_score(price, total_budget, self.config.venue_ratio.ideal_center)
            candidates.append(VenueCandidate(
                vendor_id=profile.vendor_id,
                profile_id=profile.id,
                name=profile.display_name,
                estimated_price=price,
                ratio=ratio,
                score=score,
            ))

        candidates.sort(key=lambda c: c.score)
        top = candidates[:self.config.venue_candidate_limit]
        for c in top:
            logger.debug(f"  venue {c.name}: price={c.estimated_price:.0f} ratio={c.ratio:.3f} score={c.score:.3f}")
        return top
