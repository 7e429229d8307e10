# backend/wedding_app/core/errors.py


class GenieError(Exception):
    """Base class for failures surfaced by plan generation."""


class NoVenueFoundError(GenieError):
    """No approved venue satisfies the requested area and guest count."""

    def __init__(self, area: str, guest_count: int):
        self.area = area
        self.guest_count = guest_count
        super().__init__(
            f"No matching venue found for area={area}, guests={guest_count}. "
            "Try a wider area or a smaller guest count."
        )


class DataStoreUnavailableError(GenieError):
    """A read or write against the listing store failed."""
