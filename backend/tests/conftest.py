import os

os.environ.setdefault("DB_PATH", ":memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest

from wedding_app.db.sqlite_store import SQLiteStore
from wedding_app.models.genie_models import GenieInput
from wedding_app.models.listing_models import CategoryRole


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(str(tmp_path / "listings.sqlite3"))
    yield s
    s.close()


@pytest.fixture
def categories(store):
    return {c.name: c for c in store.list_categories()}


@pytest.fixture
def add_listing(store, categories):
    """Create an approved vendor with one profile in `category_name`; returns the profile id."""

    def _add(category_name, *, areas=("chiba",), status="approved", vendor_name=None, **profile_kwargs):
        category = categories[category_name]
        vendor_id = store.create_vendor(vendor_name or f"{category_name} vendor", status)
        if category.role == CategoryRole.VENUE:
            profile_kwargs.setdefault("category_type", "venue")
        return store.create_profile(
            vendor_id,
            category_ids=[category.id],
            areas=list(areas),
            **profile_kwargs,
        )

    return _add


def make_input(**overrides) -> GenieInput:
    values = {
        "area": "chiba",
        "guest_count": 30,
        "total_budget": 1_000_000,
        "planner_type": "self",
    }
    values.update(overrides)
    return GenieInput(**values)
