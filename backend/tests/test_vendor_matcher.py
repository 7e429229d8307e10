import pytest

from wedding_app.core.genie_config import DEFAULT_GENIE_CONFIG
from wedding_app.services.vendor_matcher import VendorMatcher


@pytest.fixture
def matcher(store):
    return VendorMatcher(store)


def test_per_guest_category_scales_cheapest_plan(matcher, categories, add_listing):
    add_listing("引き出物", plans=[{"name": "basic", "price": 2000}, {"name": "deluxe", "price": 3000}])

    found = matcher.find_candidates(categories["引き出物"], "chiba", 100_000, guest_count=50)

    assert found[0].actual_price == 2000 * 50
    assert [p.price for p in found[0].plans] == [2000, 3000]


def test_regular_category_is_not_scaled(matcher, categories, add_listing):
    add_listing("写真", price_min=60_000, price_max=100_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000, guest_count=50)
    assert found[0].actual_price == 80_000


def test_local_profile_found_for_area_and_its_group(matcher, categories, add_listing):
    local = add_listing("写真", areas=["chiba"], price_min=80_000, price_max=80_000)

    for search in ("chiba", "kanto"):
        found = matcher.find_candidates(categories["写真"], search, 80_000)
        assert [c.profile_id for c in found] == [local]
        assert not found[0].is_fallback


def test_unrelated_area_only_gets_fallback(matcher, categories, add_listing):
    local = add_listing("写真", areas=["chiba"], price_min=80_000, price_max=80_000)

    found = matcher.find_candidates(categories["写真"], "osaka", 80_000)

    assert [c.profile_id for c in found] == [local]
    assert found[0].is_fallback


def test_legacy_display_name_area_matches(matcher, categories, add_listing):
    legacy = add_listing("写真", areas=["千葉県"], price_min=80_000, price_max=80_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [legacy]
    assert not found[0].is_fallback


def test_relaxed_price_tier(matcher, categories, add_listing):
    # price_min only, above target: strict rejects, x1.5 window accepts
    near = add_listing("写真", price_min=100_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [near]
    assert not found[0].is_fallback


def test_too_expensive_for_relaxed_tier_falls_back(matcher, categories, add_listing):
    far = add_listing("写真", price_min=200_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [far]
    assert found[0].is_fallback


def test_unpriced_profiles_pass_price_filters(matcher, categories, add_listing):
    unpriced = add_listing("写真")

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [unpriced]
    assert found[0].actual_price is None
    assert not found[0].is_fallback


def test_ranked_by_distance_from_target(matcher, categories, add_listing):
    cheap = add_listing("写真", price_min=50_000, price_max=50_000)
    unpriced = add_listing("写真")
    above = add_listing("写真", price_min=90_000, price_max=90_000)
    close = add_listing("写真", price_min=75_000, price_max=75_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [close, above, cheap, unpriced]


def test_ties_keep_listing_order(matcher, categories, add_listing):
    first = add_listing("写真", price_min=70_000, price_max=70_000)
    second = add_listing("写真", price_min=90_000, price_max=90_000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in found] == [first, second]


def test_repeated_calls_give_same_order(matcher, categories, add_listing):
    for price in (60_000, 80_000, 80_000, 100_000, 120_000, 70_000):
        add_listing("写真", price_min=price, price_max=price)

    first = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    second = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert [c.profile_id for c in first] == [c.profile_id for c in second]


def test_truncated_to_internal_count(matcher, categories, add_listing):
    for i in range(DEFAULT_GENIE_CONFIG.vendor_candidate_internal_count + 3):
        add_listing("写真", price_min=70_000 + i * 1000, price_max=70_000 + i * 1000)

    found = matcher.find_candidates(categories["写真"], "chiba", 80_000)
    assert len(found) == DEFAULT_GENIE_CONFIG.vendor_candidate_internal_count


def test_fallback_pool_is_cheapest_first(matcher, categories, add_listing):
    internal = DEFAULT_GENIE_CONFIG.vendor_candidate_internal_count
    prices = [300_000, 100_000, None, 200_000, 150_000, 120_000, 110_000]
    ids = {}
    for price in prices:
        ids[price] = add_listing("写真", areas=["okinawa"], price_min=price, price_max=price)

    found = matcher.find_candidates(categories["写真"], "chiba", 130_000)

    assert len(found) == internal
    assert all(c.is_fallback for c in found)
    # pool = five cheapest by price_min; the unpriced and 300k listings never make it
    assert {c.profile_id for c in found} == {ids[p] for p in (100_000, 110_000, 120_000, 150_000, 200_000)}
    assert found[0].profile_id == ids[120_000]


def test_pending_vendors_are_ignored(matcher, categories, add_listing):
    add_listing("写真", status="pending", price_min=80_000, price_max=80_000)
    assert matcher.find_candidates(categories["写真"], "chiba", 80_000) == []


def test_duplicate_profiles_are_dropped(matcher, store, categories):
    vendor = store.create_vendor("studio")
    profile = store.create_profile(vendor, category_ids=[categories["写真"].id], areas=["chiba"],
                                   price_min=80_000, price_max=80_000)
    profiles = store.find_approved_profiles_by_category(categories["写真"].id)

    ranked = matcher.rank(profiles + profiles, 80_000)
    assert [c.profile_id for c in ranked] == [profile]


def test_rank_limit_zero_returns_nothing(matcher, categories, add_listing):
    for price in (70_000, 80_000, 90_000):
        add_listing("写真", price_min=price, price_max=price)
    profiles = matcher.store.find_approved_profiles_by_category(categories["写真"].id)

    assert matcher.rank(profiles, 80_000, limit=0) == []
    assert len(matcher.rank(profiles, 80_000, limit=2)) == 2
    assert len(matcher.rank(profiles, 80_000)) == 3


def test_batch_matches_single_lookup(matcher, categories, add_listing):
    add_listing("写真", price_min=60_000, price_max=90_000)
    add_listing("写真", areas=["tokyo"], price_min=80_000, price_max=80_000)
    add_listing("ケーキ", areas=["千葉県"], price_min=40_000)
    add_listing("ケーキ", price_min=20_000, price_max=35_000)
    add_listing("MC", areas=["osaka"], price_min=50_000, price_max=60_000)
    add_listing("引き出物", areas=["zenkoku"], plans=[{"name": "set", "price": 2500}])

    wanted = [categories[n] for n in ("写真", "ケーキ", "MC", "引き出物", "映像")]
    targets = {"写真": 80_000, "ケーキ": 30_000, "MC": 50_000, "引き出物": 75_000, "映像": 80_000}
    target_by_id = {categories[n].id: t for n, t in targets.items()}

    batch = matcher.find_candidates_batch(wanted, "chiba", target_by_id, guest_count=30)

    for category in wanted:
        single = matcher.find_candidates(category, "chiba", target_by_id[category.id], guest_count=30)
        assert batch[category.id] == single

    assert batch[categories["映像"].id] == []
    assert batch[categories["MC"].id][0].is_fallback
    assert batch[categories["引き出物"].id][0].actual_price == 2500 * 30


def test_batch_skips_categories_without_target(matcher, categories, add_listing):
    add_listing("写真", price_min=80_000, price_max=80_000)

    batch = matcher.find_candidates_batch([categories["写真"], categories["MC"]], "chiba",
                                          {categories["MC"].id: 50_000})
    assert list(batch) == [categories["MC"].id]
