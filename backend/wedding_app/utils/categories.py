# backend/wedding_app/utils/categories.py
#
# Category master. Role and unit kind are fixed here and written to the
# store on seed, so nothing downstream branches on display names.

from wedding_app.models.listing_models import CategoryRole, UnitKind


VENUE_CATEGORY_NAME = "会場"

CATEGORIES = [
    {"name": VENUE_CATEGORY_NAME, "display_order": 1, "role": CategoryRole.VENUE},
    {"name": "写真", "display_order": 2},
    {"name": "ケータリング", "display_order": 3},
    {"name": "ドレス", "display_order": 4},
    {"name": "引き出物", "display_order": 5, "unit_kind": UnitKind.PER_GUEST},
    {"name": "ヘアメイク", "display_order": 6},
    {"name": "デイオブプランナー", "display_order": 7, "role": CategoryRole.DAY_OF_PLANNER},
    {"name": "ケーキ", "display_order": 8},
    {"name": "スタッフ", "display_order": 9},
    {"name": "プランナー", "display_order": 10, "role": CategoryRole.PLANNER},
    {"name": "MC", "display_order": 11},
    {"name": "映像", "display_order": 12},
]


def category_seed_rows():
    for item in CATEGORIES:
        yield (
            item["name"],
            item["display_order"],
            item.get("role", CategoryRole.NORMAL).value,
            item.get("unit_kind", UnitKind.PER_ITEM).value,
        )
