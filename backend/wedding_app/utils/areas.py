# backend/wedding_app/utils/areas.py

from typing import Dict, Iterable, List, Optional, Set


ALL_REGIONS_ID = "zenkoku"


# -------------------------------------------------------------------
# PREFECTURES
# -------------------------------------------------------------------
AREAS: Dict[str, str] = {
    "hokkaido": "北海道",
    "aomori": "青森県",
    "iwate": "岩手県",
    "miyagi": "宮城県",
    "akita": "秋田県",
    "yamagata": "山形県",
    "fukushima": "福島県",
    "ibaraki": "茨城県",
    "tochigi": "栃木県",
    "gunma": "群馬県",
    "saitama": "埼玉県",
    "chiba": "千葉県",
    "tokyo": "東京都",
    "kanagawa": "神奈川県",
    "niigata": "新潟県",
    "toyama": "富山県",
    "ishikawa": "石川県",
    "fukui": "福井県",
    "yamanashi": "山梨県",
    "nagano": "長野県",
    "gifu": "岐阜県",
    "shizuoka": "静岡県",
    "aichi": "愛知県",
    "mie": "三重県",
    "shiga": "滋賀県",
    "kyoto": "京都府",
    "osaka": "大阪府",
    "hyogo": "兵庫県",
    "nara": "奈良県",
    "wakayama": "和歌山県",
    "tottori": "鳥取県",
    "shimane": "島根県",
    "okayama": "岡山県",
    "hiroshima": "広島県",
    "yamaguchi": "山口県",
    "tokushima": "徳島県",
    "kagawa": "香川県",
    "ehime": "愛媛県",
    "kochi": "高知県",
    "fukuoka": "福岡県",
    "saga": "佐賀県",
    "nagasaki": "長崎県",
    "kumamoto": "熊本県",
    "oita": "大分県",
    "miyazaki": "宮崎県",
    "kagoshima": "鹿児島県",
    "okinawa": "沖縄県",
}


# -------------------------------------------------------------------
# REGION GROUPS
# -------------------------------------------------------------------
AREA_GROUPS: Dict[str, Dict[str, object]] = {
    ALL_REGIONS_ID: {"name": "全国", "area_ids": list(AREAS)},
    "kanto": {
        "name": "関東",
        "area_ids": ["ibaraki", "tochigi", "gunma", "saitama", "chiba", "tokyo", "kanagawa"],
    },
    "kansai": {
        "name": "関西",
        "area_ids": ["shiga", "kyoto", "osaka", "hyogo", "nara", "wakayama"],
    },
    "chubu": {
        "name": "中部",
        "area_ids": ["niigata", "toyama", "ishikawa", "fukui", "yamanashi", "nagano", "gifu", "shizuoka", "aichi"],
    },
    "chugoku": {
        "name": "中国",
        "area_ids": ["tottori", "shimane", "okayama", "hiroshima", "yamaguchi"],
    },
    "shikoku": {
        "name": "四国",
        "area_ids": ["tokushima", "kagawa", "ehime", "kochi"],
    },
    "kyushu": {
        "name": "九州",
        "area_ids": ["fukuoka", "saga", "nagasaki", "kumamoto", "oita", "miyazaki", "kagoshima", "okinawa"],
    },
    "tohoku": {
        "name": "東北",
        "area_ids": ["aomori", "iwate", "miyagi", "akita", "yamagata", "fukushima"],
    },
    "hokkaido": {"name": "北海道", "area_ids": ["hokkaido"]},
}


def display_name(area_id: str) -> str:
    """Group name, prefecture name, or the id itself when unknown."""
    if area_id in AREA_GROUPS:
        return AREA_GROUPS[area_id]["name"]
    return AREAS.get(area_id, area_id)


def id_from_display_name(name: str) -> Optional[str]:
    for group_id, group in AREA_GROUPS.items():
        if group["name"] == name:
            return group_id
    for area_id, area_name in AREAS.items():
        if area_name == name:
            return area_id
    return None


def expand(area_or_group_ids: Iterable[str]) -> List[str]:
    """
    Expand any mix of group ids and prefecture ids into prefecture ids.
    Unknown ids are dropped, order of first appearance is kept.
    """
    expanded: List[str] = []
    for area_id in area_or_group_ids:
        if area_id in AREA_GROUPS:
            members = AREA_GROUPS[area_id]["area_ids"]
        elif area_id in AREAS:
            members = [area_id]
        else:
            continue
        for member in members:
            if member not in expanded:
                expanded.append(member)
    return expanded


def matching_area_ids(search_id: str) -> Set[str]:
    """
    Ids a listing may be tagged with to show up for `search_id`.

    chiba  -> {chiba, kanto, zenkoku}
    kanto  -> {kanto, ibaraki, tochigi, ..., kanagawa}
    """
    matching = {search_id}

    if search_id in AREA_GROUPS:
        matching.update(AREA_GROUPS[search_id]["area_ids"])
        return matching

    for group_id, group in AREA_GROUPS.items():
        if search_id in group["area_ids"]:
            matching.add(group_id)
    return matching


def search_tokens(search_id: str, include_display_name: bool = True) -> Set[str]:
    """
    Every value in a profile's area list that counts as a hit for `search_id`:
    the matching ids, the all-regions marker, and (for records saved before
    area ids existed) the free-text display name.
    """
    tokens = matching_area_ids(search_id)
    tokens.add(ALL_REGIONS_ID)
    if include_display_name:
        tokens.add(display_name(search_id))
    return tokens


def profile_matches(profile_areas: Iterable[str], tokens: Set[str]) -> bool:
    profile_areas = list(profile_areas)
    if ALL_REGIONS_ID in profile_areas:
        return True
    return any(area in tokens for area in profile_areas)
