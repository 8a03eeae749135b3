# services/outfit_composer.py
"""
Outfit Composition Logic for the recommendation engine.

Implements the category rules used while building outfits:
- Base structure: a dress, or a top + bottom
- Completing slots: shoes (when owned) + one accessory (or a fallback accessory category)
- Optional layers: coordinated undergarments and up to 2-3 coordinating accessories

Provides compatibility scoring, slot filling, validation and missing item suggestions.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set

from contracts.models import ClothingCategory, ClothingItem, CompletenessReport, Occasion
from deterministic_layer import group_items_by_category
from scoring_matrix import score_color_harmony
from services.color_theory import are_colors_close, color_family, hex_to_hsl, hue_difference

logger = logging.getLogger(__name__)

C = ClothingCategory

# ============================================================================
# Category Rules
# ============================================================================

# Categories that may appear more than once in an outfit
MULTI_ITEM_CATEGORIES = {C.ACCESSORIES, C.JEWELRY, C.SCARVES}
MAX_ITEMS_PER_MULTI_CATEGORY = 3

UNDERGARMENT_CATEGORIES = [C.UNDERWEAR, C.SHORTS_UNDERWEAR, C.BRAS, C.UNDERSHIRTS, C.SOCKS]

ACCESSORY_CATEGORIES = {C.ACCESSORIES, C.JEWELRY, C.BAGS, C.BELTS, C.HATS, C.SCARVES}

# Used in order when no generic accessories are owned
ACCESSORY_FALLBACK_CATEGORIES = [C.JEWELRY, C.BAGS, C.BELTS, C.HATS, C.SCARVES]

COORDINATING_CATEGORIES = [C.JEWELRY, C.BAGS, C.BELTS, C.HATS, C.SCARVES, C.OUTERWEAR]

ACCESSORY_PRIORITIES = {
    "formal": [C.JEWELRY, C.BAGS, C.BELTS, C.SCARVES, C.ACCESSORIES, C.HATS, C.OUTERWEAR],
    "business": [C.BELTS, C.BAGS, C.JEWELRY, C.ACCESSORIES, C.SCARVES, C.OUTERWEAR, C.HATS],
    "party": [C.JEWELRY, C.ACCESSORIES, C.BAGS, C.SCARVES, C.BELTS, C.HATS, C.OUTERWEAR],
    "athletic": [C.ACCESSORIES, C.BAGS, C.HATS, C.OUTERWEAR, C.BELTS, C.JEWELRY, C.SCARVES],
    "casual": [C.ACCESSORIES, C.BAGS, C.JEWELRY, C.HATS, C.BELTS, C.SCARVES, C.OUTERWEAR],
}

# Tags / occasions that make an accessory fit an outfit style
STYLE_MATCH_RULES = {
    "formal": ({"formal", "elegant"}, {Occasion.FORMAL}),
    "business": ({"business", "professional"}, {Occasion.WORK}),
    "party": ({"party", "fun"}, {Occasion.PARTY}),
    "athletic": ({"athletic", "sport"}, {Occasion.SPORT}),
    "casual": ({"casual"}, {Occasion.CASUAL}),
}

UNDERGARMENT_NEUTRAL_FAMILIES = {"white", "black", "gray"}
UNDERGARMENT_NEUTRAL_HEXES = ["#e3bc9a", "#f5f5dc"]  # nude, beige
ACCESSORY_NEUTRAL_FAMILIES = {"black", "white", "brown", "gray"}
ACCESSORY_NEUTRAL_HEXES = ["#d2b48c", "#ffd700", "#c0c0c0"]  # tan, gold, silver

UNDERGARMENT_MIN_SCORE = 0.2
OPTIONAL_ITEM_MIN_SCORE = 0.1


# ============================================================================
# Compatibility
# ============================================================================

def is_item_compatible(item: ClothingItem, outfit: List[ClothingItem]) -> bool:
    """
    Checks whether an item can join the outfit.
    Single-item categories may appear once; multi-item categories up to 3 times.
    """
    same_category = sum(1 for o in outfit if o.category == item.category)
    if item.category in MULTI_ITEM_CATEGORIES:
        return same_category < MAX_ITEMS_PER_MULTI_CATEGORY
    return same_category == 0


def _overlap(values: Iterable, outfit_values: Set) -> float:
    if not outfit_values:
        return 1.0
    return sum(1 for v in values if v in outfit_values) / len(outfit_values)


def item_compatibility_score(item: ClothingItem, outfit: List[ClothingItem]) -> float:
    """
    How well an item matches the current outfit (0-1).
    Color harmony of the combined outfit (40%), season overlap (30%), occasion overlap (30%).
    """
    if not outfit:
        return 1.0

    color_score = score_color_harmony(outfit + [item])
    seasons = {s for o in outfit for s in o.season}
    occasions = {oc for o in outfit for oc in o.occasion}

    return (
        color_score * 0.4
        + _overlap(item.season, seasons) * 0.3
        + _overlap(item.occasion, occasions) * 0.3
    )


def find_best_item_in_category(
    category_items: List[ClothingItem],
    outfit: List[ClothingItem],
) -> Optional[ClothingItem]:
    """
    Best-scoring compatible item in a category, or None when nothing fits.
    Ties keep wardrobe order.
    """
    candidates = [item for item in category_items if is_item_compatible(item, outfit)]
    if not candidates:
        return None
    return max(candidates, key=lambda item: item_compatibility_score(item, outfit))


def completing_categories(by_category: Dict[ClothingCategory, List[ClothingItem]]) -> List[ClothingCategory]:
    """Shoes (when owned) plus one accessory category (generic accessories or the first owned fallback)."""
    categories = []
    if by_category.get(C.SHOES):
        categories.append(C.SHOES)

    if by_category.get(C.ACCESSORIES):
        categories.append(C.ACCESSORIES)
    else:
        fallback = next((c for c in ACCESSORY_FALLBACK_CATEGORIES if by_category.get(c)), None)
        if fallback is not None:
            logger.debug("No accessories owned, using %s as accessory fallback", fallback.value)
            categories.append(fallback)
    return categories


# ============================================================================
# Accessory & Undergarment Coordination
# ============================================================================

def extract_outfit_colors(outfit: List[ClothingItem]) -> List[str]:
    return list(dict.fromkeys(item.color for item in outfit))


def determine_outfit_style(outfit: List[ClothingItem]) -> str:
    """formal / business / party / athletic / casual, from occasions and tags."""
    tags = {t.lower() for item in outfit for t in item.tags}
    occasions = {oc for item in outfit for oc in item.occasion}

    if Occasion.FORMAL in occasions or "formal" in tags:
        return "formal"
    if Occasion.WORK in occasions or "business" in tags:
        return "business"
    if Occasion.PARTY in occasions or "party" in tags:
        return "party"
    if Occasion.SPORT in occasions or "athletic" in tags:
        return "athletic"
    return "casual"


def prioritize_accessories(categories: List[ClothingCategory], outfit_style: str) -> List[ClothingCategory]:
    order = ACCESSORY_PRIORITIES.get(outfit_style, ACCESSORY_PRIORITIES["casual"])
    return [c for c in order if c in categories]


def _is_neutral_for(item: ClothingItem, families: Set[str], hexes: List[str]) -> bool:
    if color_family(item.color) in families:
        return True
    return any(are_colors_close(item.color, h) for h in hexes)


def undergarment_color_score(item: ClothingItem, outfit_colors: List[str]) -> float:
    if _is_neutral_for(item, UNDERGARMENT_NEUTRAL_FAMILIES, UNDERGARMENT_NEUTRAL_HEXES):
        return 0.9
    if any(are_colors_close(item.color, c) for c in outfit_colors):
        return 0.8
    return 0.5


def accessory_color_score(item: ClothingItem, outfit_colors: List[str]) -> float:
    if any(are_colors_close(item.color, c) for c in outfit_colors):
        return 1.0

    item_hue = hex_to_hsl(item.color)[0]
    for c in outfit_colors:
        diff = hue_difference(item_hue, hex_to_hsl(c)[0])
        if abs(diff - 180) < 30:
            return 0.9  # complementary
        if diff < 60:
            return 0.8  # analogous

    if _is_neutral_for(item, ACCESSORY_NEUTRAL_FAMILIES, ACCESSORY_NEUTRAL_HEXES):
        return 0.7
    return 0.3


def accessory_style_score(item: ClothingItem, outfit_style: str) -> float:
    tags = {t.lower() for t in item.tags}
    match_tags, match_occasions = STYLE_MATCH_RULES.get(outfit_style, STYLE_MATCH_RULES["casual"])

    if tags & match_tags or match_occasions & set(item.occasion):
        return 1.0
    if tags & {"versatile", "classic"}:
        return 0.7
    return 0.4


def has_accessory(outfit: List[ClothingItem]) -> bool:
    return any(item.category in ACCESSORY_CATEGORIES for item in outfit)


def add_coordinated_undergarments(
    outfit: List[ClothingItem],
    by_category: Dict[ClothingCategory, List[ClothingItem]],
    forced_categories: Set[ClothingCategory],
) -> List[ClothingItem]:
    """Adds the best-matching piece of each undergarment category when it scores above 0.2."""
    result = list(outfit)
    main_colors = extract_outfit_colors(outfit)

    for category in UNDERGARMENT_CATEGORIES:
        if category in forced_categories or any(i.category == category for i in result):
            continue

        best_item, best_score = None, -1.0
        for item in by_category.get(category, []):
            if not is_item_compatible(item, result):
                continue
            score = (undergarment_color_score(item, main_colors) + item_compatibility_score(item, result)) / 2
            if score > best_score:
                best_item, best_score = item, score

        if best_item is not None and best_score > UNDERGARMENT_MIN_SCORE:
            result.append(best_item)

    return result


def add_coordinating_accessories(
    outfit: List[ClothingItem],
    by_category: Dict[ClothingCategory, List[ClothingItem]],
    forced_categories: Set[ClothingCategory],
    categories: Optional[List[ClothingCategory]] = None,
) -> List[ClothingItem]:
    """
    Adds up to 2 coordinating accessories (3 when the outfit has none yet).

    Each candidate scores color 40% + style 30% + compatibility 30%; the first
    accessory of an accessory-less outfit gets a 0.2 boost and a lower bar.
    """
    result = list(outfit)
    outfit_colors = extract_outfit_colors(outfit)
    outfit_style = determine_outfit_style(outfit)
    has_mandatory = has_accessory(result)

    max_added = 2 if has_mandatory else 3
    added = 0

    for category in prioritize_accessories(categories or COORDINATING_CATEGORIES, outfit_style):
        if added >= max_added:
            break
        if category in forced_categories or any(i.category == category for i in result):
            continue

        urgent = not has_mandatory and added == 0
        best_item, best_score = None, -1.0
        for item in by_category.get(category, []):
            if not is_item_compatible(item, result):
                continue
            score = (
                accessory_color_score(item, outfit_colors) * 0.4
                + accessory_style_score(item, outfit_style) * 0.3
                + item_compatibility_score(item, result) * 0.3
                + (0.2 if urgent else 0.0)
            )
            if score > best_score:
                best_item, best_score = item, score

        threshold = 0.3 if urgent else 0.4
        if best_item is not None and best_score > threshold:
            result.append(best_item)
            added += 1
            logger.debug("Added %s: %s (score: %.2f)", category.value, best_item.name, best_score)

    return result


def add_best_optional_items(
    outfit: List[ClothingItem],
    by_category: Dict[ClothingCategory, List[ClothingItem]],
    categories: List[ClothingCategory],
) -> List[ClothingItem]:
    """Greedily fills each missing category with its best item if compatibility > 0.1."""
    result = list(outfit)
    for category in categories:
        if any(i.category == category for i in result):
            continue
        best = find_best_item_in_category(by_category.get(category, []), result)
        if best is not None and item_compatibility_score(best, result) > OPTIONAL_ITEM_MIN_SCORE:
            result.append(best)
    return result


# ============================================================================
# Validation
# ============================================================================

def validate_outfit(
    outfit: List[ClothingItem],
    by_category: Dict[ClothingCategory, List[ClothingItem]],
) -> Dict[str, any]:
    """
    Validate an outfit against the wardrobe it was built from.

    Top and bottom are always required (a dress covers both). Shoes and an
    accessory are required only when the wardrobe owns any.

    Returns:
        {
            "is_valid": bool,
            "missing_slots": List[str],
            "errors": List[str],
            "warnings": List[str]
        }
    """
    categories = {item.category for item in outfit}
    missing_slots = []
    errors = []
    warnings = []

    if not categories & {C.TOPS, C.DRESSES}:
        missing_slots.append("top")
    if not categories & {C.BOTTOMS, C.DRESSES}:
        missing_slots.append("bottom")

    shoes_owned = bool(by_category.get(C.SHOES))
    if C.SHOES not in categories:
        if shoes_owned:
            missing_slots.append("shoes")
        else:
            warnings.append("No shoes in wardrobe; outfit has no footwear")

    accessories_owned = any(by_category.get(c) for c in ACCESSORY_CATEGORIES)
    if not categories & ACCESSORY_CATEGORIES:
        if accessories_owned:
            missing_slots.append("accessory")
        else:
            warnings.append("No accessories in wardrobe; outfit has no accessory")

    for category in categories:
        count = sum(1 for i in outfit if i.category == category)
        limit = MAX_ITEMS_PER_MULTI_CATEGORY if category in MULTI_ITEM_CATEGORIES else 1
        if count > limit:
            errors.append(f"Too many {category.value}: {count} (max {limit})")

    if missing_slots:
        errors.append(f"Missing required slots: {', '.join(missing_slots)}")

    return {
        "is_valid": not errors,
        "missing_slots": missing_slots,
        "errors": errors,
        "warnings": warnings,
    }


def analyze_outfit_completeness(items: List[ClothingItem]) -> CompletenessReport:
    """Checks a hand-built outfit for a top, a bottom and shoes."""
    categories = {item.category for item in items}
    missing = []
    suggestions = []

    if not categories & {C.TOPS, C.DRESSES}:
        missing.append("Top")
        suggestions.append("Add a shirt, blouse, or sweater")
    if not categories & {C.BOTTOMS, C.DRESSES}:
        missing.append("Bottom")
        suggestions.append("Add pants, skirt, or shorts")
    if C.SHOES not in categories:
        missing.append("Shoes")
        suggestions.append("Add appropriate footwear")

    return CompletenessReport(
        is_complete=not missing,
        missing_categories=missing,
        suggestions=suggestions,
    )


def suggest_missing_items(
    outfit: List[ClothingItem],
    wardrobe: List[ClothingItem],
) -> List[ClothingItem]:
    """
    Suggest wardrobe items that would complete the outfit.

    Returns:
        One best-matching item per missing slot, in slot order.
    """
    outfit_ids = {i.id for i in outfit}
    by_category = group_items_by_category(i for i in wardrobe if i.id not in outfit_ids)
    report = validate_outfit(outfit, group_items_by_category(wardrobe))

    slot_categories = {
        "top": [C.TOPS, C.DRESSES],
        "bottom": [C.BOTTOMS],
        "shoes": [C.SHOES],
        "accessory": [C.ACCESSORIES] + ACCESSORY_FALLBACK_CATEGORIES,
    }

    suggestions = []
    working = list(outfit)
    for slot in report["missing_slots"]:
        pool = [i for c in slot_categories[slot] for i in by_category.get(c, [])]
        best = find_best_item_in_category(pool, working)
        if best is not None:
            suggestions.append(best)
            working.append(best)
    return suggestions


def format_outfit_summary(outfit: List[ClothingItem]) -> str:
    """
    Format an outfit as a human-readable summary.

    Returns:
        e.g. "tops: White Tee | bottoms: Blue Jeans | shoes: Sneakers"
    """
    return " | ".join(f"{item.category.value}: {item.name}" for item in outfit)
