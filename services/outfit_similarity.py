# services/outfit_similarity.py
"""
Outfit similarity detection.

Compares two outfits on shared items, close colors, shared categories and
shared style tags. Used to warn before saving near-duplicates and, through
key_similarity, to keep generated result sets varied.
"""
from typing import Dict, List, Sequence

from contracts.models import ClothingItem, SimilarityBreakdown, SimilarityResult
from services.color_theory import are_colors_close

SIMILARITY_WEIGHTS = {
    "item_match": 0.40,
    "color_match": 0.25,
    "category_match": 0.20,
    "style_match": 0.15,
}

VERY_SIMILAR_THRESHOLD = 0.6

# Pure black/white carry no color signal
IGNORED_PRIMARY_COLORS = {"#000000", "#ffffff"}

STYLE_TAGS = {"casual", "formal", "business", "sporty", "vintage", "trendy", "classic", "bohemian"}


def _jaccard(a: set, b: set) -> float:
    union = a | b
    return len(a & b) / len(union) if union else 0.0


def key_similarity(key1: str, key2: str) -> float:
    """Jaccard similarity between two outfit keys (item ids joined by '|')."""
    return _jaccard(set(key1.split("|")), set(key2.split("|")))


def _primary_colors(outfit: List[ClothingItem]) -> List[str]:
    return [item.color for item in outfit if item.color and item.color.lower() not in IGNORED_PRIMARY_COLORS]


def _styles(outfit: List[ClothingItem]) -> List[str]:
    return [tag.lower() for item in outfit for tag in item.tags if tag.lower() in STYLE_TAGS]


def _color_match(outfit1: List[ClothingItem], outfit2: List[ClothingItem]) -> float:
    colors1, colors2 = _primary_colors(outfit1), _primary_colors(outfit2)
    if not colors1 or not colors2:
        return 0.0
    close_pairs = sum(1 for c1 in colors1 for c2 in colors2 if are_colors_close(c1, c2))
    return close_pairs / (len(colors1) * len(colors2))


def compare_outfits(outfit1: List[ClothingItem], outfit2: List[ClothingItem]) -> SimilarityResult:
    """
    Weighted similarity of two outfits (0-1).
    Outfits scoring above 0.6 are flagged as very similar.
    """
    if not outfit1 or not outfit2:
        return SimilarityResult()

    breakdown = SimilarityBreakdown(
        item_match=_jaccard({i.id for i in outfit1}, {i.id for i in outfit2}),
        color_match=_color_match(outfit1, outfit2),
        category_match=_jaccard({i.category for i in outfit1}, {i.category for i in outfit2}),
        style_match=_jaccard(set(_styles(outfit1)), set(_styles(outfit2))),
    )
    scores = breakdown.model_dump()
    similarity = sum(SIMILARITY_WEIGHTS[k] * scores[k] for k in SIMILARITY_WEIGHTS)

    return SimilarityResult(
        similarity=similarity,
        is_very_similar=similarity > VERY_SIMILAR_THRESHOLD,
        breakdown=breakdown,
    )


def get_outfit_fingerprint(outfit: List[ClothingItem]) -> str:
    """categories|colors|tags, each sorted, for cheap exact-look comparisons."""
    categories = sorted(item.category.value for item in outfit)
    colors = sorted(item.color for item in outfit if item.color)
    styles = sorted(tag for item in outfit for tag in item.tags)
    return f"{','.join(categories)}|{','.join(colors)}|{','.join(styles)}"


def find_similar_outfits(
    new_outfit: List[ClothingItem],
    existing_outfits: Sequence,
) -> List[Dict]:
    """
    Find saved outfits that are very similar to a new one.

    Args:
        new_outfit: Items of the outfit being considered
        existing_outfits: Objects with an `items` attribute (or dicts with an "items" key)

    Returns:
        [{"outfit_index": int, "similarity": SimilarityResult}, ...] most similar first
    """
    matches = []
    for index, existing in enumerate(existing_outfits):
        items = existing["items"] if isinstance(existing, dict) else existing.items
        result = compare_outfits(new_outfit, items)
        if result.is_very_similar:
            matches.append({"outfit_index": index, "similarity": result})

    matches.sort(key=lambda m: m["similarity"].similarity, reverse=True)
    return matches
