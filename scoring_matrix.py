# scoring_matrix.py
"""
Deterministic scoring system for outfit recommendations.
Every dimension returns 0-1; the total is the weighted sum of dimensions.
"""
from typing import Dict, List, Optional

from contracts.models import (
    ClothingCategory,
    ClothingItem,
    Occasion,
    ScoreBreakdown,
    Season,
    StylePreference,
    WeatherConditions,
    WeatherData,
)
from services.color_theory import (
    COLOR_HARMONY,
    are_colors_close,
    color_distance,
    determine_color_harmony,
    hex_to_hsl,
)

# Scoring weights (must sum to 1.0)
WEIGHTS = {
    "color_harmony": 0.20,
    "style_matching": 0.20,
    "occasion_suitability": 0.20,
    "season_suitability": 0.15,
    "weather_suitability": 0.15,
    "user_preference": 0.05,
    "variety": 0.05,
}

HARMONY_SCORES = {
    COLOR_HARMONY["MONOCHROMATIC"]: 0.95,
    COLOR_HARMONY["ANALOGOUS"]: 0.90,
    COLOR_HARMONY["COMPLEMENTARY"]: 0.85,
    COLOR_HARMONY["TRIADIC"]: 0.80,
    COLOR_HARMONY["NEUTRAL"]: 0.75,
}

# Baseline (formality, boldness) per category
CATEGORY_STYLE_VALUES = {
    ClothingCategory.TOPS: (0.5, 0.5),
    ClothingCategory.BOTTOMS: (0.5, 0.4),
    ClothingCategory.DRESSES: (0.7, 0.6),
    ClothingCategory.OUTERWEAR: (0.6, 0.5),
    ClothingCategory.SHOES: (0.5, 0.4),
    ClothingCategory.ACCESSORIES: (0.5, 0.7),
    ClothingCategory.UNDERWEAR: (0.3, 0.5),
    ClothingCategory.SOCKS: (0.3, 0.4),
    ClothingCategory.UNDERSHIRTS: (0.3, 0.3),
    ClothingCategory.BRAS: (0.3, 0.4),
    ClothingCategory.SHORTS_UNDERWEAR: (0.3, 0.4),
    ClothingCategory.JEWELRY: (0.6, 0.8),
    ClothingCategory.BAGS: (0.5, 0.5),
    ClothingCategory.BELTS: (0.5, 0.5),
    ClothingCategory.HATS: (0.4, 0.7),
    ClothingCategory.SCARVES: (0.6, 0.6),
    ClothingCategory.ACTIVEWEAR: (0.2, 0.6),
    ClothingCategory.SLEEPWEAR: (0.1, 0.4),
    ClothingCategory.SWIMWEAR: (0.3, 0.7),
}

OCCASION_FORMALITY_SHIFT = {
    Occasion.FORMAL: 0.3,
    Occasion.WORK: 0.2,
    Occasion.CASUAL: -0.2,
    Occasion.SPORT: -0.3,
}

BOLD_TAGS = ["bright", "pattern", "print", "colorful", "vibrant"]
CONSERVATIVE_TAGS = ["plain", "simple", "basic", "classic"]

# Pieces that count as a visible layer
LAYERING_CATEGORIES = {
    ClothingCategory.TOPS,
    ClothingCategory.OUTERWEAR,
    ClothingCategory.SCARVES,
    ClothingCategory.UNDERSHIRTS,
    ClothingCategory.DRESSES,
}

# Share of the style score per stylist dial
STYLE_DIAL_WEIGHTS = {
    "formality": 0.35,
    "boldness": 0.35,
    "layering": 0.15,
    "colorfulness": 0.15,
}

# Temperature band upper bounds (Celsius)
COLD_MAX = 10
COOL_MAX = 18
MILD_MAX = 24
WARM_MAX = 30

LONG_SLEEVE_TAGS = ["long sleeve", "long-sleeve"]
WATERPROOF_TAGS = ["waterproof", "water-resistant", "rain"]
WINDPROOF_TAGS = ["windproof", "wind-resistant"]


def clamp(x: float) -> float:
    """Clamps a value between 0 and 1."""
    return max(0.0, min(1.0, x))


def _has_tag(item: ClothingItem, keywords: List[str]) -> bool:
    return any(kw in tag.lower() for tag in item.tags for kw in keywords)


# ============================================================================
# Dimension Scores
# ============================================================================

def score_color_harmony(items: List[ClothingItem]) -> float:
    """
    Scores how well the outfit colors work together (0-1).

    Recognised harmonies get a fixed score; anything else is scored by
    average pairwise HSL distance, peaking at moderate contrast.
    """
    if len(items) <= 1:
        return 1.0

    hsl_colors = [hex_to_hsl(item.color) for item in items]
    harmony = determine_color_harmony(hsl_colors)
    if harmony in HARMONY_SCORES:
        return HARMONY_SCORES[harmony]
    return color_distance_score(hsl_colors)


def color_distance_score(hsl_colors) -> float:
    if len(hsl_colors) <= 1:
        return 1.0

    total = 0.0
    pairs = 0
    for i in range(len(hsl_colors)):
        for j in range(i + 1, len(hsl_colors)):
            total += color_distance(hsl_colors[i], hsl_colors[j])
            pairs += 1

    normalized = min(1.0, (total / pairs) / 150)
    # Too close lacks contrast, too far clashes
    return 1 - abs(normalized - 0.5) * 2


def estimate_item_style(item: ClothingItem) -> Dict[str, float]:
    """Estimates an item's formality and boldness from category, occasions and tags."""
    formality, boldness = CATEGORY_STYLE_VALUES.get(item.category, (0.5, 0.5))

    for occasion, shift in OCCASION_FORMALITY_SHIFT.items():
        if occasion in item.occasion:
            formality += shift

    for tag in item.tags:
        t = tag.lower()
        if any(b in t for b in BOLD_TAGS):
            boldness += 0.1
        if any(c in t for c in CONSERVATIVE_TAGS):
            boldness -= 0.1

    return {"formality": clamp(formality), "boldness": clamp(boldness)}


def outfit_layering_level(items: List[ClothingItem]) -> float:
    """0 for a single layer, 0.5 for two, 1 for three or more."""
    layers = sum(1 for item in items if item.category in LAYERING_CATEGORIES)
    return clamp((layers - 1) / 2)


def outfit_colorfulness_level(items: List[ClothingItem]) -> float:
    """Mean saturation of the outfit colors."""
    if not items:
        return 0.0
    return sum(hex_to_hsl(item.color)[1] for item in items) / len(items)


def outfit_style_profile(items: List[ClothingItem]) -> Dict[str, float]:
    estimates = [estimate_item_style(item) for item in items]
    return {
        "formality": sum(e["formality"] for e in estimates) / len(estimates),
        "boldness": sum(e["boldness"] for e in estimates) / len(estimates),
        "layering": outfit_layering_level(items),
        "colorfulness": outfit_colorfulness_level(items),
    }


def score_style_matching(items: List[ClothingItem], preference: Optional[StylePreference]) -> float:
    """
    Scores closeness to the stylist dials (0-1).
    No preference means every outfit matches.
    """
    if preference is None or not items:
        return 1.0

    profile = outfit_style_profile(items)
    wanted = preference.model_dump()
    return sum(
        weight * (1 - abs(profile[dial] - wanted[dial]))
        for dial, weight in STYLE_DIAL_WEIGHTS.items()
    )


def score_occasion_suitability(items: List[ClothingItem], occasion: Optional[Occasion]) -> float:
    """Share of items suited to the occasion (1.0 when no occasion is set)."""
    if occasion is None or not items:
        return 1.0
    return sum(1 for item in items if occasion in item.occasion) / len(items)


def score_season_suitability(items: List[ClothingItem], season: Optional[Season]) -> float:
    """Share of items suited to the season (1.0 when no season is set)."""
    if season is None or not items:
        return 1.0
    return sum(1 for item in items if season in item.season) / len(items)


def score_weather_suitability(items: List[ClothingItem], weather: Optional[WeatherData]) -> float:
    """
    Scores weather appropriateness (0-1).

    Considers:
    - Temperature vs. layers (outerwear, long sleeves)
    - Rain/snow and water-resistant pieces
    - Wind and wind-resistant pieces
    """
    if weather is None:
        return 1.0

    has_outerwear = any(item.category == ClothingCategory.OUTERWEAR for item in items)
    has_long_sleeves = any(_has_tag(item, LONG_SLEEVE_TAGS) for item in items)

    t = weather.temperature
    if t < COLD_MAX:
        temperature_score = 1.0 if has_outerwear else 0.3
    elif t < COOL_MAX:
        temperature_score = 1.0 if (has_outerwear or has_long_sleeves) else 0.6
    elif t < MILD_MAX:
        temperature_score = 1.0
    elif t < WARM_MAX:
        temperature_score = 0.5 if has_outerwear else 1.0
    elif has_outerwear:
        temperature_score = 0.2
    else:
        temperature_score = 0.6 if has_long_sleeves else 1.0

    precipitation_score = 1.0
    if weather.precipitation > 0.5 or weather.conditions in (WeatherConditions.RAINY, WeatherConditions.SNOWY):
        precipitation_score = 1.0 if any(_has_tag(item, WATERPROOF_TAGS) for item in items) else 0.5

    wind_score = 1.0
    if weather.wind_speed > 20 or weather.conditions == WeatherConditions.WINDY:
        wind_resistant = any(
            _has_tag(item, WINDPROOF_TAGS) or item.category == ClothingCategory.OUTERWEAR
            for item in items
        )
        wind_score = 1.0 if wind_resistant else 0.7

    return temperature_score * 0.6 + precipitation_score * 0.3 + wind_score * 0.1


def score_user_preference(items: List[ClothingItem], preferred_colors: Optional[List[str]]) -> float:
    """Share of items in (or close to) a preferred color."""
    if not preferred_colors or not items:
        return 1.0
    matching = [
        item for item in items
        if any(item.color.lower() == c.lower() or are_colors_close(item.color, c) for c in preferred_colors)
    ]
    return len(matching) / len(items)


# ============================================================================
# Totals
# ============================================================================

def weighted_total(breakdown: ScoreBreakdown) -> float:
    """Weighted sum of all dimensions."""
    scores = breakdown.model_dump()
    return sum(WEIGHTS[k] * scores[k] for k in WEIGHTS.keys())


def recency_penalty(days_since: float, window_days: float = 7.0) -> float:
    """Penalty for re-suggesting an outfit, fading linearly over the window."""
    return max(0.0, 0.5 * (1 - days_since / window_days))
