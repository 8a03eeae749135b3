# deterministic_layer.py
"""
Deterministic preprocessing layer for outfit generation.
Handles wardrobe normalization, hard-constraint filtering, weather-derived
constraints, stylist filter mapping and session option presets.
All pure logic lives here so the generator only deals with clean inputs.
"""
from math import floor
from typing import Dict, Iterable, List, Optional
import hashlib
import json

from contracts.models import (
    ClothingCategory,
    ClothingItem,
    Occasion,
    OutfitGenerationOptions,
    Season,
    StylePreference,
    StylistFilters,
    WeatherConditions,
    WeatherData,
)
from infra.logging import log_event
from scoring_matrix import estimate_item_style
from services.color_theory import are_colors_close

# Temperature bands in Celsius for weather-to-clothing mapping
TEMP_BANDS = [(10, "cold"), (18, "cool"), (24, "mild"), (30, "warm"), (float("inf"), "hot")]

# Stylist formality labels
FORMALITY_LEVELS = {
    "casual": 0.2,
    "semi-formal": 0.5,
    "formal": 0.8,
}

# Style presets override selected dials of the base preference
STYLE_PRESETS = {
    "minimalist": {"boldness": 0.2, "colorfulness": 0.3, "layering": 0.2},
    "bohemian": {"boldness": 0.7, "colorfulness": 0.8, "layering": 0.7},
    "classic": {"formality": 0.6, "boldness": 0.4, "colorfulness": 0.4},
    "trendy": {"boldness": 0.8, "colorfulness": 0.7, "layering": 0.6},
    "edgy": {"boldness": 0.9, "colorfulness": 0.5, "formality": 0.3},
    "romantic": {"boldness": 0.3, "colorfulness": 0.6, "layering": 0.5},
    "sporty": {"formality": 0.2, "boldness": 0.6, "layering": 0.3},
    "vintage": {"boldness": 0.5, "colorfulness": 0.6, "layering": 0.4},
}


# ============================================================================
# Wardrobe Normalization
# ============================================================================

def normalize_wardrobe(items: Iterable) -> List[ClothingItem]:
    """
    Normalizes raw wardrobe data into ClothingItem models.
    - Accepts dicts or ClothingItem instances
    - Colors are normalized to hex by the model
    - Deduplicates tags (case-insensitive, order kept)
    - Drops repeated ids (first occurrence wins)
    """
    norm = []
    seen_ids = set()
    for raw in items:
        item = raw if isinstance(raw, ClothingItem) else ClothingItem(**raw)
        if item.id in seen_ids:
            log_event("wardrobe_duplicate_item_dropped", item_id=item.id)
            continue
        seen_ids.add(item.id)

        tags = list(dict.fromkeys(t.strip().lower() for t in item.tags if t and t.strip()))
        if tags != item.tags:
            item = item.model_copy(update={"tags": tags})
        norm.append(item)
    return norm


def group_items_by_category(items: Iterable[ClothingItem]) -> Dict[ClothingCategory, List[ClothingItem]]:
    """Groups items by category, keeping wardrobe order within each group."""
    grouped: Dict[ClothingCategory, List[ClothingItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


# ============================================================================
# Weather
# ============================================================================

def temp_band(temperature: float) -> str:
    return next(label for t, label in TEMP_BANDS if temperature < t)


def season_for_weather(weather: WeatherData) -> Season:
    """Season used to pre-filter the wardrobe for the given weather."""
    t = weather.temperature
    if t < 10:
        return Season.WINTER
    if t < 18:
        return Season.FALL
    if t < 30:
        return Season.SPRING
    return Season.SUMMER


def season_for_temperature(temperature: float) -> Season:
    """Season targeted by weather-based sessions (narrower spring band)."""
    if temperature < 10:
        return Season.WINTER
    if temperature < 18:
        return Season.FALL
    if temperature < 24:
        return Season.SPRING
    return Season.SUMMER


def derive_constraints(weather: WeatherData) -> dict:
    """
    Derives clothing constraints from weather data.

    Returns:
        dict with temp_band, rain, windy, outerwear_recommended, season
    """
    band = temp_band(weather.temperature)
    rain = weather.precipitation > 0.5 or weather.conditions in (WeatherConditions.RAINY, WeatherConditions.SNOWY)
    windy = weather.wind_speed > 20 or weather.conditions == WeatherConditions.WINDY

    return {
        "temp_band": band,
        "rain": rain,
        "windy": windy,
        "outerwear_recommended": band in ["cold", "cool"] or windy,
        "season": season_for_temperature(weather.temperature).value,
    }


# ============================================================================
# Hard Constraints
# ============================================================================

def filter_by_palette(items: List[ClothingItem], colors: List[str]) -> List[ClothingItem]:
    """Keeps items whose color equals or is close to one of the palette colors."""
    if not colors:
        return list(items)
    return [
        item for item in items
        if any(item.color.lower() == c.lower() or are_colors_close(item.color, c) for c in colors)
    ]


def apply_hard_constraints(items: List[ClothingItem], options: OutfitGenerationOptions) -> List[ClothingItem]:
    """
    Filters the wardrobe down to items allowed by the options.
    Order: excluded items -> season -> occasion -> weather -> palette -> formality.
    The weather season only filters when no explicit season is set.
    Palette and formality only apply when strict_palette / formality_tolerance are set.
    """
    available = list(items)

    if options.excluded_items:
        excluded = set(options.excluded_items)
        available = [item for item in available if item.id not in excluded]

    if options.season:
        available = [item for item in available if options.season in item.season]

    if options.occasion:
        available = [item for item in available if options.occasion in item.occasion]

    if options.weather and not options.season:
        weather_season = season_for_weather(options.weather)
        available = [item for item in available if weather_season in item.season]

    if options.strict_palette and options.preferred_colors:
        available = filter_by_palette(available, options.preferred_colors)

    if options.formality_tolerance is not None and options.style_preference is not None:
        target = options.style_preference.formality
        available = [
            item for item in available
            if abs(estimate_item_style(item)["formality"] - target) <= options.formality_tolerance
        ]

    return available


# ============================================================================
# Stylist Filters
# ============================================================================

def map_formality_to_number(label: Optional[str], fallback: float) -> float:
    return FORMALITY_LEVELS.get((label or "").lower(), fallback)


def style_preference_for_preset(preset: Optional[str], base: StylePreference) -> StylePreference:
    """Applies a named style preset on top of the base dials. Unknown presets keep the base."""
    overrides = STYLE_PRESETS.get((preset or "").lower())
    if not overrides:
        return base
    return base.model_copy(update=overrides)


def filters_to_style_preference(filters: StylistFilters) -> StylePreference:
    dials = filters.style_preferences
    base = dials.model_copy(update={
        "formality": map_formality_to_number(filters.formality, dials.formality)
    })
    return style_preference_for_preset(filters.style, base)


def filters_to_options(filters: StylistFilters, wardrobe_size: int) -> OutfitGenerationOptions:
    """Generation options for an explicit filter apply (quality-biased)."""
    return OutfitGenerationOptions(
        occasion=filters.occasion,
        preferred_colors=filters.colors,
        style_preference=filters_to_style_preference(filters),
        max_results=min(25, max(6, wardrobe_size)),
        min_score=0.65,
    )


def filters_to_weather(filters: StylistFilters) -> WeatherData:
    """Synthetic weather for filter-driven weather sessions."""
    temperature = filters.temperature_range.min if filters.temperature_range else 20
    return WeatherData(
        temperature=temperature,
        conditions=filters.weather_conditions or WeatherConditions.CLEAR,
        precipitation=0,
        humidity=0.4,
        wind_speed=5,
    )


# ============================================================================
# Session Presets
# ============================================================================

def default_session_options(wardrobe_size: int) -> dict:
    return {
        "use_all_items": True,
        "max_results": min(75, max(15, floor(wardrobe_size * 1.5))),
        "min_score": 0.45,
    }


def weather_session_options(weather: WeatherData, wardrobe_size: int) -> dict:
    return {
        "season": season_for_temperature(weather.temperature),
        "weather": weather,
        "max_results": min(30, max(8, wardrobe_size)),
        "min_score": 0.4,
    }


def occasion_session_options(occasion: Occasion, wardrobe_size: int) -> dict:
    return {
        "occasion": occasion,
        "max_results": min(20, max(6, wardrobe_size)),
        "min_score": 0.5,
    }


def merge_options(*layers) -> OutfitGenerationOptions:
    """
    Merges option layers left to right (later wins).
    Layers may be dicts or OutfitGenerationOptions; only explicitly set fields count.
    """
    merged: dict = {}
    for layer in layers:
        if layer is None:
            continue
        if isinstance(layer, OutfitGenerationOptions):
            layer = layer.model_dump(exclude_unset=True)
        merged.update(layer)
    return OutfitGenerationOptions(**merged)


def prepare_input(user_input: dict) -> dict:
    """
    Main entry point for the deterministic layer.

    Args:
        user_input: Raw session input with wardrobe, options and optional filters

    Returns:
        context pack with normalized wardrobe, merged options and a content hash
    """
    wardrobe = normalize_wardrobe(user_input.get("wardrobe", []))

    if user_input.get("filters"):
        options = filters_to_options(StylistFilters(**user_input["filters"]), len(wardrobe))
        options = merge_options(options, user_input.get("options"))
    else:
        options = merge_options(user_input.get("options"))

    context_pack = {
        "wardrobe": wardrobe,
        "options": options,
        "derived": derive_constraints(options.weather) if options.weather else None,
    }

    # Hash of the normalized inputs, stable across runs
    payload = {
        "wardrobe": [w.model_dump(mode="json", exclude={"created_at", "updated_at"}) for w in wardrobe],
        "options": options.model_dump(mode="json"),
    }
    context_pack["_hash"] = hashlib.sha256(
        json.dumps(payload, sort_keys=True).encode()
    ).hexdigest()

    return context_pack
