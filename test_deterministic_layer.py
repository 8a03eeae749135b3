#!/usr/bin/env python3
"""
Tests for wardrobe normalization, hard constraints and stylist filter mapping.
"""
from contracts.models import (
    ClothingCategory,
    Occasion,
    OutfitGenerationOptions,
    Season,
    StylePreference,
    StylistFilters,
    TemperatureRange,
    WeatherConditions,
    WeatherData,
)
from deterministic_layer import (
    apply_hard_constraints,
    default_session_options,
    derive_constraints,
    filter_by_palette,
    filters_to_options,
    filters_to_style_preference,
    filters_to_weather,
    group_items_by_category,
    map_formality_to_number,
    merge_options,
    normalize_wardrobe,
    occasion_session_options,
    prepare_input,
    season_for_temperature,
    season_for_weather,
    temp_band,
    weather_session_options,
)

WARDROBE = [
    {"id": "t1", "name": "Linen shirt", "category": "tops", "color": "white",
     "season": ["summer", "spring"], "occasion": ["casual", "work"], "tags": ["Linen", "linen ", ""]},
    {"id": "t2", "name": "Wool sweater", "category": "tops", "color": "navy",
     "season": ["winter", "fall"], "occasion": ["casual"]},
    {"id": "b1", "name": "Chinos", "category": "bottoms", "color": "beige",
     "season": ["summer", "spring", "fall"], "occasion": ["work"]},
    {"id": "d1", "name": "Gown", "category": "dresses", "color": "#8b0000",
     "season": ["winter"], "occasion": ["formal"]},
    {"id": "t1", "name": "Duplicate shirt", "category": "tops", "color": "#000"},
]


def test_normalize_wardrobe():
    """Test normalization of raw wardrobe dicts."""
    print("\n=== Testing Wardrobe Normalization ===")

    items = normalize_wardrobe(WARDROBE)
    print(f"Normalized {len(items)} items")

    assert [i.id for i in items] == ["t1", "t2", "b1", "d1"]
    assert items[0].name == "Linen shirt"
    assert items[0].tags == ["linen"]
    assert items[0].color == "#ffffff"
    assert items[1].color == "#000080"
    assert items[0].category == ClothingCategory.TOPS

    grouped = group_items_by_category(items)
    assert [i.id for i in grouped[ClothingCategory.TOPS]] == ["t1", "t2"]
    assert ClothingCategory.SHOES not in grouped
    print("✓ Wardrobe normalization works!")


def test_weather_mappings():
    print("\n=== Testing Weather Mappings ===")

    assert temp_band(5) == "cold"
    assert temp_band(15) == "cool"
    assert temp_band(20) == "mild"
    assert temp_band(27) == "warm"
    assert temp_band(35) == "hot"

    # Generator filter uses a wide spring band, sessions a narrow one
    assert season_for_weather(WeatherData(temperature=26)) == Season.SPRING
    assert season_for_temperature(26) == Season.SUMMER
    assert season_for_weather(WeatherData(temperature=5)) == Season.WINTER
    assert season_for_temperature(12) == Season.FALL

    derived = derive_constraints(WeatherData(temperature=5, conditions=WeatherConditions.RAINY))
    assert derived["temp_band"] == "cold"
    assert derived["rain"] is True
    assert derived["windy"] is False
    assert derived["outerwear_recommended"] is True
    assert derived["season"] == "winter"
    print("✓ Weather mappings work!")


def test_hard_constraints():
    """Test hard-constraint filtering order and effects."""
    print("\n=== Testing Hard Constraints ===")
    items = normalize_wardrobe(WARDROBE)

    def ids(options):
        return [i.id for i in apply_hard_constraints(items, options)]

    assert ids(OutfitGenerationOptions()) == ["t1", "t2", "b1", "d1"]
    assert ids(OutfitGenerationOptions(excluded_items=["t2", "d1"])) == ["t1", "b1"]
    assert ids(OutfitGenerationOptions(season=Season.SUMMER)) == ["t1", "b1"]
    assert ids(OutfitGenerationOptions(occasion=Occasion.WORK)) == ["t1", "b1"]
    assert ids(OutfitGenerationOptions(weather=WeatherData(temperature=3))) == ["t2", "d1"]

    # An explicit season replaces the weather season: 26C is spring for weather, summer here
    warm = OutfitGenerationOptions(season=Season.SUMMER, weather=WeatherData(temperature=26))
    assert ids(warm) == ["t1", "b1"]
    assert ids(OutfitGenerationOptions(season=Season.WINTER, weather=WeatherData(temperature=26))) == ["t2", "d1"]

    # Palette only applies when strict
    palette = OutfitGenerationOptions(preferred_colors=["white", "beige"])
    assert ids(palette) == ["t1", "t2", "b1", "d1"]
    strict = OutfitGenerationOptions(preferred_colors=["white", "beige"], strict_palette=True)
    assert ids(strict) == ["t1", "b1"]

    # Formality: gown 0.7 + 0.3 = 1.0, sweater 0.5 - 0.2 = 0.3
    formal = OutfitGenerationOptions(
        style_preference=StylePreference(formality=0.9),
        formality_tolerance=0.15,
    )
    assert ids(formal) == ["d1"]
    print("✓ Hard constraints work!")


def test_filter_by_palette():
    items = normalize_wardrobe(WARDROBE)
    assert [i.id for i in filter_by_palette(items, [])] == ["t1", "t2", "b1", "d1"]
    assert [i.id for i in filter_by_palette(items, ["#000080"])] == ["t2"]


def test_stylist_filters():
    print("\n=== Testing Stylist Filters ===")

    assert map_formality_to_number("semi-formal", 0.1) == 0.5
    assert map_formality_to_number("Formal", 0.1) == 0.8
    assert map_formality_to_number("black tie", 0.1) == 0.1
    assert map_formality_to_number(None, 0.4) == 0.4

    preference = filters_to_style_preference(StylistFilters(style="minimalist", formality="formal"))
    assert preference.formality == 0.8
    assert preference.boldness == 0.2
    assert preference.layering == 0.2
    assert preference.colorfulness == 0.3

    # Presets win over the formality label for the dials they set
    classic = filters_to_style_preference(StylistFilters(style="classic", formality="casual"))
    assert classic.formality == 0.6

    unknown = filters_to_style_preference(StylistFilters(style="avant-garde"))
    assert unknown == StylePreference()

    options = filters_to_options(StylistFilters(occasion="date", colors=["navy"]), wardrobe_size=3)
    assert options.occasion == Occasion.DATE
    assert options.preferred_colors == ["#000080"]
    assert options.max_results == 6
    assert options.min_score == 0.65
    assert filters_to_options(StylistFilters(), wardrobe_size=40).max_results == 25

    assert StylistFilters().temperature_range is None
    weather = filters_to_weather(StylistFilters(weather_conditions="rainy"))
    assert weather.temperature == 20
    assert weather.conditions == WeatherConditions.RAINY
    assert filters_to_weather(StylistFilters(temperature_range=TemperatureRange(min=4, max=9))).temperature == 4
    print("✓ Stylist filters work!")


def test_session_presets_and_merging():
    print("\n=== Testing Session Presets ===")

    assert default_session_options(4) == {"use_all_items": True, "max_results": 15, "min_score": 0.45}
    assert default_session_options(20)["max_results"] == 30
    assert default_session_options(60)["max_results"] == 75

    weather = weather_session_options(WeatherData(temperature=22), 3)
    assert weather["season"] == Season.SPRING
    assert weather["max_results"] == 8
    assert weather["min_score"] == 0.4

    occasion = occasion_session_options(Occasion.WORK, 50)
    assert occasion["max_results"] == 20
    assert occasion["min_score"] == 0.5

    merged = merge_options(
        default_session_options(10),
        OutfitGenerationOptions(min_score=0.7),
        {"max_results": 4},
        None,
    )
    assert merged.use_all_items is True
    assert merged.min_score == 0.7
    assert merged.max_results == 4
    print("✓ Session presets work!")


def test_prepare_input_hash_is_stable():
    print("\n=== Testing Context Hash ===")

    first = prepare_input({"wardrobe": WARDROBE, "options": {"season": "summer"}})
    second = prepare_input({"wardrobe": WARDROBE, "options": {"season": "summer"}})
    third = prepare_input({"wardrobe": WARDROBE, "options": {"season": "winter"}})

    assert first["_hash"] == second["_hash"]
    assert first["_hash"] != third["_hash"]
    assert first["options"].season == Season.SUMMER
    assert first["derived"] is None
    assert len(first["wardrobe"]) == 4

    with_filters = prepare_input({"wardrobe": WARDROBE, "filters": {"occasion": "work"}, "options": {"max_results": 2}})
    assert with_filters["options"].occasion == Occasion.WORK
    assert with_filters["options"].max_results == 2
    assert with_filters["options"].min_score == 0.65
    print(f"Context hash: {first['_hash'][:16]}...")
    print("✓ Context hash works!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("TESTING DETERMINISTIC LAYER")
    print("=" * 60)

    test_normalize_wardrobe()
    test_weather_mappings()
    test_hard_constraints()
    test_filter_by_palette()
    test_stylist_filters()
    test_session_presets_and_merging()
    test_prepare_input_hash_is_stable()

    print("\n✓ ALL DETERMINISTIC LAYER TESTS PASSED!")
    return 0


if __name__ == "__main__":
    exit(main())
