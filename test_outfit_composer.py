#!/usr/bin/env python3
"""
Tests for outfit composition rules: compatibility, slot completion,
accessory/undergarment coordination and validation.
"""
from contracts.models import ClothingCategory as C, ClothingItem, Occasion
from deterministic_layer import group_items_by_category
from services.outfit_composer import (
    accessory_color_score,
    add_best_optional_items,
    add_coordinated_undergarments,
    add_coordinating_accessories,
    analyze_outfit_completeness,
    completing_categories,
    determine_outfit_style,
    find_best_item_in_category,
    format_outfit_summary,
    is_item_compatible,
    item_compatibility_score,
    prioritize_accessories,
    suggest_missing_items,
    validate_outfit,
)


def item(id, category, color="#000000", occasion=(), tags=(), name=None):
    return ClothingItem(
        id=id, name=name or id, category=category, color=color,
        occasion=list(occasion), tags=list(tags),
    )


RED_TOP = item("top", C.TOPS, "#ff0000", name="Red blouse")
BLACK_PANTS = item("pants", C.BOTTOMS, "#000000", name="Black trousers")
WHITE_SOCKS = item("socks", C.SOCKS, "#ffffff")
SNEAKERS = item("shoes", C.SHOES, "#ffffff", name="White sneakers")


def test_compatibility():
    """Test category limits and compatibility scores."""
    print("\n=== Testing Compatibility ===")

    assert is_item_compatible(BLACK_PANTS, [RED_TOP])
    assert not is_item_compatible(item("top2", C.TOPS), [RED_TOP])

    watches = [item(f"acc{i}", C.ACCESSORIES) for i in range(3)]
    assert is_item_compatible(watches[2], watches[:2])
    assert not is_item_compatible(item("acc4", C.ACCESSORIES), watches)

    assert item_compatibility_score(RED_TOP, []) == 1.0
    score = item_compatibility_score(BLACK_PANTS, [RED_TOP])
    print(f"Pants vs top compatibility: {score:.2f}")
    assert 0.0 < score <= 1.0

    assert find_best_item_in_category([item("top2", C.TOPS)], [RED_TOP]) is None
    assert find_best_item_in_category([BLACK_PANTS], [RED_TOP]) is BLACK_PANTS
    print("✓ Compatibility works!")


def test_completing_categories():
    print("\n=== Testing Completing Categories ===")

    full = group_items_by_category([SNEAKERS, item("watch", C.ACCESSORIES), item("bag", C.BAGS)])
    assert completing_categories(full) == [C.SHOES, C.ACCESSORIES]

    # No generic accessories: first owned fallback category
    fallback = group_items_by_category([item("belt", C.BELTS), item("bag", C.BAGS)])
    assert completing_categories(fallback) == [C.BAGS]

    assert completing_categories({}) == []
    print("✓ Completing categories work!")


def test_outfit_style_and_priorities():
    assert determine_outfit_style([item("a", C.TOPS, occasion=[Occasion.FORMAL])]) == "formal"
    assert determine_outfit_style([item("a", C.TOPS, tags=["Business"])]) == "business"
    assert determine_outfit_style([item("a", C.TOPS, occasion=[Occasion.SPORT])]) == "athletic"
    assert determine_outfit_style([item("a", C.TOPS)]) == "casual"

    assert prioritize_accessories([C.HATS, C.BAGS, C.JEWELRY], "formal") == [C.JEWELRY, C.BAGS, C.HATS]
    assert prioritize_accessories([C.HATS, C.BAGS], "unknown") == [C.BAGS, C.HATS]


def test_accessory_color_score():
    assert accessory_color_score(item("a", C.JEWELRY, "#f00000"), ["#ff0000"]) == 1.0
    assert accessory_color_score(item("a", C.JEWELRY, "#00ffff"), ["#ff0000"]) == 0.9
    assert accessory_color_score(item("a", C.JEWELRY, "#ffd700"), ["#ff0000"]) == 0.8
    # Brown belt with a blue outfit: neither close, complementary nor analogous
    assert accessory_color_score(item("a", C.BELTS, "#6b4226"), ["#0000ff"]) == 0.7
    assert accessory_color_score(item("a", C.BELTS, "#00ff00"), ["#0000ff"]) == 0.3


def test_undergarments():
    print("\n=== Testing Undergarment Coordination ===")
    by_category = group_items_by_category([WHITE_SOCKS])

    outfit = add_coordinated_undergarments([RED_TOP, BLACK_PANTS], by_category, set())
    assert [i.id for i in outfit] == ["top", "pants", "socks"]

    # Forced categories are never filled again
    outfit = add_coordinated_undergarments([RED_TOP, BLACK_PANTS], by_category, {C.SOCKS})
    assert [i.id for i in outfit] == ["top", "pants"]
    print("✓ Undergarment coordination works!")


def test_coordinating_accessories():
    print("\n=== Testing Accessory Coordination ===")

    formal_top = item("top", C.TOPS, "#ff0000", occasion=[Occasion.FORMAL])
    necklace = item("necklace", C.JEWELRY, "#ffd700", occasion=[Occasion.FORMAL], tags=["elegant"])
    by_category = group_items_by_category([necklace])

    outfit = add_coordinating_accessories([formal_top, BLACK_PANTS], by_category, set())
    print(f"Outfit: {format_outfit_summary(outfit)}")
    assert outfit[-1].id == "necklace"

    untouched = add_coordinating_accessories([formal_top, BLACK_PANTS], by_category, {C.JEWELRY})
    assert len(untouched) == 2
    print("✓ Accessory coordination works!")


def test_add_best_optional_items():
    by_category = group_items_by_category([SNEAKERS, item("coat", C.OUTERWEAR, "#808080")])
    outfit = add_best_optional_items([RED_TOP, BLACK_PANTS], by_category, [C.SHOES, C.OUTERWEAR, C.HATS])
    assert [i.id for i in outfit] == ["top", "pants", "shoes", "coat"]

    # Categories already present are skipped
    again = add_best_optional_items(outfit, by_category, [C.SHOES])
    assert len(again) == 4


def test_validate_outfit():
    """Test requirement validation against the wardrobe."""
    print("\n=== Testing Outfit Validation ===")

    owns_shoes = group_items_by_category([RED_TOP, BLACK_PANTS, SNEAKERS])
    result = validate_outfit([RED_TOP, BLACK_PANTS], owns_shoes)
    print(f"Valid: {result['is_valid']}, missing: {result['missing_slots']}")
    assert not result["is_valid"]
    assert result["missing_slots"] == ["shoes"]

    basics_only = group_items_by_category([RED_TOP, BLACK_PANTS])
    result = validate_outfit([RED_TOP, BLACK_PANTS], basics_only)
    assert result["is_valid"]
    assert len(result["warnings"]) == 2

    dress = item("dress", C.DRESSES, "#000080")
    assert validate_outfit([dress], group_items_by_category([dress]))["is_valid"]

    two_tops = validate_outfit([RED_TOP, item("top2", C.TOPS), BLACK_PANTS], basics_only)
    assert not two_tops["is_valid"]
    assert any("Too many tops" in e for e in two_tops["errors"])
    print("✓ Outfit validation works!")


def test_completeness_and_suggestions():
    print("\n=== Testing Completeness ===")

    report = analyze_outfit_completeness([RED_TOP])
    assert not report.is_complete
    assert report.missing_categories == ["Bottom", "Shoes"]
    assert len(report.suggestions) == 2

    assert analyze_outfit_completeness([item("dress", C.DRESSES), SNEAKERS]).is_complete

    suggestions = suggest_missing_items([RED_TOP], [RED_TOP, BLACK_PANTS, SNEAKERS])
    assert [i.id for i in suggestions] == ["pants", "shoes"]

    assert format_outfit_summary([RED_TOP, SNEAKERS]) == "tops: Red blouse | shoes: White sneakers"
    print("✓ Completeness checks work!")


def main():
    """Run all tests."""
    print("=" * 60)
    print("TESTING OUTFIT COMPOSER")
    print("=" * 60)

    test_compatibility()
    test_completing_categories()
    test_outfit_style_and_priorities()
    test_accessory_color_score()
    test_undergarments()
    test_coordinating_accessories()
    test_add_best_optional_items()
    test_validate_outfit()
    test_completeness_and_suggestions()

    print("\n✓ ALL COMPOSER TESTS PASSED!")
    return 0


if __name__ == "__main__":
    exit(main())
