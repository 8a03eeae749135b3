#!/usr/bin/env python3
"""
Tests for the outfit generation engine: enumeration, both strategies,
progress reporting, variety and history.
"""
from datetime import datetime, timezone

from contracts.models import (
    ClothingCategory as C,
    ClothingItem,
    GeneratedOutfit,
    OutfitScore,
    ScoreBreakdown,
    Season,
)
from services.outfit_generator import OutfitGenerator, get_outfit_generator
from services.outfit_history import InMemoryOutfitHistory

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def item(id, category, color="#000000", season=(), tags=()):
    return ClothingItem(id=id, name=id, category=category, color=color, season=list(season), tags=list(tags))


T1 = item("t1", C.TOPS, "#ffffff", season=[Season.SUMMER, Season.SPRING], tags=["cotton"])
T2 = item("t2", C.TOPS, "#000080", season=[Season.SUMMER])
B1 = item("b1", C.BOTTOMS, "#000000", season=[Season.SUMMER])
S1 = item("s1", C.SHOES, "#6b4226", season=[Season.SUMMER])
D1 = item("d1", C.DRESSES, "#8b0000", season=[Season.SUMMER])

WARDROBE = [T1, T2, B1, S1, D1]


def make_generator(**kwargs):
    return OutfitGenerator(history=InMemoryOutfitHistory(ttl_days=7), clock=lambda: NOW, **kwargs)


def keys(outfits):
    return sorted("|".join(sorted(i.id for i in outfit)) for outfit in outfits)


def fixed_score(total):
    breakdown = ScoreBreakdown(
        color_harmony=1, style_matching=1, occasion_suitability=1, season_suitability=1,
        weather_suitability=1, user_preference=1, variety=1,
    )
    return OutfitScore(total=total, breakdown=breakdown)


def test_enumeration():
    """Test base structures, completing slots and dedup."""
    print("\n=== Testing Enumeration ===")
    generator = make_generator()

    outfits = generator.generate_outfit_combinations(WARDROBE)
    print(f"Enumerated: {keys(outfits)}")
    assert keys(outfits) == ["b1|s1|t1", "b1|s1|t2", "d1|s1"]

    # Separates only
    assert keys(generator.generate_outfit_combinations([T1, T2, B1, S1])) == ["b1|s1|t1", "b1|s1|t2"]

    # No dress and no top + bottom pair
    assert generator.generate_outfit_combinations([T1, T2, S1]) == []
    print("✓ Enumeration works!")


def test_forced_items():
    print("\n=== Testing Forced Items ===")
    generator = make_generator()

    assert keys(generator.generate_outfit_combinations(WARDROBE, ["t2"])) == ["b1|s1|t2"]
    assert keys(generator.generate_outfit_combinations(WARDROBE, ["d1"])) == ["d1|s1"]
    # Forced shoes join every outfit of both structures
    assert keys(generator.generate_outfit_combinations(WARDROBE, ["s1"])) == ["b1|s1|t1", "b1|s1|t2", "d1|s1"]
    print("✓ Forced items work!")


def test_combination_cap():
    generator = make_generator(max_combinations=1)
    assert len(generator.generate_outfit_combinations(WARDROBE)) == 1


def test_standard_generation():
    """Test ranking, progress and history recording."""
    print("\n=== Testing Standard Generation ===")
    generator = make_generator()
    updates = []

    outfits = generator.generate_outfits(
        WARDROBE,
        {"max_results": 10, "min_score": 0},
        progress=lambda fraction, stage: updates.append((fraction, stage)),
    )
    for outfit in outfits:
        print(f"  {outfit.key}: {outfit.score.total:.3f}")

    assert keys(o.items for o in outfits) == ["b1|s1|t1", "b1|s1|t2", "d1|s1"]
    totals = [o.score.total for o in outfits]
    assert totals == sorted(totals, reverse=True)

    assert updates[0] == (0.0, "started")
    assert updates[-1] == (1.0, "done")
    fractions = [f for f, _ in updates]
    assert fractions == sorted(fractions)

    assert len(generator.history) == 3
    print("✓ Standard generation works!")


def test_repeat_runs_are_penalised():
    print("\n=== Testing Repeat Avoidance ===")
    generator = make_generator()

    first = {o.key: o.score.total for o in generator.generate_outfits(WARDROBE, {"max_results": 10, "min_score": 0})}
    second = {o.key: o.score.total for o in generator.generate_outfits(WARDROBE, {"max_results": 10, "min_score": 0})}

    for key, total in second.items():
        print(f"  {key}: {first[key]:.3f} -> {total:.3f}")
        assert total < first[key]
    print("✓ Repeat avoidance works!")


def test_min_score_and_max_results():
    generator = make_generator()

    assert len(generator.generate_outfits(WARDROBE, {"max_results": 1, "min_score": 0})) == 1
    assert generator.generate_outfits(WARDROBE, {"max_results": 10, "min_score": 1.0}) == []

    # Hard constraints leave a single item
    assert generator.generate_outfits(WARDROBE, {"excluded_items": ["t1", "t2", "b1", "s1"]}) == []
    assert generator.generate_outfits([], None) == []


def test_season_constraint():
    generator = make_generator()
    outfits = generator.generate_outfits(WARDROBE, {"season": "spring", "min_score": 0})
    # Only the linen top is a spring piece
    assert outfits == []

    outfits = generator.generate_outfits(WARDROBE, {"season": "summer", "min_score": 0, "max_results": 10})
    assert len(outfits) == 3


def test_use_all_items():
    """Test the use-all-items strategy surfaces every piece."""
    print("\n=== Testing Use-All-Items Strategy ===")
    generator = make_generator()

    outfits = generator.generate_outfits(WARDROBE, {"use_all_items": True, "max_results": 20, "min_score": 0})
    used = {i.id for o in outfits for i in o.items}
    print(f"Outfits: {[o.key for o in outfits]}")
    assert used == {"t1", "t2", "b1", "s1", "d1"}
    assert len({o.key for o in outfits}) == len(outfits)
    totals = [o.score.total for o in outfits]
    assert totals == sorted(totals, reverse=True)

    capped = make_generator().generate_outfits(WARDROBE, {"use_all_items": True, "max_results": 2, "min_score": 0})
    assert len(capped) == 2
    print("✓ Use-all-items strategy works!")


def test_dedup_and_variety():
    print("\n=== Testing Dedup & Variety ===")
    a, b, c, d, e = (item(x, C.ACCESSORIES) for x in "abcde")

    duplicates = [
        GeneratedOutfit(items=[a, b], score=fixed_score(0.9)),
        GeneratedOutfit(items=[b, a], score=fixed_score(0.5)),
    ]
    unique = OutfitGenerator.remove_duplicate_outfits(duplicates)
    assert len(unique) == 1
    assert unique[0].score.total == 0.9

    ranked = [
        GeneratedOutfit(items=[a, b, c, d], score=fixed_score(0.9)),
        GeneratedOutfit(items=[a, b, c, e], score=fixed_score(0.8)),  # 3/5 shared
        GeneratedOutfit(items=[a, b, c, d, e], score=fixed_score(0.7)),  # 4/5 shared with the first
    ]
    varied = OutfitGenerator.ensure_outfit_variety(ranked)
    assert [o.score.total for o in varied] == [0.9, 0.8]

    assert OutfitGenerator.get_outfit_key([b, a]) == "a|b"
    print("✓ Dedup & variety work!")


def test_calculate_outfit_score_and_create_outfit():
    generator = make_generator()

    score = generator.calculate_outfit_score([T1, B1], {"season": "spring"})
    assert score.breakdown.style_matching == 1.0
    assert score.breakdown.season_suitability == 0.5

    outfit = OutfitGenerator.create_outfit([T1, T2, B1])
    assert outfit.name == "Generated Outfit"
    assert outfit.season == [Season.SUMMER]
    assert outfit.tags == ["cotton"]
    assert [i.id for i in outfit.items] == ["t1", "t2", "b1"]

    empty = OutfitGenerator.create_outfit([], name="Empty")
    assert empty.season == [] and empty.occasion == []


def test_default_generator_is_shared():
    assert get_outfit_generator() is get_outfit_generator()


def main():
    """Run all tests."""
    print("=" * 60)
    print("TESTING OUTFIT GENERATOR")
    print("=" * 60)

    test_enumeration()
    test_forced_items()
    test_combination_cap()
    test_standard_generation()
    test_repeat_runs_are_penalised()
    test_min_score_and_max_results()
    test_season_constraint()
    test_use_all_items()
    test_dedup_and_variety()
    test_calculate_outfit_score_and_create_outfit()
    test_default_generator_is_shared()

    print("\n✓ ALL GENERATOR TESTS PASSED!")
    return 0


if __name__ == "__main__":
    exit(main())
