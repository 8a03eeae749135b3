#!/usr/bin/env python3
"""
Pipeline Check Script for the outfit recommendation engine.

Exercises the major stages against the sample wardrobe:
1. Configuration (history backend, generation defaults)
2. Outfit generation (standard and use-all-items strategies)
3. Stylist filters and weather sessions
4. End-to-end session via main.run_session

Usage:
    python scripts/test_pipeline.py --all           # Check everything
    python scripts/test_pipeline.py --config        # Show configuration
    python scripts/test_pipeline.py --generate      # Check both strategies
    python scripts/test_pipeline.py --filters       # Check stylist filters
    python scripts/test_pipeline.py --e2e           # Check end-to-end
"""
import sys
import json
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contracts.models import WeatherConditions, WeatherData
from deterministic_layer import normalize_wardrobe
from infra import cache
from main import SAMPLE_WARDROBE, run_session
from services.outfit_composer import format_outfit_summary
from services.outfit_generator import OutfitGenerator
from services.outfit_history import InMemoryOutfitHistory, get_history
from services.outfit_scorer import get_score_display
from services.recommendation_service import RecommendationService
import config


def print_section(title: str):
    """Print a section header."""
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80 + "\n")


def check_configuration() -> bool:
    """Show configuration and make sure the history backend can be built."""
    print_section("CHECK 1: Configuration")

    settings = {
        "HISTORY_BACKEND": config.HISTORY_BACKEND,
        "HISTORY_NAMESPACE": config.HISTORY_NAMESPACE,
        "RECENT_OUTFITS_TTL_DAYS": config.RECENT_OUTFITS_TTL_DAYS,
        "DEFAULT_MAX_RESULTS": config.DEFAULT_MAX_RESULTS,
        "DEFAULT_MIN_SCORE": config.DEFAULT_MIN_SCORE,
        "MAX_COMBINATIONS": config.MAX_COMBINATIONS,
    }
    for name, value in settings.items():
        print(f"   {name}: {value}")

    try:
        history = get_history()
    except ValueError as e:
        print(f"\n❌ {e}")
        return False

    if config.HISTORY_BACKEND == "redis" and not cache.ping():
        print(f"\n❌ Redis not reachable at {config.REDIS_URL}")
        return False

    print(f"\n✅ History backend ready: {type(history).__name__}")
    return True


def check_generation():
    """Run both generation strategies over the sample wardrobe."""
    print_section("CHECK 2: Outfit Generation")

    wardrobe = normalize_wardrobe(SAMPLE_WARDROBE)
    generator = OutfitGenerator(history=InMemoryOutfitHistory())

    for label, options in [
        ("Standard", {"max_results": 5}),
        ("Use all items", {"use_all_items": True, "max_results": 10, "min_score": 0.4}),
    ]:
        outfits = generator.generate_outfits(wardrobe, options)
        used = {i.id for o in outfits for i in o.items}
        print(f"👗 {label}: {len(outfits)} outfits, {len(used)}/{len(wardrobe)} items used")
        for outfit in outfits[:3]:
            print(f"   {get_score_display(outfit.score.total):>4}  {format_outfit_summary(outfit.items)}")
        print()

    print("✅ Generation Check Complete!")


async def check_filters():
    """Run weather, occasion and style filter sessions."""
    print_section("CHECK 3: Stylist Filters")

    wardrobe = normalize_wardrobe(SAMPLE_WARDROBE)
    service = RecommendationService(wardrobe, generator=OutfitGenerator(history=InMemoryOutfitHistory()))

    weather = WeatherData(temperature=14, conditions=WeatherConditions.RAINY, precipitation=0.8)
    outfits = await service.get_weather_based_recommendation(weather)
    print(f"🌧️  Rainy 14°C: {len(outfits)} outfits")

    for filters in [
        {"occasion": "work"},
        {"style": "classic", "formality": "semi-formal"},
        {"include_weather": True, "temperature_range": {"min": 3, "max": 8}},
    ]:
        outfits = await service.apply_filters(filters)
        status = service.state.error or "ok"
        print(f"🎛️  {json.dumps(filters)}: {len(outfits)} outfits ({status})")

    print("\n✅ Filter Check Complete!")


def check_end_to_end():
    """Full session through main.run_session."""
    print_section("CHECK 4: End-to-End Session")

    result = run_session(
        {
            "wardrobe": SAMPLE_WARDROBE,
            "options": {"season": "fall", "max_results": 3},
        },
        generator=OutfitGenerator(history=InMemoryOutfitHistory()),
    )

    print(f"\n🔑 Context hash: {result['context_hash'][:16]}...")
    for rec in result["recommendations"]:
        print(f"\n✨ {rec['look']} ({rec['score_display']})")
        for item in rec["items"]:
            print(f"   - {item['name']} ({item['category']})")
        for insight in rec["insights"]:
            print(f"   {insight}")

    print("\n✅ End-to-End Check Complete!")


async def main():
    """Main check runner."""
    import argparse

    parser = argparse.ArgumentParser(description="Check the outfit recommendation pipeline")
    parser.add_argument("--all", action="store_true", help="Run all checks")
    parser.add_argument("--config", action="store_true", help="Show configuration")
    parser.add_argument("--generate", action="store_true", help="Check outfit generation")
    parser.add_argument("--filters", action="store_true", help="Check stylist filters")
    parser.add_argument("--e2e", action="store_true", help="Check end-to-end")

    args = parser.parse_args()

    # If no args, show help
    if not any(vars(args).values()):
        parser.print_help()
        return

    print("\n" + "=" * 80)
    print("  OUTFIT RECOMMENDATION ENGINE - PIPELINE CHECKS")
    print("=" * 80)

    # Always check config first
    if not check_configuration():
        print("\n⚠️  Configuration issues found. Check HISTORY_BACKEND and REDIS_URL.")
        return

    if args.all or args.generate:
        check_generation()

    if args.all or args.filters:
        await check_filters()

    if args.all or args.e2e:
        check_end_to_end()

    print("\n" + "=" * 80)
    print("  ✅ ALL CHECKS COMPLETED!")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
