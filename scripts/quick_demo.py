#!/usr/bin/env python3
"""
Quick Demo Script for the outfit recommendation engine.

A simple, interactive demo over a sample wardrobe:
- Full-wardrobe recommendations with live progress
- Weather-based recommendations
- Stylist filters
- Wardrobe completeness check

Usage:
    python scripts/quick_demo.py
"""
import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contracts.models import WeatherConditions, WeatherData
from deterministic_layer import normalize_wardrobe
from main import SAMPLE_WARDROBE
from services.outfit_composer import analyze_outfit_completeness, format_outfit_summary
from services.outfit_history import InMemoryOutfitHistory
from services.outfit_generator import OutfitGenerator
from services.outfit_naming import generate_outfit_name
from services.outfit_scorer import get_score_display
from services.recommendation_service import RecommendationService


def print_header(text: str):
    """Print a fancy header."""
    print("\n" + "╔" + "═" * 78 + "╗")
    print(f"║  {text:<75} ║")
    print("╚" + "═" * 78 + "╝\n")


def print_outfits(outfits, limit: int = 3):
    names = []
    for i, outfit in enumerate(outfits[:limit], 1):
        name = generate_outfit_name(outfit.items, names)
        names.append(name)
        print(f"{i}. {name} ({get_score_display(outfit.score.total)})")
        print(f"   {format_outfit_summary(outfit.items)}")


def print_progress(state):
    bar = int(state.generation_progress * 40)
    print(f"\r   [{'█' * bar}{' ' * (40 - bar)}] {state.generation_progress:.0%}", end="", flush=True)


async def demo_recommendations(service: RecommendationService):
    """Demo: Full-wardrobe recommendations."""
    print_header("👗 FULL-WARDROBE RECOMMENDATIONS")

    unsubscribe = service.subscribe(print_progress)
    outfits = await service.generate_recommendations()
    unsubscribe()

    print(f"\n\n✅ {len(outfits)} outfits generated\n")
    print_outfits(outfits)


async def demo_weather(service: RecommendationService):
    """Demo: Weather-based recommendations."""
    print_header("🌦️  WEATHER-BASED RECOMMENDATIONS")

    weather = WeatherData(temperature=12, conditions=WeatherConditions.RAINY, precipitation=0.7, wind_speed=25)
    print(f"Weather: {weather.temperature}°C, {weather.conditions.value}, wind {weather.wind_speed} km/h\n")

    outfits = await service.get_weather_based_recommendation(weather)
    if outfits:
        print_outfits(outfits)
    else:
        print("⚠️  Nothing in the wardrobe suits this weather.")


async def demo_filters(service: RecommendationService):
    """Demo: Stylist filters."""
    print_header("🎛️  STYLIST FILTERS")

    filters = {"style": "classic", "formality": "semi-formal", "colors": ["navy", "beige"]}
    print(f"Filters: {filters}\n")

    outfits = await service.apply_filters(filters)
    if outfits:
        print_outfits(outfits)
    else:
        print(f"⚠️  No outfit reached the quality bar ({service.state.error or 'no error'}).")


def demo_completeness(service: RecommendationService):
    """Demo: Outfit completeness check."""
    print_header("🔍 OUTFIT COMPLETENESS")

    outfit = service.current_outfit
    if outfit is None:
        print("No outfit selected.")
        return

    report = analyze_outfit_completeness(outfit.items)
    print(f"Outfit: {format_outfit_summary(outfit.items)}")
    print(f"Complete: {'✅' if report.is_complete else '⚠️'}")
    for suggestion in report.suggestions:
        print(f"  • {suggestion}")


async def main():
    """Main demo runner."""
    print("\n" + "=" * 80)
    print("  Outfit Recommendation Engine - Quick Demo")
    print("=" * 80)

    wardrobe = normalize_wardrobe(SAMPLE_WARDROBE)
    generator = OutfitGenerator(history=InMemoryOutfitHistory())
    service = RecommendationService(wardrobe, generator=generator)

    await demo_recommendations(service)
    demo_completeness(service)
    await demo_weather(service)
    await demo_filters(service)

    print("\n" + "=" * 80)
    print("  Demo complete")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
