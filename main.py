# main.py
"""
Main orchestrator for the outfit recommendation engine.
Coordinates the pipeline:
1. Deterministic preprocessing (normalization, option merging)
2. Outfit generation (enumeration, hard constraints, ranking)
3. Presentation (names, insights, score display)
"""
import json

from deterministic_layer import prepare_input
from services.outfit_generator import OutfitGenerator
from services.outfit_naming import generate_outfit_name
from services.outfit_scorer import generate_insights, get_score_display


def run_session(user_input: dict, generator: OutfitGenerator = None) -> dict:
    """
    Main entry point for a recommendation session.

    Args:
        user_input: Raw session input containing:
            - wardrobe (list of wardrobe items)
            - options (optional OutfitGenerationOptions fields)
            - filters (optional stylist filters)
        generator: Outfit generator to use (a fresh in-memory one by default)

    Returns:
        dict with the named, scored outfit recommendations and the context hash
    """
    # Phase 1: Deterministic preprocessing
    print("Phase 1: Preparing context...")
    ctx = prepare_input(user_input)

    # Phase 2: Outfit generation
    print("Phase 2: Generating outfits...")
    generator = generator or OutfitGenerator()
    outfits = generator.generate_outfits(ctx["wardrobe"], ctx["options"])

    # Phase 3: Presentation
    print("Phase 3: Naming and explaining outfits...")
    names = []
    results = []
    for outfit in outfits:
        name = generate_outfit_name(outfit.items, names)
        names.append(name)
        results.append({
            "look": name,
            "score": round(outfit.score.total, 4),
            "score_display": get_score_display(outfit.score.total),
            "items": [{"id": i.id, "name": i.name, "category": i.category.value} for i in outfit.items],
            "breakdown": outfit.score.breakdown.model_dump(),
            "insights": generate_insights(outfit.score.breakdown, outfit.score.total),
        })

    return {
        "recommendations": results,
        "derived": ctx.get("derived"),
        "context_hash": ctx.get("_hash"),
    }


SAMPLE_WARDROBE = [
    {
        "id": "item_001",
        "name": "White oxford shirt",
        "category": "tops",
        "color": "#ffffff",
        "season": ["spring", "summer", "fall"],
        "occasion": ["work", "casual", "date"],
        "tags": ["classic", "cotton"],
    },
    {
        "id": "item_002",
        "name": "Navy crew sweater",
        "category": "tops",
        "color": "navy",
        "season": ["fall", "winter"],
        "occasion": ["casual", "work"],
        "tags": ["knit", "long sleeve"],
    },
    {
        "id": "item_003",
        "name": "Dark denim jeans",
        "category": "bottoms",
        "color": "#1f3a5f",
        "season": ["spring", "fall", "winter"],
        "occasion": ["casual", "date", "travel"],
        "tags": ["denim"],
    },
    {
        "id": "item_004",
        "name": "Beige chinos",
        "category": "bottoms",
        "color": "beige",
        "season": ["spring", "summer", "fall"],
        "occasion": ["work", "casual"],
        "tags": ["classic"],
    },
    {
        "id": "item_005",
        "name": "Emerald wrap dress",
        "category": "dresses",
        "color": "#2e8b57",
        "season": ["spring", "summer"],
        "occasion": ["party", "date", "formal"],
        "tags": ["vibrant"],
    },
    {
        "id": "item_006",
        "name": "Brown leather loafers",
        "category": "shoes",
        "color": "#6b4226",
        "season": ["spring", "summer", "fall", "winter"],
        "occasion": ["work", "casual", "date"],
        "tags": ["leather"],
    },
    {
        "id": "item_007",
        "name": "Camel trench coat",
        "category": "outerwear",
        "color": "#c19a6b",
        "season": ["spring", "fall"],
        "occasion": ["work", "casual", "travel"],
        "tags": ["waterproof", "classic"],
    },
    {
        "id": "item_008",
        "name": "Silver watch",
        "category": "accessories",
        "color": "silver",
        "season": ["spring", "summer", "fall", "winter"],
        "occasion": ["work", "casual", "date", "formal"],
        "tags": ["metal"],
    },
    {
        "id": "item_009",
        "name": "Black leather belt",
        "category": "belts",
        "color": "#000000",
        "season": ["spring", "summer", "fall", "winter"],
        "occasion": ["work", "casual"],
        "tags": ["leather"],
    },
]


if __name__ == "__main__":
    user_input = {
        "wardrobe": SAMPLE_WARDROBE,
        "options": {
            "season": "fall",
            "max_results": 3,
            "preferred_colors": ["navy", "beige"],
            "style_preference": {"formality": 0.6, "boldness": 0.3, "layering": 0.5, "colorfulness": 0.3},
        },
    }

    print("=" * 60)
    print("OUTFIT RECOMMENDATION ENGINE")
    print("=" * 60)
    print()

    result = run_session(user_input)

    print()
    print("=" * 60)
    print("FINAL RECOMMENDATIONS")
    print("=" * 60)
    print()
    print(json.dumps(result, indent=2, default=str))
