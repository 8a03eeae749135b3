# services/outfit_naming.py
"""
Human-friendly outfit names.

Names are derived deterministically from the outfit's contents (same items,
same name) and made unique against either the caller's existing names or a
process-wide cache of names handed out so far.
"""
import math
import time
from collections import Counter
from typing import Iterable, List, Optional, Set

from contracts.models import ClothingItem
from services.color_theory import color_family

# Names handed out when the caller does not supply its own existing names
_used_names: Set[str] = set()

ROMAN_NUMERALS = ["II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X"]
MAX_NUMBER_SUFFIX = 99

DEFAULT_OCCASION = "casual"
EMPTY_OUTFIT_NAME = "Mystery Look"

NAME_TEMPLATES = {
    "casual": [
        "Weekend Vibes", "Chill Mode", "Easy Breeze", "Laid Back",
        "Sunday Stroll", "Coffee Run", "Comfort Zone", "Relax & Roll",
        "Casual Cool", "Everyday Style", "Simple Chic", "Effortless Look",
    ],
    "work": [
        "Boss Mode", "Power Play", "Office Chic", "Meeting Ready",
        "Pro Status", "Work Flow", "Business Edge", "Sharp Focus",
        "Executive Style", "Corporate Chic", "Professional Power", "Boardroom Ready",
    ],
    "formal": [
        "Elegance", "Refined", "Sophisticated", "Classic Grace",
        "Timeless", "Polished", "Distinguished", "Luxe Appeal",
        "Formal Finesse", "Evening Elegance", "Black Tie Ready", "Gala Glamour",
    ],
    "party": [
        "Night Out", "Party Ready", "Celebration", "Dance Floor",
        "Show Stopper", "Glamour", "Statement", "Sparkle",
        "Party Perfect", "Night Magic", "Festive Fun", "Club Ready",
    ],
    "sport": [
        "Active Mode", "Workout Ready", "Sporty Edge", "Fitness Focus",
        "Athletic", "Power Move", "Dynamic", "Energy Boost",
        "Gym Ready", "Sports Star", "Active Lifestyle", "Fitness First",
    ],
    "travel": [
        "Wanderlust", "Journey Ready", "Explorer", "Adventure",
        "On the Go", "Traveler", "Discovery", "Roam Free",
        "Vacation Vibes", "Travel Style", "Adventure Ready", "Jet Set",
    ],
    "date": [
        "Date Night", "Romance", "Sweet Spot", "Charming",
        "Flirty", "Enchanting", "Dreamy", "Heart Skip",
        "Love Story", "Romantic Rendezvous", "Sweet Romance", "Date Perfect",
    ],
    "special": [
        "Special Moment", "Occasion", "Memorable", "Milestone",
        "Celebration", "Unforgettable", "Unique", "Distinctive",
        "Once in a Lifetime", "Grand Occasion", "Special Event", "Milestone Magic",
    ],
}

SEASON_MODIFIERS = {
    "spring": ["Fresh", "Bloom", "Renewal", "Garden", "Awakening", "Breezy", "Flourishing", "Vibrant"],
    "summer": ["Sunny", "Bright", "Tropical", "Radiant", "Golden", "Vibrant", "Warm", "Luminous"],
    "fall": ["Cozy", "Warm", "Autumn", "Rustic", "Harvest", "Earthy", "Crisp", "Rich"],
    "winter": ["Crisp", "Cool", "Frost", "Snow", "Arctic", "Ice", "Chilly", "Frosty"],
}

# Keyed by services.color_theory.color_family
COLOR_ADJECTIVES = {
    "black": ["Midnight", "Shadow", "Obsidian", "Onyx", "Noir", "Eclipse", "Charcoal", "Raven"],
    "white": ["Pure", "Snow", "Pearl", "Cloud", "Ivory", "Crystal", "Pristine", "Angelic"],
    "gray": ["Storm", "Steel", "Ash", "Slate", "Fog", "Stone", "Silver", "Misty"],
    "red": ["Fire", "Cherry", "Crimson", "Rose", "Ruby", "Flame", "Scarlet", "Burgundy"],
    "blue": ["Ocean", "Sky", "Sapphire", "Navy", "Azure", "Denim", "Cobalt", "Royal"],
    "green": ["Forest", "Emerald", "Mint", "Sage", "Olive", "Jade", "Moss", "Pine"],
    "yellow": ["Sunshine", "Gold", "Lemon", "Honey", "Amber", "Citrus", "Butter", "Canary"],
    "orange": ["Sunset", "Tangerine", "Copper", "Coral", "Peach", "Flame", "Papaya", "Ginger"],
    "pink": ["Blush", "Rose", "Petal", "Soft", "Candy", "Ballet", "Blossom", "Rosy"],
    "purple": ["Lavender", "Plum", "Violet", "Amethyst", "Mauve", "Grape", "Orchid", "Lilac"],
    "brown": ["Chocolate", "Caramel", "Coffee", "Mocha", "Toffee", "Espresso", "Cocoa", "Mahogany"],
}

STYLE_DESCRIPTORS = [
    "Chic", "Sleek", "Modern", "Classic", "Edgy", "Soft", "Bold", "Minimal",
    "Statement", "Effortless", "Polished", "Trendy", "Sophisticated", "Playful", "Elegant", "Sharp",
]

STYLE_NAME_MODIFIERS = {
    "modern": ["Sleek", "Contemporary", "Fresh", "Current"],
    "classic": ["Timeless", "Traditional", "Elegant", "Refined"],
    "edgy": ["Bold", "Fierce", "Statement", "Dramatic"],
    "minimal": ["Clean", "Simple", "Pure", "Essential"],
    "bold": ["Striking", "Vibrant", "Dynamic", "Powerful"],
}

# Chances, each drawn from its own seed offset
SEASON_MODIFIER_CHANCE = 0.4
COLOR_MODIFIER_CHANCE = 0.3
STYLE_MODIFIER_CHANCE = 0.2
USE_MODIFIER_CHANCE = 0.7
MODIFIER_FIRST_CHANCE = 0.7
STYLED_NAME_CHANCE = 0.5


def hash_string(value: str) -> int:
    """31-multiplier string hash folded to a signed 32-bit int, returned as its absolute value."""
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def seeded_random(seed: float) -> float:
    """Deterministic pseudo-random number in [0, 1) for a seed."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def _pick(options: List[str], seed: float) -> str:
    return options[math.floor(seeded_random(seed) * len(options))]


def _most_frequent(values: Iterable[str]) -> Optional[str]:
    """Most frequent value; on a tie the value seen later wins."""
    counts = Counter(values)
    if not counts:
        return None
    best = None
    for value in counts:
        if best is None or counts[value] >= counts[best]:
            best = value
    return best


def _ensure_unique(name: str, used: Set[str]) -> str:
    if name not in used:
        used.add(name)
        return name

    for numeral in ROMAN_NUMERALS:
        candidate = f"{name} {numeral}"
        if candidate not in used:
            used.add(candidate)
            return candidate

    for counter in range(2, MAX_NUMBER_SUFFIX + 1):
        candidate = f"{name} {counter}"
        if candidate not in used:
            used.add(candidate)
            return candidate

    fallback = f"{name} {int(time.time() * 1000) % 10000}"
    used.add(fallback)
    return fallback


def _names_to_check(existing_names: Optional[Iterable[str]]) -> Set[str]:
    return set(existing_names) if existing_names is not None else _used_names


def _value(v) -> str:
    return getattr(v, "value", v)


def generate_outfit_name(items: List[ClothingItem], existing_names: Optional[Iterable[str]] = None) -> str:
    """
    Deterministic, unique name for an outfit.

    The base comes from the most frequent occasion's templates; a season,
    color or style modifier may lead or trail it.

    Args:
        items: Outfit pieces
        existing_names: Names to stay unique against (module cache when None)
    """
    used = _names_to_check(existing_names)
    if not items:
        return _ensure_unique(EMPTY_OUTFIT_NAME, used)

    signature = "|".join(sorted(f"{item.id}-{_value(item.category)}-{item.color}" for item in items))
    base_seed = hash_string(signature)

    occasion = _most_frequent(_value(o) for item in items for o in item.occasion) or DEFAULT_OCCASION
    season = _most_frequent(_value(s) for item in items for s in item.season)
    dominant_color = _most_frequent(item.color.lower() for item in items)

    base_name = _pick(NAME_TEMPLATES.get(occasion, NAME_TEMPLATES[DEFAULT_OCCASION]), base_seed)

    modifier_seed = base_seed + 1
    color_seed = base_seed + 2
    style_seed = base_seed + 3
    order_seed = base_seed + 4

    modifier = ""
    if season and seeded_random(modifier_seed) < SEASON_MODIFIER_CHANCE:
        modifier = _pick(SEASON_MODIFIERS[season], modifier_seed)

    if not modifier and dominant_color and seeded_random(color_seed) < COLOR_MODIFIER_CHANCE:
        adjectives = COLOR_ADJECTIVES.get(color_family(dominant_color))
        if adjectives:
            modifier = _pick(adjectives, color_seed)

    if not modifier and seeded_random(style_seed) < STYLE_MODIFIER_CHANCE:
        modifier = _pick(STYLE_DESCRIPTORS, style_seed)

    if modifier and seeded_random(order_seed) < USE_MODIFIER_CHANCE:
        if seeded_random(order_seed + 1) < MODIFIER_FIRST_CHANCE:
            name = f"{modifier} {base_name}"
        else:
            name = f"{base_name} {modifier}"
    else:
        name = base_name

    return _ensure_unique(name, used)


def generate_styled_outfit_name(
    items: List[ClothingItem],
    style: str = "modern",
    existing_names: Optional[Iterable[str]] = None,
) -> str:
    """Outfit name that half the time leads with a modifier for the given style."""
    if style not in STYLE_NAME_MODIFIERS:
        raise ValueError(f"Unknown name style '{style}'")

    existing = list(existing_names) if existing_names is not None else None
    base_name = generate_outfit_name(items, existing)

    signature = "|".join(sorted(f"{item.id}-{_value(item.category)}" for item in items))
    seed = hash_string(signature + style)

    if seeded_random(seed) < STYLED_NAME_CHANCE:
        modifier = _pick(STYLE_NAME_MODIFIERS[style], seed)
        return _ensure_unique(f"{modifier} {base_name}", _names_to_check(existing))
    return base_name


def clear_names_cache():
    _used_names.clear()


def get_cache_size() -> int:
    return len(_used_names)
