# services/color_theory.py
"""
Color theory helpers for outfit generation.

Works in HSL space (hue in degrees, saturation and lightness 0-1):
- Hex / name normalization and conversion
- Harmony detection (monochromatic, analogous, complementary, triadic, ...)
- Palette generation from a base color
- Color families for naming and accessory coordination
- WCAG contrast ratio
"""
import colorsys
from typing import List, Sequence, Tuple

HSL = Tuple[float, float, float]

# ============================================================================
# Constants
# ============================================================================

COLOR_HARMONY = {
    "MONOCHROMATIC": "monochromatic",
    "ANALOGOUS": "analogous",
    "COMPLEMENTARY": "complementary",
    "TRIADIC": "triadic",
    "SPLIT_COMPLEMENTARY": "split_complementary",
    "TETRADIC": "tetradic",
    "NEUTRAL": "neutral",
    "CUSTOM": "custom",
}

# Saturation below this reads as neutral
NEUTRAL_SATURATION = 0.15

# Fashion neutrals
NEUTRAL_COLORS = [
    "#000000",  # black
    "#ffffff",  # white
    "#808080",  # gray
    "#a9a9a9",  # dark gray
    "#d3d3d3",  # light gray
    "#f5f5f5",  # off-white
    "#a52a2a",  # brown
    "#d2b48c",  # tan
    "#f5f5dc",  # beige
    "#708090",  # slate gray
    "#000080",  # navy
]

NAMED_COLORS = {
    "black": "#000000",
    "white": "#ffffff",
    "gray": "#808080",
    "grey": "#808080",
    "charcoal": "#36454f",
    "silver": "#c0c0c0",
    "navy": "#000080",
    "blue": "#0000ff",
    "light blue": "#add8e6",
    "denim": "#1560bd",
    "teal": "#008080",
    "red": "#ff0000",
    "burgundy": "#800020",
    "maroon": "#800000",
    "pink": "#ffc0cb",
    "coral": "#ff7f50",
    "orange": "#ffa500",
    "yellow": "#ffff00",
    "gold": "#ffd700",
    "mustard": "#e1ad01",
    "green": "#008000",
    "olive": "#808000",
    "mint": "#98ff98",
    "khaki": "#c3b091",
    "purple": "#800080",
    "lavender": "#e6e6fa",
    "brown": "#a52a2a",
    "tan": "#d2b48c",
    "beige": "#f5f5dc",
    "cream": "#fffdd0",
    "ivory": "#fffff0",
    "nude": "#e3bc9a",
}

_HEX_DIGITS = set("0123456789abcdef")


# ============================================================================
# Conversion
# ============================================================================

def normalize_color(value: str) -> str:
    """
    Normalize a color to lowercase #rrggbb.
    Accepts #rgb, #rrggbb and known color names; anything else is returned
    unchanged (and later reads as black).
    """
    if not value:
        return value
    v = value.strip().lower()
    if v in NAMED_COLORS:
        return NAMED_COLORS[v]
    if v.startswith("#"):
        digits = v[1:]
        if len(digits) == 3 and set(digits) <= _HEX_DIGITS:
            return "#" + "".join(c * 2 for c in digits)
        if len(digits) == 6 and set(digits) <= _HEX_DIGITS:
            return v
    return value


def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """Hex to (r, g, b) in 0-1. Invalid input maps to black."""
    if not hex_color or not hex_color.startswith("#"):
        return 0.0, 0.0, 0.0
    digits = hex_color[1:7].lower()
    if len(digits) != 6 or not set(digits) <= _HEX_DIGITS:
        return 0.0, 0.0, 0.0
    return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))


def hex_to_hsl(hex_color: str) -> HSL:
    """Hex to (h degrees, s, l). Invalid input maps to black (0, 0, 0)."""
    r, g, b = hex_to_rgb(hex_color)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360, s, l


def hsl_to_hex(h: float, s: float, l: float) -> str:
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360, l, s)
    return "#" + "".join(f"{round(x * 255):02x}" for x in (r, g, b))


def hue_difference(h1: float, h2: float) -> float:
    """Circular hue distance in degrees."""
    diff = abs(h1 - h2)
    return min(diff, 360 - diff)


# ============================================================================
# Classification
# ============================================================================

def are_colors_close(color1: str, color2: str) -> bool:
    """Colors are close if hue, saturation and lightness are all within thresholds."""
    if not color1 or not color2:
        return False
    if color1.lower() == color2.lower():
        return True
    h1, s1, l1 = hex_to_hsl(color1)
    h2, s2, l2 = hex_to_hsl(color2)
    return hue_difference(h1, h2) < 30 and abs(s1 - s2) < 0.3 and abs(l1 - l2) < 0.3


def is_neutral_color(hex_color: str) -> bool:
    if any(are_colors_close(hex_color, neutral) for neutral in NEUTRAL_COLORS):
        return True
    return hex_to_hsl(hex_color)[1] < NEUTRAL_SATURATION


def color_family(hex_color: str) -> str:
    """Coarse color family name (black, white, gray, red, ..., brown)."""
    h, s, l = hex_to_hsl(hex_color)
    if l <= 0.12:
        return "black"
    if l >= 0.92:
        return "white"
    if s < NEUTRAL_SATURATION:
        return "gray"
    if 15 <= h < 45 and l < 0.45:
        return "brown"
    if h < 15 or h >= 345:
        return "pink" if l > 0.7 else "red"
    if h < 45:
        return "orange"
    if h < 70:
        return "yellow"
    if h < 170:
        return "green"
    if h < 260:
        return "blue"
    if h < 290:
        return "purple"
    return "pink"


def determine_color_harmony(hsl_colors: Sequence[HSL]) -> str:
    """
    Classify a set of HSL colors into a harmony type.
    Returns one of COLOR_HARMONY values ("custom" when nothing matches).
    """
    if len(hsl_colors) <= 1:
        return COLOR_HARMONY["MONOCHROMATIC"]

    neutrals = [c for c in hsl_colors if c[1] < NEUTRAL_SATURATION]
    if len(neutrals) == len(hsl_colors):
        return COLOR_HARMONY["NEUTRAL"]

    # Mostly neutral: judge the accent colors only
    if len(neutrals) >= len(hsl_colors) - 1 and len(hsl_colors) > 2:
        non_neutrals = [c for c in hsl_colors if c[1] >= NEUTRAL_SATURATION]
        if non_neutrals:
            return determine_color_harmony(non_neutrals)

    hues = [c[0] for c in hsl_colors]
    hue_range = max(hues) - min(hues)
    if hue_range <= 15 or hue_range >= 345:
        return COLOR_HARMONY["MONOCHROMATIC"]
    if hue_range <= 60 or hue_range >= 300:
        return COLOR_HARMONY["ANALOGOUS"]

    if len(hsl_colors) == 2:
        if abs(abs(hues[0] - hues[1]) - 180) <= 30:
            return COLOR_HARMONY["COMPLEMENTARY"]

    if len(hsl_colors) == 3:
        ordered = sorted(hues)
        d1, d2 = ordered[1] - ordered[0], ordered[2] - ordered[1]
        if abs(d1 - 120) <= 30 and abs(d2 - 120) <= 30:
            return COLOR_HARMONY["TRIADIC"]
        if (abs(d1 - 150) <= 30 and abs(d2 - 30) <= 30) or (abs(d1 - 30) <= 30 and abs(d2 - 150) <= 30):
            return COLOR_HARMONY["SPLIT_COMPLEMENTARY"]

    if len(hsl_colors) == 4:
        ordered = sorted(hues)
        d1 = ordered[1] - ordered[0]
        d2 = ordered[2] - ordered[1]
        d3 = ordered[3] - ordered[2]
        if abs(d1 - d3) <= 30 and abs(d2 - 180) <= 30:
            return COLOR_HARMONY["TETRADIC"]

    return COLOR_HARMONY["CUSTOM"]


def color_distance(c1: HSL, c2: HSL) -> float:
    """Weighted HSL distance, hue dominant."""
    return hue_difference(c1[0], c2[0]) * 0.6 + abs(c1[1] - c2[1]) * 0.2 + abs(c1[2] - c2[2]) * 0.2


# ============================================================================
# Palettes
# ============================================================================

def get_complementary_color(hex_color: str) -> str:
    h, s, l = hex_to_hsl(hex_color)
    return hsl_to_hex((h + 180) % 360, s, l)


def get_analogous_colors(hex_color: str, count: int = 3, angle: float = 30) -> List[str]:
    h, s, l = hex_to_hsl(hex_color)
    colors = [hex_color]
    for i in range(1, count):
        if i % 2 == 1:
            hue = h + angle * ((i + 1) // 2)  # clockwise
        else:
            hue = h - angle * (i // 2)  # counter-clockwise
        colors.append(hsl_to_hex(hue % 360, s, l))
    return colors


def get_triadic_colors(hex_color: str) -> List[str]:
    h, s, l = hex_to_hsl(hex_color)
    return [hex_color, hsl_to_hex((h + 120) % 360, s, l), hsl_to_hex((h + 240) % 360, s, l)]


def get_split_complementary_colors(hex_color: str) -> List[str]:
    h, s, l = hex_to_hsl(hex_color)
    complement = (h + 180) % 360
    return [hex_color, hsl_to_hex((complement - 30) % 360, s, l), hsl_to_hex((complement + 30) % 360, s, l)]


def get_monochromatic_colors(hex_color: str, count: int = 5) -> List[str]:
    """Same hue, saturation and lightness ramped around the base color."""
    h, s, l = hex_to_hsl(hex_color)
    colors = []
    for i in range(count):
        step = i / (count - 1) if count > 1 else 0.5
        new_s = max(0.0, min(1.0, s - 0.3 + step * 0.6))
        new_l = max(0.1, min(0.9, l - 0.3 + step * 0.6))
        colors.append(hsl_to_hex(h, new_s, new_l))
    return colors


def get_color_palette(base_color: str, harmony_type: str, count: int = 3) -> List[str]:
    if harmony_type == COLOR_HARMONY["MONOCHROMATIC"]:
        return get_monochromatic_colors(base_color, count)
    if harmony_type == COLOR_HARMONY["ANALOGOUS"]:
        return get_analogous_colors(base_color, count)
    if harmony_type == COLOR_HARMONY["COMPLEMENTARY"]:
        return [base_color, get_complementary_color(base_color)]
    if harmony_type == COLOR_HARMONY["TRIADIC"]:
        return get_triadic_colors(base_color)
    if harmony_type == COLOR_HARMONY["SPLIT_COMPLEMENTARY"]:
        return get_split_complementary_colors(base_color)
    return get_analogous_colors(base_color, count)


# ============================================================================
# Contrast
# ============================================================================

def _relative_luminance(rgb: Tuple[float, float, float]) -> float:
    def channel(c: float) -> float:
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def calculate_contrast_ratio(color1: str, color2: str) -> float:
    """WCAG contrast ratio between two colors (1.0 - 21.0)."""
    l1 = _relative_luminance(hex_to_rgb(color1))
    l2 = _relative_luminance(hex_to_rgb(color2))
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)
