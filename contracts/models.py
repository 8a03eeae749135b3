# contracts/models.py
"""
Pydantic models for the outfit recommendation engine.
These models define the data contracts for wardrobe items, generation options,
outfit scores and persisted outfit records.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional
import uuid

from pydantic import BaseModel, Field, field_validator

from services.color_theory import normalize_color


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enumerations
# ============================================================================

class ClothingCategory(str, Enum):
    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESSES = "dresses"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORIES = "accessories"
    UNDERWEAR = "underwear"
    ACTIVEWEAR = "activewear"
    SLEEPWEAR = "sleepwear"
    SWIMWEAR = "swimwear"
    JEWELRY = "jewelry"
    BAGS = "bags"
    BELTS = "belts"
    HATS = "hats"
    SCARVES = "scarves"
    SOCKS = "socks"
    UNDERSHIRTS = "undershirts"
    BRAS = "bras"
    SHORTS_UNDERWEAR = "shorts_underwear"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class Occasion(str, Enum):
    CASUAL = "casual"
    WORK = "work"
    FORMAL = "formal"
    PARTY = "party"
    SPORT = "sport"
    TRAVEL = "travel"
    DATE = "date"
    SPECIAL = "special"


class WeatherConditions(str, Enum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    WINDY = "windy"


# ============================================================================
# Wardrobe
# ============================================================================

class ClothingItem(BaseModel):
    """
    A single piece of clothing in the user's wardrobe.
    Colors are stored as lowercase #rrggbb hex; common color names are accepted.
    """
    id: str
    name: str
    category: ClothingCategory
    subcategory: str = ""
    color: str = "#000000"
    brand: Optional[str] = None
    size: Optional[str] = None
    season: List[Season] = []
    occasion: List[Occasion] = []
    image_url: str = ""
    tags: List[str] = []
    is_favorite: bool = False
    last_worn: Optional[datetime] = None
    times_worn: int = 0
    purchase_date: Optional[datetime] = None
    price: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, v):
        if v is None:
            return "#000000"
        return normalize_color(str(v))


class Outfit(BaseModel):
    """A named, saved combination of wardrobe items."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    items: List[ClothingItem]
    occasion: List[Occasion] = []
    season: List[Season] = []
    tags: List[str] = []
    is_favorite: bool = False
    times_worn: int = 0
    last_worn: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ============================================================================
# Generation Inputs
# ============================================================================

class WeatherData(BaseModel):
    """Current weather as supplied by the caller (temperature in Celsius)."""
    temperature: float
    conditions: WeatherConditions = WeatherConditions.CLEAR
    precipitation: float = Field(default=0.0, ge=0, le=1)  # probability
    humidity: float = Field(default=0.5, ge=0, le=1)
    wind_speed: float = Field(default=0.0, ge=0)  # km/h


class StylePreference(BaseModel):
    """Stylist dials, each from 0 (casual/conservative/minimal/monochrome) to 1."""
    formality: float = Field(default=0.5, ge=0, le=1)
    boldness: float = Field(default=0.5, ge=0, le=1)
    layering: float = Field(default=0.5, ge=0, le=1)
    colorfulness: float = Field(default=0.5, ge=0, le=1)


class OutfitGenerationOptions(BaseModel):
    occasion: Optional[Occasion] = None
    season: Optional[Season] = None
    weather: Optional[WeatherData] = None
    preferred_colors: List[str] = []
    excluded_items: List[str] = []
    style_preference: Optional[StylePreference] = Field(default_factory=StylePreference)
    force_include_items: List[str] = []
    max_results: int = Field(default=5, ge=1)
    min_score: float = Field(default=0.1, ge=0, le=1)
    use_all_items: bool = False
    strict_palette: bool = False  # drop items outside preferred_colors
    formality_tolerance: Optional[float] = Field(default=None, ge=0, le=1)  # max item formality gap

    @field_validator("preferred_colors", mode="before")
    @classmethod
    def _normalize_colors(cls, v):
        return [normalize_color(str(c)) for c in (v or [])]


class TemperatureRange(BaseModel):
    min: float = 15
    max: float = 25


class StylistFilters(BaseModel):
    """
    Filters chosen in the stylist panel.
    `formality` is a label (casual, semi-formal, formal) overriding the dial.
    """
    occasion: Optional[Occasion] = None
    style: Optional[str] = None
    weather_conditions: Optional[WeatherConditions] = None
    formality: Optional[str] = None
    colors: List[str] = []
    include_weather: bool = False
    temperature_range: Optional[TemperatureRange] = None
    style_preferences: StylePreference = Field(default_factory=StylePreference)


# ============================================================================
# Scores & Results
# ============================================================================

class ScoreBreakdown(BaseModel):
    color_harmony: float
    style_matching: float
    occasion_suitability: float
    season_suitability: float
    weather_suitability: float
    user_preference: float
    variety: float


class OutfitScore(BaseModel):
    total: float
    breakdown: ScoreBreakdown


class GeneratedOutfit(BaseModel):
    items: List[ClothingItem]
    score: OutfitScore

    @property
    def key(self) -> str:
        return "|".join(sorted(item.id for item in self.items))


class DetailedOutfitScore(BaseModel):
    total: float
    style_harmony: float
    color_match: float
    season_fit: float
    occasion: float
    weather: Optional[float] = None
    user_preference: Optional[float] = None
    variety: Optional[float] = None


class CompletenessReport(BaseModel):
    is_complete: bool
    missing_categories: List[str] = []
    suggestions: List[str] = []


class SimilarityBreakdown(BaseModel):
    item_match: float = 0.0
    color_match: float = 0.0
    category_match: float = 0.0
    style_match: float = 0.0


class SimilarityResult(BaseModel):
    similarity: float = 0.0
    is_very_similar: bool = False
    breakdown: SimilarityBreakdown = Field(default_factory=SimilarityBreakdown)


# ============================================================================
# Persisted Records & Session State
# ============================================================================

class OutfitRecordScore(BaseModel):
    total: float
    color: float
    style: float
    season: float
    occasion: float
    weather: Optional[float] = None
    user_preference: Optional[float] = None
    variety: Optional[float] = None


class GeneratedOutfitRecord(BaseModel):
    """A saved outfit as returned by the outfit store."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    user_id: str
    items: List[ClothingItem]
    score: OutfitRecordScore
    is_favorite: bool = False
    tags: List[str] = []
    source_type: str = "manual"
    occasions: List[str] = []
    seasons: List[str] = []
    notes: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class RecommendationState(BaseModel):
    loading: bool = False
    error: Optional[str] = None
    outfits: List[GeneratedOutfit] = []
    manual_outfits: List[GeneratedOutfitRecord] = []
    selected_outfit_index: int = 0
    generation_progress: float = 0.0
    has_persisted_manual_outfits: bool = False
    is_loaded_from_store: bool = False


# Progress callbacks receive (fraction 0-1, stage name)
ProgressCallback = Callable[[float, str], None]
