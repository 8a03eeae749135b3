# services/outfit_scorer.py
"""
7-Dimension Scoring Framework for outfit recommendations.

Dimensions (weights from scoring_matrix.WEIGHTS):
1. Color Harmony (20%)
2. Style Matching (20%)
3. Occasion Suitability (20%)
4. Season Suitability (15%)
5. Weather Suitability (15%)
6. User Preference (5%)
7. Variety (5%)

On top of the weighted sum, outfits suggested recently are penalised so a
session keeps surfacing fresh combinations.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

import config
from contracts.models import (
    ClothingItem,
    DetailedOutfitScore,
    OutfitGenerationOptions,
    OutfitScore,
    ScoreBreakdown,
)
from scoring_matrix import (
    WEIGHTS,
    recency_penalty,
    score_color_harmony,
    score_occasion_suitability,
    score_season_suitability,
    score_style_matching,
    score_user_preference,
    score_weather_suitability,
    weighted_total,
)
from services.outfit_history import InMemoryOutfitHistory
from services.outfit_similarity import key_similarity

# ============================================================================
# 7-Dimension Scoring Framework
# ============================================================================

SCORING_DIMENSIONS = {
    "color_harmony": {
        "weight": WEIGHTS["color_harmony"],
        "description": "How well the outfit colors work together",
        "category": "aesthetic"
    },
    "style_matching": {
        "weight": WEIGHTS["style_matching"],
        "description": "Closeness to the stylist dials (formality, boldness, layering, colorfulness)",
        "category": "personalization"
    },
    "occasion_suitability": {
        "weight": WEIGHTS["occasion_suitability"],
        "description": "Share of pieces suited to the requested occasion",
        "category": "contextual"
    },
    "season_suitability": {
        "weight": WEIGHTS["season_suitability"],
        "description": "Share of pieces suited to the requested season",
        "category": "contextual"
    },
    "weather_suitability": {
        "weight": WEIGHTS["weather_suitability"],
        "description": "Layers, rain and wind protection for the current weather",
        "category": "contextual"
    },
    "user_preference": {
        "weight": WEIGHTS["user_preference"],
        "description": "Share of pieces in the user's preferred colors",
        "category": "personalization"
    },
    "variety": {
        "weight": WEIGHTS["variety"],
        "description": "Distance from recently suggested outfits",
        "category": "freshness"
    },
}

SCORE_COLORS = [
    (0.85, "#10B981"),  # success
    (0.70, "#F59E0B"),  # warning
    (0.50, "#EF4444"),  # error
]
NEUTRAL_SCORE_COLOR = "#6B7280"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def outfit_key(items: List[ClothingItem]) -> str:
    """Order-independent outfit identity: sorted item ids joined by '|'."""
    return "|".join(sorted(item.id for item in items))


class OutfitScorer:
    """
    History-aware outfit scorer.
    """

    def __init__(self, history=None, clock: Callable[[], datetime] = None):
        """
        Args:
            history: Recently generated outfit history (in-memory by default)
            clock: Returns the current UTC time; injectable for tests
        """
        self.history = history if history is not None else InMemoryOutfitHistory()
        self.clock = clock or _utcnow
        self.window_days = config.RECENT_OUTFITS_TTL_DAYS

    def _days_since(self, when: datetime) -> float:
        return (self.clock() - when).total_seconds() / 86400

    def variety_score(self, items: List[ClothingItem]) -> float:
        """
        1.0 unless the outfit closely resembles a recent one, in which case the
        penalty scales with similarity and fades over the history window.
        """
        key = outfit_key(items)
        for recent_key, when in self.history.entries():
            similarity = key_similarity(key, recent_key)
            if similarity > config.HISTORY_SIMILARITY_THRESHOLD:
                fade = max(0.0, 1 - self._days_since(when) / self.window_days)
                return 1 - similarity * fade
        return 1.0

    def score_breakdown(self, items: List[ClothingItem], options: OutfitGenerationOptions) -> ScoreBreakdown:
        return ScoreBreakdown(
            color_harmony=score_color_harmony(items),
            style_matching=score_style_matching(items, options.style_preference),
            occasion_suitability=score_occasion_suitability(items, options.occasion),
            season_suitability=score_season_suitability(items, options.season),
            weather_suitability=score_weather_suitability(items, options.weather),
            user_preference=score_user_preference(items, options.preferred_colors),
            variety=self.variety_score(items),
        )

    def score_outfit(self, items: List[ClothingItem], options: Optional[OutfitGenerationOptions] = None) -> OutfitScore:
        """
        Weighted score of an outfit, discounted if this exact outfit was suggested recently.
        Without options, no stylist dials apply.
        """
        if options is None:
            options = OutfitGenerationOptions(style_preference=None)

        breakdown = self.score_breakdown(items, options)
        total = weighted_total(breakdown)

        last = self.history.last_generated(outfit_key(items))
        if last is not None:
            total *= 1 - recency_penalty(self._days_since(last), self.window_days)

        return OutfitScore(total=total, breakdown=breakdown)

    def calculate_detailed_score(
        self,
        items: List[ClothingItem],
        context: Optional[Union[dict, OutfitGenerationOptions]] = None,
    ) -> DetailedOutfitScore:
        """
        Score view used for hand-built outfits.

        Args:
            items: Outfit pieces
            context: Optional occasion / season / weather / user_preferences (colors)

        Returns:
            DetailedOutfitScore (all zeros for an empty outfit)
        """
        if not items:
            return DetailedOutfitScore(total=0, style_harmony=0, color_match=0, season_fit=0, occasion=0)

        if isinstance(context, dict):
            context = OutfitGenerationOptions(
                occasion=context.get("occasion"),
                season=context.get("season"),
                weather=context.get("weather"),
                preferred_colors=context.get("user_preferences") or [],
                style_preference=None,
            )

        score = self.score_outfit(items, context)
        b = score.breakdown
        return DetailedOutfitScore(
            total=score.total,
            style_harmony=b.style_matching,
            color_match=b.color_harmony,
            season_fit=b.season_suitability,
            occasion=b.occasion_suitability,
            weather=b.weather_suitability,
            user_preference=b.user_preference,
            variety=b.variety,
        )


# ============================================================================
# Presentation Helpers
# ============================================================================

def format_score_for_database(score: DetailedOutfitScore) -> Dict[str, Optional[float]]:
    """Maps a detailed score onto the persisted score columns."""
    return {
        "total": score.total,
        "color": score.color_match,
        "style": score.style_harmony,
        "season": score.season_fit,
        "occasion": score.occasion,
        "weather": score.weather,
        "user_preference": score.user_preference,
        "variety": score.variety,
    }


def get_score_display(score: float) -> str:
    return f"{round(score * 100)}%"


def get_score_color(score: float) -> str:
    for threshold, color in SCORE_COLORS:
        if score >= threshold:
            return color
    return NEUTRAL_SCORE_COLOR


def generate_insights(breakdown: ScoreBreakdown, total: float) -> List[str]:
    """Generate human-readable insights from dimension scores."""
    insights = []
    scores = breakdown.model_dump()

    # Overall score insight
    if total >= 0.85:
        insights.append("✓ Excellent outfit - Highly recommended!")
    elif total >= 0.7:
        insights.append("✓ Great outfit - Strong match across dimensions")
    elif total >= 0.5:
        insights.append("~ Good outfit - Some areas for improvement")
    else:
        insights.append("⚠ Fair outfit - Consider alternatives")

    # Dimension-specific insights
    if scores["color_harmony"] >= 0.9:
        insights.append("✓ Colors are beautifully coordinated")
    elif scores["color_harmony"] < 0.5:
        insights.append("⚠ Colors may clash")

    if scores["weather_suitability"] < 0.6:
        insights.append("⚠ Weather match needs improvement")

    if scores["occasion_suitability"] < 0.5:
        insights.append("⚠ Several pieces don't suit the occasion")

    if scores["season_suitability"] < 0.5:
        insights.append("⚠ Several pieces are out of season")

    if scores["style_matching"] >= 0.85:
        insights.append("✓ Right on your style preferences")

    if scores["variety"] < 0.5:
        insights.append("~ Very close to an outfit suggested recently")

    return insights
