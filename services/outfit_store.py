# services/outfit_store.py
"""
Saved outfit records.

Keeps generated and hand-built outfits per user, tracks favorites and
notifies subscribers when a favorite flag changes. Records live in a plain
dict keyed by outfit id; pass the same dict to several services to share one
store between users.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from contracts.models import (
    ClothingItem,
    GeneratedOutfit,
    GeneratedOutfitRecord,
    OutfitRecordScore,
    OutfitScore,
)
from infra.logging import log_event
from services.outfit_naming import generate_outfit_name

logger = logging.getLogger(__name__)

GENERATED_OUTFIT_TAG = "ai-generated"
MANUAL_OUTFIT_TAG = "manual"

SOURCE_AI_GENERATED = "ai_generated"
SOURCE_MANUAL = "manual"

DEFAULT_NOTES_SCORE = 0.8
NOTES_SCORE_PATTERN = re.compile(r"Score: (\d+)%")

# Per-dimension share of the total when only the total survives in the notes
NOTES_SCORE_FACTORS = {
    "color": 0.9,
    "style": 0.95,
    "season": 0.85,
    "occasion": 0.9,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OutfitEventEmitter:
    """Minimal synchronous pub/sub used to broadcast favorite changes."""

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Registers a listener and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self):
        for listener in list(self._listeners):
            listener()


outfit_favorite_changed = OutfitEventEmitter()


def extract_score_from_notes(notes: Optional[str]) -> OutfitRecordScore:
    """
    Recovers a score from record notes ("... Score: 87%").
    Dimension scores are fixed fractions of the total; 0.8 when nothing is found.
    """
    match = NOTES_SCORE_PATTERN.search(notes) if notes else None
    if not match:
        return OutfitRecordScore(
            total=DEFAULT_NOTES_SCORE,
            **{k: DEFAULT_NOTES_SCORE for k in NOTES_SCORE_FACTORS},
        )

    total = int(match.group(1)) / 100
    return OutfitRecordScore(
        total=total,
        **{k: total * factor for k, factor in NOTES_SCORE_FACTORS.items()},
    )


def record_score_from_outfit_score(score: OutfitScore) -> OutfitRecordScore:
    b = score.breakdown
    return OutfitRecordScore(
        total=score.total,
        color=b.color_harmony,
        style=b.style_matching,
        season=b.season_suitability,
        occasion=b.occasion_suitability,
        weather=b.weather_suitability,
        user_preference=b.user_preference,
        variety=b.variety,
    )


def generated_notes(outfit: GeneratedOutfit) -> str:
    return f"AI-generated outfit with {len(outfit.items)} items. Score: {round(outfit.score.total * 100)}%"


class OutfitService:
    """
    Async outfit store scoped to one user.
    """

    def __init__(self, user_id: str, records: Optional[Dict[str, GeneratedOutfitRecord]] = None):
        """
        Args:
            user_id: Owner of every record this service writes
            records: Backing dict (id -> record); a fresh one when omitted
        """
        if not user_id:
            raise ValueError("user_id is required")
        self.user_id = user_id
        self.records = records if records is not None else {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _own_records(self) -> List[GeneratedOutfitRecord]:
        return [r for r in self.records.values() if r.user_id == self.user_id]

    def _existing_names(self) -> List[str]:
        return [r.name for r in self._own_records()]

    def _query(self, source_type: str, include_favorites: bool = True) -> List[GeneratedOutfitRecord]:
        matches = [
            r for r in self._own_records()
            if r.source_type == source_type and (include_favorites or not r.is_favorite)
        ]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches

    def _get_own(self, outfit_id: str) -> GeneratedOutfitRecord:
        record = self.records.get(outfit_id)
        if record is None or record.user_id != self.user_id:
            raise KeyError(f"Outfit {outfit_id} not found or unauthorized")
        return record

    def _insert(self, record: GeneratedOutfitRecord) -> GeneratedOutfitRecord:
        self.records[record.id] = record
        return record

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    async def save_generated_outfits(self, outfits: Iterable[GeneratedOutfit]) -> List[GeneratedOutfitRecord]:
        """
        Persists a batch of generated outfits.
        Names are unique against the user's saved names and earlier outfits of the batch.
        """
        taken = self._existing_names()
        saved = []
        for outfit in outfits:
            name = generate_outfit_name(outfit.items, taken)
            taken.append(name)
            saved.append(self._insert(GeneratedOutfitRecord(
                name=name,
                user_id=self.user_id,
                items=outfit.items,
                score=record_score_from_outfit_score(outfit.score),
                tags=[GENERATED_OUTFIT_TAG],
                source_type=SOURCE_AI_GENERATED,
                notes=generated_notes(outfit),
            )))

        log_event("generated_outfits_saved", user_id=self.user_id, count=len(saved))
        return saved

    async def save_manual_outfit(
        self,
        name: str,
        items: List[ClothingItem],
        occasions: Optional[List[str]] = None,
        seasons: Optional[List[str]] = None,
        notes: str = "",
        score: Optional[OutfitRecordScore] = None,
        on_saved: Optional[Callable[[str], None]] = None,
    ) -> str:
        """Saves a hand-built outfit and returns its id."""
        notes = notes or f"Manual outfit with {len(items)} items"
        record = self._insert(GeneratedOutfitRecord(
            name=name,
            user_id=self.user_id,
            items=items,
            score=score or extract_score_from_notes(notes),
            tags=[MANUAL_OUTFIT_TAG],
            source_type=SOURCE_MANUAL,
            occasions=occasions or [],
            seasons=seasons or [],
            notes=notes,
        ))

        log_event("manual_outfit_saved", user_id=self.user_id, outfit_id=record.id, items=len(items))
        if on_saved is not None:
            on_saved(record.id)
        return record.id

    async def save_single_generated_outfit(self, outfit: GeneratedOutfit, name: Optional[str] = None) -> str:
        """Saves one generated outfit as a favorite (the user chose to keep it). Returns its id."""
        name = name or generate_outfit_name(outfit.items, self._existing_names())
        record = self._insert(GeneratedOutfitRecord(
            name=name,
            user_id=self.user_id,
            items=outfit.items,
            score=record_score_from_outfit_score(outfit.score),
            is_favorite=True,
            tags=[GENERATED_OUTFIT_TAG],
            source_type=SOURCE_AI_GENERATED,
            notes=generated_notes(outfit),
        ))

        log_event("generated_outfit_saved", user_id=self.user_id, outfit_id=record.id, name=name)
        return record.id

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_generated_outfits(self) -> List[GeneratedOutfitRecord]:
        return self._query(SOURCE_AI_GENERATED)

    async def load_manual_outfits(self) -> List[GeneratedOutfitRecord]:
        """Non-favorited manual outfits, newest first."""
        return self._query(SOURCE_MANUAL, include_favorites=False)

    async def load_ai_generated_outfits(self) -> List[GeneratedOutfitRecord]:
        """Non-favorited generated outfits, newest first."""
        return self._query(SOURCE_AI_GENERATED, include_favorites=False)

    async def has_generated_outfits(self) -> bool:
        return bool(self._query(SOURCE_AI_GENERATED))

    async def has_manual_outfits(self) -> bool:
        return bool(self._query(SOURCE_MANUAL, include_favorites=False))

    async def has_ai_generated_outfits(self) -> bool:
        return bool(self._query(SOURCE_AI_GENERATED, include_favorites=False))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def delete_outfit(self, outfit_id: str):
        """Deletes one of the user's outfits. Raises KeyError for unknown or foreign ids."""
        record = self._get_own(outfit_id)
        del self.records[outfit_id]
        logger.info("Deleted outfit %s (%s)", outfit_id, record.source_type)

    async def clear_generated_outfits(self) -> int:
        """Deletes every generated outfit of the user, favorites included. Returns the count."""
        doomed = [r.id for r in self._own_records() if r.source_type == SOURCE_AI_GENERATED]
        for outfit_id in doomed:
            del self.records[outfit_id]
        log_event("generated_outfits_cleared", user_id=self.user_id, count=len(doomed))
        return len(doomed)

    async def toggle_outfit_favorite(self, outfit_id: str) -> bool:
        """Flips the favorite flag, notifies subscribers and returns the new value."""
        record = self._get_own(outfit_id)
        record.is_favorite = not record.is_favorite
        record.updated_at = _utcnow()
        logger.info("Outfit %s (%s) favorite set to %s", outfit_id, record.source_type, record.is_favorite)
        outfit_favorite_changed.emit()
        return record.is_favorite

    async def update_outfit(
        self,
        outfit_id: str,
        name: str,
        items: List[ClothingItem],
        occasions: Optional[List[str]] = None,
        seasons: Optional[List[str]] = None,
        notes: str = "",
    ) -> str:
        record = self._get_own(outfit_id)
        record.name = name
        record.items = list(items)
        record.occasions = occasions or []
        record.seasons = seasons or []
        record.notes = notes or f"Updated outfit with {len(items)} items"
        record.updated_at = _utcnow()
        return record.id
