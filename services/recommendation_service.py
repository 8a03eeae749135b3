# services/recommendation_service.py
"""
Recommendation session orchestration.

Holds the state of one browsing session: the generated outfits, which one is
selected, progress of the running generation and the user's saved manual
outfits. Generation runs in a worker thread; only one runs at a time.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Union

from contracts.models import (
    ClothingItem,
    GeneratedOutfit,
    Occasion,
    Outfit,
    OutfitGenerationOptions,
    RecommendationState,
    StylistFilters,
    WeatherData,
)
from deterministic_layer import (
    default_session_options,
    filters_to_options,
    filters_to_weather,
    merge_options,
    occasion_session_options,
    weather_session_options,
)
from infra.logging import log_error, log_event
from services.outfit_generator import OutfitGenerator, get_outfit_generator
from services.outfit_naming import generate_outfit_name
from services.outfit_store import OutfitService

logger = logging.getLogger(__name__)

NOT_ENOUGH_ITEMS_ERROR = "Not enough items in your wardrobe to generate outfits"
GENERATION_FAILED_ERROR = "Failed to generate outfit recommendations"

# Generator progress is mapped into this band of the session progress
GENERATION_BAND = (0.5, 0.8)

StateListener = Callable[[RecommendationState], None]


class RecommendationService:
    """
    Session-level entry points for outfit recommendations.
    """

    def __init__(
        self,
        wardrobe: List[ClothingItem],
        generator: Optional[OutfitGenerator] = None,
        store: Optional[OutfitService] = None,
        initial_options: Optional[Union[dict, OutfitGenerationOptions]] = None,
    ):
        """
        Args:
            wardrobe: Items to build outfits from
            generator: Outfit generator (process-wide default when omitted)
            store: Saved outfit store for manual outfits and favorites
            initial_options: Options layered over the session defaults on every run
        """
        self.wardrobe = list(wardrobe)
        self.generator = generator or get_outfit_generator()
        self.store = store
        self.initial_options = initial_options
        self.state = RecommendationState()
        self.saved_outfits: List[Outfit] = []
        self._lock = asyncio.Lock()
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Calls listener with the new state after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes):
        self.state = self.state.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self.state)

    def _set_progress(self, value: float):
        self._set_state(generation_progress=value)

    @property
    def is_generating(self) -> bool:
        return self._lock.locked()

    @property
    def current_outfit(self) -> Optional[GeneratedOutfit]:
        outfits = self.state.outfits
        if not outfits or self.state.selected_outfit_index >= len(outfits):
            return None
        return outfits[self.state.selected_outfit_index]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_recommendations(
        self,
        options: Optional[Union[dict, OutfitGenerationOptions]] = None,
    ) -> List[GeneratedOutfit]:
        """
        Generates a fresh set of outfits for the wardrobe.

        Options layer as: session defaults < initial options < options.
        Returns [] when a generation is already running, the wardrobe is too
        small, or generation fails (the error is then in state.error).
        """
        if self._lock.locked():
            logger.info("Generation already running, ignoring request")
            return []

        if len(self.wardrobe) < 2:
            log_event("generation_skipped", level=logging.WARNING, wardrobe_size=len(self.wardrobe))
            self._set_state(loading=False, error=NOT_ENOUGH_ITEMS_ERROR)
            return []

        async with self._lock:
            self._set_state(loading=True, error=None, generation_progress=0.0)
            try:
                self._set_progress(0.2)
                merged = merge_options(
                    default_session_options(len(self.wardrobe)),
                    self.initial_options,
                    options,
                )

                self._set_progress(GENERATION_BAND[0])
                loop = asyncio.get_running_loop()
                low, high = GENERATION_BAND

                def on_progress(fraction: float, stage: str):
                    loop.call_soon_threadsafe(self._set_progress, low + (high - low) * fraction)

                outfits = await asyncio.to_thread(
                    self.generator.generate_outfits, self.wardrobe, merged, on_progress
                )
                self._set_progress(high)

                log_event(
                    "recommendations_generated",
                    wardrobe_size=len(self.wardrobe),
                    count=len(outfits),
                    top_scores=[f"{round(o.score.total * 100)}%" for o in outfits[:10]],
                )
                self._set_state(
                    outfits=outfits,
                    selected_outfit_index=0,
                    loading=False,
                    generation_progress=1.0,
                )
                return outfits

            except Exception as e:
                log_error(str(e), stage="generate_recommendations", error_type=type(e).__name__)
                self._set_state(loading=False, error=GENERATION_FAILED_ERROR, generation_progress=0.0)
                return []

    async def clear_and_regenerate_outfits(self) -> List[GeneratedOutfit]:
        """Drops the current outfits and generates a new set."""
        logger.debug("Clearing %d outfits before regenerating", len(self.state.outfits))
        self._set_state(loading=True, generation_progress=0.1)
        self._set_state(outfits=[], selected_outfit_index=0, generation_progress=0.3)
        return await self.generate_recommendations()

    async def get_weather_based_recommendation(self, weather: WeatherData) -> List[GeneratedOutfit]:
        return await self.generate_recommendations(weather_session_options(weather, len(self.wardrobe)))

    async def get_occasion_based_recommendation(self, occasion: Occasion) -> List[GeneratedOutfit]:
        return await self.generate_recommendations(occasion_session_options(occasion, len(self.wardrobe)))

    async def apply_filters(self, filters: Union[dict, StylistFilters]) -> List[GeneratedOutfit]:
        """
        Generates outfits for a set of stylist filters.

        Weather filters (include_weather or a temperature range) take the
        weather path, then an occasion takes the occasion path; otherwise the
        filters become quality-biased generation options.
        """
        if isinstance(filters, dict):
            filters = StylistFilters(**filters)

        if filters.include_weather or filters.temperature_range is not None:
            return await self.get_weather_based_recommendation(filters_to_weather(filters))
        if filters.occasion:
            return await self.get_occasion_based_recommendation(filters.occasion)
        return await self.generate_recommendations(filters_to_options(filters, len(self.wardrobe)))

    # ------------------------------------------------------------------
    # Browsing / saving
    # ------------------------------------------------------------------

    def next_outfit(self) -> int:
        count = max(1, len(self.state.outfits))
        self._set_state(selected_outfit_index=(self.state.selected_outfit_index + 1) % count)
        return self.state.selected_outfit_index

    def previous_outfit(self) -> int:
        index = self.state.selected_outfit_index
        if index > 0:
            index -= 1
        else:
            index = max(0, len(self.state.outfits) - 1)
        self._set_state(selected_outfit_index=index)
        return index

    def save_current_outfit(self, name: Optional[str] = None) -> Optional[str]:
        """
        Saves the selected outfit into the session's outfit list.

        Returns:
            The new outfit id, or None when nothing is selected
        """
        outfit = self.current_outfit
        if outfit is None:
            return None

        existing_names = [o.name for o in self.saved_outfits]
        name = name or generate_outfit_name(outfit.items, existing_names)
        saved = OutfitGenerator.create_outfit(outfit.items, name)
        self.saved_outfits.append(saved)
        log_event("outfit_saved", outfit_id=saved.id, name=name, items=len(saved.items))
        return saved.id

    # ------------------------------------------------------------------
    # Manual outfits
    # ------------------------------------------------------------------

    def _require_store(self) -> OutfitService:
        if self.store is None:
            raise ValueError("No outfit store configured for this session")
        return self.store

    async def check_for_existing_outfits(self) -> bool:
        """Loads the user's manual outfits if there are any. Returns whether there were."""
        store = self._require_store()
        has_manual = await store.has_manual_outfits()
        self._set_state(has_persisted_manual_outfits=has_manual)
        if has_manual:
            manual = await store.load_manual_outfits()
            self._set_state(manual_outfits=manual, is_loaded_from_store=True)
            logger.info("Loaded %d manual outfits", len(manual))
        return has_manual

    async def refresh_manual_outfits(self):
        store = self._require_store()
        has_manual = await store.has_manual_outfits()
        manual = await store.load_manual_outfits() if has_manual else []
        self._set_state(
            has_persisted_manual_outfits=has_manual,
            manual_outfits=manual,
            is_loaded_from_store=self.state.is_loaded_from_store or has_manual,
        )

    async def toggle_outfit_favorite(self, outfit_id: str) -> bool:
        """Flips a saved outfit's favorite flag and mirrors it into the session's manual outfits."""
        is_favorite = await self._require_store().toggle_outfit_favorite(outfit_id)
        self._set_state(manual_outfits=[
            o.model_copy(update={"is_favorite": is_favorite}) if o.id == outfit_id else o
            for o in self.state.manual_outfits
        ])
        return is_favorite
