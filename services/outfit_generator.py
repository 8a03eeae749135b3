# services/outfit_generator.py
"""
Outfit Generation Engine.

Turns a wardrobe into a ranked, varied list of scored outfits.

Pipeline (standard strategy):
1. Hard constraints (excluded items, season, occasion, weather)
2. Enumeration of candidate outfits around the base structures
3. Scoring with the 7-dimension framework
4. min_score filter, ranking, variety filter, max_results cap
5. History cleanup and recording

The use-all-items strategy builds outfits around every item instead, so the
whole wardrobe gets surfaced.
"""
import logging
import time
import uuid
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

import config
from contracts.models import (
    ClothingCategory,
    ClothingItem,
    GeneratedOutfit,
    Outfit,
    OutfitGenerationOptions,
    OutfitScore,
    ProgressCallback,
)
from deterministic_layer import apply_hard_constraints, group_items_by_category, merge_options
from infra.logging import log_event, new_request_id
from services.outfit_composer import (
    add_best_optional_items,
    add_coordinated_undergarments,
    add_coordinating_accessories,
    completing_categories,
    find_best_item_in_category,
    is_item_compatible,
    validate_outfit,
)
from services.outfit_history import get_history
from services.outfit_scorer import OutfitScorer, outfit_key
from services.outfit_similarity import key_similarity

logger = logging.getLogger(__name__)

C = ClothingCategory

DRESS_BASE = (C.DRESSES,)
SEPARATES_BASE = (C.TOPS, C.BOTTOMS)

# Floor used when the caller gives no min_score, and for the unused-item pass
UNUSED_ITEM_MIN_SCORE = 0.05

CHALLENGE_TOPS = 3
CHALLENGE_BOTTOMS = 2


def _star_requirements(star: ClothingItem) -> Tuple[ClothingCategory, ...]:
    """Categories that must join a star item to make a wearable outfit."""
    if star.category == C.DRESSES:
        return ()
    if star.category == C.TOPS:
        return (C.BOTTOMS,)
    if star.category == C.BOTTOMS:
        return (C.TOPS,)
    return SEPARATES_BASE


class _ProgressReporter:
    """Forwards monotonic (fraction, stage) updates to an optional callback."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.last = 0.0

    def __call__(self, fraction: float, stage: str):
        fraction = min(1.0, max(self.last, fraction))
        self.last = fraction
        if self.callback is not None:
            self.callback(fraction, stage)


class OutfitGenerator:
    """
    Enumerates, scores and ranks outfits from a wardrobe.
    """

    def __init__(
        self,
        history=None,
        clock: Callable = None,
        max_combinations: int = None,
    ):
        """
        Args:
            history: Outfit history backend (HISTORY_BACKEND by default)
            clock: Returns the current UTC time; injectable for tests
            max_combinations: Enumeration cap per run (MAX_COMBINATIONS by default)
        """
        self.history = history if history is not None else get_history()
        self.scorer = OutfitScorer(self.history, clock)
        self.clock = self.scorer.clock
        self.max_combinations = max_combinations or config.MAX_COMBINATIONS

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate_outfits(
        self,
        items: List[ClothingItem],
        options: Optional[Union[dict, OutfitGenerationOptions]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> List[GeneratedOutfit]:
        """
        Generate ranked outfit recommendations.

        Args:
            items: Wardrobe items
            options: Generation options (dict or OutfitGenerationOptions)
            progress: Optional callback receiving (fraction 0-1, stage name)

        Returns:
            At most options.max_results outfits, best first
        """
        request_id = new_request_id()
        start = time.perf_counter()
        options = merge_options(
            {"max_results": config.DEFAULT_MAX_RESULTS, "min_score": config.DEFAULT_MIN_SCORE},
            options,
        )
        report = _ProgressReporter(progress)
        report(0.0, "started")

        available = apply_hard_constraints(items, options)
        report(0.1, "filtered")

        strategy = "use_all_items" if options.use_all_items else "standard"
        log_event(
            "outfit_generation_started",
            request_id=request_id,
            strategy=strategy,
            wardrobe_size=len(items),
            available_items=len(available),
            max_results=options.max_results,
            min_score=options.min_score,
        )

        if len(available) < 2:
            logger.warning("Only %d items left after constraints, nothing to combine", len(available))
            results = []
        elif options.use_all_items:
            results = self._generate_using_all_items(available, options, report)
        else:
            results = self._generate_standard(available, options, report)

        now = self.clock()
        expired = self.history.cleanup(now)
        for outfit in results:
            self.history.record(outfit.key, now)

        report(1.0, "done")

        totals = [o.score.total for o in results]
        log_event(
            "outfit_generation_completed",
            request_id=request_id,
            strategy=strategy,
            returned=len(results),
            expired_history=expired,
            top_score=round(max(totals), 4) if totals else None,
            bottom_score=round(min(totals), 4) if totals else None,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return results

    # ------------------------------------------------------------------
    # Standard strategy
    # ------------------------------------------------------------------

    def _generate_standard(
        self,
        items: List[ClothingItem],
        options: OutfitGenerationOptions,
        report: _ProgressReporter,
    ) -> List[GeneratedOutfit]:
        combinations = self.generate_outfit_combinations(items, options.force_include_items)
        report(0.3, "enumerated")
        logger.debug("Enumerated %d candidate outfits", len(combinations))

        scored = self._score_all(combinations, options, report, 0.3, 0.8)
        qualifying = [o for o in scored if o.score.total >= options.min_score]
        qualifying.sort(key=lambda o: o.score.total, reverse=True)

        varied = self.ensure_outfit_variety(qualifying)
        report(0.9, "ranked")
        return varied[:options.max_results]

    def _score_all(
        self,
        combinations: List[List[ClothingItem]],
        options: OutfitGenerationOptions,
        report: _ProgressReporter,
        start: float,
        end: float,
    ) -> List[GeneratedOutfit]:
        total = len(combinations)
        step = max(1, total // 10)
        scored = []
        for index, outfit in enumerate(combinations, 1):
            scored.append(GeneratedOutfit(items=outfit, score=self.scorer.score_outfit(outfit, options)))
            if index % step == 0 or index == total:
                report(start + (end - start) * index / total, "scoring")
        return scored

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def generate_outfit_combinations(
        self,
        items: List[ClothingItem],
        force_include_items: Sequence[str] = (),
    ) -> List[List[ClothingItem]]:
        """
        Candidate outfits built around every base structure the wardrobe allows.

        Forced items seed every outfit and their categories are not filled again.
        Essential categories branch over every compatible item; shoes and the
        accessory category take their single best item, then undergarments and
        coordinating accessories are layered on. Invalid outfits and duplicates
        are dropped.
        """
        by_category = group_items_by_category(items)
        forced_ids = set(force_include_items or ())
        forced = [item for item in items if item.id in forced_ids]
        forced_categories = {item.category for item in forced}

        structures = self._base_structures(by_category, forced_categories)
        if not structures:
            logger.warning("Wardrobe has neither a dress nor a top and bottom pair")
            return []

        completing = [c for c in completing_categories(by_category) if c not in forced_categories]

        outfits, seen = [], set()
        for structure in structures:
            essentials = [c for c in structure if c not in forced_categories]
            for base in self._fill_slots(list(forced), essentials, by_category):
                outfit = self._complete_outfit(base, completing, by_category, forced_categories)
                key = outfit_key(outfit)
                if key in seen:
                    continue
                if not validate_outfit(outfit, by_category)["is_valid"]:
                    continue
                seen.add(key)
                outfits.append(outfit)
                if len(outfits) >= self.max_combinations:
                    logger.warning("Reached %d combinations, stopping enumeration", self.max_combinations)
                    return outfits
        return outfits

    def _base_structures(
        self,
        by_category: Dict[ClothingCategory, List[ClothingItem]],
        forced_categories: Set[ClothingCategory],
    ) -> List[Tuple[ClothingCategory, ...]]:
        def owned(category):
            return category in forced_categories or bool(by_category.get(category))

        has_separates = owned(C.TOPS) and owned(C.BOTTOMS)

        # A forced dress rules out separates and vice versa
        if C.DRESSES in forced_categories:
            return [DRESS_BASE]
        if C.TOPS in forced_categories or C.BOTTOMS in forced_categories:
            return [SEPARATES_BASE] if has_separates else []

        structures = []
        if owned(C.DRESSES):
            structures.append(DRESS_BASE)
        if has_separates:
            structures.append(SEPARATES_BASE)
        return structures

    def _fill_slots(
        self,
        outfit: List[ClothingItem],
        remaining: Sequence[ClothingCategory],
        by_category: Dict[ClothingCategory, List[ClothingItem]],
    ) -> Iterator[List[ClothingItem]]:
        """Yields one outfit per compatible choice in each remaining category."""
        if not remaining:
            yield outfit
            return
        category, rest = remaining[0], remaining[1:]
        for item in by_category.get(category, []):
            if is_item_compatible(item, outfit):
                yield from self._fill_slots(outfit + [item], rest, by_category)

    def _complete_outfit(
        self,
        base: List[ClothingItem],
        completing: List[ClothingCategory],
        by_category: Dict[ClothingCategory, List[ClothingItem]],
        forced_categories: Set[ClothingCategory],
    ) -> List[ClothingItem]:
        outfit = list(base)
        for category in completing:
            best = find_best_item_in_category(by_category.get(category, []), outfit)
            if best is not None:
                outfit.append(best)
        outfit = add_coordinated_undergarments(outfit, by_category, forced_categories)
        return add_coordinating_accessories(outfit, by_category, forced_categories)

    # ------------------------------------------------------------------
    # Use-all-items strategy
    # ------------------------------------------------------------------

    def _generate_using_all_items(
        self,
        items: List[ClothingItem],
        options: OutfitGenerationOptions,
        report: _ProgressReporter,
    ) -> List[GeneratedOutfit]:
        """
        Builds outfits around every item so the whole wardrobe gets used.
        Items left out of the first pass are retried with a low score floor.
        """
        min_score = options.min_score or UNUSED_ITEM_MIN_SCORE
        outfits: List[GeneratedOutfit] = []
        used: Set[str] = set()

        for index, star in enumerate(items, 1):
            around = self._outfits_around_star_item(star, items, options, min_score)
            outfits.extend(around)
            used.update(item.id for o in around for item in o.items)
            report(0.1 + 0.5 * index / len(items), "star_items")

        unused = [item for item in items if item.id not in used]
        if unused:
            logger.debug("Retrying %d unused items with a relaxed score floor", len(unused))
        for star in unused:
            around = self._outfits_around_star_item(star, items, options, UNUSED_ITEM_MIN_SCORE)
            outfits.extend(around)
            used.update(item.id for o in around for item in o.items)
        report(0.7, "unused_items")

        outfits.extend(self._challenge_outfits(items, options, min_score))
        report(0.8, "challenge")

        unique = self.remove_duplicate_outfits(outfits)
        unique.sort(key=lambda o: o.score.total, reverse=True)
        report(0.9, "ranked")

        logger.debug(
            "Wardrobe utilization: %d/%d items across %d outfits",
            len(used), len(items), len(unique),
        )
        return unique[:options.max_results]

    def _outfits_around_star_item(
        self,
        star: ClothingItem,
        items: List[ClothingItem],
        options: OutfitGenerationOptions,
        min_score: float,
    ) -> List[GeneratedOutfit]:
        others = group_items_by_category(item for item in items if item.id != star.id)
        optional = completing_categories(others) + [C.OUTERWEAR]

        results = []
        for base in self._fill_slots([star], _star_requirements(star), others):
            outfit = add_best_optional_items(base, others, optional)
            score = self.scorer.score_outfit(outfit, options)
            if score.total >= min_score:
                results.append(GeneratedOutfit(items=outfit, score=score))
        return results

    def _challenge_outfits(
        self,
        items: List[ClothingItem],
        options: OutfitGenerationOptions,
        min_score: float,
    ) -> List[GeneratedOutfit]:
        """Unusual top/bottom pairings from the front of the wardrobe."""
        by_category = group_items_by_category(items)
        optional = completing_categories(by_category)

        results = []
        for top in by_category.get(C.TOPS, [])[:CHALLENGE_TOPS]:
            for bottom in by_category.get(C.BOTTOMS, [])[:CHALLENGE_BOTTOMS]:
                outfit = add_best_optional_items([top, bottom], by_category, optional)
                score = self.scorer.score_outfit(outfit, options)
                if score.total >= min_score:
                    results.append(GeneratedOutfit(items=outfit, score=score))
        return results

    # ------------------------------------------------------------------
    # Dedup / variety
    # ------------------------------------------------------------------

    @staticmethod
    def get_outfit_key(items: List[ClothingItem]) -> str:
        return outfit_key(items)

    @staticmethod
    def remove_duplicate_outfits(outfits: List[GeneratedOutfit]) -> List[GeneratedOutfit]:
        """Keeps the first outfit for each key."""
        seen, unique = set(), []
        for outfit in outfits:
            if outfit.key not in seen:
                seen.add(outfit.key)
                unique.append(outfit)
        return unique

    @staticmethod
    def ensure_outfit_variety(outfits: List[GeneratedOutfit]) -> List[GeneratedOutfit]:
        """
        Drops outfits sharing too many items with a better one already kept.
        Expects outfits sorted best first.
        """
        kept: List[GeneratedOutfit] = []
        for outfit in outfits:
            too_similar = any(
                key_similarity(outfit.key, other.key) > config.VARIETY_SIMILARITY_THRESHOLD
                for other in kept
            )
            if not too_similar:
                kept.append(outfit)
        return kept

    # ------------------------------------------------------------------
    # Scoring / records
    # ------------------------------------------------------------------

    def calculate_outfit_score(
        self,
        items: List[ClothingItem],
        context: Optional[Union[dict, OutfitGenerationOptions]] = None,
    ) -> OutfitScore:
        """Scores an arbitrary outfit. Without a style preference the style dimension is 1."""
        if isinstance(context, dict):
            context = OutfitGenerationOptions(**{"style_preference": None, **context})
        return self.scorer.score_outfit(items, context)

    @staticmethod
    def create_outfit(items: List[ClothingItem], name: str = "Generated Outfit") -> Outfit:
        """
        Outfit record for a list of items.
        Seasons and occasions are those every item shares; tags come from the first five item tags.
        """
        if items:
            seasons = [s for s in items[0].season if all(s in item.season for item in items[1:])]
            occasions = [o for o in items[0].occasion if all(o in item.occasion for item in items[1:])]
        else:
            seasons, occasions = [], []

        first_tags = [tag for item in items for tag in item.tags][:5]
        tags = list(dict.fromkeys(first_tags))

        return Outfit(
            id=str(uuid.uuid4()),
            name=name,
            items=list(items),
            season=seasons,
            occasion=occasions,
            tags=tags,
        )


_default_generator: Optional[OutfitGenerator] = None


def get_outfit_generator() -> OutfitGenerator:
    """Process-wide generator sharing one history backend."""
    global _default_generator
    if _default_generator is None:
        _default_generator = OutfitGenerator()
    return _default_generator
