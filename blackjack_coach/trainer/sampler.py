"""Weighted random selection of drill items by training mode"""

from __future__ import annotations

import logging
import random
from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from itertools import accumulate
from typing import Dict, List, Optional, Sequence, Tuple

from .universe import DrillItem, Universe


class TrainingMode(Enum):
    CRITICAL = "critical"
    HARD = "hard"
    BALANCED = "balanced"
    RANDOM = "random"

    @classmethod
    def parse(cls, value) -> "TrainingMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown training mode: {value!r}") from None


@dataclass(frozen=True)
class ModeWeights:
    """Selection multipliers keyed by base weight (1-5).

    When uniform is set the base weight is ignored and the multiplier alone
    is the selection weight.
    """
    multipliers: Dict[int, float]
    uniform: bool = False

    def adjusted(self, item: DrillItem) -> float:
        multiplier = self.multipliers.get(item.base_weight, 1.0)
        if self.uniform:
            return multiplier
        return item.base_weight * multiplier


MODE_WEIGHTS: Dict[TrainingMode, ModeWeights] = {
    TrainingMode.CRITICAL: ModeWeights({1: 0, 2: 0.5, 3: 1, 4: 2, 5: 5}),
    TrainingMode.HARD: ModeWeights({1: 0.5, 2: 1, 3: 2, 4: 3, 5: 4}),
    TrainingMode.BALANCED: ModeWeights({1: 1, 2: 1.5, 3: 2, 4: 2.5, 5: 3}),
    TrainingMode.RANDOM: ModeWeights({1: 1, 2: 1, 3: 1, 4: 1, 5: 1}, uniform=True),
}

MAX_REPEAT_REDRAWS = 5


class WeightedSampler:
    """Draws drill items with mode-specific weights"""

    def __init__(self, rng: Optional[random.Random] = None, max_repeat_redraws: int = MAX_REPEAT_REDRAWS):
        self.rng = rng or random.Random()
        self.max_repeat_redraws = max_repeat_redraws
        self._tables: Dict[Tuple[int, TrainingMode], Tuple[Universe, List[float]]] = {}

    def cumulative_weights(self, universe: Universe, mode: TrainingMode) -> List[float]:
        """Running sums of adjusted weights in enumeration order"""
        mode = TrainingMode.parse(mode)
        cache_key = (id(universe), mode)
        cached = self._tables.get(cache_key)
        if cached is not None and cached[0] is universe:
            return cached[1]
        weights = MODE_WEIGHTS[mode]
        cumulative = list(accumulate(max(0.0, weights.adjusted(item)) for item in universe.items))
        self._tables[cache_key] = (universe, cumulative)
        return cumulative

    def draw(self, universe: Universe, mode: TrainingMode = TrainingMode.BALANCED,
             exclude_key: Optional[str] = None) -> DrillItem:
        """Draw one item, avoiding exclude_key on a best-effort basis"""
        cumulative = self.cumulative_weights(universe, mode)

        item = self._draw_once(universe.items, cumulative)
        attempts = 0
        while exclude_key is not None and item.key == exclude_key and attempts < self.max_repeat_redraws:
            item = self._draw_once(universe.items, cumulative)
            attempts += 1
        if exclude_key is not None and item.key == exclude_key:
            logging.getLogger(__name__).debug("Accepting repeat of %s after %d redraws", exclude_key, attempts)
        return item

    def _draw_once(self, items: Sequence[DrillItem], cumulative: List[float]) -> DrillItem:
        total = cumulative[-1] if cumulative else 0.0
        if total <= 0:
            return self.rng.choice(items)

        # Subtracting weights in order until the remainder drops to <= 0 stops
        # at the first running sum >= the target. The target is in (0, total],
        # so a zero-weight item can never be that first index.
        target = (1.0 - self.rng.random()) * total
        return items[bisect_left(cumulative, target)]
