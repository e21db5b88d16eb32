"""Every drill item the trainer can present, with difficulty weights.

Weight scale:
    5 = critical, most commonly missed and most expensive
    4 = hard, counter-intuitive or emotionally difficult
    3 = moderate, requires memorisation
    2 = easy, clear decisions
    1 = trivial, obvious plays
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterator, Optional, Tuple

from ..strategy.cards import UPCARDS, Hard, HandCategory, Pair, Rank, Soft, item_key


@dataclass(frozen=True)
class DrillItem:
    """One hand category against one dealer upcard"""
    category: HandCategory
    upcard: Rank
    base_weight: int
    hint: Optional[str] = None

    @property
    def key(self) -> str:
        return item_key(self.category, self.upcard)


# Commonly misplayed hands: item key -> (weight, hint)
DIFFICULTY: Dict[str, Tuple[int, str]] = {
    # Soft 18 is the most misplayed hand in the game
    "soft_A,7_9": (5, "HIT soft 18 vs 9!"),
    "soft_A,7_10": (5, "HIT soft 18 vs 10!"),
    "soft_A,7_A": (5, "HIT soft 18 vs Ace!"),
    # People stand on 12 too early
    "hard_12_2": (5, "HIT 12 vs 2!"),
    "hard_12_3": (5, "HIT 12 vs 3!"),
    "hard_16_9": (5, "SURRENDER 16 vs 9!"),
    "hard_16_10": (5, "SURRENDER 16 vs 10!"),
    "hard_16_A": (5, "SURRENDER 16 vs Ace!"),
    "pair_8,8_10": (5, "SPLIT 8s vs 10!"),
    "pair_8,8_A": (5, "SPLIT 8s vs Ace!"),
    "pair_9,9_7": (5, "STAND with 9s vs 7!"),
    "hard_11_A": (5, "HIT 11 vs Ace (6-deck)!"),

    "hard_15_10": (4, "SURRENDER 15 vs 10!"),
    "hard_15_A": (4, "SURRENDER 15 vs Ace!"),
    "hard_17_A": (4, "SURRENDER 17 vs Ace!"),
    "soft_A,7_2": (4, "DOUBLE soft 18 vs 2!"),
    "soft_A,7_3": (4, "DOUBLE soft 18 vs 3!"),
    "soft_A,7_4": (4, "DOUBLE soft 18 vs 4!"),
    "soft_A,7_5": (4, "DOUBLE soft 18 vs 5!"),
    "soft_A,7_6": (4, "DOUBLE soft 18 vs 6!"),
    "hard_9_2": (4, "HIT 9 vs 2!"),
    "hard_10_10": (4, "HIT 10 vs 10!"),
    "hard_10_A": (4, "HIT 10 vs Ace!"),

    "soft_A,8_6": (3, "DOUBLE soft 19 vs 6!"),
    "soft_A,6_3": (3, "DOUBLE soft 17 vs 3!"),
    "soft_A,6_4": (3, "DOUBLE soft 17 vs 4!"),
    "soft_A,6_5": (3, "DOUBLE soft 17 vs 5!"),
    "soft_A,6_6": (3, "DOUBLE soft 17 vs 6!"),
    "pair_9,9_9": (3, "SPLIT 9s vs 9!"),
    "pair_9,9_10": (3, "STAND with 9s vs 10!"),
    "pair_9,9_A": (3, "STAND with 9s vs Ace!"),
    "pair_6,6_2": (3, "SPLIT 6s vs 2 (DAS)!"),
    "pair_4,4_5": (3, "SPLIT 4s vs 5 (DAS)!"),
    "pair_4,4_6": (3, "SPLIT 4s vs 6 (DAS)!"),
}


def default_weight(category: HandCategory, upcard: Rank) -> int:
    if isinstance(category, Hard):
        if category.total >= 17 and upcard is not Rank.ACE:
            return 1  # always stand
        if category.total <= 8:
            return 1  # always hit
        if category.total == 11 and upcard is not Rank.ACE:
            return 1  # always double
    # A,A / T,T / 5,5 and everything else
    return 2


def categories() -> Iterator[HandCategory]:
    """Hard 5-21, soft A,2-A,9, then pairs 2-A"""
    for total in range(5, 22):
        yield Hard(total)
    for other in range(2, 10):
        yield Soft(other)
    for rank in UPCARDS:
        yield Pair(rank)


class Universe:
    """Ordered, immutable collection of every drill item"""

    def __init__(self, items: Tuple[DrillItem, ...]):
        self.items = items
        self._by_key = {item.key: item for item in items}

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[DrillItem]:
        return iter(self.items)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[DrillItem]:
        return self._by_key.get(key)


@lru_cache(maxsize=1)
def build_universe() -> Universe:
    """All 350 drill items in a stable order"""
    items = []
    for category in categories():
        for upcard in UPCARDS:
            key = item_key(category, upcard)
            weight, hint = DIFFICULTY.get(key, (default_weight(category, upcard), None))
            items.append(DrillItem(category=category, upcard=upcard, base_weight=weight, hint=hint))
    return Universe(tuple(items))
