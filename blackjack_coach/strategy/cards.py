"""Card ranks, hand categories and item keys"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple, Union


class Rank(IntEnum):
    """Dealer upcard / pair rank. Value is the blackjack count (Ace high)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    ACE = 11

    @property
    def index(self) -> int:
        """Column in the strategy tables (2 -> 0 ... A -> 9)"""
        return self.value - 2

    @property
    def upcard_label(self) -> str:
        if self is Rank.ACE:
            return "A"
        return str(self.value)

    @property
    def pair_label(self) -> str:
        if self is Rank.ACE:
            return "A"
        if self is Rank.TEN:
            return "T"
        return str(self.value)

    @classmethod
    def parse(cls, text: Union[str, int]) -> "Rank":
        """Parse '2'..'10', 'T', 'J', 'Q', 'K', or 'A' (also '11')"""
        s = str(text).strip().upper()
        if s in ("A", "11"):
            return cls.ACE
        if s in ("T", "J", "Q", "K", "10"):
            return cls.TEN
        try:
            value = int(s)
        except ValueError:
            raise ValueError(f"Unknown rank: {text!r}") from None
        if not 2 <= value <= 9:
            raise ValueError(f"Unknown rank: {text!r}")
        return cls(value)


UPCARDS: Tuple[Rank, ...] = tuple(Rank)


@dataclass(frozen=True)
class Hard:
    """Hard total with no usable ace"""
    total: int

    def __post_init__(self):
        if not 5 <= self.total <= 21:
            raise ValueError(f"Hard total out of range: {self.total}")

    @property
    def hand_type(self) -> str:
        return "hard"

    @property
    def hand_key(self) -> str:
        return str(self.total)

    @property
    def label(self) -> str:
        return f"Hard {self.total}"


@dataclass(frozen=True)
class Soft:
    """Ace plus one other card (A,2 .. A,9)"""
    other_card: int

    def __post_init__(self):
        if not 2 <= self.other_card <= 9:
            raise ValueError(f"Soft hand card out of range: {self.other_card}")

    @property
    def total(self) -> int:
        return 11 + self.other_card

    @property
    def hand_type(self) -> str:
        return "soft"

    @property
    def hand_key(self) -> str:
        return f"A,{self.other_card}"

    @property
    def label(self) -> str:
        return f"Soft {self.total}"


@dataclass(frozen=True)
class Pair:
    """Two cards of the same rank"""
    rank: Rank

    def __post_init__(self):
        if not isinstance(self.rank, Rank):
            object.__setattr__(self, "rank", Rank.parse(self.rank))

    @property
    def hand_type(self) -> str:
        return "pair"

    @property
    def hand_key(self) -> str:
        lbl = self.rank.pair_label
        return f"{lbl},{lbl}"

    @property
    def label(self) -> str:
        if self.rank is Rank.TEN:
            return "Pair of 10s"
        if self.rank is Rank.ACE:
            return "Pair of Aces"
        return f"Pair of {self.rank.value}s"


HandCategory = Union[Hard, Soft, Pair]


def item_key(category: HandCategory, upcard: Rank) -> str:
    """Canonical identity of a (category, upcard) drill, e.g. 'soft_A,7_9'"""
    return f"{category.hand_type}_{category.hand_key}_{Rank(upcard).upcard_label}"


def parse_item_key(key: str) -> Tuple[HandCategory, Rank]:
    """Inverse of item_key"""
    parts = key.split("_")
    if len(parts) != 3:
        raise ValueError(f"Malformed item key: {key!r}")
    hand_type, hand_key, dealer = parts
    upcard = Rank.parse(dealer)
    if hand_type == "hard":
        try:
            return Hard(int(hand_key)), upcard
        except ValueError:
            raise ValueError(f"Malformed item key: {key!r}") from None
    if hand_type == "soft":
        first, _, other = hand_key.partition(",")
        if first != "A" or not other.isdigit():
            raise ValueError(f"Malformed item key: {key!r}")
        return Soft(int(other)), upcard
    if hand_type == "pair":
        first, _, second = hand_key.partition(",")
        if first != second:
            raise ValueError(f"Malformed item key: {key!r}")
        return Pair(Rank.parse(first)), upcard
    raise ValueError(f"Malformed item key: {key!r}")


def matchup_label(category: HandCategory, upcard: Rank) -> str:
    """Short label used in weak spot listings ('Soft 18 vs 9', '8s vs A')"""
    dealer = Rank(upcard).upcard_label
    if isinstance(category, Pair):
        lbl = category.rank.pair_label
        return f"{lbl}s vs {dealer}"
    return f"{category.label} vs {dealer}"


TEN_CARDS = ("10", "J", "Q", "K")


def deal_cards(category: HandCategory, rng: Optional[random.Random] = None) -> List[str]:
    """Pick two concrete card faces that make up the category"""
    rng = rng or random.Random()
    if isinstance(category, Pair):
        if category.rank is Rank.TEN:
            face = rng.choice(TEN_CARDS)
        else:
            face = category.rank.pair_label
        return [face, face]
    if isinstance(category, Soft):
        return ["A", str(category.other_card)]

    total = category.total
    combos: List[Tuple[str, str]] = []
    for first in range(2, 11):
        second = total - first
        # Distinct ranks keep it out of the pair table; no ace keeps it hard
        if 2 <= second <= 10 and first < second:
            if second == 10:
                combos.extend((str(first), t) for t in TEN_CARDS)
            else:
                combos.append((str(first), str(second)))
    if combos:
        return list(rng.choice(combos))

    # Hard 20 and 21 need a third card
    rest = total - 10
    splits = [(a, rest - a) for a in range(2, 10) if a < rest - a <= 9]
    a, b = rng.choice(splits)
    return [rng.choice(TEN_CARDS), str(a), str(b)]
