"""Strategy oracle: the ground truth every drill is graded against"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import StrategyLookupError
from .cards import UPCARDS, Hard, HandCategory, Pair, Rank, Soft
from .tables import HARD, PAIRS, SOFT, Action, RawAction


@dataclass(frozen=True)
class HouseRules:
    """Table rules that decide how conditional chart symbols resolve"""
    double_allowed: bool = True
    double_after_split: bool = True
    surrender_allowed: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "HouseRules":
        data = data or {}
        defaults = cls()
        return cls(
            double_allowed=bool(data.get("double_allowed", defaults.double_allowed)),
            double_after_split=bool(data.get("double_after_split", defaults.double_after_split)),
            surrender_allowed=bool(data.get("surrender_allowed", defaults.surrender_allowed)),
        )


DEFAULT_RULES = HouseRules()


def raw_action(category: HandCategory, upcard: Rank) -> RawAction:
    """Chart symbol for a hand, before house rules are applied"""
    try:
        col = Rank(upcard).index
        if isinstance(category, Hard):
            return HARD[category.total][col]
        if isinstance(category, Soft):
            return SOFT[category.other_card][col]
        if isinstance(category, Pair):
            return PAIRS[category.rank][col]
    except (KeyError, IndexError, ValueError):
        raise StrategyLookupError(category, upcard) from None
    raise StrategyLookupError(category, upcard)


def resolve_raw(raw: RawAction, rules: HouseRules = DEFAULT_RULES) -> Action:
    """Collapse a conditional symbol to the action the rules allow"""
    if raw is RawAction.D:
        return Action.DOUBLE if rules.double_allowed else Action.HIT
    if raw is RawAction.DS:
        return Action.DOUBLE if rules.double_allowed else Action.STAND
    if raw is RawAction.PH:
        return Action.SPLIT if rules.double_after_split else Action.HIT
    if raw is RawAction.RH:
        return Action.SURRENDER if rules.surrender_allowed else Action.HIT
    if raw is RawAction.RS:
        return Action.SURRENDER if rules.surrender_allowed else Action.STAND
    if raw is RawAction.RP:
        return Action.SURRENDER if rules.surrender_allowed else Action.SPLIT
    return Action(raw.value)


def resolve(category: HandCategory, upcard: Rank, rules: HouseRules = DEFAULT_RULES) -> Action:
    """Correct action for a hand against a dealer upcard"""
    return resolve_raw(raw_action(category, upcard), rules)


def chart() -> Dict[str, List[Tuple[str, List[str]]]]:
    """Whole chart as printable symbols, grouped by hand type"""
    return {
        "hard": [(f"{t}", [a.value for a in HARD[t]]) for t in sorted(HARD)],
        "soft": [(f"A,{o}", [a.value for a in SOFT[o]]) for o in sorted(SOFT)],
        "pair": [(Pair(r).hand_key, [a.value for a in PAIRS[r]]) for r in UPCARDS],
    }
