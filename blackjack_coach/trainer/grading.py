"""Grade a submitted action against the oracle"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..strategy.cards import Pair
from ..strategy.explanations import explain
from ..strategy.oracle import DEFAULT_RULES, HouseRules, resolve
from ..strategy.tables import Action
from .universe import DrillItem


@dataclass(frozen=True)
class Grade:
    is_correct: bool
    user_action: Action
    correct_action: Action
    explanation: str


def available_actions(item: DrillItem, rules: HouseRules = DEFAULT_RULES) -> Tuple[Action, ...]:
    """Actions the player may choose for this hand, in button order"""
    actions = [Action.HIT, Action.STAND]
    if rules.double_allowed:
        actions.append(Action.DOUBLE)
    if isinstance(item.category, Pair):
        actions.append(Action.SPLIT)
    if rules.surrender_allowed:
        actions.append(Action.SURRENDER)
    return tuple(actions)


def hint_for(item: DrillItem, rules: HouseRules = DEFAULT_RULES) -> Optional[str]:
    """The item's curated hint, if it still names the right play under these rules"""
    if item.hint is None:
        return None
    if resolve(item.category, item.upcard, rules) is not resolve(item.category, item.upcard, DEFAULT_RULES):
        return None
    return item.hint


def is_action_correct(user_action: Action, correct_action: Action) -> bool:
    if user_action is correct_action:
        return True
    # Hitting instead of doubling is accepted
    return correct_action is Action.DOUBLE and user_action is Action.HIT


def grade(item: DrillItem, user_action: Action, rules: HouseRules = DEFAULT_RULES) -> Grade:
    correct = resolve(item.category, item.upcard, rules)
    return Grade(
        is_correct=is_action_correct(user_action, correct),
        user_action=user_action,
        correct_action=correct,
        explanation=explain(item.key, correct),
    )
