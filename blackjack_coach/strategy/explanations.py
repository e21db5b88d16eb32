from __future__ import annotations

from typing import Dict

from .cards import parse_item_key
from .oracle import DEFAULT_RULES, resolve
from .tables import Action


RATIONALES: Dict[str, str] = {
    "soft_A,7_9": "Soft 18 vs 9: Dealer likely makes 19+. HIT to improve!",
    "soft_A,7_10": "Soft 18 vs 10: You lose more by standing. HIT!",
    "soft_A,7_A": "Soft 18 vs Ace: Dealer has edge. Take a card!",
    "hard_12_2": "Hard 12 vs 2: Dealer busts only 35%. HIT!",
    "hard_12_3": "Hard 12 vs 3: Still not enough bust potential. HIT!",
    "hard_16_9": "16 vs 9: Surrender saves money long-term.",
    "hard_16_10": "16 vs 10: Worst hand in blackjack. SURRENDER!",
    "hard_16_A": "16 vs Ace: SURRENDER if allowed.",
    "pair_8,8_10": "Split 8s vs 10: Two chances at 18 beats one 16.",
    "pair_8,8_A": "Split 8s vs Ace: Painful but mathematically correct.",
    "pair_9,9_7": "STAND with 18! Dealer likely has 17.",
    "hard_11_A": "11 vs Ace (6-deck): Just HIT, don't double.",
    "hard_15_10": "SURRENDER 15 vs 10 to minimize losses.",
    "hard_15_A": "SURRENDER 15 vs Ace - dealer too strong.",
    "hard_17_A": "SURRENDER 17 vs Ace if allowed.",
    "soft_A,6_3": "Soft 17: DOUBLE vs dealer bust cards!",
    "soft_A,6_4": "Soft 17: DOUBLE vs dealer bust cards!",
    "soft_A,6_5": "Soft 17: DOUBLE vs dealer bust cards!",
    "soft_A,6_6": "Soft 17: DOUBLE vs dealer bust cards!",
    "pair_9,9_9": "SPLIT 9s vs 9 for a slight edge.",
    "pair_9,9_10": "STAND with 18 vs 10 - don't split.",
    "pair_9,9_A": "STAND with 18 vs Ace - splitting is worse.",
}

FALLBACK = "{action} is the mathematically optimal play."


def explain(key: str, correct_action: Action) -> str:
    """Rationale for the correct play; never fails.

    Curated rationales are written for the default house rules and are only
    used when correct_action is the play they argue for.
    """
    text = RATIONALES.get(key)
    if text is not None and _default_answer(key) is correct_action:
        return text
    return FALLBACK.format(action=correct_action.label)


def _default_answer(key: str):
    try:
        category, upcard = parse_item_key(key)
    except ValueError:
        return None
    return resolve(category, upcard, DEFAULT_RULES)
