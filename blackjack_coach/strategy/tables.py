"""Basic strategy chart: 6 decks, dealer stands on soft 17, DAS, late surrender.

Every row has one entry per dealer upcard, indexed by Rank.index:
2, 3, 4, 5, 6, 7, 8, 9, 10, A.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .cards import Rank


class Action(Enum):
    """Resolved, user-facing action"""
    HIT = "H"
    STAND = "S"
    DOUBLE = "D"
    SPLIT = "P"
    SURRENDER = "R"

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def parse(cls, text: str) -> "Action":
        """Accept a one-letter code or the action name, case-insensitive"""
        s = str(text).strip().upper()
        for action in cls:
            if s in (action.value, action.name):
                return action
        raise ValueError(f"Unknown action: {text!r}")


class RawAction(Enum):
    """Chart symbol, possibly conditional on house rules"""
    H = "H"    # Hit
    S = "S"    # Stand
    D = "D"    # Double, else Hit
    DS = "Ds"  # Double, else Stand
    P = "P"    # Split
    PH = "Ph"  # Split if DAS, else Hit
    RH = "Rh"  # Surrender, else Hit
    RS = "Rs"  # Surrender, else Stand
    RP = "Rp"  # Surrender, else Split


H, S, D, Ds, P = RawAction.H, RawAction.S, RawAction.D, RawAction.DS, RawAction.P
Ph, Rh, Rs, Rp = RawAction.PH, RawAction.RH, RawAction.RS, RawAction.RP

Row = Tuple[RawAction, RawAction, RawAction, RawAction, RawAction,
            RawAction, RawAction, RawAction, RawAction, RawAction]

# Keyed by hard total
#                2   3   4   5   6   7   8   9   10  A
HARD: Dict[int, Row] = {
    5:  (H,  H,  H,  H,  H,  H,  H,  H,  H,  H),
    6:  (H,  H,  H,  H,  H,  H,  H,  H,  H,  H),
    7:  (H,  H,  H,  H,  H,  H,  H,  H,  H,  H),
    8:  (H,  H,  H,  H,  H,  H,  H,  H,  H,  H),
    9:  (H,  D,  D,  D,  D,  H,  H,  H,  H,  H),
    10: (D,  D,  D,  D,  D,  D,  D,  D,  H,  H),
    11: (D,  D,  D,  D,  D,  D,  D,  D,  D,  H),
    12: (H,  H,  S,  S,  S,  H,  H,  H,  H,  H),
    13: (S,  S,  S,  S,  S,  H,  H,  H,  H,  H),
    14: (S,  S,  S,  S,  S,  H,  H,  H,  H,  H),
    15: (S,  S,  S,  S,  S,  H,  H,  H,  Rh, Rh),
    16: (S,  S,  S,  S,  S,  H,  H,  Rh, Rh, Rh),
    17: (S,  S,  S,  S,  S,  S,  S,  S,  S,  Rs),
    18: (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),
    19: (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),
    20: (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),
    21: (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),
}

# Keyed by the non-ace card of A,x
#                2   3   4   5   6   7   8   9   10  A
SOFT: Dict[int, Row] = {
    2:  (H,  H,  H,  D,  D,  H,  H,  H,  H,  H),   # soft 13
    3:  (H,  H,  H,  D,  D,  H,  H,  H,  H,  H),   # soft 14
    4:  (H,  H,  D,  D,  D,  H,  H,  H,  H,  H),   # soft 15
    5:  (H,  H,  D,  D,  D,  H,  H,  H,  H,  H),   # soft 16
    6:  (H,  D,  D,  D,  D,  H,  H,  H,  H,  H),   # soft 17
    7:  (Ds, Ds, Ds, Ds, Ds, S,  S,  H,  H,  H),   # soft 18
    8:  (S,  S,  S,  S,  Ds, S,  S,  S,  S,  S),   # soft 19
    9:  (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),   # soft 20
}

# Keyed by pair rank
#                      2   3   4   5   6   7   8   9   10  A
PAIRS: Dict[Rank, Row] = {
    Rank.TWO:   (Ph, Ph, P,  P,  P,  P,  H,  H,  H,  H),
    Rank.THREE: (Ph, Ph, P,  P,  P,  P,  H,  H,  H,  H),
    Rank.FOUR:  (H,  H,  H,  Ph, Ph, H,  H,  H,  H,  H),
    Rank.FIVE:  (D,  D,  D,  D,  D,  D,  D,  D,  H,  H),
    Rank.SIX:   (Ph, P,  P,  P,  P,  H,  H,  H,  H,  H),
    Rank.SEVEN: (P,  P,  P,  P,  P,  P,  H,  H,  H,  H),
    Rank.EIGHT: (P,  P,  P,  P,  P,  P,  P,  P,  P,  Rp),
    Rank.NINE:  (P,  P,  P,  P,  P,  S,  P,  P,  S,  S),
    Rank.TEN:   (S,  S,  S,  S,  S,  S,  S,  S,  S,  S),
    Rank.ACE:   (P,  P,  P,  P,  P,  P,  P,  P,  P,  P),
}
