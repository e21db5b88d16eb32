"""Basic strategy tables and the oracle that resolves them"""

from .cards import Rank, Hard, Soft, Pair, HandCategory, UPCARDS, item_key, parse_item_key
from .tables import Action, RawAction
from .oracle import HouseRules, resolve, raw_action, chart
from .explanations import explain

__all__ = [
    'Rank',
    'Hard',
    'Soft',
    'Pair',
    'HandCategory',
    'UPCARDS',
    'item_key',
    'parse_item_key',
    'Action',
    'RawAction',
    'HouseRules',
    'resolve',
    'raw_action',
    'chart',
    'explain'
]
