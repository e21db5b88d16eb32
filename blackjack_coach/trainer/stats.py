"""Lifetime statistics record and weak spot ranking"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ..strategy.cards import matchup_label, parse_item_key
from .mistakes import MistakeQueueEntry


@dataclass(frozen=True)
class ItemStats:
    attempts: int = 0
    correct: int = 0
    total_time_ms: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"attempts": self.attempts, "correct": self.correct, "totalTime": self.total_time_ms}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemStats":
        return cls(
            attempts=int(data.get("attempts", 0)),
            correct=int(data.get("correct", 0)),
            total_time_ms=int(data.get("totalTime", 0)),
        )


@dataclass(frozen=True)
class StoredStats:
    """The persisted record. Replaced wholesale, never patched."""
    total_hands: int = 0
    total_correct: int = 0
    best_streak: int = 0
    by_hand: Dict[str, ItemStats] = field(default_factory=dict)
    last_played: Optional[str] = None
    mistake_queue: Tuple[MistakeQueueEntry, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalHands": self.total_hands,
            "totalCorrect": self.total_correct,
            "bestStreak": self.best_streak,
            "byHand": {key: s.to_dict() for key, s in self.by_hand.items()},
            "lastPlayed": self.last_played,
            "mistakeQueue": [e.to_dict() for e in self.mistake_queue],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StoredStats":
        """Build from a stored record, defaulting anything absent or malformed.

        Older records have no mistakeQueue at all; that is an empty queue.
        """
        logger = logging.getLogger(__name__)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Ignoring stats record of type %s", type(data).__name__)
            return cls()

        by_hand: Dict[str, ItemStats] = {}
        raw_hands = data.get("byHand") or {}
        if isinstance(raw_hands, dict):
            for key, raw in raw_hands.items():
                try:
                    by_hand[str(key)] = ItemStats.from_dict(raw)
                except (AttributeError, TypeError, ValueError):
                    logger.warning("Dropping malformed stats for %s", key)
        else:
            logger.warning("Ignoring malformed byHand field")

        queue: List[MistakeQueueEntry] = []
        seen = set()
        raw_queue = data.get("mistakeQueue") or []
        if isinstance(raw_queue, list):
            for raw in raw_queue:
                try:
                    entry = MistakeQueueEntry.from_dict(raw)
                except (AttributeError, KeyError, TypeError, ValueError):
                    logger.warning("Dropping malformed mistake queue entry: %r", raw)
                    continue
                if entry.item_key in seen:
                    continue
                seen.add(entry.item_key)
                queue.append(entry)
        else:
            logger.warning("Ignoring malformed mistakeQueue field")

        last_played = data.get("lastPlayed")
        return cls(
            total_hands=_int(data.get("totalHands")),
            total_correct=_int(data.get("totalCorrect")),
            best_streak=_int(data.get("bestStreak")),
            by_hand=by_hand,
            last_played=last_played if isinstance(last_played, str) else None,
            mistake_queue=tuple(queue),
        )


def _int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def record_attempt(
    stats: StoredStats,
    key: str,
    is_correct: bool,
    response_time_ms: int,
    streak: int,
    played_at: Optional[str],
) -> StoredStats:
    """Return stats with one graded attempt folded in"""
    prev = stats.by_hand.get(key, ItemStats())
    by_hand = dict(stats.by_hand)
    by_hand[key] = ItemStats(
        attempts=prev.attempts + 1,
        correct=prev.correct + (1 if is_correct else 0),
        total_time_ms=prev.total_time_ms + max(0, int(response_time_ms)),
    )
    return replace(
        stats,
        total_hands=stats.total_hands + 1,
        total_correct=stats.total_correct + (1 if is_correct else 0),
        best_streak=max(stats.best_streak, streak),
        by_hand=by_hand,
        last_played=played_at,
    )


@dataclass(frozen=True)
class WeakSpot:
    key: str
    label: str
    accuracy: float  # 0..1
    attempts: int
    correct: int
    avg_time_s: float


def weak_spots(stats: StoredStats, min_attempts: int = 3, limit: int = 5) -> List[WeakSpot]:
    """Worst-accuracy items with at least min_attempts attempts"""
    spots = []
    for key, s in stats.by_hand.items():
        if s.attempts < min_attempts or s.attempts <= 0:
            continue
        try:
            category, upcard = parse_item_key(key)
            label = matchup_label(category, upcard)
        except ValueError:
            label = key
        spots.append(WeakSpot(
            key=key,
            label=label,
            accuracy=s.correct / s.attempts,
            attempts=s.attempts,
            correct=s.correct,
            avg_time_s=round(s.total_time_ms / s.attempts / 1000, 2),
        ))
    spots.sort(key=lambda w: w.accuracy)
    return spots[:max(0, limit)]


def percent(correct: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(correct / total * 100, 1)
