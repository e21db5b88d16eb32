"""Mistake queue: spaced repetition for missed drill items.

Missed items are queued and served again ahead of the weighted sampler once
enough regular hands have passed. An item leaves the queue after it is
answered correctly GRADUATION_THRESHOLD times in a row while being served
from the queue. All functions here are pure: they take the current entries
and return new ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .sampler import TrainingMode, WeightedSampler
from .universe import DrillItem, Universe

GRADUATION_THRESHOLD = 3
MIN_GAP_BETWEEN_QUEUE_SERVES = 3
MAX_QUEUE_SIZE = 20


@dataclass(frozen=True)
class MistakeQueueEntry:
    item_key: str
    consecutive_correct: int = 0
    last_shown_at: int = 0
    added_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "handKey": self.item_key,
            "consecutiveCorrect": self.consecutive_correct,
            "lastShownAt": self.last_shown_at,
            "addedAt": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MistakeQueueEntry":
        """Raises KeyError/TypeError/ValueError on malformed input"""
        key = data["handKey"]
        if not isinstance(key, str):
            raise TypeError(f"handKey must be a string, got {type(key).__name__}")
        consecutive = int(data.get("consecutiveCorrect", 0))
        if consecutive < 0:
            raise ValueError(f"consecutiveCorrect must be >= 0, got {consecutive}")
        return cls(
            item_key=key,
            consecutive_correct=consecutive,
            last_shown_at=int(data.get("lastShownAt", 0)),
            added_at=int(data.get("addedAt", 0)),
        )


Entries = Tuple[MistakeQueueEntry, ...]


class QueueTransition(Enum):
    ADDED = "added"
    RESET = "reset"
    ADVANCED = "advanced"
    GRADUATED = "graduated"
    UNCHANGED = "unchanged"


def find_entry(entries: Sequence[MistakeQueueEntry], key: str) -> Optional[MistakeQueueEntry]:
    for entry in entries:
        if entry.item_key == key:
            return entry
    return None


def _evict_one(entries: Entries) -> Entries:
    """Drop the entry closest to graduation, oldest first on ties"""
    victim = max(entries, key=lambda e: (e.consecutive_correct, -e.added_at))
    logging.getLogger(__name__).info("Mistake queue full, evicting %s", victim.item_key)
    return tuple(e for e in entries if e is not victim)


def apply_grade(
    entries: Sequence[MistakeQueueEntry],
    key: str,
    is_correct: bool,
    served_from_queue: bool,
    now: int,
    threshold: int = GRADUATION_THRESHOLD,
    max_size: int = MAX_QUEUE_SIZE,
) -> Tuple[Entries, QueueTransition]:
    """Move one item through the queue state machine after it is graded"""
    entries = tuple(entries)
    current = find_entry(entries, key)

    if current is None:
        if is_correct:
            return entries, QueueTransition.UNCHANGED
        if max_size > 0 and len(entries) >= max_size:
            entries = _evict_one(entries)
        entry = MistakeQueueEntry(item_key=key, consecutive_correct=0, last_shown_at=now, added_at=now)
        return entries + (entry,), QueueTransition.ADDED

    if not is_correct:
        updated = replace(current, consecutive_correct=0, last_shown_at=now)
        return _swap(entries, current, updated), QueueTransition.RESET

    # A correct answer only counts toward graduation when the queue served it
    if not served_from_queue:
        updated = replace(current, last_shown_at=now)
        return _swap(entries, current, updated), QueueTransition.UNCHANGED

    progress = current.consecutive_correct + 1
    if progress >= threshold:
        return tuple(e for e in entries if e is not current), QueueTransition.GRADUATED
    updated = replace(current, consecutive_correct=progress, last_shown_at=now)
    return _swap(entries, current, updated), QueueTransition.ADVANCED


def _swap(entries: Entries, old: MistakeQueueEntry, new: MistakeQueueEntry) -> Entries:
    return tuple(new if e is old else e for e in entries)


def mark_shown(entries: Sequence[MistakeQueueEntry], key: str, now: int) -> Entries:
    """Stamp last_shown_at on the entry for key, if queued"""
    return tuple(replace(e, last_shown_at=now) if e.item_key == key else e for e in entries)


def due_entries(
    entries: Sequence[MistakeQueueEntry],
    last_item_key: Optional[str],
    hands_since_last_queue_serve: int,
    min_gap: int = MIN_GAP_BETWEEN_QUEUE_SERVES,
) -> Tuple[MistakeQueueEntry, ...]:
    """Entries eligible to interrupt normal sampling, oldest shown first"""
    if hands_since_last_queue_serve < min_gap:
        return ()
    due = [e for e in entries if e.item_key != last_item_key]
    # sorted() is stable, so equal timestamps keep queue order
    return tuple(sorted(due, key=lambda e: e.last_shown_at))


def select_next(
    universe: Universe,
    sampler: WeightedSampler,
    mode: TrainingMode,
    entries: Sequence[MistakeQueueEntry],
    last_item_key: Optional[str],
    hands_since_last_queue_serve: int,
    min_gap: int = MIN_GAP_BETWEEN_QUEUE_SERVES,
) -> Tuple[DrillItem, bool]:
    """Pick the next drill: a due queue entry if any, else a weighted draw.

    Returns (item, served_from_queue).
    """
    for entry in due_entries(entries, last_item_key, hands_since_last_queue_serve, min_gap):
        item = universe.get(entry.item_key)
        if item is None:
            logging.getLogger(__name__).warning("Queued key %s is not a known drill, skipping", entry.item_key)
            continue
        return item, True
    return sampler.draw(universe, mode, exclude_key=last_item_key), False
