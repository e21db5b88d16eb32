"""Training scheduler: the single owner of stats, mistake queue and session"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..config import TrainerConfig
from ..db.store import MemoryStatsStore, StatsStore
from ..errors import StrategyLookupError
from ..strategy.oracle import HouseRules, resolve
from ..strategy.tables import Action
from ..tools.diag import log_event
from .grading import available_actions, grade, hint_for
from .mistakes import MistakeQueueEntry, QueueTransition, apply_grade, mark_shown, select_next
from .sampler import TrainingMode, WeightedSampler
from .stats import StoredStats, WeakSpot, percent, record_attempt, weak_spots
from .universe import DrillItem, Universe, build_universe

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class PresentedItem:
    """A drawn drill together with its answer, awaiting grading"""
    item: DrillItem
    correct_action: Action
    available_actions: Tuple[Action, ...]
    served_from_queue: bool
    started_at: int
    hint: Optional[str] = None

    @property
    def key(self) -> str:
        return self.item.key


@dataclass(frozen=True)
class GradeResult:
    is_correct: bool
    user_action: Action
    correct_action: Action
    explanation: str
    response_time_ms: int
    streak: int
    session_accuracy: float
    served_from_queue: bool
    queue_transition: QueueTransition


@dataclass(frozen=True)
class SessionState:
    streak: int = 0
    session_correct: int = 0
    session_total: int = 0
    current: Optional[PresentedItem] = None
    last_result: Optional[GradeResult] = None
    hands_since_last_queue_serve: int = 0
    last_item_key: Optional[str] = None


class TrainingScheduler:
    """Decides what to drill next, grades answers and tracks progress.

    Every public method runs under one lock: stats, queue and session are
    read-modify-write on shared counters and are treated as a single unit.
    The store is written after every grade and reset without waiting on it.
    """

    def __init__(
        self,
        store: Optional[StatsStore] = None,
        rules: Optional[HouseRules] = None,
        config: Optional[TrainerConfig] = None,
        rng=None,
        clock: Optional[Callable[[], int]] = None,
        universe: Optional[Universe] = None,
    ):
        self.store = store if store is not None else MemoryStatsStore()
        self.rules = rules or HouseRules()
        self.config = config or TrainerConfig()
        self.universe = universe or build_universe()
        self.sampler = WeightedSampler(rng, max_repeat_redraws=self.config.max_repeat_redraws)
        self.clock = clock or _wall_clock_ms
        self._lock = threading.RLock()
        self._mode = TrainingMode.parse(self.config.mode)
        self.stats = self._load()
        self.session = SessionState()

    @classmethod
    def from_config(cls, config: Dict[str, Any], store: Optional[StatsStore] = None, **kwargs) -> "TrainingScheduler":
        """Build from a loaded config dict ([trainer], [rules], [stats])"""
        return cls(
            store=store,
            rules=HouseRules.from_dict(config.get("rules")),
            config=TrainerConfig.from_dict(config),
            **kwargs,
        )

    def _load(self) -> StoredStats:
        stats = StoredStats.from_dict(self.store.load())
        known = tuple(e for e in stats.mistake_queue if e.item_key in self.universe)
        if len(known) != len(stats.mistake_queue):
            logger.warning("Dropped %d queued items unknown to this trainer", len(stats.mistake_queue) - len(known))
            stats = replace(stats, mistake_queue=known)
        logger.info("Loaded stats: %d hands, %d queued", stats.total_hands, len(stats.mistake_queue))
        return stats

    def _persist(self) -> None:
        record = self.stats.to_dict()
        try:
            self.store.save(record)
        except Exception:
            # In-memory state is already authoritative; the next save retries
            logger.exception("Failed to persist stats")
        else:
            log_event("trainer", "persist", total_hands=self.stats.total_hands)

    @property
    def mode(self) -> TrainingMode:
        return self._mode

    def set_mode(self, mode: Union[TrainingMode, str]) -> TrainingMode:
        with self._lock:
            self._mode = TrainingMode.parse(mode)
            logger.info("Training mode set to %s", self._mode.value)
            return self._mode

    @property
    def current(self) -> Optional[PresentedItem]:
        return self.session.current

    def next_item(self, mode: Optional[Union[TrainingMode, str]] = None) -> PresentedItem:
        """Draw the next drill. While one is still ungraded it is returned again."""
        with self._lock:
            if mode is not None:
                self.set_mode(mode)
            session = self.session
            if session.current is not None:
                logger.debug("Item %s still awaiting an answer", session.current.key)
                return session.current

            item, from_queue = select_next(
                self.universe,
                self.sampler,
                self._mode,
                self.stats.mistake_queue,
                session.last_item_key,
                session.hands_since_last_queue_serve,
                self.config.min_gap_between_queue_serves,
            )
            try:
                correct = resolve(item.category, item.upcard, self.rules)
            except StrategyLookupError:
                logger.critical("Strategy table has no answer for %s; draw aborted", item.key)
                raise

            now = self.clock()
            if from_queue:
                self.stats = replace(self.stats, mistake_queue=mark_shown(self.stats.mistake_queue, item.key, now))
                hands_since = 0
            else:
                hands_since = session.hands_since_last_queue_serve + 1

            presented = PresentedItem(
                item=item,
                correct_action=correct,
                available_actions=available_actions(item, self.rules),
                served_from_queue=from_queue,
                started_at=now,
                hint=hint_for(item, self.rules),
            )
            self.session = replace(
                session,
                current=presented,
                last_result=None,
                hands_since_last_queue_serve=hands_since,
                last_item_key=item.key,
            )
            log_event("trainer", "draw", key=item.key, from_queue=from_queue, mode=self._mode.value)
            return presented

    def skip(self) -> bool:
        """Abandon the live item without grading it"""
        with self._lock:
            if self.session.current is None:
                return False
            logger.info("Skipped %s", self.session.current.key)
            self.session = replace(self.session, current=None)
            return True

    def submit(self, action: Union[Action, str], response_time_ms: Optional[int] = None) -> Optional[GradeResult]:
        """Grade the live item. Returns None, changing nothing, if the submission is rejected."""
        with self._lock:
            session = self.session
            current = session.current
            if current is None:
                logger.info("Submit with no live item ignored")
                return None
            if not isinstance(action, Action):
                try:
                    action = Action.parse(action)
                except ValueError:
                    logger.info("Rejected unknown action %r", action)
                    return None
            if action not in current.available_actions:
                logger.info("Rejected %s: not available for %s", action.label, current.key)
                return None

            now = self.clock()
            elapsed = response_time_ms if response_time_ms is not None else now - current.started_at
            elapsed = max(0, int(elapsed))
            result = grade(current.item, action, self.rules)
            streak = session.streak + 1 if result.is_correct else 0

            stats = record_attempt(
                self.stats,
                current.key,
                result.is_correct,
                elapsed,
                streak,
                played_at=datetime.now(timezone.utc).isoformat(),
            )
            queue, transition = apply_grade(
                stats.mistake_queue,
                current.key,
                result.is_correct,
                current.served_from_queue,
                now,
                threshold=self.config.graduation_threshold,
                max_size=self.config.max_queue_size,
            )
            self.stats = replace(stats, mistake_queue=queue)

            session_correct = session.session_correct + (1 if result.is_correct else 0)
            session_total = session.session_total + 1
            outcome = GradeResult(
                is_correct=result.is_correct,
                user_action=action,
                correct_action=result.correct_action,
                explanation=result.explanation,
                response_time_ms=elapsed,
                streak=streak,
                session_accuracy=percent(session_correct, session_total),
                served_from_queue=current.served_from_queue,
                queue_transition=transition,
            )
            self.session = replace(
                session,
                streak=streak,
                session_correct=session_correct,
                session_total=session_total,
                current=None,
                last_result=outcome,
            )
            log_event(
                "trainer", "grade",
                key=current.key,
                correct=result.is_correct,
                action=action.value,
                answer=result.correct_action.value,
                ms=elapsed,
            )
            if transition is not QueueTransition.UNCHANGED:
                log_event("trainer", "queue", key=current.key, transition=transition.value, size=len(queue))
            self._persist()
            return outcome

    def reset(self) -> None:
        """Forget all lifetime stats, the mistake queue and the session"""
        with self._lock:
            self.stats = StoredStats()
            self.session = SessionState()
            logger.info("Stats reset")
            log_event("trainer", "reset")
            self._persist()

    def session_stats(self) -> Dict[str, Any]:
        with self._lock:
            s = self.session
            return {
                "total": s.session_total,
                "correct": s.session_correct,
                "accuracy": percent(s.session_correct, s.session_total),
                "streak": s.streak,
                "best_streak": self.stats.best_streak,
            }

    def lifetime_stats(self) -> Dict[str, Any]:
        with self._lock:
            st = self.stats
            return {
                "total_hands": st.total_hands,
                "total_correct": st.total_correct,
                "accuracy": percent(st.total_correct, st.total_hands),
                "best_streak": st.best_streak,
            }

    def weak_spots(self, min_attempts: Optional[int] = None, limit: Optional[int] = None) -> List[WeakSpot]:
        with self._lock:
            return weak_spots(
                self.stats,
                self.config.weak_spot_min_attempts if min_attempts is None else min_attempts,
                self.config.weak_spot_limit if limit is None else limit,
            )

    def queue_stats(self) -> Dict[str, Any]:
        with self._lock:
            entries: List[MistakeQueueEntry] = list(self.stats.mistake_queue)
            return {"count": len(entries), "entries": entries}
