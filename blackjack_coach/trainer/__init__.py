"""Drill scheduling, grading and spaced repetition of mistakes"""

from .universe import DrillItem, Universe, build_universe
from .sampler import TrainingMode, WeightedSampler
from .mistakes import MistakeQueueEntry, QueueTransition, apply_grade, select_next
from .grading import available_actions, grade, hint_for, is_action_correct
from .stats import ItemStats, StoredStats, WeakSpot, weak_spots
from .scheduler import TrainingScheduler, PresentedItem, GradeResult, SessionState

__all__ = [
    'DrillItem',
    'Universe',
    'build_universe',
    'TrainingMode',
    'WeightedSampler',
    'MistakeQueueEntry',
    'QueueTransition',
    'apply_grade',
    'select_next',
    'available_actions',
    'grade',
    'hint_for',
    'is_action_correct',
    'ItemStats',
    'StoredStats',
    'WeakSpot',
    'weak_spots',
    'TrainingScheduler',
    'PresentedItem',
    'GradeResult',
    'SessionState'
]
