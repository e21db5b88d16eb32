"""Tests for grading and lifetime statistics"""

from blackjack_coach.strategy.oracle import HouseRules
from blackjack_coach.strategy.tables import Action
from blackjack_coach.trainer.grading import available_actions, grade, hint_for, is_action_correct
from blackjack_coach.trainer.mistakes import MistakeQueueEntry
from blackjack_coach.trainer.stats import ItemStats, StoredStats, percent, record_attempt, weak_spots
from blackjack_coach.trainer.universe import build_universe


class TestGrading:
    """Correctness rules"""

    def test_hit_accepted_for_double(self):
        assert is_action_correct(Action.HIT, Action.DOUBLE)
        assert not is_action_correct(Action.STAND, Action.DOUBLE)
        assert not is_action_correct(Action.DOUBLE, Action.HIT)

    def test_grade_soft_18_vs_9(self):
        item = build_universe().get("soft_A,7_9")
        result = grade(item, Action.STAND)
        assert not result.is_correct
        assert result.correct_action is Action.HIT
        assert "Soft 18 vs 9" in result.explanation

    def test_grade_hard_11_hit_for_double(self):
        item = build_universe().get("hard_11_6")
        result = grade(item, Action.HIT)
        assert result.is_correct
        assert result.correct_action is Action.DOUBLE
        assert result.explanation == "DOUBLE is the mathematically optimal play."

    def test_available_actions(self):
        universe = build_universe()
        assert available_actions(universe.get("hard_16_10")) == (
            Action.HIT, Action.STAND, Action.DOUBLE, Action.SURRENDER)
        assert Action.SPLIT in available_actions(universe.get("pair_8,8_A"))
        assert available_actions(universe.get("hard_16_10"), HouseRules(False, True, False)) == (
            Action.HIT, Action.STAND)

    def test_correct_action_is_always_available(self):
        for rules in (HouseRules(), HouseRules(False, False, False)):
            for item in build_universe():
                assert grade(item, Action.HIT, rules).correct_action in available_actions(item, rules)

    def test_curated_text_dropped_when_rules_change_the_answer(self):
        """Without surrender, 16 vs 10 is a hit and the surrender rationale no longer applies"""
        item = build_universe().get("hard_16_10")
        no_surrender = HouseRules(surrender_allowed=False)
        result = grade(item, Action.HIT, no_surrender)
        assert result.is_correct
        assert result.correct_action is Action.HIT
        assert result.explanation == "HIT is the mathematically optimal play."
        assert "SURRENDER" in grade(item, Action.HIT).explanation
        assert hint_for(item, no_surrender) is None
        assert hint_for(item) == "SURRENDER 16 vs 10!"

    def test_das_hint_dropped_without_das(self):
        item = build_universe().get("pair_4,4_5")
        assert hint_for(item, HouseRules(double_after_split=False)) is None
        assert hint_for(item) == "SPLIT 4s vs 5 (DAS)!"

    def test_curated_text_kept_when_answer_unchanged(self):
        """Soft 18 vs 9 is a hit under every rule set"""
        item = build_universe().get("soft_A,7_9")
        rules = HouseRules(False, False, False)
        assert grade(item, Action.HIT, rules).explanation.startswith("Soft 18 vs 9")
        assert hint_for(item, rules) == "HIT soft 18 vs 9!"

    def test_action_parse(self):
        assert Action.parse("h") is Action.HIT
        assert Action.parse("surrender") is Action.SURRENDER


class TestRecordAttempt:
    """Folding one attempt into the lifetime record"""

    def test_counts(self):
        stats = record_attempt(StoredStats(), "hard_16_10", True, 1200, streak=1, played_at="t1")
        stats = record_attempt(stats, "hard_16_10", False, 800, streak=0, played_at="t2")
        assert stats.total_hands == 2
        assert stats.total_correct == 1
        assert stats.best_streak == 1
        assert stats.by_hand["hard_16_10"] == ItemStats(attempts=2, correct=1, total_time_ms=2000)
        assert stats.last_played == "t2"

    def test_original_is_untouched(self):
        before = StoredStats()
        record_attempt(before, "hard_16_10", True, 10, 1, None)
        assert before.total_hands == 0
        assert before.by_hand == {}

    def test_queue_carried_over(self):
        queue = (MistakeQueueEntry("hard_16_10"),)
        stats = record_attempt(StoredStats(mistake_queue=queue), "hard_5_2", True, 10, 1, None)
        assert stats.mistake_queue == queue


class TestWeakSpots:
    """Ranking of the worst-played hands"""

    def _stats(self):
        return StoredStats(by_hand={
            "hard_16_10": ItemStats(attempts=4, correct=1, total_time_ms=8000),
            "soft_A,7_9": ItemStats(attempts=3, correct=0, total_time_ms=3000),
            "pair_8,8_A": ItemStats(attempts=2, correct=0, total_time_ms=100),
            "hard_12_2": ItemStats(attempts=5, correct=5, total_time_ms=5000),
            "hard_13_2": ItemStats(attempts=4, correct=1, total_time_ms=4000),
        })

    def test_filters_and_sorts(self):
        spots = weak_spots(self._stats(), min_attempts=3, limit=5)
        assert [w.key for w in spots] == ["soft_A,7_9", "hard_16_10", "hard_13_2", "hard_12_2"]
        assert spots[0].label == "Soft 18 vs 9"
        assert spots[0].accuracy == 0
        assert spots[1].avg_time_s == 2.0

    def test_limit(self):
        assert len(weak_spots(self._stats(), min_attempts=1, limit=2)) == 2

    def test_pair_label(self):
        spots = weak_spots(self._stats(), min_attempts=2, limit=1)
        assert spots[0].label in ("Soft 18 vs 9", "8s vs A")

    def test_empty(self):
        assert weak_spots(StoredStats()) == []


class TestStoredRecord:
    """Persisted record shape and tolerant loading"""

    def test_to_dict_field_names(self):
        stats = StoredStats(
            total_hands=3, total_correct=2, best_streak=2,
            by_hand={"hard_16_10": ItemStats(3, 2, 900)},
            last_played="2024-01-01T00:00:00+00:00",
            mistake_queue=(MistakeQueueEntry("hard_16_10", 1, 20, 10),),
        )
        assert stats.to_dict() == {
            "totalHands": 3,
            "totalCorrect": 2,
            "bestStreak": 2,
            "byHand": {"hard_16_10": {"attempts": 3, "correct": 2, "totalTime": 900}},
            "lastPlayed": "2024-01-01T00:00:00+00:00",
            "mistakeQueue": [{"handKey": "hard_16_10", "consecutiveCorrect": 1, "lastShownAt": 20, "addedAt": 10}],
        }
        assert StoredStats.from_dict(stats.to_dict()) == stats

    def test_record_without_queue_loads_empty_queue(self):
        stats = StoredStats.from_dict({"totalHands": 7, "totalCorrect": 5, "bestStreak": 4, "byHand": {}})
        assert stats.total_hands == 7
        assert stats.mistake_queue == ()
        assert stats.last_played is None

    def test_garbage_defaults(self):
        assert StoredStats.from_dict(None) == StoredStats()
        assert StoredStats.from_dict([1, 2]) == StoredStats()
        stats = StoredStats.from_dict({"totalHands": "many", "byHand": [], "mistakeQueue": "x"})
        assert stats == StoredStats()

    def test_malformed_queue_entries_dropped(self):
        stats = StoredStats.from_dict({"mistakeQueue": [
            {"handKey": "hard_16_10", "consecutiveCorrect": 1},
            {"consecutiveCorrect": 2},
            {"handKey": 5},
            {"handKey": "soft_A,7_9", "consecutiveCorrect": -1},
            "nonsense",
            {"handKey": "hard_16_10", "consecutiveCorrect": 2},
        ]})
        assert stats.mistake_queue == (MistakeQueueEntry("hard_16_10", 1, 0, 0),)


def test_percent():
    assert percent(0, 0) == 0.0
    assert percent(2, 3) == 66.7
    assert percent(5, 5) == 100.0
