"""Tests for hand categories, item keys and the drill universe"""

import random

import pytest

from blackjack_coach.strategy.cards import (
    TEN_CARDS,
    Hard,
    Pair,
    Rank,
    Soft,
    deal_cards,
    item_key,
    matchup_label,
    parse_item_key,
)
from blackjack_coach.trainer.universe import DIFFICULTY, build_universe, default_weight


def _card_value(face):
    if face == "A":
        return 11
    if face in TEN_CARDS:
        return 10
    return int(face)


class TestItemKeys:
    """Canonical keys and labels"""

    def test_key_format(self):
        assert item_key(Hard(16), Rank.TEN) == "hard_16_10"
        assert item_key(Soft(7), Rank.NINE) == "soft_A,7_9"
        assert item_key(Pair(Rank.EIGHT), Rank.ACE) == "pair_8,8_A"
        assert item_key(Pair(Rank.TEN), Rank.TEN) == "pair_T,T_10"

    def test_every_key_parses_back(self):
        for item in build_universe():
            assert parse_item_key(item.key) == (item.category, item.upcard)

    @pytest.mark.parametrize("key", ["", "hard_16", "hard_4_10", "soft_7_9", "pair_8,9_A", "flush_9_2", "hard_x_2"])
    def test_malformed_keys_rejected(self, key):
        with pytest.raises(ValueError):
            parse_item_key(key)

    def test_labels(self):
        assert Hard(16).label == "Hard 16"
        assert Soft(7).label == "Soft 18"
        assert Pair(Rank.EIGHT).label == "Pair of 8s"
        assert Pair(Rank.TEN).label == "Pair of 10s"
        assert Pair(Rank.ACE).label == "Pair of Aces"
        assert matchup_label(Soft(7), Rank.NINE) == "Soft 18 vs 9"
        assert matchup_label(Pair(Rank.EIGHT), Rank.ACE) == "8s vs A"

    def test_category_ranges(self):
        with pytest.raises(ValueError):
            Hard(4)
        with pytest.raises(ValueError):
            Hard(22)
        with pytest.raises(ValueError):
            Soft(10)
        assert Pair("K").rank is Rank.TEN
        assert Pair(11).rank is Rank.ACE

    def test_rank_parse(self):
        assert Rank.parse("A") is Rank.ACE
        assert Rank.parse("10") is Rank.TEN
        assert Rank.parse("q") is Rank.TEN
        assert Rank.parse(7) is Rank.SEVEN
        assert Rank.parse(11) is Rank.ACE
        assert Rank.parse("11") is Rank.ACE
        with pytest.raises(ValueError):
            Rank.parse("1")


class TestUniverse:
    """The fixed set of drill items"""

    def test_size(self):
        """17 hard + 8 soft + 10 pairs, each against 10 upcards"""
        assert len(build_universe()) == 350

    def test_keys_unique(self):
        keys = [item.key for item in build_universe()]
        assert len(set(keys)) == len(keys)

    def test_stable_order(self):
        items = build_universe().items
        assert items[0].key == "hard_5_2"
        assert items[9].key == "hard_5_A"
        assert items[170].key == "soft_A,2_2"
        assert items[-1].key == "pair_A,A_A"

    def test_weights_in_range(self):
        for item in build_universe():
            assert 1 <= item.base_weight <= 5

    def test_difficulty_overrides(self):
        universe = build_universe()
        for key, (weight, hint) in DIFFICULTY.items():
            item = universe.get(key)
            assert item is not None, key
            assert item.base_weight == weight
            assert item.hint == hint

    def test_default_weights(self):
        assert default_weight(Hard(8), Rank.TEN) == 1
        assert default_weight(Hard(18), Rank.TEN) == 1
        assert default_weight(Hard(18), Rank.ACE) == 2
        assert default_weight(Hard(11), Rank.SIX) == 1
        assert default_weight(Hard(13), Rank.TWO) == 2
        assert default_weight(Pair(Rank.ACE), Rank.SIX) == 2
        assert build_universe().get("hard_5_2").hint is None

    def test_lookup(self):
        universe = build_universe()
        assert "soft_A,7_9" in universe
        assert "soft_A,10_9" not in universe
        assert universe.get("nope") is None


class TestDealCards:
    """Concrete card faces for display"""

    def test_cards_make_the_category(self):
        rng = random.Random(7)
        for item in build_universe():
            category = item.category
            for _ in range(5):
                cards = deal_cards(category, rng)
                if isinstance(category, Pair):
                    assert len(cards) == 2
                    assert Rank.parse(cards[0]) is category.rank
                    assert Rank.parse(cards[1]) is category.rank
                elif isinstance(category, Soft):
                    assert cards == ["A", str(category.other_card)]
                else:
                    assert "A" not in cards
                    assert sum(_card_value(c) for c in cards) == category.total
                    assert _card_value(cards[0]) != _card_value(cards[1])
