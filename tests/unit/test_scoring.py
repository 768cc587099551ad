"""
Unit tests for the reward and scoring rules.
"""

import math

import pytest

from questkit.games import Mode
from questkit.games.models import (
    DragDropItem,
    Hotspot,
    MatchingPair,
    MemoryFlipPair,
    ScenarioOption,
)
from questkit.games.scoring import (
    correct_positions,
    find_memory_pair,
    is_mark_on_hotspot,
    match_hotspots,
    memory_flip_reward,
    proportional_reward,
    round_half_up,
    score_choice,
    score_hotspots,
    score_matching,
    score_placements,
    score_scenario,
    score_sequence,
    total_reward,
)


class TestRounding:
    def test_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    def test_proportional(self):
        assert proportional_reward(3, 4, 100) == 75
        assert proportional_reward(1, 3, 10) == 3
        assert proportional_reward(0, 0, 100) == 0


class TestTotals:
    def test_configured_total_wins(self):
        items = [DragDropItem(id="a", xp=5), DragDropItem(id="b", xp=5)]
        assert total_reward(100, items, Mode.LESSON) == 100

    def test_falls_back_to_element_sum(self):
        items = [DragDropItem(id="a", xp=5), DragDropItem(id="b", points=7)]
        assert total_reward(None, items, Mode.LESSON) == 5
        assert total_reward(None, items, Mode.QUIZ) == 7


class TestPlacements:
    """Test drag-drop / time-attack scoring."""

    @pytest.fixture
    def items(self):
        return [
            DragDropItem(id="i1", correct_target_id="a"),
            DragDropItem(id="i2", correct_target_id="a"),
            DragDropItem(id="i3", correct_target_id="b"),
            DragDropItem(id="i4", correct_target_id="b"),
        ]

    def test_three_of_four_earns_75(self, items):
        score = score_placements(items, {"i1": "a", "i2": "a", "i3": "b", "i4": "a"}, 100)
        assert score.earned == 75
        assert score.correct_count == 3
        assert not score.success

    def test_counts_incorrect_and_missed(self, items):
        score = score_placements(items, {"i1": "a", "i3": "a"}, 100)
        assert score.details["incorrect_count"] == 1
        assert score.details["missed_count"] == 2

    def test_dangling_target_never_matches(self):
        items = [DragDropItem(id="i1", correct_target_id="ghost")]
        score = score_placements(items, {"i1": "a"}, 10)
        assert score.earned == 0


class TestMatching:
    def test_order_insensitive(self):
        pairs = [MatchingPair(left_id="l1", right_id="r1"), MatchingPair(left_id="l2", right_id="r2")]
        score = score_matching(pairs, [("r1", "l1"), ("l2", "r2")], 20)
        assert score.success
        assert score.earned == 20

    def test_all_or_nothing(self):
        pairs = [MatchingPair(left_id="l1", right_id="r1"), MatchingPair(left_id="l2", right_id="r2")]
        score = score_matching(pairs, [("l1", "r1"), ("l2", "r1")], 20)
        assert not score.success
        assert score.earned == 0
        assert score.correct_count == 1


class TestSequence:
    def test_positions_always_cover_every_item(self):
        assert correct_positions(["a", "b", "c"], ["a"], 3) == [True, False, False]
        assert len(correct_positions(["a"], ["a", "b", "c"], 3)) == 3

    def test_all_or_nothing(self):
        score = score_sequence(["a", "b", "c"], ["a", "c", "b"], 3, 30)
        assert score.earned == 0
        assert score.details["correct_positions"] == [True, False, False]

        score = score_sequence(["a", "b", "c"], ["a", "b", "c"], 3, 30)
        assert score.earned == 30
        assert score.success


class TestHotspots:
    """Test radius matching and one-mark-per-hotspot."""

    def test_center_always_matches(self):
        assert is_mark_on_hotspot((40, 40), Hotspot(x=40, y=40, radius=0))
        assert is_mark_on_hotspot((40, 40), Hotspot(x=40, y=40, radius=5))

    def test_just_outside_radius_never_matches(self):
        hotspot = Hotspot(x=50, y=50, radius=5)
        assert is_mark_on_hotspot((55, 50), hotspot)
        assert not is_mark_on_hotspot((55 + 1e-6, 50), hotspot)

    def test_diagonal_distance(self):
        hotspot = Hotspot(x=0, y=0, radius=5)
        assert is_mark_on_hotspot((3, 4), hotspot)
        assert not is_mark_on_hotspot((3, 4.01), hotspot)

    def test_two_marks_cannot_claim_same_hotspot(self):
        hotspots = [Hotspot(x=50, y=50, radius=10, xp=10)]
        score = score_hotspots(hotspots, [(50, 50), (52, 52)], Mode.LESSON)
        assert score.correct_count == 1
        assert score.earned == 10
        assert score.mistakes == 1

    def test_overlapping_hotspots_use_maximum_matching(self):
        # Mark 0 is inside both; mark 1 only inside hotspot 0.
        hotspots = [Hotspot(x=10, y=10, radius=10), Hotspot(x=18, y=10, radius=3)]
        marks = [(17, 10), (5, 10)]
        assignment = match_hotspots(hotspots, marks)
        assert sorted(assignment.values()) == [0, 1]

    def test_reward_per_claimed_hotspot(self):
        hotspots = [Hotspot(x=10, y=10, radius=5, points=4), Hotspot(x=80, y=80, radius=5, points=4)]
        score = score_hotspots(hotspots, [(10, 10)], Mode.QUIZ)
        assert score.earned == 4
        assert not score.success


class TestChoice:
    def test_exact_set_required(self):
        assert score_choice({"a", "b"}, {"a", "b"}, 10).earned == 10
        assert score_choice({"a"}, {"a", "b"}, 10).earned == 0
        assert score_choice({"a", "b", "c"}, {"a", "b"}, 10).earned == 0


class TestScenario:
    """Test partial credit."""

    @pytest.fixture
    def options(self):
        return [
            ScenarioOption(id="o1", correct=True, xp=10),
            ScenarioOption(id="o2", correct=True, xp=10),
            ScenarioOption(id="o3", correct=True, xp=10),
            ScenarioOption(id="o4", correct=False),
        ]

    def test_two_of_three_correct(self, options):
        score = score_scenario(options, {"o1", "o2"}, Mode.LESSON)
        assert score.earned == 20
        assert not score.success

    def test_perfect(self, options):
        score = score_scenario(options, {"o1", "o2", "o3"}, Mode.LESSON)
        assert score.earned == 30
        assert score.success

    def test_incorrect_selection_keeps_credit_but_not_perfect(self, options):
        score = score_scenario(options, {"o1", "o4"}, Mode.LESSON)
        assert score.earned == 10
        assert score.mistakes == 1
        assert not score.success

    def test_fallback_single_answer(self):
        options = [ScenarioOption(id="a", correct=True), ScenarioOption(id="b")]
        assert score_scenario(options, {"a"}, Mode.QUIZ, fallback_reward=50).earned == 50
        assert score_scenario(options, {"b"}, Mode.QUIZ, fallback_reward=50).earned == 0

    def test_fallback_multi_answer_proportional(self):
        options = [ScenarioOption(id="a", correct=True), ScenarioOption(id="b", correct=True), ScenarioOption(id="c")]
        score = score_scenario(options, {"a"}, Mode.LESSON, fallback_reward=50, allow_multiple=True)
        assert score.earned == 25


class TestMemoryFlip:
    @pytest.fixture
    def pairs(self):
        return [
            MemoryFlipPair(left_id="a", right_id="b", xp=10),
            MemoryFlipPair(left_id="c", right_id="d", xp=15),
        ]

    def test_find_pair_either_order(self, pairs):
        assert find_memory_pair(pairs, "b", "a") == 0
        assert find_memory_pair(pairs, "a", "c") is None
        assert find_memory_pair(pairs, "a", "a") is None

    def test_perfect_bonus(self, pairs):
        assert memory_flip_reward(pairs, [0, 1], Mode.LESSON, 0, 2, completed=True) == 50

    def test_no_bonus_with_mistakes(self, pairs):
        assert memory_flip_reward(pairs, [0, 1], Mode.LESSON, 1, 2, completed=True) == 25

    def test_no_bonus_when_incomplete(self, pairs):
        assert memory_flip_reward(pairs, [0], Mode.LESSON, 0, 2, completed=False) == 10

    def test_fractional_multiplier_rounds_half_up(self, pairs):
        assert memory_flip_reward(pairs, [0], Mode.LESSON, 0, 1.25, completed=True) == math.floor(12.5 + 0.5)
