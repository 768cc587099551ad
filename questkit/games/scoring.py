"""
Reward and scoring rules for every game type.

Pure functions: they take config elements and a user response and return
correctness and reward. No state, no I/O, so the same rules serve live play,
timeout scoring and tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from . import Mode
from .models import (
    DragDropItem,
    Hotspot,
    MatchingPair,
    MemoryFlipPair,
    PhotoSwipeCard,
    Rewarded,
    ScenarioOption,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero (2.5 -> 3), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def sum_rewards(elements: Iterable[Rewarded], mode: Mode | str) -> int:
    """Sum of element rewards for the run mode."""
    return sum(e.reward(mode) for e in elements)


def total_reward(configured: int | None, elements: Iterable[Rewarded], mode: Mode | str) -> int:
    """Configured total when the author set one, otherwise the element sum."""
    if configured is not None and configured > 0:
        return configured
    return sum_rewards(elements, mode)


def proportional_reward(correct: int, total: int, reward: int) -> int:
    """round(correct / total * reward); zero when there is nothing to score."""
    if total <= 0:
        return 0
    return round_half_up(correct / total * reward)


@dataclass(frozen=True)
class Score:
    """Outcome of applying a type's correctness rule to one response."""

    success: bool
    earned: int
    correct_count: int
    total_count: int
    mistakes: int = 0
    details: Mapping = field(default_factory=dict)


# ============================================================================
# DRAG & DROP / TIME-ATTACK SORTING
# ============================================================================

@dataclass(frozen=True)
class PlacementBreakdown:
    correct: tuple[str, ...]
    incorrect: tuple[str, ...]
    missed: tuple[str, ...]


def classify_placements(items: Sequence[DragDropItem], placements: Mapping[str, str]) -> PlacementBreakdown:
    """Split items into correctly placed, wrongly placed and unplaced."""
    correct, incorrect, missed = [], [], []
    for item in items:
        target = placements.get(item.id)
        if target is None:
            missed.append(item.id)
        elif target == item.correct_target_id:
            correct.append(item.id)
        else:
            incorrect.append(item.id)
    return PlacementBreakdown(tuple(correct), tuple(incorrect), tuple(missed))


def score_placements(
    items: Sequence[DragDropItem],
    placements: Mapping[str, str],
    reward: int,
) -> Score:
    """Proportional reward: round(correct / total * reward)."""
    breakdown = classify_placements(items, placements)
    total = len(items)
    correct = len(breakdown.correct)
    return Score(
        success=total > 0 and correct == total,
        earned=proportional_reward(correct, total, reward),
        correct_count=correct,
        total_count=total,
        mistakes=len(breakdown.incorrect),
        details={
            "incorrect_count": len(breakdown.incorrect),
            "missed_count": len(breakdown.missed),
        },
    )


# ============================================================================
# MATCHING
# ============================================================================

def pair_key(a: str, b: str) -> frozenset[str]:
    return frozenset((a, b))


def pair_results(config_pairs: Sequence[MatchingPair], user_pairs: Sequence[tuple[str, str]]) -> list[bool]:
    """Per user pair: is (left, right) a configured pair, in either order."""
    expected = {pair_key(p.left_id, p.right_id) for p in config_pairs}
    return [pair_key(left, right) in expected for left, right in user_pairs]


def score_matching(
    config_pairs: Sequence[MatchingPair],
    user_pairs: Sequence[tuple[str, str]],
    reward: int,
) -> Score:
    """All-or-nothing: full reward only if every configured pair is matched."""
    results = pair_results(config_pairs, user_pairs)
    correct = sum(results)
    total = len(config_pairs)
    success = total > 0 and correct == total and len(user_pairs) == total
    return Score(
        success=success,
        earned=reward if success else 0,
        correct_count=correct,
        total_count=total,
        mistakes=len(results) - correct,
        details={"pair_results": results},
    )


# ============================================================================
# SEQUENCE
# ============================================================================

def correct_positions(correct_order: Sequence[str], user_order: Sequence[str], item_count: int) -> list[bool]:
    """Positional correctness; always exactly item_count entries."""
    return [
        i < len(user_order) and i < len(correct_order) and user_order[i] == correct_order[i]
        for i in range(item_count)
    ]


def score_sequence(
    correct_order: Sequence[str],
    user_order: Sequence[str],
    item_count: int,
    reward: int,
) -> Score:
    """All-or-nothing; the positional array is returned for feedback."""
    positions = correct_positions(correct_order, user_order, item_count)
    correct = sum(positions)
    success = item_count > 0 and correct == item_count
    return Score(
        success=success,
        earned=reward if success else 0,
        correct_count=correct,
        total_count=item_count,
        mistakes=item_count - correct,
        details={"correct_positions": positions},
    )


# ============================================================================
# HOTSPOT
# ============================================================================

def mark_distance(mark: tuple[float, float], hotspot: Hotspot) -> float:
    return math.hypot(mark[0] - hotspot.x, mark[1] - hotspot.y)


def is_mark_on_hotspot(mark: tuple[float, float], hotspot: Hotspot) -> bool:
    """A mark hits a hotspot when it lies within the radius (inclusive)."""
    return mark_distance(mark, hotspot) <= hotspot.radius


def match_hotspots(hotspots: Sequence[Hotspot], marks: Sequence[tuple[float, float]]) -> dict[int, int]:
    """
    Assign marks to hotspots, at most one mark per hotspot.

    Maximum bipartite matching (augmenting paths), so overlapping hotspots
    never cost the player a hit. Candidates are tried nearest first, which
    keeps the assignment stable and intuitive.

    Returns:
        {mark_index: hotspot_index}
    """
    candidates = [
        sorted(
            (h for h, hotspot in enumerate(hotspots) if is_mark_on_hotspot(mark, hotspot)),
            key=lambda h, m=mark: mark_distance(m, hotspots[h]),
        )
        for mark in marks
    ]
    owner: dict[int, int] = {}  # hotspot -> mark

    def augment(m: int, seen: set[int]) -> bool:
        for h in candidates[m]:
            if h in seen:
                continue
            seen.add(h)
            if h not in owner or augment(owner[h], seen):
                owner[h] = m
                return True
        return False

    for m in range(len(marks)):
        augment(m, set())

    return {m: h for h, m in owner.items()}


def score_hotspots(
    hotspots: Sequence[Hotspot],
    marks: Sequence[tuple[float, float]],
    mode: Mode | str,
) -> Score:
    """Each claimed hotspot pays its own reward."""
    assignment = match_hotspots(hotspots, marks)
    claimed = sorted(set(assignment.values()))
    earned = sum(hotspots[h].reward(mode) for h in claimed)
    total = len(hotspots)
    return Score(
        success=total > 0 and len(claimed) == total,
        earned=earned,
        correct_count=len(claimed),
        total_count=total,
        mistakes=len(marks) - len(assignment),
        details={"assignment": assignment},
    )


# ============================================================================
# TRUE / FALSE, MULTIPLE CHOICE
# ============================================================================

def score_true_false(correct_answer: bool | None, selected: bool, reward: int) -> Score:
    success = correct_answer is not None and selected == correct_answer
    return Score(
        success=success,
        earned=reward if success else 0,
        correct_count=int(success),
        total_count=1,
        mistakes=0 if success else 1,
    )


def is_exact_selection(selected: Iterable[str], correct: Iterable[str]) -> bool:
    return set(selected) == set(correct)


def score_choice(selected: Iterable[str], correct: Iterable[str], reward: int) -> Score:
    """All-or-nothing: the selected set must equal the correct set."""
    selected, correct = set(selected), set(correct)
    success = bool(correct) and selected == correct
    return Score(
        success=success,
        earned=reward if success else 0,
        correct_count=len(selected & correct),
        total_count=len(correct),
        mistakes=len(selected - correct),
    )


# ============================================================================
# SCENARIO
# ============================================================================

def score_scenario(
    options: Sequence[ScenarioOption],
    selected: Iterable[str],
    mode: Mode | str,
    fallback_reward: int = 0,
    allow_multiple: bool = False,
) -> Score:
    """
    Partial credit: each selected correct option pays its own reward.

    When no option carries a reward for the mode, the config-level reward
    is used instead: in full for a perfect answer, proportionally for
    multi-answer scenarios, nothing otherwise.
    """
    selected = set(selected)
    correct_ids = {o.id for o in options if o.correct}
    hits = [o for o in options if o.correct and o.id in selected]
    perfect = bool(correct_ids) and selected == correct_ids

    if any(o.reward(mode) > 0 for o in options):
        earned = sum(o.reward(mode) for o in hits)
    elif perfect:
        earned = fallback_reward
    elif allow_multiple:
        earned = proportional_reward(len(hits), len(correct_ids), fallback_reward)
    else:
        earned = 0

    return Score(
        success=perfect,
        earned=earned,
        correct_count=len(hits),
        total_count=len(correct_ids),
        mistakes=len(selected - correct_ids),
    )


# ============================================================================
# MEMORY FLIP
# ============================================================================

def find_memory_pair(pairs: Sequence[MemoryFlipPair], a: str, b: str) -> int | None:
    """Index of the configured pair formed by cards a and b, if any."""
    if a == b:
        return None
    key = pair_key(a, b)
    for index, pair in enumerate(pairs):
        if pair_key(pair.left_id, pair.right_id) == key:
            return index
    return None


def memory_flip_reward(
    pairs: Sequence[MemoryFlipPair],
    matched_pairs: Iterable[int],
    mode: Mode | str,
    mistakes: int,
    multiplier: float,
    completed: bool,
) -> int:
    """Sum of matched pair rewards, multiplied for a completed perfect game."""
    base = sum(pairs[i].reward(mode) for i in set(matched_pairs))
    if completed and mistakes == 0:
        return round_half_up(base * multiplier)
    return base


# ============================================================================
# PHOTO SWIPE
# ============================================================================

SWIPE_RIGHT = "safe"
SWIPE_LEFT = "unsafe"


def is_correct_swipe(card: PhotoSwipeCard, choice: str) -> bool:
    return card.is_correct is not None and card.is_correct == choice
