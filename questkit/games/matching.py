"""
Matching game.

User pairs left items with right items, either click-to-pair (select one
on each side) or by dragging one onto the other. Scoring is all-or-nothing:
the full reward is earned only when every configured pair is matched.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Mapping

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import MatchingConfig
from .scoring import Score, pair_results, score_matching, total_reward
from .validation import (
    ConfigValidator,
    RewardField,
    check_reward,
    check_unique_ids,
    require_text,
)

Pair = tuple[str, str]


@dataclass(frozen=True)
class MatchingState(RunState):
    pairs: tuple[Pair, ...] = ()
    selected_left: str | None = None
    selected_right: str | None = None


def _left_ids(config: MatchingConfig) -> set[str]:
    return {i.id for i in config.left_items}


def _right_ids(config: MatchingConfig) -> set[str]:
    return {i.id for i in config.right_items}


def pair_items(state: MatchingState, config: MatchingConfig, left_id: str, right_id: str) -> MatchingState:
    """Pair two items, replacing any existing pair of either one."""
    if left_id not in _left_ids(config) or right_id not in _right_ids(config):
        return state
    kept = tuple(p for p in state.pairs if p[0] != left_id and p[1] != right_id)
    return replace(state, pairs=kept + ((left_id, right_id),), selected_left=None, selected_right=None)


def unpair(state: MatchingState, item_id: str) -> MatchingState:
    """Remove the pair containing item_id (left or right side)."""
    kept = tuple(p for p in state.pairs if item_id not in p)
    if len(kept) == len(state.pairs):
        return state
    return replace(state, pairs=kept)


def select_left(state: MatchingState, config: MatchingConfig, left_id: str) -> MatchingState:
    if left_id not in _left_ids(config):
        return state
    if any(p[0] == left_id for p in state.pairs):
        return replace(unpair(state, left_id), selected_left=None)
    if state.selected_right is not None:
        return pair_items(state, config, left_id, state.selected_right)
    selected = None if state.selected_left == left_id else left_id
    return replace(state, selected_left=selected)


def select_right(state: MatchingState, config: MatchingConfig, right_id: str) -> MatchingState:
    if right_id not in _right_ids(config):
        return state
    if any(p[1] == right_id for p in state.pairs):
        return replace(unpair(state, right_id), selected_right=None)
    if state.selected_left is not None:
        return pair_items(state, config, state.selected_left, right_id)
    selected = None if state.selected_right == right_id else right_id
    return replace(state, selected_right=selected)


@register(GameType.MATCHING)
class MatchingGame(BaseGame):
    """Match left items to right items."""

    config: MatchingConfig
    state: MatchingState

    def initial_state(self) -> MatchingState:
        return MatchingState()

    def can_submit(self, state: MatchingState) -> bool:
        return bool(self.config.pairs) and len(state.pairs) == len(self.config.pairs)

    def reward_total(self) -> int:
        return total_reward(self.config.configured_total(self.mode), self.config.left_items, self.mode)

    def score(self, state: MatchingState, timed_out: bool) -> Score:
        return score_matching(self.config.pairs, state.pairs, self.reward_total())

    def user_actions(self, state: MatchingState) -> dict[str, Any]:
        return {"pairs": [{"leftId": left, "rightId": right} for left, right in state.pairs]}

    def restore_state(self, user_actions: Mapping[str, Any]) -> MatchingState:
        pairs = tuple(
            (str(p.get("leftId", "")), str(p.get("rightId", "")))
            for p in user_actions.get("pairs") or []
        )
        return MatchingState(pairs=pairs)

    def select_left(self, left_id: str) -> bool:
        return self._dispatch(select_left, self.config, left_id)

    def select_right(self, right_id: str) -> bool:
        return self._dispatch(select_right, self.config, right_id)

    def pair(self, left_id: str, right_id: str) -> bool:
        return self._dispatch(pair_items, self.config, left_id, right_id)

    def unpair(self, item_id: str) -> bool:
        return self._dispatch(unpair, item_id)

    def pair_feedback(self) -> dict[str, bool]:
        """Correctness per user pair, keyed by left id, once feedback is visible."""
        if not self.show_feedback:
            return {}
        results = pair_results(self.config.pairs, self.state.pairs)
        return {left: ok for (left, _), ok in zip(self.state.pairs, results)}


@register_validator(GameType.MATCHING)
class MatchingValidator(ConfigValidator):
    def check(self, config: MatchingConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Instruction is required")
        if len(config.pairs) < 2:
            errors.append("At least 2 pairs are required")

        left_ids = check_unique_ids(errors, (i.id for i in config.left_items), "Left item")
        right_ids = check_unique_ids(errors, (i.id for i in config.right_items), "Right item")

        for side, items in (("Left item", config.left_items), ("Right item", config.right_items)):
            for n, item in enumerate(items, 1):
                if not item.text.strip() and not item.image_url:
                    errors.append(f"{side} {n}: Text or image is required")

        for n, item in enumerate(config.left_items, 1):
            check_reward(errors, item, reward, f"Left item {n}")

        for n, pair in enumerate(config.pairs, 1):
            if pair.left_id not in left_ids:
                errors.append(f"Pair {n}: Left item '{pair.left_id}' does not exist")
            if pair.right_id not in right_ids:
                errors.append(f"Pair {n}: Right item '{pair.right_id}' does not exist")

        left_uses = Counter(p.left_id for p in config.pairs)
        right_uses = Counter(p.right_id for p in config.pairs)
        for item_id in sorted(left_ids):
            if left_uses[item_id] != 1:
                errors.append(f"Left item '{item_id}' must be in exactly one pair (found {left_uses[item_id]})")
        for item_id in sorted(right_ids):
            if right_uses[item_id] > 1:
                errors.append(f"Right item '{item_id}' is used in {right_uses[item_id]} pairs")
