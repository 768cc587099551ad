"""
Sequence game.

Items start shuffled in the ordered list; the user reorders them and
submits. Scoring is all-or-nothing, but the positional correctness array
is always reported so feedback can mark each slot.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Mapping

from loguru import logger

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import SequenceConfig
from .scoring import Score, correct_positions, score_sequence, total_reward
from .validation import (
    ConfigValidator,
    RewardField,
    check_reward,
    check_unique_ids,
    require_text,
)


@dataclass(frozen=True)
class SequenceState(RunState):
    order: tuple[str, ...] = ()  # item ids currently in the list, top to bottom


def shuffled_order(config: SequenceConfig, rng: random.Random) -> tuple[str, ...]:
    ids = [item.id for item in config.items]
    rng.shuffle(ids)
    return tuple(ids)


def move_item(state: SequenceState, from_index: int, to_index: int) -> SequenceState:
    """Move the item at from_index so it ends up at to_index."""
    size = len(state.order)
    if not (0 <= from_index < size and 0 <= to_index < size) or from_index == to_index:
        return state
    order = list(state.order)
    order.insert(to_index, order.pop(from_index))
    return replace(state, order=tuple(order))


def remove_item(state: SequenceState, item_id: str) -> SequenceState:
    """Take an item out of the list."""
    if item_id not in state.order:
        return state
    return replace(state, order=tuple(i for i in state.order if i != item_id))


def place_item(state: SequenceState, config: SequenceConfig, item_id: str, index: int | None = None) -> SequenceState:
    """Put an item (back) into the list at index, appending by default."""
    if item_id in state.order or item_id not in {i.id for i in config.items}:
        return state
    order = list(state.order)
    position = len(order) if index is None else max(0, min(index, len(order)))
    order.insert(position, item_id)
    return replace(state, order=tuple(order))


@register(GameType.SEQUENCE)
class SequenceGame(BaseGame):
    """Put items in the correct order."""

    config: SequenceConfig
    state: SequenceState

    def __init__(self, config, mode="lesson", **kwargs):
        super().__init__(config, mode, **kwargs)
        item_ids = {i.id for i in self.config.items}
        dangling = [i for i in self.config.correct_order if i not in item_ids]
        if dangling:
            logger.warning(f"sequence: correct order references unknown items {dangling}")

    def initial_state(self) -> SequenceState:
        return SequenceState(order=shuffled_order(self.config, self.rng))

    def can_submit(self, state: SequenceState) -> bool:
        return bool(self.config.items) and len(state.order) == len(self.config.items)

    def reward_total(self) -> int:
        return total_reward(self.config.configured_total(self.mode), self.config.items, self.mode)

    def score(self, state: SequenceState, timed_out: bool) -> Score:
        return score_sequence(self.config.correct_order, state.order, len(self.config.items), self.reward_total())

    def result_extras(self, score: Score) -> dict[str, Any]:
        return {"correct_positions": list(score.details["correct_positions"])}

    def user_actions(self, state: SequenceState) -> dict[str, Any]:
        return {"order": list(state.order)}

    def restore_state(self, user_actions: Mapping[str, Any]) -> SequenceState:
        return SequenceState(order=tuple(str(i) for i in user_actions.get("order") or []))

    def move(self, from_index: int, to_index: int) -> bool:
        return self._dispatch(move_item, from_index, to_index)

    def remove(self, item_id: str) -> bool:
        return self._dispatch(remove_item, item_id)

    def place(self, item_id: str, index: int | None = None) -> bool:
        return self._dispatch(place_item, self.config, item_id, index)

    def unplaced_items(self) -> list[str]:
        return [i.id for i in self.config.items if i.id not in self.state.order]

    def position_feedback(self) -> list[bool]:
        if not self.show_feedback:
            return []
        return correct_positions(self.config.correct_order, self.state.order, len(self.config.items))


@register_validator(GameType.SEQUENCE)
class SequenceValidator(ConfigValidator):
    def check(self, config: SequenceConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Instruction is required")
        if len(config.items) < 2:
            errors.append("At least 2 items are required")

        item_ids = check_unique_ids(errors, (i.id for i in config.items), "Item")
        for n, item in enumerate(config.items, 1):
            if not item.content.strip() and not item.image_url:
                errors.append(f"Item {n}: Content or image is required")
            check_reward(errors, item, reward, f"Item {n}")

        uses = Counter(config.correct_order)
        for item_id in config.correct_order:
            if item_id not in item_ids:
                errors.append(f"Correct order references unknown item '{item_id}'")
        for item_id, count in uses.items():
            if count > 1 and item_id in item_ids:
                errors.append(f"Item '{item_id}' appears {count} times in the correct order")
        for item_id in sorted(item_ids - set(uses)):
            errors.append(f"Item '{item_id}' is missing from the correct order")
