"""
Drag & drop game.

User drags every item onto one of the targets, then submits. Reward is
proportional to the number of correctly placed items. The placement state
and reducers here are shared with time-attack sorting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from loguru import logger

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import DragDropConfig, DragDropItem, TimeAttackSortingConfig
from .scoring import Score, classify_placements, score_placements, total_reward
from .validation import (
    ConfigValidator,
    RewardField,
    check_reward,
    check_unique_ids,
    require_text,
)

PlacementConfig = DragDropConfig | TimeAttackSortingConfig


@dataclass(frozen=True)
class PlacementState(RunState):
    placements: Mapping[str, str] = field(default_factory=dict)  # item id -> target id


def place_item(state: PlacementState, config: PlacementConfig, item_id: str, target_id: str) -> PlacementState:
    """Drop an item on a target (moving it if already placed). Unknown ids are ignored."""
    if item_id not in {i.id for i in config.items}:
        return state
    if target_id not in {t.id for t in config.targets}:
        return state
    if state.placements.get(item_id) == target_id:
        return state
    return replace(state, placements={**state.placements, item_id: target_id})


def remove_item(state: PlacementState, item_id: str) -> PlacementState:
    """Send an item back to the unplaced pool."""
    if item_id not in state.placements:
        return state
    placements = {k: v for k, v in state.placements.items() if k != item_id}
    return replace(state, placements=placements)


def all_placed(state: PlacementState, config: PlacementConfig) -> bool:
    return bool(config.items) and all(item.id in state.placements for item in config.items)


class PlacementGame(BaseGame):
    """Shared engine for games that sort items into targets."""

    config: PlacementConfig
    state: PlacementState

    def __init__(self, config, mode="lesson", **kwargs):
        super().__init__(config, mode, **kwargs)
        target_ids = {t.id for t in self.config.targets}
        for item in self.config.items:
            if item.correct_target_id not in target_ids:
                logger.warning(
                    f"{self.game_type.value}: item '{item.id}' points at unknown "
                    f"target '{item.correct_target_id}', it can never be correct"
                )

    def initial_state(self) -> PlacementState:
        return PlacementState()

    def can_submit(self, state: PlacementState) -> bool:
        return all_placed(state, self.config)

    def reward_total(self) -> int:
        return total_reward(self.config.configured_total(self.mode), self.config.items, self.mode)

    def score(self, state: PlacementState, timed_out: bool) -> Score:
        return score_placements(self.config.items, state.placements, self.reward_total())

    def user_actions(self, state: PlacementState) -> dict[str, Any]:
        return {"placements": dict(state.placements)}

    def restore_state(self, user_actions: Mapping[str, Any]) -> PlacementState:
        placements = user_actions.get("placements") or {}
        return PlacementState(placements={str(k): str(v) for k, v in placements.items()})

    # Interaction ------------------------------------------------------

    def place(self, item_id: str, target_id: str) -> bool:
        return self._dispatch(place_item, self.config, item_id, target_id)

    def remove(self, item_id: str) -> bool:
        return self._dispatch(remove_item, item_id)

    # Views ------------------------------------------------------------

    def unplaced_items(self) -> list[DragDropItem]:
        return [i for i in self.config.items if i.id not in self.state.placements]

    def image_hidden(self, item_id: str) -> bool:
        """Item image failed to load; the item stays draggable by its text."""
        return item_id in self.hidden_media

    def items_in_target(self, target_id: str) -> list[DragDropItem]:
        return [i for i in self.config.items if self.state.placements.get(i.id) == target_id]

    def item_feedback(self) -> dict[str, bool]:
        """Per-item correctness, once feedback is visible."""
        if not self.show_feedback:
            return {}
        breakdown = classify_placements(self.config.items, self.state.placements)
        return {item.id: item.id in breakdown.correct for item in self.config.items}


@register(GameType.DRAG_DROP)
class DragDropGame(PlacementGame):
    """Drag & drop: submit once every item is placed."""

    feedback_delay_setting = "drag_drop_feedback_delay_seconds"


def check_placement_config(config: PlacementConfig, reward: RewardField, errors: list[str]) -> None:
    """Checks shared by drag-drop and time-attack sorting."""
    require_text(errors, config.instruction, "Instruction is required")
    if not config.items:
        errors.append("At least one item is required")
    if len(config.targets) < 2:
        errors.append("At least 2 targets are required")

    check_unique_ids(errors, (i.id for i in config.items), "Item")
    target_ids = check_unique_ids(errors, (t.id for t in config.targets), "Target")

    for n, target in enumerate(config.targets, 1):
        require_text(errors, target.label, f"Target {n}: Label is required")

    for n, item in enumerate(config.items, 1):
        label = f"Item {n}"
        if not item.content.strip() and not item.image_url:
            errors.append(f"{label}: Content or image is required")
        if not item.correct_target_id:
            errors.append(f"{label}: Correct target is required")
        elif item.correct_target_id not in target_ids:
            errors.append(f"{label}: Correct target '{item.correct_target_id}' does not exist")
        check_reward(errors, item, reward, label)


@register_validator(GameType.DRAG_DROP)
class DragDropValidator(ConfigValidator):
    def check(self, config: DragDropConfig, reward: RewardField, errors: list[str]) -> None:
        check_placement_config(config, reward, errors)
