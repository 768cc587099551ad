"""
Hotspot game.

User places marks on an image, then submits. Coordinates and radii are
percentages of the image, so scoring does not depend on the rendered size.
Each hotspot can be claimed by at most one mark.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import HotspotConfig
from .scoring import Score, match_hotspots, score_hotspots, sum_rewards
from .validation import ConfigValidator, RewardField, check_reward, require_text

Mark = tuple[float, float]


@dataclass(frozen=True)
class HotspotState(RunState):
    marks: tuple[Mark, ...] = ()


def add_mark(state: HotspotState, config: HotspotConfig, x: float, y: float) -> HotspotState:
    """Place a mark. Ignored off the image or once there are as many marks as hotspots."""
    if not (0 <= x <= 100 and 0 <= y <= 100):
        return state
    if len(state.marks) >= len(config.hotspots):
        return state
    return replace(state, marks=state.marks + ((float(x), float(y)),))


def remove_mark(state: HotspotState, index: int) -> HotspotState:
    if not 0 <= index < len(state.marks):
        return state
    return replace(state, marks=state.marks[:index] + state.marks[index + 1:])


@register(GameType.HOTSPOT)
class HotspotGame(BaseGame):
    """Find the hotspots on an image."""

    config: HotspotConfig
    state: HotspotState

    def initial_state(self) -> HotspotState:
        return HotspotState()

    def can_submit(self, state: HotspotState) -> bool:
        return 1 <= len(state.marks) <= len(self.config.hotspots)

    def reward_total(self) -> int:
        return sum_rewards(self.config.hotspots, self.mode)

    def score(self, state: HotspotState, timed_out: bool) -> Score:
        return score_hotspots(self.config.hotspots, state.marks, self.mode)

    def user_actions(self, state: HotspotState) -> dict[str, Any]:
        return {"marks": [{"x": x, "y": y} for x, y in state.marks]}

    def restore_state(self, user_actions: Mapping[str, Any]) -> HotspotState:
        marks = tuple(
            (float(m.get("x", 0)), float(m.get("y", 0)))
            for m in user_actions.get("marks") or []
        )
        return HotspotState(marks=marks)

    def place_mark(self, x: float, y: float) -> bool:
        return self._dispatch(add_mark, self.config, x, y)

    def remove_mark(self, index: int) -> bool:
        return self._dispatch(remove_mark, index)

    @property
    def marks_left(self) -> int:
        return max(0, len(self.config.hotspots) - len(self.state.marks))

    def mark_hits(self) -> list[int | None]:
        """Hotspot index claimed by each mark (None for a miss), once feedback is visible."""
        if not self.show_feedback:
            return []
        assignment = match_hotspots(self.config.hotspots, self.state.marks)
        return [assignment.get(i) for i in range(len(self.state.marks))]


@register_validator(GameType.HOTSPOT)
class HotspotValidator(ConfigValidator):
    def check(self, config: HotspotConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Instruction is required")
        require_text(errors, config.image_url, "Image is required")
        if not config.hotspots:
            errors.append("At least one hotspot is required")

        for n, hotspot in enumerate(config.hotspots, 1):
            label = f"Hotspot {n}"
            require_text(errors, hotspot.label, f"{label}: Label is required")
            if not (0 <= hotspot.x <= 100 and 0 <= hotspot.y <= 100):
                errors.append(f"{label}: Position must be within the image (0-100%)")
            if hotspot.radius <= 0:
                errors.append(f"{label}: Radius must be greater than 0")
            check_reward(errors, hotspot, reward, label)
