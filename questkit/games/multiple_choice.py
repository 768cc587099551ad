"""
Multiple choice game.

Single-answer (radio) or multiple-answer (checkbox) selection. The
selected set must equal the set of correct options exactly; there is no
partial credit. The selection state and reducer are shared with the
scenario game.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import MultipleChoiceConfig
from .scoring import Score, score_choice, sum_rewards
from .validation import (
    ConfigValidator,
    RewardField,
    check_choice_options,
    check_reward,
    check_unique_ids,
    require_text,
)


@dataclass(frozen=True)
class SelectionState(RunState):
    selected: frozenset[str] = frozenset()


def toggle_option(
    state: SelectionState,
    option_ids: Iterable[str],
    option_id: str,
    allow_multiple: bool,
) -> SelectionState:
    """Checkbox toggles; radio replaces the selection (size is forced to 1)."""
    if option_id not in set(option_ids):
        return state
    if not allow_multiple:
        return replace(state, selected=frozenset({option_id}))
    return replace(state, selected=state.selected ^ {option_id})


class SelectionGame(BaseGame):
    """Shared engine for option-selection games."""

    state: SelectionState

    def initial_state(self) -> SelectionState:
        return SelectionState()

    def can_submit(self, state: SelectionState) -> bool:
        return len(state.selected) >= 1

    def user_actions(self, state: SelectionState) -> dict[str, Any]:
        # Keep option order so a review renders the same way
        return {"selected": [o.id for o in self.config.options if o.id in state.selected]}

    def restore_state(self, user_actions: Mapping[str, Any]) -> SelectionState:
        return SelectionState(selected=frozenset(str(i) for i in user_actions.get("selected") or []))

    def select(self, option_id: str) -> bool:
        return self._dispatch(
            toggle_option,
            [o.id for o in self.config.options],
            option_id,
            self.config.allow_multiple_correct,
        )

    @property
    def correct_ids(self) -> frozenset[str]:
        return frozenset(o.id for o in self.config.options if o.correct)

    def option_feedback(self) -> dict[str, str]:
        """
        Per-option state once feedback is visible:
        "correct" (selected, correct), "incorrect" (selected, wrong),
        "missed" (correct but not selected).
        """
        if not self.show_feedback:
            return {}
        states = {}
        for option in self.config.options:
            chosen = option.id in self.state.selected
            if chosen:
                states[option.id] = "correct" if option.correct else "incorrect"
            elif option.correct:
                states[option.id] = "missed"
        return states


@register(GameType.MULTIPLE_CHOICE)
class MultipleChoiceGame(SelectionGame):
    """Handler for multiple choice questions."""

    config: MultipleChoiceConfig

    def reward_total(self) -> int:
        configured = self.config.configured_total(self.mode)
        if configured:
            return configured
        return sum_rewards((o for o in self.config.options if o.correct), self.mode)

    def score(self, state: SelectionState, timed_out: bool) -> Score:
        return score_choice(state.selected, self.correct_ids, self.reward_total())


@register_validator(GameType.MULTIPLE_CHOICE)
class MultipleChoiceValidator(ConfigValidator):
    def check(self, config: MultipleChoiceConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Question is required")
        check_choice_options(errors, config.options, config.allow_multiple_correct)
        check_unique_ids(errors, (o.id for o in config.options), "Option")

        for n, option in enumerate(config.options, 1):
            label = f"Option {n}"
            if not option.text.strip() and not option.image_url:
                errors.append(f"{label}: Text or image is required")
            if option.correct:
                check_reward(errors, option, reward, label)
