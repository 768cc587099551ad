"""
True/False game.

User picks True or False for a single statement. All-or-nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import TrueFalseConfig
from .scoring import Score, score_true_false
from .validation import ConfigValidator, RewardField, check_reward, require_text


@dataclass(frozen=True)
class TrueFalseState(RunState):
    answer: bool | None = None


def choose(state: TrueFalseState, answer: bool) -> TrueFalseState:
    return replace(state, answer=bool(answer))


@register(GameType.TRUE_FALSE)
class TrueFalseGame(BaseGame):
    """Handler for true/false statements."""

    config: TrueFalseConfig
    state: TrueFalseState

    def initial_state(self) -> TrueFalseState:
        return TrueFalseState()

    def can_submit(self, state: TrueFalseState) -> bool:
        return state.answer is not None

    def reward_total(self) -> int:
        return self.config.reward(self.mode)

    def score(self, state: TrueFalseState, timed_out: bool) -> Score:
        if state.answer is None:
            return Score(success=False, earned=0, correct_count=0, total_count=1, mistakes=0)
        return score_true_false(self.config.correct_answer, state.answer, self.reward_total())

    def user_actions(self, state: TrueFalseState) -> dict[str, Any]:
        return {"answer": state.answer}

    def restore_state(self, user_actions: Mapping[str, Any]) -> TrueFalseState:
        answer = user_actions.get("answer")
        return TrueFalseState(answer=None if answer is None else bool(answer))

    def select(self, answer: bool) -> bool:
        return self._dispatch(choose, answer)

    def explanation(self) -> str | None:
        """Explanation for the chosen answer, once feedback is visible."""
        if not self.show_feedback or self.state.answer is None:
            return None
        return self.config.true_explanation if self.state.answer else self.config.false_explanation


@register_validator(GameType.TRUE_FALSE)
class TrueFalseValidator(ConfigValidator):
    def check(self, config: TrueFalseConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Instruction is required")
        require_text(errors, config.statement, "Statement is required")
        if config.correct_answer is None:
            errors.append("Correct answer (True or False) must be selected")
        check_reward(errors, config, reward, "Statement")
