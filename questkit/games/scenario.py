"""
Scenario game.

A short situation and a question; the user picks one or more responses.
Each correctly selected correct option earns its own reward (partial
credit). A "perfect" answer needs the selected set to equal the correct set.
"""

from __future__ import annotations

from . import GameType, register, register_validator
from .models import ScenarioConfig
from .multiple_choice import SelectionGame, SelectionState
from .scoring import Score, score_scenario
from .validation import (
    ConfigValidator,
    RewardField,
    check_choice_options,
    check_unique_ids,
    require_text,
)


@register(GameType.SCENARIO)
class ScenarioGame(SelectionGame):
    """Handler for branching-free scenario questions."""

    config: ScenarioConfig

    def fallback_reward(self) -> int:
        """Config-level reward used when no option carries one."""
        return self.config.configured_total(self.mode) or self.config.reward(self.mode)

    def reward_total(self) -> int:
        option_sum = sum(o.reward(self.mode) for o in self.config.options if o.correct)
        return option_sum or self.fallback_reward()

    def score(self, state: SelectionState, timed_out: bool) -> Score:
        return score_scenario(
            self.config.options,
            state.selected,
            self.mode,
            fallback_reward=self.fallback_reward(),
            allow_multiple=self.config.allow_multiple_correct,
        )

    def option_messages(self) -> dict[str, str]:
        """Author feedback for each selected option, once feedback is visible."""
        if not self.show_feedback:
            return {}
        return {
            o.id: o.feedback
            for o in self.config.options
            if o.id in self.state.selected and o.feedback
        }


@register_validator(GameType.SCENARIO)
class ScenarioValidator(ConfigValidator):
    def check(self, config: ScenarioConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.scenario, "Scenario is required")
        require_text(errors, config.question, "Question is required")
        check_choice_options(errors, config.options, config.allow_multiple_correct)
        check_unique_ids(errors, (o.id for o in config.options), "Option")

        if config.xp is not None and config.points is not None:
            errors.append("Scenario: Set either XP or points, not both")

        has_option_rewards = any((reward.value(o) or 0) > 0 for o in config.options)
        for n, option in enumerate(config.options, 1):
            label = f"Option {n}"
            require_text(errors, option.text, f"{label}: Text is required")
            if option.xp is not None and option.points is not None:
                errors.append(f"{label}: Set either XP or points, not both")
            value = reward.value(option)
            if value is not None and value < 0:
                errors.append(f"{label}: {reward.label} cannot be negative")
            if has_option_rewards and option.correct and not (value or 0) > 0:
                errors.append(f"{label}: {reward.label} must be greater than 0 for a correct option")

        if not has_option_rewards:
            total = getattr(config, f"total_{reward.name}")
            if not ((total or 0) > 0 or (reward.value(config) or 0) > 0):
                errors.append(f"{reward.label} must be greater than 0 (on the scenario or its correct options)")
