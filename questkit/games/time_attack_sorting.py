"""
Time-attack sorting game.

Drag & drop against the clock: sort every item into its category before
the countdown ends. Submitting early is allowed once every item is placed;
on expiry whatever is placed gets scored and unplaced items count as missed.
"""

from __future__ import annotations

from typing import Any

from . import GameType, register, register_validator
from .drag_drop import PlacementGame, check_placement_config
from .models import TimeAttackSortingConfig
from .scoring import Score
from .validation import ConfigValidator, RewardField, check_time_limit


@register(GameType.TIME_ATTACK_SORTING)
class TimeAttackSortingGame(PlacementGame):
    """Placement game with a countdown."""

    config: TimeAttackSortingConfig

    @property
    def time_limit(self) -> int:
        return self.config.time_limit_seconds

    def result_extras(self, score: Score) -> dict[str, Any]:
        return {
            "incorrect_count": score.details["incorrect_count"],
            "missed_count": score.details["missed_count"],
        }


@register_validator(GameType.TIME_ATTACK_SORTING)
class TimeAttackSortingValidator(ConfigValidator):
    def check(self, config: TimeAttackSortingConfig, reward: RewardField, errors: list[str]) -> None:
        check_placement_config(config, reward, errors)
        check_time_limit(errors, config.time_limit_seconds, self.settings)
