"""
Authoring helpers.

What the editors show next to a config: how many scorable elements it has,
the reward they add up to, and the auto-calculated totalXp / totalPoints
written back before the config is saved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from . import GameType, Mode
from .base import GameConfigError, UnknownGameTypeError
from .models import (
    GameConfigBase,
    MemoryFlipConfig,
    PhotoSwipeConfig,
    Rewarded,
    ScenarioConfig,
    TimeAttackSortingConfig,
    parse_config,
)
from .scoring import round_half_up, sum_rewards


@dataclass(frozen=True)
class GameSummary:
    game_type: GameType
    element_count: int
    total_reward: int
    max_reward: int
    reward_label: str
    time_limit: int | None = None


# Scorable elements per game type
ELEMENTS: dict[GameType, Callable[[Any], list[Rewarded]]] = {
    GameType.HOTSPOT: lambda c: c.hotspots,
    GameType.DRAG_DROP: lambda c: c.items,
    GameType.TIME_ATTACK_SORTING: lambda c: c.items,
    GameType.MATCHING: lambda c: c.left_items,
    GameType.SEQUENCE: lambda c: c.items,
    GameType.TRUE_FALSE: lambda c: [c],
    GameType.MULTIPLE_CHOICE: lambda c: [o for o in c.options if o.correct],
    GameType.SCENARIO: lambda c: [o for o in c.options if o.correct],
    GameType.MEMORY_FLIP: lambda c: c.pairs,
    GameType.PHOTO_SWIPE: lambda c: c.cards,
}


def _parse(game_type: str | GameType, config: Mapping[str, Any] | GameConfigBase) -> tuple[GameType, GameConfigBase]:
    try:
        game_type = GameType(game_type)
    except ValueError as e:
        raise UnknownGameTypeError(game_type) from e
    try:
        return game_type, parse_config(game_type, config)
    except ValueError as e:
        raise GameConfigError(game_type.value, [str(e)]) from e


def _time_limit(config: GameConfigBase) -> int | None:
    if isinstance(config, (TimeAttackSortingConfig, MemoryFlipConfig)):
        return config.time_limit_seconds
    if isinstance(config, PhotoSwipeConfig) and config.time_attack_mode:
        return config.time_limit_seconds
    return None


def element_total(game_type: GameType, config: GameConfigBase, mode: Mode) -> int:
    """Sum of element rewards for the mode (the value the editors auto-fill)."""
    total = sum_rewards(ELEMENTS[game_type](config), mode)
    if total == 0 and isinstance(config, ScenarioConfig):
        total = config.reward(mode)
    return total


def summarize(
    game_type: str | GameType,
    config: Mapping[str, Any] | GameConfigBase,
    is_quiz_question: bool = False,
) -> GameSummary:
    game_type, parsed = _parse(game_type, config)
    mode = Mode.QUIZ if is_quiz_question else Mode.LESSON
    total = element_total(game_type, parsed, mode)
    max_reward = total
    if isinstance(parsed, MemoryFlipConfig):
        max_reward = round_half_up(total * parsed.perfect_game_multiplier)
    return GameSummary(
        game_type=game_type,
        element_count=len(ELEMENTS[game_type](parsed)),
        total_reward=total,
        max_reward=max_reward,
        reward_label="Points" if is_quiz_question else "XP",
        time_limit=_time_limit(parsed),
    )


def apply_totals(
    game_type: str | GameType,
    config: Mapping[str, Any],
    is_quiz_question: bool = False,
) -> dict[str, Any]:
    """
    Return a copy of config with totalXp (or totalPoints) auto-calculated.

    The other total is removed so a saved config never carries both.
    True/false has no total; its own xp/points is the reward.
    """
    game_type, parsed = _parse(game_type, config)
    result = dict(config)
    if game_type == GameType.TRUE_FALSE:
        return result
    mode = Mode.QUIZ if is_quiz_question else Mode.LESSON
    key, other = ("totalPoints", "totalXp") if is_quiz_question else ("totalXp", "totalPoints")
    result[key] = element_total(game_type, parsed, mode)
    result.pop(other, None)
    return result
