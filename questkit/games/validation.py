"""
Config validator capability.

One ConfigValidator subclass per game type, registered with
@register_validator. validate() never raises for authoring defects and
never mutates its input: it collects every problem in one pass and returns
them as user-facing messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Mapping

from loguru import logger
from pydantic import ValidationError

from questkit.config import Settings, get_settings

from . import GameType
from .models import GameConfigBase, Rewarded, format_validation_error, parse_config


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one config."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: Iterable[str]) -> "ValidationResult":
        errors = list(errors)
        return cls(valid=not errors, errors=errors)


@dataclass(frozen=True)
class RewardField:
    """Which reward field an author is filling in: points for quiz questions, xp otherwise."""

    name: str
    label: str

    @classmethod
    def for_question(cls, is_quiz_question: bool) -> "RewardField":
        return cls("points", "Points") if is_quiz_question else cls("xp", "XP")

    def value(self, element: Rewarded) -> int | None:
        return getattr(element, self.name)


class ConfigValidator:
    """
    Base validator.

    Subclasses implement check(config, reward, errors) and append a
    message per defect.
    """

    game_type: ClassVar[GameType]

    def validate(
        self,
        config: Mapping[str, Any] | GameConfigBase,
        is_quiz_question: bool = False,
        settings: Settings | None = None,
    ) -> ValidationResult:
        try:
            parsed = parse_config(self.game_type, config)
        except ValidationError as e:
            return ValidationResult.from_errors(format_validation_error(e))
        except (TypeError, ValueError) as e:
            return ValidationResult.from_errors([str(e)])

        errors: list[str] = []
        self.settings = settings or get_settings()
        self.check(parsed, RewardField.for_question(is_quiz_question), errors)
        if errors:
            logger.debug(f"{self.game_type.value} config has {len(errors)} defect(s)")
        return ValidationResult.from_errors(errors)

    def check(self, config: Any, reward: RewardField, errors: list[str]) -> None:
        raise NotImplementedError


# ============================================================================
# HELPERS
# ============================================================================

def require_text(errors: list[str], value: str | None, message: str) -> None:
    if not value or not value.strip():
        errors.append(message)


def check_reward(
    errors: list[str],
    element: Rewarded,
    reward: RewardField,
    label: str,
    allow_zero: bool = False,
) -> None:
    """Reward for the selected field must be > 0 (>= 0 when allow_zero)."""
    if element.xp is not None and element.points is not None:
        errors.append(f"{label}: Set either XP or points, not both")
    value = reward.value(element)
    if allow_zero:
        if value is not None and value < 0:
            errors.append(f"{label}: {reward.label} cannot be negative")
    elif value is None or value <= 0:
        errors.append(f"{label}: {reward.label} must be greater than 0")


def check_unique_ids(errors: list[str], ids: Iterable[str], kind: str) -> set[str]:
    """Report empty and duplicate ids; returns the set of known ids."""
    seen: set[str] = set()
    for position, element_id in enumerate(ids, 1):
        if not element_id:
            errors.append(f"{kind} {position}: ID is required")
        elif element_id in seen:
            errors.append(f"Duplicate {kind.lower()} ID '{element_id}'")
        seen.add(element_id)
    seen.discard("")
    return seen


def check_time_limit(errors: list[str], seconds: int | None, settings: Settings) -> None:
    low, high = settings.min_time_limit_seconds, settings.max_time_limit_seconds
    if seconds is None or not low <= seconds <= high:
        errors.append(f"Time limit must be between {low} and {high} seconds")


def check_choice_options(
    errors: list[str],
    options: list,
    allow_multiple_correct: bool,
) -> None:
    """Option-count rules shared by multiple-choice and scenario."""
    if len(options) < 2:
        errors.append("At least 2 options are required")
    correct = sum(1 for option in options if option.correct)
    if correct == 0:
        errors.append("At least one option must be marked correct")
    elif correct > 1 and not allow_multiple_correct:
        errors.append("Only one option can be correct unless multiple correct answers are allowed")
