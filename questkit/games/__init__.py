"""
Interactive mini-games for lessons and quizzes.

Each game type (hotspot, drag-drop, matching, etc.) has its own module with:
- a game engine: the per-instance state machine that scores and emits a GameResult
- a validator: the pure authoring check run before a config is saved
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseGame
    from .validation import ConfigValidator


class GameType(str, Enum):
    """Supported game types."""
    HOTSPOT = "hotspot"
    DRAG_DROP = "drag-drop"
    MATCHING = "matching"
    SEQUENCE = "sequence"
    TRUE_FALSE = "true-false"
    MULTIPLE_CHOICE = "multiple-choice"
    SCENARIO = "scenario"
    # Countdown-bearing types
    TIME_ATTACK_SORTING = "time-attack-sorting"
    MEMORY_FLIP = "memory-flip"
    PHOTO_SWIPE = "photo-swipe"


class Mode(str, Enum):
    """How a game is being run."""
    PREVIEW = "preview"  # presentation only: no input, scoring or timers
    LESSON = "lesson"    # inline feedback, celebration, try again
    QUIZ = "quiz"        # silent, result reported immediately


# Registries - populated by the @register / @register_validator decorators
GAMES: dict[GameType, type["BaseGame"]] = {}
VALIDATORS: dict[GameType, "ConfigValidator"] = {}


def register(game_type: GameType):
    """Decorator to register a game engine class."""
    def decorator(cls):
        cls.game_type = game_type
        GAMES[game_type] = cls
        return cls
    return decorator


def register_validator(game_type: GameType):
    """Decorator to register a config validator."""
    def decorator(cls):
        cls.game_type = game_type
        VALIDATORS[game_type] = cls()
        return cls
    return decorator


def _coerce(game_type: str | GameType) -> GameType | None:
    if isinstance(game_type, GameType):
        return game_type
    try:
        return GameType(game_type.lower())
    except (AttributeError, ValueError):
        return None


def get_game_class(game_type: str | GameType) -> "type[BaseGame] | None":
    """Get the engine class for a game type."""
    game_type = _coerce(game_type)
    return GAMES.get(game_type) if game_type else None


def get_validator(game_type: str | GameType) -> "ConfigValidator | None":
    """Get the validator for a game type."""
    game_type = _coerce(game_type)
    return VALIDATORS.get(game_type) if game_type else None


# Import games to trigger registration
from . import hotspot
from . import drag_drop
from . import matching
from . import sequence
from . import true_false
from . import multiple_choice
from . import scenario
# Countdown-bearing types
from . import time_attack_sorting
from . import memory_flip
from . import photo_swipe

_missing = [g.value for g in GameType if g not in GAMES or g not in VALIDATORS]
if _missing:
    raise ImportError(f"Game types without an engine or validator: {_missing}")

__all__ = [
    "GAMES",
    "GameType",
    "Mode",
    "VALIDATORS",
    "get_game_class",
    "get_validator",
    "register",
    "register_validator",
]
