"""
Game configuration models.

One pydantic model per game type, combined into a tagged union keyed by
`game_type`. Models mirror the camelCase JSON the authoring surface
produces, and every field has a default: an incomplete config still parses,
so the validator can report all of its defects in one pass and a config
with dangling references can still be played.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from . import GameType, Mode


class ConfigModel(BaseModel):
    """Base for config models: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump back to the camelCase JSON shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Rewarded(ConfigModel):
    """Elements that carry a reward: xp in lessons, points in quizzes."""

    xp: int | None = None
    points: int | None = None

    def reward(self, mode: Mode | str) -> int:
        """Reward for the run mode; missing rewards count as zero."""
        value = self.points if Mode(mode) == Mode.QUIZ else self.xp
        return value or 0


class GameConfigBase(ConfigModel):
    """Fields every game config shares."""

    instruction: str = ""
    general_feedback: str | None = None
    total_xp: int | None = None
    total_points: int | None = None

    def configured_total(self, mode: Mode | str) -> int | None:
        """Author-set (or auto-calculated) total for the mode, if any."""
        return self.total_points if Mode(mode) == Mode.QUIZ else self.total_xp


# ============================================================================
# HOTSPOT
# ============================================================================

class Hotspot(Rewarded):
    x: float = 0.0       # percentage (0-100)
    y: float = 0.0       # percentage (0-100)
    radius: float = 0.0  # percentage
    label: str = ""
    explanation: str | None = None


class HotspotConfig(GameConfigBase):
    game_type: Literal["hotspot"] = "hotspot"
    image_url: str = ""
    hotspots: list[Hotspot] = Field(default_factory=list)


# ============================================================================
# DRAG & DROP / TIME-ATTACK SORTING
# ============================================================================

class DragDropItem(Rewarded):
    id: str = ""
    content: str = ""
    image_url: str | None = None
    correct_target_id: str = ""
    explanation: str | None = None


class DragDropTarget(ConfigModel):
    id: str = ""
    label: str = ""


class DragDropConfig(GameConfigBase):
    game_type: Literal["drag-drop"] = "drag-drop"
    items: list[DragDropItem] = Field(default_factory=list)
    targets: list[DragDropTarget] = Field(default_factory=list)


class TimeAttackSortingConfig(GameConfigBase):
    game_type: Literal["time-attack-sorting"] = "time-attack-sorting"
    items: list[DragDropItem] = Field(default_factory=list)
    targets: list[DragDropTarget] = Field(default_factory=list)
    time_limit_seconds: int = 60


# ============================================================================
# MATCHING
# ============================================================================

class MatchingItem(Rewarded):
    id: str = ""
    text: str = ""
    image_url: str | None = None
    explanation: str | None = None


class MatchingPair(ConfigModel):
    left_id: str = ""
    right_id: str = ""


class MatchingConfig(GameConfigBase):
    game_type: Literal["matching"] = "matching"
    left_items: list[MatchingItem] = Field(default_factory=list)
    right_items: list[MatchingItem] = Field(default_factory=list)
    pairs: list[MatchingPair] = Field(default_factory=list)


# ============================================================================
# SEQUENCE
# ============================================================================

class SequenceItem(Rewarded):
    id: str = ""
    content: str = ""
    image_url: str | None = None
    explanation: str | None = None


class SequenceConfig(GameConfigBase):
    game_type: Literal["sequence"] = "sequence"
    items: list[SequenceItem] = Field(default_factory=list)
    correct_order: list[str] = Field(default_factory=list)


# ============================================================================
# TRUE / FALSE
# ============================================================================

class TrueFalseConfig(GameConfigBase, Rewarded):
    game_type: Literal["true-false"] = "true-false"
    statement: str = ""
    correct_answer: bool | None = None
    true_explanation: str | None = None
    false_explanation: str | None = None
    image_url: str | None = None


# ============================================================================
# MULTIPLE CHOICE
# ============================================================================

class ChoiceOption(Rewarded):
    id: str = ""
    text: str = ""
    correct: bool = False
    image_url: str | None = None
    explanation: str | None = None


class MultipleChoiceConfig(GameConfigBase):
    game_type: Literal["multiple-choice"] = "multiple-choice"
    instruction_image_url: str | None = None
    options: list[ChoiceOption] = Field(default_factory=list)
    allow_multiple_correct: bool = False


# ============================================================================
# SCENARIO
# ============================================================================

class ScenarioOption(Rewarded):
    id: str = ""
    text: str = ""
    correct: bool = False
    feedback: str | None = None
    image_url: str | None = None


class ScenarioConfig(GameConfigBase, Rewarded):
    game_type: Literal["scenario"] = "scenario"
    scenario: str = ""
    question: str = ""
    image_url: str | None = None
    options: list[ScenarioOption] = Field(default_factory=list)
    allow_multiple_correct: bool = False


# ============================================================================
# MEMORY FLIP
# ============================================================================

class MemoryFlipCard(ConfigModel):
    id: str = ""
    text: str | None = None
    image_url: str | None = None


class MemoryFlipPair(Rewarded):
    left_id: str = ""
    right_id: str = ""


class MemoryFlipConfig(GameConfigBase):
    game_type: Literal["memory-flip"] = "memory-flip"
    cards: list[MemoryFlipCard] = Field(default_factory=list)
    pairs: list[MemoryFlipPair] = Field(default_factory=list)
    time_limit_seconds: int = 60
    perfect_game_multiplier: float = 2.0


# ============================================================================
# PHOTO SWIPE
# ============================================================================

class PhotoSwipeCard(Rewarded):
    id: str = ""
    image_url: str = ""
    is_correct: Literal["safe", "unsafe"] | None = None
    explanation: str = ""


class PhotoSwipeConfig(GameConfigBase):
    game_type: Literal["photo-swipe"] = "photo-swipe"
    cards: list[PhotoSwipeCard] = Field(default_factory=list)
    time_attack_mode: bool = False
    time_limit_seconds: int | None = 30


# ============================================================================
# TAGGED UNION
# ============================================================================

GameConfig = Annotated[
    Union[
        HotspotConfig,
        DragDropConfig,
        MatchingConfig,
        SequenceConfig,
        TrueFalseConfig,
        MultipleChoiceConfig,
        ScenarioConfig,
        TimeAttackSortingConfig,
        MemoryFlipConfig,
        PhotoSwipeConfig,
    ],
    Field(discriminator="game_type"),
]

CONFIG_MODELS: dict[GameType, type[GameConfigBase]] = {
    GameType.HOTSPOT: HotspotConfig,
    GameType.DRAG_DROP: DragDropConfig,
    GameType.MATCHING: MatchingConfig,
    GameType.SEQUENCE: SequenceConfig,
    GameType.TRUE_FALSE: TrueFalseConfig,
    GameType.MULTIPLE_CHOICE: MultipleChoiceConfig,
    GameType.SCENARIO: ScenarioConfig,
    GameType.TIME_ATTACK_SORTING: TimeAttackSortingConfig,
    GameType.MEMORY_FLIP: MemoryFlipConfig,
    GameType.PHOTO_SWIPE: PhotoSwipeConfig,
}

_GAME_CONFIG_ADAPTER: TypeAdapter[GameConfig] = TypeAdapter(GameConfig)


def parse_config(game_type: GameType | str, data: dict[str, Any] | GameConfigBase) -> GameConfigBase:
    """
    Parse raw config JSON into the model for game_type.

    Raises pydantic.ValidationError when a value has the wrong shape
    (e.g. a string where a number belongs).
    """
    game_type = GameType(game_type)
    if isinstance(data, GameConfigBase):
        if data.game_type != game_type.value:
            raise ValueError(
                f"Config is for '{data.game_type}', expected '{game_type.value}'"
            )
        return data
    payload = {**data, "gameType": game_type.value}
    payload.pop("game_type", None)
    return _GAME_CONFIG_ADAPTER.validate_python(payload)


def format_validation_error(error: ValidationError) -> list[str]:
    """Human-readable messages for every error pydantic collected."""
    tags = {g.value for g in GameType}
    messages = []
    for err in error.errors():
        parts = [str(part) for part in err.get("loc", ())]
        # Discriminated unions prefix the location with the variant tag
        if parts and parts[0] in tags:
            parts = parts[1:]
        location = ".".join(parts)
        msg = err.get("msg", "invalid value")
        messages.append(f"{location}: {msg}" if location else msg)
    return messages
