"""
Game dispatcher.

Maps a gameType tag to its engine, mounts it with config, mode and any
previous state, and owns the single floating timer display that countdown
games publish into.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from loguru import logger

from questkit.config import Settings, get_settings

from . import GameType, Mode, get_game_class, get_validator
from .base import BaseGame, GameFeedback, GameResult, UnknownGameTypeError
from .clock import Scheduler, VirtualScheduler
from .models import GameConfigBase
from .timer import FloatingTimer, TimerState
from .validation import ValidationResult


class GameDispatcher:
    """
    Mounts games for one player session.

    Games mounted by the same dispatcher share its scheduler and its
    FloatingTimer; each mount still owns its own RunState and ticker.
    """

    def __init__(self, scheduler: Scheduler | None = None, settings: Settings | None = None):
        self.scheduler = scheduler or VirtualScheduler()
        self.settings = settings or get_settings()
        self.floating_timer = FloatingTimer()
        self._mounted: list[BaseGame] = []

    @property
    def mounted(self) -> list[BaseGame]:
        return list(self._mounted)

    def resolve(self, game_type: str | GameType) -> type[BaseGame]:
        game_class = get_game_class(game_type)
        if game_class is None:
            raise UnknownGameTypeError(game_type)
        return game_class

    def mount(
        self,
        game_type: str | GameType,
        config: Mapping[str, Any] | GameConfigBase,
        mode: Mode | str = Mode.LESSON,
        previous_state: Any = None,
        on_complete: Callable[[GameResult], None] | None = None,
        on_feedback: Callable[[GameFeedback], None] | None = None,
        **kwargs: Any,
    ) -> BaseGame:
        """
        Create and start the engine for game_type.

        Args:
            game_type: gameType tag, e.g. "drag-drop"
            config: raw config JSON (camelCase) or a parsed config model
            mode: preview | lesson | quiz
            previous_state: stored GameResult (or the runner's wrapper) to
                replay read-only
            on_complete: called once per submission with the GameResult
            on_feedback: lesson-mode feedback listener

        Raises:
            UnknownGameTypeError: no engine registered for game_type
            GameConfigError: config cannot be parsed for game_type
        """
        game_class = self.resolve(game_type)
        game = game_class(
            config,
            mode,
            scheduler=self.scheduler,
            settings=self.settings,
            on_complete=on_complete,
            on_feedback=on_feedback,
            on_timer_update=self._on_timer_update,
            previous_state=previous_state,
            **kwargs,
        )
        game.start()
        self._mounted.append(game)
        logger.debug(
            f"Mounted {game.game_type.value} ({game.mode.value})"
            f"{' read-only' if game.read_only else ''}"
        )
        return game

    def unmount(self, game: BaseGame) -> None:
        game.unmount()
        if game in self._mounted:
            self._mounted.remove(game)
        if not any(g.timer and g.timer.running for g in self._mounted):
            self.floating_timer.clear()

    def unmount_all(self) -> None:
        for game in list(self._mounted):
            self.unmount(game)

    def validate(
        self,
        game_type: str | GameType,
        config: Mapping[str, Any] | GameConfigBase,
        is_quiz_question: bool = False,
    ) -> ValidationResult:
        validator = get_validator(game_type)
        if validator is None:
            raise UnknownGameTypeError(game_type)
        return validator.validate(config, is_quiz_question, settings=self.settings)

    def _on_timer_update(self, state: TimerState | None) -> None:
        if state is None and any(g.timer and g.timer.running for g in self._mounted):
            return
        self.floating_timer.update(state)
