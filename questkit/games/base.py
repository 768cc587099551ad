"""
Shared contract for every game type.

- GameStatus: Idle -> Interacting -> Submitted -> Complete (+ TimedOut)
- GameResult: the one-per-submission output consumed by the lesson/quiz runner
- BaseGame: the engine template; subclasses supply the RunState, the
  reducers, the submit precondition and the scoring rule
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from questkit.config import Settings, get_settings

from . import GameType, Mode
from .clock import Scheduler, TimerHandle, VirtualScheduler
from .models import GameConfigBase, format_validation_error, parse_config
from .scoring import Score, round_half_up
from .timer import Ticker, TimerState


# ============================================================================
# ERRORS
# ============================================================================

class QuestkitError(Exception):
    """Base class for questkit errors."""


class GameConfigError(QuestkitError):
    """A config could not be parsed into its game type's model at play time."""

    def __init__(self, game_type: GameType | str, messages: list[str]):
        self.game_type = game_type
        self.messages = messages
        super().__init__(f"Unplayable {game_type} config: {'; '.join(messages)}")


class UnknownGameTypeError(QuestkitError):
    """No engine is registered for the requested game type."""

    def __init__(self, game_type: Any):
        self.game_type = game_type
        super().__init__(f"Unknown game type: {game_type!r}")


# ============================================================================
# STATUS / RESULT
# ============================================================================

class GameStatus(str, Enum):
    IDLE = "idle"
    INTERACTING = "interacting"
    SUBMITTED = "submitted"    # scored, lesson feedback showing
    COMPLETE = "complete"      # result emitted
    TIMED_OUT = "timed_out"    # countdown expired (terminal)


class GameResult(BaseModel):
    """
    Outcome of one submission.

    Serialized with camelCase keys (earnedXp, timeSpent, userActions...).
    Exactly one of earned_xp / earned_points is set, matching the run mode.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    success: bool = False
    attempts: int = 1
    time_spent: int = 0
    earned_xp: int | None = None
    earned_points: int | None = None
    correct_count: int | None = None
    total_count: int | None = None
    mistakes: int | None = None
    user_actions: dict[str, Any] | None = None
    # Type-specific extras
    correct_positions: list[bool] | None = None
    incorrect_count: int | None = None
    missed_count: int | None = None
    timed_out: bool = False

    @model_validator(mode="after")
    def _one_reward_field(self) -> "GameResult":
        if self.earned_xp is not None and self.earned_points is not None:
            raise ValueError("earnedXp and earnedPoints cannot both be set")
        return self

    @property
    def earned(self) -> int:
        """Reward regardless of mode."""
        if self.earned_points is not None:
            return self.earned_points
        return self.earned_xp or 0

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def for_mode(cls, mode: Mode | str, earned: int, **fields: Any) -> "GameResult":
        """Build a result with the reward in the field the mode reports."""
        if Mode(mode) == Mode.QUIZ:
            return cls(earned_points=earned, **fields)
        return cls(earned_xp=earned, **fields)

    @classmethod
    def from_previous_state(cls, previous: Any) -> "GameResult":
        """
        Accept a stored result in any of the shapes the runner keeps.

        - a GameResult
        - its camelCase / snake_case dict
        - the runner's {"userActions": ..., "result": {...}} wrapper
        """
        if isinstance(previous, GameResult):
            return previous
        if not isinstance(previous, Mapping):
            raise TypeError(f"Cannot restore from {type(previous).__name__}")
        data = dict(previous)
        inner = data.pop("result", None)
        if isinstance(inner, Mapping):
            data = {**inner, **data}
        return cls.model_validate(data)


@dataclass(frozen=True)
class GameFeedback:
    """Lesson-mode feedback published right after scoring."""

    result: GameResult
    celebrate: bool
    message: str


@dataclass(frozen=True)
class RunState:
    """Base for per-type immutable interaction snapshots."""


Reducer = Callable[..., RunState]


# ============================================================================
# ENGINE
# ============================================================================

class BaseGame:
    """
    Game engine template.

    Subclasses implement:
        initial_state(), can_submit(state), score(state, timed_out),
        user_actions(state), restore_state(user_actions)
    and expose interaction methods that route pure reducers through
    _dispatch(). Everything else (mode guards, idempotent submission,
    lesson feedback delay, countdown, resume) lives here.
    """

    game_type: ClassVar[GameType]
    feedback_delay_setting: ClassVar[str] = "feedback_delay_seconds"

    def __init__(
        self,
        config: Mapping[str, Any] | GameConfigBase,
        mode: Mode | str = Mode.LESSON,
        *,
        scheduler: Scheduler | None = None,
        settings: Settings | None = None,
        on_complete: Callable[[GameResult], None] | None = None,
        on_feedback: Callable[[GameFeedback], None] | None = None,
        on_timer_update: Callable[[TimerState | None], None] | None = None,
        previous_state: Any = None,
        rng: random.Random | None = None,
    ):
        self.config = self._parse(config)
        self.mode = Mode(mode)
        self.scheduler = scheduler or VirtualScheduler()
        self.settings = settings or get_settings()
        self.on_complete = on_complete
        self.on_feedback = on_feedback
        self.on_timer_update = on_timer_update
        self.rng = rng or random.Random()

        self.status = GameStatus.IDLE
        self.attempts = 0
        self.result: GameResult | None = None
        self.feedback: GameFeedback | None = None
        self.hidden_media: frozenset[str] = frozenset()
        self.read_only = False

        self._started_at = self.scheduler.now()
        self._ticker: Ticker | None = None
        self._counting = False
        self._pending: TimerHandle | None = None
        self._pending_result: GameResult | None = None

        self.state = self.initial_state()
        if previous_state is not None:
            self.restore(previous_state)

    def _parse(self, config: Mapping[str, Any] | GameConfigBase) -> GameConfigBase:
        try:
            return parse_config(self.game_type, config)
        except ValidationError as e:
            raise GameConfigError(self.game_type.value, format_validation_error(e)) from e
        except (TypeError, ValueError) as e:
            raise GameConfigError(self.game_type.value, [str(e)]) from e

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def initial_state(self) -> RunState:
        raise NotImplementedError

    def can_submit(self, state: RunState) -> bool:
        """Completeness precondition for an explicit submit."""
        raise NotImplementedError

    def score(self, state: RunState, timed_out: bool) -> Score:
        raise NotImplementedError

    def user_actions(self, state: RunState) -> dict[str, Any]:
        """Replay snapshot stored in GameResult.user_actions."""
        raise NotImplementedError

    def restore_state(self, user_actions: Mapping[str, Any]) -> RunState:
        raise NotImplementedError

    def result_extras(self, score: Score) -> dict[str, Any]:
        """Type-specific GameResult fields."""
        return {}

    @property
    def time_limit(self) -> int | None:
        """Countdown length in seconds, or None for untimed games."""
        return None

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def is_preview(self) -> bool:
        return self.mode == Mode.PREVIEW

    @property
    def is_quiz(self) -> bool:
        return self.mode == Mode.QUIZ

    @property
    def is_submitted(self) -> bool:
        return self.status in (GameStatus.SUBMITTED, GameStatus.COMPLETE, GameStatus.TIMED_OUT)

    @property
    def show_feedback(self) -> bool:
        """Lessons and read-only reviews show per-element correctness."""
        return self.is_submitted and (self.mode == Mode.LESSON or self.read_only)

    @property
    def accepts_input(self) -> bool:
        return not (self.is_preview or self.read_only or self.is_submitted)

    @property
    def feedback_delay(self) -> float:
        return getattr(self.settings, self.feedback_delay_setting)

    @property
    def timer(self) -> Ticker | None:
        return self._ticker

    def reward_total(self) -> int:
        """Reward available for this run's mode."""
        return 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin the run; starts the countdown for time-bounded games."""
        self._started_at = self.scheduler.now()
        if self.is_preview or self.read_only or self.time_limit is None:
            return
        if self._ticker is None:
            self._ticker = Ticker(
                self.scheduler,
                self.time_limit,
                on_tick=self._on_tick,
                on_expire=self._on_expire,
                interval=self.settings.tick_interval_seconds,
            )
        self._ticker.start()
        self._counting = True

    def unmount(self) -> None:
        """Stop timers; a result still waiting on the feedback delay is delivered now."""
        self._stop_timer()
        self._flush_pending()
        logger.debug(f"{self.game_type.value} unmounted")

    def _stop_timer(self) -> None:
        if self._ticker is not None and self._ticker.running:
            self._ticker.stop()
        if not self._counting:
            return
        self._counting = False
        if self.on_timer_update:
            self.on_timer_update(None)

    def _on_tick(self, state: TimerState) -> None:
        if self.on_timer_update and not self.is_submitted:
            self.on_timer_update(state)

    def _on_expire(self) -> None:
        if self.is_submitted:
            return
        logger.debug(f"{self.game_type.value} timed out")
        self._finish(timed_out=True)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def _dispatch(self, reducer: Reducer, *args: Any) -> bool:
        """Apply a pure reducer to the current state. Returns True if it changed."""
        if not self.accepts_input:
            return False
        new_state = reducer(self.state, *args)
        if new_state == self.state:
            return False
        self.state = new_state
        if self.status == GameStatus.IDLE:
            self.status = GameStatus.INTERACTING
            logger.debug(f"{self.game_type.value}: idle -> interacting")
        return True

    def mark_media_failed(self, element_id: str) -> None:
        """Hide an element whose image failed to load."""
        if element_id in self.hidden_media:
            return
        logger.warning(f"{self.game_type.value}: media failed for '{element_id}', hiding it")
        self.hidden_media = self.hidden_media | {element_id}

    @property
    def ready_to_submit(self) -> bool:
        return self.accepts_input and self.can_submit(self.state)

    def submit(self) -> GameResult | None:
        """
        Score the current state.

        Ignored in preview, once submitted, or while the precondition is
        unmet. Returns the result when scoring happened.
        """
        if not self.accepts_input:
            return None
        if not self.can_submit(self.state):
            logger.debug(f"{self.game_type.value}: submit ignored, response incomplete")
            return None
        return self._finish(timed_out=False)

    def try_again(self) -> bool:
        """Lesson only: clear the response and play again."""
        if self.mode != Mode.LESSON or self.read_only:
            return False
        if self.status not in (GameStatus.SUBMITTED, GameStatus.COMPLETE):
            return False
        self._flush_pending()
        self.state = self.initial_state()
        self.feedback = None
        self.status = GameStatus.INTERACTING
        logger.debug(f"{self.game_type.value}: try again (attempt {self.attempts + 1})")
        self.start()
        return True

    # ------------------------------------------------------------------
    # Scoring / emission
    # ------------------------------------------------------------------

    def _elapsed(self) -> int:
        return round_half_up(max(0.0, self.scheduler.now() - self._started_at))

    def _finish(self, timed_out: bool) -> GameResult:
        self._stop_timer()
        self.attempts += 1
        score = self.score(self.state, timed_out)
        result = GameResult.for_mode(
            self.mode,
            score.earned,
            success=score.success and not timed_out,
            attempts=self.attempts,
            time_spent=self.time_limit if timed_out and self.time_limit else self._elapsed(),
            correct_count=score.correct_count,
            total_count=score.total_count,
            mistakes=score.mistakes,
            user_actions=self.user_actions(self.state),
            timed_out=timed_out,
            **self.result_extras(score),
        )
        self.result = result
        self.status = GameStatus.TIMED_OUT if timed_out else GameStatus.SUBMITTED
        logger.info(
            f"{self.game_type.value} scored: success={result.success} "
            f"earned={result.earned} attempt={result.attempts}"
        )

        if self.is_quiz:
            self._emit(result)
            return result

        self.feedback = GameFeedback(
            result=result,
            celebrate=result.success,
            message=self.feedback_message(result),
        )
        if self.on_feedback:
            self.on_feedback(self.feedback)
        self._pending_result = result
        self._pending = self.scheduler.call_later(self.feedback_delay, self._flush_pending)
        return result

    def feedback_message(self, result: GameResult) -> str:
        if result.timed_out:
            return "Time's up!"
        if result.success:
            return self.config.general_feedback or "Perfect!"
        return self.config.general_feedback or "Not quite. Review the feedback and try again."

    def _flush_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        result, self._pending_result = self._pending_result, None
        if result is not None:
            self._emit(result)

    def _emit(self, result: GameResult) -> None:
        if self.status == GameStatus.SUBMITTED:
            self.status = GameStatus.COMPLETE
        if self.on_complete:
            self.on_complete(result)

    # ------------------------------------------------------------------
    # Resume
    # ------------------------------------------------------------------

    def restore(self, previous_state: Any) -> None:
        """Rebuild the final submitted view from a stored result. Read-only, never emits."""
        result = GameResult.from_previous_state(previous_state)
        self._stop_timer()
        self.state = self.restore_state(result.user_actions or {})
        self.result = result
        self.attempts = result.attempts
        self.status = GameStatus.COMPLETE
        self.read_only = True
        logger.debug(f"{self.game_type.value} restored read-only from previous state")
