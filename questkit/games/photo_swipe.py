"""
Photo swipe game.

Cards are shown one at a time; the user swipes right for "safe" and left
for "unsafe". A correct swipe earns the card's reward and advances. In
practice mode an incorrect swipe shows the card's explanation and blocks
until acknowledged; in time-attack mode every swipe advances immediately
and a countdown runs. The game completes when every card is classified.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .models import PhotoSwipeCard, PhotoSwipeConfig
from .scoring import SWIPE_LEFT, SWIPE_RIGHT, Score, is_correct_swipe, sum_rewards
from .validation import (
    ConfigValidator,
    RewardField,
    check_reward,
    check_time_limit,
    check_unique_ids,
    require_text,
)

DEFAULT_TIME_LIMIT = 30


@dataclass(frozen=True)
class Swipe:
    card_id: str
    choice: str
    correct: bool


@dataclass(frozen=True)
class PhotoSwipeState(RunState):
    index: int = 0                       # position of the current card
    swipes: tuple[Swipe, ...] = ()
    skipped: tuple[str, ...] = ()        # cards whose image failed to load
    offset: float = 0.0                  # horizontal drag offset of the current card (px)
    awaiting_ack: bool = False           # incorrect practice swipe, explanation showing


def drag_card(state: PhotoSwipeState, offset: float) -> PhotoSwipeState:
    if state.awaiting_ack:
        return state
    return replace(state, offset=float(offset))


def swipe_card(
    state: PhotoSwipeState,
    config: PhotoSwipeConfig,
    choice: str,
    block_on_mistake: bool,
) -> PhotoSwipeState:
    if choice not in (SWIPE_LEFT, SWIPE_RIGHT):
        return state
    if state.awaiting_ack or state.index >= len(config.cards):
        return state
    card = config.cards[state.index]
    correct = is_correct_swipe(card, choice)
    swipes = state.swipes + (Swipe(card.id, choice, correct),)
    if not correct and block_on_mistake:
        return replace(state, swipes=swipes, offset=0.0, awaiting_ack=True)
    return replace(state, swipes=swipes, offset=0.0, index=state.index + 1)


def acknowledge_mistake(state: PhotoSwipeState) -> PhotoSwipeState:
    if not state.awaiting_ack:
        return state
    return replace(state, awaiting_ack=False, index=state.index + 1)


def skip_card(state: PhotoSwipeState, config: PhotoSwipeConfig, card_id: str) -> PhotoSwipeState:
    """Drop the current card from play (its image could not be shown)."""
    if state.index >= len(config.cards) or config.cards[state.index].id != card_id:
        return state
    if state.awaiting_ack:
        return state
    return replace(state, skipped=state.skipped + (card_id,), offset=0.0, index=state.index + 1)


@register(GameType.PHOTO_SWIPE)
class PhotoSwipeGame(BaseGame):
    """Classify photos as safe or unsafe."""

    config: PhotoSwipeConfig
    state: PhotoSwipeState

    def initial_state(self) -> PhotoSwipeState:
        return PhotoSwipeState()

    @property
    def time_limit(self) -> int | None:
        if not self.config.time_attack_mode:
            return None
        return self.config.time_limit_seconds or DEFAULT_TIME_LIMIT

    @property
    def blocks_on_mistake(self) -> bool:
        return not self.config.time_attack_mode

    def can_submit(self, state: PhotoSwipeState) -> bool:
        # Completion is automatic once the last card is classified
        return False

    def reward_total(self) -> int:
        return sum_rewards(self.config.cards, self.mode)

    def score(self, state: PhotoSwipeState, timed_out: bool) -> Score:
        cards = {c.id: c for c in self.config.cards}
        earned = sum(cards[s.card_id].reward(self.mode) for s in state.swipes if s.correct)
        correct = sum(1 for s in state.swipes if s.correct)
        return Score(
            success=state.index >= len(self.config.cards),
            earned=earned,
            correct_count=correct,
            total_count=len(self.config.cards),
            mistakes=len(state.swipes) - correct,
        )

    def user_actions(self, state: PhotoSwipeState) -> dict[str, Any]:
        return {
            "swipes": [
                {"cardId": s.card_id, "choice": s.choice, "correct": s.correct}
                for s in state.swipes
            ],
            "skipped": list(state.skipped),
        }

    def restore_state(self, user_actions: Mapping[str, Any]) -> PhotoSwipeState:
        swipes = tuple(
            Swipe(str(s.get("cardId", "")), str(s.get("choice", "")), bool(s.get("correct")))
            for s in user_actions.get("swipes") or []
        )
        skipped = tuple(str(i) for i in user_actions.get("skipped") or [])
        return PhotoSwipeState(index=len(swipes) + len(skipped), swipes=swipes, skipped=skipped)

    # Interaction ------------------------------------------------------

    @property
    def current_card(self) -> PhotoSwipeCard | None:
        if self.state.index >= len(self.config.cards):
            return None
        return self.config.cards[self.state.index]

    @property
    def last_swipe(self) -> Swipe | None:
        return self.state.swipes[-1] if self.state.swipes else None

    def drag(self, offset: float) -> bool:
        return self._dispatch(drag_card, offset)

    def release(self, velocity: float = 0.0) -> bool:
        """
        End a drag gesture.

        Commits a swipe when the card travelled past the offset threshold or
        was flung faster than the velocity threshold; otherwise snaps back.
        """
        offset = self.state.offset
        if (
            abs(offset) > self.settings.swipe_offset_threshold
            or abs(velocity) > self.settings.swipe_velocity_threshold
        ):
            choice = SWIPE_RIGHT if offset > 0 or velocity > 0 else SWIPE_LEFT
            return self.swipe(choice)
        return self._dispatch(drag_card, 0.0)

    def swipe(self, choice: str) -> bool:
        changed = self._dispatch(swipe_card, self.config, choice, self.blocks_on_mistake)
        self._complete_if_done()
        return changed

    def acknowledge(self) -> bool:
        """Dismiss the explanation after an incorrect practice swipe."""
        changed = self._dispatch(acknowledge_mistake)
        self._complete_if_done()
        return changed

    def mark_media_failed(self, element_id: str) -> None:
        super().mark_media_failed(element_id)
        if self._dispatch(skip_card, self.config, element_id):
            self._complete_if_done()

    def _complete_if_done(self) -> None:
        if self.accepts_input and self.state.index >= len(self.config.cards) > 0:
            self._finish(timed_out=False)


@register_validator(GameType.PHOTO_SWIPE)
class PhotoSwipeValidator(ConfigValidator):
    def check(self, config: PhotoSwipeConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Game instruction is required")
        if not config.cards:
            errors.append("At least one card is required")

        check_unique_ids(errors, (c.id for c in config.cards), "Card")
        for n, card in enumerate(config.cards, 1):
            label = f"Card {n}"
            require_text(errors, card.image_url, f"{label}: Image is required")
            require_text(errors, card.explanation, f"{label}: Explanation is required")
            if card.is_correct is None:
                errors.append(f"{label}: Classification (safe or unsafe) is required")
            check_reward(errors, card, reward, label, allow_zero=True)

        if config.time_attack_mode:
            check_time_limit(errors, config.time_limit_seconds, self.settings)
