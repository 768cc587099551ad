"""
Memory flip game.

Cards start face down in a shuffled grid. The user flips two at a time;
a configured pair stays face up, a mismatch counts as a mistake and flips
back after a short delay (or as soon as the next card is flipped). The game
completes when every pairable card is matched, or times out.

Reward is the sum of matched pair rewards; a completed game with zero
mistakes multiplies it by perfectGameMultiplier.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Mapping

from loguru import logger

from . import GameType, register, register_validator
from .base import BaseGame, RunState
from .clock import TimerHandle
from .models import MemoryFlipConfig, MemoryFlipPair
from .scoring import Score, find_memory_pair, memory_flip_reward, sum_rewards
from .validation import (
    ConfigValidator,
    RewardField,
    check_reward,
    check_time_limit,
    check_unique_ids,
    require_text,
)


@dataclass(frozen=True)
class MemoryFlipState(RunState):
    order: tuple[str, ...] = ()              # grid layout, card ids
    revealed: tuple[str, ...] = ()           # face up but unmatched (at most 2)
    matched: frozenset[str] = frozenset()    # card ids
    matched_pairs: tuple[int, ...] = ()      # indices into config.pairs
    mistakes: int = 0


def playable_pairs(config: MemoryFlipConfig) -> list[int]:
    """Indices of pairs whose two cards exist and differ."""
    card_ids = {c.id for c in config.cards}
    return [
        i for i, p in enumerate(config.pairs)
        if p.left_id in card_ids and p.right_id in card_ids and p.left_id != p.right_id
    ]


def flip_card(state: MemoryFlipState, config: MemoryFlipConfig, card_id: str) -> MemoryFlipState:
    if card_id not in {c.id for c in config.cards}:
        return state
    if card_id in state.matched or card_id in state.revealed:
        return state

    revealed = state.revealed
    if len(revealed) >= 2:
        # A mismatch is still showing: flip it back first
        revealed = ()
    revealed = revealed + (card_id,)

    if len(revealed) < 2:
        return replace(state, revealed=revealed)

    index = find_memory_pair(config.pairs, revealed[0], revealed[1])
    if index is not None and index not in state.matched_pairs:
        return replace(
            state,
            revealed=(),
            matched=state.matched | set(revealed),
            matched_pairs=state.matched_pairs + (index,),
        )
    return replace(state, revealed=revealed, mistakes=state.mistakes + 1)


def hide_mismatch(state: MemoryFlipState) -> MemoryFlipState:
    if len(state.revealed) < 2:
        return state
    return replace(state, revealed=())


def is_cleared(state: MemoryFlipState, config: MemoryFlipConfig) -> bool:
    playable = playable_pairs(config)
    return bool(playable) and set(playable) <= set(state.matched_pairs)


@register(GameType.MEMORY_FLIP)
class MemoryFlipGame(BaseGame):
    """Find every pair before time runs out."""

    config: MemoryFlipConfig
    state: MemoryFlipState
    _hide_handle: TimerHandle | None = None

    def initial_state(self) -> MemoryFlipState:
        order = [c.id for c in self.config.cards]
        self.rng.shuffle(order)
        return MemoryFlipState(order=tuple(order))

    @property
    def time_limit(self) -> int:
        return self.config.time_limit_seconds

    def can_submit(self, state: MemoryFlipState) -> bool:
        # Completion is automatic
        return False

    def reward_total(self) -> int:
        return sum_rewards(self.matchable_pairs(), self.mode)

    def max_reward(self) -> int:
        return memory_flip_reward(
            self.config.pairs,
            playable_pairs(self.config),
            self.mode,
            mistakes=0,
            multiplier=self.config.perfect_game_multiplier,
            completed=True,
        )

    def matchable_pairs(self) -> list[MemoryFlipPair]:
        return [self.config.pairs[i] for i in playable_pairs(self.config)]

    def score(self, state: MemoryFlipState, timed_out: bool) -> Score:
        cleared = is_cleared(state, self.config)
        earned = memory_flip_reward(
            self.config.pairs,
            state.matched_pairs,
            self.mode,
            mistakes=state.mistakes,
            multiplier=self.config.perfect_game_multiplier,
            completed=cleared and not timed_out,
        )
        return Score(
            success=cleared,
            earned=earned,
            correct_count=len(state.matched_pairs),
            total_count=len(playable_pairs(self.config)),
            mistakes=state.mistakes,
        )

    def user_actions(self, state: MemoryFlipState) -> dict[str, Any]:
        return {
            "order": list(state.order),
            "matched": sorted(state.matched),
            "matchedPairs": list(state.matched_pairs),
            "mistakes": state.mistakes,
        }

    def restore_state(self, user_actions: Mapping[str, Any]) -> MemoryFlipState:
        order = tuple(str(i) for i in user_actions.get("order") or [c.id for c in self.config.cards])
        matched = frozenset(str(i) for i in user_actions.get("matched") or [])
        matched_pairs = user_actions.get("matchedPairs")
        if matched_pairs is None:
            matched_pairs = [
                i for i in playable_pairs(self.config)
                if {self.config.pairs[i].left_id, self.config.pairs[i].right_id} <= matched
            ]
        return MemoryFlipState(
            order=order,
            matched=matched,
            matched_pairs=tuple(int(i) for i in matched_pairs),
            mistakes=int(user_actions.get("mistakes") or 0),
        )

    # Interaction ------------------------------------------------------

    def flip(self, card_id: str) -> bool:
        if not self._dispatch(flip_card, self.config, card_id):
            return False
        if len(self.state.revealed) == 2:
            logger.debug(f"memory-flip mismatch: {self.state.revealed}")
            self._cancel_hide()
            self._hide_handle = self.scheduler.call_later(
                self.settings.mismatch_hide_delay_seconds, self._hide_mismatch
            )
        elif is_cleared(self.state, self.config):
            self._cancel_hide()
            self._finish(timed_out=False)
        return True

    def _hide_mismatch(self) -> None:
        self._hide_handle = None
        self._dispatch(hide_mismatch)

    def _cancel_hide(self) -> None:
        if self._hide_handle is not None:
            self._hide_handle.cancel()
            self._hide_handle = None

    def try_again(self) -> bool:
        self._cancel_hide()
        return super().try_again()

    def unmount(self) -> None:
        self._cancel_hide()
        super().unmount()

    def is_face_up(self, card_id: str) -> bool:
        return card_id in self.state.matched or card_id in self.state.revealed or self.read_only


@register_validator(GameType.MEMORY_FLIP)
class MemoryFlipValidator(ConfigValidator):
    def check(self, config: MemoryFlipConfig, reward: RewardField, errors: list[str]) -> None:
        require_text(errors, config.instruction, "Instruction is required")
        if not config.cards:
            errors.append("At least one pair of cards is required")
        elif len(config.cards) % 2:
            errors.append("Number of cards must be even")

        card_ids = check_unique_ids(errors, (c.id for c in config.cards), "Card")
        for n, card in enumerate(config.cards, 1):
            if not (card.text or "").strip() and not card.image_url:
                errors.append(f"Card {n}: Text or image is required")

        for n, pair in enumerate(config.pairs, 1):
            label = f"Pair {n}"
            if pair.left_id == pair.right_id:
                errors.append(f"{label}: Cannot pair a card with itself")
            for side, card_id in (("Left", pair.left_id), ("Right", pair.right_id)):
                if card_id not in card_ids:
                    errors.append(f"{label}: {side} card '{card_id}' does not exist")
            check_reward(errors, pair, reward, label)

        uses = Counter()
        for pair in config.pairs:
            uses[pair.left_id] += 1
            if pair.right_id != pair.left_id:
                uses[pair.right_id] += 1
        for card_id in sorted(card_ids):
            if uses[card_id] != 1:
                errors.append(f"Card '{card_id}' must be used in exactly one pair (found {uses[card_id]})")

        low, high = self.settings.min_perfect_multiplier, self.settings.max_perfect_multiplier
        if not low <= config.perfect_game_multiplier <= high:
            errors.append(f"Perfect game multiplier must be between {low:g} and {high:g}")
        check_time_limit(errors, config.time_limit_seconds, self.settings)
