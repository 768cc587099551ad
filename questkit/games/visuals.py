"""
Terminal visuals for questkit tooling.

Rich renderables for the floating timer badge, results, validation reports,
authoring summaries and read-only reviews.
"""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .authoring import GameSummary
from .base import BaseGame, GameFeedback, GameResult
from .drag_drop import PlacementGame
from .hotspot import HotspotGame
from .matching import MatchingGame
from .memory_flip import MemoryFlipGame
from .multiple_choice import SelectionGame
from .photo_swipe import PhotoSwipeGame
from .sequence import SequenceGame
from .timer import TimerPhase, TimerState
from .true_false import TrueFalseGame
from .validation import ValidationResult

# =============================================================================
# THEME
# =============================================================================

QUEST_THEME = {
    "primary": "#3B82F6",    # Blue - main accent
    "secondary": "#8B5CF6",  # Violet - secondary accent
    "success": "#10B981",    # Emerald - correct answers
    "warning": "#F59E0B",    # Amber - warnings
    "error": "#EF4444",      # Red - incorrect
    "dim": "#6B7280",        # Gray - secondary text
    "white": "#F9FAFB",
}

STYLES = {
    "quest_primary": Style(color=QUEST_THEME["primary"], bold=True),
    "quest_secondary": Style(color=QUEST_THEME["secondary"]),
    "quest_success": Style(color=QUEST_THEME["success"], bold=True),
    "quest_warning": Style(color=QUEST_THEME["warning"], bold=True),
    "quest_error": Style(color=QUEST_THEME["error"], bold=True),
    "quest_dim": Style(color=QUEST_THEME["dim"]),
}

PHASE_COLORS = {
    TimerPhase.CALM: QUEST_THEME["success"],
    TimerPhase.WARNING: QUEST_THEME["warning"],
    TimerPhase.CRITICAL: "#F97316",  # Orange
    TimerPhase.FINAL: QUEST_THEME["error"],
}


def _mark(ok: bool) -> Text:
    if ok:
        return Text("✓", style=STYLES["quest_success"])
    return Text("✗", style=STYLES["quest_error"])


# =============================================================================
# TIMER
# =============================================================================

def render_timer_badge(state: TimerState | None) -> Panel | None:
    """
    Render the floating countdown badge.

    Returns None when no countdown is active, so callers can skip drawing.
    """
    if state is None:
        return None
    color = PHASE_COLORS[state.phase]
    txt = Text()
    txt.append(f"⏱ {state.display}", style=Style(color=color, bold=True))
    filled = round(state.fraction_remaining * 20)
    txt.append("  " + "█" * filled + "░" * (20 - filled), style=Style(color=color))
    return Panel(txt, border_style=Style(color=color), box=box.ROUNDED, padding=(0, 1))


# =============================================================================
# RESULTS
# =============================================================================

def render_result_panel(result: GameResult, title: str = "Result") -> Panel:
    """
    Create a themed result panel.

    Args:
        result: Emitted or restored GameResult
        title: Panel title

    Returns:
        Rich Panel with success/error styling
    """
    color = QUEST_THEME["success"] if result.success else QUEST_THEME["error"]
    if result.timed_out:
        status = "TIME UP"
    else:
        status = "SUCCESS" if result.success else "NOT QUITE"

    content = Text()
    content.append(f"{status}\n\n", style=Style(color=color, bold=True))
    label = "Points" if result.earned_points is not None else "XP"
    content.append(f"+{result.earned} {label}", style=STYLES["quest_primary"])
    if result.correct_count is not None and result.total_count is not None:
        content.append(f"   {result.correct_count}/{result.total_count} correct", style=STYLES["quest_dim"])
    if result.mistakes:
        content.append(f"   {result.mistakes} mistake(s)", style=STYLES["quest_warning"])
    if result.missed_count:
        content.append(f"   {result.missed_count} missed", style=STYLES["quest_warning"])
    content.append(f"\nAttempt {result.attempts} · {result.time_spent}s", style=STYLES["quest_dim"])

    return Panel(
        content,
        title=f"[bold]{title}[/bold]",
        border_style=Style(color=color),
        box=box.HEAVY,
        padding=(1, 2),
    )


def render_feedback_panel(feedback: GameFeedback) -> Panel:
    style = STYLES["quest_success"] if feedback.celebrate else STYLES["quest_warning"]
    prefix = "🎉 " if feedback.celebrate else ""
    return Panel(Text(prefix + feedback.message, style=style), box=box.ROUNDED, padding=(0, 1))


# =============================================================================
# AUTHORING
# =============================================================================

def render_validation_table(game_type: str, result: ValidationResult) -> Panel:
    """List every defect, or a green check when the config is publishable."""
    if result.valid:
        return Panel(
            Text(f"✓ {game_type} config is valid", style=STYLES["quest_success"]),
            border_style=Style(color=QUEST_THEME["success"]),
            box=box.ROUNDED,
        )

    table = Table(box=box.SIMPLE, show_header=True, header_style=STYLES["quest_primary"])
    table.add_column("#", style=STYLES["quest_dim"], justify="right")
    table.add_column("Problem", style=Style(color=QUEST_THEME["white"]))
    for n, error in enumerate(result.errors, 1):
        table.add_row(str(n), error)

    return Panel(
        table,
        title=f"[bold]{game_type}: {len(result.errors)} problem(s)[/bold]",
        border_style=Style(color=QUEST_THEME["error"]),
        box=box.HEAVY,
    )


def render_summary_panel(summary: GameSummary) -> Panel:
    table = Table(box=None, show_header=False, padding=(0, 2))
    table.add_column(style=STYLES["quest_dim"])
    table.add_column(style=STYLES["quest_primary"])
    table.add_row("Game type", summary.game_type.value)
    table.add_row("Scorable elements", str(summary.element_count))
    table.add_row(f"Total {summary.reward_label}", str(summary.total_reward))
    if summary.max_reward != summary.total_reward:
        table.add_row(f"Max {summary.reward_label} (perfect game)", str(summary.max_reward))
    if summary.time_limit is not None:
        table.add_row("Time limit", f"{summary.time_limit}s")
    return Panel(table, title="[bold]Summary[/bold]", box=box.ROUNDED)


# =============================================================================
# REVIEW
# =============================================================================

def _review_table(game: BaseGame) -> Table | Text:
    table = Table(box=box.SIMPLE, show_header=True, header_style=STYLES["quest_primary"])

    if isinstance(game, PlacementGame):
        feedback = game.item_feedback()
        targets = {t.id: t.label for t in game.config.targets}
        table.add_column("Item")
        table.add_column("Placed in")
        table.add_column("")
        for item in game.config.items:
            placed = game.state.placements.get(item.id)
            table.add_row(item.content or item.id, targets.get(placed, "-"), _mark(feedback.get(item.id, False)))
        return table

    if isinstance(game, HotspotGame):
        hits = game.mark_hits()
        table.add_column("Mark")
        table.add_column("Hotspot")
        for (x, y), hit in zip(game.state.marks, hits):
            label = game.config.hotspots[hit].label if hit is not None else "miss"
            table.add_row(f"({x:.1f}%, {y:.1f}%)", label)
        return table

    if isinstance(game, MatchingGame):
        feedback = game.pair_feedback()
        table.add_column("Left")
        table.add_column("Right")
        table.add_column("")
        for left, right in game.state.pairs:
            table.add_row(left, right, _mark(feedback.get(left, False)))
        return table

    if isinstance(game, SequenceGame):
        positions = game.position_feedback()
        content = {i.id: i.content for i in game.config.items}
        table.add_column("#", justify="right")
        table.add_column("Item")
        table.add_column("")
        for n, item_id in enumerate(game.state.order):
            ok = positions[n] if n < len(positions) else False
            table.add_row(str(n + 1), content.get(item_id, item_id), _mark(ok))
        return table

    if isinstance(game, TrueFalseGame):
        answer = game.state.answer
        return Text(f"Answered: {'-' if answer is None else answer}")

    if isinstance(game, SelectionGame):
        states = game.option_feedback()
        table.add_column("Option")
        table.add_column("")
        for option in game.config.options:
            state = states.get(option.id, "")
            table.add_row(option.text or option.id, state)
        return table

    if isinstance(game, MemoryFlipGame):
        return Text(
            f"Matched {len(game.state.matched_pairs)} pair(s) with {game.state.mistakes} mistake(s)"
        )

    if isinstance(game, PhotoSwipeGame):
        table.add_column("Card")
        table.add_column("Swipe")
        table.add_column("")
        for swipe in game.state.swipes:
            table.add_row(swipe.card_id, swipe.choice, _mark(swipe.correct))
        return table

    return Text(str(game.user_actions(game.state)))


def render_review(game: BaseGame) -> Group:
    """Read-only reconstruction of a submitted game plus its result."""
    parts = [_review_table(game)]
    if game.result is not None:
        parts.append(render_result_panel(game.result, title=f"{game.game_type.value} review"))
    return Group(*parts)
