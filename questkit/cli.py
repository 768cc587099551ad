"""
questkit: command line tools for game authors.

Commands:
- questkit validate FILE   - Report every defect in a game config
- questkit summary FILE    - Show element count, reward totals and time limit
- questkit review FILE RESULT - Rebuild a submitted game read-only from a stored result

A game file is JSON: {"gameType": "drag-drop", "config": {...}}
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console

from questkit.config import get_settings
from questkit.games import GameType, Mode
from questkit.games.authoring import apply_totals, summarize
from questkit.games.base import GameConfigError, GameResult, QuestkitError
from questkit.games.clock import VirtualScheduler
from questkit.games.dispatcher import GameDispatcher
from questkit.games.visuals import (
    render_review,
    render_summary_panel,
    render_validation_table,
)


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="questkit",
    help="questkit: validate, summarize and review interactive lesson games",
    no_args_is_help=True,
)
console = Console()


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}:[/red] {e}")
        raise typer.Exit(1)


def load_game_file(path: Path) -> tuple[str, dict[str, Any]]:
    """Read a {"gameType", "config"} document."""
    data = _read_json(path)
    if not isinstance(data, dict) or "gameType" not in data:
        console.print(f"[red]{path} must contain a 'gameType' and a 'config'[/red]")
        raise typer.Exit(1)
    return data["gameType"], data.get("config") or {}


# =============================================================================
# Commands
# =============================================================================

@app.command()
def validate(
    file: Path = typer.Argument(..., help="Game JSON file"),
    quiz: bool = typer.Option(False, "--quiz", "-q", help="Validate as a quiz question (points instead of XP)"),
) -> None:
    """
    Validate a game config before publishing.

    Prints every problem found; exits with status 1 when the config is invalid.
    """
    game_type, config = load_game_file(file)
    try:
        result = GameDispatcher().validate(game_type, config, is_quiz_question=quiz)
    except QuestkitError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(render_validation_table(game_type, result))
    if not result.valid:
        raise typer.Exit(1)


@app.command()
def summary(
    file: Path = typer.Argument(..., help="Game JSON file"),
    quiz: bool = typer.Option(False, "--quiz", "-q", help="Summarize points instead of XP"),
    write: bool = typer.Option(False, "--write", "-w", help="Write the auto-calculated total back to FILE"),
) -> None:
    """Show scorable elements, reward totals and the time limit."""
    game_type, config = load_game_file(file)
    try:
        info = summarize(game_type, config, is_quiz_question=quiz)
    except QuestkitError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(render_summary_panel(info))

    if write:
        updated = apply_totals(game_type, config, is_quiz_question=quiz)
        file.write_text(
            json.dumps({"gameType": game_type, "config": updated}, indent=2) + "\n",
            encoding="utf-8",
        )
        console.print(f"[green]Totals written to {file}[/green]")


@app.command()
def review(
    file: Path = typer.Argument(..., help="Game JSON file"),
    result_file: Path = typer.Argument(..., metavar="RESULT", help="Stored GameResult JSON"),
) -> None:
    """Rebuild a submitted game read-only from its stored result."""
    game_type, config = load_game_file(file)
    stored = _read_json(result_file)
    try:
        previous = GameResult.from_previous_state(stored)
    except (TypeError, ValueError) as e:
        console.print(f"[red]Cannot read result {result_file}:[/red] {e}")
        raise typer.Exit(1)

    mode = Mode.QUIZ if previous.earned_points is not None else Mode.LESSON
    dispatcher = GameDispatcher(scheduler=VirtualScheduler())
    try:
        game = dispatcher.mount(game_type, config, mode, previous_state=previous)
    except GameConfigError as e:
        for message in e.messages:
            console.print(f"[red]{message}[/red]")
        raise typer.Exit(1)
    except QuestkitError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(render_review(game))
    dispatcher.unmount(game)


@app.command("types")
def list_types() -> None:
    """List supported game types."""
    for game_type in GameType:
        console.print(f"  {game_type.value}")


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
