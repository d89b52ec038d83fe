"""Typer CLI: ``dice-notation [random|min|mid|max|dot|mermaid] EXPRESSION...``."""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.text import Text

from .config import get_settings
from .dice import GRAPH_FORMATS, ROLL_MODES, format_die, render_from_text
from .errors import DiceError
from .evaluator import evaluate, make_roller
from .parser import parse_request

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="dice-notation",
    help="Roll tabletop dice expressions like '4d6kh3 + 2', or graph their syntax tree.",
    add_completion=False,
)


def _split_mode(words: list[str]) -> tuple[str, str]:
    words = [w.lower() for w in words]
    if words and words[0] in ROLL_MODES + GRAPH_FORMATS:
        return words[0], " ".join(words[1:])
    return "random", " ".join(words)


def _print_evaluation(expression: str, mode: str) -> None:
    settings = get_settings()
    parsed = parse_request(expression)
    console.print(Text(parsed.normalized_expression, style="bold"), soft_wrap=True)

    evaluation = evaluate(parsed.root, make_roller(mode, settings.make_rng()))

    if evaluation.trace:
        dice_line = Text()
        for i, die in enumerate(evaluation.trace):
            if i:
                dice_line.append(" ")
            dice_line.append(format_die(die), style="green" if die.kept else "red strike")
        console.print(dice_line, soft_wrap=True)

    total = Text("total = ", style="dim")
    total.append(str(evaluation.total), style="bold")
    console.print(total, soft_wrap=True)


@app.command(context_settings={"ignore_unknown_options": True})
def main(
    ctx: typer.Context,
    words: Optional[List[str]] = typer.Argument(
        None,
        help="Optional mode (random, min, mid, max, dot, mermaid) followed by the expression.",
    ),
) -> None:
    """Evaluate a dice expression, or print its syntax tree as DOT or Mermaid."""
    logging.basicConfig(level=get_settings().log_level.upper())

    if not words:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)

    mode, expression = _split_mode(words)
    logger.debug("Mode %s, expression %r", mode, expression)

    try:
        if mode in GRAPH_FORMATS:
            typer.echo(render_from_text(expression, mode), nl=False)
        else:
            _print_evaluation(expression, mode)
    except DiceError as e:
        err_console.print(Text.assemble(("Error: ", "bold red"), (str(e), "red")), soft_wrap=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
