from __future__ import annotations

import logging
import random
from functools import lru_cache
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .dice import DiceError, render_from_text, roll_from_text


logger = logging.getLogger(__name__)

mcp = FastMCP("mcp-dice-notation")


@lru_cache(maxsize=1)
def _session_rng() -> Optional[random.Random]:
    # One generator per server process, so a seeded session replays as a
    # whole instead of repeating the first roll.
    return get_settings().make_rng()


@mcp.tool()
def roll_dice(expression: str, mode: str = "random"):
    """Roll a dice expression such as '4d6kh3 + 2' or 'd20adv + 5'.

    Input: expression (string), mode ("random", "min", "mid" or "max")
    Output: structured JSON with every die rolled, the total and a report

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(expression, mode=mode, rng=_session_rng())
    except DiceError as e:
        logger.info("Rejected roll %r: %s", expression, e)
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


@mcp.tool()
def render_syntax_tree(expression: str, graph_format: Optional[str] = None) -> str:
    """Render the parsed expression as a Graphviz DOT or Mermaid graph.

    Input: expression (string), graph_format ("dot" or "mermaid")
    Output: graph text, nothing is rolled
    """

    fmt = graph_format or get_settings().graph_format
    try:
        return render_from_text(expression, fmt)
    except DiceError as e:
        logger.info("Rejected render %r: %s", expression, e)
        raise ValueError(str(e)) from None


def run() -> None:
    logging.basicConfig(level=get_settings().log_level.upper())
    _session_rng.cache_clear()
    # Default transport is stdio.
    mcp.run()


if __name__ == "__main__":
    run()
