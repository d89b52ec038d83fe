from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any

from .errors import DiceError
from .evaluator import evaluate, make_roller
from .models import DieOutcome, Evaluation, GraphFormat, RollMode
from .parser import parse_request
from .renderer import render


logger = logging.getLogger(__name__)

ROLL_MODES: tuple[RollMode, ...] = ("random", "min", "mid", "max")
GRAPH_FORMATS: tuple[GraphFormat, ...] = ("dot", "mermaid")


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def format_die(die: DieOutcome) -> str:
    token = f"[d{die.sides}:{die.value}]"
    # Dropped dice are struck through, markdown style.
    return token if die.kept else f"~{token}~"


def format_report(evaluation: Evaluation) -> str:
    """One ``[dN:v]`` token per die in roll order, then ``total = n``.

    The dice line is left out when nothing was rolled.
    """
    total = f"total = {evaluation.total}"
    if not evaluation.trace:
        return total
    dice_line = " ".join(format_die(die) for die in evaluation.trace)
    return f"{dice_line}\n{total}"


def roll_from_text(
    text: str,
    mode: RollMode = "random",
    rng: random.Random | None = None,
) -> dict[str, Any]:
    """Parse, validate, then roll. Raises DiceError for invalid input."""

    if mode not in ROLL_MODES:
        raise DiceError(
            f"Unknown mode '{mode}'. Use one of: {', '.join(ROLL_MODES)}.",
            code="INVALID_MODE",
        )

    parsed = parse_request(text)
    logger.debug("Parsed %r as %s", text, parsed.normalized_expression)

    evaluation = evaluate(parsed.root, make_roller(mode, rng))
    logger.debug(
        "Evaluated %s (%s): %d dice, total %d",
        parsed.normalized_expression,
        mode,
        len(evaluation.trace),
        evaluation.total,
    )

    if mode != "random":
        rng_source = f"deterministic:{mode}"
    elif rng is not None:
        rng_source = "random.Random"
    else:
        rng_source = "secrets.SystemRandom"

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "normalized_expression": parsed.normalized_expression,
        "mode": mode,
        "rng": {
            "source": rng_source,
            "nonce": str(uuid.uuid4()),
        },
        "rolls": [
            {"sides": die.sides, "value": die.value, "kept": die.kept}
            for die in evaluation.trace
        ],
        "total": evaluation.total,
        "report": format_report(evaluation),
    }


def render_from_text(text: str, fmt: GraphFormat = "dot") -> str:
    """Parse, then render the syntax tree as DOT or Mermaid text."""

    if fmt not in GRAPH_FORMATS:
        raise DiceError(
            f"Unknown graph format '{fmt}'. Use one of: {', '.join(GRAPH_FORMATS)}.",
            code="INVALID_FORMAT",
        )

    parsed = parse_request(text)
    logger.debug("Rendering %s as %s", parsed.normalized_expression, fmt)
    return render(parsed.root, fmt)
