"""Evaluate a dice syntax tree against an injected die roller.

The roller is any callable taking a side count and returning a face value in
``[1, sides]``. ``make_roller`` builds the four standard ones.
"""

from __future__ import annotations

import random
import secrets
from dataclasses import replace
from typing import Callable, TypeAlias

from .errors import (
    DivideByZeroError,
    ExpressionTooDeepError,
    InvalidCountError,
    InvalidSidesError,
)
from .models import (
    ALLOWED_DIE_SIDES,
    Add,
    Advantage,
    DieOutcome,
    Disadvantage,
    Discard,
    Divide,
    Evaluation,
    Keep,
    Literal,
    Multiply,
    Negate,
    Node,
    Roll,
    RollMode,
    Selector,
    Subtract,
)


DieRoller: TypeAlias = Callable[[int], int]


def make_roller(mode: RollMode = "random", rng: random.Random | None = None) -> DieRoller:
    if mode == "min":
        return lambda sides: 1
    if mode == "mid":
        return lambda sides: sides // 2
    if mode == "max":
        return lambda sides: sides
    if mode == "random":
        source = rng if rng is not None else secrets.SystemRandom()
        return lambda sides: source.randint(1, sides)
    raise ValueError(f"Unknown roll mode: {mode!r}")


def evaluate(node: Node, roller: DieRoller) -> Evaluation:
    """Evaluate ``node`` and return its total plus every die rolled, in order."""
    trace: list[DieOutcome] = []
    try:
        total = _evaluate(node, roller, trace)
    except RecursionError:
        raise ExpressionTooDeepError("evaluate") from None
    return Evaluation(total=total, trace=trace)


def _evaluate(node: Node, roller: DieRoller, trace: list[DieOutcome]) -> int:
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Negate):
        return -_evaluate(node.inner, roller, trace)

    if isinstance(node, Roll):
        return _evaluate_roll(node, roller, trace)

    left = _evaluate(node.left, roller, trace)
    right = _evaluate(node.right, roller, trace)

    if isinstance(node, Add):
        return left + right
    if isinstance(node, Subtract):
        return left - right
    if isinstance(node, Multiply):
        return left * right
    if isinstance(node, Divide):
        if right == 0:
            raise DivideByZeroError()
        # Floor division, rounding toward negative infinity.
        return left // right

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def _evaluate_roll(node: Roll, roller: DieRoller, trace: list[DieOutcome]) -> int:
    count = _evaluate(node.count, roller, trace)
    sides = _evaluate(node.sides, roller, trace)

    if sides not in ALLOWED_DIE_SIDES:
        raise InvalidSidesError(sides)
    if count < 0:
        raise InvalidCountError(count)

    pool = _resolve(count, sides, node.selectors, roller, trace)
    return _kept_total(pool, trace)


def _kept_total(pool: list[int], trace: list[DieOutcome]) -> int:
    return sum(trace[i].value for i in pool if trace[i].kept)


def _drop(indices: list[int], trace: list[DieOutcome]) -> None:
    for i in indices:
        trace[i] = replace(trace[i], kept=False)


def _resolve(
    count: int,
    sides: int,
    selectors: tuple[Selector, ...],
    roller: DieRoller,
    trace: list[DieOutcome],
) -> list[int]:
    """Roll the dice and apply ``selectors`` left to right.

    Returns the trace indices of every die belonging to this roll (kept or
    not). Advantage and disadvantage resolve the roll with the selectors
    preceding them a second time and keep whichever side wins.
    """

    if not selectors:
        start = len(trace)
        for _ in range(count):
            trace.append(DieOutcome(sides=sides, value=roller(sides)))
        return list(range(start, len(trace)))

    *prefix, selector = selectors
    pool = _resolve(count, sides, tuple(prefix), roller, trace)

    if isinstance(selector, (Advantage, Disadvantage)):
        other = _resolve(count, sides, tuple(prefix), roller, trace)
        first_total = _kept_total(pool, trace)
        second_total = _kept_total(other, trace)
        if isinstance(selector, Advantage):
            second_wins = second_total > first_total
        else:
            second_wins = second_total < first_total
        _drop(pool if second_wins else other, trace)
        return pool + other

    kept = [i for i in pool if trace[i].kept]
    high = selector.mode == "high"
    # sorted() is stable, so ties stay in roll order.
    ranked = sorted(kept, key=lambda i: -trace[i].value if high else trace[i].value)

    if isinstance(selector, Keep):
        _drop(ranked[selector.n:], trace)
    elif isinstance(selector, Discard):
        _drop(ranked[: selector.n], trace)
    return pool
