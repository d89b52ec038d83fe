"""Shared fixtures for the dice notation test suite."""
from __future__ import annotations

from typing import Callable

import pytest


class SequenceRoller:
    """Die roller that replays fixed face values and records the sides asked for."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)
        self.calls: list[int] = []

    def __call__(self, sides: int) -> int:
        self.calls.append(sides)
        if not self._values:
            raise AssertionError(f"roller exhausted after {len(self.calls) - 1} dice")
        return self._values.pop(0)


@pytest.fixture
def sequence_roller() -> Callable[..., SequenceRoller]:
    def make(*values: int) -> SequenceRoller:
        return SequenceRoller(list(values))

    return make
