from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal as Lit
from typing import TypeAlias


ALLOWED_DIE_SIDES: set[int] = {4, 6, 8, 10, 12, 20, 100}

TokenKind: TypeAlias = Lit[
    "integer",
    "plus",
    "minus",
    "star",
    "slash",
    "lparen",
    "rparen",
    "percent",
    "die",
    "selector",
    "end",
]
SelectorKind: TypeAlias = Lit[
    "keep_high",
    "keep_low",
    "discard_high",
    "discard_low",
    "advantage",
    "disadvantage",
]
SelectMode: TypeAlias = Lit["high", "low"]
RollMode: TypeAlias = Lit["random", "min", "mid", "max"]
GraphFormat: TypeAlias = Lit["dot", "mermaid"]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int
    value: int | None = None
    selector: SelectorKind | None = None


# Syntax tree. Every node owns its children; nodes are never shared.


@dataclass(frozen=True)
class Literal:
    value: int


@dataclass(frozen=True)
class Add:
    left: Node
    right: Node


@dataclass(frozen=True)
class Subtract:
    left: Node
    right: Node


@dataclass(frozen=True)
class Multiply:
    left: Node
    right: Node


@dataclass(frozen=True)
class Divide:
    left: Node
    right: Node


@dataclass(frozen=True)
class Negate:
    inner: Node


@dataclass(frozen=True)
class Keep:
    mode: SelectMode
    n: int = 1


@dataclass(frozen=True)
class Discard:
    mode: SelectMode
    n: int = 1


@dataclass(frozen=True)
class Advantage:
    pass


@dataclass(frozen=True)
class Disadvantage:
    pass


Selector: TypeAlias = Keep | Discard | Advantage | Disadvantage


@dataclass(frozen=True)
class Roll:
    count: Node = field(default_factory=lambda: Literal(1))
    sides: Node = field(default_factory=lambda: Literal(6))
    selectors: tuple[Selector, ...] = ()


Node: TypeAlias = Literal | Add | Subtract | Multiply | Divide | Negate | Roll


@dataclass(frozen=True)
class ParsedExpression:
    input: str
    root: Node
    normalized_expression: str


@dataclass(frozen=True)
class DieOutcome:
    sides: int
    value: int
    kept: bool = True


@dataclass(frozen=True)
class Evaluation:
    total: int
    trace: list[DieOutcome]

    @property
    def kept(self) -> list[DieOutcome]:
        return [die for die in self.trace if die.kept]

    @property
    def dropped(self) -> list[DieOutcome]:
        return [die for die in self.trace if not die.kept]
