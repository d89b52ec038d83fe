from __future__ import annotations


class DiceError(ValueError):
    """User-facing errors. Messages start with a stable bracketed code."""

    code: str = "DICE_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(f"[{self.code}] {message}")


class LexError(DiceError):
    """A character (or word) the lexer does not recognize."""

    code = "UNRECOGNIZED_CHARACTER"

    def __init__(self, message: str, position: int, *, code: str | None = None) -> None:
        self.position = position
        super().__init__(f"{message} at position {position}", code=code)


class ParseError(DiceError):
    code = "UNEXPECTED_TOKEN"

    def __init__(
        self,
        message: str,
        position: int,
        *,
        expected: str | None = None,
        found: str | None = None,
        code: str | None = None,
    ) -> None:
        self.position = position
        self.expected = expected
        self.found = found
        super().__init__(f"{message} at position {position}", code=code)


class EvalError(DiceError):
    code = "EVALUATION_ERROR"


class InvalidSidesError(EvalError):
    code = "INVALID_SIDES"

    def __init__(self, sides: int) -> None:
        self.sides = sides
        super().__init__(f"Only d4,d6,d8,d10,d12,d20,d100 are supported, got d{sides}.")


class InvalidCountError(EvalError):
    code = "INVALID_COUNT"

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Dice count must not be negative, got {count}.")


class DivideByZeroError(EvalError):
    code = "DIVIDE_BY_ZERO"

    def __init__(self) -> None:
        super().__init__("Division by zero.")


class ExpressionTooDeepError(DiceError):
    """The expression nests (or chains) deeper than the interpreter stack allows."""

    code = "EXPRESSION_TOO_DEEP"

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Expression is nested too deeply to {stage}. Split it into smaller rolls.")
