from __future__ import annotations

from .errors import DiceError, ExpressionTooDeepError, ParseError
from .lexer import tokenize
from .models import (
    Add,
    Advantage,
    Disadvantage,
    Discard,
    Divide,
    Keep,
    Literal,
    Multiply,
    Negate,
    Node,
    ParsedExpression,
    Roll,
    Selector,
    Subtract,
    Token,
)


_CLOSERS = {"(": ")", "[": "]"}

_SELECTOR_CODES = {
    ("keep", "high"): "kh",
    ("keep", "low"): "kl",
    ("discard", "high"): "dh",
    ("discard", "low"): "dl",
}


def _describe(token: Token) -> str:
    if token.kind == "end":
        return "end of input"
    return f"'{token.text}'"


class _Parser:
    """Recursive-descent parser, one method per grammar production.

    root      = sum ;
    sum       = term, { ("+" | "-"), term } ;
    term      = factor, { ("*" | "/"), factor } ;
    factor    = "(", sum, ")" | negation | integer | roll ;
    negation  = "-", factor ;
    roll      = [integer], "d", [integer | "%"], { selection } ;
    selection = ("k" | "kh" | "kl" | "d" | "dh" | "dl"), [integer]
              | "adv" | "ad" | "dis" | "da" ;
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.kind != "end":
            self._pos += 1
        return token

    def _unexpected(self, token: Token, expected: str) -> ParseError:
        if token.kind == "end":
            return ParseError(
                f"Unexpected end of input, expected {expected}",
                token.position,
                expected=expected,
                found="end of input",
                code="UNEXPECTED_END",
            )
        return ParseError(
            f"Unexpected {_describe(token)}, expected {expected}",
            token.position,
            expected=expected,
            found=token.text,
        )

    def parse_root(self) -> Node:
        root = self.parse_sum()
        token = self._peek()
        if token.kind == "rparen":
            raise ParseError(
                f"Unmatched closing '{token.text}'",
                token.position,
                expected="an operator or end of input",
                found=token.text,
                code="MISMATCHED_PARENTHESES",
            )
        if token.kind != "end":
            raise self._unexpected(token, "an operator or end of input")
        return root

    def parse_sum(self) -> Node:
        left = self.parse_term()
        while self._peek().kind in ("plus", "minus"):
            op = self._advance()
            right = self.parse_term()
            left = Add(left, right) if op.kind == "plus" else Subtract(left, right)
        return left

    def parse_term(self) -> Node:
        left = self.parse_factor()
        while self._peek().kind in ("star", "slash"):
            op = self._advance()
            right = self.parse_factor()
            left = Multiply(left, right) if op.kind == "star" else Divide(left, right)
        return left

    def parse_factor(self) -> Node:
        token = self._peek()

        if token.kind == "lparen":
            self._advance()
            inner = self.parse_sum()
            close = self._peek()
            closer = _CLOSERS[token.text]
            if close.kind == "end":
                raise ParseError(
                    f"Expression ended without closing '{closer}' opened at position {token.position}",
                    close.position,
                    expected=f"'{closer}'",
                    found="end of input",
                    code="UNEXPECTED_END",
                )
            if close.kind != "rparen":
                raise self._unexpected(close, f"an operator or '{closer}'")
            if close.text != closer:
                raise ParseError(
                    f"Closing '{close.text}' does not match opening '{token.text}'",
                    close.position,
                    expected=f"'{closer}'",
                    found=close.text,
                    code="MISMATCHED_PARENTHESES",
                )
            self._advance()
            return inner

        if token.kind == "minus":
            self._advance()
            return Negate(self.parse_factor())

        if token.kind == "integer":
            self._advance()
            if self._peek().kind == "die":
                return self.parse_roll(Literal(token.value))
            return Literal(token.value)

        if token.kind == "die":
            return self.parse_roll(Literal(1))

        if token.kind == "selector":
            raise ParseError(
                f"Selector '{token.text}' must follow a roll",
                token.position,
                expected="a number, roll, '-' or '('",
                found=token.text,
            )

        if token.kind == "rparen":
            raise ParseError(
                f"Unmatched closing '{token.text}'",
                token.position,
                expected="a number, roll, '-' or '('",
                found=token.text,
                code="MISMATCHED_PARENTHESES",
            )

        raise self._unexpected(token, "a number, roll, '-' or '('")

    def parse_roll(self, count: Node) -> Roll:
        self._advance()  # die marker

        token = self._peek()
        if token.kind == "integer":
            self._advance()
            sides: Node = Literal(token.value)
        elif token.kind == "percent":
            self._advance()
            sides = Literal(100)
        else:
            sides = Literal(6)

        return Roll(count=count, sides=sides, selectors=tuple(self.parse_selection()))

    def parse_selection(self) -> list[Selector]:
        selectors: list[Selector] = []

        while True:
            token = self._peek()
            if token.kind == "die":
                kind = "discard_low"
            elif token.kind == "selector":
                kind = token.selector
            else:
                return selectors
            self._advance()

            if kind == "advantage":
                selectors.append(Advantage())
                continue
            if kind == "disadvantage":
                selectors.append(Disadvantage())
                continue

            n = 1
            if self._peek().kind == "integer":
                n = self._advance().value

            action, mode = kind.split("_")
            if action == "keep":
                selectors.append(Keep(mode=mode, n=n))
            else:
                selectors.append(Discard(mode=mode, n=n))


def parse(text: str) -> Node:
    """Parse a dice expression into its syntax tree. Raises LexError or ParseError."""
    tokens = tokenize(text)
    try:
        return _Parser(tokens).parse_root()
    except RecursionError:
        raise ExpressionTooDeepError("parse") from None


def _precedence(node: Node) -> int:
    if isinstance(node, (Add, Subtract)):
        return 1
    if isinstance(node, (Multiply, Divide)):
        return 2
    return 3


def _format_selector(selector: Selector) -> str:
    if isinstance(selector, Advantage):
        return "adv"
    if isinstance(selector, Disadvantage):
        return "dis"
    action = "keep" if isinstance(selector, Keep) else "discard"
    return f"{_SELECTOR_CODES[(action, selector.mode)]}{selector.n}"


def format_expression(node: Node) -> str:
    """Render a syntax tree back into canonical dice notation."""
    try:
        return _format(node)
    except RecursionError:
        raise ExpressionTooDeepError("format") from None


def _format(node: Node) -> str:
    def wrap(child: Node, needs_parens: bool) -> str:
        text = _format(child)
        return f"({text})" if needs_parens else text

    if isinstance(node, Literal):
        return str(node.value)

    if isinstance(node, Negate):
        return "-" + wrap(node.inner, _precedence(node.inner) < 3)

    if isinstance(node, Roll):
        count = "" if node.count == Literal(1) else wrap(node.count, not isinstance(node.count, Literal))
        sides = wrap(node.sides, not isinstance(node.sides, Literal))
        return f"{count}d{sides}" + "".join(_format_selector(s) for s in node.selectors)

    symbol = {Add: "+", Subtract: "-", Multiply: "*", Divide: "/"}[type(node)]
    prec = _precedence(node)
    left = wrap(node.left, _precedence(node.left) < prec)
    right = wrap(node.right, _precedence(node.right) <= prec)
    return f"{left} {symbol} {right}"


def parse_request(text: str) -> ParsedExpression:
    if not text or not text.strip():
        raise DiceError(
            "Empty input. Example: '2d6 + 3' or '4d6kh3'.",
            code="UNPARSEABLE_INPUT",
        )

    root = parse(text)
    return ParsedExpression(
        input=text,
        root=root,
        normalized_expression=format_expression(root),
    )
