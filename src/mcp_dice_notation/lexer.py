from __future__ import annotations

from .errors import LexError
from .models import SelectorKind, Token, TokenKind


# "d" is both the die marker and discard-lowest; the parser decides by position.
_WORDS: dict[str, SelectorKind | None] = {
    "d": None,
    "k": "keep_high",
    "kh": "keep_high",
    "kl": "keep_low",
    "dh": "discard_high",
    "dl": "discard_low",
    "adv": "advantage",
    "ad": "advantage",
    "dis": "disadvantage",
    "da": "disadvantage",
}

_DIGITS = "0123456789"

_SYMBOLS: dict[str, TokenKind] = {
    "+": "plus",
    "-": "minus",
    "*": "star",
    "×": "star",
    "/": "slash",
    "÷": "slash",
    "(": "lparen",
    "[": "lparen",
    ")": "rparen",
    "]": "rparen",
    "%": "percent",
}


def tokenize(text: str) -> list[Token]:
    """Split a dice expression into tokens, ending with an ``end`` token.

    Raises LexError on the first character or word that is not part of the
    notation.
    """

    tokens: list[Token] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
            continue

        if ch in _DIGITS:
            j = i
            while j < n and text[j] in _DIGITS:
                j += 1
            tokens.append(Token(kind="integer", text=text[i:j], position=i, value=int(text[i:j])))
            i = j
            continue

        if ch.isalpha():
            j = i
            while j < n and text[j].isalpha():
                j += 1
            word = text[i:j].lower()
            if word not in _WORDS:
                raise LexError(f"Unrecognized word '{text[i:j]}'", i, code="UNRECOGNIZED_WORD")
            if word == "d":
                tokens.append(Token(kind="die", text=text[i:j], position=i))
            else:
                tokens.append(
                    Token(kind="selector", text=text[i:j], position=i, selector=_WORDS[word])
                )
            i = j
            continue

        kind = _SYMBOLS.get(ch)
        if kind is None:
            raise LexError(f"Unrecognized character '{ch}'", i)
        tokens.append(Token(kind=kind, text=ch, position=i))
        i += 1

    tokens.append(Token(kind="end", text="", position=n))
    return tokens
