"""Token kinds and token representation for the expression lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bitparse.source import Span


class TokenKind(Enum):
    UNKNOWN = auto()

    # Grouping
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()

    # Operators
    UNARY_OPERATOR = auto()
    OPERATOR = auto()

    # Values
    NUMBER = auto()
    IDENTIFIER = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span


UNARY_OPERATORS: frozenset[str] = frozenset({"~", "!"})

BINARY_OPERATORS: frozenset[str] = frozenset({
    "*", "/", "%",
    "+", "-",
    "<<", ">>",
    "&", "^",
    "|",
})

# Lower binds tighter.
PRECEDENCE: dict[str, int] = {
    "~": 1,
    "!": 1,
    "*": 2,
    "/": 2,
    "%": 2,
    "+": 3,
    "-": 3,
    "<<": 4,
    ">>": 4,
    "&": 5,
    "^": 5,
    "|": 6,
}

# Rank of the open-paren sentinel: above every real operator, so the
# queueing loop never reduces it.
PAREN_PRECEDENCE = 100

# Tokens after which a binary operator may appear.
VALUE_TOKENS: frozenset[TokenKind] = frozenset({
    TokenKind.NUMBER,
    TokenKind.IDENTIFIER,
    TokenKind.CLOSE_PAREN,
    TokenKind.UNARY_OPERATOR,
})
