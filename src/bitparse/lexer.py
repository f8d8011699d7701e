"""Lexer for bitparse expressions.

Produces a flat list of tokens from expression text. Lexing never fails:
characters it cannot classify become UNKNOWN tokens and number literals
are not validated against their base here. Both are reported by the
evaluator when the token is consumed.
"""

from __future__ import annotations

from bitparse.source import Span
from bitparse.tokens import BINARY_OPERATORS, UNARY_OPERATORS, Token, TokenKind

_WHITESPACE = frozenset(" \t\n\r")
_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_BASE_PREFIXES = frozenset("box")


class Lexer:
    """Tokenizes an integer expression."""

    def __init__(self, source: str, filename: str = "<expr>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in _WHITESPACE:
                self._advance()
            elif ch in _DIGITS:
                self._lex_number()
            elif ch in _BASE_PREFIXES:
                # Stray base prefix letter outside a number
                self._advance()
            elif ch in _LETTERS:
                self._lex_identifier()
            else:
                self._lex_operator_or_punct()
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span)
        self.tokens.append(tok)
        return tok

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> None:
        start_line = self.line
        start_col = self.col
        text = [self._advance()]

        if text[0] == '0' and self._peek() in _BASE_PREFIXES:
            text.append(self._advance())

        # Digits are checked against the base when the literal is parsed
        while self.pos < len(self.source) and self.source[self.pos] in _HEX_DIGITS:
            text.append(self._advance())

        self._emit(TokenKind.NUMBER, ''.join(text), start_line, start_col)

    # ── Identifiers ──────────────────────────────────────────────

    def _lex_identifier(self) -> None:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self.source[self.pos] in _LETTERS:
            text.append(self._advance())
        self._emit(TokenKind.IDENTIFIER, ''.join(text), start_line, start_col)

    # ── Operators and Punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> None:
        start_line = self.line
        start_col = self.col
        ch = self.source[self.pos]

        # Shifts are the only two-character operators
        two = self.source[self.pos:self.pos + 2]
        if two in ('<<', '>>'):
            self._advance()
            self._advance()
            self._emit(TokenKind.OPERATOR, two, start_line, start_col)
            return

        self._advance()
        match ch:
            case '(':
                self._emit(TokenKind.OPEN_PAREN, '(', start_line, start_col)
            case ')':
                self._emit(TokenKind.CLOSE_PAREN, ')', start_line, start_col)
            case _ if ch in UNARY_OPERATORS:
                self._emit(TokenKind.UNARY_OPERATOR, ch, start_line, start_col)
            case _ if ch in BINARY_OPERATORS:
                self._emit(TokenKind.OPERATOR, ch, start_line, start_col)
            case _:
                # Includes a lone '<' or '>'
                self._emit(TokenKind.UNKNOWN, ch, start_line, start_col)


def lex(source: str, filename: str = "<expr>") -> list[Token]:
    """Tokenize *source* in one call."""
    return Lexer(source, filename).lex()
