"""Single-pass expression evaluator.

Operator-precedence reduction over two stacks: operands hold pending
values, operators hold pending frames. Operators are applied as soon as
precedence allows, so no syntax tree is built.

All arithmetic is unsigned 64-bit. ``*``, ``+``, ``-`` and ``<<`` wrap
modulo 2**64, and shifting by 64 or more yields 0.
"""

from __future__ import annotations

from dataclasses import dataclass

from bitparse.errors import Diagnostic, DiagnosticLabel, ErrorKind, EvalError, Severity
from bitparse.lexer import Lexer
from bitparse.literals import U64_MAX, parse_number
from bitparse.tokens import PAREN_PRECEDENCE, PRECEDENCE, VALUE_TOKENS, Token, TokenKind


@dataclass
class Frame:
    """A pending operator or open-paren sentinel on the operator stack."""

    token: Token
    precedence: int


def _shift_left(a: int, b: int) -> int:
    return (a << b) & U64_MAX if b < 64 else 0


def _shift_right(a: int, b: int) -> int:
    return a >> b if b < 64 else 0


_BINARY = {
    "*": lambda a, b: (a * b) & U64_MAX,
    "/": lambda a, b: a // b,
    "%": lambda a, b: a % b,
    "+": lambda a, b: (a + b) & U64_MAX,
    "-": lambda a, b: (a - b) & U64_MAX,
    "<<": _shift_left,
    ">>": _shift_right,
    "|": lambda a, b: a | b,
    "&": lambda a, b: a & b,
    "^": lambda a, b: a ^ b,
}

_UNARY = {
    "~": lambda b: b ^ U64_MAX,
    "!": lambda b: 1 if b == 0 else 0,
}


class Evaluator:
    """Evaluates a token list to an unsigned 64-bit integer."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.operators: list[Frame] = []
        self.operands: list[int] = []
        self.diagnostics: list[Diagnostic] = []

    def run(self) -> int:
        """Evaluate the tokens. Raises EvalError on failure."""
        prev: Token | None = None
        for token in self.tokens:
            match token.kind:
                case TokenKind.OPEN_PAREN:
                    self.operators.append(Frame(token, PAREN_PRECEDENCE))
                case TokenKind.CLOSE_PAREN:
                    self._close_paren(token)
                case TokenKind.UNARY_OPERATOR:
                    self._queue(token, PRECEDENCE[token.value])
                case TokenKind.OPERATOR:
                    if prev is None or prev.kind not in VALUE_TOKENS:
                        raise EvalError(
                            ErrorKind.SYNTAX_ERROR,
                            f"syntax error at operator `{token.value}`",
                            token.span,
                            label="expected a value before this operator",
                        )
                    self._queue(token, PRECEDENCE[token.value])
                case TokenKind.NUMBER:
                    self.operands.append(self._parse_literal(token))
                case TokenKind.IDENTIFIER:
                    self._warn_identifier(token)
                case TokenKind.UNKNOWN:
                    raise EvalError(
                        ErrorKind.UNRECOGNIZED_TOKEN,
                        f"unrecognized token `{token.value}`",
                        token.span,
                    )
            prev = token

        while self.operators:
            frame = self.operators.pop()
            if frame.token.kind == TokenKind.OPEN_PAREN:
                raise EvalError(
                    ErrorKind.UNEXPECTED_OPEN_BRACKET,
                    "unexpected open bracket",
                    frame.token.span,
                    label="this bracket is never closed",
                )
            self._apply(frame)

        if not self.operands:
            raise EvalError(ErrorKind.NO_INPUT, "no input")
        return self.operands[-1]

    # ── Stack handling ───────────────────────────────────────────

    def _queue(self, token: Token, precedence: int) -> None:
        """Reduce tighter-binding frames, then push a new operator frame.

        Binary operators also reduce frames of equal rank (left
        associative). Unary operators reduce nothing, so a run of them
        applies right to left.
        """
        unary = token.kind == TokenKind.UNARY_OPERATOR
        while self.operators:
            top = self.operators[-1].precedence
            if top > precedence or (unary and top == precedence):
                break
            self._apply(self.operators.pop())
        self.operators.append(Frame(token, precedence))

    def _close_paren(self, token: Token) -> None:
        while self.operators:
            frame = self.operators.pop()
            if frame.token.kind == TokenKind.OPEN_PAREN:
                return
            self._apply(frame)
        raise EvalError(
            ErrorKind.MISSING_OPEN_BRACKET,
            "missing open bracket",
            token.span,
            label="no matching `(`",
        )

    # ── Operator application ─────────────────────────────────────

    def _pop_operand(self, frame: Frame) -> int:
        if not self.operands:
            raise EvalError(
                ErrorKind.INSUFFICIENT_OPERANDS,
                f"not enough operands for `{frame.token.value}`",
                frame.token.span,
            )
        return self.operands.pop()

    def _apply(self, frame: Frame) -> None:
        op = frame.token.value
        b = self._pop_operand(frame)
        if frame.token.kind == TokenKind.UNARY_OPERATOR:
            self.operands.append(_UNARY[op](b))
            return

        a = self._pop_operand(frame)
        if b == 0 and op in ("/", "%"):
            what = "divide" if op == "/" else "modulo"
            raise EvalError(
                ErrorKind.DIVIDE_BY_ZERO,
                f"{what} by zero",
                frame.token.span,
                notes=[f"while evaluating `{a} {op} {b}`"],
            )
        self.operands.append(_BINARY[op](a, b))

    # ── Leaves ───────────────────────────────────────────────────

    def _parse_literal(self, token: Token) -> int:
        try:
            return parse_number(token.value)
        except ValueError as e:
            raise EvalError(
                ErrorKind.UNRECOGNIZED_NUMBER,
                f"unrecognized number `{token.value}`",
                token.span,
                notes=[str(e)],
            ) from e

    def _warn_identifier(self, token: Token) -> None:
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                code="W001",
                message=f"identifier `{token.value}` is ignored",
                labels=[DiagnosticLabel(span=token.span, message="")],
            )
        )


def evaluate(source: str, filename: str = "<expr>") -> int:
    """Lex and evaluate an expression. Raises EvalError on failure."""
    tokens = Lexer(source, filename).lex()
    return Evaluator(tokens).run()
