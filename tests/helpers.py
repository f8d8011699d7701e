"""Shared test helpers for the bitparse test suite."""

from __future__ import annotations

from bitparse.errors import ErrorKind, EvalError
from bitparse.evaluator import evaluate
from bitparse.lexer import Lexer
from bitparse.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Lex source and return (kind, value) pairs."""
    return [(t.kind, t.value) for t in Lexer(source).lex()]


def eval_fails(source: str, kind: ErrorKind) -> EvalError:
    """Evaluate source, asserting it fails with the given error kind."""
    try:
        value = evaluate(source)
    except EvalError as e:
        assert e.kind == kind, (
            f"Expected {kind.name} but got {e.kind.name}: {e}"
        )
        return e
    raise AssertionError(f"Expected {kind.name} but {source!r} evaluated to {value}")
