"""bitparse: evaluate integer expressions and inspect the result bit by bit."""

from __future__ import annotations

__version__ = "0.1.0"

from bitparse.errors import ErrorKind, EvalError
from bitparse.evaluator import evaluate
from bitparse.lexer import lex

__all__ = ["__version__", "ErrorKind", "EvalError", "evaluate", "lex"]
