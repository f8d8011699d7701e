"""Numeric literal parsing shared by the evaluator and the report."""

from __future__ import annotations

U64_MAX = (1 << 64) - 1

_PREFIX_BASES = {
    "0x": 16,
    "0o": 8,
    "0b": 2,
}

_DIGIT_VALUES = {ch: int(ch, 16) for ch in "0123456789abcdefABCDEF"}


def split_prefix(text: str) -> tuple[int, str]:
    """Return (base, digits) for a literal, stripping any base prefix."""
    base = _PREFIX_BASES.get(text[:2])
    if base is None:
        return 10, text
    return base, text[2:]


def parse_number(text: str) -> int:
    """Parse a literal as an unsigned 64-bit integer.

    ``0x``, ``0o`` and ``0b`` select base 16, 8 and 2; anything else is
    decimal. Raises ValueError for an empty digit string, a digit that is
    invalid for the base, or a value that does not fit in 64 bits.
    """
    base, digits = split_prefix(text)
    if not digits:
        raise ValueError(f"no digits in literal {text!r}")

    # int() would also accept signs, underscores and surrounding spaces
    value = 0
    for ch in digits:
        digit = _DIGIT_VALUES.get(ch)
        if digit is None or digit >= base:
            raise ValueError(f"invalid digit {ch!r} for base {base} in {text!r}")
        value = value * base + digit
        if value > U64_MAX:
            raise ValueError(f"literal does not fit in 64 bits ({len(digits)} digits)")
    return value
