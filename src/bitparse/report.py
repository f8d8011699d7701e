"""Width selection and the multi-representation value report."""

from __future__ import annotations

import struct
from collections.abc import Iterable

from bitparse.lexer import Lexer
from bitparse.literals import split_prefix
from bitparse.tokens import TokenKind

WIDTHS = (8, 16, 32, 64)

WIDTH_CODES: dict[str, int] = {
    "b": 8,
    "w": 16,
    "d": 32,
    "q": 64,
}

_OCTAL_DIGITS = {8: 3, 16: 6, 32: 12, 64: 24}


def adjust_width(bits: int) -> int:
    """Round a bit count up to the next supported width."""
    for width in WIDTHS:
        if 1 <= bits <= width:
            return width
    return 64


def select_width(source: str, value: int, forced: int | None = None) -> int:
    """Pick the display width for *value*.

    A forced width always wins. A lone hex or binary literal is shown at
    the width its digit count implies, so ``0x00FF`` is 16 bits. Anything
    else gets the narrowest width that holds the value.
    """
    if forced is not None:
        return forced

    tokens = Lexer(source).lex()
    if len(tokens) == 1 and tokens[0].kind == TokenKind.NUMBER:
        base, digits = split_prefix(tokens[0].value)
        if base == 16:
            return adjust_width(-(-len(digits) // 2) * 8)
        if base == 2:
            return adjust_width(-(-len(digits) // 8) * 8)

    if value > 0xFFFF_FFFF:
        return 64
    if value > 0xFFFF:
        return 32
    if value > 0xFF:
        return 16
    return 8


def to_signed(value: int, width: int) -> int:
    """Reinterpret the low *width* bits as two's complement."""
    value &= (1 << width) - 1
    if value >> (width - 1):
        return value - (1 << width)
    return value


def to_float(value: int, width: int) -> float:
    """Reinterpret the low 32 or 64 bits as an IEEE-754 float."""
    if width == 32:
        return struct.unpack("<f", struct.pack("<I", value & 0xFFFF_FFFF))[0]
    return struct.unpack("<d", struct.pack("<Q", value & 0xFFFF_FFFF_FFFF_FFFF))[0]


class ReportFormatter:
    """Formats a value in every representation at a fixed width."""

    def __init__(self, width: int, *, show_float: bool = True) -> None:
        if width not in WIDTHS:
            raise ValueError(f"unsupported width {width}")
        self.width = width
        self.show_float = show_float

    def format(self, value: int, unpack: Iterable[int] = ()) -> str:
        lines = self.representations(value)
        lines.append("Bits:")
        lines.extend(self.bit_grid(value))
        fields = self.fields(value, unpack)
        if fields:
            lines.append("Unpacked fields:")
            lines.extend(fields)
        return "\n".join(lines) + "\n"

    def representations(self, value: int) -> list[str]:
        width = self.width
        masked = value & ((1 << width) - 1)
        lines = [
            f"Unsigned decimal: {value}",
            f"Signed decimal: {to_signed(masked, width)}",
            f"Hexadecimal: 0x{masked:0{width // 4}X}",
            f"Octal: 0o{masked:0{_OCTAL_DIGITS[width]}o}",
            f"Binary: 0b{masked:0{width}b}",
        ]
        if self.show_float and width == 32:
            lines.append(f"Single-precision float: {to_float(masked, 32)!r}")
        elif self.show_float and width == 64:
            lines.append(f"Double-precision float: {to_float(masked, 64)!r}")
        return lines

    def bit_grid(self, value: int) -> list[str]:
        """Bits MSB first, grouped by byte, with a label row beneath."""
        bits = []
        for i in reversed(range(self.width)):
            bits.append("1 " if (value >> i) & 1 else "0 ")
            if i % 8 == 0 and i != 0:
                bits.append("| ")
        labels = [
            f"    {hi:>2} - {hi - 7:<2}       "
            for hi in range(self.width - 1, 0, -8)
        ]
        return ["".join(bits), "".join(labels)]

    def fields(self, value: int, offsets: Iterable[int]) -> list[str]:
        """Split *value* at the given bit offsets.

        Each distinct offset below the width starts a field running up to
        the next offset, or to the top of the value for the last one.
        """
        starts = sorted({o for o in offsets if 0 <= o < self.width})
        lines = []
        for i, lo in enumerate(starts):
            hi = starts[i + 1] if i + 1 < len(starts) else self.width
            size = hi - lo
            field_value = (value >> lo) & ((1 << size) - 1)
            lines.append(
                f"  Bits {lo:>2} to {hi - 1:>2}: {field_value} "
                f"(0x{field_value:02X}) (0b{field_value:0{size}b})"
            )
        return lines
