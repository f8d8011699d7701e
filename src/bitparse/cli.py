"""bitparse command-line interface."""

from __future__ import annotations

from pathlib import Path

import click

from bitparse import __version__
from bitparse.config import BitparseConfig, default_config, load_config
from bitparse.errors import Diagnostic, DiagnosticRenderer, EvalError, Severity
from bitparse.evaluator import Evaluator
from bitparse.lexer import Lexer
from bitparse.report import WIDTH_CODES, ReportFormatter, select_width


def _parse_offsets(ctx: click.Context, param: click.Parameter, value: str | None) -> list[int]:
    """Click callback: turn ``0,4,8`` into a sorted list of bit offsets."""
    if value is None:
        return []
    offsets = []
    for part in value.split(","):
        part = part.strip()
        if not part.isdecimal():
            raise click.BadParameter(f"{part!r} is not a bit offset")
        offsets.append(int(part))
    return sorted(offsets)


def _load(config_path: str | None) -> BitparseConfig:
    if config_path is not None:
        return load_config(Path(config_path))
    return default_config()


@click.command(
    epilog="VALUE can be in decimal, or prefixed with 0x (hex), 0o (octal), "
    "or 0b (binary), and may combine values with ~ ! * / % + - << >> & ^ | "
    "and parentheses.",
)
@click.version_option(__version__, prog_name="bitparse")
@click.argument("value")
@click.option(
    "-w", "--width",
    type=click.Choice(sorted(WIDTH_CODES, key=WIDTH_CODES.__getitem__)),
    default=None,
    help="Force the bit width: b=8, w=16, d=32, q=64.",
)
@click.option(
    "-u", "--unpack",
    callback=_parse_offsets,
    metavar="OFFSET[,OFFSET...]",
    help="Unpack fields at the given bit offsets.",
)
@click.option("--color/--no-color", default=None, help="Color diagnostics.")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read settings from this file instead of the nearest bitparse.toml.",
)
def main(
    value: str,
    width: str | None,
    unpack: list[int],
    color: bool | None,
    config_path: str | None,
) -> None:
    """Show VALUE in decimal, hex, octal, binary and float form."""
    try:
        config = _load(config_path)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    use_color = config.diagnostics.color if color is None else color
    renderer = DiagnosticRenderer(color=use_color, source=value)

    evaluator = Evaluator(Lexer(value).lex())
    result: int | None
    try:
        result = evaluator.run()
    except EvalError as e:
        evaluator.diagnostics.append(e.diagnostic)
        result = None

    for diag in evaluator.diagnostics:
        click.echo(renderer.render(diag), err=True, color=use_color)
    if result is None:
        raise SystemExit(1)

    forced = WIDTH_CODES[width] if width is not None else config.display.width
    bits = select_width(value, result, forced)
    if result >> bits:
        click.echo(
            renderer.render(
                Diagnostic(
                    severity=Severity.WARNING,
                    code="W002",
                    message=f"value {result:#x} does not fit in {bits} bits",
                    notes=[f"only the low {bits} bits are shown"],
                )
            ),
            err=True,
            color=use_color,
        )

    formatter = ReportFormatter(bits, show_float=config.display.show_float)
    click.echo(formatter.format(result, unpack), nl=False)
