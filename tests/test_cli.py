"""Tests for the bitparse CLI, config, and error rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from bitparse.cli import main
from bitparse.config import default_config, find_config, load_config
from bitparse.errors import (
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    ErrorKind,
    EvalError,
    Severity,
)
from bitparse.source import Span


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--width" in result.output
        assert "--unpack" in result.output
        assert "(hex)" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_value(self, runner, isolated):
        result = runner.invoke(main, [])
        assert result.exit_code == 2

    def test_decimal(self, runner, isolated):
        result = runner.invoke(main, ["42"])
        assert result.exit_code == 0
        assert "Unsigned decimal: 42" in result.output
        assert "Hexadecimal: 0x2A" in result.output
        assert "Binary: 0b00101010" in result.output

    def test_expression(self, runner, isolated):
        result = runner.invoke(main, ["(1 + 2) * 3"])
        assert result.exit_code == 0
        assert "Unsigned decimal: 9" in result.output

    def test_hex_width_from_digits(self, runner, isolated):
        result = runner.invoke(main, ["0x00FF"])
        assert result.exit_code == 0
        assert "Hexadecimal: 0x00FF" in result.output
        assert "Signed decimal: 255" in result.output

    def test_complement_is_64_bit(self, runner, isolated):
        result = runner.invoke(main, ["~0"])
        assert result.exit_code == 0
        assert "Signed decimal: -1" in result.output
        assert "Double-precision float: nan" in result.output

    def test_forced_width(self, runner, isolated):
        result = runner.invoke(main, ["-w", "d", "1"])
        assert result.exit_code == 0
        assert "Hexadecimal: 0x00000001" in result.output
        assert "Single-precision float:" in result.output

    def test_invalid_width(self, runner, isolated):
        result = runner.invoke(main, ["--width", "x", "1"])
        assert result.exit_code == 2

    def test_truncation_warning(self, runner, isolated):
        result = runner.invoke(main, ["--width", "b", "0x1FF"])
        assert result.exit_code == 0
        assert "warning[W002]" in result.output
        assert "Hexadecimal: 0xFF" in result.output

    def test_unpack(self, runner, isolated):
        result = runner.invoke(main, ["-u", "4,0", "0xA5"])
        assert result.exit_code == 0
        assert "Unpacked fields:" in result.output
        assert "  Bits  0 to  3: 5 (0x05) (0b0101)" in result.output
        assert "  Bits  4 to  7: 10 (0x0A) (0b1010)" in result.output

    def test_unpack_invalid(self, runner, isolated):
        result = runner.invoke(main, ["--unpack", "0,x", "1"])
        assert result.exit_code == 2
        assert "not a bit offset" in result.output

    def test_eval_error_exit_code(self, runner, isolated):
        result = runner.invoke(main, ["--no-color", "5/0"])
        assert result.exit_code == 1
        assert "error[E106]: divide by zero" in result.output
        assert "Unsigned decimal" not in result.output

    def test_eval_error_points_at_token(self, runner, isolated):
        result = runner.invoke(main, ["--no-color", "1 + $"])
        assert result.exit_code == 1
        assert "<expr>:1:5" in result.output
        assert "1 + $" in result.output
        assert "    ^" in result.output

    def test_no_input(self, runner, isolated):
        result = runner.invoke(main, ["--no-color", " "])
        assert result.exit_code == 1
        assert "error[E107]: no input" in result.output

    def test_identifier_warning(self, runner, isolated):
        result = runner.invoke(main, ["--no-color", "7 foo"])
        assert result.exit_code == 0
        assert "warning[W001]" in result.output
        assert "Unsigned decimal: 7" in result.output

    def test_color_flag(self, runner, isolated):
        result = runner.invoke(main, ["--color", "5/0"])
        assert "\033[1;31m" in result.output

    def test_color_flag_reaches_warnings(self, runner, isolated):
        result = runner.invoke(main, ["--color", "-w", "b", "0x1FF"])
        assert result.exit_code == 0
        assert "\033[1;33m" in result.output

    def test_no_color_flag(self, runner, isolated):
        result = runner.invoke(main, ["--no-color", "5/0"])
        assert "\033[" not in result.output

    def test_config_color_used_without_flag(self, runner, isolated):
        Path("bitparse.toml").write_text("[diagnostics]\ncolor = true\n")
        result = runner.invoke(main, ["5/0"])
        assert "\033[1;31m" in result.output

    def test_unpack_non_ascii_digit(self, runner, isolated):
        result = runner.invoke(main, ["5", "-u", "\u00b2"])
        assert result.exit_code == 2
        assert "not a bit offset" in result.output


# --- Config tests ---


class TestConfig:
    def test_load_config(self, tmp_path):
        toml = tmp_path / "bitparse.toml"
        toml.write_text(
            '[display]\nwidth = "w"\nfloat = false\n'
            "[diagnostics]\ncolor = false\n"
        )
        config = load_config(toml)
        assert config.display.width == 16
        assert config.display.show_float is False
        assert config.diagnostics.color is False

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "bitparse.toml"
        toml.write_text("[display]\n")
        config = load_config(toml)
        assert config.display.width is None
        assert config.display.show_float is True
        assert config.diagnostics.color is True

    def test_invalid_width_code(self, tmp_path):
        toml = tmp_path / "bitparse.toml"
        toml.write_text('[display]\nwidth = "z"\n')
        with pytest.raises(ValueError, match="display.width"):
            load_config(toml)

    def test_find_config(self, tmp_path):
        (tmp_path / "bitparse.toml").write_text("")
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        assert find_config(sub) == tmp_path / "bitparse.toml"

    def test_find_config_not_found(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(FileNotFoundError, match="No bitparse.toml found"):
            find_config(empty)

    def test_default_config_without_file(self, tmp_path):
        config = default_config(tmp_path)
        assert config.display.width is None

    def test_cli_reads_nearest_config(self, runner, isolated):
        Path("bitparse.toml").write_text('[display]\nwidth = "q"\nfloat = false\n')
        result = runner.invoke(main, ["1"])
        assert result.exit_code == 0
        assert "Hexadecimal: 0x0000000000000001" in result.output
        assert "float" not in result.output

    def test_cli_width_flag_overrides_config(self, runner, isolated):
        Path("bitparse.toml").write_text('[display]\nwidth = "q"\n')
        result = runner.invoke(main, ["-w", "b", "1"])
        assert "Hexadecimal: 0x01" in result.output

    def test_cli_explicit_config(self, runner, tmp_path, isolated):
        cfg = tmp_path / "custom.toml"
        cfg.write_text('[display]\nwidth = "w"\n')
        result = runner.invoke(main, ["--config", str(cfg), "1"])
        assert result.exit_code == 0
        assert "Hexadecimal: 0x0001" in result.output

    def test_cli_bad_config(self, runner, isolated):
        Path("bitparse.toml").write_text('[display]\nwidth = 16\n')
        result = runner.invoke(main, ["1"])
        assert result.exit_code == 1
        assert "error:" in result.output

    def test_section_must_be_table(self, tmp_path):
        toml = tmp_path / "bitparse.toml"
        toml.write_text("display = 3\n")
        with pytest.raises(ValueError, match=r"\[display\] must be a table"):
            load_config(toml)

    @pytest.mark.parametrize(
        "body, key",
        [
            ('[display]\nfloat = "yes"\n', "display.float"),
            ("[diagnostics]\ncolor = 1\n", "diagnostics.color"),
        ],
    )
    def test_flags_must_be_bool(self, tmp_path, body, key):
        toml = tmp_path / "bitparse.toml"
        toml.write_text(body)
        with pytest.raises(ValueError, match=key):
            load_config(toml)

    def test_cli_non_table_section(self, runner, isolated):
        Path("bitparse.toml").write_text("diagnostics = \"loud\"\n")
        result = runner.invoke(main, ["1"])
        assert result.exit_code == 1
        assert "error:" in result.output
        assert "must be a table" in result.output


# --- Error rendering tests ---


class TestDiagnostics:
    def test_render_error(self):
        span = Span("<expr>", 1, 3, 1, 3)
        diag = Diagnostic(
            severity=Severity.ERROR,
            code="E106",
            message="divide by zero",
            labels=[DiagnosticLabel(span=span, message="right operand is 0")],
            notes=["while evaluating `5 / 0`"],
        )

        renderer = DiagnosticRenderer(color=False, source="5 / 0")
        output = renderer.render(diag)

        assert "error[E106]: divide by zero" in output
        assert "<expr>:1:3" in output
        assert "   1 | 5 / 0" in output
        assert "     |   ^" in output
        assert "right operand is 0" in output
        assert "note: while evaluating `5 / 0`" in output

    def test_carriage_return_stays_on_line(self):
        span = Span("<expr>", 1, 3, 1, 3)
        diag = Diagnostic(Severity.ERROR, "E105", "not enough operands for `+`",
                          labels=[DiagnosticLabel(span=span, message="")])
        output = DiagnosticRenderer(color=False, source="1\r+)").render(diag)
        assert "   1 | 1\r+)" in output
        assert "     |   ^" in output

    def test_render_without_source(self):
        diag = EvalError(ErrorKind.NO_INPUT, "no input").diagnostic
        output = DiagnosticRenderer(color=False).render(diag)
        assert output == "error[E107]: no input"

    def test_render_warning(self):
        span = Span("<expr>", 1, 3, 1, 5)
        diag = Diagnostic(
            severity=Severity.WARNING,
            code="W001",
            message="identifier `foo` is ignored",
            labels=[DiagnosticLabel(span=span, message="")],
        )
        output = DiagnosticRenderer(color=False, source="1 foo").render(diag)
        assert "warning[W001]" in output
        assert "^^^" in output

    def test_eval_error(self):
        span = Span("<expr>", 1, 1, 1, 1)
        err = EvalError(ErrorKind.UNRECOGNIZED_TOKEN, "unrecognized token `$`", span)
        assert err.kind == ErrorKind.UNRECOGNIZED_TOKEN
        assert err.diagnostic.code == "E100"
        assert err.diagnostic.labels[0].span == span
        assert str(err) == "unrecognized token `$`"

    def test_span_str(self):
        span = Span("<expr>", 2, 5, 2, 7)
        assert str(span) == "<expr>:2:5"
