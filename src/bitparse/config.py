"""TOML config loading for bitparse.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from bitparse.report import WIDTH_CODES

CONFIG_NAME = "bitparse.toml"


@dataclass
class DisplayConfig:
    width: int | None = None
    show_float: bool = True


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class BitparseConfig:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find bitparse.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def _section(path: Path, data: dict, name: str) -> dict:
    section = data[name]
    if not isinstance(section, dict):
        raise ValueError(f"{path}: [{name}] must be a table, got {section!r}")
    return section


def _flag(path: Path, section: dict, name: str, key: str) -> bool:
    value = section.get(key, True)
    if not isinstance(value, bool):
        raise ValueError(f"{path}: {name}.{key} must be true or false, got {value!r}")
    return value


def load_config(path: Path) -> BitparseConfig:
    """Parse a bitparse.toml file into a BitparseConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = BitparseConfig()

    if "display" in data:
        dsp = _section(path, data, "display")
        code = dsp.get("width")
        if code is not None and (not isinstance(code, str) or code not in WIDTH_CODES):
            raise ValueError(
                f"{path}: display.width must be one of "
                f"{', '.join(WIDTH_CODES)}, got {code!r}"
            )
        config.display = DisplayConfig(
            width=WIDTH_CODES[code] if code is not None else None,
            show_float=_flag(path, dsp, "display", "float"),
        )

    if "diagnostics" in data:
        diag = _section(path, data, "diagnostics")
        config.diagnostics = DiagnosticsConfig(
            color=_flag(path, diag, "diagnostics", "color"),
        )

    return config


def default_config(start_path: Path | None = None) -> BitparseConfig:
    """Load the nearest bitparse.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return BitparseConfig()
