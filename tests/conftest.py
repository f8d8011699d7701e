"""Shared pytest fixtures for the bitparse test suite."""

from __future__ import annotations

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def isolated(runner, tmp_path):
    """Run inside an empty directory so no stray bitparse.toml is found."""
    with runner.isolated_filesystem(temp_dir=tmp_path) as path:
        yield path
