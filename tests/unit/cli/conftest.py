"""Fixtures for kiln-cli tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from click.testing import CliRunner


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner
