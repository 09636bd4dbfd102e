"""Shared test fixtures for tfetch.

Provides a controllable clock for cache-age tests, isolated config
environments, output managers whose stderr can be captured, and the
Typer CLI runner.  Every test starts and ends with a fresh global
output manager.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tfetch.output import OutputFormat, OutputManager, reset_output, set_output


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager caches Rich consoles bound to the streams that existed
    when it was built, which go stale once pytest or CliRunner swaps
    them out.
    """
    yield
    reset_output()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a colourless output manager so stderr is captured verbatim by capsys."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config lookup at tmp_path and clear ``TFETCH_*`` variables.

    Returns:
        The directory that holds ``tfetch/config.json``.
    """
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for var in [
        "TFETCH_CONFIG",
        "TFETCH_DEBUG",
        "TFETCH_BASE_URL",
        "TFETCH_TIMEOUT",
        "TFETCH_RETRY_COUNT",
        "TFETCH_RETRY_DELAY_MS",
        "TFETCH_CACHE_ENABLED",
        "TFETCH_CACHE_MAX_AGE_MS",
        "TFETCH_CACHE_MAX_ENTRIES",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return config_home / "tfetch"


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
