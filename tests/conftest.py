"""
Shared pytest fixtures for claude-code-provider tests.

This module provides fixtures for:
- Fake `claude` executables written as Python scripts
- Isolated provider settings
- Mocked asyncio subprocesses
"""

from __future__ import annotations

import asyncio
import json
import logging
import stat
import sys
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from claude_code_provider.settings import Settings


# =============================================================================
# Fake CLI Fixtures
# =============================================================================


FAKE_CLI_TEMPLATE = """#!{python}
import json
import sys

prompt = sys.stdin.read()
record = {record!r}
if record:
    with open(record, "w", encoding="utf-8") as f:
        json.dump({{"argv": sys.argv[1:], "stdin": prompt}}, f)
sys.stderr.write({stderr!r})
sys.stdout.write({stdout!r})
sys.exit({exit_code!r})
"""


def write_fake_cli(
    path: Path,
    stdout: str = "",
    stderr: str = "",
    exit_code: int = 0,
    record: Path | None = None,
) -> Path:
    """
    Write an executable script that behaves like the claude CLI.

    Args:
        path: Where to create the script (parents are created)
        stdout: Text written to stdout after stdin has been consumed
        stderr: Text written to stderr
        exit_code: Process exit status
        record: Optional file that receives the argv and stdin the script saw

    Returns:
        The script path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        FAKE_CLI_TEMPLATE.format(
            python=sys.executable,
            record=str(record) if record else "",
            stderr=stderr,
            stdout=stdout,
            exit_code=exit_code,
        ),
        encoding="utf-8",
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """An empty home directory with no local claude install."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def provider_settings(home_dir: Path) -> Settings:
    """Settings pointing at the temporary home directory, ignoring any .env file."""
    return Settings(home=str(home_dir), timeout_ms=10_000, _env_file=None)


@pytest.fixture
def local_cli(home_dir: Path, provider_settings: Settings) -> Callable[..., Path]:
    """Factory that installs a fake CLI at the per-user install location."""

    def install(**kwargs) -> Path:
        return write_fake_cli(home_dir / provider_settings.local_install_path, **kwargs)

    return install


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() changes to the root logger after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


# =============================================================================
# Subprocess Mocks
# =============================================================================


async def block_forever(*_args, **_kwargs):
    await asyncio.Event().wait()


def make_mock_process(
    stdout: bytes = b"",
    stderr: bytes = b"",
    returncode: int = 0,
    hang: bool = False,
) -> MagicMock:
    """
    Build a MagicMock shaped like asyncio.subprocess.Process.

    With hang=True the streams never reach EOF and wait() never returns.
    """
    process = MagicMock()
    process.pid = 4242
    process.returncode = None if hang else returncode

    process.stdin = MagicMock()
    process.stdin.write = MagicMock()
    process.stdin.drain = AsyncMock()
    process.stdin.close = MagicMock()

    process.stdout = MagicMock()
    process.stderr = MagicMock()
    if hang:
        process.stdout.read = AsyncMock(side_effect=block_forever)
        process.stderr.read = AsyncMock(side_effect=block_forever)
        process.wait = AsyncMock(side_effect=block_forever)
    else:
        process.stdout.read = AsyncMock(side_effect=[stdout, b""] if stdout else [b""])
        process.stderr.read = AsyncMock(side_effect=[stderr, b""] if stderr else [b""])
        process.wait = AsyncMock(return_value=returncode)

    process.terminate = MagicMock()
    return process


@pytest.fixture
def mock_process() -> Callable[..., MagicMock]:
    """Factory fixture for make_mock_process."""
    return make_mock_process


@pytest.fixture
def fake_cli() -> Callable[..., Path]:
    """Factory fixture for write_fake_cli."""
    return write_fake_cli


@pytest.fixture
def read_record() -> Callable[[Path], dict]:
    """Read back the argv/stdin a fake CLI recorded."""

    def read(record: Path) -> dict:
        return json.loads(record.read_text(encoding="utf-8"))

    return read
