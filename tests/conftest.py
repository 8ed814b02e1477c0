from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A working directory per test, so canonical paths stay relative.
3. FileSystem instances whose retry backoff does not sleep.
"""

import os
import sys
from pathlib import Path
from typing import Any, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from cachedfs.core.retry import RetryingOperation  # noqa: E402
from cachedfs.domain.config import FsConfig, Mode  # noqa: E402
from cachedfs.filesystem import FileSystem  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
class SleepRecorder:
    """Stands in for time.sleep / asyncio.sleep and records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, delay: float) -> None:
        self.delays.append(delay)

    async def async_sleep(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fast_retry(sleeper: SleepRecorder) -> RetryingOperation:
    """Retry policy with the real attempt count but no actual waiting."""
    return RetryingOperation(sleep=sleeper, async_sleep=sleeper.async_sleep)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: Any) -> Path:
    """
    Switch the process into a fresh temporary directory.

    Returns:
        Path: The working directory as reported by os.getcwd().
    """
    monkeypatch.chdir(tmp_path)
    return Path(os.getcwd())


@pytest.fixture
def fs(workdir: Path, fast_retry: RetryingOperation) -> FileSystem:
    """FileSystem in normal mode rooted at the temporary working directory."""
    return FileSystem(retry=fast_retry)


@pytest.fixture
def strict_fs(workdir: Path, fast_retry: RetryingOperation) -> FileSystem:
    return FileSystem(config=FsConfig(mode=Mode.STRICT), retry=fast_retry)


@pytest.fixture
def forgiving_fs(workdir: Path, fast_retry: RetryingOperation) -> FileSystem:
    return FileSystem(config=FsConfig(mode=Mode.FORGIVING), retry=fast_retry)
