"""
Pytest configuration and shared fixtures for the procctl test suite.

This module provides common fixtures, a deterministic clock and helpers for
spawning throwaway child processes.
"""

import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from procctl.models import AppConfig, LockConfig, ProcessConfig  # noqa: E402
from procctl.system import Clock  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


class FakeClock(Clock):
    """Clock whose sleep() advances time instantly and records the calls."""

    def __init__(self, start: float = 1000.0):
        self.start = start
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    @property
    def elapsed(self) -> float:
        return self.now - self.start


@pytest.fixture
def fake_clock():
    """A FakeClock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def app_config():
    """Configuration with the production defaults, independent of conf/."""
    return AppConfig(
        process=ProcessConfig(stop_timeout=5.0, poll_interval=1.0, wait_poll_interval=0.1),
        lock=LockConfig(directory=None, retries=3, retry_delay=0.0),
    )


@pytest.fixture
def fast_config():
    """Configuration with short intervals for tests that use real time."""
    return AppConfig(
        process=ProcessConfig(stop_timeout=5.0, poll_interval=0.05, wait_poll_interval=0.02),
    )


@pytest.fixture
def sample_config_data():
    """Raw configuration data, as parsed from config.toml."""
    return {
        "process": {
            "stop_timeout": 3.0,
            "poll_interval": 0.5,
            "wait_poll_interval": 0.05,
        },
        "lock": {
            "directory": "locks",
            "retries": 4,
            "retry_delay": 0.2,
        },
        "logging": {
            "level": "debug",
        },
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write sample_config_data to a temporary config.toml."""
    import toml

    path = temp_dir / "config.toml"
    with open(path, "w") as f:
        toml.dump(sample_config_data, f)
    return path


# ============================================================================
# Child Process Fixtures
# ============================================================================


@pytest.fixture
def spawned():
    """Collects ProcessHandles and kills any that are still alive afterwards."""
    handles = []
    yield handles
    for handle in handles:
        if handle.popen is None:
            continue
        if handle.popen.poll() is None:
            handle.popen.kill()
        try:
            handle.popen.wait(timeout=5)
        except Exception:
            pass


@pytest.fixture
def python_child(spawned):
    """Factory that starts ``python -c <code> [extra args]`` and tracks it."""
    from procctl.system import spawn_process

    def start(code: str, *extra: str, output_path=None, working_dir=None):
        handle = spawn_process(
            sys.executable,
            ["-c", code, *extra],
            working_dir=working_dir,
            output_path=output_path,
        )
        spawned.append(handle)
        return handle

    return start


def wait_for_file_text(path: Path, text: str, timeout: float = 10.0) -> bool:
    """Poll ``path`` until it contains ``text``."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists() and text in path.read_text(errors="replace"):
            return True
        time.sleep(0.02)
    return False


@pytest.fixture
def wait_for_text():
    """Expose wait_for_file_text to tests."""
    return wait_for_file_text


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset configuration state after each test."""
    yield

    from procctl.config import clear_config_cache, reset_config_path

    clear_config_cache()
    reset_config_path()
