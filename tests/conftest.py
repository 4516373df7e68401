"""
Pytest configuration and shared fixtures for the localexec test suite.

This module provides common fixtures, fake process handles and configuration
for all test modules.
"""

import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
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


@pytest.fixture
def python_exe():
    """Path of the running interpreter, used as a portable test command."""
    return sys.executable


@pytest.fixture
def sample_executor_data():
    """Sample [executor] table for testing."""
    return {
        "max_destroy_attempts": 5,
        "destroy_retry_delay": 0.05,
        "destroy_method": "kill",
        "output_encoding": "utf-8",
        "output_result_timeout": 5.0,
        "wait_poll_interval": 0.05,
        "output_pool": {
            "pool_name": "test_output",
            "max_workers": 2,
            "thread_name_prefix": "TestOutputReader",
            "shutdown_timeout": 2.0,
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_executor_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"executor": sample_executor_data}, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture
def executor_config():
    """Executor settings with short delays so tests finish quickly."""
    from localexec.models import ExecutorConfig

    return ExecutorConfig(
        max_destroy_attempts=10,
        destroy_retry_delay=0.05,
        output_result_timeout=5.0,
        wait_poll_interval=0.05,
    )


@pytest.fixture
def output_pool():
    """A started output-reader pool, shut down after the test."""
    from localexec.executor import ManagedThreadPoolExecutor
    from localexec.models import ThreadPoolConfig

    pool = ManagedThreadPoolExecutor(ThreadPoolConfig(max_workers=2, thread_name_prefix="TestOutputReader"))
    pool.start()
    yield pool
    pool.shutdown(wait=True)


# ============================================================================
# Test Utilities
# ============================================================================


class FakeProcess:
    """
    Popen stand-in whose survival of destroy signals is scripted.

    Args:
        survive_signals: Number of destroy signals ignored before exiting on the
            next one; None means it never exits
        alive: Whether the process starts out running
    """

    def __init__(self, survive_signals: Optional[int] = None, alive: bool = True, pid: int = 4321):
        self.pid = pid
        self.args = ["fake-command"]
        self.survive_signals = survive_signals
        self.kill_calls = 0
        self.terminate_calls = 0
        self.alive = alive

    def poll(self):
        return None if self.alive else -9

    def kill(self):
        self.kill_calls += 1
        self._on_signal()

    def terminate(self):
        self.terminate_calls += 1
        self._on_signal()

    def _on_signal(self):
        signals = self.kill_calls + self.terminate_calls
        if self.survive_signals is not None and signals > self.survive_signals:
            self.alive = False


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def wait_for_process(job, timeout: float = 10.0):
        """Block until a job has published its process handle and return it."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            process = job.state.process_slot.get()
            if process is not None:
                return process
            time.sleep(0.02)
        raise AssertionError("Job did not start a process in time")

    @staticmethod
    def wait_for_condition(condition, timeout: float = 10.0) -> bool:
        """Poll ``condition`` until it returns true or ``timeout`` passes."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if condition():
                return True
            time.sleep(0.02)
        return False


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture
def fake_process_class():
    """Provide the FakeProcess class."""
    return FakeProcess


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset the configuration singleton after each test."""
    yield

    from localexec.config import DEFAULT_CONFIG_FILE_PATH, clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(DEFAULT_CONFIG_FILE_PATH)
