"""Shared test fixtures."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

TRACE_FILES = ["tracing_on", "trace", "set_ftrace_filter", "tracing_cpumask", "current_tracer"]

TRACE_HEADER = """\
# tracer: function
#
# entries-in-buffer/entries-written: 3/3   #P:4
#
#           TASK-PID     CPU#  |||||  TIMESTAMP  FUNCTION
#              | |         |   |||||     |         |
"""

TICK_LINE = "          <idle>-0       [000] d.h1. 1234.567890: scheduler_tick <-update_process_times\n"


class MockContext:
    """Mock Context for testing without real system access."""

    def __init__(
        self,
        file_contents: dict[str, str] | None = None,
        dirs: list[str] | None = None,
        command_status: int | BaseException = 0,
        readonly: list[str] | None = None,
    ):
        self.file_contents = file_contents or {}
        self.dirs = set(dirs or [])
        self.command_status = command_status
        self.readonly = set(readonly or [])
        self.writes: list[tuple[str, str]] = []
        self.copies: list[tuple[str, str]] = []
        self.commands_run: list[list[str]] = []

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        return self.file_contents[path]

    def write_file(self, path: str, data: str) -> None:
        """Record a write and replace the mocked content."""
        if path in self.readonly:
            raise PermissionError(13, "Permission denied", path)
        self.writes.append((path, data))
        self.file_contents[path] = data

    def copy_file(self, src: str, dst: str) -> None:
        """Copy mocked content between paths."""
        if src not in self.file_contents:
            raise FileNotFoundError(2, "No such file or directory", src)
        if os.path.dirname(dst) and not self.is_dir(os.path.dirname(dst)):
            raise FileNotFoundError(2, "No such file or directory", dst)
        self.copies.append((src, dst))
        self.file_contents[dst] = self.file_contents[src]

    def file_exists(self, path: str) -> bool:
        """Check if path is in mocked files or dirs."""
        return path in self.file_contents or self.is_dir(path)

    def is_dir(self, path: str) -> bool:
        """Check mocked dirs, or any mocked file below path."""
        path = path.rstrip("/")
        if path in self.dirs:
            return True
        return any(p.startswith(path + "/") for p in self.file_contents)

    def run_foreground(self, cmd: list[str]) -> int:
        """Record the command and return the mocked status."""
        self.commands_run.append(cmd)
        if isinstance(self.command_status, BaseException):
            raise self.command_status
        return self.command_status


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def trace_root(tmp_path) -> Path:
    """A directory laid out like the tracefs control root."""
    root = tmp_path / "tracing"
    root.mkdir()
    for name in TRACE_FILES:
        (root / name).write_text("")
    (root / "tracing_on").write_text("1\n")
    (root / "current_tracer").write_text("nop\n")
    return root


@pytest.fixture
def cpuset_tree(tmp_path) -> Path:
    """A cgroup v1 style cpuset hierarchy with one 'mycpuset' child."""
    root = tmp_path / "cpuset"
    (root / "mycpuset").mkdir(parents=True)
    (root / "cpus").write_text("0-7\n")
    (root / "mycpuset" / "cpus").write_text("0-2\n")
    return root


def run_cli(*args: str, cwd: Path | None = None, home: Path | None = None) -> subprocess.CompletedProcess:
    """Run the ticktrace CLI in a subprocess."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    if home is not None:
        env["HOME"] = str(home)
    return subprocess.run(
        [sys.executable, "-m", "ticktrace"] + list(args),
        capture_output=True,
        text=True,
        cwd=cwd,
        env=env,
    )
