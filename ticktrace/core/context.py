"""Execution context for testability."""

import shutil
import subprocess
from pathlib import Path


class Context:
    """
    Wraps filesystem and process access for testability.

    In production: touches the real /proc, tracefs and cpuset trees
    In tests: can be replaced with MockContext
    """

    def read_file(self, path: str) -> str:
        """
        Read file contents.

        Undecodable bytes are replaced: the trace log carries raw task
        names, which need not be valid UTF-8.
        """
        return Path(path).read_text(errors="replace")

    def write_file(self, path: str, data: str) -> None:
        """
        Write data to a file, truncating it first.

        Kernel control files treat the truncating open as a reset, so
        writing an empty string clears the trace log or filter.
        """
        with open(path, "w") as f:
            f.write(data)

    def copy_file(self, src: str, dst: str) -> None:
        """Copy file contents verbatim."""
        shutil.copyfile(src, dst)

    def file_exists(self, path: str) -> bool:
        """Check if file exists."""
        return Path(path).exists()

    def is_dir(self, path: str) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def run_foreground(self, cmd: list[str]) -> int:
        """
        Run a command to completion with inherited stdio.

        Args:
            cmd: Command and arguments as list

        Returns:
            Exit status of the command

        Raises:
            OSError: If the command cannot be launched
        """
        return subprocess.run(cmd).returncode
