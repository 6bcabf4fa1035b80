"""JSONL logging for tracing sessions."""

import json
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from ticktrace.core.errors import LogError

LOG_NAME = "ticktrace"


def get_log_path(base_path: Path | None = None) -> Path:
    """
    Get the log file path for today.

    Args:
        base_path: Base directory for logs (default: ~/var/log/ticktrace)

    Returns:
        Path to the log file: {base}/{date}/ticktrace.jsonl
    """
    if base_path is None:
        home = Path(os.environ.get("HOME", "/tmp"))
        base_path = home / "var" / "log" / LOG_NAME

    today = date.today().isoformat()
    return base_path / today / f"{LOG_NAME}.jsonl"


class SessionLogger:
    """
    JSONL logger for one ticktrace invocation.

    Writes structured log entries to a JSONL file. With enabled=False
    every call is a no-op.
    """

    def __init__(self, log_path: Path | None = None, enabled: bool = True):
        self.log_path = log_path or get_log_path()
        self.enabled = enabled
        self._file = None

    def _ensure_file(self) -> None:
        """Ensure log file is open."""
        if self._file is None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.log_path, "a")

    def _log(self, level: str, message: str, **extra: Any) -> None:
        """
        Write a log entry.

        Raises:
            LogError: If the log file cannot be opened or written. The
                logger disables itself first, so later calls are no-ops.
        """
        if not self.enabled:
            return
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "script": LOG_NAME,
            "pid": os.getpid(),
            "message": message,
            **extra,
        }
        try:
            self._ensure_file()
            self._file.write(json.dumps(entry, default=str) + "\n")
            self._file.flush()
        except OSError as e:
            self.enabled = False
            raise LogError(f"cannot write log file {self.log_path}: {e.strerror or e}") from e

    def debug(self, message: str, **extra: Any) -> None:
        """Log debug message."""
        self._log("debug", message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        """Log info message."""
        self._log("info", message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        """Log warning message."""
        self._log("warning", message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        """Log error message."""
        self._log("error", message, **extra)

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "SessionLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
