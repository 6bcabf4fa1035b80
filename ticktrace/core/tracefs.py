"""Handle on the kernel trace-control directory."""

import os
from typing import TYPE_CHECKING

from ticktrace.core.errors import InterfaceReadError, InterfaceWriteError, TracefsNotFound

if TYPE_CHECKING:
    from ticktrace.core.context import Context

TRACE_ROOTS = ["/sys/kernel/tracing", "/sys/kernel/debug/tracing"]

TRACING_ON = "tracing_on"
TRACE = "trace"
SET_FTRACE_FILTER = "set_ftrace_filter"
TRACING_CPUMASK = "tracing_cpumask"
CURRENT_TRACER = "current_tracer"


def find_trace_root(
    context: "Context | None" = None,
    root: str | None = None,
) -> str:
    """
    Locate the trace-control root.

    Args:
        context: Execution context (for testing)
        root: Configured root, used without probing

    Raises:
        TracefsNotFound: If no candidate exposes tracing_on
    """
    if root is not None:
        return root

    if context is None:
        from ticktrace.core.context import Context
        context = Context()

    for candidate in TRACE_ROOTS:
        if context.file_exists(os.path.join(candidate, TRACING_ON)):
            return candidate
    raise TracefsNotFound(
        "tracefs not found (tried {}); is it mounted and are you root?".format(
            ", ".join(TRACE_ROOTS)
        )
    )


class Tracefs:
    """
    Read and write control files under one trace-control root.

    The files are global kernel state. Only one measurement may be in
    flight system-wide; a second invocation's configure() resets the
    first one's log and filter.
    """

    def __init__(self, root: str, context: "Context | None" = None):
        if context is None:
            from ticktrace.core.context import Context
            context = Context()
        self.root = root
        self.context = context

    def path(self, name: str) -> str:
        return os.path.join(self.root, name)

    def write(self, name: str, value: str) -> None:
        """
        Write value to a control file, truncating it.

        Raises:
            InterfaceWriteError: If the file is missing or the write fails
        """
        path = self.path(name)
        if not self.context.file_exists(path):
            raise InterfaceWriteError(f"{path} does not exist")
        try:
            self.context.write_file(path, value)
        except OSError as e:
            raise InterfaceWriteError(f"cannot write {path}: {e.strerror or e}") from e

    def read(self, name: str) -> str:
        """
        Read a control file.

        Raises:
            InterfaceReadError: If the file is missing or unreadable
        """
        path = self.path(name)
        try:
            return self.context.read_file(path)
        except OSError as e:
            raise InterfaceReadError(f"cannot read {path}: {e.strerror or e}") from e
        except UnicodeDecodeError as e:
            raise InterfaceReadError(f"cannot decode {path}: {e.reason}") from e
