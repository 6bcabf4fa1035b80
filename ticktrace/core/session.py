"""Tick-counting trace session.

A session drives the kernel function tracer through
configure -> start -> [run command] -> stop -> persist -> analyze.
A bracketed measurement spans two invocations: --start configures and
starts, and --end attaches to the still-running kernel state to stop
and analyze it.
"""

import enum
from typing import TYPE_CHECKING

from ticktrace.core.config import DEFAULT_TICK_FUNCTION
from ticktrace.core.errors import CommandError, PersistError, SessionStateError
from ticktrace.core.logging import SessionLogger
from ticktrace.core.tracefs import (
    CURRENT_TRACER,
    SET_FTRACE_FILTER,
    TRACE,
    TRACING_CPUMASK,
    TRACING_ON,
    Tracefs,
)
from ticktrace.lib.cpulist import format_cpumask

if TYPE_CHECKING:
    from ticktrace.core.context import Context

TRACER = "function"


class SessionState(enum.Enum):
    NEW = "new"
    CONFIGURED = "configured"
    RUNNING = "running"
    STOPPED = "stopped"


def count_ticks(trace: str, function: str = DEFAULT_TICK_FUNCTION) -> int:
    """Count trace log lines recording a call to function, skipping headers."""
    return sum(
        1 for line in trace.splitlines()
        if not line.lstrip().startswith("#") and function in line
    )


class TraceSession:
    """State machine over a Tracefs handle."""

    def __init__(
        self,
        tracefs: Tracefs,
        tick_function: str = DEFAULT_TICK_FUNCTION,
        logger: SessionLogger | None = None,
        state: SessionState = SessionState.NEW,
    ):
        self.tracefs = tracefs
        self.tick_function = tick_function
        self.logger = logger or SessionLogger(enabled=False)
        self.state = state

    @classmethod
    def attach(
        cls,
        tracefs: Tracefs,
        tick_function: str = DEFAULT_TICK_FUNCTION,
        logger: SessionLogger | None = None,
    ) -> "TraceSession":
        """Pick up a session started by an earlier --start invocation."""
        return cls(tracefs, tick_function, logger, state=SessionState.RUNNING)

    @property
    def context(self) -> "Context":
        return self.tracefs.context

    def _require(self, state: SessionState, operation: str) -> None:
        if self.state is not state:
            raise SessionStateError(
                f"cannot {operation} a {self.state.value} session "
                f"(must be {state.value})"
            )

    def configure(self, mask: int) -> None:
        """
        Reset the tracer and point it at scheduler ticks on the masked CPUs.

        Clears any previous trace log and filter. A failure part way
        leaves the control files as the last successful write left them.
        """
        self._require(SessionState.NEW, "configure")
        cpumask = format_cpumask(mask)

        self.tracefs.write(TRACING_ON, "0")
        self.tracefs.write(TRACE, "")
        self.tracefs.write(SET_FTRACE_FILTER, "")
        self.tracefs.write(SET_FTRACE_FILTER, self.tick_function)
        self.tracefs.write(TRACING_CPUMASK, cpumask)
        self.tracefs.write(CURRENT_TRACER, TRACER)

        self.state = SessionState.CONFIGURED
        self.logger.info(
            "Tracer configured",
            trace_root=self.tracefs.root,
            cpumask=cpumask,
            function=self.tick_function,
        )

    def start(self) -> None:
        self._require(SessionState.CONFIGURED, "start")
        self.tracefs.write(TRACING_ON, "1")
        self.state = SessionState.RUNNING
        self.logger.info("Tracing started", trace_root=self.tracefs.root)

    def stop(self) -> None:
        self._require(SessionState.RUNNING, "stop")
        self.tracefs.write(TRACING_ON, "0")
        self.state = SessionState.STOPPED
        self.logger.info("Tracing stopped", trace_root=self.tracefs.root)

    def tracing_enabled(self) -> bool:
        """Report whether the kernel tracer is currently on."""
        return self.tracefs.read(TRACING_ON).strip() == "1"

    def run_command(self, cmd: list[str]) -> int:
        """
        Run cmd to completion while tracing.

        Returns:
            The command's exit status, which the session otherwise ignores

        Raises:
            CommandError: If the command cannot be launched
        """
        self._require(SessionState.RUNNING, "run a command in")
        self.logger.info("Running command", command=cmd)
        try:
            status = self.context.run_foreground(cmd)
        except OSError as e:
            self.logger.error("Command failed to launch", command=cmd, error=str(e))
            raise CommandError(f"cannot run {cmd[0]}: {e.strerror or e}") from e
        self.logger.info("Command finished", command=cmd, status=status)
        return status

    def persist(self, target_path: str | None) -> bool:
        """
        Copy the trace log verbatim to target_path.

        Returns:
            True if a copy was written, False when no target was given

        Raises:
            PersistError: If the copy fails
        """
        self._require(SessionState.STOPPED, "save the log of")
        if not target_path:
            return False

        source = self.tracefs.path(TRACE)
        try:
            self.context.copy_file(source, target_path)
        except OSError as e:
            raise PersistError(
                f"cannot save trace log to {target_path}: {e.strerror or e}"
            ) from e
        self.logger.info("Trace log saved", path=target_path)
        return True

    def analyze(self) -> int:
        """Count the ticks recorded in the trace log right now."""
        self._require(SessionState.STOPPED, "analyze")
        ticks = count_ticks(self.tracefs.read(TRACE), self.tick_function)
        self.logger.info("Ticks counted", ticks=ticks)
        return ticks
