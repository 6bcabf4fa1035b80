"""Error types raised by ticktrace.

Every failure is fatal: the CLI prints the message of the first
TickTraceError it sees and exits 1. Nothing is retried or rolled back.
"""


class TickTraceError(Exception):
    """Base class for all ticktrace errors."""

    pass


class ArgumentError(TickTraceError):
    """Bad command line or configuration."""

    pass


class InvalidRange(TickTraceError):
    """Malformed CPU range list."""

    pass


class RangeOverflow(TickTraceError):
    """CPU range beyond the supported CPU index bound."""

    pass


class CpusetError(TickTraceError):
    """Cpuset discovery failed."""

    pass


class CpusetUnsupported(CpusetError):
    """The kernel does not know the cpuset filesystem."""

    pass


class CpusetNotMounted(CpusetError):
    """The cpuset mount directory does not exist."""

    pass


class CpusetPrefixUnknown(CpusetError):
    """Neither cpus nor cpuset.cpus exists under the cpuset root."""

    pass


class CpusetNotFound(CpusetError):
    """No cpuset with the requested name."""

    pass


class InvalidCpuArgument(TickTraceError):
    """The --cpu argument could not be turned into a CPU mask."""

    def __init__(self, cpu_arg: str, cause: TickTraceError):
        super().__init__(f"invalid CPU argument '{cpu_arg}': {cause}")
        self.cpu_arg = cpu_arg
        self.cause = cause


class InterfaceError(TickTraceError):
    """Kernel trace-control interface unavailable."""

    pass


class TracefsNotFound(InterfaceError):
    """No trace-control root could be located."""

    pass


class InterfaceWriteError(InterfaceError):
    """A trace-control file is missing or not writable."""

    pass


class InterfaceReadError(InterfaceError):
    """A trace-control file is missing or not readable."""

    pass


class PersistError(TickTraceError):
    """Copying the trace log failed."""

    pass


class CommandError(TickTraceError):
    """The wrapped command could not be launched."""

    pass


class SessionStateError(TickTraceError):
    """Trace session operation called in the wrong state."""

    pass


class LogError(TickTraceError):
    """The session log file could not be opened or written."""

    pass
