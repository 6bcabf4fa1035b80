"""Core ticktrace functionality."""

from ticktrace.core.config import Settings, load_settings
from ticktrace.core.context import Context
from ticktrace.core.errors import TickTraceError
from ticktrace.core.logging import SessionLogger
from ticktrace.core.output import Output
from ticktrace.core.tracefs import Tracefs, find_trace_root

__all__ = [
    "Context",
    "Output",
    "SessionLogger",
    "Settings",
    "TickTraceError",
    "Tracefs",
    "find_trace_root",
    "load_settings",
]
