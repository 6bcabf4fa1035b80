"""Turn the --cpu argument into a CPU mask."""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ticktrace.core.config import DEFAULT_MAX_CPUS
from ticktrace.core.errors import InvalidCpuArgument, TickTraceError
from ticktrace.lib.cpulist import compute_mask, parse_ranges
from ticktrace.lib.cpuset import read_cpu_list, resolve_prefix, resolve_root

if TYPE_CHECKING:
    from ticktrace.core.context import Context

_INDEX = re.compile(r"[0-9]+")
_RANGE_LIST = re.compile(r"[0-9]+(?:-[0-9]+)?(?:,[0-9]+(?:-[0-9]+)?)*")


@dataclass(frozen=True)
class CpuIndex:
    """A single CPU given by number."""

    index: int


@dataclass(frozen=True)
class CpuList:
    """CPUs given directly in range-list syntax."""

    text: str


@dataclass(frozen=True)
class CpusetName:
    """CPUs taken from a named cpuset."""

    name: str


CpuSelection = CpuIndex | CpuList | CpusetName


def classify_cpu_arg(cpu_arg: str) -> CpuSelection:
    """
    Decide once how a --cpu argument is read.

    Anything that parses as an integer or a range list is a CPU
    selection, even if a cpuset of the same name exists.
    """
    if _INDEX.fullmatch(cpu_arg):
        return CpuIndex(int(cpu_arg))
    if _RANGE_LIST.fullmatch(cpu_arg):
        return CpuList(cpu_arg)
    return CpusetName(cpu_arg)


def selection_ranges(
    selection: CpuSelection,
    context: "Context | None" = None,
    cpuset_root: str | None = None,
) -> str:
    """Return the range-list text a selection stands for."""
    if isinstance(selection, CpuIndex):
        return str(selection.index)
    if isinstance(selection, CpuList):
        return selection.text

    root = resolve_root(context, root=cpuset_root)
    prefix = resolve_prefix(root, context)
    return read_cpu_list(root, prefix, selection.name, context)


def select_mask(
    cpu_arg: str,
    context: "Context | None" = None,
    cpuset_root: str | None = None,
    max_cpus: int = DEFAULT_MAX_CPUS,
) -> int:
    """
    Compute the CPU mask for a --cpu argument.

    Args:
        cpu_arg: CPU number, range list or cpuset name
        context: Execution context (for testing)
        cpuset_root: Configured cpuset root, if any
        max_cpus: Supported CPU index bound

    Returns:
        CPU mask

    Raises:
        InvalidCpuArgument: Wrapping the parser or cpuset error
    """
    selection = classify_cpu_arg(cpu_arg)
    try:
        text = selection_ranges(selection, context, cpuset_root)
        return compute_mask(parse_ranges(text), max_cpus)
    except TickTraceError as e:
        raise InvalidCpuArgument(cpu_arg, e) from e
