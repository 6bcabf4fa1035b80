"""CPU list, cpumask and cpuset helpers."""

from ticktrace.lib.cpulist import CpuRange, compute_mask, format_cpumask, parse_ranges
from ticktrace.lib.cpuset import read_cpu_list, resolve_prefix, resolve_root
from ticktrace.lib.selector import classify_cpu_arg, select_mask

__all__ = [
    "CpuRange",
    "classify_cpu_arg",
    "compute_mask",
    "format_cpumask",
    "parse_ranges",
    "read_cpu_list",
    "resolve_prefix",
    "resolve_root",
    "select_mask",
]
