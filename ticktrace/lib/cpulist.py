"""CPU range lists and cpumasks.

A range list is the kernel's CPU list syntax ('0', '2-5', '0,2-3').
A cpumask is an integer with bit i set for CPU i. Multi-token lists are
accepted, though in practice callers pass a single value or range.
"""

import re
from typing import Iterable, NamedTuple

from ticktrace.core.config import DEFAULT_MAX_CPUS
from ticktrace.core.errors import InvalidRange, RangeOverflow

_TOKEN = re.compile(r"([0-9]+)(?:-([0-9]+))?")


class CpuRange(NamedTuple):
    """Inclusive range of CPU indexes."""

    min: int
    max: int

    @property
    def width(self) -> int:
        return self.max - self.min + 1


def parse_ranges(text: str) -> list[CpuRange]:
    """
    Parse a comma-separated CPU range list.

    Args:
        text: Range list such as '3', '0-7' or '0-1,4'

    Returns:
        CpuRange per token, in input order. A bare value v becomes (v, v).

    Raises:
        InvalidRange: If any token is empty, not an integer, has more
            than two '-' separated fields, or has min > max
    """
    ranges = []
    for token in text.split(","):
        match = _TOKEN.fullmatch(token)
        if match is None:
            if not token:
                raise InvalidRange(f"empty entry in CPU list '{text}'")
            raise InvalidRange(f"'{token}' is not a CPU number or min-max range")

        low = int(match.group(1))
        high = int(match.group(2)) if match.group(2) is not None else low
        if low > high:
            raise InvalidRange(f"range '{token}' has min greater than max")
        ranges.append(CpuRange(low, high))
    return ranges


def compute_mask(ranges: Iterable[CpuRange], max_cpus: int = DEFAULT_MAX_CPUS) -> int:
    """
    OR together the bits of every range.

    Args:
        ranges: Parsed CPU ranges
        max_cpus: Number of supported CPU indexes; indexes must be below it

    Returns:
        Mask with bits [min, max] set for each range

    Raises:
        RangeOverflow: If a range reaches max_cpus or beyond
    """
    mask = 0
    for cpu_range in ranges:
        if cpu_range.max >= max_cpus:
            raise RangeOverflow(
                f"CPU {cpu_range.max} is beyond the supported maximum of {max_cpus - 1}"
            )
        mask |= ((1 << cpu_range.width) - 1) << cpu_range.min
    return mask


def format_cpumask(mask: int) -> str:
    """
    Render a mask the way the kernel prints cpumasks.

    Lowercase hex in 32-bit words separated by commas, most significant
    word first and unpadded: 0x3 -> '3', 1 << 32 -> '1,00000000'.
    """
    if mask < 0:
        raise ValueError("cpumask cannot be negative")

    words = []
    while True:
        words.append(mask & 0xFFFFFFFF)
        mask >>= 32
        if not mask:
            break
    words.reverse()
    return ",".join([f"{words[0]:x}"] + [f"{word:08x}" for word in words[1:]])


def mask_to_cpus(mask: int) -> list[int]:
    """List the CPU indexes set in a mask."""
    cpus = []
    cpu = 0
    while mask:
        if mask & 1:
            cpus.append(cpu)
        mask >>= 1
        cpu += 1
    return cpus


def format_cpu_list(cpus: list[int]) -> str:
    """Render sorted CPU indexes as a compact range list ('0-2,5')."""
    parts = []
    start = prev = None
    for cpu in cpus:
        if prev is not None and cpu == prev + 1:
            prev = cpu
            continue
        if start is not None:
            parts.append(str(start) if start == prev else f"{start}-{prev}")
        start = prev = cpu
    if start is not None:
        parts.append(str(start) if start == prev else f"{start}-{prev}")
    return ",".join(parts)
