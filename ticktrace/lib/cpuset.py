"""Cpuset discovery: find the cpuset mount and read a cpuset's CPU list."""

import os
from typing import TYPE_CHECKING

from ticktrace.core.errors import (
    CpusetNotFound,
    CpusetNotMounted,
    CpusetPrefixUnknown,
    CpusetUnsupported,
)

if TYPE_CHECKING:
    from ticktrace.core.context import Context

PROC_FILESYSTEMS = "/proc/filesystems"
PROC_MOUNTS = "/proc/mounts"
DEFAULT_CPUSET_ROOT = "/sys/fs/cgroup/cpuset"
CPUSET_PREFIX = "cpuset."


def _context(context: "Context | None") -> "Context":
    if context is None:
        from ticktrace.core.context import Context
        context = Context()
    return context


def cpuset_supported(context: "Context | None" = None) -> bool:
    """Check /proc/filesystems for the cpuset filesystem type."""
    context = _context(context)
    try:
        content = context.read_file(PROC_FILESYSTEMS)
    except OSError:
        return False

    for line in content.splitlines():
        fields = line.split()
        if fields and fields[-1] == "cpuset":
            return True
    return False


def find_cpuset_mount(context: "Context | None" = None) -> str | None:
    """
    Look up where cpusets are mounted.

    Prefers a cpuset or cgroup v1 cpuset mount; a cgroup2 mount is used
    only when no v1 mount exists.
    """
    context = _context(context)
    try:
        content = context.read_file(PROC_MOUNTS)
    except OSError:
        return None

    unified = None
    for line in content.splitlines():
        fields = line.split()
        if len(fields) < 4:
            continue
        mountpoint, fstype, options = fields[1], fields[2], fields[3].split(",")
        if fstype == "cpuset":
            return mountpoint
        if fstype == "cgroup" and "cpuset" in options:
            return mountpoint
        if fstype == "cgroup2" and unified is None:
            unified = mountpoint
    return unified


def resolve_root(
    context: "Context | None" = None,
    root: str | None = None,
) -> str:
    """
    Locate the cpuset hierarchy root.

    Args:
        context: Execution context (for testing)
        root: Configured root; skips the /proc/mounts lookup

    Returns:
        Path to the cpuset root directory

    Raises:
        CpusetUnsupported: If the kernel has no cpuset filesystem
        CpusetNotMounted: If the root directory does not exist
    """
    context = _context(context)

    if not cpuset_supported(context):
        raise CpusetUnsupported("cpusets are not supported by this kernel")

    if root is None:
        root = find_cpuset_mount(context) or DEFAULT_CPUSET_ROOT

    if not context.is_dir(root):
        raise CpusetNotMounted(f"cpuset filesystem is not mounted at {root}")
    return root


def resolve_prefix(root: str, context: "Context | None" = None) -> str:
    """
    Work out how cpuset control files are named under root.

    Returns:
        '' for a bare 'cpus' file, 'cpuset.' for 'cpuset.cpus'

    Raises:
        CpusetPrefixUnknown: If neither naming is present
    """
    context = _context(context)

    if context.file_exists(os.path.join(root, "cpus")):
        return ""
    if context.file_exists(os.path.join(root, CPUSET_PREFIX + "cpus")):
        return CPUSET_PREFIX
    # cgroup v2 roots only carry the effective list
    if context.file_exists(os.path.join(root, CPUSET_PREFIX + "cpus.effective")):
        return CPUSET_PREFIX
    raise CpusetPrefixUnknown(f"cannot find a cpus file under {root}")


def read_cpu_list(
    root: str,
    prefix: str,
    name: str,
    context: "Context | None" = None,
) -> str:
    """
    Read the CPU list of a named cpuset.

    Nested cpusets are named with slashes ('a/b'). A cgroup v2 child
    that inherits its CPUs has an empty cpuset.cpus; its
    cpuset.cpus.effective is read instead.

    Returns:
        Stripped contents of <root>/<name>/<prefix>cpus

    Raises:
        CpusetNotFound: If the name is not a relative cpuset path or
            the cpuset has no such file
    """
    context = _context(context)

    parts = name.split("/")
    if not name or any(part in ("", ".", "..") for part in parts):
        raise CpusetNotFound(f"invalid cpuset name '{name}'")

    path = os.path.join(root, name, prefix + "cpus")
    if not context.file_exists(path):
        raise CpusetNotFound(f"cpuset '{name}' not found ({path} does not exist)")
    cpus = _read_cpus(path, context)

    effective = path + ".effective"
    if not cpus and prefix and context.file_exists(effective):
        cpus = _read_cpus(effective, context)
    return cpus


def _read_cpus(path: str, context: "Context") -> str:
    try:
        return context.read_file(path).strip()
    except OSError as e:
        raise CpusetNotFound(f"cannot read {path}: {e.strerror or e}") from e
