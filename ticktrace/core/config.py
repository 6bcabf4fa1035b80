"""Configuration loading with layered overrides."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ticktrace.core.errors import ArgumentError

DEFAULT_TICK_FUNCTION = "scheduler_tick"
DEFAULT_MAX_CPUS = 8192


@dataclass
class Settings:
    """Resolved configuration for one invocation."""

    trace_root: str | None = None
    cpuset_root: str | None = None
    tick_function: str = DEFAULT_TICK_FUNCTION
    max_cpus: int = DEFAULT_MAX_CPUS
    log_dir: Path | None = None


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file if it exists."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def config_paths() -> list[Path]:
    """Config files in precedence order: project, then user."""
    return [
        Path('.ticktrace.yaml'),
        Path.home() / '.config' / 'ticktrace' / 'config.yaml',
    ]


def get_config_value(key: str) -> Any:
    """Get config value with project -> user -> None precedence."""
    for path in config_paths():
        data = load_config_file(path)
        if key in data:
            return data[key]
    return None


def load_settings() -> Settings:
    """
    Build Settings from the config files.

    Raises:
        ArgumentError: If a value has the wrong type
    """
    settings = Settings()

    trace_root = get_config_value('trace_root')
    if trace_root:
        settings.trace_root = str(trace_root)

    cpuset_root = get_config_value('cpuset_root')
    if cpuset_root:
        settings.cpuset_root = str(cpuset_root)

    tick_function = get_config_value('tick_function')
    if tick_function:
        settings.tick_function = str(tick_function)

    max_cpus = get_config_value('max_cpus')
    if max_cpus is not None:
        if isinstance(max_cpus, bool) or not isinstance(max_cpus, int) or max_cpus <= 0:
            raise ArgumentError(f"max_cpus must be a positive integer, got {max_cpus!r}")
        settings.max_cpus = max_cpus

    log_dir = get_config_value('log_dir')
    if log_dir:
        settings.log_dir = Path(str(log_dir)).expanduser()

    return settings
