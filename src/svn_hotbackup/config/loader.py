"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import tomllib
from pathlib import Path
from typing import Any

from .schema import Config, GlobalConfig, JobConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "svn-hotbackup" / "config.toml",
    Path("/etc/svn-hotbackup/config.toml"),
]


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _expect(data: dict[str, Any], key: str, kind, default):
    """Fetch ``key`` from ``data`` and check its type."""
    value = data.get(key, default)
    if value is None or isinstance(value, kind):
        # bool is an int subclass, never accept it as a count
        if isinstance(value, bool) and kind is not bool:
            raise ConfigError(f"'{key}' must be {_kind_name(kind)}, got {value!r}")
        return value
    raise ConfigError(f"'{key}' must be {_kind_name(kind)}, got {value!r}")


def _kind_name(kind) -> str:
    if isinstance(kind, tuple):
        return " or ".join(k.__name__ for k in kind)
    return kind.__name__


def _parse_job(data: dict[str, Any]) -> JobConfig:
    """Parse job configuration from dict."""
    for key in ("repository_root", "backup_root"):
        if key not in data:
            raise ConfigError(f"Job missing required '{key}' field")

    return JobConfig(
        repository_root=_expect(data, "repository_root", str, None),
        backup_root=_expect(data, "backup_root", str, None),
        compress=_expect(data, "compress", bool, None),
        history=_expect(data, "history", int, None),
        enabled=_expect(data, "enabled", bool, True),
    )


def _parse_global(data: dict[str, Any]) -> GlobalConfig:
    """Parse global configuration from dict."""
    timeout = _expect(data, "tool_timeout", (int, float), None)
    return GlobalConfig(
        svn_path=_expect(data, "svn_path", str, None),
        tool_timeout=float(timeout) if timeout is not None else None,
        compress=_expect(data, "compress", bool, False),
        history=_expect(data, "history", int, 0),
        parallel_repositories=_expect(data, "parallel_repositories", int, 1),
        strict=_expect(data, "strict", bool, False),
        log_file=_expect(data, "log_file", str, None),
    )


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.jobs:
        warnings.append("No jobs configured")

    if config.global_config.parallel_repositories < 1:
        warnings.append(
            "parallel_repositories is less than 1, repositories will run sequentially"
        )

    timeout = config.global_config.tool_timeout
    if timeout is not None and timeout <= 0:
        warnings.append("tool_timeout must be positive, it will be ignored")

    for job in config.jobs:
        if config.get_effective_history(job) < 1:
            warnings.append(
                f"Job '{job.repository_root}' keeps all history (history < 1)"
            )

    # Check for duplicate jobs
    pairs = [(j.repository_root, j.backup_root) for j in config.jobs]
    if len(pairs) != len(set(pairs)):
        warnings.append("Duplicate jobs detected")

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    global_config = _parse_global(data.get("global", {}))

    jobs = []
    for job_data in data.get("jobs", []):
        jobs.append(_parse_job(job_data))

    config = Config(global_config=global_config, jobs=jobs)

    # Validate and collect warnings
    warnings = _validate_config(config)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# svn-hotbackup configuration

[global]
# svn_path = "/usr/bin"      # Directory with svnlook and svnadmin
# tool_timeout = 3600        # Kill a hung svnlook/svnadmin after N seconds
compress = true              # Zip each new snapshot
history = 7                  # Keep 7 snapshots per repository (0 = keep all)
parallel_repositories = 1
strict = false               # Exit non-zero when a repository fails
# log_file = "/var/log/svn-hotbackup.log"

# All repositories below /srv/svn
[[jobs]]
repository_root = "/srv/svn"
backup_root = "/mnt/backup/svn"

# A single repository with its own retention
# [[jobs]]
# repository_root = "/srv/svn-archive/legacy"
# backup_root = "/mnt/backup/legacy"
# compress = false
# history = 2
"""
