"""Configuration for proctop.

There are no command-line flags; the optional TOML file at
``~/.config/proctop/config.toml`` is the only way to change the defaults below.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path

import tomlkit


@dataclass
class MonitorConfig:
    """Poll loop configuration."""

    poll_interval: float = 3.0  # Seconds between cycles, also the input timeout


@dataclass
class AlertsConfig:
    """High CPU alert configuration."""

    cpu_threshold: float = 50.0  # Percent; alerts fire strictly above this
    window_seconds: float = 300.0  # A pid alerts at most once per window


@dataclass
class StatsConfig:
    """Periodic summary configuration."""

    interval_seconds: float = 60.0  # Minimum time between Stat records


@dataclass
class PathsConfig:
    """File locations."""

    record_log: str = "log.txt"  # Operator log, relative to the working directory
    diagnostics_log: str = "~/.local/state/proctop/proctop.log"
    log_max_bytes: int = 1024 * 1024
    log_backup_count: int = 2

    @property
    def record_log_path(self) -> Path:
        return Path(self.record_log).expanduser()

    @property
    def diagnostics_log_path(self) -> Path:
        return Path(self.diagnostics_log).expanduser()


def _coerce(section: str, name: str, value: object, default: object) -> object:
    """Check a TOML value against the type of its default."""
    # tomlkit wraps scalars; unwrap to plain Python values
    if hasattr(value, "unwrap"):
        value = value.unwrap()
    # bool is an int subclass but never a valid number here
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif isinstance(value, type(default)):
        return value
    raise ValueError(
        f"{section}.{name} must be {type(default).__name__}, got {type(value).__name__}"
    )


def _section(cls, name: str, data: object):
    """Build a config section from TOML data, keeping defaults for missing keys."""
    if not isinstance(data, Mapping):
        raise ValueError(f"[{name}] must be a table, got {type(data).__name__}")
    defaults = cls()
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    values = {}
    for f in fields(cls):
        default = getattr(defaults, f.name)
        if f.name in data:
            values[f.name] = _coerce(name, f.name, data[f.name], default)
        else:
            values[f.name] = default
    return cls(**values)


@dataclass
class Config:
    """Main configuration container."""

    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    alerts: AlertsConfig = field(default_factory=AlertsConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return Path.home() / ".config" / "proctop" / "config.toml"

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values."""
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        config = cls(
            monitor=_section(MonitorConfig, "monitor", data.get("monitor", {})),
            alerts=_section(AlertsConfig, "alerts", data.get("alerts", {})),
            stats=_section(StatsConfig, "stats", data.get("stats", {})),
            paths=_section(PathsConfig, "paths", data.get("paths", {})),
        )
        if config.monitor.poll_interval <= 0:
            raise ValueError("monitor.poll_interval must be positive")
        if config.alerts.window_seconds <= 0:
            raise ValueError("alerts.window_seconds must be positive")
        if config.alerts.cpu_threshold < 0:
            raise ValueError("alerts.cpu_threshold must not be negative")
        if config.stats.interval_seconds <= 0:
            raise ValueError("stats.interval_seconds must be positive")
        return config
