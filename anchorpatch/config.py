"""Run configuration for anchorpatch.

``ApplyConfig`` holds every knob the driver and the CLI read. It can be
built directly or loaded from a YAML file::

    backup_suffix: bak
    timestamp_format: "%Y%m%d-%H%M%S"
    encoding: utf-8
    max_subsequence_gap: 40
    report_path: reports/last-run.yaml
    log:
      level: INFO
      format: json
      file: logs/anchorpatch.log
      module_levels:
        anchorpatch.patching.matcher: DEBUG
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logging import LogConfig, LogFormat, LogLevel
from .errors import PatchError


class ConfigError(PatchError):
    """The configuration file is unreadable or has invalid values."""
    pass


@dataclass
class ApplyConfig:
    """Configuration for a patch run.

    Attributes:
        backup_suffix: Middle part of the backup name ``<target>.<suffix>.<timestamp>``.
        timestamp_format: strftime format of the backup timestamp.
        encoding: Text encoding of the target and the edit document.
        max_subsequence_gap: Upper bound on unlisted lines a fuzzy match may
            swallow. None means unbounded.
        report_path: If set, a YAML run report is written there.
        dry_run: Compute outcomes without writing the target or a backup.
        log: Logging configuration.
    """

    backup_suffix: str = "bak"
    timestamp_format: str = "%Y%m%d-%H%M%S"
    encoding: str = "utf-8"
    max_subsequence_gap: Optional[int] = None
    report_path: Optional[Path] = None
    dry_run: bool = False
    log: LogConfig = field(default_factory=LogConfig)

    def __post_init__(self) -> None:
        if isinstance(self.report_path, str):
            self.report_path = Path(self.report_path)
        if self.max_subsequence_gap is not None and self.max_subsequence_gap < 0:
            raise ConfigError(
                "max_subsequence_gap must be >= 0",
                hint="Use null to leave fuzzy matches unbounded",
            )
        if not self.backup_suffix or "/" in self.backup_suffix:
            raise ConfigError("backup_suffix must be a non-empty name without '/'")


_LOG_KEYS = {"level", "format", "file", "max_bytes", "backup_count", "module_levels"}


def _parse_log_config(data: Any, path: str) -> LogConfig:
    if data is None:
        return LogConfig()
    if not isinstance(data, dict):
        raise ConfigError("'log' must be a mapping", path=path)

    unknown = set(data) - _LOG_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown log settings: {', '.join(sorted(unknown))}",
            path=path,
            hint=f"Valid keys: {', '.join(sorted(_LOG_KEYS))}",
        )

    try:
        kwargs: Dict[str, Any] = {}
        if "level" in data:
            kwargs["level"] = LogLevel(str(data["level"]).upper())
        if "format" in data:
            kwargs["format"] = LogFormat(str(data["format"]).lower())
        if data.get("file"):
            kwargs["log_file"] = Path(data["file"])
        if "max_bytes" in data:
            kwargs["max_bytes"] = int(data["max_bytes"])
        if "backup_count" in data:
            kwargs["backup_count"] = int(data["backup_count"])
        if data.get("module_levels"):
            kwargs["module_levels"] = {
                str(name): LogLevel(str(level).upper()) for name, level in data["module_levels"].items()
            }
    except (ValueError, TypeError, AttributeError) as e:
        raise ConfigError(f"Invalid log settings: {e}", path=path) from e

    return LogConfig(**kwargs)


def load_config(path: Path) -> ApplyConfig:
    """Load an ApplyConfig from a YAML file.

    Raises:
        ConfigError: if the file cannot be read or parsed, or holds unknown keys.
    """

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}", path=str(path)) from e

    if data is None:
        return ApplyConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping", path=str(path))

    data = dict(data)
    log_config = _parse_log_config(data.pop("log", None), str(path))

    known = {f.name for f in fields(ApplyConfig)} - {"log"}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(
            f"Unknown config keys: {', '.join(sorted(unknown))}",
            path=str(path),
            hint=f"Valid keys: {', '.join(sorted(known | {'log'}))}",
        )

    try:
        return ApplyConfig(log=log_config, **data)
    except TypeError as e:
        raise ConfigError(f"Invalid config values: {e}", path=str(path)) from e
