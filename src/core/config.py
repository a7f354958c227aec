from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_IGNORED_URL_PREFIXES = ("res://",)


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    max_mb: int = 50
    backup_count: int = 10

    @property
    def level_number(self) -> int:
        value = logging.getLevelName(self.level.upper())
        return value if isinstance(value, int) else logging.INFO


@dataclass(slots=True)
class ExtractionConfig:
    """Extraction configuration from config.yml."""

    # URLs starting with one of these (case-insensitive) get no domain attribute
    ignored_url_prefixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_IGNORED_URL_PREFIXES)
    )
    keep_tool_output: bool = False
    # routine name -> options handed to that routine's configure()
    routine_options: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    base_dir: Path
    tool_paths: Dict[str, Path]
    temp_dir: Path
    logs_dir: Path
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)

    def to_json(self) -> str:
        """Serialize the configuration into a JSON string for run logs."""
        data = {
            "tool_paths": {name: str(path) for name, path in self.tool_paths.items()},
            "temp_dir": str(self.temp_dir),
            "logs_dir": str(self.logs_dir),
            "extraction": {
                "ignored_url_prefixes": list(self.extraction.ignored_url_prefixes),
                "keep_tool_output": self.extraction.keep_tool_output,
                "routines": self.extraction.routine_options,
            },
        }
        return json.dumps(data, indent=2, sort_keys=True)

    def data_source_temp_dir(self, data_source_id: int | str) -> Path:
        """Staging directory private to one data source."""
        return self.temp_dir / f"ds_{data_source_id}"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level.")
        return content


def _routine_options(section: Any) -> Dict[str, Dict[str, Any]]:
    if not section:
        return {}
    if not isinstance(section, dict):
        raise ValueError("extraction.routines must map routine names to option mappings.")
    options: Dict[str, Dict[str, Any]] = {}
    for name, values in section.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Options for routine {name!r} must be a mapping.")
        options[str(name)] = dict(values)
    return options


def load_app_config(base_dir: Path) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""

    config_yaml = base_dir / "config" / "config.yml"
    config_overrides = _load_yaml(config_yaml)

    tool_paths_cfg = config_overrides.get("tool_paths") or {}
    tool_paths: Dict[str, Path] = {}
    for tool_name, path_str in tool_paths_cfg.items():
        if path_str:
            tool_paths[tool_name] = Path(path_str)

    temp_dir = Path(config_overrides.get("temp_dir") or "temp")
    if not temp_dir.is_absolute():
        temp_dir = base_dir / temp_dir
    logs_dir = base_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    logging_cfg = config_overrides.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_cfg.get("level", "INFO"),
        max_mb=logging_cfg.get("max_mb", 50),
        backup_count=logging_cfg.get("backup_count", 10),
    )

    extraction_cfg = config_overrides.get("extraction") or {}
    prefixes = extraction_cfg.get("ignored_url_prefixes", DEFAULT_IGNORED_URL_PREFIXES)
    extraction_config = ExtractionConfig(
        ignored_url_prefixes=[str(p) for p in prefixes],
        keep_tool_output=bool(extraction_cfg.get("keep_tool_output", False)),
        routine_options=_routine_options(extraction_cfg.get("routines")),
    )

    return AppConfig(
        base_dir=base_dir,
        tool_paths=tool_paths,
        temp_dir=temp_dir,
        logs_dir=logs_dir,
        logging=logging_config,
        extraction=extraction_config,
    )
