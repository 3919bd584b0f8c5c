#!/usr/bin/env python3
"""
Prompt Exporter - Configuration

Loads exporter options from a JSON settings file. Keys use the host's
camelCase names:

    {
        "enabled": true,
        "autoExport": false,
        "debugMode": false,
        "prettyPrint": true,
        "includeRawData": true,
        "exportDir": "~/prompt-exports"
    }

Missing keys, wrong types or an unreadable file fall back to defaults.
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional


def get_home_dir() -> Path:
    """Base directory for config and logs."""
    return Path(os.environ.get(
        "PROMPT_EXPORTER_HOME",
        str(Path.home() / ".prompt-exporter")
    ))


def get_config_file() -> Path:
    return Path(os.environ.get(
        "PROMPT_EXPORTER_CONFIG_FILE",
        str(get_home_dir() / "config.json")
    ))


@dataclass(frozen=True)
class ExporterConfig:
    """Options passed explicitly into the capture pipeline."""
    enabled: bool = True
    auto_export: bool = False
    debug_mode: bool = False
    pretty_print: bool = True
    include_raw_data: bool = True
    export_dir: str = "."

    # setting key -> attribute name
    KEYS = {
        "enabled": "enabled",
        "autoExport": "auto_export",
        "debugMode": "debug_mode",
        "prettyPrint": "pretty_print",
        "includeRawData": "include_raw_data",
        "exportDir": "export_dir",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExporterConfig":
        """Build config from a settings dict, ignoring unknown or mistyped keys."""
        defaults = cls()
        values = {}
        if isinstance(data, dict):
            for key, attr in cls.KEYS.items():
                value = data.get(key)
                if isinstance(value, type(getattr(defaults, attr))):
                    values[attr] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self.KEYS.items()}

    def with_overrides(self, **changes: Any) -> "ExporterConfig":
        """Copy with the given attributes replaced; None values are skipped."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def load_config(config_file: Optional[str] = None) -> ExporterConfig:
    """Read config from file; defaults when the file is absent or invalid."""
    path = Path(config_file) if config_file else get_config_file()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ExporterConfig()
    return ExporterConfig.from_dict(data)
