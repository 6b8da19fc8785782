"""3-layer configuration system for HDF Gate.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.hdf-gate.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

CONFIG_FILENAME = ".hdf-gate.yaml"

DEFAULT_CONFIG: dict = {
    "output": {
        "format": "default",
        "show_passed": False,
        "colors": None,  # None: colorize only when stdout is a terminal
        "include_control_ids": True,
    },
    "filter": {
        "severities": [],
        "statuses": [],
    },
    "ci": {
        "exit_codes": {
            "passed": 0,
            "failed": 1,
            "invalid_threshold": 2,
            "input_error": 3,
        },
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_project_config(config_path: Path) -> dict:
    """Load a project configuration file. Missing or unreadable files give {}."""
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        loaded = yaml.safe_load(content)
    except (OSError, yaml.YAMLError):
        return {}
    return loaded if isinstance(loaded, dict) else {}


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for a validation run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    project_config = load_project_config(config_path or Path.cwd() / CONFIG_FILENAME)
    if project_config:
        config = deep_merge(config, project_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config
