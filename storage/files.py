"""YAML / JSON data files, chosen by extension."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

YAML_SUFFIXES = (".yml", ".yaml")


def is_yaml(path: str | Path) -> bool:
    return Path(path).suffix.lower() in YAML_SUFFIXES


def load_data_file(path: str | Path) -> Any:
    """Parse a data file. Raises OSError, yaml.YAMLError or ValueError."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if is_yaml(path):
            return yaml.safe_load(f)
        return json.load(f)


def read_data_file(path: str | Path, fallback: Any = None) -> Any:
    """Parse a data file, returning ``fallback`` if it is missing, unreadable or empty."""
    try:
        data = load_data_file(path)
    except (OSError, yaml.YAMLError, ValueError):
        return fallback
    return fallback if data is None else data


def write_data_file(path: str | Path, data: Any) -> Path:
    """Serialize ``data`` to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if is_yaml(path):
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            f.write("\n")
    return path
