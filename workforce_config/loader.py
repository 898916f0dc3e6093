"""
Configuration Loader (``workforce_config.loader``).

Responsibility
--------------
Reads one YAML configuration file and parses it into an ``EngineConfig``.
Runtime callers go through ``workforce_config.get_active_config()``.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import yaml

from workforce_config.schema import EngineConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict (empty for an empty document)."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: configuration root must be a mapping")
    return data


def compute_checksum(path: Path) -> str:
    """SHA-256 of the raw file bytes, for the load trace."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def load_engine_config(path: Path) -> EngineConfig:
    return EngineConfig.from_dict(load_yaml_file(path))
