"""
workforce_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``EngineConfig``.

Architecture position:
    Configuration -- sits above ``workforce_kernel`` and below
    ``workforce_services``.  The kernel and the modules never import
    from ``workforce_config``; the services layer translates the config
    into service arguments.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ValueError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``workforce_config_loaded`` log entry with the config id, path and
    checksum, tying a running engine to the exact file that configured it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from workforce_config.loader import compute_checksum, load_engine_config
from workforce_config.schema import (
    AuthConfig,
    BootstrapConfig,
    DemoTenantConfig,
    EngineConfig,
    LeaveConfig,
    PayrollConfig,
    StoreConfig,
    TextGenerationConfig,
)

_logger = logging.getLogger("workforce_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> EngineConfig:
    """
    Load and validate the engine configuration.

    Args:
        path: YAML file to load.  Defaults to ``workforce_config/sets/default.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If validation fails.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_engine_config(config_path)
    _logger.info(
        "workforce_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_path": str(config_path),
            "checksum": compute_checksum(config_path),
            "demo_tenant_count": len(config.bootstrap.demo_tenants),
        },
    )
    return config


__all__ = [
    "AuthConfig",
    "BootstrapConfig",
    "DEFAULT_CONFIG_PATH",
    "DemoTenantConfig",
    "EngineConfig",
    "LeaveConfig",
    "PayrollConfig",
    "StoreConfig",
    "TextGenerationConfig",
    "get_active_config",
]
