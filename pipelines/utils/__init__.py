"""Pipeline utilities."""

from .config_loader import (
    ConfigValidationError,
    find_profile_path,
    load_config,
    load_profile,
    load_runtime_providers,
    migrate_config,
    resolve_runtime_sources,
)

__all__ = [
    "ConfigValidationError",
    "find_profile_path",
    "load_config",
    "load_profile",
    "load_runtime_providers",
    "migrate_config",
    "resolve_runtime_sources",
]
