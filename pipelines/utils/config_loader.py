"""
Configuration loader for the roles-radar pipeline.

Loads and validates:
- the framework config (YAML or JSON), migrated to the current schema version
- one role profile by id from the profiles directory
- the optional runtime provider overlay
- the resolved source lists the fetch planner consumes
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from core.config import Settings
from core.ids import unique
from schemas.config import (
    CONFIG_SCHEMA_VERSION,
    RUNTIME_SCHEMA_VERSION,
    FrameworkConfig,
    ProviderDefaults,
    RuntimeProviderConfig,
    RuntimeSources,
)
from schemas.profile import RoleProfile
from schemas.registry import SourceRegistry
from storage.files import load_data_file, read_data_file

logger = structlog.get_logger(__name__)

PROFILE_SUFFIXES = (".yml", ".yaml", ".json")

# Categories fed by config, overlay, environment and registry alike.
MERGED_CATEGORIES = (
    "personio_xml_feeds",
    "smartrecruiters_companies",
    "teamtailor_companies",
    "recruitee_companies",
    "ashby_organizations",
    "stepstone_feeds",
)
# Categories with no config-file list.
OVERLAY_CATEGORIES = ("official_career_pages", "search_queries")


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


# --- Migration ---


LEGACY_PATH_KEYS = {
    "output_json": "output_file",
    "source_registry_json": "source_registry_file",
}


def _rename_legacy_paths(raw: dict[str, Any]) -> dict[str, Any]:
    paths = raw.get("paths")
    if not isinstance(paths, dict):
        return raw
    for old, new in LEGACY_PATH_KEYS.items():
        legacy = paths.pop(old, None)
        if legacy and not paths.get(new):
            paths[new] = legacy
    return raw


def _migrate_v0(raw: dict[str, Any]) -> dict[str, Any]:
    raw = _rename_legacy_paths(raw)
    raw["schema_version"] = CONFIG_SCHEMA_VERSION
    return raw


# schema_version -> step producing the current version
MIGRATIONS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "roles-radar.v0": _migrate_v0,
    CONFIG_SCHEMA_VERSION: _rename_legacy_paths,
}


def migrate_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Bring a raw config mapping to the current schema version.

    Raises:
        ConfigValidationError: If the schema version is not recognized
    """
    version = raw.get("schema_version")
    step = MIGRATIONS.get(str(version)) if version is not None else None
    if step is None:
        raise ConfigValidationError(f"Unsupported config schema_version: {version!r}")
    return step(copy.deepcopy(raw))


# --- Loaders ---


def load_config(config_path: str | Path) -> FrameworkConfig:
    """
    Load, migrate and validate the framework config.

    Relative output/registry paths are resolved against the config file's
    directory.

    Raises:
        ConfigValidationError: If the file is missing, unparseable, of an
            unknown version, or missing required path fields
    """
    path = Path(config_path)
    try:
        raw = load_data_file(path)
    except FileNotFoundError as e:
        raise ConfigValidationError(f"Config file not found: {path}") from e
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise ConfigValidationError(f"Config is not valid YAML/JSON: {path}") from e
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"Config is empty or not a mapping: {path}")

    migrated = migrate_config(raw)
    paths = migrated.get("paths") if isinstance(migrated.get("paths"), dict) else {}
    if not paths.get("output_file") or not paths.get("source_registry_file"):
        raise ConfigValidationError(
            f"Config paths must include paths.output_file and paths.source_registry_file: {path}"
        )

    base_dir = path.resolve().parent
    migrated["paths"] = {
        "output_file": str((base_dir / paths["output_file"]).resolve()),
        "source_registry_file": str((base_dir / paths["source_registry_file"]).resolve()),
    }

    try:
        return FrameworkConfig.model_validate(migrated)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config: {path}", errors=e.errors()) from e


def find_profile_path(profiles_dir: str | Path, profile_id: str) -> Path | None:
    """First existing profile file, trying .yml, .yaml, then .json."""
    for suffix in PROFILE_SUFFIXES:
        candidate = Path(profiles_dir) / f"{profile_id}{suffix}"
        if candidate.exists():
            return candidate
    return None


def load_profile(profiles_dir: str | Path, profile_id: str) -> RoleProfile:
    """
    Load one role profile by id.

    Raises:
        ConfigValidationError: If no profile file exists, or it does not parse
            or validate (invalid regular expressions included)
    """
    path = find_profile_path(profiles_dir, profile_id)
    if path is None:
        raise ConfigValidationError(f"Profile not found: {profile_id} in {profiles_dir}")

    raw = read_data_file(path, None)
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"Profile is not valid YAML/JSON: {path}")

    try:
        return RoleProfile.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid profile: {path}", errors=e.errors()) from e


def load_runtime_providers(runtime_path: str | Path) -> RuntimeProviderConfig | None:
    """Load the runtime overlay; None if absent, unparseable or of another version."""
    raw = read_data_file(runtime_path, None)
    if not isinstance(raw, dict):
        return None
    if raw.get("schema_version") != RUNTIME_SCHEMA_VERSION:
        logger.info("runtime overlay ignored", path=str(runtime_path), version=raw.get("schema_version"))
        return None
    try:
        return RuntimeProviderConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("runtime overlay invalid, ignored", path=str(runtime_path), errors=e.error_count())
        return None


def _countries(values: list[str]) -> list[str]:
    return unique(v.strip().lower() for v in values)


def resolve_runtime_sources(
    config: FrameworkConfig,
    registry: SourceRegistry,
    runtime: RuntimeProviderConfig | None,
    settings: Settings,
) -> RuntimeSources:
    """Merge config, overlay, environment and registry into one source set."""
    defaults = runtime.providers if runtime else ProviderDefaults()
    env = settings.env_sources()

    lists: dict[str, list[str]] = {
        "greenhouse_companies": unique(config.sources.greenhouse_companies),
        "lever_companies": unique(config.sources.lever_companies),
    }
    for category in MERGED_CATEGORIES:
        lists[category] = unique(
            [
                *getattr(config.sources, category),
                *(getattr(runtime.extra_sources, category) if runtime else []),
                *env[category],
                *registry.known(category),
            ]
        )
    for category in OVERLAY_CATEGORIES:
        lists[category] = unique(
            [
                *(getattr(runtime.extra_sources, category) if runtime else []),
                *env[category],
                *registry.known(category),
            ]
        )

    flag_names = {name for name in RuntimeSources.model_fields if name.endswith("_enabled")}
    flags = config.sources.model_dump(include=flag_names)

    return RuntimeSources(
        **lists,
        **flags,
        serpapi_gl=(defaults.serpapi_gl or "de").lower(),
        serpapi_hl=(defaults.serpapi_hl or "en").lower(),
        adzuna_countries=_countries(defaults.adzuna_countries),
        jooble_countries=_countries(defaults.jooble_countries),
    )
