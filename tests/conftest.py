from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from core import verbose
from core.config import Settings
from schemas.posting import Posting
from schemas.profile import RoleProfile


@pytest.fixture(autouse=True)
def _quiet_console() -> None:
    verbose.configure(0)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Settings isolated from the developer's .env and credentials."""

    def factory(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "serpapi_api_key": "",
            "adzuna_app_id": "",
            "adzuna_app_key": "",
            "jooble_api_key": "",
            "personio_xml_feeds": "",
            "smartrecruiters_companies": "",
            "teamtailor_companies": "",
            "recruitee_companies": "",
            "ashby_organizations": "",
            "stepstone_feeds": "",
            "official_career_pages": "",
            "search_queries": "",
            "verbose": 0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def make_posting() -> Callable[..., Posting]:
    def factory(**fields: Any) -> Posting:
        values: dict[str, Any] = {
            "source": "greenhouse",
            "company": "Acme",
            "title": "Data Engineer",
            "location": "Berlin, Germany",
            "url": "https://acme.example/jobs/1",
        }
        values.update(fields)
        return Posting(**values)

    return factory


@pytest.fixture
def make_profile() -> Callable[..., RoleProfile]:
    def factory(bucket: dict[str, Any] | None = None, **fields: Any) -> RoleProfile:
        values: dict[str, Any] = {
            "id": "test-profile",
            "display_name": "Test profile",
            "buckets": [{"id": "main", **(bucket or {})}],
        }
        values.update(fields)
        return RoleProfile.model_validate(values)

    return factory


@pytest.fixture
def kit(tmp_path: Path) -> Callable[..., dict[str, Path]]:
    """Write a config, profile and registry under tmp_path and return their paths."""

    def factory(
        config: dict[str, Any] | None = None,
        profile: dict[str, Any] | None = None,
        registry: dict[str, Any] | None = None,
    ) -> dict[str, Path]:
        kit_dir = tmp_path / "roles-kit"
        profiles_dir = kit_dir / "profiles"
        profiles_dir.mkdir(parents=True, exist_ok=True)

        config_data: dict[str, Any] = {
            "schema_version": "roles-radar.v0.1",
            "profile_id": "data-eng",
            "paths": {"output_file": "out/roles.json", "source_registry_file": "roles-sources.yml"},
            "knobs": {"request_delay_ms": 0, "request_timeout_ms": 2000, "max_runtime_ms": 10000},
            "discovery": {"enabled": False},
            "sources": {
                "greenhouse_companies": ["acme"],
                "arbeitnow_enabled": False,
                "remotive_enabled": False,
                "jobicy_enabled": False,
                "adzuna_enabled": False,
                "jooble_enabled": False,
                "serpapi_google_jobs_enabled": False,
                "serpapi_job_board_search_enabled": False,
                "serpapi_official_sites_search_enabled": False,
            },
        }
        config_data.update(config or {})
        profile_data: dict[str, Any] = profile or {
            "id": "data-eng",
            "display_name": "Data Engineering",
            "geo_allow_patterns": ["germany"],
            "skills": ["python", "sql"],
            "buckets": [{"id": "core", "include_title_keywords": ["data engineer"], "min_score": 30}],
        }

        config_path = kit_dir / "roles.config.yml"
        config_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
        (profiles_dir / f"{profile_data['id']}.yml").write_text(yaml.safe_dump(profile_data), encoding="utf-8")
        if registry is not None:
            (kit_dir / "roles-sources.yml").write_text(yaml.safe_dump(registry), encoding="utf-8")

        return {
            "dir": kit_dir,
            "config": config_path,
            "profiles": profiles_dir,
            "runtime": kit_dir / "providers.runtime.yml",
            "output": kit_dir / "out" / "roles.json",
            "registry": kit_dir / "roles-sources.yml",
        }

    return factory
