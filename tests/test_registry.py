from __future__ import annotations

from typing import Any

from discovery.probe import DiscoveryResult
from discovery.registry import accumulate_registry, add_discovered
from schemas.config import FrameworkConfig
from schemas.registry import REGISTRY_CATEGORIES, SourceRegistry


def _config(**overrides: Any) -> FrameworkConfig:
    data: dict[str, Any] = {
        "profile_id": "p",
        "paths": {"output_file": "/tmp/roles.json", "source_registry_file": "/tmp/roles-sources.yml"},
    }
    data.update(overrides)
    return FrameworkConfig.model_validate(data)


def test_add_discovered_caps_new_entries() -> None:
    assert add_discovered(["a"], ["a", "b", "", "c", "d"], max_adds=2) == ["a", "b", "c"]
    assert add_discovered(["a", "b"], ["c"], max_adds=0) == ["a", "b"]
    assert add_discovered([], ["x", "x"], max_adds=5) == ["x"]


def test_accumulated_registry_only_grows() -> None:
    registry = SourceRegistry.model_validate(
        {
            "generated_at": "2026-01-01T00:00:00+00:00",
            "explicit": {"company_names": ["acme"], "stepstone_feeds": ["https://www.stepstone.de/rss/a"]},
            "discovered": {
                "company_names": ["globex"],
                "stepstone_feeds": ["https://www.stepstone.de/rss/b"],
                "search_queries": ["old query"],
            },
        }
    )
    discovered = DiscoveryResult(
        company_names=["initech", "globex"],
        ashby_organizations=["initech"],
        search_queries=["new query"],
    )

    grown = accumulate_registry(registry, discovered, _config(), "2026-01-02T00:00:00+00:00")

    assert grown.generated_at == "2026-01-02T00:00:00+00:00"
    assert grown.explicit == registry.explicit
    assert grown.discovered.company_names == ["globex", "initech"]
    assert grown.discovered.ashby_organizations == ["initech"]
    assert grown.discovered.search_queries == ["old query", "new query"]
    assert grown.discovered.stepstone_feeds == ["https://www.stepstone.de/rss/b"]
    for category in REGISTRY_CATEGORIES:
        before = registry.discovered.get(category)
        assert grown.discovered.get(category)[: len(before)] == before


def test_stepstone_feeds_are_never_discovered() -> None:
    discovered = DiscoveryResult()
    discovered.stepstone_feeds = ["https://www.stepstone.de/rss/new"]  # type: ignore[attr-defined]

    grown = accumulate_registry(SourceRegistry(), discovered, _config(), "2026-01-02T00:00:00+00:00")
    assert grown.discovered.stepstone_feeds == []


def test_meta_is_rewritten_from_config() -> None:
    registry = SourceRegistry.model_validate({"meta": {"discovery_enabled": True, "max_probe_candidates": 80}})
    config = _config(discovery={"enabled": False}, knobs={"max_probe_candidates": 25})

    grown = accumulate_registry(registry, DiscoveryResult(), config, "2026-01-02T00:00:00+00:00")
    assert grown.meta.discovery_enabled is False
    assert grown.meta.max_probe_candidates == 25


def test_corrupt_registry_sections_fall_back_to_defaults() -> None:
    registry = SourceRegistry.model_validate(
        {"generated_at": None, "explicit": "oops", "discovered": {"company_names": "acme"}, "meta": []}
    )
    assert registry.explicit.company_names == []
    assert registry.discovered.company_names == []
    assert registry.meta.discovery_enabled is True
    assert registry.meta.max_probe_candidates == 80
    assert registry.generated_at
