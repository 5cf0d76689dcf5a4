"""Registry accumulator: fold discovered sources into the persisted registry."""

from __future__ import annotations

from discovery.probe import DiscoveryResult, probe_cap
from schemas.config import FrameworkConfig
from schemas.registry import REGISTRY_CATEGORIES, RegistryMeta, RegistrySources, SourceRegistry

# Feeds only ever come from operators.
FIXED_CATEGORIES = ("stepstone_feeds",)


def add_discovered(existing: list[str], incoming: list[str], max_adds: int) -> list[str]:
    """Append up to ``max_adds`` entries not already present. Never removes anything."""
    out = list(existing)
    seen = set(existing)
    adds = 0
    for item in incoming:
        if adds >= max_adds:
            break
        if item and item not in seen:
            seen.add(item)
            out.append(item)
            adds += 1
    return out


def accumulate_registry(
    registry: SourceRegistry,
    discovered: DiscoveryResult,
    config: FrameworkConfig,
    now: str,
) -> SourceRegistry:
    """Return a new registry with this run's discoveries merged in."""
    max_adds = config.knobs.max_discovery_adds_per_source
    grown = {
        category: (
            registry.discovered.get(category)
            if category in FIXED_CATEGORIES
            else add_discovered(registry.discovered.get(category), discovered.get(category), max_adds)
        )
        for category in REGISTRY_CATEGORIES
    }
    return SourceRegistry(
        generated_at=now,
        explicit=registry.explicit,
        discovered=RegistrySources(**grown),
        meta=RegistryMeta(
            discovery_enabled=config.discovery.enabled and registry.meta.discovery_enabled,
            max_probe_candidates=probe_cap(config, registry),
        ),
    )
