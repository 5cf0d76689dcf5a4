"""Source discovery: query generation, ATS probes and registry growth."""

from discovery.probe import DiscoveryResult, ProbeResult, candidate_pool, discover_sources, probe_candidate
from discovery.queries import build_official_career_pages, build_search_queries
from discovery.registry import accumulate_registry, add_discovered

__all__ = [
    "DiscoveryResult",
    "ProbeResult",
    "accumulate_registry",
    "add_discovered",
    "build_official_career_pages",
    "build_search_queries",
    "candidate_pool",
    "discover_sources",
    "probe_candidate",
]
