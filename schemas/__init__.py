"""
Pydantic schemas for roles-radar.

Contract-first design: these schemas define the data contracts
between all pipeline stages and the files they persist.
"""

from .config import (
    CONFIG_SCHEMA_VERSION,
    RUNTIME_SCHEMA_VERSION,
    FrameworkConfig,
    Knobs,
    RuntimeProviderConfig,
    RuntimeSources,
    SourcesConfig,
)
from .output import OUTPUT_SCHEMA_VERSION, OutputDocument, OutputMeta
from .posting import DatedPosting, Posting, ScoredPosting
from .profile import BucketRule, KeywordPreferences, LocationPreferences, RoleProfile
from .registry import REGISTRY_CATEGORIES, SLUG_CATEGORIES, RegistrySources, SourceRegistry

__all__ = [
    # Records
    "Posting",
    "ScoredPosting",
    "DatedPosting",
    # Profile
    "RoleProfile",
    "BucketRule",
    "LocationPreferences",
    "KeywordPreferences",
    # Registry
    "SourceRegistry",
    "RegistrySources",
    "REGISTRY_CATEGORIES",
    "SLUG_CATEGORIES",
    # Config
    "CONFIG_SCHEMA_VERSION",
    "RUNTIME_SCHEMA_VERSION",
    "FrameworkConfig",
    "Knobs",
    "SourcesConfig",
    "RuntimeProviderConfig",
    "RuntimeSources",
    # Output
    "OUTPUT_SCHEMA_VERSION",
    "OutputDocument",
    "OutputMeta",
]
