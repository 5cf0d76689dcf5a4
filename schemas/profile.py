"""Role profile and bucket rule schemas."""

from __future__ import annotations

import re

from pydantic import Field, field_validator, model_validator

from .base import BaseSchema


def _check_patterns(patterns: list[str]) -> list[str]:
    for pattern in patterns:
        try:
            re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"invalid pattern {pattern!r}: {e}") from e
    return patterns


class BucketRule(BaseSchema):
    """A named filter + scoring configuration producing one ranked list."""

    id: str
    label: str = ""
    include_title_patterns: list[str] = Field(default_factory=list)
    include_title_keywords: list[str] = Field(default_factory=list)
    include_text_patterns: list[str] = Field(default_factory=list)
    include_text_keywords: list[str] = Field(default_factory=list)
    exclude_text_patterns: list[str] = Field(default_factory=list)
    exclude_text_keywords: list[str] = Field(default_factory=list)
    min_score: int = 70
    min_skill_hits: int = Field(default=0, ge=0)
    max_results: int = Field(default=200, ge=0)
    require_employer_allowlist: bool = False

    @field_validator(
        "include_title_patterns",
        "include_text_patterns",
        "exclude_text_patterns",
    )
    @classmethod
    def _valid_patterns(cls, v: list[str]) -> list[str]:
        return _check_patterns(v)


class LocationPreferences(BaseSchema):
    """Location term lists, matched as case-insensitive substrings."""

    countries: list[str] = Field(default_factory=list)
    cities: list[str] = Field(default_factory=list)
    priority_countries: list[str] = Field(default_factory=list)
    priority_cities: list[str] = Field(default_factory=list)
    exclude_countries: list[str] = Field(default_factory=list)
    exclude_cities: list[str] = Field(default_factory=list)

    @property
    def allow_terms(self) -> list[str]:
        return [*self.countries, *self.cities]

    @property
    def priority_terms(self) -> list[str]:
        return [*self.priority_countries, *self.priority_cities]

    @property
    def exclude_terms(self) -> list[str]:
        return [*self.exclude_countries, *self.exclude_cities]


class KeywordPreferences(BaseSchema):
    """Profile-wide keyword gates and bonuses."""

    must_have: list[str] = Field(default_factory=list)
    nice_to_have: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class RoleProfile(BaseSchema):
    """Schema for a profile file under the profiles directory."""

    id: str
    display_name: str = ""
    active_bucket_ids: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    locations: LocationPreferences = Field(default_factory=LocationPreferences)
    keywords: KeywordPreferences = Field(default_factory=KeywordPreferences)
    geo_allow_patterns: list[str] = Field(default_factory=list)
    geo_priority_patterns: list[str] = Field(default_factory=list)
    geo_exclude_patterns: list[str] = Field(default_factory=list)
    employer_allowlist: list[str] = Field(default_factory=list)
    buckets: list[BucketRule] = Field(..., min_length=1)

    @field_validator(
        "geo_allow_patterns",
        "geo_priority_patterns",
        "geo_exclude_patterns",
        "employer_allowlist",
    )
    @classmethod
    def _valid_patterns(cls, v: list[str]) -> list[str]:
        return _check_patterns(v)

    @model_validator(mode="after")
    def _unique_bucket_ids(self) -> RoleProfile:
        ids = [b.id for b in self.buckets]
        if len(ids) != len(set(ids)):
            raise ValueError("bucket ids must be unique")
        return self

    def active_buckets(self) -> list[BucketRule]:
        """Buckets to process: the allow-list if set, otherwise all of them."""
        if not self.active_bucket_ids:
            return list(self.buckets)
        allowed = set(self.active_bucket_ids)
        return [b for b in self.buckets if b.id in allowed]
