"""Filter and scoring engine: classify postings into a profile's buckets.

Each bucket is evaluated independently against the same postings. A gate
with no patterns or terms configured is skipped, never rejects everything.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.ids import dedupe_key, normalize_text, unique
from schemas.posting import Posting, ScoredPosting
from schemas.profile import BucketRule, RoleProfile
from scoring.matchers import Gate, includes_all, includes_any

GEO_ALLOW_POINTS = 30
GEO_PRIORITY_POINTS = 40
EMPLOYER_POINTS = 20
SKILL_POINTS = 4
NICE_TO_HAVE_POINTS = 2


@dataclass(frozen=True)
class ProfileMatchers:
    """Profile-level gates and term lists, compiled once per run."""

    geo_allow: Gate
    geo_priority: Gate
    geo_exclude: Gate
    employer: Gate
    skills: tuple[str, ...]
    nice_to_have: tuple[str, ...]
    must_have: tuple[str, ...]
    exclude_keywords: tuple[str, ...]

    @classmethod
    def from_profile(cls, profile: RoleProfile) -> ProfileMatchers:
        return cls(
            geo_allow=Gate.build(profile.geo_allow_patterns, profile.locations.allow_terms),
            geo_priority=Gate.build(profile.geo_priority_patterns, profile.locations.priority_terms),
            geo_exclude=Gate.build(profile.geo_exclude_patterns, profile.locations.exclude_terms),
            employer=Gate.build(profile.employer_allowlist),
            skills=tuple(unique(normalize_text(s) for s in profile.skills)),
            nice_to_have=tuple(unique(normalize_text(k) for k in profile.keywords.nice_to_have)),
            must_have=tuple(profile.keywords.must_have),
            exclude_keywords=tuple(profile.keywords.exclude),
        )


def _geo_text(posting: Posting) -> str:
    return posting.location or posting.description


def _employer_text(posting: Posting) -> str:
    return posting.company or posting.description


def score_posting(posting: Posting, matchers: ProfileMatchers) -> tuple[int, int]:
    """Return (score, skill_hits) for one posting."""
    text = normalize_text(
        f"{posting.title} {posting.location} {posting.company} {posting.description}"
    )
    score = 0
    if matchers.geo_allow.matches(_geo_text(posting)):
        score += GEO_ALLOW_POINTS
    if matchers.geo_priority.defined and matchers.geo_priority.matches(_geo_text(posting)):
        score += GEO_PRIORITY_POINTS
    if matchers.employer.defined and matchers.employer.matches(_employer_text(posting)):
        score += EMPLOYER_POINTS

    skill_hits = sum(1 for skill in matchers.skills if skill in text)
    score += skill_hits * SKILL_POINTS
    score += NICE_TO_HAVE_POINTS * sum(1 for kw in matchers.nice_to_have if kw in text)
    return score, skill_hits


def _passes_gates(posting: Posting, bucket: BucketRule, matchers: ProfileMatchers) -> bool:
    title_gate = Gate.build(bucket.include_title_patterns, bucket.include_title_keywords)
    text_gate = Gate.build(bucket.include_text_patterns, bucket.include_text_keywords)
    exclude_gate = Gate.build(bucket.exclude_text_patterns, bucket.exclude_text_keywords)
    title_desc = f"{posting.title} {posting.description}"
    full_text = f"{posting.title} {posting.company} {posting.description}"

    if title_gate.defined and not title_gate.matches(posting.title):
        return False
    if text_gate.defined and not text_gate.matches(title_desc):
        return False
    if matchers.geo_allow.defined and not matchers.geo_allow.matches(_geo_text(posting)):
        return False
    if matchers.geo_exclude.defined and matchers.geo_exclude.matches(_geo_text(posting)):
        return False
    if exclude_gate.defined and exclude_gate.matches(title_desc):
        return False
    if not includes_all(full_text, list(matchers.must_have)):
        return False
    if includes_any(full_text, list(matchers.exclude_keywords)):
        return False
    return True


def filter_bucket(
    postings: list[Posting],
    profile: RoleProfile,
    bucket: BucketRule,
    matchers: ProfileMatchers | None = None,
) -> list[ScoredPosting]:
    """Gate, score, threshold, rank, dedupe and cap postings for one bucket."""
    matchers = matchers or ProfileMatchers.from_profile(profile)
    scored: list[ScoredPosting] = []

    for posting in postings:
        if not posting.is_valid or not _passes_gates(posting, bucket, matchers):
            continue
        score, skill_hits = score_posting(posting, matchers)
        if score < bucket.min_score or skill_hits < bucket.min_skill_hits:
            continue
        if bucket.require_employer_allowlist and not matchers.employer.matches(_employer_text(posting)):
            continue
        scored.append(
            ScoredPosting(
                **posting.model_dump(),
                score=score,
                skill_hits=skill_hits,
                bucket_id=bucket.id,
            )
        )

    scored.sort(key=lambda p: p.score, reverse=True)

    ranked: list[ScoredPosting] = []
    seen: set[str] = set()
    for posting in scored:
        key = dedupe_key(posting.company, posting.title, posting.location, posting.url)
        if key in seen:
            continue
        seen.add(key)
        ranked.append(posting)
    return ranked[: bucket.max_results]


def score_buckets(postings: list[Posting], profile: RoleProfile) -> dict[str, list[ScoredPosting]]:
    """Run every active bucket over the same postings."""
    matchers = ProfileMatchers.from_profile(profile)
    return {
        bucket.id: filter_bucket(postings, profile, bucket, matchers)
        for bucket in profile.active_buckets()
    }
