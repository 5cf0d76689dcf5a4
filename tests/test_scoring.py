from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest
from pydantic import ValidationError

from schemas.posting import Posting
from schemas.profile import RoleProfile
from scoring.engine import ProfileMatchers, filter_bucket, score_buckets, score_posting
from scoring.matchers import Gate, includes_all, includes_any


def test_geo_match_alone_clears_threshold(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(bucket={"min_score": 30}, geo_allow_patterns=["germany"])
    (kept,) = filter_bucket([make_posting()], profile, profile.buckets[0])
    assert kept.score >= 30
    assert kept.bucket_id == "main"


def test_missing_url_is_always_excluded(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(bucket={"min_score": 0}, geo_allow_patterns=["germany"], skills=["data"])
    assert filter_bucket([make_posting(url="")], profile, profile.buckets[0]) == []


def test_score_components(make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]) -> None:
    profile = make_profile(
        geo_allow_patterns=["germany"],
        geo_priority_patterns=["berlin"],
        employer_allowlist=["acme"],
        skills=["Python", "sql", "python", "rust"],
        keywords={"nice_to_have": ["streaming"]},
    )
    posting = make_posting(description="Python and SQL for streaming pipelines")
    score, skill_hits = score_posting(posting, ProfileMatchers.from_profile(profile))
    # geo 30 + priority 40 + employer 20 + 2 skills * 4 + 1 nice-to-have * 2
    assert skill_hits == 2
    assert score == 30 + 40 + 20 + 8 + 2


def test_location_falls_back_to_description_for_geo(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(bucket={"min_score": 30}, geo_allow_patterns=["germany"])
    posting = make_posting(location="", description="Hybrid role based in Germany")
    assert len(filter_bucket([posting], profile, profile.buckets[0])) == 1


def test_thresholds_and_employer_requirement(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(
        bucket={"min_score": 30, "min_skill_hits": 1, "require_employer_allowlist": True},
        geo_allow_patterns=["germany"],
        skills=["python"],
        employer_allowlist=["^acme$"],
    )
    bucket = profile.buckets[0]
    matching = make_posting(description="python")
    no_skill = make_posting(url="https://acme.example/jobs/2")
    other_employer = make_posting(company="Globex", url="https://globex.example/1", description="python")

    kept = filter_bucket([matching, no_skill, other_employer], profile, bucket)
    assert [p.url for p in kept] == [matching.url]


def test_gates_apply_in_order(make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]) -> None:
    profile = make_profile(
        bucket={
            "min_score": 0,
            "include_title_patterns": [r"\bdata\b"],
            "include_text_keywords": ["pipelines"],
            "exclude_text_keywords": ["unpaid"],
        },
        geo_exclude_patterns=["remote us"],
        keywords={"must_have": ["python"], "exclude": ["werkstudent"]},
    )
    bucket = profile.buckets[0]
    good = make_posting(description="python pipelines")
    rejected = [
        {"title": "Backend Engineer", "description": "python pipelines"},
        {"description": "python dashboards"},
        {"location": "Remote US", "description": "python pipelines"},
        {"description": "unpaid python pipelines"},
        {"description": "java pipelines"},
        {"description": "python pipelines werkstudent"},
    ]
    cases = [make_posting(url=f"https://acme.example/jobs/r{i}", **fields) for i, fields in enumerate(rejected)]

    kept = filter_bucket([good, *cases], profile, bucket)
    assert [p.url for p in kept] == [good.url]


def test_ranking_dedupes_and_truncates(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(bucket={"min_score": 0, "max_results": 2}, skills=["python", "sql", "spark"])
    bucket = profile.buckets[0]
    low = make_posting(url="https://acme.example/jobs/low", description="python")
    high = make_posting(url="https://acme.example/jobs/high", description="python sql spark")
    mid = make_posting(url="https://acme.example/jobs/mid", description="python sql")
    high_again = make_posting(source="lever", url="https://acme.example/jobs/high", description="python sql spark")

    kept = filter_bucket([low, high, mid, high_again], profile, bucket)
    assert [p.url for p in kept] == [high.url, mid.url]
    assert kept[0].source == "greenhouse"


def test_every_included_posting_is_valid_and_above_threshold(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    profile = make_profile(bucket={"min_score": 34}, geo_allow_patterns=["germany"], skills=["python"])
    postings = [
        make_posting(url=f"https://acme.example/jobs/{i}", description=desc, location=loc)
        for i, (desc, loc) in enumerate(
            itertools.product(["python", "java", ""], ["Berlin, Germany", "Paris, France", ""])
        )
    ] + [make_posting(title=""), make_posting(url="")]

    for posting in filter_bucket(postings, profile, profile.buckets[0]):
        assert posting.title and posting.url
        assert posting.score >= 34


def test_unset_gates_never_reduce_results(
    make_profile: Callable[..., RoleProfile], make_posting: Callable[..., Posting]
) -> None:
    postings = [
        make_posting(title="Data Engineer", url="https://a.example/1", description="spark pipelines"),
        make_posting(title="Backend Engineer", url="https://a.example/2", description="go services"),
        make_posting(title="Data Analyst", url="https://a.example/3", description="internship"),
    ]
    gates = {
        "include_title_keywords": ["data"],
        "include_text_patterns": ["spark|services"],
        "exclude_text_keywords": ["internship"],
    }
    ungated = make_profile(bucket={"min_score": 0})
    baseline = {p.url for p in filter_bucket(postings, ungated, ungated.buckets[0])}
    assert len(baseline) == 3

    for size in range(1, len(gates) + 1):
        for subset in itertools.combinations(gates, size):
            profile = make_profile(bucket={"min_score": 0, **{k: gates[k] for k in subset}})
            kept = {p.url for p in filter_bucket(postings, profile, profile.buckets[0])}
            assert kept <= baseline


def test_score_buckets_honours_active_bucket_allow_list(
    make_posting: Callable[..., Posting],
) -> None:
    profile = RoleProfile.model_validate(
        {
            "id": "p",
            "active_bucket_ids": ["b"],
            "buckets": [{"id": "a", "min_score": 0}, {"id": "b", "min_score": 0}],
        }
    )
    result = score_buckets([make_posting()], profile)
    assert list(result) == ["b"]
    assert result["b"][0].bucket_id == "b"


def test_invalid_pattern_is_rejected_at_load() -> None:
    with pytest.raises(ValidationError):
        RoleProfile.model_validate({"id": "p", "geo_allow_patterns": ["(unclosed"], "buckets": [{"id": "a"}]})


def test_matchers_normalize_and_handle_empty_input() -> None:
    assert includes_any("Senior  DATA engineer", ["data engineer"])
    assert not includes_any("", ["data"])
    assert not includes_any("data", [])
    assert includes_all("anything", [])
    assert not includes_all("python only", ["python", "sql"])

    gate = Gate.build(["^senior"], ["lead"])
    assert gate.defined
    assert gate.matches("Senior Engineer")
    assert gate.matches("Tech Lead")
    assert not gate.matches("")
    assert not Gate.build().defined
