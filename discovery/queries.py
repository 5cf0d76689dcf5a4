"""Search-query and career-page generation for search-backed providers."""

from __future__ import annotations

from core.ids import slugify, unique
from schemas.profile import RoleProfile

DEFAULT_QUERY_COUNTRIES = ["Germany", "India"]
MAX_ROLE_TERMS = 18
MAX_QUERY_COMPANIES = 24
MAX_ROLES_PER_COMPANY = 10

CAREER_PAGE_SHAPES = (
    "https://{slug}.com/careers",
    "https://careers.{slug}.com",
    "https://jobs.{slug}.com",
    "https://{slug}.io/careers",
    "https://careers.{slug}.io",
)


def role_terms(profile: RoleProfile) -> list[str]:
    """Distinct title/text keywords across every bucket."""
    terms: list[str] = []
    for bucket in profile.buckets:
        terms.extend(bucket.include_title_keywords)
        terms.extend(bucket.include_text_keywords)
    return unique(terms)[:MAX_ROLE_TERMS]


def build_search_queries(profile: RoleProfile, companies: list[str], max_queries: int) -> list[str]:
    """Role x place queries, then company x role queries, capped at ``max_queries`` (min 1)."""
    countries = unique(profile.locations.countries or DEFAULT_QUERY_COUNTRIES)
    cities = unique(profile.locations.priority_cities or profile.locations.cities)
    roles = role_terms(profile)

    queries = [f"{role} {place} jobs" for role in roles for place in [*countries, *cities]]
    queries += [
        f"{company} {role} jobs"
        for company in unique(companies)[:MAX_QUERY_COMPANIES]
        for role in roles[:MAX_ROLES_PER_COMPANY]
    ]
    return unique(queries)[: max(1, max_queries)]


def build_official_career_pages(companies: list[str], max_pages: int) -> list[str]:
    """Guess careers URLs for each company slug, capped at ``max_pages`` (min 1)."""
    pages = [
        shape.format(slug=slug)
        for slug in (slugify(company) for company in companies)
        if slug
        for shape in CAREER_PAGE_SHAPES
    ]
    return unique(pages)[: max(1, max_pages)]
