"""Core infrastructure: settings, run context, logging, and utilities."""

from core import verbose
from core.config import Settings, parse_env_list
from core.context import RunContext, RunStatus
from core.ids import dedupe_key, generate_run_id, normalize_text, slugify, unique
from core.log import configure_logging

__all__ = [
    "Settings",
    "parse_env_list",
    "RunContext",
    "RunStatus",
    "configure_logging",
    "dedupe_key",
    "generate_run_id",
    "normalize_text",
    "slugify",
    "unique",
    "verbose",
]
