"""Verbose console output for run observability.

Module-level singleton. Call configure() once at boot,
then use header/stage/step/detail/counts from anywhere.

Levels:
    0 (OFF)  : silent (default)
    1 (INFO) : header, stage, stage_end
    2 (DEBUG): + step, counts
    3 (TRACE): + detail
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum

_level: int = 0


class Level(IntEnum):
    """Verbosity levels."""

    OFF = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def configure(level: int) -> None:
    """Set verbosity level. Called once at boot."""
    global _level
    _level = level


def get_level() -> int:
    return _level


def _emit(min_level: Level, text: str) -> None:
    if _level >= min_level:
        print(text)


def header(text: str) -> None:
    _emit(Level.INFO, f"\n═══ {text} ═══\n")


def stage(name: str, description: str) -> None:
    _emit(Level.INFO, f"── {name}: {description} ──")


def stage_end(name: str, items_out: int, errors: int, duration: float) -> None:
    _emit(
        Level.INFO,
        f"── {name} done ({items_out} out, {errors} errors, {duration:.2f}s) ──\n",
    )


def step(text: str) -> None:
    _emit(Level.DEBUG, f"  {text}")


def counts(title: str, values: Mapping[str, int]) -> None:
    """Aligned name/count listing, skipped when empty."""
    if _level < Level.DEBUG or not values:
        return
    width = max(len(k) for k in values)
    print(f"  {title}")
    for key, value in values.items():
        print(f"    {key:<{width}s}  {value}")


def detail(text: str) -> None:
    _emit(Level.TRACE, f"    {text}")
