"""Typer CLI entrypoint for roles-radar."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

import typer

from core.config import Settings
from core.log import configure_logging
from orchestration.runner import run_pipeline
from pipelines.utils import ConfigValidationError, load_config, load_profile
from storage.store import FileRunStore

TEMPLATES_DIR = Path(__file__).parent / "templates"

# (template path, path under the kit directory)
KIT_FILES = (
    ("roles.config.yml", "roles.config.yml"),
    ("roles-sources.yml", "roles-sources.yml"),
    ("providers.runtime.yml", "providers.runtime.yml"),
    ("profiles/data-engineer-de-eu.yml", "profiles/data-engineer-de-eu.yml"),
)

app = typer.Typer(
    help="roles-radar: aggregate, score and track job postings",
    no_args_is_help=True,
    rich_markup_mode=None,
)


def _settings(verbose: Optional[int]) -> Settings:
    settings = Settings() if verbose is None else Settings(verbose=verbose)
    configure_logging(settings.log_level)
    return settings


def _config_path(settings: Settings, override: Optional[Path]) -> Path:
    """Explicit path, else the default, else its legacy .json sibling."""
    if override is not None:
        return override
    default = Path(settings.config_path)
    legacy = default.with_suffix(".json")
    if not default.exists() and legacy.exists():
        return legacy
    return default


def _fail(error: ConfigValidationError) -> None:
    typer.echo(f"Configuration error: {error}", err=True)
    for item in error.errors:
        loc = ".".join(str(part) for part in item.get("loc", ()))
        typer.echo(f"  {loc}: {item.get('msg', '')}", err=True)
    raise typer.Exit(code=1)


@app.command("run")
def run_command(
    config: Optional[Path] = typer.Option(None, "--config", help="Framework config file."),
    profiles: Optional[Path] = typer.Option(None, "--profiles", help="Role profiles directory."),
    runtime: Optional[Path] = typer.Option(None, "--runtime", help="Runtime provider overlay file."),
    verbose: Optional[int] = typer.Option(None, "--verbose", "-v", help="Console verbosity 0-3."),
) -> None:
    """Fetch, score, reconcile and write the output document."""
    settings = _settings(verbose)
    try:
        ctx = run_pipeline(
            config_path=_config_path(settings, config),
            profiles_dir=profiles,
            runtime_path=runtime,
            settings=settings,
        )
    except ConfigValidationError as e:
        _fail(e)
        return

    metrics = ctx.metrics
    typer.echo(f"wrote {ctx.output_path} and {ctx.registry_path}")
    typer.echo(
        f"{metrics.num_postings_fetched} fetched, {metrics.num_postings_kept} active, "
        f"{metrics.num_postings_archived} archived, {metrics.num_sources_discovered} new sources"
        + (" (fetch budget exhausted)" if metrics.fetch_timed_out else "")
    )


@app.command("check")
def check_command(
    config: Optional[Path] = typer.Option(None, "--config", help="Framework config file."),
    profiles: Optional[Path] = typer.Option(None, "--profiles", help="Role profiles directory."),
) -> None:
    """Validate config, profile and registry without fetching anything."""
    settings = _settings(None)
    config_path = _config_path(settings, config)
    try:
        framework = load_config(config_path)
        profile = load_profile(profiles or settings.profiles_dir, framework.profile_id)
    except ConfigValidationError as e:
        _fail(e)
        return

    registry_path = framework.paths.source_registry_file
    registry = FileRunStore(framework.paths.output_file, registry_path).load_registry()

    typer.echo(f"OK config: {config_path}")
    typer.echo(f"OK profile: {profile.id} ({profile.display_name})")
    typer.echo(f"OK registry: {registry_path}")
    typer.echo(f"Active buckets: {', '.join(b.id for b in profile.active_buckets())}")
    typer.echo(f"Discovery enabled: {str(framework.discovery.enabled and registry.meta.discovery_enabled).lower()}")


@app.command("init")
def init_command(
    target: Optional[Path] = typer.Option(None, "--target", help="Kit directory (default: roles-kit)."),
) -> None:
    """Copy example config, overlay, registry and profile without overwriting."""
    kit_dir = target or Path(Settings().config_path).parent
    for template, relative in KIT_FILES:
        destination = kit_dir / relative
        if destination.exists():
            typer.echo(f"kept {destination}")
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(TEMPLATES_DIR / template, destination)
        typer.echo(f"created {destination}")
    typer.echo(f"Initialized roles-kit at {kit_dir}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
