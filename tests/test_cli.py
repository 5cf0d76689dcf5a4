from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pipelines.cli import KIT_FILES, app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("SERPAPI_API_KEY", "ADZUNA_APP_ID", "ADZUNA_APP_KEY", "JOOBLE_API_KEY", "VERBOSE"):
        monkeypatch.delenv(name, raising=False)


def test_check_reports_config_profile_and_buckets(kit: Callable[..., dict[str, Path]]) -> None:
    paths = kit()
    result = runner.invoke(app, ["check", "--config", str(paths["config"]), "--profiles", str(paths["profiles"])])

    assert result.exit_code == 0, result.output
    assert f"OK config: {paths['config']}" in result.output
    assert "OK profile: data-eng (Data Engineering)" in result.output
    assert "Active buckets: core" in result.output
    assert "Discovery enabled: false" in result.output


def test_check_fails_on_missing_profile(kit: Callable[..., dict[str, Path]], tmp_path: Path) -> None:
    paths = kit()
    empty = tmp_path / "no-profiles"
    empty.mkdir()

    result = runner.invoke(app, ["check", "--config", str(paths["config"]), "--profiles", str(empty)])
    assert result.exit_code == 1


def test_run_exits_non_zero_on_bad_config(tmp_path: Path) -> None:
    config = tmp_path / "roles.config.yml"
    config.write_text("schema_version: roles-radar.v9\n", encoding="utf-8")

    result = runner.invoke(app, ["run", "--config", str(config), "--profiles", str(tmp_path)])
    assert result.exit_code == 1


def test_init_creates_kit_without_overwriting(tmp_path: Path) -> None:
    target = tmp_path / "kit"
    target.mkdir()
    (target / "roles.config.yml").write_text("mine\n", encoding="utf-8")

    result = runner.invoke(app, ["init", "--target", str(target)])

    assert result.exit_code == 0, result.output
    assert f"kept {target / 'roles.config.yml'}" in result.output
    assert (target / "roles.config.yml").read_text(encoding="utf-8") == "mine\n"
    for _, relative in KIT_FILES[1:]:
        assert (target / relative).exists()
        assert f"created {target / relative}" in result.output


def test_initialized_kit_passes_check(tmp_path: Path) -> None:
    target = tmp_path / "kit"
    assert runner.invoke(app, ["init", "--target", str(target)]).exit_code == 0

    result = runner.invoke(
        app,
        ["check", "--config", str(target / "roles.config.yml"), "--profiles", str(target / "profiles")],
    )
    assert result.exit_code == 0, result.output
    assert "OK profile: data-engineer-de-eu" in result.output
