from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from site_bootstrap.cli import app
from site_bootstrap.configfile import reader
from site_bootstrap.types import LifecyclePhase

runner = CliRunner()


def test_status_json(layout) -> None:
    result = runner.invoke(app, ["status", "--root", str(layout.root), "--json"])
    assert result.exit_code == 0, result.output

    data = json.loads(result.output)
    assert data["pmMode"] == "unconfigured"
    assert data["enabledModules"] == ["portfolio", "contact"]
    assert data["hasBrownfieldContent"] is False


def test_status_text(layout) -> None:
    result = runner.invoke(app, ["status", "--root", str(layout.root)])
    assert result.exit_code == 0, result.output
    assert "Mode: Unconfigured" in result.output
    assert "Modules: portfolio, contact" in result.output


def test_import_and_clear(layout, make_zip, tmp_path) -> None:
    archive = tmp_path / "site.zip"
    archive.write_bytes(make_zip({"PROJECT.md": "## Project Overview\nAcme\n", "src/app.ts": "x"}))

    result = runner.invoke(app, ["import-zip", str(archive), "--root", str(layout.root)])
    assert result.exit_code == 0, result.output
    assert "src/app.ts" in result.output
    assert (layout.import_dir / "PROJECT.md").exists()

    result = runner.invoke(app, ["clear-import", "--root", str(layout.root)])
    assert result.exit_code == 0, result.output
    assert not layout.import_dir.exists()


def test_configure_without_db_sync(layout) -> None:
    result = runner.invoke(
        app,
        [
            "configure",
            "--root",
            str(layout.root),
            "--phase",
            "build",
            "--type",
            "app",
            "--no-admin",
            "--locale",
            "en:en-US:English",
            "--locale",
            "ru:ru-RU:Russian",
            "--default-locale",
            "ru",
            "--module",
            "blog",
            "--feature",
            "pwa=true",
            "--no-db-sync",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Configuration saved" in result.output

    summary = reader.parse_summary(layout.config_path.read_text(encoding="utf-8"))
    assert summary.pm_mode is LifecyclePhase.BUILD
    assert summary.project_type == "app"
    assert summary.admin_enabled is False
    assert summary.default_locale == "ru"
    assert summary.enabled_modules == ["blog"]
    assert summary.features.pwa is True


def test_configure_from_json(layout, tmp_path) -> None:
    body = tmp_path / "answers.json"
    body.write_text(json.dumps({"pmMode": "develop", "modules": []}), encoding="utf-8")

    result = runner.invoke(
        app, ["configure", "--root", str(layout.root), "--from-json", str(body), "--no-db-sync"]
    )
    assert result.exit_code == 0, result.output
    summary = reader.parse_summary(layout.config_path.read_text(encoding="utf-8"))
    assert summary.pm_mode is LifecyclePhase.DEVELOP
    assert summary.enabled_modules == []


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", "\"build\""])
def test_configure_rejects_bad_request_file(layout, tmp_path, content) -> None:
    body = tmp_path / "answers.json"
    body.write_text(content, encoding="utf-8")
    original = layout.config_path.read_bytes()

    result = runner.invoke(
        app, ["configure", "--root", str(layout.root), "--from-json", str(body), "--no-db-sync"]
    )

    assert result.exit_code == 1
    assert "CFG_001" in result.output
    assert layout.config_path.read_bytes() == original


def test_errors_exit_with_code(layout, set_phase, make_zip, tmp_path) -> None:
    set_phase(layout, "build")
    archive = tmp_path / "site.zip"
    archive.write_bytes(make_zip({"a.txt": "x"}))

    result = runner.invoke(app, ["import-zip", str(archive), "--root", str(layout.root)])
    assert result.exit_code == 1
    assert "SETUP_001" in result.output

    result = runner.invoke(app, ["configure", "--root", str(layout.root), "--no-db-sync"])
    assert result.exit_code == 1
    assert "SETUP_001" in result.output


def test_reset_then_rollback(layout, set_phase) -> None:
    set_phase(layout, "build")

    result = runner.invoke(app, ["reset", "--root", str(layout.root)])
    assert result.exit_code == 0, result.output
    assert reader.read_phase(layout.config_path) is LifecyclePhase.UNCONFIGURED

    result = runner.invoke(app, ["rollback", "--root", str(layout.root)])
    assert result.exit_code == 0, result.output
    assert reader.read_phase(layout.config_path) is LifecyclePhase.BUILD
