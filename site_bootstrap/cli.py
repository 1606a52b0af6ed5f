"""site-bootstrap CLI: terminal alternative to the setup wizard.

Commands:
- status          show the parsed config and bootstrap signals (read-only)
- import-zip      stage a local ZIP for brownfield migration
- fetch-zip       stage a remote ZIP (declared Content-Length required)
- clear-import    remove the staging directory
- configure       apply wizard answers to the config source
- reset / rollback  escape hatches for reconfiguring a project
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from site_bootstrap.configfile.reader import format_status
from site_bootstrap.configfile.schema_sync import DEFAULT_COMMAND, DEFAULT_TIMEOUT, SchemaSync
from site_bootstrap.core import BootstrapSession
from site_bootstrap.errors import BootstrapError, InvalidConfiguration
from site_bootstrap.importer.intake import fetch_upload, upload_from_path
from site_bootstrap.settings import ArchiveLimits, ProjectLayout
from site_bootstrap.types import ImportManifest, WriteResult

app = typer.Typer(add_completion=False, help="Bootstrap a site project: import archives, write config")
console = Console()

ROOT_OPTION = typer.Option(
    ".", "--root", envvar="SITE_BOOTSTRAP_ROOT", help="Project root directory"
)


def _session(root: str, schema_sync: SchemaSync | None = None) -> BootstrapSession:
    return BootstrapSession(
        ProjectLayout.from_root(root), limits=ArchiveLimits.from_env(), schema_sync=schema_sync
    )


def _fail(err: BootstrapError) -> None:
    rprint(f"[red][{err.code}][/red] {escape(err.message)}")
    raise typer.Exit(code=1)


def _show_manifest(manifest: ImportManifest) -> None:
    table = Table(title=f"Imported {manifest.file_count} file(s)")
    table.add_column("File", style="cyan")
    for f in manifest.files:
        table.add_row(f)
    console.print(table)


def _show_write(result: WriteResult) -> None:
    rprint("[green]Configuration saved.[/green]")
    if result.backup_path:
        rprint(f"Snapshot: {result.backup_path}")
    if result.database_status:
        colour = "green" if result.database_status in {"created", "exists"} else "yellow"
        rprint(f"Database: [{colour}]{result.database_status}[/{colour}]")
        if result.database_message:
            rprint(result.database_message)


def _parse_locale(raw: str) -> dict:
    parts = raw.split(":", 2)
    if len(parts) != 3:
        raise typer.BadParameter(f"expected code:iso:name, got {raw!r}")
    code, iso, name = parts
    return {"code": code, "iso": iso, "name": name}


def _parse_feature(raw: str) -> tuple[str, bool]:
    name, sep, value = raw.partition("=")
    if not sep or value.lower() not in {"true", "false"}:
        raise typer.BadParameter(f"expected name=true|false, got {raw!r}")
    return name, value.lower() == "true"


def _read_request_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidConfiguration(f"{path.name} is not valid JSON: {exc}") from None
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"{path.name} must contain a JSON object")
    return data


@app.command()
def status(
    root: str = ROOT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    try:
        summary = _session(root).read_config()
    except BootstrapError as err:
        _fail(err)
    if as_json:
        print(summary.model_dump_json(by_alias=True, indent=2))
        return
    for line in format_status(summary):
        rprint(line)


@app.command("import-zip")
def import_zip(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, help="Path to a .zip"),
    root: str = ROOT_OPTION,
) -> None:
    try:
        manifest = _session(root).import_archive(upload_from_path(archive))
    except BootstrapError as err:
        _fail(err)
    _show_manifest(manifest)


@app.command("fetch-zip")
def fetch_zip(
    url: str = typer.Argument(..., help="http(s) URL of a .zip"),
    root: str = ROOT_OPTION,
    timeout: float = typer.Option(60, "--timeout", help="Download timeout seconds"),
) -> None:
    session = _session(root)
    try:
        upload = fetch_upload(url, session.limits, timeout=timeout)
        manifest = session.import_archive(upload)
    except BootstrapError as err:
        _fail(err)
    _show_manifest(manifest)


@app.command("clear-import")
def clear_import(root: str = ROOT_OPTION) -> None:
    try:
        _session(root).clear_import()
    except BootstrapError as err:
        _fail(err)
    rprint("[green]Import folder cleared.[/green]")


@app.command()
def configure(
    root: str = ROOT_OPTION,
    phase: str | None = typer.Option(None, "--phase", help="unconfigured | build | develop"),
    project_type: str | None = typer.Option(None, "--type", help="website | app"),
    admin: bool = typer.Option(False, "--admin", help="Enable the admin panel"),
    no_admin: bool = typer.Option(False, "--no-admin", help="Disable the admin panel"),
    locale: list[str] | None = typer.Option(
        None, "--locale", help="code:iso:name (repeatable)", show_default=False
    ),
    default_locale: str | None = typer.Option(None, "--default-locale"),
    module: list[str] | None = typer.Option(
        None, "--module", help="Module to enable (repeatable)", show_default=False
    ),
    feature: list[str] | None = typer.Option(
        None, "--feature", help="name=true|false (repeatable)", show_default=False
    ),
    from_json: Path | None = typer.Option(
        None, "--from-json", exists=True, dir_okay=False, help="Read the request body from a file"
    ),
    db_sync: bool = typer.Option(True, "--db-sync/--no-db-sync", help="Run the schema sync"),
    db_timeout: float = typer.Option(DEFAULT_TIMEOUT, "--db-timeout", help="Schema sync timeout seconds"),
) -> None:
    body: dict = {}
    if from_json:
        try:
            body = _read_request_file(from_json)
        except InvalidConfiguration as err:
            _fail(err)
    if phase is not None:
        body["pmMode"] = phase
    if project_type is not None:
        body["projectType"] = project_type
    if admin and no_admin:
        raise typer.BadParameter("--admin and --no-admin are mutually exclusive")
    if admin or no_admin:
        body["adminEnabled"] = admin
    if locale:
        body["locales"] = [_parse_locale(raw) for raw in locale]
    if default_locale is not None:
        body["defaultLocale"] = default_locale
    if module:
        body["modules"] = list(module)
    if feature:
        body.setdefault("features", {}).update(dict(_parse_feature(raw) for raw in feature))

    layout = ProjectLayout.from_root(root)
    sync = SchemaSync(DEFAULT_COMMAND, cwd=layout.root, timeout=db_timeout) if db_sync else None
    try:
        result = _session(root, schema_sync=sync).write_config(body)
    except BootstrapError as err:
        _fail(err)
    _show_write(result)


@app.command()
def reset(root: str = ROOT_OPTION) -> None:
    """Set pmMode back to 'unconfigured' so setup can run again."""
    try:
        result = _session(root).reset()
    except BootstrapError as err:
        _fail(err)
    rprint("[green]Project reset to unconfigured.[/green]")
    if result.backup_path:
        rprint(f"Snapshot: {result.backup_path}")


@app.command()
def rollback(root: str = ROOT_OPTION) -> None:
    """Restore the newest config snapshot."""
    if not _session(root).restore():
        rprint("[yellow]No config snapshot found.[/yellow]")
        raise typer.Exit(code=1)
    rprint("[green]Config restored from the newest snapshot.[/green]")


if __name__ == "__main__":
    app()
