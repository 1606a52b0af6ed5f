"""Read-only view of the config source and the project's bootstrap signals."""

from __future__ import annotations

import re
from pathlib import Path

from site_bootstrap.configfile.source import (
    Span,
    child_blocks,
    find_array,
    find_block,
    key_pattern,
    root_span,
    search_direct,
)
from site_bootstrap.configfile.transforms import PHASE_KEY
from site_bootstrap.errors import ConfigFileMissing
from site_bootstrap.settings import ProjectLayout
from site_bootstrap.types import (
    ConfigSummary,
    LifecyclePhase,
    Locale,
    SummaryFeatures,
)

PROJECT_BRIEF = "PROJECT.md"
_BRIEF_HEADING = "## Project Overview"
_BRIEF_PLACEHOLDER = "[Your project name]"

_LOCALE_LITERAL = re.compile(
    r"\{\s*code:\s*['\"](\w+)['\"]\s*,\s*iso:\s*['\"]([^'\"]+)['\"]\s*,"
    r"\s*name:\s*['\"]([^'\"]+)['\"]\s*\}"
)
_DEFAULT_LOCALE = Locale(code="en", iso="en-US", name="English")


def read_string(text: str, key: str, span: Span | None = None) -> str | None:
    pattern = re.compile(key_pattern(key) + r"['\"]([^'\"\n]*)['\"]")
    m = search_direct(text, pattern, span or root_span(text))
    return m.group(1) if m else None


def read_boolean(text: str, key: str, span: Span | None = None) -> bool | None:
    pattern = re.compile(key_pattern(key) + r"(true|false)\b")
    m = search_direct(text, pattern, span or root_span(text))
    return None if m is None else m.group(1) == "true"


def read_nested_boolean(text: str, path: tuple[str, ...], key: str) -> bool | None:
    block = find_block(text, path)
    return None if block is None else read_boolean(text, key, block)


def parse_phase(text: str) -> LifecyclePhase | None:
    """The lifecycle phase declared in *text*, or None if missing or invalid."""
    value = read_string(text, PHASE_KEY)
    try:
        return LifecyclePhase(value) if value is not None else None
    except ValueError:
        return None


def read_phase(config_path: Path) -> LifecyclePhase | None:
    return parse_phase(config_path.read_text(encoding="utf-8"))


def parse_locales(text: str) -> list[Locale]:
    found = find_array(text, "locales")
    if found is None:
        return [_DEFAULT_LOCALE]
    body = text[found[0] + 1 : found[1]]
    locales = [
        Locale(code=m.group(1), iso=m.group(2), name=m.group(3))
        for m in _LOCALE_LITERAL.finditer(body)
    ]
    return locales or [_DEFAULT_LOCALE]


def parse_enabled_modules(text: str) -> list[str]:
    block = find_block(text, ("modules",))
    if block is None:
        return []
    return [name for name, span in child_blocks(text, block) if read_boolean(text, "enabled", span)]


def parse_summary(text: str) -> ConfigSummary:
    website = read_nested_boolean(text, ("entities",), "website")
    app = read_nested_boolean(text, ("entities",), "app")
    project_type = "website" if website else ("app" if app else None)

    features = find_block(text, ("features",))
    flags = {}
    if features is not None:
        for name in ("multiLangs", "doubleTheme", "onepager", "pwa"):
            flags[name] = bool(read_boolean(text, name, features))

    return ConfigSummary(
        pm_mode=parse_phase(text) or LifecyclePhase.UNCONFIGURED,
        project_type=project_type,
        admin_enabled=bool(read_nested_boolean(text, ("admin",), "enabled")),
        locales=parse_locales(text),
        default_locale=read_string(text, "defaultLocale") or "en",
        enabled_modules=parse_enabled_modules(text),
        features=SummaryFeatures.model_validate(flags),
    )


# --- Brownfield / data store signals ------------------------------------------


def list_import_folder(import_dir: Path) -> list[str]:
    """Top-level entries of the staging directory, hidden files omitted; directories end in '/'."""
    if not import_dir.is_dir():
        return []
    listing = []
    for entry in sorted(import_dir.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            listing.append(f"{entry.name}/")
        elif not entry.name.startswith("."):
            listing.append(entry.name)
    return listing


def has_brownfield_content(import_dir: Path) -> bool:
    """Does the staging directory hold real, non-template project content?"""
    brief = import_dir / PROJECT_BRIEF
    if brief.is_file():
        content = brief.read_text(encoding="utf-8", errors="replace")
        if _BRIEF_HEADING in content and _BRIEF_PLACEHOLDER not in content:
            return True
    return any(
        name != PROJECT_BRIEF and not name.startswith(".") for name in list_import_folder(import_dir)
    )


def read_config_summary(layout: ProjectLayout) -> ConfigSummary:
    """Parsed config summary plus staging and data-store signals. Never mutates."""
    if not layout.config_path.is_file():
        raise ConfigFileMissing()
    summary = parse_summary(layout.config_path.read_text(encoding="utf-8"))
    summary.has_brownfield_content = has_brownfield_content(layout.import_dir)
    summary.import_folder_files = list_import_folder(layout.import_dir)
    summary.database_exists = layout.database_path.exists()
    return summary


_MODE_LABELS = {
    LifecyclePhase.UNCONFIGURED: "Unconfigured (needs setup)",
    LifecyclePhase.BUILD: "BUILD mode (client project)",
    LifecyclePhase.DEVELOP: "DEVELOP mode (framework development)",
}


def format_status(summary: ConfigSummary) -> list[str]:
    lines = [f"Mode: {_MODE_LABELS[summary.pm_mode]}"]
    if summary.pm_mode is LifecyclePhase.BUILD and summary.project_type:
        lines.append(f"Project Type: {summary.project_type.capitalize()}")
    lines.append(f"Admin Panel: {'Enabled' if summary.admin_enabled else 'Disabled'}")
    codes = ", ".join(loc.code for loc in summary.locales)
    lines.append(f"Locales: {codes} (default: {summary.default_locale})")
    lines.append(f"Modules: {', '.join(summary.enabled_modules) or 'None enabled'}")
    active = [name for name, on in summary.features.model_dump(by_alias=True).items() if on]
    if active:
        lines.append(f"Features: {', '.join(active)}")
    lines.append(f"Database: {'Exists' if summary.database_exists else 'Not created'}")
    if summary.has_brownfield_content:
        lines.append("Import: Brownfield content detected")
    return lines
