"""Field-level text transforms for the config source.

Each transform is a pure ``str -> str`` function that rewrites one field and
leaves everything else (formatting, comments, unrelated keys) untouched. A key is
only replaced where it is a direct member of the intended object, never the first
textual occurrence anywhere in the file. When the target is absent the text is
returned unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from site_bootstrap.configfile.source import (
    ROOT_OBJECT,
    Span,
    find_array,
    find_block,
    key_pattern,
    root_span,
    search_direct,
)
from site_bootstrap.types import ALL_MODULES, ConfigPatchRequest, Locale

PHASE_KEY = "pmMode"


def _quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _js_bool(value: bool) -> str:
    return "true" if value else "false"


def _replace_first(
    text: str,
    pattern: re.Pattern[str],
    build: Callable[[re.Match[str]], str],
    span: Span,
) -> str:
    m = search_direct(text, pattern, span)
    if m is None:
        return text
    return text[: m.start()] + build(m) + text[m.end() :]


def _newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _line_indent(text: str, idx: int) -> str:
    line_start = text.rfind("\n", 0, idx) + 1
    prefix = text[line_start:idx]
    return prefix[: len(prefix) - len(prefix.lstrip())]


# --- Transforms -------------------------------------------------------------


def replace_boolean(text: str, key: str, value: bool, *, span: Span | None = None) -> str:
    """``key: true|false`` → ``key: <value>`` for the direct member of *span*."""
    pattern = re.compile(rf"({key_pattern(key)})(?:true|false)\b")
    return _replace_first(text, pattern, lambda m: m.group(1) + _js_bool(value), span or root_span(text))


def replace_string(text: str, key: str, value: str, *, span: Span | None = None) -> str:
    """``key: '...'`` / ``key: "..."`` → ``key: '<value>'``."""
    pattern = re.compile(rf"({key_pattern(key)})(?:'[^'\n]*'|\"[^\"\n]*\")")
    return _replace_first(text, pattern, lambda m: m.group(1) + _quote(value), span or root_span(text))


def replace_array(
    text: str, key: str, items: Sequence[str], *, span: Span | None = None
) -> str:
    """Replace the bracketed list after *key* with *items* (already serialized literals)."""
    found = find_array(text, key, span)
    if found is None:
        return text
    open_idx, close_idx = found
    nl = _newline(text)
    indent = _line_indent(text, open_idx)
    inner = indent + "  "
    body = ("," + nl).join(inner + item for item in items)
    literal = f"[{nl}{body}{nl}{indent}]" if items else "[]"
    return text[:open_idx] + literal + text[close_idx + 1 :]


def replace_nested_boolean(
    text: str, path: Sequence[str], key: str, value: bool
) -> str:
    """Replace *key* only inside the object reached by *path* (brace-balanced)."""
    block = find_block(text, path)
    if block is None:
        return text
    return replace_boolean(text, key, value, span=block)


def ensure_phase_field(text: str) -> str:
    """Insert ``pmMode: 'unconfigured'`` into the config object when it is missing."""
    if search_direct(text, re.compile(key_pattern(PHASE_KEY)), root_span(text)):
        return text
    m = ROOT_OBJECT.search(text)
    if m is None:
        return text
    insert_at = m.end()
    nl = _newline(text)
    field = f"{nl}  {PHASE_KEY}: 'unconfigured' as const,{nl}"
    return text[:insert_at] + field + text[insert_at:]


def serialize_locale(locale: Locale) -> str:
    return f"{{ code: {_quote(locale.code)}, iso: {_quote(locale.iso)}, name: {_quote(locale.name)} }}"


# --- Mutator ----------------------------------------------------------------


class ConfigMutator:
    """Applies the fields set on a :class:`ConfigPatchRequest`; unset fields are skipped."""

    def apply(self, text: str, request: ConfigPatchRequest) -> str:
        text = ensure_phase_field(text)
        text = replace_string(text, PHASE_KEY, request.pm_mode.value)

        if request.project_type is not None:
            text = replace_nested_boolean(text, ("entities",), "website", request.project_type == "website")
            text = replace_nested_boolean(text, ("entities",), "app", request.project_type == "app")

        if request.admin_enabled is not None:
            text = replace_nested_boolean(text, ("admin",), "enabled", request.admin_enabled)

        if request.locales:
            text = replace_array(text, "locales", [serialize_locale(loc) for loc in request.locales])

        if request.default_locale:
            text = replace_string(text, "defaultLocale", request.default_locale)

        if request.modules is not None:
            enabled = set(request.modules)
            for module_id in ALL_MODULES:
                text = replace_nested_boolean(text, ("modules", module_id), "enabled", module_id in enabled)

        if request.features is not None:
            for flag, value in request.features.as_config_keys().items():
                text = replace_nested_boolean(text, ("features",), flag, value)

        return text
