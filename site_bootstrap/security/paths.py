"""Path containment checks for untrusted, archive-relative paths."""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def _is_within(base: Path, target: Path) -> bool:
    try:
        rel = os.path.relpath(target, base)
    except ValueError:
        # Different drives on Windows
        return False
    if rel == "." or os.path.isabs(rel):
        return False
    return rel != ".." and not rel.startswith(".." + os.sep)


def is_safe_path(target_dir: str | os.PathLike[str], candidate: str) -> bool:
    """Return True if *candidate* stays strictly inside *target_dir*.

    Rejects empty names, NUL bytes, absolute paths, drive-letter prefixes and any
    ``..`` segment (before or after normalization). Call it when staging a path and
    again immediately before writing to it.
    """
    if not candidate or "\x00" in candidate:
        return False

    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_PREFIX.match(normalized):
        return False
    if ".." in normalized.split("/"):
        return False

    collapsed = posixpath.normpath(normalized)
    if ".." in collapsed.split("/") or collapsed.startswith("/"):
        return False

    base = Path(target_dir).resolve()
    full = (base / collapsed).resolve()
    return _is_within(base, full)


def is_root_entry(candidate: str) -> bool:
    """True for entries such as ``./`` that name the target directory itself."""
    if not candidate or "\x00" in candidate:
        return False
    return posixpath.normpath(candidate.replace("\\", "/")) == "."
