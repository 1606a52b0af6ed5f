"""Filesystem layout and archive limits.

Every component receives its directory roots explicitly so tests can point each
one at an isolated temporary project.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

MiB = 1024 * 1024

CONFIG_FILENAME = "site.config.ts"
DATABASE_FILENAME = "sqlite.db"


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, returning `default` on missing/invalid."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ArchiveLimits:
    """Ceilings applied to uploaded archives, all in bytes except `max_entries`."""

    max_upload_bytes: int = 100 * MiB
    max_total_bytes: int = 500 * MiB
    max_file_bytes: int = 50 * MiB
    max_entries: int = 10_000
    request_overhead_bytes: int = 1 * MiB

    @property
    def max_request_bytes(self) -> int:
        return self.max_upload_bytes + self.request_overhead_bytes

    @classmethod
    def from_env(cls) -> ArchiveLimits:
        base = cls()
        return cls(
            max_upload_bytes=_env_int("SITE_BOOTSTRAP_MAX_UPLOAD_BYTES", base.max_upload_bytes),
            max_total_bytes=_env_int("SITE_BOOTSTRAP_MAX_TOTAL_BYTES", base.max_total_bytes),
            max_file_bytes=_env_int("SITE_BOOTSTRAP_MAX_FILE_BYTES", base.max_file_bytes),
            max_entries=_env_int("SITE_BOOTSTRAP_MAX_ENTRIES", base.max_entries),
            request_overhead_bytes=base.request_overhead_bytes,
        )


@dataclass(frozen=True)
class ProjectLayout:
    """Where the live config, the staging directory and the data store live.

    Unset paths default to the conventional locations under `root`.
    """

    root: Path
    config_path: Path | None = None
    import_dir: Path | None = None
    data_dir: Path | None = None
    database_path: Path | None = None

    def __post_init__(self) -> None:
        root = Path(self.root)
        object.__setattr__(self, "root", root)
        if self.config_path is None:
            object.__setattr__(self, "config_path", root / "app" / CONFIG_FILENAME)
        if self.import_dir is None:
            object.__setattr__(self, "import_dir", root / "import")
        if self.data_dir is None:
            object.__setattr__(self, "data_dir", root / "data")
        if self.database_path is None:
            object.__setattr__(self, "database_path", self.data_dir / DATABASE_FILENAME)

    @classmethod
    def from_root(cls, root: str | os.PathLike[str]) -> ProjectLayout:
        return cls(root=Path(root).resolve())
