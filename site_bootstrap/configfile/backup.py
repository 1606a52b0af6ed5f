"""Timestamped snapshots of the config source, used only for rollback."""

from __future__ import annotations

import time
from pathlib import Path

from site_bootstrap.logging import get_logger

log = get_logger(__name__)

DEFAULT_RETENTION = 3


class ConfigBackupManager:
    """Writes ``<name>.backup.<epoch-ms>`` sidecars and keeps the newest *retention*."""

    def __init__(self, retention: int = DEFAULT_RETENTION) -> None:
        if retention < 1:
            raise ValueError("retention must be at least 1")
        self.retention = retention

    @staticmethod
    def _prefix(source_path: Path) -> str:
        return f"{source_path.name}.backup."

    def list_backups(self, source_path: Path) -> list[Path]:
        """Existing snapshots of *source_path*, newest first."""
        prefix = self._prefix(source_path)
        stamped: list[tuple[int, Path]] = []
        if not source_path.parent.is_dir():
            return []
        for candidate in source_path.parent.iterdir():
            if not candidate.name.startswith(prefix):
                continue
            suffix = candidate.name[len(prefix) :]
            if suffix.isdigit():
                stamped.append((int(suffix), candidate))
        stamped.sort(key=lambda item: item[0], reverse=True)
        return [path for _, path in stamped]

    def backup(self, source_path: Path) -> Path | None:
        """Snapshot *source_path*; returns None when there is nothing to protect yet."""
        if not source_path.is_file():
            return None

        content = source_path.read_bytes()
        prefix = self._prefix(source_path)
        stamp = int(time.time() * 1000)
        existing = self.list_backups(source_path)
        if existing:
            # Snapshot names must sort strictly after every existing one.
            stamp = max(stamp, int(existing[0].name[len(prefix) :]) + 1)
        target = source_path.with_name(f"{prefix}{stamp}")
        target.write_bytes(content)
        log.info("Config snapshot created", extra={"context": {"backup": target.name}})

        for stale in self.list_backups(source_path)[self.retention :]:
            stale.unlink(missing_ok=True)
            log.info("Config snapshot pruned", extra={"context": {"backup": stale.name}})
        return target

    def rollback(self, source_path: Path) -> bool:
        """Restore the newest snapshot over *source_path*; False if none exists."""
        backups = self.list_backups(source_path)
        if not backups:
            return False
        source_path.write_bytes(backups[0].read_bytes())
        log.warning("Config rolled back", extra={"context": {"backup": backups[0].name}})
        return True
