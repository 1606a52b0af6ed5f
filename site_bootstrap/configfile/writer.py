"""Config write orchestration: backup → mutate → verify → (rollback) → schema sync.

A write is committed only once the lifecycle phase re-read from disk equals the
requested one. Anything else restores the newest snapshot before failing, so the
config source is never left partially patched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from site_bootstrap.configfile import reader
from site_bootstrap.configfile.backup import ConfigBackupManager
from site_bootstrap.configfile.schema_sync import SchemaSync
from site_bootstrap.configfile.transforms import ConfigMutator
from site_bootstrap.errors import ConfigFileMissing, ConfigValidationFailed, ConfigWriteFailed
from site_bootstrap.logging import get_logger
from site_bootstrap.settings import ProjectLayout
from site_bootstrap.types import ConfigPatchRequest, WriteResult
from site_bootstrap.validator import validate_patch_request

log = get_logger(__name__)


class ConfigWriteOrchestrator:
    def __init__(
        self,
        layout: ProjectLayout,
        *,
        backups: ConfigBackupManager | None = None,
        mutator: ConfigMutator | None = None,
        schema_sync: SchemaSync | None = None,
    ) -> None:
        self.layout = layout
        self.backups = backups or ConfigBackupManager()
        self.mutator = mutator or ConfigMutator()
        self.schema_sync = schema_sync

    @property
    def config_path(self) -> Path:
        return self.layout.config_path

    def _database_status(self, existed: bool) -> tuple[str | None, str | None]:
        if self.schema_sync is None:
            return None, None
        outcome = self.schema_sync.run()
        if outcome.status == "success":
            return ("exists" if existed else "created"), None
        return outcome.status, outcome.message

    def apply_patch(self, request: ConfigPatchRequest | dict[str, Any]) -> WriteResult:
        if not isinstance(request, ConfigPatchRequest):
            request = validate_patch_request(request)

        if not self.config_path.is_file():
            raise ConfigFileMissing("Config file not found. Please ensure the config source exists.")

        try:
            backup_path = self.backups.backup(self.config_path)
        except OSError as exc:
            log.error("Config snapshot failed", extra={"context": {"error": str(exc)}})
            raise ConfigWriteFailed("Failed to snapshot the configuration before writing.") from exc
        backup_name = backup_path.name if backup_path else None

        try:
            # Bytes in and out: line endings must survive untouched.
            original = self.config_path.read_bytes().decode("utf-8")
            self.config_path.write_bytes(self.mutator.apply(original, request).encode("utf-8"))
            actual = reader.read_phase(self.config_path)
        except (OSError, UnicodeDecodeError) as exc:
            rolled_back = self.backups.rollback(self.config_path)
            log.error(
                "Config write failed",
                extra={"context": {"error": str(exc), "rolled_back": rolled_back}},
            )
            raise ConfigWriteFailed() from exc

        if actual != request.pm_mode:
            rolled_back = self.backups.rollback(self.config_path)
            log.error(
                "Config verification failed",
                extra={
                    "context": {
                        "expected": request.pm_mode.value,
                        "actual": actual.value if actual else None,
                        "rolled_back": rolled_back,
                    }
                },
            )
            message = (
                "Config was written but validation failed. Rolled back to previous state."
                if rolled_back
                else "Config was written but validation failed and no snapshot was available."
            )
            raise ConfigValidationFailed(
                message,
                rolled_back=rolled_back,
                result=WriteResult(success=False, backup_path=backup_name),
            )

        log.info("Config committed", extra={"context": {"pmMode": request.pm_mode.value}})

        existed = self.layout.database_path.exists()
        status, message = self._database_status(existed)
        return WriteResult(
            success=True,
            database_status=status,
            database_message=message,
            backup_path=backup_name,
        )
