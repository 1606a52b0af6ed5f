"""Guard-bracketed entry points: import → clear → read → write."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from site_bootstrap.configfile.backup import ConfigBackupManager
from site_bootstrap.configfile.reader import read_config_summary
from site_bootstrap.configfile.schema_sync import SchemaSync
from site_bootstrap.configfile.writer import ConfigWriteOrchestrator
from site_bootstrap.guard import OperationKind, SetupAccessGuard
from site_bootstrap.importer.intake import UploadedFile
from site_bootstrap.importer.service import ArchiveImportService
from site_bootstrap.settings import ArchiveLimits, ProjectLayout
from site_bootstrap.types import (
    ConfigPatchRequest,
    ConfigSummary,
    ImportManifest,
    LifecyclePhase,
    WriteResult,
)


@dataclass
class BootstrapSession:
    layout: ProjectLayout
    limits: ArchiveLimits = field(default_factory=ArchiveLimits)
    schema_sync: SchemaSync | None = None
    backups: ConfigBackupManager = field(default_factory=ConfigBackupManager)

    def __post_init__(self) -> None:
        self.guard = SetupAccessGuard(self.layout.config_path)
        self.importer = ArchiveImportService(self.layout, self.limits)
        self.writer = ConfigWriteOrchestrator(
            self.layout, backups=self.backups, schema_sync=self.schema_sync
        )

    def import_archive(self, upload: UploadedFile) -> ImportManifest:
        self.guard.require(OperationKind.IMPORT_ARCHIVE)
        return self.importer.import_archive(upload)

    def clear_import(self) -> None:
        self.guard.require(OperationKind.CLEAR_IMPORT)
        self.importer.clear_import()

    def read_config(self) -> ConfigSummary:
        self.guard.require(OperationKind.READ_CONFIG)
        return read_config_summary(self.layout)

    def write_config(self, request: ConfigPatchRequest | dict[str, Any]) -> WriteResult:
        self.guard.require(OperationKind.WRITE_CONFIG)
        return self.writer.apply_patch(request)

    def reset(self) -> WriteResult:
        """Return the project to `unconfigured`; not guarded and no schema sync."""
        writer = ConfigWriteOrchestrator(self.layout, backups=self.backups)
        return writer.apply_patch(ConfigPatchRequest(pm_mode=LifecyclePhase.UNCONFIGURED))

    def restore(self) -> bool:
        """Restore the newest config snapshot; deliberately not guarded."""
        return self.backups.rollback(self.layout.config_path)
