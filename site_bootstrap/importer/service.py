"""Archive import service: upload → staging → validate → extract → cleanup.

The staging directory is replaced wholesale on every import. On any failure the
temporary archive and the partially populated staging directory are removed before
the error propagates, so a half-imported tree is never left behind.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
from pathlib import Path

from site_bootstrap.errors import BootstrapError, ExtractionFailed
from site_bootstrap.importer.intake import UploadedFile, check_upload
from site_bootstrap.logging import get_logger
from site_bootstrap.security.archive import read_entries, safe_extract, validate_entries
from site_bootstrap.settings import ArchiveLimits, ProjectLayout
from site_bootstrap.types import ImportManifest

log = get_logger(__name__)


class ArchiveImportService:
    def __init__(self, layout: ProjectLayout, limits: ArchiveLimits | None = None) -> None:
        self.layout = layout
        self.limits = limits or ArchiveLimits()

    @property
    def staging_dir(self) -> Path:
        return self.layout.import_dir

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reset_staging(self) -> None:
        if self.staging_dir.exists():
            shutil.rmtree(self.staging_dir)
        self.staging_dir.mkdir(parents=True)

    def _persist_upload(self, upload: UploadedFile) -> Path:
        self.layout.data_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix="temp-import-", suffix=".zip", dir=self.layout.data_dir)
        with os.fdopen(fd, "wb") as out:
            out.write(upload.data or b"")
        return Path(name)

    def _extract(self, archive_path: Path) -> ImportManifest:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                validate_entries(read_entries(zf), self.staging_dir, self.limits)
                return safe_extract(zf, self.staging_dir)
        except BootstrapError:
            raise
        except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError, EOFError) as exc:
            raise ExtractionFailed() from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def import_archive(self, upload: UploadedFile) -> ImportManifest:
        """Extract *upload* into the staging directory and return what was written."""
        check_upload(upload, self.limits)
        log.info("Archive import started", extra={"context": {"bytes": len(upload.data or b"")}})

        temp_path: Path | None = None
        try:
            self._reset_staging()
            temp_path = self._persist_upload(upload)
            manifest = self._extract(temp_path)
            temp_path.unlink()
            temp_path = None
        except Exception as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            shutil.rmtree(self.staging_dir, ignore_errors=True)
            log.warning(
                "Archive import failed; staging cleared",
                extra={"context": {"error": type(exc).__name__}},
            )
            if isinstance(exc, BootstrapError):
                raise
            raise ExtractionFailed(f"Failed to process ZIP file ({type(exc).__name__}).") from exc

        log.info("Archive import finished", extra={"context": {"files": manifest.file_count}})
        return manifest

    def clear_import(self) -> None:
        """Remove the staging directory; a no-op when nothing is staged."""
        if self.staging_dir.exists():
            shutil.rmtree(self.staging_dir)
            log.info("Staging directory cleared")
