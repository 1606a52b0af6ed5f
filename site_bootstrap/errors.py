"""Error taxonomy.

Every error carries a stable short ``code`` for operator diagnostics and a
human-readable message. Messages never contain server filesystem paths.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from site_bootstrap.types import WriteResult


class BootstrapError(Exception):
    """Base error for site-bootstrap."""

    code = "BOOT_000"
    status_code = 500
    default_message = "Bootstrap operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


# --- Upload intake ----------------------------------------------------------


class InvalidUpload(BootstrapError):
    code = "ZIP_001"
    status_code = 400
    default_message = "No valid ZIP file uploaded"


class LengthRequired(InvalidUpload):
    code = "ZIP_012"
    status_code = 411
    default_message = (
        "A declared Content-Length is required for archive uploads. "
        "Chunked transfer encoding is not supported."
    )


class UploadTooLarge(InvalidUpload):
    code = "ZIP_010"
    status_code = 413
    default_message = "Uploaded archive exceeds the size limit"


class ExtractionFailed(BootstrapError):
    code = "ZIP_004"
    status_code = 500
    default_message = "Failed to extract ZIP file. It may be corrupted or use unsupported compression."


# --- Archive validation (raised before anything touches disk) ---------------


class ArchiveRejected(BootstrapError):
    status_code = 400


class TooManyFiles(ArchiveRejected):
    code = "ZIP_006"
    default_message = "ZIP archive contains too many entries"


class UnsafePath(ArchiveRejected):
    code = "ZIP_007"
    default_message = "ZIP archive contains an unsafe path"


class SingleFileTooLarge(ArchiveRejected):
    code = "ZIP_008"
    default_message = "ZIP archive contains a file over the size limit"


class ArchiveTooLarge(ArchiveRejected):
    code = "ZIP_009"
    default_message = "ZIP archive uncompressed size exceeds the limit"


# --- Configuration ----------------------------------------------------------


class InvalidConfiguration(BootstrapError):
    code = "CFG_001"
    status_code = 400
    default_message = "Invalid configuration"


class ConfigFileMissing(BootstrapError):
    code = "CFG_002"
    status_code = 500
    default_message = "Config file not found"


class ConfigValidationFailed(BootstrapError):
    code = "CFG_003"
    status_code = 500
    default_message = "Config was written but validation failed. Rolled back to previous state."

    def __init__(
        self,
        message: str | None = None,
        *,
        rolled_back: bool = False,
        result: WriteResult | None = None,
    ) -> None:
        super().__init__(message)
        self.rolled_back = rolled_back
        self.result = result


class ConfigWriteFailed(BootstrapError):
    code = "CFG_004"
    status_code = 500
    default_message = "Failed to write configuration"


# --- Setup guard ------------------------------------------------------------


class SetupLocked(BootstrapError):
    code = "SETUP_001"
    status_code = 403
    default_message = "Setup is only accessible while the project is unconfigured"


class ConfigReadFailed(BootstrapError):
    code = "SETUP_002"
    status_code = 500
    default_message = "Cannot determine setup state; setup operations are blocked"
