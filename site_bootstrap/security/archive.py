"""Safe archive validation and extraction.

Guards against common archive attacks:
- Zip Slip (../ traversal)
- Absolute paths and drive-letter prefixes
- Decompression bombs (entry count, per-file and cumulative uncompressed size)

Validation runs against the archive's declared metadata only, before any byte is
written. Extraction re-checks every path right before writing it.
"""

from __future__ import annotations

import shutil
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

from site_bootstrap.errors import ArchiveTooLarge, SingleFileTooLarge, TooManyFiles, UnsafePath
from site_bootstrap.logging import get_logger
from site_bootstrap.security.paths import is_root_entry, is_safe_path
from site_bootstrap.settings import MiB, ArchiveLimits
from site_bootstrap.types import ArchiveEntry, ImportManifest

log = get_logger(__name__)


def read_entries(zf: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
    """Yield the declared entries of *zf* without decompressing anything."""
    for info in zf.infolist():
        yield ArchiveEntry(
            path=info.filename,
            is_directory=info.is_dir(),
            uncompressed_size=info.file_size,
        )


def validate_entries(
    entries: Iterable[ArchiveEntry],
    target_dir: Path,
    limits: ArchiveLimits | None = None,
) -> None:
    """Reject the archive as soon as any ceiling is crossed or any path is unsafe."""
    limits = limits or ArchiveLimits()
    total = 0

    for count, entry in enumerate(entries, start=1):
        if count > limits.max_entries:
            raise TooManyFiles(
                f"ZIP archive contains more than {limits.max_entries} entries."
            )

        if entry.is_directory and is_root_entry(entry.path):
            continue

        if not is_safe_path(target_dir, entry.path):
            raise UnsafePath(
                f'ZIP archive contains potentially unsafe path: "{entry.path}". '
                "Path traversal is not allowed."
            )

        if entry.is_directory:
            continue

        if entry.uncompressed_size > limits.max_file_bytes:
            raise SingleFileTooLarge(
                f'File "{entry.path}" is {round(entry.uncompressed_size / MiB)}MB. '
                f"Maximum allowed is {limits.max_file_bytes // MiB}MB."
            )

        total += entry.uncompressed_size
        if total > limits.max_total_bytes:
            raise ArchiveTooLarge(
                f"ZIP archive uncompressed size exceeds {limits.max_total_bytes // MiB}MB limit."
            )


def _relative_name(entry_path: str) -> str:
    return PurePosixPath(entry_path.replace("\\", "/")).as_posix()


def safe_extract(zf: zipfile.ZipFile, target_dir: Path) -> ImportManifest:
    """Materialize every safe entry of an already validated archive.

    Unsafe entries are skipped, never written, and do not abort the import.
    The manifest lists each file written once, in archive order; a repeated
    name overwrites the earlier copy.
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    base = target_dir.resolve()
    written: list[str] = []
    seen: set[str] = set()

    for info in zf.infolist():
        if info.is_dir() and is_root_entry(info.filename):
            continue
        if not is_safe_path(base, info.filename):
            log.warning("Skipping unsafe entry", extra={"context": {"entry": info.filename}})
            continue

        rel = _relative_name(info.filename)
        full = base / rel

        if info.is_dir():
            full.mkdir(parents=True, exist_ok=True)
            continue

        full.parent.mkdir(parents=True, exist_ok=True)
        # ZipExtFile stops at the declared size, so validated sizes bound the write.
        with zf.open(info) as src, open(full, "wb") as out:
            shutil.copyfileobj(src, out)
        if rel not in seen:
            seen.add(rel)
            written.append(rel)

    return ImportManifest(files=written, file_count=len(written), extraction_method="embedded")
