"""Upload intake: transport-level checks before any archive parsing.

An upload must declare its length up front; chunked bodies defeat size bounding
and are refused. The compressed payload is capped before it is ever decoded.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import httpx

from site_bootstrap.errors import InvalidUpload, LengthRequired, UploadTooLarge
from site_bootstrap.logging import get_logger
from site_bootstrap.settings import MiB, ArchiveLimits

ARCHIVE_SUFFIX = ".zip"

log = get_logger(__name__)


@dataclass
class UploadedFile:
    """One uploaded archive as handed over by the transport layer."""

    filename: str | None
    data: bytes | None
    declared_length: str | int | None = None


def _parse_length(value: str | int | None) -> int:
    if value is None or value == "":
        raise LengthRequired()
    try:
        length = int(value)
    except (TypeError, ValueError):
        raise InvalidUpload("Invalid Content-Length header value.") from None
    if length < 0:
        raise InvalidUpload("Invalid Content-Length header value.")
    return length


def check_declared_length(value: str | int | None, limits: ArchiveLimits) -> int:
    length = _parse_length(value)
    if length > limits.max_request_bytes:
        raise UploadTooLarge(
            f"Request body is {round(length / MiB)}MB. "
            f"Maximum allowed is {limits.max_upload_bytes // MiB}MB."
        )
    return length


def check_upload(upload: UploadedFile | None, limits: ArchiveLimits | None = None) -> None:
    """Raise an :class:`InvalidUpload` subclass if *upload* may not be imported."""
    limits = limits or ArchiveLimits()
    if upload is None:
        raise InvalidUpload("No file uploaded. Please select a ZIP file to import.")

    check_declared_length(upload.declared_length, limits)

    if not upload.data:
        raise InvalidUpload("No file data found. Please try uploading again.")
    if not (upload.filename or "").lower().endswith(ARCHIVE_SUFFIX):
        raise InvalidUpload("Only .zip files are allowed. Please compress your project as a ZIP file.")
    if len(upload.data) > limits.max_upload_bytes:
        raise UploadTooLarge(
            f"ZIP file is {round(len(upload.data) / MiB)}MB. "
            f"Maximum allowed is {limits.max_upload_bytes // MiB}MB."
        )


def upload_from_path(path: Path) -> UploadedFile:
    """Wrap a local archive as an upload whose declared length is its file size."""
    data = path.read_bytes()
    return UploadedFile(filename=path.name, data=data, declared_length=len(data))


def fetch_upload(
    url: str,
    limits: ArchiveLimits | None = None,
    *,
    client: httpx.Client | None = None,
    timeout: float = 60,
) -> UploadedFile:
    """Download a remote archive, enforcing the same limits as a direct upload."""
    limits = limits or ArchiveLimits()
    owned = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        with http.stream("GET", url) as r:
            r.raise_for_status()
            declared = check_declared_length(r.headers.get("content-length"), limits)
            if declared > limits.max_upload_bytes:
                raise UploadTooLarge(
                    f"ZIP file is {round(declared / MiB)}MB. "
                    f"Maximum allowed is {limits.max_upload_bytes // MiB}MB."
                )
            body = bytearray()
            for chunk in r.iter_bytes():
                body.extend(chunk)
                if len(body) > limits.max_upload_bytes:
                    raise UploadTooLarge(
                        "Downloaded archive exceeds its declared size and the "
                        f"{limits.max_upload_bytes // MiB}MB limit."
                    )
            data = bytes(body)
    except httpx.HTTPError as exc:
        log.warning("Archive download failed", extra={"context": {"error": str(exc)}})
        raise InvalidUpload("Could not download the archive.") from exc
    finally:
        if owned:
            http.close()

    filename = Path(urlparse(url).path).name or "download.zip"
    return UploadedFile(filename=filename, data=data, declared_length=len(data))
