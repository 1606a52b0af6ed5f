from __future__ import annotations

import httpx
import pytest

from site_bootstrap.errors import InvalidUpload, LengthRequired, UploadTooLarge
from site_bootstrap.importer.intake import (
    UploadedFile,
    check_declared_length,
    check_upload,
    fetch_upload,
)
from site_bootstrap.settings import ArchiveLimits

LIMITS = ArchiveLimits(max_upload_bytes=100, request_overhead_bytes=10)


@pytest.mark.parametrize("value", [None, ""])
def test_missing_length_is_rejected(value) -> None:
    with pytest.raises(LengthRequired) as exc:
        check_declared_length(value, LIMITS)
    assert exc.value.status_code == 411


@pytest.mark.parametrize("value", ["abc", "-1", "1.5"])
def test_malformed_length(value) -> None:
    with pytest.raises(InvalidUpload) as exc:
        check_declared_length(value, LIMITS)
    assert not isinstance(exc.value, LengthRequired)


def test_length_ceiling_includes_overhead() -> None:
    assert check_declared_length("110", LIMITS) == 110
    with pytest.raises(UploadTooLarge):
        check_declared_length(111, LIMITS)


def test_check_upload_accepts_zip() -> None:
    check_upload(UploadedFile("site.ZIP", b"PK\x03\x04", declared_length=4), LIMITS)


@pytest.mark.parametrize(
    "upload, error",
    [
        (None, InvalidUpload),
        (UploadedFile("a.zip", b"", declared_length=0), InvalidUpload),
        (UploadedFile("a.tar.gz", b"data", declared_length=4), InvalidUpload),
        (UploadedFile(None, b"data", declared_length=4), InvalidUpload),
        (UploadedFile("a.zip", b"data"), LengthRequired),
        (UploadedFile("a.zip", b"x" * 101, declared_length=101), UploadTooLarge),
    ],
)
def test_check_upload_rejections(upload, error) -> None:
    with pytest.raises(error):
        check_upload(upload, LIMITS)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_upload_returns_named_upload() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"PK-bytes"))
    upload = fetch_upload("https://example.test/files/site.zip", LIMITS, client=client)
    assert upload.filename == "site.zip"
    assert upload.data == b"PK-bytes"
    assert upload.declared_length == 8


def test_fetch_upload_requires_content_length() -> None:
    def handler(request):
        return httpx.Response(200, content=iter([b"PK", b"-bytes"]))

    with pytest.raises(LengthRequired):
        fetch_upload("https://example.test/site.zip", LIMITS, client=_client(handler))


def test_fetch_upload_enforces_declared_size() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"x" * 105))
    with pytest.raises(UploadTooLarge):
        fetch_upload("https://example.test/site.zip", LIMITS, client=client)


def test_fetch_upload_caps_body_beyond_declared_length() -> None:
    def handler(request):
        return httpx.Response(
            200, headers={"Content-Length": "50"}, content=iter([b"x" * 60, b"x" * 60])
        )

    with pytest.raises(UploadTooLarge):
        fetch_upload("https://example.test/site.zip", LIMITS, client=_client(handler))


def test_fetch_upload_http_error() -> None:
    client = _client(lambda request: httpx.Response(404))
    with pytest.raises(InvalidUpload) as exc:
        fetch_upload("https://example.test/site.zip", LIMITS, client=client)
    assert exc.value.code == "ZIP_001"
