from __future__ import annotations

import io
import shutil
import zipfile
from pathlib import Path

import pytest

from site_bootstrap.settings import ProjectLayout

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


@pytest.fixture(scope="session")
def config_template() -> str:
    return (FIXTURES / "site.config.ts").read_text(encoding="utf-8")


@pytest.fixture
def layout(tmp_path: Path) -> ProjectLayout:
    """An isolated project root with the template config in place."""
    root = tmp_path / "project"
    (root / "app").mkdir(parents=True)
    shutil.copy(FIXTURES / "site.config.ts", root / "app" / "site.config.ts")
    return ProjectLayout.from_root(root)


def _make_zip(entries: dict[str, bytes | str | None]) -> bytes:
    """Build an in-memory ZIP; a value of None makes a directory entry."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            if data is None:
                zf.writestr(zipfile.ZipInfo(name if name.endswith("/") else name + "/"), b"")
            else:
                zf.writestr(name, data)
    return buf.getvalue()


def _set_phase(layout: ProjectLayout, phase: str) -> None:
    text = layout.config_path.read_text(encoding="utf-8")
    layout.config_path.write_text(
        text.replace("pmMode: 'unconfigured'", f"pmMode: '{phase}'"), encoding="utf-8"
    )


@pytest.fixture
def make_zip():
    return _make_zip


@pytest.fixture
def set_phase():
    return _set_phase
