from __future__ import annotations

from pathlib import Path

import pytest

from site_bootstrap.configfile.backup import ConfigBackupManager


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "site.config.ts"
    path.write_text("v0", encoding="utf-8")
    return path


def test_missing_source_is_not_snapshotted(tmp_path: Path) -> None:
    assert ConfigBackupManager().backup(tmp_path / "absent.ts") is None
    assert list(tmp_path.iterdir()) == []


def test_retention_keeps_newest(source: Path) -> None:
    manager = ConfigBackupManager(retention=3)
    made = []
    for i in range(5):
        source.write_text(f"v{i}", encoding="utf-8")
        made.append(manager.backup(source))

    kept = manager.list_backups(source)
    assert kept == [made[4], made[3], made[2]]
    assert [p.read_text() for p in kept] == ["v4", "v3", "v2"]
    assert not made[0].exists()


def test_snapshot_names_strictly_increase(source: Path) -> None:
    manager = ConfigBackupManager()
    first = manager.backup(source)
    second = manager.backup(source)
    prefix = "site.config.ts.backup."
    assert int(second.name[len(prefix) :]) > int(first.name[len(prefix) :])


def test_unrelated_files_are_ignored(source: Path) -> None:
    (source.parent / "site.config.ts.backup.notes").write_text("x")
    (source.parent / "other.ts.backup.123").write_text("x")
    assert ConfigBackupManager().list_backups(source) == []


def test_rollback_restores_newest(source: Path) -> None:
    manager = ConfigBackupManager()
    manager.backup(source)
    source.write_text("broken", encoding="utf-8")

    assert manager.rollback(source) is True
    assert source.read_text() == "v0"


def test_rollback_without_snapshot(source: Path) -> None:
    assert ConfigBackupManager().rollback(source) is False
    assert source.read_text() == "v0"


def test_retention_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ConfigBackupManager(retention=0)
