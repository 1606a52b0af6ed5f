from __future__ import annotations

import sys
import time

import pytest

from site_bootstrap.configfile.schema_sync import SchemaSync


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_success_reads_confirmation() -> None:
    sync = SchemaSync(_python("import sys; assert sys.stdin.readline().strip() == 'y'"), timeout=30)
    result = sync.run()
    assert result.status == "success"
    assert result.message is None


def test_nonzero_exit_is_error(tmp_path) -> None:
    sync = SchemaSync(_python("import sys; sys.exit(3)"), cwd=tmp_path, timeout=30)
    result = sync.run()
    assert result.status == "error"
    assert "code 3" in result.message


@pytest.mark.timeout(30)
def test_hang_is_killed_at_timeout() -> None:
    sync = SchemaSync(_python("import time; time.sleep(60)"), timeout=0.5)
    result = sync.run()
    assert result.status == "timeout"


@pytest.mark.timeout(30)
def test_timeout_also_kills_grandchildren() -> None:
    spawner = (
        "import subprocess, sys, time; "
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)']); "
        "time.sleep(60)"
    )
    sync = SchemaSync(_python(spawner), timeout=0.5)

    started = time.monotonic()
    result = sync.run()

    assert result.status == "timeout"
    assert time.monotonic() - started < 10


def test_missing_executable_is_error(tmp_path) -> None:
    result = SchemaSync([str(tmp_path / "no-such-binary")]).run()
    assert result.status == "error"


def test_empty_command_rejected() -> None:
    with pytest.raises(ValueError):
        SchemaSync([])
