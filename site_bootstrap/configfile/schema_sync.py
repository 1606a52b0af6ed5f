"""Best-effort database schema sync, run as a child process under a hard timeout.

The outcome is a closed result (`success`, `error`, `timeout`), never an exception:
by the time this runs the config write is already committed and verified.
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from site_bootstrap.logging import get_logger

log = get_logger(__name__)

DEFAULT_COMMAND: tuple[str, ...] = ("npm", "run", "db:push")
DEFAULT_TIMEOUT = 60.0
KILL_GRACE = 5.0


@dataclass(frozen=True)
class SchemaSyncResult:
    status: Literal["success", "error", "timeout"]
    message: str | None = None


class SchemaSync:
    def __init__(
        self,
        command: tuple[str, ...] | list[str] = DEFAULT_COMMAND,
        *,
        cwd: Path | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        confirm_input: str = "y\n",
    ) -> None:
        if not command:
            raise ValueError("schema sync command must be a non-empty list")
        self.command = list(command)
        self.cwd = cwd
        self.timeout = timeout
        self.confirm_input = confirm_input

    @staticmethod
    def _kill_tree(proc: subprocess.Popen) -> None:
        """Kill the child and everything it spawned, then reap it without blocking."""
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (AttributeError, ProcessLookupError, PermissionError):
            proc.kill()
        try:
            proc.communicate(timeout=KILL_GRACE)
        except subprocess.TimeoutExpired:
            # A grandchild outside the group still holds the pipes.
            for stream in (proc.stdin, proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()
            proc.wait(timeout=KILL_GRACE)

    def run(self) -> SchemaSyncResult:
        env = os.environ.copy()
        env["FORCE_COLOR"] = "0"
        try:
            proc = subprocess.Popen(
                self.command,
                cwd=self.cwd,
                env=env,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=True,
            )
        except OSError as exc:
            log.error("Schema sync could not start", extra={"context": {"error": str(exc)}})
            return SchemaSyncResult("error", "Schema sync command could not be started.")

        try:
            _, stderr = proc.communicate(input=self.confirm_input, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            self._kill_tree(proc)
            log.error("Schema sync timed out", extra={"context": {"timeout": self.timeout}})
            return SchemaSyncResult("timeout", f"Schema sync did not finish within {self.timeout:g}s.")

        if proc.returncode != 0:
            log.error(
                "Schema sync failed",
                extra={"context": {"returncode": proc.returncode, "stderr": (stderr or "")[-2000:]}},
            )
            return SchemaSyncResult("error", f"Schema sync exited with code {proc.returncode}.")

        log.info("Schema sync finished")
        return SchemaSyncResult("success")
