"""Setup access guard.

Mutating setup operations are only allowed while the project is `unconfigured`.
The guard is phase-based, not identity-based, and fails closed: if the phase
cannot be determined, mutating operations are refused.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from site_bootstrap.configfile.reader import parse_phase
from site_bootstrap.errors import ConfigReadFailed, SetupLocked
from site_bootstrap.logging import get_logger
from site_bootstrap.types import LifecyclePhase

log = get_logger(__name__)


class OperationKind(str, Enum):
    IMPORT_ARCHIVE = "import_archive"
    CLEAR_IMPORT = "clear_import"
    WRITE_CONFIG = "write_config"
    READ_CONFIG = "read_config"

    @property
    def read_only(self) -> bool:
        return self is OperationKind.READ_CONFIG


@dataclass(frozen=True)
class PhaseReadResult:
    phase: LifecyclePhase | None
    error: str | None = None  # "read_error" | "parse_error"


class SetupAccessGuard:
    def __init__(
        self,
        config_path: Path,
        allowed_phases: Iterable[LifecyclePhase] = (LifecyclePhase.UNCONFIGURED,),
    ) -> None:
        self.config_path = config_path
        self.allowed_phases = frozenset(allowed_phases)

    def read_phase(self) -> PhaseReadResult:
        if not self.config_path.exists():
            # Fresh install: nothing configured yet.
            return PhaseReadResult(LifecyclePhase.UNCONFIGURED)
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.error("Config unreadable", extra={"context": {"error": str(exc)}})
            return PhaseReadResult(None, "read_error")
        phase = parse_phase(text)
        if phase is None:
            return PhaseReadResult(None, "parse_error")
        return PhaseReadResult(phase)

    def check(self, current_phase: LifecyclePhase, operation: OperationKind) -> None:
        """Raise SetupLocked unless *operation* is permitted in *current_phase*."""
        if operation.read_only:
            return
        if current_phase not in self.allowed_phases:
            log.warning(
                "Setup access denied",
                extra={"context": {"phase": current_phase.value, "operation": operation.value}},
            )
            raise SetupLocked(
                "Setup is only accessible while the project is unconfigured. "
                f"Current mode: '{current_phase.value}'. To reconfigure, reset the project "
                "to 'unconfigured' first."
            )

    def require(self, operation: OperationKind) -> LifecyclePhase:
        """Read the current phase from disk and check *operation* against it."""
        result = self.read_phase()
        if result.phase is None:
            if operation.read_only and result.error == "parse_error":
                # Let the wizard display the broken state.
                return LifecyclePhase.UNCONFIGURED
            raise ConfigReadFailed(
                "Cannot determine setup state. Setup operations are blocked until "
                "the config source is readable and declares a valid pmMode."
            )
        self.check(result.phase, operation)
        return result.phase

    def is_setup_allowed(self) -> bool:
        result = self.read_phase()
        return result.phase is not None and result.phase in self.allowed_phases
