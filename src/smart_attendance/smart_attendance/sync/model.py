from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import SyncStatus


@dataclass(frozen=True)
class SyncOutcome:
    """Per-phase result; partial success is reported, not hidden."""

    phase: str
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    conflicts: int = 0
    errors: Tuple[str, ...] = field(default_factory=tuple)
    fatal: Optional[str] = None

    @property
    def status(self) -> SyncStatus:
        if self.fatal is not None:
            return SyncStatus.FAILED
        if self.failed == 0:
            return SyncStatus.SUCCESS
        if self.succeeded == 0:
            return SyncStatus.FAILED
        return SyncStatus.PARTIAL_SUCCESS

    def as_dict(self) -> dict:
        return {
            "phase": self.phase,
            "status": self.status.value,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "conflicts": self.conflicts,
            "errors": list(self.errors),
            "fatal": self.fatal,
        }


@dataclass(frozen=True)
class SyncReport:
    pull: SyncOutcome
    push: SyncOutcome

    @property
    def status(self) -> SyncStatus:
        statuses = {self.pull.status, self.push.status}
        if statuses == {SyncStatus.SUCCESS}:
            return SyncStatus.SUCCESS
        if statuses == {SyncStatus.FAILED}:
            return SyncStatus.FAILED
        return SyncStatus.PARTIAL_SUCCESS

    def as_dict(self) -> dict:
        return {"status": self.status.value, "pull": self.pull.as_dict(), "push": self.push.as_dict()}
