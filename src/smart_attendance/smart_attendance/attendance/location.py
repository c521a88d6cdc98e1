from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from .model import Fix


class LocationSource(Protocol):
    def current_fix(self) -> Optional[Fix]:
        """Return the current fix, or ``None`` if no fix can be obtained. May block."""

        raise NotImplementedError


@dataclass(frozen=True)
class StaticLocationSource:
    """A fix already known to the caller, e.g. sent along with an HTTP request."""

    fix: Optional[Fix]

    def current_fix(self) -> Optional[Fix]:
        return self.fix


@dataclass(frozen=True)
class VerificationResult:
    passed: bool
    reason: Optional[str] = None

    @classmethod
    def pass_(cls) -> "VerificationResult":
        return cls(passed=True)

    @classmethod
    def fail(cls, reason: str) -> "VerificationResult":
        return cls(passed=False, reason=reason)


class CredentialVerifier(Protocol):
    def verify(self) -> VerificationResult:
        raise NotImplementedError


@dataclass(frozen=True)
class StaticVerifier:
    """A verdict already reached elsewhere, e.g. a biometric prompt on the device."""

    result: VerificationResult

    def verify(self) -> VerificationResult:
        return self.result


# Used when a check-in carries no verdict at all.
UNVERIFIED = StaticVerifier(VerificationResult.fail("Credential verification was not reported"))
