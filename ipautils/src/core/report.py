from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Severity(Enum):
    INFO = "info"
    ERROR = "error"


class Check(Enum):
    """Which consistency check produced a finding"""

    ENVIRONMENT = "environment"
    CERTIFICATE = "certificate"
    DEVICE = "device"


@dataclass(frozen=True)
class Finding:
    message: str
    severity: Severity
    check: Check

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


@dataclass(frozen=True)
class VerificationReport:
    """Ordered findings of one evaluation pass"""

    findings: Tuple[Finding, ...] = ()

    @property
    def errors(self) -> Tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.is_error)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def passed(self) -> bool:
        return self.error_count == 0

    def for_check(self, check: Check) -> Tuple[Finding, ...]:
        """Return the findings produced by a single check, in order"""
        return tuple(f for f in self.findings if f.check is check)
