from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class GuardianSeverity(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def raised_to(self, other: "GuardianSeverity") -> "GuardianSeverity":
        """Return the higher of the two; severity never goes down."""
        return other if other.rank > self.rank else self


_SEVERITY_ORDER = [
    GuardianSeverity.NONE,
    GuardianSeverity.LOW,
    GuardianSeverity.MEDIUM,
    GuardianSeverity.HIGH,
    GuardianSeverity.CRITICAL,
]


class ValidationResult(BaseModel):
    valid: bool = True
    issues: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    requires_double_confirm: bool = False

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


class GuardianResult(ValidationResult):
    severity: GuardianSeverity = GuardianSeverity.NONE
