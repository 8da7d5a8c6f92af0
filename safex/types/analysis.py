"""Static analysis data models."""

from dataclasses import dataclass, field
from enum import Enum

_SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2}


class Severity(Enum):
    """Finding severity, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


@dataclass(frozen=True)
class Finding:
    """A single static-analysis result."""

    description: str
    line: int
    severity: Severity
    suggested_fix: str


@dataclass(frozen=True)
class AnalysisResult:
    """Findings of one scan, in detection order."""

    success: bool
    message: str
    findings: tuple[Finding, ...] = field(default_factory=tuple)

    @property
    def highest_severity(self) -> Severity | None:
        if not self.findings:
            return None
        return max(finding.severity for finding in self.findings)

    def count_by_severity(self) -> dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts
