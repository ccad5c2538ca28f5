"""Data models for alerting-chain audit results."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal

CheckStatus = Literal["PASS", "FAIL", "INCONCLUSIVE", "NOTE"]
VerdictStatus = Literal["PASSED", "FAILED", "INCONCLUSIVE", "ERROR"]


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check performed while evaluating a rule."""

    status: CheckStatus
    message: str

    @property
    def failed(self) -> bool:
        return self.status in {"FAIL", "INCONCLUSIVE"}

    def reason(self) -> str:
        return f"{self.status}: {self.message}"


@dataclass
class Verdict:
    """Represents the compliance state of one rule (control)."""

    control_id: str
    title: str
    status: VerdictStatus
    impact: float
    checks: List[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == "PASSED"

    @property
    def reasons(self) -> List[str]:
        """Return check outcomes as strings, in the order they were recorded."""

        return [check.reason() for check in self.checks]

    def to_dict(self) -> Dict[str, object]:
        return {
            "control_id": self.control_id,
            "title": self.title,
            "status": self.status,
            "passed": self.passed,
            "impact": self.impact,
            "reasons": self.reasons,
        }


__all__ = ["CheckResult", "CheckStatus", "Verdict", "VerdictStatus"]
