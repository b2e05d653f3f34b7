from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FindingStatus(str, Enum):
    PASS = "pass"
    PARTIAL = "partial"
    FAIL = "fail"
    UNKNOWN = "unknown"


@dataclass(frozen=True, order=True)
class EvidenceLocation:
    path: str                     # posix path relative to the target root
    line_start: int = 0           # 0 means the whole file
    line_end: int = 0
    excerpt: str = ""

    def ref(self) -> str:
        if self.line_start <= 0:
            return self.path
        if self.line_end > self.line_start:
            return f"{self.path}:L{self.line_start}-L{self.line_end}"
        return f"{self.path}:L{self.line_start}"


@dataclass(frozen=True)
class Finding:
    rule_id: str
    title: str
    severity: str
    category: str
    status: FindingStatus
    evidence: Tuple[EvidenceLocation, ...] = ()
    note: str = ""
    weight: Optional[int] = None  # explicit rule weight; None → severity weight
    effort: str = "medium"
    remediation: str = ""

    @property
    def passed(self) -> bool:
        return self.status is FindingStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["evidence"] = [asdict(e) for e in self.evidence]
        return data


@dataclass(frozen=True)
class ScanReport:
    # ─── Target ────────────────────────────────────────
    target: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds"))

    # ─── Results ───────────────────────────────────────
    findings: Tuple[Finding, ...] = ()
    score: float = 100.0                 # weighted compliance percentage (0–100)
    label: str = "compliant"             # compliant | partially_compliant | non_compliant

    @property
    def rule_count(self) -> int:
        return len(self.findings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "timestamp": self.timestamp,
            "score": self.score,
            "label": self.label,
            "rule_count": self.rule_count,
            "findings": [f.to_dict() for f in self.findings]
        }
