from dataclasses import dataclass
from typing import List, Optional, Sequence
from compliance_inspector.config.scoring_loader import ScoringProfile
from compliance_inspector.reports.models import Finding, FindingStatus, ScanReport
from compliance_inspector.rules.rule_model import SEVERITY_ORDER
from compliance_inspector.scoring.scorer import ComplianceScorer
from compliance_inspector.utils.logger import get_logger

logger = get_logger()

PHASES = {
    "critical": "Phase 1 - Immediate",
    "high": "Phase 2 - Short term",
    "medium": "Phase 3 - Hardening",
    "low": "Phase 3 - Hardening",
}


@dataclass(frozen=True)
class RoadmapItem:
    phase: str
    rule_id: str
    title: str
    severity: str
    effort: str
    status: str
    remediation: str


def build_scan_report(target: str, findings: Sequence[Finding], scorer: Optional[ComplianceScorer] = None,
                      timestamp: Optional[str] = None) -> ScanReport:
    scorer = scorer or ComplianceScorer()
    score = scorer.score(findings)
    kwargs = {"timestamp": timestamp} if timestamp else {}
    report = ScanReport(
        target=target,
        findings=tuple(findings),
        score=score,
        label=scorer.label(score),
        **kwargs
    )
    logger.info(f"[ReportBuilder] {target}: {report.rule_count} findings, score={score}, label={report.label}")
    return report


def build_remediation_roadmap(findings: Sequence[Finding], profile: Optional[ScoringProfile] = None) -> List[RoadmapItem]:
    """
    Non-passing findings ordered by severity (critical first), then by
    estimated effort (smallest first), then by rule id.
    """
    profile = profile or ScoringProfile()
    items = []
    for finding in findings:
        if finding.status is FindingStatus.PASS:
            continue
        items.append(RoadmapItem(
            phase=PHASES.get(finding.severity, PHASES["low"]),
            rule_id=finding.rule_id,
            title=finding.title,
            severity=finding.severity,
            effort=finding.effort,
            status=finding.status.value,
            remediation=finding.remediation
        ))

    def sort_key(item: RoadmapItem):
        sev = SEVERITY_ORDER.index(item.severity) if item.severity in SEVERITY_ORDER else len(SEVERITY_ORDER)
        return sev, profile.effort_rank.get(item.effort, max(profile.effort_rank.values(), default=0) + 1), item.rule_id

    return sorted(items, key=sort_key)
