from collections import Counter, OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence
from compliance_inspector.config.scoring_loader import ScoringProfile
from compliance_inspector.reports.models import Finding, FindingStatus

BUCKET_ORDER = ("Critical", "High", "Medium", "Low", "Compliant")


class ComplianceScorer:
    """
    Weighted compliance scoring.

    score = 100 * Σ(weight × credit) / Σ(weight), where the credit comes from
    the finding status (pass 1.0, partial 0.5, fail and unknown 0.0 by default)
    and the weight from the rule, falling back to its severity weight.
    Depends only on the findings passed in.
    """

    def __init__(self, profile: Optional[ScoringProfile] = None):
        self.profile = profile or ScoringProfile()

    def weight_for(self, finding: Finding) -> int:
        if finding.weight is not None:
            return finding.weight
        return self.profile.severity_weight.get(finding.severity.lower(), 0)

    def credit_for(self, finding: Finding) -> float:
        return self.profile.status_credit.get(finding.status.value, 0.0)

    def score(self, findings: Iterable[Finding]) -> float:
        total_weight = 0
        earned = 0.0
        for finding in findings:
            weight = self.weight_for(finding)
            total_weight += weight
            earned += weight * self.credit_for(finding)

        if total_weight == 0:
            return 100.0
        return round(max(0.0, min(100.0, 100.0 * earned / total_weight)), 2)

    def label(self, score: float) -> str:
        if score >= self.profile.thresholds.get("compliant", 90.0):
            return "compliant"
        elif score >= self.profile.thresholds.get("partially_compliant", 60.0):
            return "partially_compliant"
        return "non_compliant"

    @staticmethod
    def bucket_of(finding: Finding) -> str:
        if finding.status is FindingStatus.PASS:
            return "Compliant"
        return finding.severity.capitalize()

    def bucketize(self, findings: Sequence[Finding]) -> Dict[str, List[Finding]]:
        buckets: Dict[str, List[Finding]] = OrderedDict((name, []) for name in BUCKET_ORDER)
        for finding in findings:
            buckets.setdefault(self.bucket_of(finding), []).append(finding)
        return buckets

    @staticmethod
    def status_counts(findings: Iterable[Finding]) -> Dict[str, int]:
        counts = Counter(f.status.value for f in findings)
        return {status.value: counts.get(status.value, 0) for status in FindingStatus}


def score(findings: Iterable[Finding], profile: Optional[ScoringProfile] = None) -> float:
    return ComplianceScorer(profile).score(findings)
