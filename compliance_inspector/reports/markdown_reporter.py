from pathlib import Path
from typing import Optional
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from compliance_inspector.config.defaults import DEFAULT_REPORT_TEMPLATE, TEMPLATES_DIR
from compliance_inspector.reports.models import FindingStatus, ScanReport
from compliance_inspector.reports.report_builder import build_remediation_roadmap
from compliance_inspector.scoring.scorer import ComplianceScorer

CHECKBOX = {
    FindingStatus.PASS: "[x]",
    FindingStatus.PARTIAL: "[~]",
    FindingStatus.FAIL: "[ ]",
    FindingStatus.UNKNOWN: "[?]",
}

STATUS_ICON = {
    FindingStatus.PASS: "✅ Pass",
    FindingStatus.PARTIAL: "⚠️ Partial",
    FindingStatus.FAIL: "❌ Fail",
    FindingStatus.UNKNOWN: "❔ Unknown",
}


def md_cell(value) -> str:
    """Make a value safe for a single Markdown table cell."""
    return " ".join(str(value).split()).replace("|", "\\|")


class MarkdownReporter:
    """
    Renders a ScanReport as Markdown. Pure formatting: returns text and leaves
    persistence to the caller.
    """

    def __init__(
        self,
        scorer: Optional[ComplianceScorer] = None,
        template_dir: Path = TEMPLATES_DIR,
        template_name: str = DEFAULT_REPORT_TEMPLATE,
        max_evidence: int = 5
    ):
        self.scorer = scorer or ComplianceScorer()
        self.max_evidence = max_evidence
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined
        )
        self.env.filters["cell"] = md_cell
        self.template = self.env.get_template(template_name)

    def render(self, report: ScanReport) -> str:
        findings = list(report.findings)
        roadmap = build_remediation_roadmap(findings, self.scorer.profile)
        phases = {}
        for item in roadmap:
            phases.setdefault(item.phase, []).append(item)

        return self.template.render(
            report=report,
            status_counts=self.scorer.status_counts(findings),
            buckets=[(name, items) for name, items in self.scorer.bucketize(findings).items() if items],
            phases=list(phases.items()),
            checklist=[(CHECKBOX[f.status], f) for f in findings],
            status_icon=STATUS_ICON,
            max_evidence=self.max_evidence,
            label_text=report.label.replace("_", " ").title()
        )


def render(report: ScanReport, scorer: Optional[ComplianceScorer] = None) -> str:
    return MarkdownReporter(scorer=scorer).render(report)
