import json
import re
from pathlib import Path
from typing import Optional
import pandas as pd
from compliance_inspector.reports.models import ScanReport
from compliance_inspector.reports.schemas import ScanReportModel
from compliance_inspector.utils.logger import get_logger


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^\w\-_.]", "_", name)


class ReportSaver:
    def __init__(self, run_dir: Path):
        self.run_dir = run_dir
        self.timestamp = run_dir.name
        self.logger = get_logger()
        self.run_dir.mkdir(parents=True, exist_ok=True)

    def get_target_dir(self, target: str) -> Path:
        safe_name = sanitize_filename(Path(target).name or "target")
        target_dir = self.run_dir / safe_name
        target_dir.mkdir(parents=True, exist_ok=True)
        return target_dir

    def _write_text(self, path: Path, text: str, label: str) -> bool:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            self.logger.info(f"[✓] {label} written to {path.resolve()}")
            return True
        except Exception as ex:
            self.logger.error(f"[✗] Failed to write {label}: {ex}")
            return False

    def save_markdown(self, report: ScanReport, text: str) -> Optional[Path]:
        path = self.get_target_dir(report.target) / "report.md"
        return path if self._write_text(path, text, f"Markdown report for {report.target}") else None

    def save_json(self, report: ScanReport) -> Optional[Path]:
        path = self.get_target_dir(report.target) / "report.json"
        payload = ScanReportModel.from_report(report).model_dump()
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        return path if self._write_text(path, text, f"JSON report for {report.target}") else None

    def save_findings_csv(self, report: ScanReport) -> Optional[Path]:
        if not report.findings:
            self.logger.info(f"[~] No findings to save for {report.target}.")
            return None

        rows = [{
            "rule_id": f.rule_id,
            "title": f.title,
            "severity": f.severity,
            "category": f.category,
            "status": f.status.value,
            "evidence": "; ".join(e.ref() for e in f.evidence),
            "evidence_count": len(f.evidence),
            "effort": f.effort,
            "note": f.note,
        } for f in report.findings]

        df = pd.DataFrame(rows)
        path = self.get_target_dir(report.target) / "findings.csv"
        try:
            df.to_csv(path, index=False)
            self.logger.info(f"[✓] Saved findings CSV: {path.resolve()}")
            return path
        except Exception as ex:
            self.logger.error(f"[✗] Failed to save findings CSV: {ex}")
            return None
