from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from compliance_inspector.reports.models import ScanReport


class EvidenceModel(BaseModel):
    path: str
    line_start: int = 0
    line_end: int = 0
    excerpt: str = ""


class FindingModel(BaseModel):
    rule_id: str
    title: str
    severity: str
    category: str
    status: str
    weight: Optional[int] = None
    effort: str = "medium"
    remediation: str = ""
    evidence: List[EvidenceModel] = []
    note: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return getattr(v, "value", v)

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v):
        return str(v).lower()


class ScanReportModel(BaseModel):
    target: str
    timestamp: str
    score: float = Field(ge=0.0, le=100.0)
    label: str
    rule_count: int
    findings: List[FindingModel] = []

    @classmethod
    def from_report(cls, report: ScanReport) -> "ScanReportModel":
        return cls.model_validate(report.to_dict())
