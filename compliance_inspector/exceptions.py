from pathlib import Path
from typing import Optional, Union


class ComplianceInspectorError(Exception):
    """Base class for errors raised by the inspector."""


class TargetNotFound(ComplianceInspectorError):
    """The scan target does not exist or cannot be read. Aborts the scan."""

    def __init__(self, target: Union[str, Path], reason: str = "not found"):
        self.target = str(target)
        self.reason = reason
        super().__init__(f"Target '{self.target}' {reason}")


class InvalidRuleDefinition(ComplianceInspectorError):
    """A rule in the catalog is malformed. Raised at catalog load time."""

    def __init__(self, message: str, rule_id: Optional[str] = None):
        self.rule_id = rule_id
        prefix = f"Rule {rule_id}: " if rule_id else ""
        super().__init__(f"{prefix}{message}")
