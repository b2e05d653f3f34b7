from dataclasses import dataclass
from typing import Optional, Tuple
from compliance_inspector.rules.predicates import Predicate

SEVERITY_ORDER = ("critical", "high", "medium", "low")


@dataclass(frozen=True)
class Rule:
    id: str
    title: str
    severity: str
    category: str
    predicate: Predicate
    remediation: str
    weight: Optional[int] = None
    effort: str = "medium"
    tags: Tuple[str, ...] = ()
    description: str = ""
    disabled: bool = False
