from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple
from compliance_inspector.exceptions import InvalidRuleDefinition
from compliance_inspector.rules.rule_model import Rule


class RuleCatalog:
    """Ordered, immutable collection of rules."""

    def __init__(self, rules: Sequence[Rule]):
        seen: Dict[str, Rule] = {}
        for rule in rules:
            if rule.id in seen:
                raise InvalidRuleDefinition("duplicate rule id", rule_id=rule.id)
            seen[rule.id] = rule
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._by_id = seen

    def list_rules(self) -> Tuple[Rule, ...]:
        return tuple(r for r in self._rules if not r.disabled)

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._by_id.get(rule_id)

    def select(self, include: Optional[Iterable[str]] = None, exclude: Optional[Iterable[str]] = None) -> "RuleCatalog":
        include = list(include or [])
        exclude = list(exclude or [])
        unknown = [rid for rid in include + exclude if rid not in self._by_id]
        if unknown:
            raise KeyError(f"Unknown rule id(s): {', '.join(unknown)}")

        rules = [r for r in self._rules if (not include or r.id in include) and r.id not in exclude]
        return RuleCatalog(rules)

    def __len__(self) -> int:
        return len(self.list_rules())

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.list_rules())
