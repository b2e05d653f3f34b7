from pathlib import Path
from typing import Any, List, Optional
import yaml

from compliance_inspector.config.defaults import DEFAULT_RULES_PATH
from compliance_inspector.exceptions import InvalidRuleDefinition
from compliance_inspector.rules.catalog import RuleCatalog
from compliance_inspector.rules.rule_model import Rule
from compliance_inspector.rules.rule_utils import build_predicate, validate_rules_data
from compliance_inspector.utils.logger import get_logger

logger = get_logger()


def load_rules_from_data(raw_rules: Any, source: str = "<memory>") -> RuleCatalog:
    """
    Build a RuleCatalog from parsed rule definitions. Fails fast on the first
    malformed rule; nothing is defaulted except the documented optional fields.
    """
    if not isinstance(raw_rules, list):
        raise InvalidRuleDefinition(f"Expected list of rules in {source}, got: {type(raw_rules).__name__}")

    validate_rules_data(raw_rules)

    rules: List[Rule] = []
    for entry in raw_rules:
        rule_id = entry["id"]
        predicate = build_predicate(entry["predicate"], rule_id=rule_id)
        rules.append(Rule(
            id=rule_id,
            title=entry["title"],
            severity=entry["severity"],
            category=entry["category"],
            predicate=predicate,
            remediation=entry["remediation"].strip(),
            weight=entry.get("weight"),
            effort=entry.get("effort", "medium"),
            tags=tuple(entry.get("tags", [])),
            description=entry.get("description", "").strip(),
            disabled=entry.get("disabled", False)
        ))
        logger.debug(f"[RuleLoader] Compiled rule {rule_id} → {predicate.describe()}")

    catalog = RuleCatalog(rules)
    disabled = len(rules) - len(catalog)
    logger.info(f"[✓] Loaded {len(catalog)} rules from {source} ({disabled} disabled)")
    return catalog


def load_rules_from_yaml(yaml_path: Optional[Path] = None) -> RuleCatalog:
    yaml_path = yaml_path or DEFAULT_RULES_PATH
    try:
        with yaml_path.open(encoding="utf-8") as f:
            raw_rules = yaml.safe_load(f)
    except yaml.YAMLError as ye:
        logger.error(f"[RuleLoader] Malformed YAML in {yaml_path}: {ye}")
        raise InvalidRuleDefinition(f"Malformed YAML in {yaml_path}: {ye}") from ye
    except OSError as oe:
        logger.error(f"[RuleLoader] Failed to read rule catalog {yaml_path}: {oe}")
        raise InvalidRuleDefinition(f"Cannot read rule catalog {yaml_path}: {oe}") from oe

    return load_rules_from_data(raw_rules, source=str(yaml_path))
