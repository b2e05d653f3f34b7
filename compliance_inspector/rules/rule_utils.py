import inspect
import re
import jsonschema
import yaml
from pathlib import Path
from typing import Any, Dict
from compliance_inspector.exceptions import InvalidRuleDefinition
from compliance_inspector.rules.predicates import (
    ContentRegexPredicate,
    FilePatternPredicate,
    Predicate,
    StructuralPredicate,
)
from compliance_inspector.rules.structural_checks import STRUCTURAL_CHECKS
from compliance_inspector.utils.logger import get_logger

logger = get_logger()

_GLOB_LIST = {"type": "array", "items": {"type": "string", "minLength": 1}}

# JSON schema for validating rules.yaml structure
RULES_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "title", "severity", "category", "predicate", "remediation"],
        "properties": {
            "id": {"type": "string", "minLength": 1},
            "title": {"type": "string", "minLength": 1},
            "description": {"type": "string"},
            "severity": {
                "type": "string",
                "enum": ["low", "medium", "high", "critical"]
            },
            "category": {"type": "string", "minLength": 1},
            "remediation": {"type": "string", "minLength": 1},
            "weight": {"type": "integer", "minimum": 0},
            "effort": {
                "type": "string",
                "enum": ["low", "medium", "high"]
            },
            "tags": {
                "type": "array",
                "items": {"type": "string"}
            },
            "disabled": {"type": "boolean"},
            "predicate": {
                "type": "object",
                "required": ["kind"],
                "properties": {
                    "kind": {"type": "string", "enum": ["file_pattern", "content_regex", "structural"]}
                }
            }
        },
        "additionalProperties": False
    }
}

# Per-kind schemas, checked once the kind is known
PREDICATE_SCHEMAS = {
    "file_pattern": {
        "type": "object",
        "required": ["kind", "patterns"],
        "properties": {
            "kind": {"const": "file_pattern"},
            "patterns": {**_GLOB_LIST, "minItems": 1},
            "exclude": _GLOB_LIST,
            "mode": {"type": "string", "enum": ["require", "forbid"]},
            "max_evidence": {"type": "integer", "minimum": 1}
        },
        "additionalProperties": False
    },
    "content_regex": {
        "type": "object",
        "required": ["kind", "include", "pattern"],
        "properties": {
            "kind": {"const": "content_regex"},
            "include": {**_GLOB_LIST, "minItems": 1},
            "exclude": _GLOB_LIST,
            "pattern": {"type": "string", "minLength": 1},
            "mode": {"type": "string", "enum": ["forbid", "require", "coverage"]},
            "ignore_case": {"type": "boolean"},
            "pass_ratio": {"type": "number", "minimum": 0.0, "maximum": 1.0},
            "partial_ratio": {"type": "number", "minimum": 0.0, "maximum": 1.0},
            "max_evidence": {"type": "integer", "minimum": 1}
        },
        "additionalProperties": False
    },
    "structural": {
        "type": "object",
        "required": ["kind", "check"],
        "properties": {
            "kind": {"const": "structural"},
            "check": {"type": "string"},
            "params": {"type": "object"}
        },
        "additionalProperties": False
    }
}


def validate_rules_data(content: Any) -> None:
    """
    Validates parsed rule definitions against RULES_SCHEMA.
    Raises InvalidRuleDefinition naming the offending rule.
    """
    try:
        jsonschema.validate(instance=content, schema=RULES_SCHEMA)
    except jsonschema.ValidationError as ve:
        rule_id = None
        if ve.absolute_path and isinstance(content, list):
            index = ve.absolute_path[0]
            if isinstance(index, int) and isinstance(content[index], dict):
                rule_id = content[index].get("id", f"#{index}")
        logger.error(f"[RuleUtils] Rule schema validation failed: {ve.message}")
        raise InvalidRuleDefinition(ve.message, rule_id=rule_id) from ve


def validate_rules_yaml(yaml_path: Path) -> int:
    """
    Validates a rules YAML file against RULES_SCHEMA.
    Returns the number of rules; raises InvalidRuleDefinition otherwise.
    """
    try:
        content = yaml.safe_load(yaml_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as ye:
        logger.error(f"[RuleUtils] Malformed YAML in {yaml_path.name}: {ye}")
        raise InvalidRuleDefinition(f"Malformed YAML in {yaml_path.name}: {ye}") from ye
    except OSError as oe:
        raise InvalidRuleDefinition(f"Cannot read rule catalog {yaml_path}: {oe}") from oe

    validate_rules_data(content)
    logger.info(f"[✓] {yaml_path.name} is structurally valid with {len(content)} rules.")
    return len(content)


def build_predicate(spec: Dict[str, Any], rule_id: str) -> Predicate:
    """
    Compile a predicate definition into a Predicate instance.
    Every malformed definition raises InvalidRuleDefinition.
    """
    kind = spec.get("kind")
    schema = PREDICATE_SCHEMAS.get(kind)
    if schema is None:
        raise InvalidRuleDefinition(f"unknown predicate kind '{kind}'", rule_id=rule_id)

    try:
        jsonschema.validate(instance=spec, schema=schema)
    except jsonschema.ValidationError as ve:
        raise InvalidRuleDefinition(f"invalid {kind} predicate: {ve.message}", rule_id=rule_id) from ve

    options = {k: v for k, v in spec.items() if k != "kind"}

    if kind == "file_pattern":
        return FilePatternPredicate(**options)

    if kind == "content_regex":
        try:
            return ContentRegexPredicate(**options)
        except re.error as ex:
            raise InvalidRuleDefinition(f"invalid regex '{spec['pattern']}': {ex}", rule_id=rule_id) from ex

    check_name = spec["check"]
    func = STRUCTURAL_CHECKS.get(check_name)
    if func is None:
        raise InvalidRuleDefinition(f"unknown structural check '{check_name}'", rule_id=rule_id)

    params = spec.get("params", {})
    try:
        inspect.signature(func).bind(None, **params)
    except TypeError as ex:
        raise InvalidRuleDefinition(f"invalid params for '{check_name}': {ex}", rule_id=rule_id) from ex

    if "module_keyword" in params:
        _check_regex(params["module_keyword"], rule_id)
    if "patterns" in params:
        patterns = params["patterns"]
        if not isinstance(patterns, list) or len(patterns) < 2:
            raise InvalidRuleDefinition(f"'{check_name}' needs a list of at least two patterns", rule_id=rule_id)
        for pattern in patterns:
            _check_regex(pattern, rule_id)

    return StructuralPredicate(check_name, func, params)


def _check_regex(pattern: str, rule_id: str) -> None:
    try:
        re.compile(pattern)
    except (re.error, TypeError) as ex:
        raise InvalidRuleDefinition(f"invalid regex '{pattern}': {ex}", rule_id=rule_id) from ex
