import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
from compliance_inspector.config.defaults import (
    DEFAULT_EFFORT_RANK,
    DEFAULT_SEVERITY_WEIGHT,
    DEFAULT_STATUS_CREDIT,
    DEFAULT_THRESHOLDS,
)
from compliance_inspector.utils.logger import get_logger

logger = get_logger()

SEVERITY_LEVELS = ("critical", "high", "medium", "low")
STATUS_LEVELS = ("pass", "partial", "fail", "unknown")


@dataclass(frozen=True)
class ScoringProfile:
    severity_weight: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SEVERITY_WEIGHT))
    status_credit: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_STATUS_CREDIT))
    effort_rank: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_EFFORT_RANK))
    thresholds: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))


def validate_section(section_name: str, section: Any, value_type: Union[type, tuple]) -> Dict[str, Any]:
    if not isinstance(section, dict):
        raise ValueError(f"[ScoringLoader] '{section_name}' must be a dict, got {type(section).__name__}")

    normalized = {}
    for key, value in section.items():
        if not isinstance(key, str):
            raise ValueError(f"[ScoringLoader] Invalid key in '{section_name}': {key} (must be str)")
        if isinstance(value, bool) or not isinstance(value, value_type):
            raise ValueError(f"[ScoringLoader] Invalid value for key '{key}' in '{section_name}': {value}")
        if value < 0:
            raise ValueError(f"[ScoringLoader] Negative value for key '{key}' in '{section_name}': {value}")
        normalized[key.strip().lower()] = value

    return normalized


def _merged(section_name: str, raw: Any, defaults: Dict[str, Any], value_type) -> Dict[str, Any]:
    merged = dict(defaults)
    if raw is not None:
        merged.update(validate_section(section_name, raw, value_type))
    return merged


def load_scoring_profile(path: Optional[Path] = None) -> ScoringProfile:
    """
    Load a scoring profile from YAML. Missing sections fall back to the
    built-in defaults; malformed sections raise ValueError.
    """
    if path is None:
        return ScoringProfile()

    try:
        with path.open("r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("[ScoringLoader] YAML root must be a dictionary")

        severity_weight = _merged("severity_weight", config.get("severity_weight"), DEFAULT_SEVERITY_WEIGHT, int)
        status_credit = _merged("status_credit", config.get("status_credit"), DEFAULT_STATUS_CREDIT, (int, float))
        effort_rank = _merged("effort_rank", config.get("effort_rank"), DEFAULT_EFFORT_RANK, int)
        thresholds = _merged("thresholds", config.get("thresholds"), DEFAULT_THRESHOLDS, (int, float))

        missing = set(SEVERITY_LEVELS) - severity_weight.keys()
        if missing:
            raise ValueError(f"[ScoringLoader] severity_weight is missing levels: {sorted(missing)}")

        for status, credit in status_credit.items():
            if credit > 1:
                raise ValueError(f"[ScoringLoader] status_credit for '{status}' must be within [0, 1]")

        if not status_credit["pass"] >= status_credit["partial"] >= status_credit["fail"]:
            raise ValueError("[ScoringLoader] status_credit must satisfy pass >= partial >= fail")

        logger.info(f"[ScoringLoader] Scoring profile loaded from {path}")
        return ScoringProfile(
            severity_weight=severity_weight,
            status_credit={k: float(v) for k, v in status_credit.items()},
            effort_rank=effort_rank,
            thresholds={k: float(v) for k, v in thresholds.items()}
        )

    except Exception as ex:
        logger.error(f"[ScoringLoader] Failed to load or validate scoring profile: {ex}")
        raise
