from pathlib import Path

# ─── Directory Structure ─────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent         # → compliance_inspector/
RULES_DIR = BASE_DIR / "rules"                            # → compliance_inspector/rules
CONFIG_DIR = BASE_DIR / "config"                          # → compliance_inspector/config
CONFIG_RULES_DIR = RULES_DIR / "rule_configs"             # → compliance_inspector/rules/rule_configs
TEMPLATES_DIR = BASE_DIR / "reports" / "templates"

# ─── Default File Paths ─────────────────────────────────────
DEFAULT_RULES_PATH = CONFIG_RULES_DIR / "rules.yaml"
DEFAULT_SCORING_PROFILE_PATH = CONFIG_DIR / "scoring_profile.yaml"
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_REPORT_TEMPLATE = "report.md.j2"

# ─── Scan Defaults ──────────────────────────────────────────
DEFAULT_IGNORED_DIRS = frozenset({
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".tox",
})
DEFAULT_MAX_FILE_BYTES = 1024 * 1024
DEFAULT_MAX_WORKERS = 4

# ─── Scoring Defaults (used when a profile omits a section) ─
DEFAULT_SEVERITY_WEIGHT = {
    "critical": 40,
    "high": 30,
    "medium": 20,
    "low": 10
}
DEFAULT_STATUS_CREDIT = {
    "pass": 1.0,
    "partial": 0.5,
    "fail": 0.0,
    "unknown": 0.0
}
DEFAULT_EFFORT_RANK = {
    "low": 1,
    "medium": 2,
    "high": 3
}
DEFAULT_THRESHOLDS = {
    "compliant": 90.0,
    "partially_compliant": 60.0
}
