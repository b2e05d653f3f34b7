from compliance_inspector.core.target import RepositoryTarget
from compliance_inspector.reports.models import EvidenceLocation, FindingStatus
from compliance_inspector.rules.predicates import ContentRegexPredicate, FilePatternPredicate
from compliance_inspector.rules.structural_checks import STRUCTURAL_CHECKS, modular_layout, ordered_patterns


def make_target(files):
    return RepositoryTarget(name="memory", files=files)


def test_file_pattern_require_and_forbid():
    target = make_target({"README.md": "hi", "src/.env": "A=1"})

    assert FilePatternPredicate(["README*"]).evaluate(target).status is FindingStatus.PASS
    assert FilePatternPredicate(["LICENSE"]).evaluate(target).status is FindingStatus.FAIL

    forbidden = FilePatternPredicate(["**/.env"], mode="forbid").evaluate(target)
    assert forbidden.status is FindingStatus.FAIL
    assert forbidden.evidence == (EvidenceLocation(path="src/.env"),)


def test_content_regex_forbid_reports_line_evidence():
    target = make_target({
        "a.py": "x = 1\npassword = 'hunter2'\n",
        "b.py": "y = 2\n",
    })
    result = ContentRegexPredicate(["*.py"], r"password\s*=").evaluate(target)

    assert result.status is FindingStatus.FAIL
    assert result.evidence == (EvidenceLocation("a.py", 2, 2, "password = 'hunter2'"),)
    assert "1 forbidden match(es) in 1 file(s)" == result.note


def test_content_regex_require():
    target = make_target({"main.bicep": "resource d 'Microsoft.Insights/diagnosticSettings@2021' = {}\n"})

    assert ContentRegexPredicate(["*.bicep"], "diagnosticSettings", mode="require").evaluate(target).status \
        is FindingStatus.PASS
    assert ContentRegexPredicate(["*.bicep"], "privateEndpoint", mode="require").evaluate(target).status \
        is FindingStatus.FAIL


def test_content_regex_coverage_thresholds():
    files = {f"m{i}.py": ("def f() -> int:\n" if i < 3 else "def f():\n") for i in range(4)}
    target = make_target(files)

    hints = ContentRegexPredicate(["*.py"], r"def \w+\(.*\)\s*->", mode="coverage", pass_ratio=0.9, partial_ratio=0.5)
    result = hints.evaluate(target)
    assert result.status is FindingStatus.PARTIAL
    assert result.evidence == (EvidenceLocation("m3.py"),)
    assert result.note.startswith("Coverage 75%")

    strict = ContentRegexPredicate(["*.py"], r"def \w+\(.*\)\s*->", mode="coverage", pass_ratio=1.0, partial_ratio=0.8)
    assert strict.evaluate(target).status is FindingStatus.FAIL

    loose = ContentRegexPredicate(["*.py"], r"def \w+\(.*\)\s*->", mode="coverage", pass_ratio=0.75)
    assert loose.evaluate(target).status is FindingStatus.PASS


def test_content_regex_without_files_in_scope_is_not_applicable():
    result = ContentRegexPredicate(["*.bicep"], "anything").evaluate(make_target({"a.py": ""}))

    assert result.status is FindingStatus.PASS
    assert "not applicable" in result.note


def test_evidence_is_capped():
    target = make_target({"a.py": "secret\n" * 50})
    result = ContentRegexPredicate(["*.py"], "secret", max_evidence=3).evaluate(target)

    assert len(result.evidence) == 3
    assert result.note.startswith("50 forbidden")


def test_registry_contains_builtin_checks():
    assert {"modular_layout", "ordered_patterns"} <= set(STRUCTURAL_CHECKS)


def test_modular_layout_pass():
    target = make_target({
        "infra/main.bicep": "module st 'modules/storage.bicep' = {\n}\n",
        "infra/modules/storage.bicep": "resource a 'x' = {}\n",
    })
    result = modular_layout(target)

    assert result.status is FindingStatus.PASS
    assert result.evidence[0].path == "infra/main.bicep"


def test_modular_layout_partial_when_templates_not_composed():
    target = make_target({
        "infra/main.bicep": "resource a 'x' = {}\n",
        "infra/network.bicep": "resource b 'y' = {}\n",
    })
    assert modular_layout(target).status is FindingStatus.PARTIAL


def test_modular_layout_fails_for_large_monolith():
    target = make_target({"main.bicep": "resource a 'x' = {}\n" * 20})
    result = modular_layout(target, max_monolith_lines=10)

    assert result.status is FindingStatus.FAIL
    assert result.evidence == (EvidenceLocation("main.bicep", 1, 20),)


def test_modular_layout_not_applicable_without_templates():
    assert modular_layout(make_target({"a.py": ""})).status is FindingStatus.PASS


PATTERNS = [r"ManagedIdentityCredential", r"AzureKeyCredential"]


def test_ordered_patterns_pass_when_identity_first():
    target = make_target({
        "auth.py": "cred = ManagedIdentityCredential()\nfallback = AzureKeyCredential(key)\n",
    })
    result = ordered_patterns(target, include=["*.py"], patterns=PATTERNS)

    assert result.status is FindingStatus.PASS
    assert result.evidence[0].line_start == 1


def test_ordered_patterns_fail_when_key_first():
    target = make_target({
        "auth.py": "fallback = AzureKeyCredential(key)\ncred = ManagedIdentityCredential()\n",
        "other.py": "cred = ManagedIdentityCredential()\n",
    })
    result = ordered_patterns(target, include=["*.py"], patterns=PATTERNS)

    assert result.status is FindingStatus.FAIL
    assert result.evidence[0] == EvidenceLocation("auth.py", 1, 1, "fallback = AzureKeyCredential(key)")
    assert result.note == "Ordering violated in 1 of 2 file(s)"


def test_ordered_patterns_fail_when_preferred_missing():
    target = make_target({"auth.py": "import os\nc = AzureKeyCredential(os.environ['K'])\n"})
    result = ordered_patterns(target, include=["*.py"], patterns=PATTERNS)

    assert result.status is FindingStatus.FAIL
    assert result.evidence[0].line_start == 2


def test_ordered_patterns_not_applicable():
    result = ordered_patterns(make_target({"a.py": "x = 1\n"}), include=["*.py"], patterns=PATTERNS)

    assert result.status is FindingStatus.PASS
    assert "not applicable" in result.note
