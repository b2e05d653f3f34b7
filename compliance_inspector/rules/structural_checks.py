import re
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Sequence
from compliance_inspector.reports.models import EvidenceLocation, FindingStatus
from compliance_inspector.rules.predicates import DEFAULT_MAX_EVIDENCE, PredicateResult, cap_evidence, excerpt

StructuralCheck = Callable[..., PredicateResult]

STRUCTURAL_CHECKS: Dict[str, StructuralCheck] = {}


def register_check(name: str):
    def decorator(func: StructuralCheck) -> StructuralCheck:
        STRUCTURAL_CHECKS[name] = func
        return func
    return decorator


@register_check("modular_layout")
def modular_layout(
    target,
    include: Sequence[str] = ("**/*.bicep",),
    exclude: Sequence[str] = (),
    modules_dir: str = "modules",
    min_modules: int = 1,
    module_keyword: str = r"^\s*module\s+\w+",
    max_monolith_lines: int = 300
) -> PredicateResult:
    """
    Infrastructure templates should be composed from modules kept under
    `modules_dir` and referenced from the entry templates.
    """
    templates = target.glob(include, exclude)
    if not templates:
        return PredicateResult(FindingStatus.PASS, (), "No infrastructure templates found; rule not applicable")

    keyword = re.compile(module_keyword)
    modules = [t for t in templates if modules_dir in PurePosixPath(t).parts[:-1]]
    entries = [t for t in templates if t not in modules]

    references: List[EvidenceLocation] = []
    for path in entries:
        for lineno, line in enumerate(target.read_lines(path), start=1):
            if keyword.search(line):
                references.append(EvidenceLocation(path, lineno, lineno, excerpt(line)))

    if len(modules) >= min_modules and references:
        return PredicateResult(
            FindingStatus.PASS,
            cap_evidence(references, DEFAULT_MAX_EVIDENCE),
            f"{len(modules)} module template(s) referenced {len(references)} time(s)"
        )

    if len(templates) > 1 or modules:
        return PredicateResult(
            FindingStatus.PARTIAL,
            cap_evidence([EvidenceLocation(t) for t in templates], DEFAULT_MAX_EVIDENCE),
            f"{len(templates)} template(s) found but not composed through '{modules_dir}/' modules"
        )

    single = templates[0]
    line_count = len(target.read_lines(single))
    evidence = (EvidenceLocation(single, 1, line_count),)
    if line_count > max_monolith_lines:
        return PredicateResult(
            FindingStatus.FAIL, evidence,
            f"Monolithic template with {line_count} lines (limit {max_monolith_lines})"
        )
    return PredicateResult(FindingStatus.PARTIAL, evidence, "Single template without modules")


@register_check("ordered_patterns")
def ordered_patterns(
    target,
    include: Sequence[str],
    patterns: Sequence[str],
    exclude: Sequence[str] = (),
    ignore_case: bool = False
) -> PredicateResult:
    """
    Wherever any of `patterns` appears, the first one must be present and the
    first occurrences must follow the listed order, e.g. an identity-based
    credential before any key-based fallback.
    """
    if len(patterns) < 2:
        raise ValueError("ordered_patterns needs at least two patterns")

    flags = re.IGNORECASE if ignore_case else 0
    compiled = [re.compile(p, flags) for p in patterns]
    violations: List[EvidenceLocation] = []
    conforming: List[EvidenceLocation] = []
    checked = 0

    for path in target.glob(include, exclude):
        lines = target.read_lines(path)
        first_hit: Dict[int, int] = {}
        for lineno, line in enumerate(lines, start=1):
            for idx, regex in enumerate(compiled):
                if idx not in first_hit and regex.search(line):
                    first_hit[idx] = lineno
        if not first_hit:
            continue
        checked += 1

        if 0 not in first_hit:
            lineno = min(first_hit.values())
            violations.append(EvidenceLocation(path, lineno, lineno, excerpt(lines[lineno - 1])))
            continue

        present = sorted(first_hit)
        out_of_order = [
            first_hit[later] for pos, later in enumerate(present)
            if any(first_hit[later] < first_hit[earlier] for earlier in present[:pos])
        ]
        if out_of_order:
            lineno = min(out_of_order)
            violations.append(EvidenceLocation(path, lineno, lineno, excerpt(lines[lineno - 1])))
        else:
            lineno = first_hit[0]
            conforming.append(EvidenceLocation(path, lineno, lineno, excerpt(lines[lineno - 1])))

    if checked == 0:
        return PredicateResult(FindingStatus.PASS, (), "No matching patterns found; rule not applicable")
    if violations:
        return PredicateResult(
            FindingStatus.FAIL,
            cap_evidence(violations, DEFAULT_MAX_EVIDENCE),
            f"Ordering violated in {len(violations)} of {checked} file(s)"
        )
    return PredicateResult(
        FindingStatus.PASS,
        cap_evidence(conforming, DEFAULT_MAX_EVIDENCE),
        f"Ordering respected in {checked} file(s)"
    )
