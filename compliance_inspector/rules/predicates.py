"""
Detection predicates.

Each rule owns exactly one predicate. A predicate inspects a
RepositoryTarget and returns a PredicateResult; the scanner turns that into
a Finding. Kinds are selected by the `kind` key of the rule definition:

- file_pattern:   presence or absence of files matching globs
- content_regex:  regex matches inside file contents
- structural:     a named check from the structural check registry
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple
from compliance_inspector.reports.models import EvidenceLocation, FindingStatus

DEFAULT_MAX_EVIDENCE = 20


@dataclass(frozen=True)
class PredicateResult:
    status: FindingStatus
    evidence: Tuple[EvidenceLocation, ...] = ()
    note: str = ""


def cap_evidence(evidence: Sequence[EvidenceLocation], limit: int) -> Tuple[EvidenceLocation, ...]:
    return tuple(sorted(evidence)[:limit])


def excerpt(line: str, width: int = 120) -> str:
    line = line.strip()
    return line if len(line) <= width else line[:width - 3] + "..."


class Predicate(ABC):
    kind: str = "abstract"

    @abstractmethod
    def evaluate(self, target) -> PredicateResult:
        pass

    def describe(self) -> str:
        return self.kind


class FilePatternPredicate(Predicate):
    kind = "file_pattern"

    def __init__(self, patterns: List[str], mode: str = "require", exclude: List[str] = (),
                 max_evidence: int = DEFAULT_MAX_EVIDENCE):
        self.patterns = tuple(patterns)
        self.mode = mode
        self.exclude = tuple(exclude)
        self.max_evidence = max_evidence

    def evaluate(self, target) -> PredicateResult:
        matches = target.glob(self.patterns, self.exclude)
        evidence = cap_evidence([EvidenceLocation(path=m) for m in matches], self.max_evidence)

        if self.mode == "require":
            if matches:
                return PredicateResult(FindingStatus.PASS, evidence, f"{len(matches)} matching file(s)")
            return PredicateResult(FindingStatus.FAIL, (), f"No file matches {list(self.patterns)}")

        if matches:
            return PredicateResult(FindingStatus.FAIL, evidence, f"{len(matches)} forbidden file(s) present")
        return PredicateResult(FindingStatus.PASS, (), "No forbidden files present")

    def describe(self) -> str:
        return f"{self.kind}:{self.mode} {', '.join(self.patterns)}"


class ContentRegexPredicate(Predicate):
    kind = "content_regex"

    def __init__(self, include: List[str], pattern: str, mode: str = "forbid", exclude: List[str] = (),
                 ignore_case: bool = False, pass_ratio: float = 1.0, partial_ratio: float = 0.5,
                 max_evidence: int = DEFAULT_MAX_EVIDENCE):
        self.include = tuple(include)
        self.exclude = tuple(exclude)
        self.pattern = pattern
        self.regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
        self.mode = mode
        self.pass_ratio = pass_ratio
        self.partial_ratio = partial_ratio
        self.max_evidence = max_evidence

    def _scan_file(self, target, path: str) -> List[EvidenceLocation]:
        hits = []
        for lineno, line in enumerate(target.read_lines(path), start=1):
            if self.regex.search(line):
                hits.append(EvidenceLocation(path=path, line_start=lineno, line_end=lineno, excerpt=excerpt(line)))
        return hits

    def evaluate(self, target) -> PredicateResult:
        files = target.glob(self.include, self.exclude)
        if not files:
            return PredicateResult(FindingStatus.PASS, (), "No files in scope; rule not applicable")

        hits_by_file: Dict[str, List[EvidenceLocation]] = {}
        for path in files:
            hits = self._scan_file(target, path)
            if hits:
                hits_by_file[path] = hits
        all_hits = [h for hits in hits_by_file.values() for h in hits]

        if self.mode == "forbid":
            if all_hits:
                return PredicateResult(
                    FindingStatus.FAIL,
                    cap_evidence(all_hits, self.max_evidence),
                    f"{len(all_hits)} forbidden match(es) in {len(hits_by_file)} file(s)"
                )
            return PredicateResult(FindingStatus.PASS, (), f"No matches in {len(files)} file(s)")

        if self.mode == "require":
            if all_hits:
                return PredicateResult(
                    FindingStatus.PASS,
                    cap_evidence(all_hits, self.max_evidence),
                    f"Pattern found in {len(hits_by_file)} of {len(files)} file(s)"
                )
            return PredicateResult(FindingStatus.FAIL, (), f"Pattern not found in {len(files)} file(s)")

        # coverage
        ratio = len(hits_by_file) / len(files)
        missing = [EvidenceLocation(path=p) for p in files if p not in hits_by_file]
        note = f"Coverage {ratio:.0%} ({len(hits_by_file)}/{len(files)} files)"
        if ratio >= self.pass_ratio:
            return PredicateResult(FindingStatus.PASS, (), note)
        evidence = cap_evidence(missing, self.max_evidence)
        if ratio >= self.partial_ratio:
            return PredicateResult(FindingStatus.PARTIAL, evidence, note)
        return PredicateResult(FindingStatus.FAIL, evidence, note)

    def describe(self) -> str:
        return f"{self.kind}:{self.mode} /{self.pattern}/ in {', '.join(self.include)}"


class StructuralPredicate(Predicate):
    kind = "structural"

    def __init__(self, check: str, func, params: Dict[str, Any]):
        self.check = check
        self.func = func
        self.params = dict(params)

    def evaluate(self, target) -> PredicateResult:
        return self.func(target, **self.params)

    def describe(self) -> str:
        return f"{self.kind}:{self.check}"
