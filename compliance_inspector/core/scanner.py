import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from compliance_inspector.config.defaults import DEFAULT_IGNORED_DIRS, DEFAULT_MAX_FILE_BYTES, DEFAULT_MAX_WORKERS
from compliance_inspector.core.target import RepositoryTarget
from compliance_inspector.reports.models import Finding, FindingStatus
from compliance_inspector.rules.catalog import RuleCatalog
from compliance_inspector.rules.predicates import PredicateResult
from compliance_inspector.rules.rule_model import Rule
from compliance_inspector.utils.logger import get_logger


class RuleWorker(threading.Thread):
    """
    Evaluates one rule on a daemon thread. Python threads cannot be killed,
    so a worker still running past its deadline is abandoned; being a daemon
    it does not hold up interpreter exit.
    """

    def __init__(self, scanner: "Scanner", rule: Rule, target: RepositoryTarget):
        super().__init__(name=f"rule-{rule.id}", daemon=True)
        self.scanner = scanner
        self.rule = rule
        self.target = target
        self.result: Optional[PredicateResult] = None
        self.error: Optional[Exception] = None

    def run(self):
        try:
            self.result = self.scanner._evaluate_predicate(self.rule, self.target)
        except Exception as ex:
            self.error = ex


class Scanner:
    """
    Applies every rule of a catalog to one target and returns one Finding per
    rule, in catalog order. A rule that raises or times out is reported as
    `unknown`; only an unreadable target aborts the scan.
    """

    def __init__(
        self,
        catalog: RuleCatalog,
        parallel: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
        rule_timeout: Optional[float] = None,
        ignored_dirs: Iterable[str] = DEFAULT_IGNORED_DIRS,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    ):
        self.catalog = catalog
        self.parallel = parallel
        self.max_workers = max(1, max_workers)
        self.rule_timeout = rule_timeout
        self.ignored_dirs = frozenset(ignored_dirs)
        self.max_file_bytes = max_file_bytes
        self.logger = get_logger()

    def open_target(self, target_path: Union[str, Path]) -> RepositoryTarget:
        return RepositoryTarget.open(target_path, ignored_dirs=self.ignored_dirs, max_file_bytes=self.max_file_bytes)

    def scan(self, target_path: Union[str, Path]) -> List[Finding]:
        target = self.open_target(target_path)
        return self.scan_target(target)

    def scan_target(self, target: RepositoryTarget) -> List[Finding]:
        rules = self.catalog.list_rules()
        mode = "parallel" if self.parallel else "serial"
        self.logger.info(f"[Scanner] Evaluating {len(rules)} rules against {target.name} in {mode} mode...")

        start_time = time.perf_counter()
        if self.rule_timeout is not None:
            findings = self._run_timed(rules, target)
        elif self.parallel:
            findings = self._run_pooled(rules, target)
        else:
            findings = self._run_serial(rules, target)
        elapsed_time = time.perf_counter() - start_time

        self.logger.info(f"[✓] Scan complete: {len(findings)} findings in {elapsed_time:.2f} seconds.")
        return findings

    def _run_serial(self, rules: Sequence[Rule], target: RepositoryTarget) -> List[Finding]:
        findings = []
        for rule in rules:
            try:
                findings.append(self._to_finding(rule, self._evaluate_predicate(rule, target)))
            except Exception as ex:
                findings.append(self._failed(rule, ex))
        return findings

    def _run_pooled(self, rules: Sequence[Rule], target: RepositoryTarget) -> List[Finding]:
        findings = []
        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(rules)))) as pool:
            futures = [pool.submit(self._evaluate_predicate, rule, target) for rule in rules]
            for rule, future in zip(rules, futures):
                try:
                    findings.append(self._to_finding(rule, future.result()))
                except Exception as ex:
                    findings.append(self._failed(rule, ex))
        return findings

    def _run_timed(self, rules: Sequence[Rule], target: RepositoryTarget) -> List[Finding]:
        # Serial mode runs one worker at a time, parallel mode up to max_workers
        batch_size = self.max_workers if self.parallel else 1
        findings = []
        for offset in range(0, len(rules), batch_size):
            batch = [RuleWorker(self, rule, target) for rule in rules[offset:offset + batch_size]]
            deadline = time.monotonic() + self.rule_timeout
            for worker in batch:
                worker.start()
            for worker in batch:
                worker.join(max(0.0, deadline - time.monotonic()))
                findings.append(self._collect(worker))
        return findings

    def _collect(self, worker: RuleWorker) -> Finding:
        rule = worker.rule
        if worker.is_alive():
            self.logger.warning(f"[Scanner] ⚠ Rule {rule.id} timed out after {self.rule_timeout}s")
            return self._unknown(rule, f"Evaluation timed out after {self.rule_timeout}s")
        if worker.error is not None:
            return self._failed(rule, worker.error)
        return self._to_finding(rule, worker.result)

    def _evaluate_predicate(self, rule: Rule, target: RepositoryTarget) -> PredicateResult:
        result = rule.predicate.evaluate(target)
        if not isinstance(result, PredicateResult):
            raise TypeError(f"predicate returned {type(result).__name__}, expected PredicateResult")
        return result

    def _to_finding(self, rule: Rule, result: PredicateResult) -> Finding:
        finding = Finding(
            rule_id=rule.id,
            title=rule.title,
            severity=rule.severity,
            category=rule.category,
            status=result.status,
            evidence=tuple(result.evidence),
            note=result.note,
            weight=rule.weight,
            effort=rule.effort,
            remediation=rule.remediation
        )
        marker = "✅" if finding.passed else "❌"
        self.logger.debug(f"[Scanner] {marker} Rule {rule.id} → {finding.status.value}: {finding.note}")
        return finding

    def _failed(self, rule: Rule, ex: Exception) -> Finding:
        self.logger.warning(f"[Scanner] ⚠ Rule {rule.id} raised exception: {ex}")
        return self._unknown(rule, f"Evaluation error: {type(ex).__name__}: {ex}")

    def _unknown(self, rule: Rule, note: str) -> Finding:
        return Finding(
            rule_id=rule.id,
            title=rule.title,
            severity=rule.severity,
            category=rule.category,
            status=FindingStatus.UNKNOWN,
            evidence=(),
            note=note,
            weight=rule.weight,
            effort=rule.effort,
            remediation=rule.remediation
        )
