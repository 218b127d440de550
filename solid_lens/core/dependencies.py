"""Dependency Inversion analysis: injected vs. self-instantiated dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Set, Tuple

from .config import DEFAULT_DIP_SCORE_THRESHOLD
from .models import ClassRecord, DIPResult, DIPViolation, SourceModel

CONSTRUCTOR_INSTANTIATION_WEIGHT = 2.0
METHOD_INSTANTIATION_WEIGHT = 1.5
LOW_DII = 0.5


@dataclass
class DependencyAnalyzer:
    threshold: float = DEFAULT_DIP_SCORE_THRESHOLD

    def analyze_model(self, model: SourceModel) -> List[DIPResult]:
        """Return results for classes that instantiate at least one concrete type."""
        if model.profile is None:
            return []
        results = []
        for record in model.classes:
            result = self.analyze(record, model)
            if result.dip_score > 0:
                results.append(result)
        logging.debug("DIP: %d classes instantiate dependencies", len(results))
        return results

    def violations(self, results: List[DIPResult]) -> List[DIPResult]:
        return [r for r in results if self.is_violation(r)]

    def is_violation(self, result: DIPResult) -> bool:
        return result.dip_score >= self.threshold

    def analyze(self, record: ClassRecord, model: SourceModel) -> DIPResult:
        profile = model.profile
        violations: List[DIPViolation] = []
        instantiated: Set[str] = set()

        constructor_sites = 0
        if record.constructor is not None:
            constructor_sites = self._scan_range(
                model.lines, (record.constructor.start_line, record.constructor.end_line),
                "constructor_instantiation", profile, violations, instantiated,
            )

        method_sites = 0
        for method in record.methods:
            if method.name == profile.constructor_name:
                continue
            method_sites += self._scan_range(
                model.lines, (method.start_line, method.end_line),
                "method_instantiation", profile, violations, instantiated,
            )

        injected = len(record.constructor.params) if record.constructor else 0
        total = injected + len(instantiated)
        dii = injected / total if total > 0 else 1.0
        score = constructor_sites * CONSTRUCTOR_INSTANTIATION_WEIGHT + method_sites * METHOD_INSTANTIATION_WEIGHT

        return DIPResult(
            class_name=record.name,
            start_line=record.start_line,
            constructor_instantiations=constructor_sites,
            method_instantiations=method_sites,
            injected_dependencies=injected,
            total_dependencies=total,
            dii=dii,
            dip_score=score,
            violations=violations,
            suggestion=self._suggestion(constructor_sites, method_sites, dii),
        )

    @staticmethod
    def _scan_range(lines: List[str], span: Tuple[int, int], kind: str, profile,
                    violations: List[DIPViolation], instantiated: Set[str]) -> int:
        start, end = span
        count = 0
        for line_number in range(start, min(end, len(lines) - 1) + 1):
            line = lines[line_number]
            for type_name in profile.find_instantiations(line):
                count += 1
                instantiated.add(type_name)
                violations.append(DIPViolation(line=line_number, kind=kind, code=line.strip(), class_name=type_name))
        return count

    @staticmethod
    def _suggestion(constructor_sites: int, method_sites: int, dii: float) -> str:
        if constructor_sites == 0 and method_sites == 0:
            return "Class follows Dependency Inversion Principle."

        parts = []
        if constructor_sites > 0:
            parts.append(
                f"Inject {constructor_sites} dependency(ies) via constructor parameters instead of instantiating directly"
            )
        if method_sites > 0:
            parts.append(f"Consider injecting {method_sites} dependency(ies) or using factory pattern")
        if dii < LOW_DII:
            parts.append("Low DII indicates most dependencies are created internally")
        return ". ".join(parts) + "."
