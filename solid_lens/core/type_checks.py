"""Open/Closed analysis: type-discrimination density per method."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from .config import DEFAULT_OCP_SCORE_THRESHOLD
from .models import OCPResult, OCPViolation, SourceModel

TYPE_CHECK_WEIGHTS: Dict[str, float] = {
    "instanceof": 2.0,
    "type_equality": 2.0,
    "typeof": 1.0,
    "type_field": 1.5,
}

# Kinds counted towards type-check density
RUNTIME_CHECK_KINDS = ("instanceof", "type_equality", "typeof")


def type_check_density(violations: List[OCPViolation], total_lines: int) -> float:
    type_checks = sum(1 for v in violations if v.kind in RUNTIME_CHECK_KINDS)
    return type_checks / total_lines if total_lines > 0 else 0.0


def type_field_switch_count(violations: List[OCPViolation]) -> int:
    return sum(1 for v in violations if v.kind == "type_field")


def ocp_score(violations: List[OCPViolation]) -> float:
    return sum(TYPE_CHECK_WEIGHTS.get(v.kind, 0.0) for v in violations)


@dataclass
class TypeCheckAnalyzer:
    threshold: float = DEFAULT_OCP_SCORE_THRESHOLD

    def analyze_model(self, model: SourceModel) -> List[OCPResult]:
        """
        Scan every method of every class for type-checking idioms.

        Only methods with at least one detected occurrence produce a result;
        use `violations()` to keep those above the threshold.
        """
        profile = model.profile
        if profile is None:
            return []

        results: List[OCPResult] = []
        for record in model.classes:
            for method in record.methods:
                method_lines = model.lines[method.start_line:method.end_line + 1]
                found = profile.find_type_checks(method_lines, method.start_line)
                if not found:
                    continue
                score = ocp_score(found)
                results.append(OCPResult(
                    class_name=record.name,
                    method_name=method.name,
                    start_line=method.start_line,
                    tcd=type_check_density(found, len(method_lines)),
                    tfsc=type_field_switch_count(found),
                    ocp_score=score,
                    violations=found,
                    suggestion=self._suggestion(found, score),
                ))
        logging.debug("OCP: %d methods with type checks", len(results))
        return results

    def violations(self, results: List[OCPResult]) -> List[OCPResult]:
        return [r for r in results if self.is_violation(r)]

    def is_violation(self, result: OCPResult) -> bool:
        return result.ocp_score > self.threshold

    def _suggestion(self, found: List[OCPViolation], score: float) -> str:
        if score <= self.threshold:
            return "Minor type-checking detected. Consider if polymorphism would be beneficial."

        instance_checks = sum(1 for v in found if v.kind in ("instanceof", "type_equality"))
        field_checks = type_field_switch_count(found)
        if instance_checks > field_checks:
            return "Consider using polymorphism (Strategy/Visitor pattern) instead of instanceof checks."
        return "Consider using polymorphism or discriminated unions instead of type-field switches."
