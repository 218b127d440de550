"""Interface Segregation analysis: fat interfaces and stub implementations."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_ISP_FAT_INTERFACE_THRESHOLD, DEFAULT_ISP_SIR_THRESHOLD
from .models import ImplementationRecord, InterfaceRecord, ISPResult, ISPViolation, SourceModel

STUB_WEIGHT = 1.5
HIGH_STUB_RATIO = 0.5
# Two or more stubs are always reported, whatever the ratio
STUB_COUNT_ESCAPE = 2


@dataclass
class InterfaceAnalyzer:
    fat_interface_threshold: int = DEFAULT_ISP_FAT_INTERFACE_THRESHOLD
    sir_threshold: float = DEFAULT_ISP_SIR_THRESHOLD

    def analyze_model(self, model: SourceModel) -> List[ISPResult]:
        """Fat interfaces first, then stub-heavy implementations, each in source order."""
        results: List[ISPResult] = []
        for interface in model.interfaces:
            result = self.analyze_interface(interface)
            if result is not None:
                results.append(result)
        for implementation in model.implementations:
            result = self.analyze_implementation(implementation)
            if result is not None:
                results.append(result)
        logging.debug("ISP: %d results", len(results))
        return results

    def analyze_interface(self, interface: InterfaceRecord) -> Optional[ISPResult]:
        count = interface.abstract_method_count
        if count <= self.fat_interface_threshold:
            return None
        return ISPResult(
            class_name=interface.name,
            start_line=interface.start_line,
            is_interface=True,
            abstract_method_count=count,
            ifs=count,
            isp_score=float(count),
            violations=[ISPViolation(
                line=interface.start_line,
                kind="fat_interface",
                method_name="",
                code=f"Interface has {count} abstract methods",
            )],
            suggestion=f"Consider splitting into {math.ceil(count / 3)} smaller interfaces with ~3 methods each.",
        )

    def analyze_implementation(self, implementation: ImplementationRecord) -> Optional[ISPResult]:
        stubs = implementation.stub_count
        if stubs == 0:
            return None
        total = implementation.total_methods
        sir = stubs / total if total > 0 else 0.0
        if sir < self.sir_threshold and stubs < STUB_COUNT_ESCAPE:
            return None

        violations = [
            ISPViolation(line=m.line, kind="empty_implementation", method_name=m.name, code=m.code)
            for m in implementation.empty_methods
        ]
        violations.extend(
            ISPViolation(line=m.line, kind="not_implemented_error", method_name=m.name, code=m.code)
            for m in implementation.not_implemented_methods
        )
        empty = len(implementation.empty_methods)
        not_implemented = len(implementation.not_implemented_methods)
        return ISPResult(
            class_name=implementation.name,
            start_line=implementation.start_line,
            is_interface=False,
            empty_implementations=empty,
            not_implemented_errors=not_implemented,
            sir=sir,
            isp_score=stubs * STUB_WEIGHT,
            violations=violations,
            suggestion=self._suggestion(empty, not_implemented, sir),
        )

    @staticmethod
    def _suggestion(empty: int, not_implemented: int, sir: float) -> str:
        parts = []
        if empty > 0:
            parts.append(f"{empty} empty method(s) indicate unused interface requirements")
        if not_implemented > 0:
            parts.append(f"{not_implemented} NotImplementedError method(s) indicate forced interface compliance")
        if sir > HIGH_STUB_RATIO:
            parts.append("High stub ratio suggests the interface is too broad for this class")
        parts.append("Consider using smaller, more focused interfaces")
        return ". ".join(parts) + "."
