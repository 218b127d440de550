"""
Per-file SOLID check: extraction, the four analyzers, diagnostics and the
combined Markdown report for one document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .cohesion import CohesionAnalyzer
from .config import SolidLensConfig
from .dependencies import DependencyAnalyzer
from .diagnostics import (
    SOURCE_DIP,
    SOURCE_ISP,
    SOURCE_OCP,
    SOURCE_SRP,
    Diagnostic,
    dip_diagnostics,
    isp_diagnostics,
    ocp_diagnostics,
    srp_diagnostics,
)
from .extractor import StructuralExtractor
from .interfaces import InterfaceAnalyzer
from .models import DIPResult, ISPResult, LCOM4Result, OCPResult, SourceModel
from .profiles import get_profile, language_for_path
from .prompts import build_combined_report
from .type_checks import TypeCheckAnalyzer

PRINCIPLES = ("srp", "ocp", "dip", "isp")


@dataclass
class CheckReport:
    path: str
    language_id: Optional[str]
    skipped: bool = False
    srp_results: List[LCOM4Result] = field(default_factory=list)
    srp_violations: List[LCOM4Result] = field(default_factory=list)
    ocp_results: List[OCPResult] = field(default_factory=list)
    ocp_violations: List[OCPResult] = field(default_factory=list)
    dip_results: List[DIPResult] = field(default_factory=list)
    dip_violations: List[DIPResult] = field(default_factory=list)
    isp_results: List[ISPResult] = field(default_factory=list)
    isp_violations: List[ISPResult] = field(default_factory=list)
    diagnostics: Dict[str, List[Diagnostic]] = field(default_factory=dict)

    @property
    def has_violations(self) -> bool:
        return bool(self.srp_violations or self.ocp_violations or self.dip_violations or self.isp_violations)

    @property
    def violation_count(self) -> int:
        return len(self.srp_violations) + len(self.ocp_violations) + len(self.dip_violations) + len(self.isp_violations)

    def report(self) -> str:
        return build_combined_report(
            self.path,
            srp=self.srp_violations,
            ocp=self.ocp_violations,
            dip=self.dip_violations,
            isp=self.isp_violations,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language_id": self.language_id,
            "skipped": self.skipped,
            "srp": [r.to_dict() for r in self.srp_violations],
            "ocp": [r.to_dict() for r in self.ocp_violations],
            "dip": [r.to_dict() for r in self.dip_violations],
            "isp": [r.to_dict() for r in self.isp_violations],
            "diagnostics": [d.to_dict() for entries in self.diagnostics.values() for d in entries],
        }


class SolidChecker:
    """Runs the enabled principle analyzers against one document."""

    def __init__(self, config: Optional[SolidLensConfig] = None):
        self.config = config or SolidLensConfig()
        self.extractor = StructuralExtractor()
        self.cohesion = CohesionAnalyzer(threshold=self.config.srp_lcom4_threshold)
        self.type_checks = TypeCheckAnalyzer(threshold=self.config.ocp_score_threshold)
        self.dependencies = DependencyAnalyzer(threshold=self.config.dip_score_threshold)
        self.interfaces = InterfaceAnalyzer(
            fat_interface_threshold=self.config.isp_fat_interface_threshold,
            sir_threshold=self.config.isp_sir_threshold,
        )
        self.enabled = {
            "srp": self.config.enable_srp,
            "ocp": self.config.enable_ocp,
            "dip": self.config.enable_dip,
            "isp": self.config.enable_isp,
        }

    def supports(self, language_id: Optional[str]) -> bool:
        if get_profile(language_id) is None:
            return False
        return language_id.lower() in {language.lower() for language in self.config.languages}

    def check(self, path: Union[str, Path], text: str, language_id: Optional[str] = None,
              principles: Optional[List[str]] = None) -> CheckReport:
        """
        Analyze one document.

        Args:
            path: Document path, used for labels and diagnostics
            text: Full document text
            language_id: Language identifier; detected from the extension when omitted
            principles: Subset of 'srp', 'ocp', 'dip', 'isp' to run (default: all enabled)

        Returns:
            CheckReport; `skipped` is set when the language is unsupported or disabled
        """
        path = str(path)
        language = language_id or language_for_path(path)
        if not self.supports(language):
            logging.info(f"Skipping {path}: language '{language}' is not enabled")
            return CheckReport(path=path, language_id=language, skipped=True)

        selected = [p for p in (principles or PRINCIPLES) if self.enabled.get(p)]
        model = self.extractor.extract(text, language)
        report = CheckReport(path=path, language_id=model.language_id)
        self._run(model, selected, report)
        logging.info(f"Checked {path}: {report.violation_count} violation(s)")
        return report

    def check_file(self, file_path: Union[str, Path], language_id: Optional[str] = None,
                   principles: Optional[List[str]] = None) -> CheckReport:
        text = Path(file_path).read_text(encoding="utf-8")
        return self.check(file_path, text, language_id, principles)

    def _run(self, model: SourceModel, selected: List[str], report: CheckReport) -> None:
        path = report.path
        if "srp" in selected:
            report.srp_results = self.cohesion.analyze_model(model)
            report.srp_violations = self.cohesion.violations(report.srp_results)
            report.diagnostics[SOURCE_SRP] = srp_diagnostics(report.srp_violations, path)
        if "ocp" in selected:
            report.ocp_results = self.type_checks.analyze_model(model)
            report.ocp_violations = self.type_checks.violations(report.ocp_results)
            report.diagnostics[SOURCE_OCP] = ocp_diagnostics(report.ocp_violations, path)
        if "dip" in selected:
            report.dip_results = self.dependencies.analyze_model(model)
            report.dip_violations = self.dependencies.violations(report.dip_results)
            report.diagnostics[SOURCE_DIP] = dip_diagnostics(report.dip_violations, path)
        if "isp" in selected:
            report.isp_results = self.interfaces.analyze_model(model)
            # Every ISP result is already a reported finding
            report.isp_violations = list(report.isp_results)
            report.diagnostics[SOURCE_ISP] = isp_diagnostics(report.isp_violations, path)
