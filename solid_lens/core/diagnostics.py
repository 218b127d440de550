"""
Editor-style diagnostics and the per-document store that holds them.

Each analyzer result becomes one warning anchored to the start line of the
offending entity; the message carries the human summary followed by the
agent-facing prompt for that single entity.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from .models import DIPResult, ISPResult, LCOM4Result, OCPResult
from .prompts import build_dip_prompt, build_isp_prompt, build_ocp_prompt, build_srp_prompt

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFORMATION = "information"

SOURCE_SEMGREP = "semgrep"
SOURCE_SRP = "solid-srp"
SOURCE_OCP = "solid-ocp"
SOURCE_DIP = "solid-dip"
SOURCE_ISP = "solid-isp"

ANALYZER_SOURCES = (SOURCE_SRP, SOURCE_OCP, SOURCE_DIP, SOURCE_ISP)

PROMPT_SEPARATOR = "\n\n--- Agent Prompt ---\n"
LINE_END_COLUMN = 100


@dataclass
class Diagnostic:
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    message: str
    severity: str
    source: str
    code: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _line_diagnostic(line: int, message: str, source: str, code: str) -> Diagnostic:
    return Diagnostic(
        start_line=line,
        start_col=0,
        end_line=line,
        end_col=LINE_END_COLUMN,
        message=message,
        severity=SEVERITY_WARNING,
        source=source,
        code=code,
    )


def srp_diagnostics(results: Iterable[LCOM4Result], file_path: str) -> List[Diagnostic]:
    diagnostics = []
    for result in results:
        message = f"SRP Violation: Class '{result.class_name}' has LCOM4={result.lcom4_value}. {result.suggestion}"
        message += PROMPT_SEPARATOR + build_srp_prompt([result], file_path)
        diagnostics.append(_line_diagnostic(result.start_line, message, SOURCE_SRP, "LCOM4"))
    return diagnostics


def ocp_diagnostics(results: Iterable[OCPResult], file_path: str) -> List[Diagnostic]:
    diagnostics = []
    for result in results:
        message = (
            f"OCP Violation: Method '{result.method_name}' in class '{result.class_name}' "
            f"has OCP Score={result.ocp_score:.1f}. {result.suggestion}"
        )
        message += PROMPT_SEPARATOR + build_ocp_prompt([result], file_path)
        diagnostics.append(_line_diagnostic(result.start_line, message, SOURCE_OCP, "OCP"))
    return diagnostics


def dip_diagnostics(results: Iterable[DIPResult], file_path: str) -> List[Diagnostic]:
    diagnostics = []
    for result in results:
        message = (
            f"DIP Violation: Class '{result.class_name}' has DIP Score={result.dip_score:.1f}, "
            f"DII={result.dii * 100:.0f}%. {result.suggestion}"
        )
        message += PROMPT_SEPARATOR + build_dip_prompt([result], file_path)
        diagnostics.append(_line_diagnostic(result.start_line, message, SOURCE_DIP, "DIP"))
    return diagnostics


def isp_diagnostics(results: Iterable[ISPResult], file_path: str) -> List[Diagnostic]:
    diagnostics = []
    for result in results:
        if result.is_interface:
            message = (
                f"ISP Violation: Interface '{result.class_name}' has {result.abstract_method_count} "
                f"abstract methods (fat interface). {result.suggestion}"
            )
            code = "ISP-FAT"
        else:
            stubs = result.empty_implementations + result.not_implemented_errors
            message = (
                f"ISP Violation: Class '{result.class_name}' has {stubs} stub method(s) "
                f"(SIR={result.sir * 100:.0f}%). {result.suggestion}"
            )
            code = "ISP-STUB"
        message += PROMPT_SEPARATOR + build_isp_prompt([result], file_path)
        diagnostics.append(_line_diagnostic(result.start_line, message, SOURCE_ISP, code))
    return diagnostics


class DiagnosticStore:
    """
    Diagnostics keyed by document, partitioned by source.

    Replacing one source's entries for a document never touches the entries
    other sources published for it. Safe to use from watcher threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: Dict[str, Dict[str, List[Diagnostic]]] = {}

    def replace(self, document: str, source: str, diagnostics: List[Diagnostic]) -> None:
        with self._lock:
            by_source = self._documents.setdefault(document, {})
            if diagnostics:
                by_source[source] = list(diagnostics)
            else:
                by_source.pop(source, None)
            if not by_source:
                del self._documents[document]

    def get(self, document: str, source: Optional[str] = None) -> List[Diagnostic]:
        with self._lock:
            by_source = self._documents.get(document, {})
            if source is not None:
                return list(by_source.get(source, []))
            return [d for entries in by_source.values() for d in entries]

    def clear(self, document: Optional[str] = None) -> None:
        with self._lock:
            if document is None:
                self._documents.clear()
            else:
                self._documents.pop(document, None)

    def clear_sources(self, document: str, sources: Iterable[str]) -> None:
        """Drop the given sources' entries for one document, keeping the rest."""
        with self._lock:
            by_source = self._documents.get(document)
            if by_source is None:
                return
            for source in sources:
                by_source.pop(source, None)
            if not by_source:
                del self._documents[document]

    def all(self) -> Dict[str, List[Diagnostic]]:
        with self._lock:
            return {
                document: [d for entries in by_source.values() for d in entries]
                for document, by_source in self._documents.items()
            }

    def documents(self) -> List[str]:
        with self._lock:
            return list(self._documents)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for by_source in self._documents.values() for entries in by_source.values())
