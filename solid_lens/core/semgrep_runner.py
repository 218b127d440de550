"""
Thin wrapper around the semgrep command line.

Runs one scan per call and converts the JSON report into diagnostics. The
process is launched without a timeout; callers serialize scans through the
ScanScheduler.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .diagnostics import (
    SEVERITY_ERROR,
    SEVERITY_INFORMATION,
    SEVERITY_WARNING,
    SOURCE_SEMGREP,
    Diagnostic,
)

SEVERITY_MAP = {
    "ERROR": SEVERITY_ERROR,
    "WARNING": SEVERITY_WARNING,
    "INFO": SEVERITY_INFORMATION,
}


class ScanError(Exception):
    """Raised when the external scanner cannot be launched or its output cannot be read."""


def map_severity(severity: Optional[str]) -> str:
    return SEVERITY_MAP.get((severity or "").upper(), SEVERITY_WARNING)


def _zero_based(value: Any) -> int:
    try:
        return max(0, int(value) - 1)
    except (TypeError, ValueError):
        return 0


@dataclass
class SemgrepFinding:
    check_id: str
    path: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    message: str
    severity: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    lines: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SemgrepFinding":
        start = data.get("start") or {}
        end = data.get("end") or {}
        extra = data.get("extra") or {}
        return cls(
            check_id=data.get("check_id", ""),
            path=data.get("path", ""),
            start_line=_zero_based(start.get("line")),
            start_col=_zero_based(start.get("col")),
            end_line=_zero_based(end.get("line")),
            end_col=_zero_based(end.get("col")),
            message=extra.get("message", ""),
            severity=map_severity(extra.get("severity")),
            metadata=extra.get("metadata") or {},
            lines=extra.get("lines", ""),
        )

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            start_line=self.start_line,
            start_col=self.start_col,
            end_line=self.end_line,
            end_col=self.end_col,
            message=self.message,
            severity=self.severity,
            source=SOURCE_SEMGREP,
            code=self.check_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check_id": self.check_id,
            "path": self.path,
            "start_line": self.start_line,
            "start_col": self.start_col,
            "end_line": self.end_line,
            "end_col": self.end_col,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class SemgrepResult:
    findings: List[SemgrepFinding] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)


class SemgrepRunner:
    """Launches semgrep against a file or directory and parses its JSON report."""

    def __init__(self, semgrep_path: str, rules_path: Union[str, Path], cwd: Union[str, Path]):
        self.semgrep_path = semgrep_path
        self.rules_path = str(rules_path)
        self.cwd = Path(cwd).resolve()

    def build_command(self, target: Union[str, Path]) -> List[str]:
        return [
            self.semgrep_path,
            "--config", self.rules_path,
            "--json",
            "--metrics=off",
            "--disable-version-check",
            "--oss-only",
            "--no-git-ignore",
            "-j", "1",
            str(target),
        ]

    def run(self, target: Union[str, Path]) -> SemgrepResult:
        """
        Scan a file or directory.

        Raises:
            ScanError: The executable could not be launched or its output is unreadable
        """
        command = self.build_command(target)
        logging.info(f"Running semgrep on {target}")
        try:
            completed = subprocess.run(command, cwd=str(self.cwd), capture_output=True, text=True)
        except OSError as e:
            raise ScanError(f"Failed to run semgrep: {e}") from e
        return self.parse_output(completed.stdout, completed.returncode, completed.stderr)

    def parse_output(self, stdout: str, returncode: int = 0, stderr: str = "") -> SemgrepResult:
        if stderr and "UserWarning" not in stderr:
            logging.warning(f"semgrep stderr: {stderr.strip()}")

        try:
            payload = json.loads(stdout)
        except (json.JSONDecodeError, TypeError) as e:
            if returncode == 0 and not (stdout or "").strip():
                return SemgrepResult()
            raise ScanError(f"Failed to parse semgrep output (exit code {returncode}): {e}") from e

        if not isinstance(payload, dict):
            raise ScanError(f"Unexpected semgrep output (exit code {returncode})")

        result = SemgrepResult(
            findings=[SemgrepFinding.from_dict(item) for item in payload.get("results", [])],
            errors=list(payload.get("errors", [])),
        )
        for error in result.errors:
            logging.warning(f"semgrep reported an error: {error.get('message', error)}")
        logging.info(f"semgrep returned {len(result.findings)} findings")
        return result

    def resolve_finding_path(self, finding: SemgrepFinding) -> str:
        path = Path(finding.path)
        if not path.is_absolute():
            path = self.cwd / path
        return os.path.normcase(str(path.resolve()))

    def findings_for_file(self, result: SemgrepResult, file_path: Union[str, Path]) -> List[SemgrepFinding]:
        target = os.path.normcase(str(Path(file_path).resolve()))
        return [f for f in result.findings if self.resolve_finding_path(f) == target]

    def group_by_file(self, result: SemgrepResult) -> Dict[str, List[SemgrepFinding]]:
        grouped: Dict[str, List[SemgrepFinding]] = {}
        for finding in result.findings:
            grouped.setdefault(self.resolve_finding_path(finding), []).append(finding)
        return grouped
