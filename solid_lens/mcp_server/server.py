from mcp.server.fastmcp import FastMCP
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from pydantic import BaseModel, Field
from typing import List, Optional, Dict

from solid_lens.core.checker import PRINCIPLES, CheckReport
from solid_lens.core.scheduler import ScanOutcome
from solid_lens.core.semgrep_runner import ScanError
from solid_lens.mcp_server.analyzer import WorkspaceAnalyzer


class MCPError(Exception):
    """Custom MCP error with code and hint."""

    def __init__(self, code: int, message: str, hint: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = {"hint": hint} if hint else {}


class PingResponse(BaseModel):
    status: str
    echoed: str


class PrincipleResponse(BaseModel):
    file_path: str
    language_id: Optional[str]
    principle: str
    results: List[dict]
    violations: List[dict]
    report: str


class CheckFileResponse(BaseModel):
    file_path: str
    language_id: Optional[str]
    violation_count: int
    violations: Dict[str, List[dict]]
    report: str


class ScanFileResponse(BaseModel):
    file_path: str
    outcome: str
    status: str
    diagnostics: List[dict]


class ScanWorkspaceResponse(BaseModel):
    files: int
    findings: int
    errors: int
    status: str


class DiagnosticsResponse(BaseModel):
    status: str
    diagnostics: Dict[str, List[dict]]


class ClearResponse(BaseModel):
    cleared: bool
    status: str


# Global logger for MCP
logger = logging.getLogger("mcp")
logger.addHandler(logging.StreamHandler(sys.stderr))
logger.setLevel(logging.INFO)


@dataclass
class AppContext:
    analyzer: WorkspaceAnalyzer = None


async def on_shutdown():
    logger.info("Server shutdown")
    # Shutdown analyzer (which handles the file watcher and pending timers)
    if getattr(server, 'analyzer', None):
        server.analyzer.shutdown()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    # Startup
    config = getattr(server, 'config', None)
    if config:
        server.analyzer = WorkspaceAnalyzer(config)
        if config.get('watch', True):
            server.analyzer.start_watching()
        logger.info(f"Workspace analyzer ready for {server.analyzer.project_root}")
    else:
        server.analyzer = None
        logger.warning("No config provided to server, analyzer unavailable")

    try:
        yield AppContext(analyzer=server.analyzer)
    finally:
        # Shutdown
        await on_shutdown()

server = FastMCP("SolidLensMCP", lifespan=lifespan)


def _require_analyzer() -> WorkspaceAnalyzer:
    analyzer = getattr(server, 'analyzer', None)
    if not analyzer:
        raise MCPError(5001, "Analyzer unavailable", "Start the server with a configuration file")
    return analyzer


def _check(file_path: str, content: str, language_id: str, principles: List[str]) -> CheckReport:
    analyzer = _require_analyzer()
    key = analyzer.document_key(file_path)
    if not content:
        if not Path(key).is_file():
            raise MCPError(4001, f"File not found: {file_path}", "Pass an existing file path or the file content")
        try:
            content = Path(key).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MCPError(4001, f"Could not read {file_path}", str(e)) from e

    report = analyzer.checker.check(key, content, language_id or None, principles=principles)
    if report.skipped:
        raise MCPError(4001, f"Unsupported language for {file_path}",
                       f"Enabled languages: {', '.join(analyzer.settings.languages)}")
    return report


def _principle_response(report: CheckReport, principle: str) -> PrincipleResponse:
    results = getattr(report, f"{principle}_results")
    violations = getattr(report, f"{principle}_violations")
    return PrincipleResponse(
        file_path=report.path,
        language_id=report.language_id,
        principle=principle,
        results=[r.to_dict() for r in results],
        violations=[r.to_dict() for r in violations],
        report=report.report(),
    )


# Tool functions with decorators
@server.tool(name="ping")
async def ping_tool(message: str = Field(description="Message to echo")) -> PingResponse:
    """
    Simple ping tool to echo a message.
    """
    return PingResponse(status="ok", echoed=message)


@server.tool(name="check_srp")
async def check_srp(file_path: str = Field(description="Path of the file to check"),
                    content: str = Field(default="", description="Current file content; read from disk when empty"),
                    language_id: str = Field(default="", description="Language identifier; detected from the extension when empty")
                    ) -> PrincipleResponse:
    """
    Check classes for Single Responsibility violations using LCOM4 cohesion.
    """
    report = _check(file_path, content, language_id, ["srp"])
    return _principle_response(report, "srp")


@server.tool(name="check_ocp")
async def check_ocp(file_path: str = Field(description="Path of the file to check"),
                    content: str = Field(default="", description="Current file content; read from disk when empty"),
                    language_id: str = Field(default="", description="Language identifier; detected from the extension when empty")
                    ) -> PrincipleResponse:
    """
    Check methods for Open/Closed violations (type-checking conditionals).
    """
    report = _check(file_path, content, language_id, ["ocp"])
    return _principle_response(report, "ocp")


@server.tool(name="check_dip")
async def check_dip(file_path: str = Field(description="Path of the file to check"),
                    content: str = Field(default="", description="Current file content; read from disk when empty"),
                    language_id: str = Field(default="", description="Language identifier; detected from the extension when empty")
                    ) -> PrincipleResponse:
    """
    Check classes for Dependency Inversion violations (direct instantiation of concrete types).
    """
    report = _check(file_path, content, language_id, ["dip"])
    return _principle_response(report, "dip")


@server.tool(name="check_isp")
async def check_isp(file_path: str = Field(description="Path of the file to check"),
                    content: str = Field(default="", description="Current file content; read from disk when empty"),
                    language_id: str = Field(default="", description="Language identifier; detected from the extension when empty")
                    ) -> PrincipleResponse:
    """
    Check for Interface Segregation violations (fat interfaces and stub implementations).
    """
    report = _check(file_path, content, language_id, ["isp"])
    return _principle_response(report, "isp")


@server.tool(name="check_file")
async def check_file(file_path: str = Field(description="Path of the file to check"),
                     content: str = Field(default="", description="Current file content; read from disk when empty"),
                     principles: list[str] = Field(default=[], description="Subset of 'srp', 'ocp', 'dip', 'isp' (default: all)")
                     ) -> CheckFileResponse:
    """
    Run every enabled SOLID check on a file and return a combined Markdown report.
    """
    unknown = [p for p in principles if p not in PRINCIPLES]
    if unknown:
        raise MCPError(4001, f"Unknown principle(s): {', '.join(unknown)}", f"Valid principles: {', '.join(PRINCIPLES)}")

    report = _check(file_path, content, "", principles or list(PRINCIPLES))
    analyzer = _require_analyzer()
    for source, entries in report.diagnostics.items():
        analyzer.diagnostics.replace(report.path, source, entries)

    data = report.to_dict()
    return CheckFileResponse(
        file_path=report.path,
        language_id=report.language_id,
        violation_count=report.violation_count,
        violations={p: data[p] for p in PRINCIPLES},
        report=report.report() or "No SOLID violations found.",
    )


@server.tool(name="scan_file")
async def scan_file(file_path: str = Field(description="Path of the file to scan"),
                    force: bool = Field(default=False, description="Scan even if the file is unchanged since the last scan")
                    ) -> ScanFileResponse:
    """
    Run the SOLID checks and a semgrep scan on one file, updating stored diagnostics.
    """
    analyzer = _require_analyzer()
    key = analyzer.document_key(file_path)
    if not Path(key).is_file():
        raise MCPError(4001, f"File not found: {file_path}", "Pass a path relative to the project root or an absolute path")
    if not analyzer.runner:
        raise MCPError(5001, "Semgrep unavailable", "Set semgrep_enabled: true in the configuration")

    try:
        content = Path(key).read_text(encoding="utf-8")
        await asyncio.to_thread(analyzer.analyze_document, key, content, False, False)
        outcome = await asyncio.to_thread(analyzer.scan_file, key, content, force)
    except (OSError, UnicodeDecodeError) as e:
        raise MCPError(4001, f"Could not read {file_path}", str(e)) from e

    if outcome == ScanOutcome.FAILED:
        raise MCPError(5001, "Semgrep scan failed", analyzer.last_error)

    return ScanFileResponse(
        file_path=key,
        outcome=outcome.value,
        status=analyzer.status.value,
        diagnostics=[d.to_dict() for d in analyzer.diagnostics.get(key)],
    )


@server.tool(name="scan_workspace")
async def scan_workspace() -> ScanWorkspaceResponse:
    """
    Run semgrep over the whole project root, replacing all stored diagnostics.
    """
    analyzer = _require_analyzer()
    try:
        summary = await asyncio.to_thread(analyzer.scan_workspace)
    except ScanError as e:
        raise MCPError(5001, "Semgrep scan failed", str(e)) from e
    return ScanWorkspaceResponse(status=analyzer.status.value, **summary)


@server.tool(name="get_diagnostics")
async def get_diagnostics(file_path: str = Field(default="", description="Limit to one file (default: all files)")
                          ) -> DiagnosticsResponse:
    """
    Return the stored diagnostics, grouped by file.
    """
    analyzer = _require_analyzer()
    grouped = analyzer.get_diagnostics(file_path or None)
    return DiagnosticsResponse(
        status=analyzer.status.value,
        diagnostics={path: [d.to_dict() for d in entries] for path, entries in grouped.items()},
    )


@server.tool(name="clear_diagnostics")
async def clear_diagnostics() -> ClearResponse:
    """
    Forget all diagnostics, scan fingerprints and pending scans.
    """
    analyzer = _require_analyzer()
    analyzer.clear()
    return ClearResponse(cleared=True, status=analyzer.status.value)
