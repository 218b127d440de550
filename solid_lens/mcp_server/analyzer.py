from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import logging
import threading
from enum import Enum

import watchdog.observers
from watchdog.events import FileSystemEventHandler

from solid_lens.core.checker import CheckReport, SolidChecker
from solid_lens.core.config import SolidLensConfig
from solid_lens.core.diagnostics import ANALYZER_SOURCES, SOURCE_SEMGREP, Diagnostic, DiagnosticStore
from solid_lens.core.profiles import extensions_for_languages, language_for_path
from solid_lens.core.scheduler import ScanOutcome, ScanScheduler, SourceDocument
from solid_lens.core.semgrep_runner import ScanError, SemgrepRunner
from solid_lens.core.utils import is_ignored_path


class ScanStatus(Enum):
    """Enum representing the outcome of the most recent scan."""
    IDLE = "idle"
    SCANNING = "scanning"
    OK = "ok"
    ISSUES = "issues"
    WARNING = "warning"


class WatcherHandler(FileSystemEventHandler):
    """Debounces file events per path and hands settled files to the analyzer."""

    def __init__(self, analyzer):
        self.analyzer = analyzer
        settings = analyzer.settings
        self.supported_extensions = set(extensions_for_languages(settings.languages))
        self.delay = settings.scan_on_change_delay / 1000.0
        self.scan_on_modify = settings.scan_on_save or settings.scan_on_change
        # A save rescans even when the text matches the last scan
        self.force_on_modify = settings.scan_on_save
        self.scan_on_create = settings.scan_on_open
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def _is_relevant(self, event) -> bool:
        if event.is_directory:
            return False
        path = Path(event.src_path)
        if path.suffix.lower() not in self.supported_extensions:
            return False
        return not self.analyzer.is_ignored(path)

    def on_modified(self, event):
        if self.scan_on_modify and self._is_relevant(event):
            logging.info(f"File modified: {event.src_path}")
            self.schedule(event.src_path, force=self.force_on_modify)

    def on_created(self, event):
        if self.scan_on_create and self._is_relevant(event):
            logging.info(f"File created: {event.src_path}")
            self.schedule(event.src_path)

    def schedule(self, file_path: str, force: bool = False) -> None:
        """Restart the debounce timer for a path."""
        with self._lock:
            previous = self._timers.pop(file_path, None)
            if previous:
                previous.cancel()
            timer = threading.Timer(self.delay, self._fire, args=(file_path, force))
            timer.daemon = True
            self._timers[file_path] = timer
            timer.start()

    def _fire(self, file_path: str, force: bool = False) -> None:
        with self._lock:
            self._timers.pop(file_path, None)
        self.analyzer.on_file_changed(file_path, force=force)

    def cancel_all(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()


class WorkspaceAnalyzer:
    """Runs SOLID checks and semgrep scans for a workspace and keeps their diagnostics."""

    def __init__(self, config: dict):
        """Initialize the analyzer with configuration.

        Args:
            config: Configuration dictionary (a dumped SolidLensConfig)
        """
        self.config = config
        self.settings = SolidLensConfig(**config)
        self.project_root = self.settings.resolved_project_root()
        logging.info(f"Initializing WorkspaceAnalyzer with root: {self.project_root}, "
                     f"languages: {', '.join(self.settings.languages)}")

        self.checker = SolidChecker(self.settings)
        self.runner: Optional[SemgrepRunner] = None
        if self.settings.semgrep_enabled:
            self.runner = SemgrepRunner(
                semgrep_path=self.settings.resolved_semgrep_path(),
                rules_path=self.settings.resolved_rules_path(),
                cwd=self.project_root,
            )
        else:
            logging.info("Semgrep disabled, only structural checks will run")

        self.scheduler = ScanScheduler(self._scan_document, use_cache=self.settings.use_cache)
        self.diagnostics = DiagnosticStore()
        self.status = ScanStatus.IDLE
        self.last_error: Optional[str] = None
        self.observer = None
        self.handler: Optional[WatcherHandler] = None
        # Called with each CheckReport produced by the watcher
        self.on_report: Optional[Callable[[CheckReport], None]] = None

    def document_key(self, file_path) -> str:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.project_root / path
        return str(path.resolve())

    def is_ignored(self, file_path) -> bool:
        return is_ignored_path(Path(file_path).resolve(), self.project_root, self.settings.ignored_patterns)

    def analyze_document(self, file_path, text: Optional[str] = None, force: bool = False,
                         scan: bool = True) -> CheckReport:
        """
        Run the structural SOLID checks on a document and schedule a semgrep scan.

        Args:
            file_path: Document path, absolute or relative to the project root
            text: Current document text; read from disk when None
            force: Scan even when the text is unchanged since the last scan
            scan: Also submit the semgrep scan

        Returns:
            The CheckReport of the structural checks
        """
        key = self.document_key(file_path)
        if text is None:
            text = Path(key).read_text(encoding="utf-8")

        report = self.checker.check(key, text)
        if report.skipped:
            self.diagnostics.clear_sources(key, ANALYZER_SOURCES)
            return report

        # Principles disabled since the last check leave no stale entries behind
        self.diagnostics.clear_sources(key, [s for s in ANALYZER_SOURCES if s not in report.diagnostics])
        for source, entries in report.diagnostics.items():
            self.diagnostics.replace(key, source, entries)

        if scan and self.runner:
            self.scan_file(key, text, force=force, language_id=report.language_id)
        return report

    def scan_file(self, file_path, text: Optional[str] = None, force: bool = False,
                  language_id: Optional[str] = None) -> ScanOutcome:
        """Submit a semgrep scan of one document to the scheduler."""
        if not self.runner:
            raise ScanError("Semgrep is disabled in the configuration")
        key = self.document_key(file_path)
        if text is None:
            text = Path(key).read_text(encoding="utf-8")
        document = SourceDocument(path=key, text=text, language_id=language_id or language_for_path(key))
        outcome = self.scheduler.submit(document, force=force)
        logging.info(f"Scan of {key}: {outcome.value}")
        return outcome

    def _scan_document(self, document: SourceDocument) -> None:
        self.status = ScanStatus.SCANNING
        logging.info(f"Running semgrep on {document.path} ({document.language_id or 'unknown language'})")
        try:
            result = self.runner.run(document.path)
        except ScanError as e:
            self.status = ScanStatus.WARNING
            self.last_error = str(e)
            raise
        findings = self.runner.findings_for_file(result, document.path)
        self.diagnostics.replace(document.key, SOURCE_SEMGREP, [f.to_diagnostic() for f in findings])
        self.last_error = None
        self._refresh_status()

    def scan_workspace(self) -> Dict[str, Any]:
        """
        Scan the whole project root with semgrep.

        Clears the fingerprint cache and every stored diagnostic first, then
        publishes the findings grouped by file.
        """
        if not self.runner:
            raise ScanError("Semgrep is disabled in the configuration")
        self.scheduler.clear()
        self.diagnostics.clear()
        self.status = ScanStatus.SCANNING
        try:
            result = self.runner.run(self.project_root)
        except ScanError as e:
            self.status = ScanStatus.WARNING
            self.last_error = str(e)
            raise

        grouped = self.runner.group_by_file(result)
        for document, findings in grouped.items():
            self.diagnostics.replace(document, SOURCE_SEMGREP, [f.to_diagnostic() for f in findings])
        self.last_error = None
        self._refresh_status()
        logging.info(f"Workspace scan found {len(result.findings)} findings in {len(grouped)} files")
        return {"files": len(grouped), "findings": len(result.findings), "errors": len(result.errors)}

    def _refresh_status(self) -> None:
        self.status = ScanStatus.ISSUES if len(self.diagnostics) else ScanStatus.OK

    def get_diagnostics(self, file_path=None) -> Dict[str, List[Diagnostic]]:
        if file_path is None:
            return self.diagnostics.all()
        key = self.document_key(file_path)
        return {key: self.diagnostics.get(key)}

    def on_file_changed(self, file_path: str, force: bool = False) -> None:
        """Watcher callback: re-check a settled file."""
        try:
            report = self.analyze_document(file_path, force=force)
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Could not analyze {file_path}: {e}")
            return
        if self.on_report and not report.skipped:
            self.on_report(report)

    def start_watching(self) -> None:
        """Start file watchers for all configured directories."""
        observer = watchdog.observers.Observer()
        self.handler = WatcherHandler(analyzer=self)

        for watch_dir in self.settings.watch_directories:
            directory = Path(watch_dir)
            if not directory.is_absolute():
                directory = self.project_root / directory
            if not directory.is_dir():
                logging.warning(f"Watch directory does not exist: {directory}")
                continue
            observer.schedule(self.handler, str(directory), recursive=True)
            logging.info(f"Started watching directory: {directory}")

        observer.start()
        self.observer = observer

    def clear(self) -> None:
        """Forget fingerprints, pending scans and diagnostics."""
        self.scheduler.clear()
        self.diagnostics.clear()
        self.status = ScanStatus.IDLE
        self.last_error = None

    def shutdown(self) -> None:
        """Shutdown the analyzer and cleanup resources."""
        if self.handler:
            self.handler.cancel_all()

        # Stop file watcher
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None
