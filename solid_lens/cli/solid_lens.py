"""
SolidLens CLI: SOLID principle checks, semgrep scans and a watch mode.

Exit codes: 0 when clean, 1 when violations (check) or findings (scan) are
present, 2 on usage or scan errors.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from solid_lens.core.checker import PRINCIPLES, CheckReport, SolidChecker
from solid_lens.core.config import SolidLensConfig, load_config
from solid_lens.core.profiles import extensions_for_languages
from solid_lens.core.semgrep_runner import ScanError, SemgrepRunner
from solid_lens.core.utils import iter_source_files

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to configuration YAML file (default: solidlens.config.yaml)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")


def _resolve_config(args: argparse.Namespace, project_root: Optional[str] = None) -> SolidLensConfig:
    cli_overrides = {}
    if project_root:
        cli_overrides['project_root'] = str(Path(project_root).resolve())
        cli_overrides['watch_directories'] = [str(Path(project_root).resolve())]
    return load_config(config_path=getattr(args, "config", None), cli_args=cli_overrides)


def _collect_files(paths: List[Path], config: SolidLensConfig) -> List[Path]:
    extensions = extensions_for_languages(config.languages)
    files: List[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(iter_source_files(path, extensions, config.ignored_patterns))
        else:
            files.append(path)
    return files


def _print_report(report: CheckReport) -> None:
    if report.has_violations:
        print(report.report())
    else:
        print(f"✅ {report.path}: no SOLID violations")


def _run_check(args: argparse.Namespace) -> int:
    paths = [Path(p) for p in args.paths]
    missing = [p for p in paths if not p.exists()]
    if missing:
        for path in missing:
            print(f"❌ Error: {path} does not exist.", file=sys.stderr)
        return EXIT_ERROR

    config = _resolve_config(args)
    checker = SolidChecker(config)
    files = _collect_files(paths, config)
    show_progress = any(p.is_dir() for p in paths) and not args.json

    reports: List[CheckReport] = []
    for file_path in tqdm(files, desc="Checking files", disable=not show_progress):
        try:
            report = checker.check_file(file_path, principles=args.principles)
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Could not read {file_path}: {e}")
            continue
        if not report.skipped:
            reports.append(report)

    if args.json:
        print(json.dumps([r.to_dict() for r in reports], indent=2, ensure_ascii=False))
    else:
        for report in reports:
            if report.has_violations or not args.quiet:
                _print_report(report)
        total = sum(r.violation_count for r in reports)
        print(f"\n📊 Checked {len(reports)} file(s), found {total} violation(s)")

    return EXIT_FINDINGS if any(r.has_violations for r in reports) else EXIT_OK


def _run_scan(args: argparse.Namespace) -> int:
    target = Path(args.path).resolve()
    if not target.exists():
        print(f"❌ Error: {target} does not exist.", file=sys.stderr)
        return EXIT_ERROR

    config = _resolve_config(args)
    runner = SemgrepRunner(config.resolved_semgrep_path(), config.resolved_rules_path(), config.resolved_project_root())
    try:
        result = runner.run(target)
    except ScanError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        print(json.dumps([f.to_dict() for f in result.findings], indent=2, ensure_ascii=False))
    else:
        for file_path, findings in runner.group_by_file(result).items():
            print(f"\n{file_path}")
            for finding in findings:
                print(f"  {finding.start_line + 1}:{finding.start_col + 1} {finding.severity} "
                      f"[{finding.check_id}] {finding.message}")
        print(f"\n📊 {len(result.findings)} finding(s)")

    return EXIT_FINDINGS if result.findings else EXIT_OK


def _run_watch(args: argparse.Namespace) -> int:
    directory = Path(args.directory).resolve() if args.directory else None
    if directory is not None and not directory.is_dir():
        print(f"❌ Error: {directory} is not a valid directory to watch.", file=sys.stderr)
        return EXIT_ERROR

    config = _resolve_config(args, str(directory) if directory else None)
    if args.no_semgrep:
        config.semgrep_enabled = False

    from solid_lens.mcp_server.analyzer import WorkspaceAnalyzer

    analyzer = WorkspaceAnalyzer(config.model_dump())
    analyzer.on_report = _print_report
    analyzer.start_watching()
    print(f"👀 Watching {', '.join(config.watch_directories)} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopped watching")
    finally:
        analyzer.shutdown()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SolidLens CLI: SOLID principle checks, semgrep scans and file watching."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check files or directories for SOLID violations")
    check.add_argument("paths", nargs='+', help="Files or directories to check.")
    _add_common_flags(check)
    check.add_argument("--principles", nargs='+', choices=list(PRINCIPLES), default=None,
                       help="Principles to check (default: all enabled in config).")
    check.add_argument("--json", action="store_true", help="Print results as JSON.")
    check.add_argument("--quiet", action="store_true", help="Only print files with violations.")
    check.set_defaults(func=_run_check)

    scan = subparsers.add_parser("scan", help="Run semgrep with the configured rules")
    scan.add_argument("path", nargs='?', default=".", help="File or directory to scan (default: current directory).")
    _add_common_flags(scan)
    scan.add_argument("--json", action="store_true", help="Print findings as JSON.")
    scan.set_defaults(func=_run_scan)

    watch = subparsers.add_parser("watch", help="Watch a directory and report violations as files change")
    watch.add_argument("directory", nargs='?', default=None,
                       help="Directory to watch. If not provided, uses 'watch_directories' from config.")
    _add_common_flags(watch)
    watch.add_argument("--no-semgrep", action="store_true", help="Only run the structural SOLID checks.")
    watch.set_defaults(func=_run_watch)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
