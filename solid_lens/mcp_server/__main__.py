"""
Stdio entry point for the solid-lens MCP server.

Loads solidlens.config.yaml (or the file given with --config), applies the
command line overrides and serves the SOLID check and semgrep tools to an
agent over stdio. Logs go to stderr so they never mix with the protocol.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from solid_lens.core.config import DEFAULT_CONFIG_PATH, load_config
from solid_lens.mcp_server.server import server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solid-lens-mcp",
        description="Serve SRP, OCP, DIP and ISP checks plus semgrep scans to an MCP client over stdio.",
        epilog="Example: solid-lens-mcp --project-root ./service --no-semgrep",
    )
    parser.add_argument(
        "--config",
        help=f"YAML file with thresholds, languages and watch settings (default: {DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument(
        "--project-root",
        help="Directory whose files are checked and scanned; relative tool paths resolve against it"
    )
    parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Only check files when a tool asks; do not re-check them when they are saved"
    )
    parser.add_argument(
        "--no-semgrep",
        action="store_true",
        help="Run the structural SOLID checks only; scan_file and scan_workspace report semgrep as unavailable"
    )
    return parser


def server_config(argv: Optional[List[str]] = None) -> dict:
    """Resolve the settings the server lifespan builds its WorkspaceAnalyzer from."""
    args = build_parser().parse_args(argv)
    config = load_config(config_path=args.config, cli_args={"project_root": args.project_root})
    if args.no_semgrep:
        config.semgrep_enabled = False

    settings = config.model_dump()
    settings["watch"] = not args.no_watch
    return settings


def main():
    settings = server_config()
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    server.config = settings

    logging.info(f"solid-lens MCP server checking {settings['project_root']} "
                 f"(languages: {', '.join(settings['languages'])}, "
                 f"semgrep: {'on' if settings['semgrep_enabled'] else 'off'}, "
                 f"watch: {'on' if settings['watch'] else 'off'})")
    try:
        asyncio.run(server.run_stdio_async())
    except KeyboardInterrupt:
        logging.info("solid-lens MCP server stopped")


if __name__ == "__main__":
    main()
