#!/usr/bin/env python3
"""
CLEANSH CLI
-----------
Primary interface: routes the lint / format / check / parse / init
subcommands to the engine, renders results with rich, and turns the
outcome into a process exit status (0 = clean, 1 = failure).

Author: cleansh maintainers
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console

from cleansh.cli.formatter import ReportFormatter
from cleansh.core.config import DEFAULT_CONFIG_FILE, load_config, write_default_config
from cleansh.core.engine import CleanEngine
from cleansh.core.errors import CleanError, ExitCode, InputError
from cleansh.healing.scanner import render_dump

__version__ = "1.0.0"


class CleanCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    Files are processed strictly one after another; a failing file
    never stops the rest of the batch.
    """

    def __init__(self):
        """Initializes the CLI and sets up the argument parser."""
        self.parser = argparse.ArgumentParser(
            prog="cleansh",
            description="cleansh - shell script linter and formatter",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Configuration is read from the `clean:` section of arty.yml:\n"
                "  clean:\n"
                "    rules:    {max_line_length: 100, indent_size: 2, ...}\n"
                "    severity: {deprecated_syntax: error, ...}"
            ),
        )
        self.console = Console()
        self._setup_args()

    def _add_common_options(self, parser: argparse.ArgumentParser, top_level: bool):
        """
        Options accepted both before and after the subcommand. The
        subcommand copies default to SUPPRESS so they never overwrite a
        value given at the top level.
        """
        def default(value):
            return value if top_level else argparse.SUPPRESS

        parser.add_argument("-c", "--config", default=default(DEFAULT_CONFIG_FILE),
                            help=f"Config file (default: {DEFAULT_CONFIG_FILE})")
        parser.add_argument("-v", "--verbose", action="store_true", default=default(False),
                            help="Enable verbose output")
        parser.add_argument("--no-color", action="store_true", default=default(False),
                            help="Disable colored output")
        parser.add_argument("--ext", default=default(".sh"), help="Extension used when a directory is given")

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"cleansh v{__version__}")
        self._add_common_options(self.parser, top_level=True)

        common = argparse.ArgumentParser(add_help=False)
        self._add_common_options(common, top_level=False)

        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        lint_parser = subparsers.add_parser("lint", parents=[common], help="Check files for style issues (read-only)")
        lint_parser.add_argument("paths", nargs="+", help="Script files or directories")

        check_parser = subparsers.add_parser("check", parents=[common], help="Check formatting without modifying files")
        check_parser.add_argument("paths", nargs="+", help="Script files or directories")

        format_parser = subparsers.add_parser("format", parents=[common], help="Fix issues in place")
        format_parser.add_argument("paths", nargs="+", help="Script files or directories")
        format_parser.add_argument("--dry-run", action="store_true", help="Report fixes without writing")
        format_parser.add_argument("--diff", action="store_true", help="Show a unified diff of the changes")

        parse_parser = subparsers.add_parser("parse", parents=[common], help="Dump line contexts and tokens (debug)")
        parse_parser.add_argument("paths", nargs="+", help="Script files")

        init_parser = subparsers.add_parser("init", help="Write a default configuration file")
        init_parser.add_argument("path", nargs="?", default=DEFAULT_CONFIG_FILE, help="Target file")

    def _configure_output(self, args: argparse.Namespace):
        if getattr(args, "no_color", False):
            self.console = Console(no_color=True, highlight=False)
        level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
        logging.getLogger("cleansh").setLevel(level)

    def _collect_targets(self, paths: List[str], ext: str) -> List[Path]:
        """Expands directories into their scripts; plain files pass as given."""
        targets = []
        for raw in paths:
            path = Path(raw)
            if path.is_dir():
                targets.extend(sorted(
                    f for f in path.rglob(f"*{ext}")
                    if f.is_file() and not f.is_symlink()
                ))
            else:
                # Missing files are reported by the engine, per file
                targets.append(path)
        return targets

    def _run_lint(self, engine: CleanEngine, formatter: ReportFormatter, targets: List[Path]) -> List[Dict[str, Any]]:
        reports = []
        for path in targets:
            issues, success = engine.lint_file(path)
            if not path.is_file():
                status = "INPUT_ERROR"
            else:
                status = "PASSED" if success else "FAILED"
                formatter.print_issues(str(path), issues)
            reports.append({"file_path": str(path), "issues": issues, "success": success, "status": status})
        return reports

    def _run_format(self, engine: CleanEngine, formatter: ReportFormatter, targets: List[Path],
                    args: argparse.Namespace) -> List[Dict[str, Any]]:
        reports = []
        for path in targets:
            report = engine.format_report(path, dry_run=args.dry_run)
            if args.diff and report.get("success"):
                formatter.display_diff(report["original"], report["content"], str(path))
            formatter.print_format_result(report)
            reports.append(report)
        return reports

    def _run_parse(self, engine: CleanEngine, formatter: ReportFormatter, targets: List[Path]) -> List[Dict[str, Any]]:
        reports = []
        for path in targets:
            try:
                records = engine.parse_file(path)
            except InputError as e:
                self.console.print(f"[bold red]Error:[/bold red] {e.message}")
                reports.append({"file_path": str(path), "success": False, "status": "INPUT_ERROR"})
                continue
            formatter.print_dump(render_dump(str(path), records))
            reports.append({"file_path": str(path), "success": True, "status": "PARSED"})
        return reports

    def run(self, argv: List[str] = None) -> int:
        """Primary routing entry point. Returns the process exit status."""
        args = self.parser.parse_args(argv)
        if not args.command:
            self.parser.print_help()
            return int(ExitCode.FAILURE)

        self._configure_output(args)

        if args.command == "init":
            try:
                written = write_default_config(args.path)
            except CleanError as e:
                self.console.print(f"[bold red]Error:[/bold red] {e.message}")
                return int(e.exit_code)
            self.console.print(f"[green]✓ Wrote default configuration to {written}[/green]")
            return int(ExitCode.SUCCESS)

        engine = CleanEngine(load_config(args.config))
        formatter = ReportFormatter(self.console)
        targets = self._collect_targets(args.paths, args.ext)

        if not targets:
            self.console.print(f"[bold yellow]⚠️  No {args.ext} files found.[/bold yellow]")
            return int(ExitCode.FAILURE)

        if args.command in ("lint", "check"):
            reports = self._run_lint(engine, formatter, targets)
        elif args.command == "format":
            reports = self._run_format(engine, formatter, targets, args)
        else:
            reports = self._run_parse(engine, formatter, targets)

        if len(reports) > 1 and args.command != "parse":
            mode = "format" if args.command == "format" else "lint"
            formatter.print_final_table(reports, engine.generate_summary(reports), mode)

        failed = any(not r.get("success", False) for r in reports)
        return int(ExitCode.FAILURE if failed else ExitCode.SUCCESS)


def main():
    """Application entry point with interrupt handling."""
    cli = CleanCLI()
    try:
        sys.exit(cli.run())
    except KeyboardInterrupt:
        cli.console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
