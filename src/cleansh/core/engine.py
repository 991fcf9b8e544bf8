#!/usr/bin/env python3
"""
CLEANSH ENGINE - The High Orchestrator
--------------------------------------
The CleanEngine manages the lifecycle of a shell script through the
lint, format and parse entry points. It owns all file I/O: reading
(BOM-aware), the pre-write safety gate, and atomic replacement that
keeps the original permission bits.

Author: cleansh maintainers
"""

import os
import stat
import tempfile
import time
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from cleansh.core.config import RuleConfig
from cleansh.core.errors import CleanError, GenerationError, InputError
from cleansh.core.models import Issue, ParsedLine, Severity
from cleansh.healing.pipeline import CleanPipeline
from cleansh.healing.scanner import ShellScanner
from cleansh.validator.validator import FormatValidator

# Setup standardized logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cleansh.engine")

PathLike = Union[str, Path]


def report_error(message: str):
    logger.error(message)


def report_info(message: str):
    logger.info(message)


class CleanEngine:
    """
    Principal orchestrator for shell script linting and formatting.
    One engine serves any number of files; no state is shared between
    them, so a failure in one file never affects the next.
    """

    def __init__(self, config: RuleConfig = None):
        self.config = config or RuleConfig()
        self.pipeline = CleanPipeline(self.config)
        self.scanner = ShellScanner()
        self.validator = FormatValidator()

    # --- Reading -------------------------------------------------------

    def read_lines(self, path: PathLike) -> List[str]:
        """Reads a script as a list of lines without line terminators."""
        lines, _ = self.read_script(path)
        return lines

    def read_script(self, path: PathLike) -> Tuple[List[str], str]:
        """
        Reads a script and returns (lines, newline). Lines are split on
        `\\n` only: form feeds, lone `\\r` and Unicode separators are
        line content. A file whose every terminator is `\\r\\n` reports
        that newline and its lines lose the `\\r`.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise InputError(f"File not found: {file_path}")
        if not file_path.is_file():
            raise InputError(f"Not a regular file: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8-sig", newline="") as f:
                raw_text = f.read()
        except UnicodeDecodeError as e:
            raise InputError(f"Cannot decode {file_path} as UTF-8: {e.reason}")
        except OSError as e:
            raise InputError(f"Cannot read {file_path}: {e.strerror or e}")

        lines = raw_text.split("\n")
        if lines[-1] == "":
            lines.pop()
            terminated = lines
        else:
            terminated = lines[:-1]

        if terminated and all(line.endswith("\r") for line in terminated):
            lines = [line[:-1] for line in terminated] + lines[len(terminated):]
            return lines, "\r\n"
        return lines, "\n"

    # --- In-memory entry points ---------------------------------------

    def lint_text(self, lines: List[str]) -> List[Issue]:
        return self.pipeline.lint(lines)

    def format_text(self, lines: List[str]) -> Tuple[List[str], int]:
        result = self.pipeline.format(lines)
        return result.lines, result.fixes

    # --- File entry points --------------------------------------------

    def lint_file(self, path: PathLike) -> Tuple[List[Issue], bool]:
        """
        Lints one file. Success is False on input errors and when any
        error-severity issue was found; warnings and info never fail.
        """
        try:
            lines = self.read_lines(path)
        except InputError as e:
            report_error(e.message)
            return [], False

        logger.debug(f"Linting: {path}")
        issues = self.lint_text(lines)
        success = not any(issue.severity == Severity.ERROR for issue in issues)
        return issues, success

    def check_file(self, path: PathLike) -> Tuple[List[Issue], bool]:
        """Read-only check; identical to lint."""
        return self.lint_file(path)

    def format_file(self, path: PathLike, dry_run: bool = False) -> Tuple[int, bool]:
        """Formats one file in place. Returns (fix_count, success)."""
        report = self.format_report(path, dry_run=dry_run)
        return report["fixes"], report["success"]

    def format_report(self, path: PathLike, dry_run: bool = False) -> Dict[str, Any]:
        """
        Performs a full format cycle on a single script and returns a
        report the CLI can render (original and formatted content included).
        """
        file_path = Path(path)
        try:
            original, newline = self.read_script(file_path)
        except InputError as e:
            report_error(e.message)
            return self._file_error(file_path, "INPUT_ERROR", e.message)

        logger.debug(f"Formatting: {file_path}")
        formatted, fixes = self.format_text(original)

        report = {
            "file_path": str(file_path),
            "fixes": fixes,
            "success": True,
            "status": "UNCHANGED" if formatted == original else ("PREVIEW" if dry_run else "FORMATTED"),
            "original": original,
            "content": formatted,
            "written": False,
            "error": None,
            "timestamp": time.time(),
        }

        try:
            valid, reason = self.validator.validate(original, formatted)
            if not valid:
                raise GenerationError(reason)

            if not dry_run:
                self._atomic_write(file_path, formatted, newline)
                report["written"] = True
        except CleanError as e:
            report_error(f"{file_path}: {e.message}")
            report.update({"success": False, "status": "FAILED", "error": e.message})

        return report

    def parse_file(self, path: PathLike) -> List[ParsedLine]:
        """Classifies and tokenizes every line. Raises InputError."""
        return self.scanner.scan(self.read_lines(path))

    # --- Summaries ------------------------------------------------------

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Totals across a multi-file run, for the CLI footer."""
        if not reports:
            return {
                "total_files": 0, "successful": 0, "failed": 0,
                "errors": 0, "warnings": 0, "info": 0, "fixes": 0,
            }

        issues = [issue for r in reports for issue in r.get("issues", [])]
        return {
            "total_files": len(reports),
            "successful": sum(1 for r in reports if r.get("success", False)),
            "failed": sum(1 for r in reports if not r.get("success", False)),
            "errors": sum(1 for i in issues if i.severity == Severity.ERROR),
            "warnings": sum(1 for i in issues if i.severity == Severity.WARNING),
            "info": sum(1 for i in issues if i.severity == Severity.INFO),
            "fixes": sum(r.get("fixes", 0) for r in reports),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    # --- Writing --------------------------------------------------------

    def _atomic_write(self, target_path: Path, lines: List[str], newline: str = "\n"):
        """
        Writes to a fresh scratch file beside the target, copies the
        permission bits, then swaps it into place. The original is
        never partially overwritten.
        """
        if not os.access(target_path.parent, os.W_OK):
            raise GenerationError(f"No write access to {target_path.parent}")

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{target_path.name}.", suffix=".cleansh.tmp", dir=target_path.parent
            )
        except OSError as e:
            raise GenerationError(f"Cannot create temp file: {e}")

        temp_file = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(newline.join(lines) + newline)
            mode = stat.S_IMODE(target_path.stat().st_mode)
            os.chmod(temp_file, mode)
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise GenerationError(f"Atomic write failed: {e}")

        report_info(f"Rewrote {target_path}")

    def _file_error(self, path: Path, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": str(path), "status": status, "error": error,
            "success": False, "fixes": 0, "written": False,
            "original": [], "content": [],
        }
