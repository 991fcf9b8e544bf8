# src/cleansh/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from cleansh.core.models import Issue, Severity

SEVERITY_STYLES = {
    Severity.ERROR: ("bold red", "ERROR"),
    Severity.WARNING: ("bold yellow", "WARN"),
    Severity.INFO: ("bold blue", "INFO"),
}


class ReportFormatter:
    """
    ReportFormatter: the visual side of the CLI.
    Renders issue lists, format diffs, parse dumps and run summaries.
    """

    def __init__(self, console: Console):
        self.console = console

    def print_banner(self, title: str, path: str):
        self.console.print(Panel.fit(f"[bold white]{escape(path)}[/bold white]", title=title, border_style="cyan"))

    def print_issues(self, path: str, issues: List[Issue]):
        """One line per issue, colored by severity, then per-file counts."""
        self.print_banner("Linting", path)

        if not issues:
            self.console.print("[green]✓ No issues found[/green]")
            return

        for issue in issues:
            style, label = SEVERITY_STYLES[issue.severity]
            self.console.print(
                f"[{style}]\\[{label}][/{style}] Line {issue.line_number}: "
                f"{escape(issue.message)} [dim]({issue.rule})[/dim]",
                highlight=False,
            )

        counts = {level: sum(1 for i in issues if i.severity == level) for level in Severity}
        self.console.print(
            f"[bold]Summary:[/bold] "
            f"[red]Errors: {counts[Severity.ERROR]}[/red]  "
            f"[yellow]Warnings: {counts[Severity.WARNING]}[/yellow]  "
            f"[blue]Info: {counts[Severity.INFO]}[/blue]"
        )

    def display_diff(self, original: List[str], formatted: List[str], file_name: str):
        """Renders a colorized unified diff between the original and formatted script."""
        diff = list(difflib.unified_diff(
            original,
            formatted,
            fromfile=f"original/{file_name}",
            tofile=f"formatted/{file_name}",
            lineterm=""
        ))

        if not diff:
            self.console.print(f"[dim]ℹ No formatting needed for {file_name}.[/dim]")
            return

        syntax = Syntax("\n".join(diff), "diff", theme="monokai", line_numbers=False)
        self.console.print(Panel(syntax, title=f"Proposed Formatting: {file_name}", border_style="green"))

    def print_format_result(self, report: Dict[str, Any]):
        if not report.get("success"):
            self.console.print(f"[bold red]✗ {escape(report['file_path'])}:[/bold red] {report.get('error')}")
            return
        fixes = report.get("fixes", 0)
        if fixes == 0:
            self.console.print(f"[green]✓ No formatting needed[/green] [dim]{escape(report['file_path'])}[/dim]")
        else:
            verb = "Would fix" if report.get("status") == "PREVIEW" else "Fixed"
            self.console.print(f"[green]✓ {verb} {fixes} line(s)[/green] [dim]{escape(report['file_path'])}[/dim]")

    def print_dump(self, dump: str):
        self.console.print(dump, markup=False, highlight=False, soft_wrap=True)

    def print_final_table(self, reports: List[Dict[str, Any]], summary: Dict[str, Any], mode: str):
        """
        Builds the summary table shown at the end of a multi-file run.
        """
        table = Table(title=f"cleansh {mode} report", show_header=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Status")
        table.add_column("Issues / Fixes", justify="right")
        table.add_column("Result", justify="center")

        for r in reports:
            success = r.get("success", False)
            color = "green" if success else "red"
            count = len(r.get("issues", [])) if mode != "format" else r.get("fixes", 0)
            table.add_row(
                str(r.get("file_path")),
                f"[{color}]{r.get('status', 'FAILED')}[/{color}]",
                str(count),
                "✅" if success else "❌",
            )

        self.console.print(table)
        self.console.print(
            f"Files: {summary['total_files']}  "
            f"[green]Passed: {summary['successful']}[/green]  "
            f"[red]Failed: {summary['failed']}[/red]"
        )
