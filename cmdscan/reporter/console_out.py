# cmdscan: external command auditor for shell scripts
# Copyright (C) 2026 cmdscan Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Rich terminal output: scan progress, filter stages, and the verdict."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from cmdscan.models.references import ReferenceSet
from cmdscan.models.report import ScanReport, ScanStatus, ScriptReport, StageResult


def _make_console() -> Console:
    return Console(soft_wrap=True)


console = _make_console()

ICON_PASS = "[bold green][OK][/bold green]"
ICON_WARN = "[bold yellow][WARN][/bold yellow]"
ICON_INFO = "[bold blue][INFO][/bold blue]"

PLATFORM_NAMES = {
    "macos": "macOS",
    "linux": "Linux",
}


def _platform_name(platform: str) -> str:
    return PLATFORM_NAMES.get(platform, platform)


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def print_error(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")


@contextmanager
def line_progress(name: str, total_lines: int) -> Iterator[Callable[[int], None]]:
    """Show a transient "N/M lines processed" bar while a script is scanned.

    Yields the callback to hand to the lexer as ``ScanOptions.progress``.
    """
    progress = Progress(
        TextColumn("Parsing [bold]{task.description}[/bold] for terms"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("lines processed"),
        console=console,
        transient=True,
    )
    with progress:
        task = progress.add_task(name, total=max(total_lines, 1))

        def advance(line: int) -> None:
            progress.update(task, completed=line)

        yield advance


def print_stage(stage: StageResult) -> None:
    """One filter stage, worded like a running log."""
    count = len(stage.before)
    console.print(
        f"{count} {_plural(count, 'term')} left to filter: "
        f"[dim]{' '.join(stage.before)}[/dim]."
    )
    console.print(f"Now filtering against {stage.label}.")
    if not stage.remaining:
        console.print(f"No terms left to evaluate after removing {stage.label}.")


def print_stages(report: ScriptReport) -> None:
    for stage in report.classification.stages:
        print_stage(stage)


def print_verdict(report: ScriptReport, platform: str) -> None:
    """Final verdict panel for one script."""
    result = report.classification
    shell = f"{_platform_name(platform)} Bash shell"

    if result.status is ScanStatus.NO_TOKENS:
        body = f"  {ICON_INFO}  Found no terms to evaluate!"
        border = "blue"
    elif result.status is ScanStatus.RESOLVED:
        body = f"  {ICON_PASS}  All the commands used in this script are built into the {shell}."
        border = "green"
    elif len(result.remainder) == 1:
        body = (
            f"  {ICON_WARN}  The following command appears to be a third-party "
            f"program not built into the {shell}:\n\n"
            f"    [bold]{result.remainder[0]}[/bold]"
        )
        border = "yellow"
    else:
        names = "\n".join(f"    [bold]{name}[/bold]" for name in result.remainder)
        body = (
            f"  {ICON_WARN}  The following {len(result.remainder)} commands appear to be "
            f"third-party programs not built into the {shell}:\n\n{names}"
        )
        border = "yellow"

    console.print(
        Panel(
            body,
            border_style=border,
            title=f"[bold {border}]{escape(report.script)}[/bold {border}]",
            expand=True,
            safe_box=True,
        )
    )


def print_declarations(report: ScriptReport) -> None:
    if not report.declarations:
        return
    console.print(
        f"[dim]Declared in script ({len(report.declarations)}): "
        f"{', '.join(report.declarations)}[/dim]"
    )


def print_summary(report: ScanReport) -> None:
    """Table of all scanned scripts, for directory scans."""
    table = Table(title=f"cmdscan: {escape(report.scan_target)}", expand=True)
    table.add_column("Script")
    table.add_column("Lines", justify="right")
    table.add_column("Status")
    table.add_column("Unresolved")

    for script in report.scripts:
        status = script.classification.status
        color = {
            ScanStatus.RESOLVED: "green",
            ScanStatus.UNRESOLVED: "yellow",
            ScanStatus.NO_TOKENS: "blue",
        }[status]
        table.add_row(
            escape(script.script),
            str(script.line_count),
            f"[{color}]{status.value}[/{color}]",
            ", ".join(script.classification.remainder),
        )
    console.print(table)

    unresolved = report.unresolved
    if unresolved:
        console.print(
            f"\n  {ICON_WARN}  {len(unresolved)} distinct unresolved "
            f"{_plural(len(unresolved), 'command')}: [bold]{', '.join(unresolved)}[/bold]"
        )
    else:
        console.print(f"\n  {ICON_PASS}  No unresolved commands.")


def print_reference_sets(reference_sets: Sequence[ReferenceSet]) -> None:
    """Ordered table of the reference sets a scan would use."""
    table = Table(title="Reference sets (consulted in order)")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("Names", justify="right")
    for idx, ref in enumerate(reference_sets, start=1):
        size = "per script" if ref.name == "declared" else str(len(ref))
        table.add_row(str(idx), ref.name, ref.label, size)
    console.print(table)
