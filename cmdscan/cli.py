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

"""cmdscan CLI: Typer entry point.

Commands:
- cmdscan scan <path>  Report commands a script (or every script in a
                       directory) uses that are not built in or standard
- cmdscan sets         Show the reference sets a scan consults, in order
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from cmdscan.config import ScanSettings, load_settings
from cmdscan.errors import InputError
from cmdscan.models.report import ScanReport, ScriptReport
from cmdscan.policy.reference_sets import available_platforms, build_reference_sets
from cmdscan.reporter.console_out import (
    console,
    line_progress,
    print_declarations,
    print_error,
    print_reference_sets,
    print_stages,
    print_summary,
    print_verdict,
)
from cmdscan.reporter.json_out import to_canonical_json, write_report
from cmdscan.scanner.coordinator import discover_scripts, load_script, scan_source
from cmdscan.scanner.lexer import EscapeMode

app = typer.Typer(
    name="cmdscan",
    help=(
        "cmdscan: find the external commands a shell script depends on. "
        "Run 'cmdscan <command> --help' for flags."
    ),
    add_completion=False,
)

logger = logging.getLogger("cmdscan")


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def parse_line_range(value: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse ``A:B`` (or a single line ``A``) into an inclusive range."""
    if value is None:
        return None
    first, sep, last = value.partition(":")
    try:
        start = int(first)
        end = int(last) if sep else start
    except ValueError:
        raise typer.BadParameter(f"expected LINE or FIRST:LAST, got '{value}'") from None
    if start < 1 or end < start:
        raise typer.BadParameter(f"invalid line range '{value}'")
    return start, end


def _load_settings(
    config: Optional[str],
    platform: Optional[str],
    escape_mode: Optional[EscapeMode] = None,
    max_size: Optional[int] = None,
) -> ScanSettings:
    """Config file settings with command-line overrides applied."""
    settings = load_settings(Path(config) if config else None)
    updates: dict[str, object] = {}
    if platform is not None:
        updates["platform"] = platform
    if escape_mode is not None:
        updates["escape_mode"] = escape_mode
    if max_size is not None:
        updates["max_size"] = max_size
    if updates:
        try:
            settings = ScanSettings(**{**settings.model_dump(), **updates})
        except ValidationError as e:
            raise InputError(f"invalid option: {e}") from e

    platforms = available_platforms(settings.reference_sets)
    if settings.platform not in platforms:
        raise InputError(f"unknown platform '{settings.platform}' (known: {', '.join(platforms)})")
    return settings


def _scan_one(
    full_path: Path,
    name: str,
    settings: ScanSettings,
    *,
    line_window: Optional[tuple[int, int]],
    trace_lines: Optional[tuple[int, int]],
    show_progress: bool,
) -> ScriptReport:
    source = load_script(full_path, settings, name=name)
    if not show_progress:
        options = settings.scan_options(line_window=line_window, trace_lines=trace_lines)
        return scan_source(source, settings, options)

    console.print("Prescanning script for variables and functions...")
    with line_progress(name, source.line_count) as advance:
        options = settings.scan_options(
            line_window=line_window, trace_lines=trace_lines, progress=advance
        )
        return scan_source(source, settings, options)


@app.command()
def scan(
    path: str = typer.Argument(..., help="Shell script, or a directory to search for scripts"),
    output_json: bool = typer.Option(False, "--json", help="Output the report as JSON to stdout"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Also write the JSON report to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and per-script detail"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
    platform: Optional[str] = typer.Option(None, "--platform", help="Platform command set: macos or linux"),
    escape_mode: Optional[EscapeMode] = typer.Option(
        None, "--escape-mode", case_sensitive=False,
        help="legacy: historical backslash-quote handling; strict: shell-accurate",
    ),
    max_size: Optional[int] = typer.Option(None, "--max-size", help="Largest script size in bytes"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to a YAML config file"),
    fail_on_unresolved: bool = typer.Option(
        False, "--fail-on-unresolved", help="Exit with code 1 if any command is unresolved",
    ),
    lines: Optional[str] = typer.Option(None, "--lines", help="Only scan lines FIRST:LAST"),
    trace_lines: Optional[str] = typer.Option(
        None, "--trace-lines", help="Log scanner decisions for lines FIRST:LAST (needs -v)",
    ),
) -> None:
    """Scan a shell script and list commands that are not built in.

    Names the script declares itself, Bash reserved words, POSIX and GNU
    utilities, and the selected platform's extras all count as known.
    """
    _configure_logging(verbose=verbose, quiet=quiet)
    line_window = parse_line_range(lines)
    trace_range = parse_line_range(trace_lines)
    interactive = not quiet and not output_json

    try:
        settings = _load_settings(config, platform, escape_mode, max_size)
    except InputError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    target = Path(path)
    report = ScanReport(
        scan_target=str(target),
        platform=settings.platform,
        escape_mode=settings.escape_mode.value,
    )

    if target.is_dir():
        try:
            scripts = discover_scripts(target)
        except InputError as e:
            print_error(str(e))
            raise typer.Exit(code=1)
        for rel_path in scripts:
            try:
                script_report = _scan_one(
                    target / rel_path, str(rel_path), settings,
                    line_window=line_window, trace_lines=trace_range, show_progress=False,
                )
            except InputError as e:
                logger.warning("Skipping %s", e)
                continue
            report.scripts.append(script_report)
            if interactive and verbose:
                print_stages(script_report)
                print_verdict(script_report, settings.platform)
        if interactive:
            print_summary(report)
    else:
        try:
            script_report = _scan_one(
                target, str(target), settings,
                line_window=line_window, trace_lines=trace_range, show_progress=interactive,
            )
        except InputError as e:
            print_error(str(e))
            raise typer.Exit(code=1)
        report.scripts.append(script_report)
        if interactive:
            if verbose:
                print_declarations(script_report)
            print_stages(script_report)
            print_verdict(script_report, settings.platform)

    if output:
        write_report(report, Path(output))
    if output_json:
        print(to_canonical_json(report), end="")

    if fail_on_unresolved and report.unresolved:
        raise typer.Exit(code=1)


@app.command()
def sets(
    platform: Optional[str] = typer.Option(None, "--platform", help="Platform command set: macos or linux"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to a YAML config file"),
) -> None:
    """List the reference sets a scan consults, in order."""
    try:
        settings = _load_settings(config, platform)
        reference_sets = build_reference_sets(
            (), settings.platform, settings.extra_names, settings.reference_sets
        )
    except InputError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    print_reference_sets(reference_sets)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
