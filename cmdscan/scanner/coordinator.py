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

"""Script loading, discovery, and the per-script scan sequence.

Single file: validated against the configured size bounds and loaded.
Directory: walked recursively for shell scripts (by extension or shebang),
skipping VCS, virtualenv and cache directories.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from cmdscan.config import ScanSettings
from cmdscan.errors import InputError
from cmdscan.models.report import ScriptReport
from cmdscan.policy.pipeline import classify_terms
from cmdscan.policy.reference_sets import build_reference_sets
from cmdscan.scanner.lexer import ScanOptions, scan_commands
from cmdscan.scanner.normalizer import normalize_terms
from cmdscan.scanner.prescan import collect_declarations
from cmdscan.scanner.source import SourceText

logger = logging.getLogger(__name__)

# Default patterns to ignore when walking a directory
DEFAULT_IGNORE_PATTERNS = {
    "__pycache__",
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "dist",
    "build",
}

SHELL_EXTENSIONS = {".sh", ".bash", ".zsh", ".ksh"}

SHEBANG = re.compile(r"^#!\s*(?:\S*/)?(?:env\s+)?(?:ba|da|k|z)?sh\b")


def _should_ignore(path: Path) -> bool:
    return any(part in DEFAULT_IGNORE_PATTERNS for part in path.parts)


def _has_shell_shebang(path: Path) -> bool:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            first_line = f.readline(256)
    except OSError as e:
        logger.debug("Could not read %s: %s", path, e)
        return False
    return bool(SHEBANG.match(first_line))


def is_shell_script(path: Path) -> bool:
    """True for files with a shell extension or a sh/bash/zsh/ksh shebang."""
    return path.suffix in SHELL_EXTENSIONS or _has_shell_shebang(path)


def discover_scripts(target_dir: Path) -> list[Path]:
    """Find shell scripts under ``target_dir``, as paths relative to it."""
    target_dir = target_dir.resolve()

    if not target_dir.exists():
        raise InputError("directory not found", target_dir)
    if not target_dir.is_dir():
        raise InputError("not a directory", target_dir)

    scripts = []
    for item in sorted(target_dir.rglob("*")):
        rel_path = item.relative_to(target_dir)
        if item.is_file() and not _should_ignore(rel_path) and is_shell_script(item):
            scripts.append(rel_path)

    logger.info("Found %d shell scripts under %s", len(scripts), target_dir)
    return scripts


def load_script(path: Path, settings: Optional[ScanSettings] = None, name: Optional[str] = None) -> SourceText:
    """Read a script after checking it exists and is within the size bounds.

    Raises:
        InputError: missing, not a regular file, unreadable, or too small/large.
    """
    settings = settings or ScanSettings()

    if not path.exists():
        raise InputError("could not find a script at this path", path)
    if not path.is_file():
        raise InputError("not a regular file", path)

    try:
        size = path.stat().st_size
        if size < settings.min_size or size > settings.max_size:
            raise InputError(
                f"size of {size} bytes is outside the allowed range "
                f"{settings.min_size}-{settings.max_size}",
                path,
            )
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise InputError(f"could not read script: {e.strerror or e}", path) from e

    return SourceText(content, name=name or str(path))


def scan_source(
    source: SourceText,
    settings: Optional[ScanSettings] = None,
    options: Optional[ScanOptions] = None,
) -> ScriptReport:
    """Prescan, tokenize, normalize and classify one script."""
    settings = settings or ScanSettings()

    logger.info("Prescanning %s for variables and functions", source.name)
    declared = collect_declarations(source)

    logger.info("Parsing %s for terms", source.name)
    tokens = scan_commands(source, options or settings.scan_options())
    terms = normalize_terms(tokens)
    if not terms:
        logger.info("Found no terms to evaluate in %s", source.name)

    reference_sets = build_reference_sets(
        declared,
        settings.platform,
        settings.extra_names,
        settings.reference_sets,
    )
    classification = classify_terms(terms, reference_sets)

    return ScriptReport(
        script=source.name,
        line_count=source.line_count,
        declarations=sorted(declared),
        token_count=len(tokens),
        classification=classification,
    )
