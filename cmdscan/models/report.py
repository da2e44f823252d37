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

"""Pydantic models for classification results and the scan report."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from cmdscan import __version__


class ScanStatus(str, Enum):
    """Terminal state of a single script scan."""

    NO_TOKENS = "no_tokens"  # nothing in command position at all
    RESOLVED = "resolved"  # every term matched some reference set
    UNRESOLVED = "unresolved"  # at least one unknown command remains


class StageResult(BaseModel):
    """What one reference set removed from the working set."""

    name: str
    label: str
    before: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    remaining: list[str] = Field(default_factory=list)


class ClassificationResult(BaseModel):
    """Output of the classification pipeline.

    ``stages`` only lists the stages that actually ran; the pipeline stops
    as soon as nothing is left to classify.
    """

    status: ScanStatus
    terms: list[str] = Field(default_factory=list)
    stages: list[StageResult] = Field(default_factory=list)
    remainder: list[str] = Field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return not self.remainder


class ScriptReport(BaseModel):
    """Scan result for one script."""

    script: str
    line_count: int = 0
    declarations: list[str] = Field(default_factory=list)
    token_count: int = 0
    classification: ClassificationResult


class ScanReport(BaseModel):
    """The complete report for one invocation (one or more scripts)."""

    cmdscan_version: str = __version__
    scan_target: str = ""
    scan_timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    platform: str = "macos"
    escape_mode: str = "legacy"
    scripts: list[ScriptReport] = Field(default_factory=list)

    @property
    def unresolved(self) -> list[str]:
        """Union of unresolved names across all scripts, in first-seen order."""
        seen: dict[str, None] = {}
        for script in self.scripts:
            for name in script.classification.remainder:
                seen.setdefault(name, None)
        return list(seen)
