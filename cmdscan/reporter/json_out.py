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

"""JSON report output.

The same scan always serializes to the same bytes apart from the
timestamp, so saved reports can be diffed between runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from cmdscan.models.report import ScanReport

logger = logging.getLogger(__name__)


def to_canonical_json(data: BaseModel | dict[str, Any]) -> str:
    """Render a report model (or a plain dict) as sorted, two-space JSON.

    The result ends with a single newline.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def write_report(report: ScanReport, output_path: Path) -> None:
    """Save ``report`` to ``output_path``, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(to_canonical_json(report), encoding="utf-8", newline="\n")
    logger.info("Wrote JSON report for %d script(s) to %s", len(report.scripts), output_path)
