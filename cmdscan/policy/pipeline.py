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

"""Classification pipeline.

Filters the unique term list through the reference sets one at a time.
Each set removes the terms it contains; the rest carry on to the next set.
The pipeline stops early once nothing is left. The remainder only ever
shrinks, so the final answer does not depend on set order; the order only
decides which stage gets credit for a term and how soon the pipeline stops.
"""

from __future__ import annotations

import logging
from typing import Sequence

from cmdscan.models.references import ReferenceSet
from cmdscan.models.report import ClassificationResult, ScanStatus, StageResult

logger = logging.getLogger(__name__)


def apply_reference_set(terms: Sequence[str], reference: ReferenceSet) -> StageResult:
    """Run a single stage. Order of ``terms`` is preserved in both outputs."""
    remaining: list[str] = []
    removed: list[str] = []
    for term in terms:
        if term in reference:
            removed.append(term)
        else:
            remaining.append(term)
    return StageResult(
        name=reference.name,
        label=reference.label,
        before=list(terms),
        removed=removed,
        remaining=remaining,
    )


def classify_terms(
    terms: Sequence[str],
    reference_sets: Sequence[ReferenceSet],
) -> ClassificationResult:
    """Filter ``terms`` through ``reference_sets`` in order.

    Returns a result with status ``NO_TOKENS`` when ``terms`` is empty,
    ``RESOLVED`` when every term matched some set, else ``UNRESOLVED``.
    """
    if not terms:
        return ClassificationResult(status=ScanStatus.NO_TOKENS)

    remaining = list(terms)
    stages: list[StageResult] = []
    for reference in reference_sets:
        stage = apply_reference_set(remaining, reference)
        stages.append(stage)
        logger.debug(
            "Filtered %d terms against %s: %d removed, %d left",
            len(stage.before), reference.label, len(stage.removed), len(stage.remaining),
        )
        remaining = stage.remaining
        if not remaining:
            logger.debug("No terms left to evaluate after removing %s", reference.label)
            break

    return ClassificationResult(
        status=ScanStatus.UNRESOLVED if remaining else ScanStatus.RESOLVED,
        terms=list(terms),
        stages=stages,
        remainder=remaining,
    )
