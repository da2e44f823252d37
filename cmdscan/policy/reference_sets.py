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

"""Reference sets: the ordered lists of names that count as "known".

The bundled lists live in ``rules/reference_sets.yaml``. A scan consults,
in order:

1. ``declared``: identifiers the script binds itself (from the prescanner)
2. every entry under ``stages`` (reserved words, POSIX, GNU)
3. the selected entry under ``platforms`` (macOS or Linux extras)
4. ``user``: names listed in the user's config, if any
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from cmdscan.errors import InputError
from cmdscan.models.references import ReferenceSet

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent / "rules" / "reference_sets.yaml"

DECLARED_SET = "declared"
USER_SET = "user"


class _SetEntry(BaseModel):
    name: Optional[str] = None
    label: str
    names: list[str] = Field(default_factory=list)


class ReferenceData(BaseModel):
    """Parsed contents of a reference-set YAML file."""

    stages: list[_SetEntry] = Field(default_factory=list)
    platforms: dict[str, _SetEntry] = Field(default_factory=dict)


def load_reference_data(path: Path) -> ReferenceData:
    """Load and validate a reference-set YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise InputError("reference set file not found", path) from None
    except (OSError, yaml.YAMLError) as e:
        raise InputError(f"cannot load reference sets: {e}", path) from e

    if not isinstance(data, dict):
        raise InputError("reference set file must contain a mapping", path)
    try:
        return ReferenceData(**data)
    except ValidationError as e:
        raise InputError(f"invalid reference sets: {e}", path) from e


# Module-level cache for the bundled file
_bundled: ReferenceData | None = None


def _get_data(path: Optional[Path] = None) -> ReferenceData:
    """Get reference data, caching the bundled file."""
    global _bundled
    if path is not None:
        return load_reference_data(path)
    if _bundled is None:
        _bundled = load_reference_data(DEFAULT_RULES_PATH)
        logger.debug(
            "Loaded %d reference stages and %d platforms from %s",
            len(_bundled.stages), len(_bundled.platforms), DEFAULT_RULES_PATH,
        )
    return _bundled


def available_platforms(path: Optional[Path] = None) -> list[str]:
    """Platform names that can be passed to :func:`build_reference_sets`."""
    return sorted(_get_data(path).platforms)


def build_reference_sets(
    declared: Iterable[str],
    platform: str,
    extra_names: Iterable[str] = (),
    path: Optional[Path] = None,
) -> list[ReferenceSet]:
    """Return the ordered reference sets for one scan.

    Raises:
        InputError: ``platform`` is not defined in the reference data.
    """
    data = _get_data(path)
    if platform not in data.platforms:
        known = ", ".join(sorted(data.platforms)) or "none"
        raise InputError(f"unknown platform '{platform}' (known: {known})")

    sets = [ReferenceSet.of(DECLARED_SET, "functions and variables", declared)]
    for idx, entry in enumerate(data.stages):
        sets.append(ReferenceSet.of(entry.name or f"stage{idx + 1}", entry.label, entry.names))

    entry = data.platforms[platform]
    sets.append(ReferenceSet.of(entry.name or platform, entry.label, entry.names))

    extra = list(extra_names)
    if extra:
        sets.append(ReferenceSet.of(USER_SET, "user-configured commands", extra))
    return sets
