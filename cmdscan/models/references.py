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

"""Pydantic model for the named sets of known command names."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


class ReferenceSet(BaseModel):
    """A named collection of literal names treated as "known".

    Membership is exact, case-sensitive string equality.
    """

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "posix", "declared"
    label: str  # human-readable, e.g. "POSIX commands"
    names: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def of(cls, name: str, label: str, names: Iterable[str]) -> ReferenceSet:
        return cls(name=name, label=label, names=frozenset(names))

    def __contains__(self, term: object) -> bool:
        return term in self.names

    def __len__(self) -> int:
        return len(self.names)
