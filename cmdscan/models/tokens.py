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

"""Pydantic model for the candidate command tokens produced by the lexer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Token(BaseModel):
    """A word found in command position.

    ``line`` and ``column`` are 1-based and point at the first character
    of the word in the script.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    line: int
    column: int

    def __str__(self) -> str:
        return self.text
