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

"""Exceptions raised by cmdscan.

Only problems with the input (the script file or the configuration) are
raised. Scanning itself never fails: malformed shell text always yields
some, possibly empty, result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CmdscanError(Exception):
    """Base class for all cmdscan errors."""


class InputError(CmdscanError):
    """The script or configuration cannot be used; the scan does not start."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{self.path}: {message}"
        return message
