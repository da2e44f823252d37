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

"""Immutable script text with a line-start index for one-line lookahead."""

from __future__ import annotations

from typing import Iterator


class SourceText:
    """Script content addressable by character offset and by line number.

    Line-start offsets are computed once so that looking at a whole line
    (heredoc and case detection) never re-reads the text from the top.
    """

    __slots__ = ("_text", "_starts", "name")

    def __init__(self, text: str, name: str = "<script>") -> None:
        self._text = text
        self.name = name
        starts = [0]
        for idx, ch in enumerate(text):
            if ch == "\n":
                starts.append(idx + 1)
        self._starts = starts

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __iter__(self) -> Iterator[str]:
        return iter(self._text)

    def __repr__(self) -> str:
        return f"SourceText(name={self.name!r}, chars={len(self._text)})"

    @property
    def line_count(self) -> int:
        """Number of lines as ``wc -l`` would report, plus an unterminated last line."""
        newlines = len(self._starts) - 1
        if self._text and not self._text.endswith("\n"):
            return newlines + 1
        return newlines

    def line(self, number: int) -> str:
        """Return line ``number`` (1-based) without its trailing newline.

        Lines past the end of the text are returned as ``""``.
        """
        if number < 1 or number > len(self._starts):
            return ""
        start = self._starts[number - 1]
        if number < len(self._starts):
            end = self._starts[number] - 1
        else:
            end = len(self._text)
        return self._text[start:end]

    def lines(self) -> Iterator[tuple[int, str]]:
        """Yield ``(line_number, line_text)`` pairs for every line."""
        for number in range(1, len(self._starts) + 1):
            if number == len(self._starts) and self._starts[-1] == len(self._text):
                # Nothing after the final newline.
                return
            yield number, self.line(number)
