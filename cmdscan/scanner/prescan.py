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

"""Declaration prescanner: names a script binds locally.

Each line is matched on its own with a handful of regexes, without any
knowledge of quoting or comments. A binding form that appears inside a
comment or string is therefore still collected; the scanner accepts the
resulting false negatives.

Recognized forms:
- ``NAME=`` at the start of a line (simple assignment)
- ``declare ... NAME=`` (arrays and declared variables)
- ``for NAME`` (loop variables), unless ``#`` or a quote precedes ``for``
- ``function NAME`` (named functions)
- here-document delimiters (``<<EOF``), so the closing marker line is
  never reported as a command

Delimiters are not bindings in the shell sense. Collecting them means a
marker such as ``EOF`` is removed by the ``declared`` stage, ahead of the
reserved-word stage that also lists it; the final remainder is the same.
"""

from __future__ import annotations

import logging
import re

from cmdscan.scanner.lexer import find_heredoc_operator
from cmdscan.scanner.source import SourceText

logger = logging.getLogger(__name__)

VAR_ASSIGNMENT = re.compile(r"^\s*([A-Za-z0-9_]+)=")
DECLARE_LINE = re.compile(r"^\s*declare")
DECLARED_NAME = re.compile(r"([A-Za-z0-9_]+)=")
FOR_VARIABLE = re.compile(r"for ([A-Za-z0-9_]+)")
FOR_IN_COMMENT_OR_STRING = re.compile(r"""[#"'].*for""")
FUNCTION_NAME = re.compile(r"function ([A-Za-z0-9_]+)")


def declarations_in_line(line: str) -> list[tuple[str, str]]:
    """Return ``(kind, name)`` for every binding found on a single line."""
    found: list[tuple[str, str]] = []

    match = VAR_ASSIGNMENT.match(line)
    if match:
        found.append(("variable", match.group(1)))

    if DECLARE_LINE.match(line):
        for name in DECLARED_NAME.findall(line):
            found.append(("array", name))

    if FOR_VARIABLE.search(line) and not FOR_IN_COMMENT_OR_STRING.search(line):
        for name in FOR_VARIABLE.findall(line):
            found.append(("loop variable", name))

    for name in FUNCTION_NAME.findall(line):
        found.append(("function", name))

    heredoc = find_heredoc_operator(line)
    if heredoc is not None:
        found.append(("heredoc delimiter", heredoc.terminator))

    return found


def collect_declarations(source: SourceText) -> set[str]:
    """Collect every locally bound identifier in ``source``."""
    declared: set[str] = set()
    for line_num, line in source.lines():
        for kind, name in declarations_in_line(line):
            logger.debug("Picked up %s '%s' on line %d", kind, name, line_num)
            declared.add(name)
    return declared
