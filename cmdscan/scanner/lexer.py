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

"""Lexical scanner: pick out the words that sit in command position.

This is a single left-to-right pass over the script text. It does not parse
shell grammar; it tracks just enough context (comments, quotes, here-document
bodies, case patterns) to decide whether a word is plausibly being invoked.

A word starts a candidate command when it begins with a letter and any of
these hold:

- it is the first word on its line
- it follows `` | `` (space, pipe, space)
- it follows ``;``
- it follows ``$(`` or a backtick
- the previous word was ``sudo`` or ``time``

and the character before it is not one of ``a-z A-Z [ 0-9 = / } : . _ -``.
Words of a single character are dropped.

Known, accepted misclassifications:

- unquoted comparison operands in ``[ ... ]`` can look like commands
- the word after ``sudo -u user`` is the user name, not the command
- ``&&`` and ``||`` do not start a new command position
- with ``EscapeMode.LEGACY``, ``\\\\\\"`` is read as an unescaped quote
- a here-document opener written inside a comment or string still opens
  a here-document
- a case pattern on a line without ``)`` is read as a command
- words continuing a ``for ... in`` list on the next line are read as commands
- the first operand after ``$((`` is read as a command
"""

from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, NamedTuple, Optional

from pydantic import BaseModel

from cmdscan.models.tokens import Token
from cmdscan.scanner.source import SourceText

logger = logging.getLogger(__name__)


LETTERS = frozenset(string.ascii_letters)
WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")

# Characters that, directly before a word, mean it cannot be a command name
# (part of a path, an assignment value, a ${...} expansion, an option...).
DISQUALIFYING_PREFIX = frozenset(string.ascii_letters + string.digits + "[=/}:._-")

# Words after which the next word is still a command: `sudo make`, `time ls`.
WRAPPER_WORDS = frozenset({"sudo", "time"})

CASE_ENTRY = "case"
CASE_EXIT = "esac"

HEREDOC_OPERATOR = re.compile(
    r"""(?<!<)<<(?!<)(-?)[ \t]*\\?(["']?)([A-Za-z_][A-Za-z0-9_]*)\2"""
)


class HeredocOperator(NamedTuple):
    terminator: str
    strip_tabs: bool  # `<<-` allows a tab-indented terminator


def find_heredoc_operator(line: str) -> Optional[HeredocOperator]:
    """Return the here-document opened on ``line``, if any.

    ``<<<`` is not one, and neither is a left shift inside ``((...))``.
    """
    match = HEREDOC_OPERATOR.search(line)
    if match is None:
        return None
    before = line[: match.start()]
    if before.count("((") > before.count("))"):
        return None
    return HeredocOperator(terminator=match.group(3), strip_tabs=match.group(1) == "-")


class EscapeMode(str, Enum):
    """How a backslash before a quote character is interpreted."""

    # Escaped when preceded by `\`, unless that `\` is itself preceded by `\`.
    LEGACY = "legacy"
    # Odd run of backslashes = escaped; backslash is literal inside '...'.
    STRICT = "strict"


class ScanOptions(BaseModel):
    """Knobs for a single scan. All line numbers are 1-based and inclusive."""

    escape_mode: EscapeMode = EscapeMode.LEGACY
    line_window: Optional[tuple[int, int]] = None
    trace_lines: Optional[tuple[int, int]] = None
    progress: Optional[Callable[[int], None]] = None


class Context(Enum):
    """Mutually exclusive lexical context of the current character."""

    CODE = auto()
    COMMENT = auto()
    SINGLE_QUOTE = auto()
    DOUBLE_QUOTE = auto()


class CaseState(Enum):
    OUTSIDE = auto()
    PATTERN = auto()  # inside `case`, before the `)` that ends the pattern
    BODY = auto()  # inside `case`, past the pattern


@dataclass
class ScanState:
    """Everything the scanner carries from one character to the next.

    Owned and mutated only by :class:`CommandLexer`.
    """

    line: int = 1
    column: int = 0
    line_offset: int = 0  # index of the first character of the current line
    context: Context = Context.CODE
    heredoc: Optional[HeredocOperator] = None  # set while inside a body
    pending_heredoc: Optional[HeredocOperator] = None  # body starts next line
    case: CaseState = CaseState.OUTSIDE
    line_has_paren: bool = False
    possible_command: bool = True
    after_wrapper: bool = False
    first_on_line: bool = True
    term: list[str] = field(default_factory=list)
    term_line: int = 0
    term_column: int = 0
    term_is_pattern: bool = False
    prev: str = ""
    prev2: str = ""
    prev3: str = ""
    cur: str = ""
    backslashes: int = 0  # length of the backslash run ending at `prev`

    @property
    def in_term(self) -> bool:
        return bool(self.term)


class CommandLexer:
    """Extract candidate command tokens from shell script text."""

    def __init__(self, source: SourceText, options: Optional[ScanOptions] = None) -> None:
        self._source = source
        self._options = options or ScanOptions()
        self._state = ScanState()
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the whole source once and return tokens in source order."""
        self._state = ScanState()
        self._tokens = []
        self._look_ahead(1)

        for idx, ch in enumerate(self._source):
            self._step(idx, ch)

        st = self._state
        if st.in_term:
            self._finish_term()
        text = self._source.text
        if self._options.progress is not None and text and not text.endswith("\n"):
            self._options.progress(st.line)
        return self._tokens

    # ------------------------------------------------------------------
    # Per-character transitions, in priority order
    # ------------------------------------------------------------------

    def _step(self, idx: int, ch: str) -> None:
        st = self._state
        st.backslashes = st.backslashes + 1 if st.cur == "\\" else 0
        st.prev3, st.prev2, st.prev, st.cur = st.prev2, st.prev, st.cur, ch
        st.column = idx - st.line_offset + 1

        if st.in_term and ch not in WORD_CHARS:
            self._finish_term()

        if ch == "\n":
            if self._options.progress is not None:
                self._options.progress(st.line)
            self._begin_line(st.line + 1, idx + 1)
            st.prev = st.prev2 = st.prev3 = ""
            st.backslashes = 0

        if not self._in_window():
            return

        if st.heredoc is not None:
            return

        self._update_context(ch)

        if st.context is not Context.CODE:
            return

        self._mark_command_position(ch)
        if st.case is not CaseState.OUTSIDE:
            self._update_case(ch)
        self._accumulate(ch)

    def _begin_line(self, number: int, offset: int) -> None:
        """Reset per-line flags and do the once-per-line heredoc lookahead."""
        st = self._state
        st.line = number
        st.line_offset = offset
        if st.context is Context.COMMENT:
            st.context = Context.CODE
        st.possible_command = False
        st.after_wrapper = False
        st.first_on_line = True
        if st.case is CaseState.BODY:
            st.case = CaseState.PATTERN
        self._look_ahead(number)

    def _look_ahead(self, number: int) -> None:
        st = self._state
        text = self._source.line(number)
        st.line_has_paren = ")" in text

        if st.pending_heredoc is not None:
            st.heredoc, st.pending_heredoc = st.pending_heredoc, None
        if st.heredoc is not None:
            candidate = text.lstrip("\t") if st.heredoc.strip_tabs else text
            # Only the start of the line is checked; `EOFX` also closes `EOF`.
            if candidate.startswith(st.heredoc.terminator):
                self._trace("Found end of heredoc '%s' on line %d", st.heredoc.terminator, number)
                st.heredoc = None
        if st.heredoc is None:
            opener = find_heredoc_operator(text)
            if opener is not None and self._line_in_window(number):
                self._trace("Found start of heredoc '%s' on line %d", opener.terminator, number)
                st.pending_heredoc = opener

    def _update_context(self, ch: str) -> None:
        st = self._state
        if ch == "#" and st.context is Context.CODE and st.prev not in ("$", "{"):
            self._trace("Entered comment on line %d", st.line)
            st.context = Context.COMMENT
        elif ch == "'" and not self._quote_escaped(ch):
            if st.context is Context.CODE:
                st.context = Context.SINGLE_QUOTE
            elif st.context is Context.SINGLE_QUOTE:
                st.context = Context.CODE
            else:
                return
            self._trace("Single quote toggled on line %d col %d", st.line, st.column)
        elif ch == '"' and not self._quote_escaped(ch):
            if st.context is Context.CODE:
                st.context = Context.DOUBLE_QUOTE
            elif st.context is Context.DOUBLE_QUOTE:
                st.context = Context.CODE
            else:
                return
            self._trace("Double quote toggled on line %d col %d", st.line, st.column)

    def _quote_escaped(self, ch: str) -> bool:
        st = self._state
        if self._options.escape_mode is EscapeMode.LEGACY:
            return st.prev == "\\" and st.prev2 != "\\"
        if ch == "'" and st.context is Context.SINGLE_QUOTE:
            return False
        return st.backslashes % 2 == 1

    def _mark_command_position(self, ch: str) -> None:
        st = self._state
        if (st.prev == "" or st.prev.isspace()) and st.first_on_line and ch in LETTERS:
            self._trace("Possible command: first word on line %d", st.line)
            st.possible_command = True
        if st.prev3 == " " and st.prev2 == "|" and st.prev == " ":
            self._trace("Possible command after ' | ' on line %d", st.line)
            st.possible_command = True
        elif st.prev == ";":
            self._trace("Possible command after ';' on line %d", st.line)
            st.possible_command = True
        elif (st.prev2 == "$" and st.prev == "(") or st.prev == "`":
            self._trace("Possible command after command substitution on line %d", st.line)
            st.possible_command = True

    def _update_case(self, ch: str) -> None:
        st = self._state
        if st.case is CaseState.PATTERN:
            if ch == ")" or not st.line_has_paren:
                self._trace("Past case pattern on line %d", st.line)
                st.case = CaseState.BODY
                if ch == ")":
                    st.possible_command = True
        elif ch == ";" and st.prev == ";" and st.line_has_paren:
            st.case = CaseState.PATTERN

    def _accumulate(self, ch: str) -> None:
        st = self._state
        if not st.in_term:
            if (
                ch in LETTERS
                and (st.possible_command or st.after_wrapper)
                and st.prev not in DISQUALIFYING_PREFIX
            ):
                st.term_line = st.line
                st.term_column = st.column
                st.term_is_pattern = st.case is CaseState.PATTERN
            else:
                return
        if not st.term_is_pattern:
            st.first_on_line = False
        st.term.append(ch)

    def _finish_term(self) -> None:
        st = self._state
        text = "".join(st.term)
        st.term = []

        if st.term_is_pattern and text != CASE_EXIT:
            self._trace("Skipped case pattern '%s' on line %d", text, st.line)
            return

        if len(text) > 1:
            self._trace("Found term '%s' on line %d", text, st.line)
            self._tokens.append(Token(text=text, line=st.term_line, column=st.term_column))
            st.after_wrapper = text in WRAPPER_WORDS
            if text == CASE_ENTRY:
                self._trace("Entering case statement on line %d", st.line)
                st.case = CaseState.PATTERN
            elif text == CASE_EXIT:
                self._trace("Exiting case statement on line %d", st.line)
                st.case = CaseState.OUTSIDE

        st.possible_command = False
        st.first_on_line = False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _line_in_window(self, number: int) -> bool:
        window = self._options.line_window
        return window is None or window[0] <= number <= window[1]

    def _in_window(self) -> bool:
        return self._line_in_window(self._state.line)

    def _trace(self, msg: str, *args: object) -> None:
        lines = self._options.trace_lines
        if lines is not None and lines[0] <= self._state.line <= lines[1]:
            logger.debug(msg, *args)


def scan_commands(source: SourceText, options: Optional[ScanOptions] = None) -> list[Token]:
    """Return every word in command position, in source order."""
    return CommandLexer(source, options).tokenize()
