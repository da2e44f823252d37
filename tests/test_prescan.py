"""Tests for the declaration prescanner."""

import pytest

from cmdscan.scanner.prescan import collect_declarations, declarations_in_line
from cmdscan.scanner.source import SourceText


class TestDeclarationsInLine:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("FOO=bar", [("variable", "FOO")]),
            ("  out_dir=/tmp/out", [("variable", "out_dir")]),
            ("declare -a arr=(1 2 3)", [("array", "arr")]),
            ("for f in *.txt; do", [("loop variable", "f")]),
            ("function deploy {", [("function", "deploy")]),
            ("cat <<EOF", [("heredoc delimiter", "EOF")]),
            ("cat <<-'END'", [("heredoc delimiter", "END")]),
        ],
    )
    def test_forms(self, line, expected):
        assert declarations_in_line(line) == expected

    def test_loop_variable_in_string_ignored(self):
        assert declarations_in_line('echo "for x in list"') == []

    def test_loop_variable_in_comment_ignored(self):
        assert declarations_in_line("# for x in list") == []

    def test_plain_command(self):
        assert declarations_in_line("ls -la /tmp") == []

    def test_here_string_not_a_delimiter(self):
        assert declarations_in_line("cat <<< word") == []

    def test_left_shift_not_a_delimiter(self):
        assert declarations_in_line("mask=$(( 1 << bits ))") == [("variable", "mask")]


class TestCollectDeclarations:
    def test_whole_script(self):
        source = SourceText(
            "#!/bin/bash\n"
            "LOG=/var/log/app.log\n"
            "function cleanup {\n"
            "  rm -f \"$LOG\"\n"
            "}\n"
            "for i in 1 2 3; do\n"
            "  echo $i\n"
            "done\n"
        )
        assert collect_declarations(source) == {"LOG", "cleanup", "i"}

    def test_empty(self):
        assert collect_declarations(SourceText("")) == set()
