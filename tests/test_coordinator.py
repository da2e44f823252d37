"""Tests for script loading, discovery and the per-script scan."""

from pathlib import Path

import pytest

from cmdscan.config import ScanSettings
from cmdscan.errors import InputError
from cmdscan.models.report import ScanStatus
from cmdscan.scanner.coordinator import (
    discover_scripts,
    is_shell_script,
    load_script,
    scan_source,
)
from cmdscan.scanner.source import SourceText


class TestLoadScript:
    def test_loads_text(self, tmp_path):
        path = tmp_path / "run.sh"
        path.write_text("echo hi\n")
        source = load_script(path)
        assert source.text == "echo hi\n"
        assert source.name == str(path)

    def test_custom_name(self, tmp_path):
        path = tmp_path / "run.sh"
        path.write_text("echo hi\n")
        assert load_script(path, name="run.sh").name == "run.sh"

    def test_missing(self, tmp_path):
        with pytest.raises(InputError, match="could not find"):
            load_script(tmp_path / "nope.sh")

    def test_directory(self, tmp_path):
        with pytest.raises(InputError, match="not a regular file"):
            load_script(tmp_path)

    def test_empty_file_rejected(self, tmp_path):
        path = tmp_path / "empty.sh"
        path.write_text("")
        with pytest.raises(InputError, match="outside the allowed range 1-50000"):
            load_script(path)

    def test_too_large(self, tmp_path):
        path = tmp_path / "big.sh"
        path.write_text("echo " + "x" * 100 + "\n")
        with pytest.raises(InputError, match="size of 106 bytes"):
            load_script(path, ScanSettings(max_size=10))

    def test_error_message_names_path(self, tmp_path):
        path = tmp_path / "nope.sh"
        with pytest.raises(InputError) as exc_info:
            load_script(path)
        assert str(exc_info.value).startswith(str(path))


class TestDiscoverScripts:
    def test_finds_by_extension_and_shebang(self, tmp_path):
        (tmp_path / "build.sh").write_text("make\n")
        (tmp_path / "deploy").write_text("#!/usr/bin/env bash\nrsync -a . host:\n")
        (tmp_path / "notes.txt").write_text("ls\n")
        (tmp_path / "tool.py").write_text("#!/usr/bin/env python3\n")
        sub = tmp_path / "lib"
        sub.mkdir()
        (sub / "util.bash").write_text("echo\n")
        git = tmp_path / ".git" / "hooks"
        git.mkdir(parents=True)
        (git / "pre-commit.sh").write_text("exit 0\n")

        found = discover_scripts(tmp_path)
        assert found == [Path("build.sh"), Path("deploy"), Path("lib/util.bash")]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(InputError, match="directory not found"):
            discover_scripts(tmp_path / "missing")

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "a.sh"
        path.write_text("ls\n")
        with pytest.raises(InputError, match="not a directory"):
            discover_scripts(path)

    def test_is_shell_script(self, tmp_path):
        path = tmp_path / "x"
        path.write_text("#!/bin/sh\n")
        assert is_shell_script(path)
        assert is_shell_script(tmp_path / "y.zsh")


class TestScanSource:
    def test_unresolved(self):
        report = scan_source(SourceText("#!/bin/bash\nVAR=foo; run_tool --flag\n", name="t.sh"))
        assert report.script == "t.sh"
        assert report.line_count == 2
        assert report.declarations == ["VAR"]
        assert report.token_count == 2
        assert report.classification.status is ScanStatus.UNRESOLVED
        assert report.classification.remainder == ["run_tool"]

    def test_heredoc_script_resolved(self):
        report = scan_source(SourceText("cat <<EOF\nls -la\nEOF\n"))
        assert report.classification.terms == ["cat", "EOF"]
        assert report.classification.status is ScanStatus.RESOLVED

    def test_heredoc_marker_credited_to_declared_stage(self):
        report = scan_source(SourceText("cat <<EOF\nls -la\nEOF\n"))
        stages = report.classification.stages
        assert stages[0].name == "declared"
        assert stages[0].removed == ["EOF"]
        assert "EOF" not in report.classification.remainder

    def test_case_statement_resolved(self):
        report = scan_source(SourceText('case "$x" in foo) echo a;; bar) echo b;; esac\n'))
        assert report.classification.terms == ["case", "echo", "esac"]
        assert report.classification.status is ScanStatus.RESOLVED

    def test_loop_variable(self):
        report = scan_source(SourceText("for i in 1 2 3; do\n  echo $i\ndone\n"))
        assert "i" in report.declarations
        assert report.classification.status is ScanStatus.RESOLVED

    def test_no_tokens(self):
        report = scan_source(SourceText("# just a comment\n"))
        assert report.classification.status is ScanStatus.NO_TOKENS

    def test_platform_changes_result(self):
        source = SourceText("osascript -e 'beep'\n")
        mac = scan_source(source, ScanSettings(platform="macos"))
        linux = scan_source(source, ScanSettings(platform="linux"))
        assert mac.classification.status is ScanStatus.RESOLVED
        assert linux.classification.remainder == ["osascript"]

    def test_extra_names(self):
        report = scan_source(SourceText("jq .\n"), ScanSettings(extra_names=["jq"]))
        assert report.classification.status is ScanStatus.RESOLVED
        assert report.classification.stages[-1].name == "user"
