"""Tests for canonical JSON output."""

import json

from cmdscan.models.report import ClassificationResult, ScanReport, ScanStatus, ScriptReport
from cmdscan.reporter.json_out import to_canonical_json, write_report


def _report():
    return ScanReport(
        scan_target="deploy.sh",
        scripts=[
            ScriptReport(
                script="deploy.sh",
                line_count=3,
                classification=ClassificationResult(
                    status=ScanStatus.UNRESOLVED,
                    terms=["echo", "kubectl"],
                    remainder=["kubectl"],
                ),
            )
        ],
    )


class TestCanonicalJson:
    def test_sorted_and_terminated(self):
        assert to_canonical_json({"b": 1, "a": 2}) == '{\n  "a": 2,\n  "b": 1\n}\n'

    def test_single_trailing_newline(self):
        text = to_canonical_json(_report())
        assert text.endswith("}\n")
        assert not text.endswith("\n\n")

    def test_model(self):
        data = json.loads(to_canonical_json(_report()))
        assert data["scan_target"] == "deploy.sh"
        assert data["scripts"][0]["classification"]["status"] == "unresolved"
        assert data["scripts"][0]["classification"]["remainder"] == ["kubectl"]

    def test_write_report(self, tmp_path):
        out = tmp_path / "reports" / "scan.json"
        write_report(_report(), out)
        text = out.read_text(encoding="utf-8")
        assert "\r" not in text
        assert json.loads(text)["platform"] == "macos"


class TestScanReport:
    def test_unresolved_union(self):
        report = _report()
        report.scripts.append(
            ScriptReport(
                script="other.sh",
                classification=ClassificationResult(
                    status=ScanStatus.UNRESOLVED, remainder=["helm", "kubectl"]
                ),
            )
        )
        assert report.unresolved == ["kubectl", "helm"]
