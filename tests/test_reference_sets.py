"""Tests for reference set loading."""

import pytest

from cmdscan.errors import InputError
from cmdscan.policy.reference_sets import (
    available_platforms,
    build_reference_sets,
    load_reference_data,
)


class TestBundledSets:
    def test_order(self):
        sets = build_reference_sets(["helper"], "macos")
        assert [s.name for s in sets] == ["declared", "reserved", "posix", "gnu", "macos"]
        assert "helper" in sets[0]

    def test_user_names_last(self):
        sets = build_reference_sets([], "linux", extra_names=["jq", "git"])
        assert sets[-1].name == "user"
        assert "jq" in sets[-1]
        assert sets[-2].name == "linux"

    def test_membership(self):
        by_name = {s.name: s for s in build_reference_sets([], "macos")}
        assert "EOF" in by_name["reserved"]
        assert "esac" in by_name["reserved"]
        assert "echo" in by_name["posix"]
        assert "true" in by_name["posix"]
        assert "tar" in by_name["gnu"]
        assert "osascript" in by_name["macos"]
        assert "Echo" not in by_name["posix"]

    def test_platforms(self):
        assert available_platforms() == ["linux", "macos"]

    def test_unknown_platform(self):
        with pytest.raises(InputError, match="unknown platform"):
            build_reference_sets([], "beos")


class TestCustomFile:
    def test_custom_sets(self, tmp_path):
        path = tmp_path / "sets.yaml"
        path.write_text(
            "stages:\n"
            "  - name: core\n"
            "    label: Core\n"
            "    names: [ls, cat]\n"
            "platforms:\n"
            "  plan9:\n"
            "    label: Plan 9\n"
            "    names: [rc]\n"
        )
        sets = build_reference_sets([], "plan9", path=path)
        assert [s.name for s in sets] == ["declared", "core", "plan9"]
        assert available_platforms(path) == ["plan9"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="not found"):
            load_reference_data(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "sets.yaml"
        path.write_text("- ls\n- cat\n")
        with pytest.raises(InputError, match="mapping"):
            load_reference_data(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "sets.yaml"
        path.write_text("stages: [unclosed\n")
        with pytest.raises(InputError):
            load_reference_data(path)

    def test_invalid_schema(self, tmp_path):
        path = tmp_path / "sets.yaml"
        path.write_text("stages:\n  - name: x\n")
        with pytest.raises(InputError, match="invalid reference sets"):
            load_reference_data(path)
