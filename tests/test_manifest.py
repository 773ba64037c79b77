"""Tests for monoseq.manifest."""

from __future__ import annotations

import json
import stat

import pytest

from monoseq.config import Config
from monoseq.manifest import (
    increment_package_version,
    link_dependencies,
    patched_manifest,
    rewrite_dependency_version,
    rewrite_version,
    strip_sibling_dependencies,
    update_dependencies,
)

MANIFEST_TEXT = """\
{
  "name": "a",
  "version": "1.0.0",
  "dependencies": {
    "b": "1.0.0",
    "lodash": "4.17.21"
  },
  "devDependencies": {
    "c": "0.1"
  }
}
"""


class TestStripSiblingDependencies:
    def test_removes_siblings_from_both_lists(self) -> None:
        data = {
            "dependencies": {"b": "1.0.0", "lodash": "4.0.0"},
            "devDependencies": {"c": "1.0.0"},
        }
        strip_sibling_dependencies(data, ["a", "b", "c"])
        assert data == {"dependencies": {"lodash": "4.0.0"}, "devDependencies": {}}

    def test_manifest_without_dependencies(self) -> None:
        data = {"name": "a"}
        assert strip_sibling_dependencies(data, ["b"]) == {"name": "a"}


class TestPatchedManifest:
    def test_strips_siblings_while_open(self, workspace: Config) -> None:
        path = workspace.manifest_path("a")
        with patched_manifest(workspace, "a") as data:
            on_disk = json.loads(path.read_text())
            assert on_disk["dependencies"] == {"lodash": "4.17.21"}
            assert data == on_disk
            assert path.with_name("package.json.orig").exists()

    def test_restores_byte_identical_on_success(self, workspace: Config) -> None:
        path = workspace.manifest_path("a")
        path.write_text(MANIFEST_TEXT)
        before = path.read_bytes()

        with patched_manifest(workspace, "a"):
            assert path.read_bytes() != before

        assert path.read_bytes() == before
        assert not path.with_name("package.json.orig").exists()

    def test_restores_byte_identical_on_error(self, workspace: Config) -> None:
        path = workspace.manifest_path("c")
        before = path.read_bytes()

        with pytest.raises(RuntimeError, match="install failed"):
            with patched_manifest(workspace, "c"):
                raise RuntimeError("install failed")

        assert path.read_bytes() == before
        assert not path.with_name("package.json.orig").exists()

    def test_restores_file_mode(self, workspace: Config) -> None:
        path = workspace.manifest_path("a")
        path.chmod(0o640)

        with patched_manifest(workspace, "a"):
            pass

        assert stat.S_IMODE(path.stat().st_mode) == 0o640


class TestRewriteVersion:
    def test_updates_version(self) -> None:
        result = rewrite_version(MANIFEST_TEXT, "1.1.0")
        assert '"version": "1.1.0",' in result
        assert json.loads(result)["dependencies"] == {"b": "1.0.0", "lodash": "4.17.21"}

    def test_preserves_formatting(self) -> None:
        text = '{\n    "name" : "a",\n    "version" : "3.2.1"\n}\n'
        assert rewrite_version(text, "4.0.0") == (
            '{\n    "name" : "a",\n    "version" : "4.0.0"\n}\n'
        )

    def test_matches_partial_versions(self) -> None:
        text = '{\n  "version": "2"\n}\n'
        assert '"version": "2.0.1"' in rewrite_version(text, "2.0.1")

    def test_leaves_prerelease_untouched(self) -> None:
        text = '{\n  "name": "a",\n  "version": "2.0.0-beta.1",\n  "private": true\n}\n'
        assert rewrite_version(text, "2.0.0") == text

    def test_leaves_inline_values_untouched(self) -> None:
        text = '{"name": "a", "version": "1.0.0"}'
        assert rewrite_version(text, "2.0.0") == text


class TestRewriteDependencyVersion:
    def test_updates_named_dependency(self) -> None:
        result = rewrite_dependency_version(MANIFEST_TEXT, "b", "1.4.0")
        assert json.loads(result)["dependencies"]["b"] == "1.4.0"
        assert json.loads(result)["version"] == "1.0.0"

    def test_does_not_match_ranges(self) -> None:
        text = '{\n  "dependencies": {\n    "b": "^1.0.0"\n  }\n}\n'
        assert rewrite_dependency_version(text, "b", "2.0.0") == text

    def test_escapes_scoped_names(self) -> None:
        text = '{\n  "dependencies": {\n    "@scope/b": "1.0.0",\n    "xscopexb": "1.0.0"\n  }\n}\n'
        result = json.loads(rewrite_dependency_version(text, "@scope/b", "1.2.0"))
        assert result["dependencies"] == {"@scope/b": "1.2.0", "xscopexb": "1.0.0"}


class TestManifestUpdates:
    def test_increment_package_version(self, workspace: Config) -> None:
        increment_package_version(workspace, "b", "2.2.0")
        data = json.loads(workspace.manifest_path("b").read_text())
        assert data["version"] == "2.2.0"

    def test_update_dependencies_pins_sibling_versions(self, workspace: Config) -> None:
        update_dependencies(workspace, "a")
        data = json.loads(workspace.manifest_path("a").read_text())
        assert data["dependencies"] == {"b": "2.1.0", "lodash": "4.17.21"}

    def test_update_dev_dependencies(self, workspace: Config) -> None:
        update_dependencies(workspace, "c")
        data = json.loads(workspace.manifest_path("c").read_text())
        assert data["devDependencies"] == {"b": "2.1.0"}

    def test_link_dependencies(self, workspace: Config) -> None:
        link_dependencies(workspace, "a")
        module = workspace.package_path("a") / "node_modules" / "b"
        assert (module / "index.js").read_text() == "module.exports = require('../../../b/')"
        assert (module / "index.d.ts").read_text() == "export * from '../../../b/index';"
        assert not (workspace.package_path("a") / "node_modules" / "lodash").exists()
