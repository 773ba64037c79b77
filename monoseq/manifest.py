"""Manifest (package.json) patching.

Two kinds of edits are made to manifests:

1. Scoped patches: sibling packages are removed from the dependency lists
   while npm runs, since they are linked locally instead of installed from
   the registry. The original file is always restored afterwards.
2. Version rewrites: the package version and sibling dependency versions are
   replaced in the serialized text, so the rest of the file keeps its
   formatting and the release commit diff stays minimal.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from .config import Config
from .packages import list_packages, read_manifest, sibling_dependencies

# "<key>": "<digits>(.digits(.digits)?)?" with an optional trailing comma.
# Prerelease and range values are not matched.
FIELD_PATTERN = r'^(\s*"{key}"\s*:\s*")\d+(?:\.\d+(?:\.\d+)?)?("\s*(?:,\s*)?)$'

DEPENDENCY_KEYS = ("dependencies", "devDependencies")


def strip_sibling_dependencies(
    data: dict[str, Any], siblings: Iterable[str]
) -> dict[str, Any]:
    """Remove sibling packages from dependencies and devDependencies in place."""
    for key in DEPENDENCY_KEYS:
        deps = data.get(key)
        if isinstance(deps, dict):
            for sibling in siblings:
                deps.pop(sibling, None)
    return data


@contextmanager
def patched_manifest(config: Config, package_dir: str) -> Iterator[dict[str, Any]]:
    """Strip sibling dependencies from a manifest for the duration of a block.

    The manifest is backed up to package.json.orig first and moved back on
    every exit path, so the file on disk is byte-identical afterwards even if
    the block raises.

    Yields:
        The patched manifest data as written to disk.
    """
    path = config.manifest_path(package_dir)
    backup = path.with_name(path.name + ".orig")
    shutil.copy2(path, backup)
    try:
        data = json.loads(path.read_text())
        strip_sibling_dependencies(data, list_packages(config))
        path.write_text(json.dumps(data, indent=2) + "\n")
        yield data
    finally:
        os.replace(backup, path)


def _rewrite_field(content: str, key: str, value: str) -> str:
    pattern = re.compile(FIELD_PATTERN.format(key=re.escape(key)), re.MULTILINE)
    return pattern.sub(lambda m: f"{m.group(1)}{value}{m.group(2)}", content)


def rewrite_version(content: str, version: str) -> str:
    """Set the "version" field in serialized manifest text."""
    return _rewrite_field(content, "version", version)


def rewrite_dependency_version(content: str, dependency: str, version: str) -> str:
    """Set every "<dependency>" field in serialized manifest text."""
    return _rewrite_field(content, dependency, version)


def update_manifest(
    config: Config, package_dir: str, fn: Callable[[str], str]
) -> None:
    """Rewrite a manifest's text through ``fn``."""
    path = config.manifest_path(package_dir)
    path.write_text(fn(path.read_text()))


def increment_package_version(config: Config, package_dir: str, version: str) -> None:
    update_manifest(config, package_dir, lambda text: rewrite_version(text, version))


def update_dependencies(config: Config, package_dir: str) -> None:
    """Pin sibling dependencies to the siblings' current manifest versions."""
    path = config.manifest_path(package_dir)
    content = path.read_text()
    for dependency in sibling_dependencies(config, read_manifest(config, package_dir)):
        version = read_manifest(config, dependency).version
        content = rewrite_dependency_version(content, dependency, version)
    path.write_text(content)


def link_dependencies(config: Config, package_dir: str) -> None:
    """Point node_modules entries for sibling dependencies at the siblings.

    Each sibling gets an index.js / index.d.ts pair re-exporting the
    sibling's package directory.
    """
    manifest = read_manifest(config, package_dir)
    for dependency in sibling_dependencies(config, manifest):
        module_path = config.package_path(package_dir) / "node_modules" / dependency
        module_path.mkdir(parents=True, exist_ok=True)
        (module_path / "index.js").write_text(
            f"module.exports = require('../../../{dependency}/')"
        )
        (module_path / "index.d.ts").write_text(
            f"export * from '../../../{dependency}/index';"
        )
