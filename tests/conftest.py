"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from monoseq.config import Config

WriteWorkspace = Callable[[dict[str, dict[str, Any]]], Config]


def write_manifest(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


@pytest.fixture
def make_workspace(tmp_path: Path) -> WriteWorkspace:
    """Return a factory writing packages/<dir>/package.json for each entry."""

    def _make(manifests: dict[str, dict[str, Any]]) -> Config:
        for package_dir, data in manifests.items():
            write_manifest(tmp_path / "packages" / package_dir / "package.json", data)
        return Config(root=tmp_path, env={})

    return _make


@pytest.fixture
def workspace(make_workspace: WriteWorkspace) -> Config:
    """Workspace where a depends on b and c dev-depends on b."""
    return make_workspace(
        {
            "a": {
                "name": "a",
                "version": "1.0.0",
                "dependencies": {"b": "1.0.0", "lodash": "4.17.21"},
                "scripts": {"test": "ava"},
            },
            "b": {"name": "b", "version": "2.1.0"},
            "c": {
                "name": "c",
                "version": "0.3.0",
                "devDependencies": {"b": "2.0.0"},
            },
        }
    )
