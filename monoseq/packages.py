"""Package discovery.

Packages are the directories below the configured packages directory, each
holding a package.json. Manifests are read fresh for every operation because
release steps rewrite them mid-run.
"""

from __future__ import annotations

import json

from .config import Config
from .errors import MissingManifestError
from .graph import order_by_dependency
from .models import Manifest, Package


def list_packages(config: Config) -> list[str]:
    """Return package directory names in sorted (discovery) order."""
    if not config.packages_path.is_dir():
        raise MissingManifestError(f"No packages directory at {config.packages_path}")
    return sorted(p.name for p in config.packages_path.iterdir() if p.is_dir())


def read_manifest(config: Config, package_dir: str) -> Manifest:
    """Parse a package's package.json.

    Raises:
        MissingManifestError: If the package has no package.json.
    """
    path = config.manifest_path(package_dir)
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError as exc:
        raise MissingManifestError(f"No package.json in {path.parent}") from exc
    data.setdefault("name", package_dir)
    return Manifest.model_validate(data)


def read_package(config: Config, package_dir: str) -> Package:
    return Package(dir=package_dir, manifest=read_manifest(config, package_dir))


def get_ordered_packages(config: Config) -> list[Package]:
    """Discover all packages and order them dependencies first."""
    packages = [read_package(config, d) for d in list_packages(config)]
    return order_by_dependency(packages)


def sibling_dependencies(config: Config, manifest: Manifest) -> list[str]:
    """Return sibling package directories ``manifest`` depends on.

    Dev dependencies are listed before regular ones.
    """
    siblings = list_packages(config)
    ordered = [d for d in siblings if d in manifest.dev_dependencies] + [
        d for d in siblings if d in manifest.dependencies
    ]
    return list(dict.fromkeys(ordered))
