"""npm invocations scoped to a package directory."""

from __future__ import annotations

from .config import Config
from .packages import read_manifest
from .shell import npm


def npm_in_package(config: Config, package_dir: str, *args: str) -> None:
    npm(config.package_path(package_dir), *args, env=config.env)


def run_script(config: Config, package_dir: str, task: str) -> None:
    """Run ``npm run <task>`` if the package declares that script."""
    if not read_manifest(config, package_dir).has_script(task):
        print(f"No {task} script for {package_dir}")
        return
    npm_in_package(config, package_dir, "run", task)
