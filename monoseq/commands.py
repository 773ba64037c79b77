"""Per-package commands and the loop that applies them to every package.

Each command takes the run Config, a RegistryClient and a package directory
(plus command arguments) and returns either a value or False. False stops the
run for the remaining packages.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from typing import Any

from .config import Config
from .manifest import link_dependencies, patched_manifest
from .npm import npm_in_package, run_script
from .packages import get_ordered_packages
from .publish import publish_package
from .registry import RegistryClient
from .release import preview_release, release_package
from .runner import for_each
from .shell import step

Command = Callable[..., Any]


def cmd_bootstrap(config: Config, registry: RegistryClient, package_dir: str) -> None:
    """Install external dependencies and link sibling packages."""
    step(f"Bootstrapping {package_dir}")
    with patched_manifest(config, package_dir):
        npm_in_package(config, package_dir, "install")
        npm_in_package(config, package_dir, "prune")
    link_dependencies(config, package_dir)


def cmd_reset(config: Config, registry: RegistryClient, package_dir: str) -> None:
    """Remove the package's node_modules."""
    step(f"Reset {package_dir}")
    node_modules = config.package_path(package_dir) / "node_modules"
    if node_modules.exists():
        shutil.rmtree(node_modules)


def cmd_test_release(
    config: Config, registry: RegistryClient, package_dir: str
) -> None:
    step(f"Test {package_dir} for release")
    preview_release(config, package_dir, registry)


def cmd_release(config: Config, registry: RegistryClient, package_dir: str) -> bool:
    step(f"Release {package_dir}")
    return release_package(config, package_dir, registry)


def cmd_publish(config: Config, registry: RegistryClient, package_dir: str) -> bool:
    step(f"Publish {package_dir}")
    return publish_package(config, package_dir, registry)


def cmd_run(
    config: Config, registry: RegistryClient, package_dir: str, task: str
) -> None:
    step(f"Running npm script '{task}' in {package_dir}")
    run_script(config, package_dir, task)


def cmd_npm(
    config: Config, registry: RegistryClient, package_dir: str, *args: str
) -> None:
    """Run an arbitrary npm command with sibling dependencies hidden."""
    step(f"Running 'npm {' '.join(args)}' in {package_dir}")
    with patched_manifest(config, package_dir):
        npm_in_package(config, package_dir, *args)


COMMANDS: dict[str, Command] = {
    "bootstrap": cmd_bootstrap,
    "reset": cmd_reset,
    "testRelease": cmd_test_release,
    "release": cmd_release,
    "publish": cmd_publish,
    "run": cmd_run,
    "npm": cmd_npm,
}


def run_on_packages(
    config: Config,
    command: str,
    args: tuple[str, ...] = (),
    registry: RegistryClient | None = None,
) -> Any:
    """Apply ``command`` to every package in dependency order.

    Returns:
        The runner's result: False if a package stopped the run.
    """
    task = COMMANDS[command]
    if registry is None:
        registry = RegistryClient(config.registry_url, timeout=config.registry_timeout)
    order = [package.dir for package in get_ordered_packages(config)]
    return for_each(
        order, lambda package_dir: task(config, registry, package_dir, *args)
    )
