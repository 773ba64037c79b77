"""Publishing: tag the release commit, push, and publish from a clean clone.

Publishing is idempotent. A package whose manifest version is already on
the registry, or whose release tag already exists, is reported and skipped.
The package is never published from the live working tree; a fresh clone of
the remote is checked out at the release tag instead.
"""

from __future__ import annotations

import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import Config
from .errors import ConfigurationError, ReleaseCommitNotFoundError
from .models import Commit, ReleaseState
from .packages import read_manifest
from .registry import RegistryClient
from .release import get_release_commits, get_release_data
from .shell import git, npm

REMOTE_PATTERN = re.compile(r"^\w+\s+(\S+)\s+\(\w+\)$", re.MULTILINE)


def release_tag(name: str, version: str) -> str:
    return f"{name}-{version}"


def find_release_commit(state: ReleaseState) -> Commit:
    """Return the newest scoped commit that changed the package manifest.

    Raises:
        ReleaseCommitNotFoundError: If no such commit exists.
    """
    for commit in state.commits:
        if commit.touches_manifest:
            return commit
    raise ReleaseCommitNotFoundError("No release commit found")


def remote_url(config: Config) -> str:
    """Return the URL of the first configured git remote."""
    match = REMOTE_PATTERN.search(git(config.root, "remote", "-v", env=config.env))
    if not match:
        raise ConfigurationError("No git remote configured to publish from")
    return match.group(1)


@contextmanager
def publish_checkout() -> Iterator[Path]:
    """Provide a path for a temporary publish clone outside the working tree.

    The path does not exist yet; git clone creates it. The enclosing
    temporary directory is removed on every exit path, whether publishing
    succeeded or failed.
    """
    with tempfile.TemporaryDirectory(prefix="monoseq-publish-") as tmp:
        yield Path(tmp) / "repo"


def publish_package(config: Config, package_dir: str, registry: RegistryClient) -> bool:
    """Tag, push and publish the current version of a package.

    Returns:
        False after publishing, so the remaining packages are skipped; True
        if the version was already published or already tagged.

    Raises:
        ReleaseCommitNotFoundError: If no commit since the last release
            changed the package manifest.
    """
    manifest = read_manifest(config, package_dir)
    state = get_release_data(config, package_dir, registry.fetch(manifest.name))
    if state.last_published_version == manifest.version:
        print(f"No publish for {package_dir} required; Already published to npm")
        return True

    cwd = config.package_path(package_dir)
    tag = release_tag(manifest.name, manifest.version)
    if tag in git(cwd, "tag", env=config.env).splitlines():
        commit_hash = git(
            cwd, "rev-list", "--abbrev-commit", "-n", "1", tag, env=config.env
        )
        print(
            f"No git tag for {package_dir} required; "
            f"Already tagged commit {commit_hash}"
        )
        return True

    commit = find_release_commit(get_release_commits(config, package_dir, state))
    git(config.root, "tag", tag, commit.hash, env=config.env)
    git(config.root, "push", "--tags", env=config.env)
    url = remote_url(config)

    with publish_checkout() as clone:
        git(config.root, "clone", url, str(clone), env=config.env)
        git(clone, "checkout", tag, env=config.env)
        package_path = clone / config.packages_dir / package_dir
        npm(package_path, "install", env=config.env)
        npm(package_path, "publish", env=config.env)

    print(f"Published {tag} from commit {commit.hash}")
    return False
