"""Release resolution and the per-package release step.

For each package the resolver answers: what was last published, which
commits since then belong to this package, and which version comes next.

1. Fetch registry metadata (None if never published)
2. Pick the dist-tag from publishConfig.tag, defaulting to "latest"
3. Find the last published version and the commit it was built from
4. Fall back to the repository's first commit for unpublished packages
5. Collect commits since then whose conventional scope is the package dir
6. Mark commits that changed the package manifest
7. Infer the bump and compute the next version
"""

from __future__ import annotations

from .commits import LOG_FORMAT, format_commit_list, infer_bump, parse_log
from .config import Config
from .errors import CommandError, DirtyWorkspaceError, NoHistoryError
from .manifest import increment_package_version, update_dependencies
from .models import RegistryMetadata, ReleaseState
from .npm import run_script
from .packages import read_manifest
from .registry import RegistryClient
from .shell import git
from .versions import bump_version


def first_commit(config: Config, package_dir: str) -> str:
    """Return the root commit reachable from HEAD.

    Raises:
        NoHistoryError: If the repository has no commits.
    """
    try:
        output = git(
            config.package_path(package_dir),
            "rev-list",
            "--abbrev-commit",
            "--max-parents=0",
            "HEAD",
            env=config.env,
        )
    except CommandError as exc:
        raise NoHistoryError(
            f"Unable to find the first commit for {package_dir}"
        ) from exc
    if not output:
        raise NoHistoryError(f"Unable to find the first commit for {package_dir}")
    # Repositories with merged histories have several roots; use the oldest
    return output.splitlines()[-1]


def get_release_data(
    config: Config, package_dir: str, metadata: RegistryMetadata | None
) -> ReleaseState:
    """Determine the last published version and the commit it came from."""
    manifest = read_manifest(config, package_dir)
    state = ReleaseState(
        registry_metadata=metadata, manifest=manifest, dist_tag=manifest.dist_tag
    )
    if metadata:
        last_version = metadata.dist_tags.get(state.dist_tag)
        if last_version:
            state.last_published_version = last_version
            info = metadata.versions.get(last_version)
            if info and info.git_head:
                state.last_released_commit_hash = info.git_head
            elif info:
                state.last_released_commit_hash = f"{info.name}-{info.version}"
            else:
                state.last_released_commit_hash = f"{manifest.name}-{last_version}"

    if not state.last_released_commit_hash:
        state.last_released_commit_hash = first_commit(config, package_dir)
    return state


def get_release_commits(
    config: Config, package_dir: str, state: ReleaseState
) -> ReleaseState:
    """Collect commits since the last release scoped to this package.

    Only commits touching the package directory whose conventional scope
    equals the directory name are kept, newest first.
    """
    cwd = config.package_path(package_dir)
    output = git(
        cwd,
        "log",
        f"--format={LOG_FORMAT}",
        f"{state.last_released_commit_hash}..HEAD",
        "--",
        ".",
        env=config.env,
    )
    commits = [c for c in parse_log(output) if c.scope == package_dir]

    # Paths relative to root, which need not be the git top-level directory
    manifest_path = config.manifest_relpath(package_dir)
    for commit in commits:
        changed = git(
            config.root,
            "show",
            "--name-only",
            "--relative",
            "--format=",
            commit.hash,
            env=config.env,
        )
        commit.touches_manifest = manifest_path in changed.splitlines()

    state.commits = commits
    return state


def get_next_version(state: ReleaseState) -> ReleaseState:
    """Infer the bump and the next version.

    Without a published baseline the manifest version is released as-is,
    and without scoped commits the version does not change.
    """
    state.bump = infer_bump(state.commits)
    if state.last_published_version and state.release_required:
        state.next_version = bump_version(state.last_published_version, state.bump)
    else:
        state.next_version = state.manifest.version
    return state


def resolve_release(
    config: Config, package_dir: str, registry: RegistryClient
) -> ReleaseState:
    """Build the full ReleaseState for a package."""
    metadata = registry.fetch(read_manifest(config, package_dir).name)
    state = get_release_data(config, package_dir, metadata)
    state = get_release_commits(config, package_dir, state)
    return get_next_version(state)


def print_release_summary(package_dir: str, state: ReleaseState) -> None:
    print(f"Release test for {package_dir} results:")
    print(f"  * Required: {str(state.release_required).lower()}")
    print(f"  * Version increment: {state.bump!s}")
    print(f"  * Next Version: {state.next_version}")
    print()
    print("  Commits:")
    print(format_commit_list(state.commits, "    ", "\n"))


def ensure_clean_workspace(config: Config) -> None:
    """Raise DirtyWorkspaceError if git reports uncommitted changes."""
    if git(config.root, "status", "--porcelain", env=config.env):
        raise DirtyWorkspaceError("Git workspace not clean!")


def preview_release(
    config: Config, package_dir: str, registry: RegistryClient
) -> ReleaseState:
    """Resolve and print what a release would do, without changing anything."""
    state = resolve_release(config, package_dir, registry)
    print_release_summary(package_dir, state)
    return state


def release_package(config: Config, package_dir: str, registry: RegistryClient) -> bool:
    """Prepare and commit a release of one package.

    Rewrites the manifest to the next version, pins sibling dependencies to
    their current versions, runs the package's ``release`` and ``test``
    scripts, and commits the result.

    Returns:
        False after a release commit was created, so the remaining packages
        are skipped; True if nothing had to be committed.

    Raises:
        DirtyWorkspaceError: If the workspace has uncommitted changes.
    """
    ensure_clean_workspace(config)
    state = resolve_release(config, package_dir, registry)
    if not state.release_required:
        print(f"No release for {package_dir} required")
        return True

    print_release_summary(package_dir, state)
    increment_package_version(config, package_dir, state.next_version)
    update_dependencies(config, package_dir)
    run_script(config, package_dir, "release")
    run_script(config, package_dir, "test")

    if not git(config.root, "status", "--porcelain", env=config.env):
        return True

    message = f"chore({package_dir}): releases {state.next_version}\n\n" + (
        format_commit_list(state.commits, "* ", "\n")
    )
    git(config.root, "add", ".", env=config.env)
    git(config.root, "commit", "-m", message, env=config.env)
    print(f"Committed release {state.next_version} of {package_dir}")
    return False
