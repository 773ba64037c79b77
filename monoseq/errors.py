"""Exception types raised by monoseq.

Every failure that should abort a run derives from MonoseqError. Conditions
that only mean "nothing to do" (a package never published, a release already
tagged) are reported as values, never raised.
"""

from __future__ import annotations

from collections.abc import Sequence


class MonoseqError(Exception):
    """Base class for all monoseq errors."""


class ConfigurationError(MonoseqError):
    """The workspace or monoseq.toml is not in a usable state."""


class MissingManifestError(ConfigurationError):
    """A package directory or a sibling dependency has no matching manifest."""


class DependencyCycleError(ConfigurationError):
    """Packages depend on each other in a cycle."""

    def __init__(self, remaining: Sequence[str]) -> None:
        self.remaining = list(remaining)
        super().__init__(
            f"Dependency cycle detected involving: {', '.join(self.remaining)}"
        )


class DirtyWorkspaceError(ConfigurationError):
    """The git workspace has uncommitted changes."""


class ReleaseCommitNotFoundError(ConfigurationError):
    """No commit since the last release touched the package manifest."""


class NoHistoryError(MonoseqError):
    """The repository has no commit to start collecting history from."""


class RegistryError(MonoseqError):
    """Fetching registry metadata failed for a reason other than not-found."""


class CommandError(MonoseqError):
    """A subprocess exited with a non-zero status."""

    def __init__(self, cmd: Sequence[str], returncode: int, output: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output
        message = f"'{' '.join(self.cmd)}' exited with status {returncode}"
        if output.strip():
            message += f"\n{output.rstrip()}"
        super().__init__(message)
