"""Data models for monoseq.

These Pydantic models represent the manifests, registry metadata and
per-package release state used throughout the release pipeline.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class PublishConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    tag: str | None = None


class Manifest(BaseModel):
    """The parts of a package.json that monoseq reads.

    Attributes:
        name: Package name as published to the registry.
        version: Current version string.
        dependencies: Runtime dependencies, name → version range.
        dev_dependencies: Development dependencies, name → version range.
        scripts: npm scripts, task name → command.
        publish_config: Optional publish settings (only ``tag`` is used).
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    version: str = "0.0.0"
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="devDependencies"
    )
    scripts: dict[str, str] = Field(default_factory=dict)
    publish_config: PublishConfig | None = Field(default=None, alias="publishConfig")

    def has_dependency(self, name: str) -> bool:
        """True if ``name`` is a regular or dev dependency."""
        return name in self.dependencies or name in self.dev_dependencies

    def has_script(self, task: str) -> bool:
        return task in self.scripts

    @property
    def dist_tag(self) -> str:
        """Registry dist-tag this package publishes under."""
        if self.publish_config and self.publish_config.tag:
            return self.publish_config.tag
        return "latest"


class Package(BaseModel):
    """A package in the monorepo.

    Attributes:
        dir: Directory name below the packages directory. Commit scopes and
             sibling dependency names refer to packages by this name.
        manifest: Manifest as read at the start of the current operation.
    """

    dir: str
    manifest: Manifest

    @property
    def name(self) -> str:
        return self.manifest.name


class BumpKind(IntEnum):
    """Magnitude of a version increment, ordered by escalation."""

    PATCH = 0
    MINOR = 1
    MAJOR = 2

    def __str__(self) -> str:
        return self.name.lower()


class Commit(BaseModel):
    """A commit message parsed with conventional commit structure.

    Attributes:
        hash: Abbreviated commit hash.
        type: Commit type (feat, fix, ...), None if the header is not
              conventional.
        scope: Scope in parentheses, None when absent.
        header: First line of the message.
        body: Text between the header and the footer.
        footer: Trailing notes such as "BREAKING CHANGE:".
        touches_manifest: Whether the commit changed the package manifest.
    """

    hash: str
    type: str | None = None
    scope: str | None = None
    subject: str | None = None
    header: str
    body: str | None = None
    footer: str | None = None
    breaking_header: bool = False
    touches_manifest: bool = False


class RegistryVersion(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    version: str
    git_head: str | None = Field(default=None, alias="gitHead")


class RegistryMetadata(BaseModel):
    """Published metadata ("packument") for a package."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    dist_tags: dict[str, str] = Field(default_factory=dict, alias="dist-tags")
    versions: dict[str, RegistryVersion] = Field(default_factory=dict)


class ReleaseState(BaseModel):
    """Release facts for one package, built fresh on every run.

    Attributes:
        registry_metadata: Published metadata, None if never published.
        manifest: Manifest as read when the state was resolved.
        dist_tag: Registry dist-tag the package publishes under.
        last_published_version: Version under ``dist_tag``, if any.
        last_released_commit_hash: Commit (or tag) history is collected from.
        commits: Commits scoped to the package since the last release,
                 newest first.
        bump: Inferred version increment.
        next_version: Version the next release should carry.
    """

    registry_metadata: RegistryMetadata | None = None
    manifest: Manifest
    dist_tag: str = "latest"
    last_published_version: str | None = None
    last_released_commit_hash: str | None = None
    commits: list[Commit] = Field(default_factory=list)
    bump: BumpKind = BumpKind.PATCH
    next_version: str | None = None

    @property
    def release_required(self) -> bool:
        return len(self.commits) > 0
