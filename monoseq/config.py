"""Run configuration.

Every operation receives a Config instead of reading the current directory
or the process environment on its own.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError
from .toml import get_settings, load_toml

CONFIG_FILE = "monoseq.toml"
DEFAULT_REGISTRY = "https://registry.npmjs.org"


class Config(BaseModel):
    """Settings for one monoseq invocation.

    Attributes:
        root: Repository root; the git working tree.
        packages_dir: Directory below root holding one directory per package.
        registry_url: Base URL of the npm registry.
        registry_timeout: Seconds before a registry fetch fails.
        env: Environment passed to every git and npm subprocess; None
             inherits the current process environment.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    root: Path
    packages_dir: str = Field(default="packages", alias="packages-dir")
    registry_url: str = Field(default=DEFAULT_REGISTRY, alias="registry")
    registry_timeout: float = Field(default=1.0, alias="registry-timeout")
    env: dict[str, str] | None = None

    @property
    def packages_path(self) -> Path:
        return self.root / self.packages_dir

    def package_path(self, package_dir: str) -> Path:
        return self.packages_path / package_dir

    def manifest_path(self, package_dir: str) -> Path:
        return self.package_path(package_dir) / "package.json"

    def manifest_relpath(self, package_dir: str) -> str:
        """Manifest path relative to root, as git reports it."""
        return f"{Path(self.packages_dir).as_posix()}/{package_dir}/package.json"


def load_config(root: Path, env: Mapping[str, str] | None = None) -> Config:
    """Build the Config for a repository root.

    Reads monoseq.toml from ``root`` when present. ``env`` defaults to a copy
    of the current process environment.

    Raises:
        ConfigurationError: If monoseq.toml holds invalid values.
    """
    settings: dict = {}
    path = root / CONFIG_FILE
    if path.exists():
        settings = get_settings(load_toml(path))

    known = {"packages-dir", "registry", "registry-timeout"}
    try:
        return Config(
            root=root.resolve(),
            env=dict(os.environ if env is None else env),
            **{k: v for k, v in settings.items() if k in known},
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {CONFIG_FILE}: {exc}") from exc
