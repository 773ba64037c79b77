"""TOML reading utilities.

Uses tomlkit so monoseq.toml is parsed by the same library that would be
used to edit it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Raises:
        ConfigurationError: If the file is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def get_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract monoseq settings as plain Python values.

    Settings live at the top level of monoseq.toml, or under [tool.monoseq]
    when the file is shared with other tools.
    """
    data = doc.unwrap()
    tool = data.get("tool", {})
    if "monoseq" in tool:
        return dict(tool["monoseq"])
    return {k: v for k, v in data.items() if k != "tool"}
