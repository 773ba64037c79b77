"""Shell, git and npm utilities.

Provides simple wrappers around subprocess calls for running git and npm
inside a package directory, plus output formatting helpers.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path

from .errors import CommandError

gitlog = logging.getLogger("monoseq.git")
npmlog = logging.getLogger("monoseq.npm")

RULE = "-" * 79


def git(cwd: Path, *args: str, env: Mapping[str, str] | None = None) -> str:
    """Run a git command in ``cwd`` and return its stripped stdout.

    Args:
        cwd: Working directory for the command.
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        env: Environment for the child process. Inherits when None.

    Raises:
        CommandError: If git exits non-zero.
    """
    cmd = ["git", *args]
    gitlog.debug("executing '%s' in %s", " ".join(cmd), cwd)
    result = subprocess.run(
        cmd,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stdout + result.stderr)
    return result.stdout.strip()


def npm(cwd: Path, *args: str, env: Mapping[str, str] | None = None) -> None:
    """Run an npm command in ``cwd``.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see install and test progress.

    Raises:
        CommandError: If npm exits non-zero.
    """
    cmd = ["npm", *args]
    npmlog.debug("executing '%s' in %s", " ".join(cmd), cwd)
    result = subprocess.run(cmd, cwd=cwd, env=dict(env) if env is not None else None)
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode)


def step(msg: str, *, file=None) -> None:
    """Print a visually distinct banner.

    Used to separate packages and commands in terminal output.
    """
    print(f"\n{RULE}\n\n  {msg}\n\n{RULE}\n", file=file or sys.stdout)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors detected before any package work starts.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
