"""CLI entry point for monoseq."""

from __future__ import annotations

import logging
import os
import sys
import time
import traceback
from pathlib import Path

import click

from monoseq.commands import COMMANDS, run_on_packages
from monoseq.config import load_config
from monoseq.shell import fatal, step


def _configure_logging(verbose: bool) -> None:
    """Enable git/npm/registry command tracing on stderr."""
    if verbose or os.environ.get("MONOSEQ_DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(message)s", stream=sys.stderr
        )
        logging.getLogger("monoseq").setLevel(logging.DEBUG)


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.version_option(package_name="monoseq")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository root containing the packages directory.",
)
@click.option("-v", "--verbose", is_flag=True, help="Trace git and npm commands.")
@click.argument("command", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli(root: Path, verbose: bool, command: str | None, args: tuple[str, ...]) -> None:
    """Run COMMAND on every package of the monorepo in dependency order.

    \b
    Commands:
      bootstrap      install dependencies and link sibling packages
      reset          remove node_modules
      testRelease    show what a release would do
      release        bump, test and commit the next release
      publish        tag and publish released versions
      run <task>     run an npm script where declared
      npm <args...>  run npm with sibling dependencies hidden
    """
    if not command:
        fatal("Missing task")
    if command not in COMMANDS:
        raise click.UsageError(
            f"Unknown task '{command}'. Choose from: {', '.join(COMMANDS)}"
        )
    if command == "run" and len(args) != 1:
        raise click.UsageError("run takes exactly one script name")

    _configure_logging(verbose)
    start = time.monotonic()
    try:
        config = load_config(root)
        run_on_packages(config, command, args)
    except Exception as exc:
        elapsed = time.monotonic() - start
        step(f"Failed command: {command} ({elapsed:.3f}s)\n    {exc}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    elapsed = time.monotonic() - start
    step(f"Successful command: {command} ({elapsed:.3f}s)")
